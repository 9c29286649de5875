import io
import struct

import pytest

from rtcnetutil.errors import ErrorKind, UtilError
from rtcnetutil.marshal import Chain, Marshal, Take, Unmarshal, exact_len, is_empty


class _Port(Marshal, Unmarshal):
    def __init__(self, port):
        self.port = port

    def marshal_size(self):
        return 2

    def marshal_to(self, buf):
        struct.pack_into("!H", buf, 0, self.port)
        return 2

    @classmethod
    def unmarshal(cls, buf):
        raw = buf.read(2)
        if len(raw) < 2:
            raise UtilError(ErrorKind.BUFFER_SHORT)
        return cls(struct.unpack("!H", raw)[0])


class _Short(Marshal):
    def marshal_size(self):
        return 2

    def marshal_to(self, buf):
        buf[0] = 1
        return 1


def test_marshal_round_trip():
    wire = Marshal.marshal(_Port(4660))
    assert wire == b"\x12\x34"
    assert exact_len(wire) == 2
    assert _Port.unmarshal(io.BytesIO(wire)).port == 4660


def test_unmarshal_consumes_stream():
    stream = io.BytesIO(Marshal.marshal(_Port(1)) + Marshal.marshal(_Port(2)))
    assert [_Port.unmarshal(stream).port for _ in range(2)] == [1, 2]
    with pytest.raises(UtilError) as info:
        _Port.unmarshal(stream)
    assert info.value == UtilError(ErrorKind.BUFFER_SHORT)


def test_marshal_size_mismatch():
    with pytest.raises(UtilError) as info:
        Marshal.marshal(_Short())
    assert info.value.kind is ErrorKind.OTHER
    assert str(info.value) == "marshal_to output size 1, but expect 2"
    assert info.value == UtilError(ErrorKind.OTHER, "marshal_to output size 1, but expect 2")


def test_abstract_classes_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Marshal()


def test_exact_len_plain_buffers():
    assert exact_len(b"abc") == 3
    assert exact_len(bytearray(5)) == 5
    assert exact_len(memoryview(b"abcd").cast("H")) == 4
    assert is_empty(b"")
    assert not is_empty(b"x")


def test_chain():
    chain = Chain(b"ab", b"cde")
    assert exact_len(chain) == len(b"ab") + len(b"cde")
    assert bytes(chain) == b"abcde"
    assert not is_empty(chain)
    assert is_empty(Chain(b"", bytearray()))
    assert not is_empty(Chain(b"", b"z"))


def test_take():
    take = Take(b"abcdef", 3)
    assert exact_len(take) == 3
    assert bytes(take) == b"abc"
    assert exact_len(Take(b"ab", 10)) == 2
    assert is_empty(Take(b"abc", 0))
    assert is_empty(Take(b"", 4))
    assert not is_empty(Take(b"a", 1))


def test_nested_views():
    view = Take(Chain(b"abc", b"def"), 4)
    assert bytes(view) == b"abcd"
    assert exact_len(view) == len(bytes(view))


def test_take_rejects_negative_limit():
    with pytest.raises(ValueError):
        Take(b"abc", -1)