import pytest

from rtcnetutil.conn.base import Conn, Listener, lookup_host
from rtcnetutil.errors import ErrorKind, UtilError


@pytest.mark.asyncio
async def test_lookup_host_ipv4_from_string():
    addr = await lookup_host(True, "127.0.0.1:1234")
    assert addr == ("127.0.0.1", 1234)


@pytest.mark.asyncio
async def test_lookup_host_ipv4_from_tuple():
    addr = await lookup_host(True, ("127.0.0.1", 1234))
    assert addr == ("127.0.0.1", 1234)


@pytest.mark.asyncio
async def test_lookup_host_wrong_family_fails():
    with pytest.raises(UtilError) as info:
        await lookup_host(False, "127.0.0.1:1234")
    assert info.value.kind is ErrorKind.IO
    assert str(info.value) == "io error: No available ipv6 IP address found!"


@pytest.mark.asyncio
async def test_lookup_host_family_matches_request():
    addr = await lookup_host(True, "localhost:1234")
    assert addr[1] == 1234
    assert ":" not in addr[0]


@pytest.mark.asyncio
async def test_lookup_host_rejects_missing_port():
    with pytest.raises(UtilError) as info:
        await lookup_host(True, "127.0.0.1")
    assert info.value.kind is ErrorKind.IO


def test_conn_is_abstract():
    with pytest.raises(TypeError):
        Conn()


def test_listener_is_abstract():
    with pytest.raises(TypeError):
        Listener()