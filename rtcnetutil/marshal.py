"""Interfaces for types with a binary wire form, and exact-length buffer views."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, BinaryIO, Union

from .errors import ErrorKind, UtilError

BytesLike = Union[bytes, bytearray, memoryview]


class MarshalSize(abc.ABC):
    """A value that knows how many bytes its wire form takes."""

    @abc.abstractmethod
    def marshal_size(self) -> int:
        """Return the length of the wire form in bytes."""


class Marshal(MarshalSize):
    """A value that can be written in wire form."""

    @abc.abstractmethod
    def marshal_to(self, buf: Union[bytearray, memoryview]) -> int:
        """Write the wire form into ``buf`` and return the number of bytes written."""

    def marshal(self) -> bytes:
        """Return the wire form, checking it fills exactly ``marshal_size`` bytes."""
        expected = self.marshal_size()
        buf = bytearray(expected)
        written = self.marshal_to(buf)
        if written != expected:
            raise UtilError(
                ErrorKind.OTHER,
                f"marshal_to output size {written}, but expect {expected}",
            )
        return bytes(buf)


class Unmarshal(MarshalSize):
    """A value that can be read back from wire form."""

    @classmethod
    @abc.abstractmethod
    def unmarshal(cls, buf: BinaryIO) -> Any:
        """Read one value from the binary stream ``buf``, consuming its bytes."""


@dataclass(frozen=True)
class Chain:
    """Two buffers viewed back to back."""

    first: Any
    last: Any

    def __len__(self) -> int:
        return exact_len(self.first) + exact_len(self.last)

    def __bytes__(self) -> bytes:
        return _to_bytes(self.first) + _to_bytes(self.last)


@dataclass(frozen=True)
class Take:
    """At most ``limit`` leading bytes of a buffer."""

    inner: Any
    limit: int

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("limit must not be negative")

    def __len__(self) -> int:
        return min(self.limit, exact_len(self.inner))

    def __bytes__(self) -> bytes:
        return _to_bytes(self.inner)[: self.limit]


def _to_bytes(buf: Any) -> bytes:
    return bytes(buf)


def exact_len(buf: Any) -> int:
    """Return the exact length of ``buf`` in bytes."""
    if isinstance(buf, memoryview):
        return buf.nbytes
    return len(buf)


def is_empty(buf: Any) -> bool:
    """Return True when ``buf`` holds no bytes."""
    if isinstance(buf, Chain):
        return is_empty(buf.first) and is_empty(buf.last)
    if isinstance(buf, Take):
        return buf.limit == 0 or is_empty(buf.inner)
    return exact_len(buf) == 0