"""An in-memory pair of connected packet connections."""

from __future__ import annotations

import asyncio
import errno
from typing import Optional, Tuple

from ..errors import ErrorKind, UtilError
from .base import Address, Conn

_QUEUE_DEPTH = 16
_ANY_ADDR: Address = ("0.0.0.0", 0)


def _not_applicable() -> UtilError:
    return UtilError(ErrorKind.IO, OSError("Not applicable"))


class PipeConn(Conn):
    """One end of a :func:`pipe`; packets sent here arrive at the other end."""

    def __init__(self, incoming: "asyncio.Queue[bytes]", outgoing: "asyncio.Queue[bytes]") -> None:
        self._incoming = incoming
        self._outgoing = outgoing

    async def connect(self, addr: Address) -> None:
        raise _not_applicable()

    async def recv(self, size: int) -> bytes:
        packet = await self._incoming.get()
        return packet[:size]

    async def recv_from(self, size: int) -> Tuple[bytes, Address]:
        return await self.recv(size), _ANY_ADDR

    async def send(self, data: bytes) -> int:
        await self._outgoing.put(bytes(data))
        return len(data)

    async def send_to(self, data: bytes, target: Address) -> int:
        raise _not_applicable()

    async def local_addr(self) -> Address:
        raise UtilError(
            ErrorKind.IO, OSError(errno.EADDRNOTAVAIL, "Addr Not Available")
        )

    async def remote_addr(self) -> Optional[Address]:
        return None

    async def close(self) -> None:
        return None


def pipe() -> Tuple[PipeConn, PipeConn]:
    """Return two connections joined back to back."""
    first: "asyncio.Queue[bytes]" = asyncio.Queue(_QUEUE_DEPTH)
    second: "asyncio.Queue[bytes]" = asyncio.Queue(_QUEUE_DEPTH)
    return PipeConn(first, second), PipeConn(second, first)