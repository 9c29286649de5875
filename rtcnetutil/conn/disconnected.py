"""A connection that replies to whoever sent the last packet."""

from __future__ import annotations

from typing import Optional, Tuple

from .base import Address, Conn


class DisconnectedPacketConn(Conn):
    """Wraps a connectionless conn; :meth:`send` goes to the last :meth:`recv` sender."""

    def __init__(self, conn: Conn) -> None:
        self._pconn = conn
        self._raddr: Address = ("0.0.0.0", 0)

    async def connect(self, addr: Address) -> None:
        await self._pconn.connect(addr)

    async def recv(self, size: int) -> bytes:
        data, addr = await self._pconn.recv_from(size)
        self._raddr = addr
        return data

    async def recv_from(self, size: int) -> Tuple[bytes, Address]:
        return await self._pconn.recv_from(size)

    async def send(self, data: bytes) -> int:
        return await self._pconn.send_to(data, self._raddr)

    async def send_to(self, data: bytes, target: Address) -> int:
        return await self._pconn.send_to(data, target)

    async def local_addr(self) -> Address:
        return await self._pconn.local_addr()

    async def remote_addr(self) -> Optional[Address]:
        return self._raddr

    async def close(self) -> None:
        await self._pconn.close()