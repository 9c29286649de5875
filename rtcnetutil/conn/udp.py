"""A :class:`Conn` over a real UDP socket."""

from __future__ import annotations

import asyncio
import errno
import socket
from typing import Optional, Tuple

from ..errors import ErrorKind, UtilError
from .base import Address, Conn


def _io_error(exc: OSError) -> UtilError:
    return UtilError(ErrorKind.IO, exc)


class UdpSocketConn(Conn):
    """A non-blocking UDP socket driven by the running event loop."""

    def __init__(self, sock: socket.socket) -> None:
        sock.setblocking(False)
        self._sock = sock
        self._recv_lock = asyncio.Lock()
        self._send_lock = asyncio.Lock()

    @classmethod
    async def bind(cls, addr: Address) -> "UdpSocketConn":
        """Open a UDP socket bound to ``addr``."""
        host, port = addr
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(
                host, port, type=socket.SOCK_DGRAM, flags=socket.AI_PASSIVE
            )
        except OSError as exc:
            raise _io_error(exc) from exc
        if not infos:
            raise UtilError(ErrorKind.NO_ADDRESS_ASSIGNED)
        family, sock_type, proto, _canon, sockaddr = infos[0]
        sock = socket.socket(family, sock_type, proto)
        try:
            sock.bind(sockaddr)
        except OSError as exc:
            sock.close()
            raise _io_error(exc) from exc
        return cls(sock)

    async def _wait(self, writable: bool) -> None:
        fd = self._sock.fileno()
        if fd < 0:
            raise _io_error(OSError(errno.EBADF, "socket is closed"))
        loop = asyncio.get_running_loop()
        ready = loop.create_future()

        def wake() -> None:
            if not ready.done():
                ready.set_result(None)

        if writable:
            loop.add_writer(fd, wake)
        else:
            loop.add_reader(fd, wake)
        try:
            await ready
        finally:
            if writable:
                loop.remove_writer(fd)
            else:
                loop.remove_reader(fd)

    async def _recvfrom(self, size: int) -> Tuple[bytes, Address]:
        async with self._recv_lock:
            while True:
                try:
                    data, addr = self._sock.recvfrom(size)
                    return data, (addr[0], addr[1])
                except BlockingIOError:
                    await self._wait(False)
                except OSError as exc:
                    raise _io_error(exc) from exc

    async def _send(self, data: bytes, target: Optional[Address]) -> int:
        async with self._send_lock:
            while True:
                try:
                    if target is None:
                        return self._sock.send(data)
                    return self._sock.sendto(data, target)
                except BlockingIOError:
                    await self._wait(True)
                except OSError as exc:
                    raise _io_error(exc) from exc

    async def connect(self, addr: Address) -> None:
        try:
            self._sock.connect(addr)
        except OSError as exc:
            raise _io_error(exc) from exc

    async def recv(self, size: int) -> bytes:
        data, _ = await self._recvfrom(size)
        return data

    async def recv_from(self, size: int) -> Tuple[bytes, Address]:
        return await self._recvfrom(size)

    async def send(self, data: bytes) -> int:
        return await self._send(data, None)

    async def send_to(self, data: bytes, target: Address) -> int:
        return await self._send(data, target)

    async def local_addr(self) -> Address:
        try:
            name = self._sock.getsockname()
        except OSError as exc:
            raise _io_error(exc) from exc
        return name[0], name[1]

    async def remote_addr(self) -> Optional[Address]:
        return None

    async def close(self) -> None:
        self._sock.close()