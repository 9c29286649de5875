"""A connection-oriented listener over a single UDP socket."""

from __future__ import annotations

import asyncio
import errno
import logging
import socket
import sys
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple, Union

from ..buffer import Buffer
from ..errors import ErrorKind, UtilError
from .base import Address, Conn, Listener
from .udp import UdpSocketConn

RECEIVE_MTU = 8192
DEFAULT_LISTEN_BACKLOG = 128
_RECEIVE_BUFFER_SIZE = 20 * 1024 * 1024

AcceptFilter = Callable[[bytes], Awaitable[bool]]
AddrSpec = Union[str, Tuple[str, int]]

_log = logging.getLogger(__name__)


def _parse_addr(laddr: AddrSpec) -> Address:
    if isinstance(laddr, tuple):
        host, port = laddr
        return host, int(port)
    host, sep, port_text = laddr.rpartition(":")
    if not sep or not port_text.isdigit():
        raise UtilError(ErrorKind.IO, OSError(errno.EINVAL, "invalid socket address"))
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port_text)


async def _bind_socket(addr: Address) -> socket.socket:
    host, port = addr
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(
            host, port, type=socket.SOCK_DGRAM, flags=socket.AI_PASSIVE
        )
    except OSError as exc:
        raise UtilError(ErrorKind.IO, exc) from exc
    if not infos:
        raise UtilError(ErrorKind.NO_ADDRESS_ASSIGNED)
    family, sock_type, proto, _canon, sockaddr = infos[0]
    sock = socket.socket(family, sock_type, proto)
    try:
        sock.bind(sockaddr)
        if sys.platform.startswith("linux"):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, _RECEIVE_BUFFER_SIZE)
    except OSError as exc:
        sock.close()
        raise UtilError(ErrorKind.IO, exc) from exc
    return sock


class ListenerConn(Conn):
    """A connection to one remote peer, demultiplexed from the listener's socket."""

    def __init__(self, listener: "UdpListener", raddr: Address) -> None:
        self._listener = listener
        self._raddr = raddr
        self._buffer = Buffer(0, 0)

    async def connect(self, addr: Address) -> None:
        await self._listener._pconn.connect(addr)

    async def recv(self, size: int) -> bytes:
        return await self._buffer.read(size)

    async def recv_from(self, size: int) -> Tuple[bytes, Address]:
        return await self._buffer.read(size), self._raddr

    async def send(self, data: bytes) -> int:
        return await self._listener._pconn.send_to(data, self._raddr)

    async def send_to(self, data: bytes, target: Address) -> int:
        return await self._listener._pconn.send_to(data, target)

    async def local_addr(self) -> Address:
        return await self._listener._pconn.local_addr()

    async def remote_addr(self) -> Optional[Address]:
        return self._raddr

    async def close(self) -> None:
        await self._listener._forget(self)


class UdpListener(Listener):
    """Hands out one :class:`ListenerConn` per remote address that sends to the socket."""

    def __init__(
        self, pconn: Conn, backlog: int, accept_filter: Optional[AcceptFilter]
    ) -> None:
        self._pconn = pconn
        self._accepting = True
        self._accept_queue: "asyncio.Queue[ListenerConn]" = asyncio.Queue(backlog)
        self._done = asyncio.Event()
        self._conns: Dict[Address, ListenerConn] = {}
        self._filter = accept_filter
        self._pconn_closed = False
        self._reader: Optional["asyncio.Task[None]"] = None

    def _start(self) -> None:
        self._reader = asyncio.get_running_loop().create_task(self._read_loop())

    async def _read_loop(self) -> None:
        while True:
            try:
                data, raddr = await self._pconn.recv_from(RECEIVE_MTU)
            except UtilError as exc:
                _log.warning("listener socket recv_from error: %s", exc)
                return
            try:
                conn = await self._conn_for(raddr, data)
            except UtilError:
                continue
            if conn is not None:
                try:
                    await conn._buffer.write(data)
                except UtilError:
                    pass

    async def _conn_for(self, raddr: Address, data: bytes) -> Optional[ListenerConn]:
        existing = self._conns.get(raddr)
        if existing is not None:
            return existing
        if not self._accepting:
            raise UtilError(ErrorKind.CLOSED_LISTENER)
        if self._filter is not None and not await self._filter(data):
            return None

        conn = ListenerConn(self, raddr)
        try:
            self._accept_queue.put_nowait(conn)
        except asyncio.QueueFull:
            raise UtilError(ErrorKind.LISTEN_QUEUE_EXCEEDED) from None
        self._conns[raddr] = conn
        return conn

    async def _forget(self, conn: ListenerConn) -> None:
        self._conns.pop(conn._raddr, None)
        await conn._buffer.close()
        await self._release()

    async def _release(self) -> None:
        if not self._accepting and not self._conns and not self._pconn_closed:
            self._pconn_closed = True
            await self._pconn.close()

    async def accept(self) -> Tuple[Conn, Address]:
        """Wait for the next new remote peer; raises ``CLOSED_LISTENER`` once closed."""
        if self._done.is_set():
            raise UtilError(ErrorKind.CLOSED_LISTENER)
        if not self._accept_queue.empty():
            conn = self._accept_queue.get_nowait()
            return conn, conn._raddr

        get_task = asyncio.ensure_future(self._accept_queue.get())
        done_task = asyncio.ensure_future(self._done.wait())
        try:
            await asyncio.wait({get_task, done_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (get_task, done_task):
                if not task.done():
                    task.cancel()
        if get_task.done() and not get_task.cancelled():
            conn = get_task.result()
            return conn, conn._raddr
        raise UtilError(ErrorKind.CLOSED_LISTENER)

    async def close(self) -> None:
        """Stop accepting; pending and future :meth:`accept` calls fail.

        Connections never accepted are discarded; the socket is closed once
        every accepted connection has been closed as well.
        """
        if not self._accepting:
            return
        self._accepting = False
        self._done.set()
        if self._reader is not None:
            self._reader.cancel()
            await asyncio.wait({self._reader})
        while not self._accept_queue.empty():
            pending = self._accept_queue.get_nowait()
            self._conns.pop(pending._raddr, None)
            await pending._buffer.close()
        await self._release()

    async def addr(self) -> Address:
        return await self._pconn.local_addr()


@dataclass
class ListenConfig:
    """Options for :meth:`listen`.

    ``backlog`` bounds the connections waiting to be accepted (zero means
    128); packets from new peers beyond it are dropped. ``accept_filter``
    decides from a new peer's first packet whether to create a connection.
    """

    backlog: int = 0
    accept_filter: Optional[AcceptFilter] = None

    async def listen(self, laddr: AddrSpec) -> UdpListener:
        """Bind ``laddr`` (``"host:port"`` or a tuple) and start listening."""
        backlog = self.backlog or DEFAULT_LISTEN_BACKLOG
        sock = await _bind_socket(_parse_addr(laddr))
        listener = UdpListener(UdpSocketConn(sock), backlog, self.accept_filter)
        listener._start()
        return listener


async def listen(laddr: AddrSpec) -> UdpListener:
    """Listen on ``laddr`` with the default :class:`ListenConfig`."""
    return await ListenConfig().listen(laddr)