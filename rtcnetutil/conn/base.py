"""Abstract packet connections and listeners, and host lookup."""

from __future__ import annotations

import abc
import asyncio
import errno
import socket
from typing import Optional, Tuple, Union

from ..errors import ErrorKind, UtilError

Address = Tuple[str, int]
HostSpec = Union[str, Tuple[str, int]]


class Conn(abc.ABC):
    """A datagram connection; addresses are ``(host, port)`` tuples."""

    @abc.abstractmethod
    async def connect(self, addr: Address) -> None:
        """Fix the default peer for :meth:`send`."""

    @abc.abstractmethod
    async def recv(self, size: int) -> bytes:
        """Receive one packet of at most ``size`` bytes."""

    @abc.abstractmethod
    async def recv_from(self, size: int) -> Tuple[bytes, Address]:
        """Receive one packet of at most ``size`` bytes and the sender's address."""

    @abc.abstractmethod
    async def send(self, data: bytes) -> int:
        """Send ``data`` to the default peer and return the number of bytes sent."""

    @abc.abstractmethod
    async def send_to(self, data: bytes, target: Address) -> int:
        """Send ``data`` to ``target`` and return the number of bytes sent."""

    @abc.abstractmethod
    async def local_addr(self) -> Address:
        """Return the local address."""

    @abc.abstractmethod
    async def remote_addr(self) -> Optional[Address]:
        """Return the peer's address, if there is one."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Close the connection."""


class Listener(abc.ABC):
    """A listener for connection-oriented protocols built on datagrams."""

    @abc.abstractmethod
    async def accept(self) -> Tuple[Conn, Address]:
        """Wait for and return the next connection and its remote address."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Close the listener, failing every pending :meth:`accept`."""

    @abc.abstractmethod
    async def addr(self) -> Address:
        """Return the listener's local address."""


def _split_host(host: HostSpec) -> Address:
    if isinstance(host, tuple):
        name, port = host
        return name, int(port)
    name, sep, port_text = host.rpartition(":")
    if not sep or not port_text.isdigit():
        raise UtilError(
            ErrorKind.IO, OSError(errno.EINVAL, "invalid socket address")
        )
    if name.startswith("[") and name.endswith("]"):
        name = name[1:-1]
    return name, int(port_text)


async def lookup_host(use_ipv4: bool, host: HostSpec) -> Address:
    """Resolve ``host`` (``"name:port"`` or a tuple) to the first address of the wanted family."""
    name, port = _split_host(host)
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(name, port, type=socket.SOCK_DGRAM)
    except OSError as exc:
        raise UtilError(ErrorKind.IO, exc) from exc

    wanted = socket.AF_INET if use_ipv4 else socket.AF_INET6
    for family, _type, _proto, _canon, sockaddr in infos:
        if family == wanted:
            return sockaddr[0], sockaddr[1]

    label = "ipv4" if use_ipv4 else "ipv6"
    raise UtilError(ErrorKind.IO, OSError(f"No available {label} IP address found!"))