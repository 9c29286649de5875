"""Enumerate the local system's network interface addresses."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Set, Tuple

import psutil

from .errors import ErrorKind, UtilError

Address = Tuple[str, int]

_AF_PACKET = getattr(socket, "AF_PACKET", None)


class Kind(Enum):
    """Address family of an interface entry."""

    PACKET = "packet"
    LINK = "link"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


class HopKind(Enum):
    """How the far end of an interface is reached."""

    BROADCAST = "broadcast"
    DESTINATION = "destination"


@dataclass(frozen=True)
class NextHop:
    """The broadcast address, or the peer of a point-to-point link."""

    kind: HopKind
    addr: Address


@dataclass(frozen=True)
class Interface:
    """One address of one network interface."""

    name: str
    kind: Kind
    addr: Optional[Address] = None
    mask: Optional[Address] = None
    hop: Optional[NextHop] = None


def _kind_of(family: Any) -> Optional[Kind]:
    if family == socket.AF_INET:
        return Kind.IPV4
    if family == socket.AF_INET6:
        return Kind.IPV6
    if _AF_PACKET is not None and family == _AF_PACKET:
        return Kind.PACKET
    if family == psutil.AF_LINK:
        return Kind.LINK
    return None


def _sockaddr(host: Optional[str]) -> Optional[Address]:
    return None if not host else (host, 0)


def _flags(stats: Any) -> Optional[Set[str]]:
    if stats is None:
        return None
    raw = getattr(stats, "flags", None)
    if not raw:
        return None
    return {flag.strip() for flag in raw.split(",") if flag.strip()}


def _next_hop(entry: Any, flags: Optional[Set[str]]) -> Optional[NextHop]:
    broadcast = getattr(entry, "broadcast", None)
    ptp = getattr(entry, "ptp", None)
    if flags is not None:
        use_broadcast = "broadcast" in flags
    else:
        use_broadcast = bool(broadcast)
    if use_broadcast:
        addr = _sockaddr(broadcast)
        return None if addr is None else NextHop(HopKind.BROADCAST, addr)
    addr = _sockaddr(ptp)
    return None if addr is None else NextHop(HopKind.DESTINATION, addr)


def build_interfaces(
    addrs_by_name: Mapping[str, Iterable[Any]],
    stats_by_name: Optional[Mapping[str, Any]] = None,
) -> List[Interface]:
    """Turn per-interface address records into :class:`Interface` entries.

    Records carry ``family``, ``address``, ``netmask``, ``broadcast`` and
    ``ptp``; stats may carry comma-separated ``flags``. Entries of unknown
    family or without an address are skipped. Only IP entries get addresses,
    masks and next hops.
    """
    stats_by_name = stats_by_name or {}
    result: List[Interface] = []
    for name, entries in addrs_by_name.items():
        flags = _flags(stats_by_name.get(name))
        for entry in entries:
            if entry.address is None:
                continue
            kind = _kind_of(entry.family)
            if kind is None:
                continue
            if kind in (Kind.IPV4, Kind.IPV6):
                result.append(
                    Interface(
                        name=name,
                        kind=kind,
                        addr=_sockaddr(entry.address),
                        mask=_sockaddr(entry.netmask),
                        hop=_next_hop(entry, flags),
                    )
                )
            else:
                result.append(Interface(name=name, kind=kind))
    return result


def ifaces() -> List[Interface]:
    """Query the local system for all interface addresses."""
    try:
        addrs = psutil.net_if_addrs()
        try:
            stats = psutil.net_if_stats()
        except OSError:
            stats = {}
    except OSError as exc:
        raise UtilError(ErrorKind.IO, exc) from exc
    return build_interfaces(addrs, stats)