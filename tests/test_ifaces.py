import socket
from collections import namedtuple
from unittest import mock

import psutil
import pytest

from rtcnetutil.errors import ErrorKind, UtilError
from rtcnetutil.ifaces import (
    HopKind,
    Interface,
    Kind,
    NextHop,
    build_interfaces,
    ifaces,
)

Addr = namedtuple("Addr", "family address netmask broadcast ptp")
Stats = namedtuple("Stats", "isup duplex speed mtu flags")


def test_ipv4_with_broadcast():
    addrs = {"eth0": [Addr(socket.AF_INET, "192.0.2.1", "255.255.255.0", "192.0.2.255", None)]}
    stats = {"eth0": Stats(True, 0, 0, 1500, "up,broadcast,running")}
    result = build_interfaces(addrs, stats)
    assert result == [
        Interface(
            name="eth0",
            kind=Kind.IPV4,
            addr=("192.0.2.1", 0),
            mask=("255.255.255.0", 0),
            hop=NextHop(HopKind.BROADCAST, ("192.0.2.255", 0)),
        )
    ]


def test_point_to_point_gives_destination():
    addrs = {"tun0": [Addr(socket.AF_INET, "10.8.0.2", "255.255.255.255", None, "10.8.0.1")]}
    stats = {"tun0": Stats(True, 0, 0, 1500, "up,pointopoint,running")}
    (entry,) = build_interfaces(addrs, stats)
    assert entry.hop == NextHop(HopKind.DESTINATION, ("10.8.0.1", 0))


def test_without_flags_uses_present_fields():
    addrs = {
        "a": [Addr(socket.AF_INET, "192.0.2.1", None, "192.0.2.255", None)],
        "b": [Addr(socket.AF_INET, "10.8.0.2", None, None, "10.8.0.1")],
        "c": [Addr(socket.AF_INET, "127.0.0.1", "255.0.0.0", None, None)],
    }
    result = build_interfaces(addrs)
    assert [i.hop.kind if i.hop else None for i in result] == [
        HopKind.BROADCAST,
        HopKind.DESTINATION,
        None,
    ]
    assert result[0].mask is None


def test_ipv6_entry():
    addrs = {"lo": [Addr(socket.AF_INET6, "::1", "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff", None, None)]}
    (entry,) = build_interfaces(addrs, {})
    assert entry.kind is Kind.IPV6
    assert entry.addr == ("::1", 0)
    assert entry.hop is None


def test_link_entry_has_no_addresses():
    family = getattr(socket, "AF_PACKET", psutil.AF_LINK)
    addrs = {"eth0": [Addr(family, "00:00:5e:00:53:01", None, "ff:ff:ff:ff:ff:ff", None)]}
    (entry,) = build_interfaces(addrs, {})
    assert entry.kind in (Kind.PACKET, Kind.LINK)
    assert (entry.addr, entry.mask, entry.hop) == (None, None, None)


def test_unknown_family_and_missing_address_are_skipped():
    addrs = {
        "x": [
            Addr(9999, "whatever", None, None, None),
            Addr(socket.AF_INET, None, None, None, None),
            Addr(socket.AF_INET, "192.0.2.7", None, None, None),
        ]
    }
    result = build_interfaces(addrs)
    assert [i.addr for i in result] == [("192.0.2.7", 0)]


def test_order_follows_input():
    addrs = {
        "first": [Addr(socket.AF_INET, "192.0.2.1", None, None, None)],
        "second": [
            Addr(socket.AF_INET, "192.0.2.2", None, None, None),
            Addr(socket.AF_INET6, "2001:db8::2", None, None, None),
        ],
    }
    result = build_interfaces(addrs)
    assert [(i.name, i.kind) for i in result] == [
        ("first", Kind.IPV4),
        ("second", Kind.IPV4),
        ("second", Kind.IPV6),
    ]


def test_ifaces_on_this_host_is_consistent():
    result = ifaces()
    for entry in result:
        assert isinstance(entry.kind, Kind)
        if entry.kind in (Kind.PACKET, Kind.LINK):
            assert entry.addr is None
        else:
            assert entry.addr is not None and entry.addr[1] == 0


def test_ifaces_wraps_os_errors():
    with mock.patch("psutil.net_if_addrs", side_effect=OSError(5, "boom")):
        with pytest.raises(UtilError) as info:
            ifaces()
    assert info.value.kind is ErrorKind.IO


def test_ifaces_uses_psutil_data():
    data = {"eth9": [Addr(socket.AF_INET, "192.0.2.9", None, None, None)]}
    with mock.patch("psutil.net_if_addrs", return_value=data), mock.patch(
        "psutil.net_if_stats", return_value={}
    ):
        result = ifaces()
    assert result == [Interface("eth9", Kind.IPV4, ("192.0.2.9", 0))]