"""Error types shared across the package."""

from __future__ import annotations

import abc
from enum import Enum
from typing import Any, Optional, Type, TypeVar

_E = TypeVar("_E", bound=BaseException)


class _TemplatedEnum(Enum):
    """Enum whose members carry a message template."""

    def __new__(cls, template: str) -> "_TemplatedEnum":
        obj = object.__new__(cls)
        obj._value_ = len(cls.__members__) + 1
        obj.template = template
        return obj

    @property
    def takes_detail(self) -> bool:
        return "{}" in self.template


class ErrorKind(_TemplatedEnum):
    """Every kind of failure a :class:`UtilError` can describe."""

    BUFFER_FULL = "buffer: full"
    BUFFER_CLOSED = "buffer: closed"
    BUFFER_SHORT = "buffer: short"
    PACKET_TOO_BIG = "packet too big"
    TIMEOUT = "i/o timeout"
    CLOSED_LISTENER = "udp: listener closed"
    LISTEN_QUEUE_EXCEEDED = "udp: listen queue exceeded"
    CLOSED_LISTENER_ACCEPT_CH = "udp: listener accept ch closed"
    OBS_CANNOT_BE_NIL = "obs cannot be nil"
    USE_CLOSED_NETWORK_CONN = "se of closed network connection"
    ADDR_NOT_UDP_ADDR = "addr is not a net.UDPAddr"
    LOC_ADDR = "something went wrong with locAddr"
    ALREADY_CLOSED = "already closed"
    NO_REM_ADDR = "no remAddr defined"
    ADDRESS_ALREADY_IN_USE = "address already in use"
    NO_SUCH_UDP_CONN = "no such UDPConn"
    CANNOT_REMOVE_UNSPECIFIED_IP = "cannot remove unspecified IP by the specified IP"
    NO_ADDRESS_ASSIGNED = "no address assigned"
    NAT_REQUIRES_MAPPING = "1:1 NAT requires more than one mapping"
    MISMATCH_LENGTH_IP = "length mismtach between mappedIPs and localIPs"
    NON_UDP_TRANSLATION_NOT_SUPPORTED = "non-udp translation is not supported yet"
    NO_ASSOCIATED_LOCAL_ADDRESS = "no associated local address"
    NO_NAT_BINDING_FOUND = "no NAT binding found"
    HAS_NO_PERMISSION = "has no permission"
    HOSTNAME_EMPTY = "host name must not be empty"
    FAILED_TO_PARSE_IPADDR = "failed to parse IP address"
    NO_INTERFACE = "no interface is available"
    NOT_FOUND = "not found"
    UNEXPECTED_NETWORK = "unexpected network"
    CANT_ASSIGN_REQUESTED_ADDR = "can't assign requested address"
    UNKNOWN_NETWORK = "unknown network"
    NO_ROUTER_LINKED = "no router linked"
    INVALID_PORT_NUMBER = "invalid port number"
    UNEXPECTED_TYPE_SWITCH_FAILURE = "unexpected type-switch failure"
    BIND_FAILED = "bind failed"
    END_PORT_LESS_THAN_START = "end port is less than the start"
    PORT_SPACE_EXHAUSTED = "port space exhausted"
    VNET_DISABLED = "vnet is not enabled"
    INVALID_LOCAL_IP_IN_STATIC_IPS = "invalid local IP in static_ips"
    LOCAL_IP_BEYOND_STATIC_IPS_SUBSET = "mapped in static_ips is beyond subnet"
    LOCAL_IP_NO_STATICS_IPS_ASSOCIATED = "all static_ips must have associated local IPs"
    ROUTER_ALREADY_STARTED = "router already started"
    ROUTER_ALREADY_STOPPED = "router already stopped"
    STATIC_IP_IS_BEYOND_SUBNET = "static IP is beyond subnet"
    ADDRESS_SPACE_EXHAUSTED = "address space exhausted"
    NO_IPADDR_ETH0 = "no IP address is assigned for eth0"
    INVALID_MASK = "Invalid mask"
    PARSE_IPNET = "parse ipnet: {}"
    PARSE_IP = "parse ip: {}"
    PARSE_INT = "parse int: {}"
    IO = "io error: {}"
    UTF8 = "utf8: {}"
    STD = "{}"
    OTHER = "{}"


class UtilError(Exception):
    """The package's error: a kind plus an optional detail."""

    def __init__(self, kind: ErrorKind, detail: Any = None) -> None:
        if kind.takes_detail and detail is None:
            raise ValueError(f"{kind.name} requires a detail")
        self.kind = kind
        self.detail = detail
        message = kind.template.format(detail) if kind.takes_detail else kind.template
        super().__init__(message)
        if isinstance(detail, BaseException):
            self.__cause__ = detail

    @classmethod
    def from_std(cls, error: BaseException) -> "UtilError":
        """Wrap a foreign exception, keeping it reachable through :meth:`downcast`."""
        return cls(ErrorKind.STD, error)

    def downcast(self, error_type: Type[_E]) -> Optional[_E]:
        """Return the wrapped foreign exception if it is of ``error_type``."""
        if self.kind is ErrorKind.STD and isinstance(self.detail, error_type):
            return self.detail
        return None

    def _detail_key(self) -> Any:
        detail = self.detail
        if self.kind is ErrorKind.IO and isinstance(detail, OSError):
            return (type(detail), detail.errno)
        return None if detail is None else str(detail)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UtilError):
            return NotImplemented
        if self.kind is ErrorKind.STD or other.kind is ErrorKind.STD:
            return False
        return self.kind is other.kind and self._detail_key() == other._detail_key()

    def __hash__(self) -> int:
        return hash(self.kind)

    def __repr__(self) -> str:
        if self.detail is None:
            return f"UtilError({self.kind.name})"
        return f"UtilError({self.kind.name}, {self.detail!r})"


class KeyingMaterialExporterErrorKind(_TemplatedEnum):
    """Ways exporting keying material can fail."""

    HANDSHAKE_IN_PROGRESS = "tls handshake is in progress"
    CONTEXT_UNSUPPORTED = "context is not supported for export_keying_material"
    RESERVED_EXPORT_KEYING_MATERIAL = (
        "export_keying_material can not be used with a reserved label"
    )
    CIPHER_SUITE_UNSET = "no cipher suite for export_keying_material"
    IO = "export_keying_material io: {}"
    HASH = "export_keying_material hash: {}"


class KeyingMaterialExporterError(Exception):
    """Raised when keying material cannot be exported."""

    def __init__(self, kind: KeyingMaterialExporterErrorKind, detail: Any = None) -> None:
        if kind.takes_detail and detail is None:
            raise ValueError(f"{kind.name} requires a detail")
        self.kind = kind
        self.detail = detail
        message = kind.template.format(detail) if kind.takes_detail else kind.template
        super().__init__(message)
        if isinstance(detail, BaseException):
            self.__cause__ = detail

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyingMaterialExporterError):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if isinstance(self.detail, OSError) and isinstance(other.detail, OSError):
            return (type(self.detail), self.detail.errno) == (
                type(other.detail),
                other.detail.errno,
            )
        return str(self.detail) == str(other.detail)

    def __hash__(self) -> int:
        return hash(self.kind)


class KeyingMaterialExporter(abc.ABC):
    """Something that can extract keying material from an established session."""

    @abc.abstractmethod
    async def export_keying_material(self, label: str, context: bytes, length: int) -> bytes:
        """Return ``length`` bytes of keying material for ``label`` and ``context``."""