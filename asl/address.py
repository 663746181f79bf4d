"""Network endpoint addresses (IPv4, IPv6 and local socket paths) and socket error codes."""

from __future__ import annotations

import re
import socket
import struct
from enum import IntEnum
from typing import Union

_SUN_PATH_MAX = 107
_PORT_RE = re.compile(r"\s*[+-]?\d+")

SockAddr = Union[tuple[str, int], tuple[str, int, int, int], str]


class SocketError(IntEnum):
    """Error codes recorded by sockets."""

    OK = 0
    BAD_INIT = 1
    BAD_DNS = 2
    BAD_CONNECT = 3
    BAD_LINE = 4
    BAD_RECV = 5
    BAD_DATA = 6
    BAD_WAIT = 7
    BAD_BIND = 8

    @property
    def message(self) -> str:
        """The text describing this error."""
        return "OK" if self is SocketError.OK else f"SOCKET_{self.name}"


class SocketException(Exception):
    """A socket operation failed."""

    def __init__(self, error: SocketError = SocketError.OK, message: str | None = None) -> None:
        self.error = error
        super().__init__(message or error.message)


class AddressType(IntEnum):
    """The kind of address held by an InetAddress."""

    ANY = 0
    IPv4 = 1
    IPv6 = 2
    LOCAL = 3


def parse_host_port(text: str) -> tuple[str, str]:
    """Split ``"host:port"`` or ``"[ipv6]:port"`` into host and port text (port may be empty).

    A colon at index 1 (a drive letter) does not separate a port.
    """
    host_start, host_end, port_start = 0, len(text), 0
    if text.startswith("["):
        host_start = 1
        host_end = text.rfind("]")
        if host_end < 0:
            return "", ""
        if text[host_end + 1:host_end + 2] == ":":
            port_start = host_end + 2
    else:
        colon = text.rfind(":")
        if colon > 1:
            host_end = colon
            port_start = colon + 1
    port = text[port_start:] if port_start > 0 else ""
    return text[host_start:host_end], port


def _parse_port(text: str) -> int:
    match = _PORT_RE.match(text)
    return int(match.group()) if match else 0


def _normalize(family: int, sockaddr: tuple) -> SockAddr:
    if family == socket.AF_INET:
        return (sockaddr[0], sockaddr[1])
    flow = sockaddr[2] if len(sockaddr) > 2 else 0
    scope = sockaddr[3] if len(sockaddr) > 3 else 0
    return (sockaddr[0], sockaddr[1], flow, scope)


class InetAddress:
    """A socket endpoint: an IP address and port, or a local socket path.

    ``InetAddress()`` is empty; ``InetAddress(AddressType.IPv6)`` is the zero address
    of that type; ``InetAddress("host", port)`` resolves a name; ``InetAddress("host:port")``,
    ``InetAddress("[::1]:80")`` or ``InetAddress("/path/to.sock")`` parse one string.
    """

    def __init__(self, host: str | AddressType | None = None, port: int | str | None = None) -> None:
        self._type = AddressType.IPv4
        self._addr: SockAddr | None = None
        if isinstance(host, AddressType):
            self._set_zero(host)
        elif host is not None:
            self.set(host, port)

    def _set_zero(self, kind: AddressType) -> None:
        self._type = kind
        if kind == AddressType.IPv4:
            self._addr = ("0.0.0.0", 0)
        elif kind == AddressType.IPv6:
            self._addr = ("::", 0, 0, 0)
        elif kind == AddressType.LOCAL:
            self._addr = ""
        else:
            self._addr = None

    @property
    def type(self) -> AddressType:
        """The kind of address."""
        return self._type

    @property
    def family(self) -> int:
        """The socket address family matching this address."""
        if self._type == AddressType.IPv6:
            return socket.AF_INET6
        if self._type == AddressType.LOCAL:
            return getattr(socket, "AF_UNIX", socket.AF_INET)
        return socket.AF_INET

    def __bool__(self) -> bool:
        return self._addr is not None

    def set(self, host: str, port: int | str | None = None) -> bool:
        """Set the address from a host and port, or from one ``host:port`` / path string.

        Returns False (leaving an empty address) if the host cannot be resolved.
        """
        if port is None:
            return self._set_text(host)
        number = port if isinstance(port, int) else _parse_port(str(port))
        return self._set_host_port(host, number)

    def _set_host_port(self, host: str, port: int) -> bool:
        port &= 0xFFFF
        if not host:
            self._type = AddressType.IPv4
            self._addr = ("0.0.0.0", port)
            return True
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        try:
            infos = socket.getaddrinfo(host, None, family, socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError, OSError):
            infos = []
        if not infos:
            self._type = AddressType.ANY
            self._addr = None
            return False
        chosen = next((info for info in infos if info[0] == socket.AF_INET), infos[0])
        fam, sockaddr = chosen[0], chosen[4]
        if fam == socket.AF_INET:
            self._type = AddressType.IPv4
        else:
            self._type = AddressType.IPv6
        addr = _normalize(fam, sockaddr)
        self._addr = (addr[0], port, *addr[2:])
        return True

    def _set_text(self, text: str) -> bool:
        target = text
        colon = text.find(":")
        if not text.startswith("[") and colon >= 0 and text.find(":", colon + 1) > 0:
            target = f"[{text}]"
        host, port = parse_host_port(target)
        if not port and ("/" in host or "\\" in host):
            self._type = AddressType.LOCAL
            self._addr = text[:_SUN_PATH_MAX]
            return True
        return self._set_host_port(host, _parse_port(port))

    def host(self) -> str:
        """Return the host IP as text (IPv6 as eight hex groups), or the local path."""
        if self._addr is None:
            return ""
        if self._type == AddressType.LOCAL:
            return str(self._addr)
        ip = str(self._addr[0])
        if self._type == AddressType.IPv6:
            groups = struct.unpack(">8H", socket.inet_pton(socket.AF_INET6, ip.split("%")[0]))
            return ":".join(f"{g:x}" for g in groups)
        if self._type == AddressType.IPv4:
            return ip
        return ""

    def port(self) -> int:
        """Return the port (0 for local or empty addresses)."""
        if self._addr is None or self._type not in (AddressType.IPv4, AddressType.IPv6):
            return 0
        return int(self._addr[1])  # type: ignore[index]

    def set_port(self, port: int) -> InetAddress:
        """Change the port of an IP address and return this address."""
        if self._addr is not None and self._type in (AddressType.IPv4, AddressType.IPv6):
            addr = self._addr
            self._addr = (addr[0], port & 0xFFFF, *addr[2:])  # type: ignore[index,misc]
        return self

    def sockaddr(self) -> SockAddr:
        """Return the address in the form the ``socket`` module expects."""
        if self._addr is None:
            raise ValueError("empty address")
        return self._addr

    def __str__(self) -> str:
        p = self.port()
        if p <= 0:
            return self.host()
        if self._type == AddressType.IPv4:
            return f"{self.host()}:{p}"
        return f"[{self.host()}]:{p}"

    def __repr__(self) -> str:
        return f"InetAddress({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InetAddress):
            return NotImplemented
        return self._type == other._type and self._addr == other._addr

    def __hash__(self) -> int:
        return hash((self._type, self._addr))

    @staticmethod
    def lookup(host: str) -> list[InetAddress]:
        """Resolve a name or literal into its addresses, IPv4 ones first; empty if it fails."""
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        try:
            infos = socket.getaddrinfo(host, None, family)
        except (socket.gaierror, UnicodeError, OSError):
            return []
        addresses: list[InetAddress] = []
        for fam, _socktype, _proto, _canon, sockaddr in infos:
            address = InetAddress()
            address._type = AddressType.IPv4 if fam == socket.AF_INET else AddressType.IPv6
            address._addr = _normalize(fam, sockaddr)
            if address in addresses:
                continue
            if address._type == AddressType.IPv4:
                addresses.insert(0, address)
            else:
                addresses.append(address)
        return addresses