"""TCP, UDP and local stream sockets with simple blocking reads and writes."""

from __future__ import annotations

import os
import select
import socket
import struct
from collections.abc import Iterator
from types import TracebackType

from asl.address import AddressType, InetAddress, SocketError, parse_host_port

try:
    import fcntl
    import termios
except ImportError:  # not available on every platform
    fcntl = None  # type: ignore[assignment]
    termios = None  # type: ignore[assignment]

_MAX_LINE = 16000
_HAS_UNIX = hasattr(socket, "AF_UNIX")


def _type_of_family(family: int) -> AddressType:
    if family == socket.AF_INET6:
        return AddressType.IPv6
    if _HAS_UNIX and family == socket.AF_UNIX:
        return AddressType.LOCAL
    return AddressType.IPv4


def _address_from(family: int, sockaddr: object) -> InetAddress:
    """Build an InetAddress from what the ``socket`` module reports."""
    if _HAS_UNIX and family == socket.AF_UNIX:
        if isinstance(sockaddr, bytes):
            path = sockaddr.decode("utf-8", errors="replace")
        else:
            path = str(sockaddr or "")
        if "/" in path or "\\" in path:
            return InetAddress(path)
        return InetAddress(AddressType.LOCAL)
    host, port = sockaddr[0], sockaddr[1]  # type: ignore[index]
    return InetAddress(str(host), int(port))


def _pending(sock: socket.socket) -> int:
    """Return how many bytes can be read from ``sock`` without blocking."""
    if fcntl is not None:
        raw = fcntl.ioctl(sock.fileno(), termios.FIONREAD, b"\0\0\0\0")
        return struct.unpack("i", raw)[0]
    timeout = sock.gettimeout()
    sock.setblocking(False)
    try:
        return len(sock.recv(65536, socket.MSG_PEEK))
    except BlockingIOError:
        return 0
    finally:
        sock.settimeout(timeout)


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


class Socket:
    """A TCP stream socket.

    Errors are not raised: operations report failure through their return value
    and record an error code readable with ``error()`` and ``error_msg()``.
    """

    _SOCK_TYPE = socket.SOCK_STREAM
    _DEFAULT_FAMILY = AddressType.IPv4
    _DEFAULT_BLOCKING = True

    def __init__(self, sock: socket.socket | None = None) -> None:
        self._sock = sock
        self._family = _type_of_family(sock.family) if sock is not None else self._DEFAULT_FAMILY
        self._error = SocketError.OK
        self._blocking = self._DEFAULT_BLOCKING
        self._hostname = ""

    # internals

    def _init(self, force: bool = False) -> bool:
        if self._sock is not None and force:
            self._close_handle()
        if self._sock is None:
            try:
                self._sock = socket.socket(InetAddress(self._family).family, self._SOCK_TYPE)
            except OSError:
                self._sock = None
        self._error = SocketError.OK if self._sock is not None else SocketError.BAD_INIT
        return self._sock is not None

    def _close_handle(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _set_option(self, level: int, option: int, value: int | bytes) -> bool:
        if not self._init():
            return False
        try:
            self._sock.setsockopt(level, option, value)  # type: ignore[union-attr]
        except OSError:
            return False
        return True

    def _connect_address(self, address: InetAddress) -> bool:
        if not address:
            self._error = SocketError.BAD_CONNECT
            return False
        force = self._family != address.type
        self._family = address.type
        if not self._init(force):
            return False
        try:
            self._sock.connect(address.sockaddr())  # type: ignore[union-attr]
        except OSError:
            self._close_handle()
            self._error = SocketError.BAD_CONNECT
            return False
        return True

    # public interface

    def handle(self) -> int:
        """Return the OS handle of the socket, or -1 if it is not open."""
        return self._sock.fileno() if self._sock is not None else -1

    def fileno(self) -> int:
        return self.handle()

    def set_blocking(self, blocking: bool) -> None:
        """Choose whether reads and writes insist on transferring everything requested."""
        self._blocking = blocking

    def enable_broadcast(self, on: bool = True) -> bool:
        """Allow or forbid sending to broadcast addresses."""
        return self._set_option(socket.SOL_SOCKET, socket.SO_BROADCAST, 1 if on else 0)

    def bind(self, host: str | int, port: int | None = None) -> bool:
        """Bind to an IP and port, to ``"host:port"``, or to a port on all IPv4 interfaces."""
        if isinstance(host, int) and port is None:
            return self.bind("0.0.0.0", host)
        if port is None:
            name, port_text = parse_host_port(str(host))
            port_text = port_text.strip()
            return self.bind(name, int(port_text) if port_text.isdigit() else 0)
        if port < 0 or port > 65535:
            self._error = SocketError.BAD_BIND
            return False
        here = InetAddress(str(host), port)
        if not here:
            return False
        force = self._family != here.type
        self._family = here.type
        if not self._init(force):
            return False
        self._set_option(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            self._sock.bind(here.sockaddr())  # type: ignore[union-attr]
        except OSError:
            self._error = SocketError.BAD_BIND
            return False
        return True

    def listen(self, backlog: int = 5) -> None:
        """Start accepting incoming connections."""
        if self._sock is not None:
            self._sock.listen(backlog)

    def accept(self) -> Socket:
        """Wait for an incoming connection and return a socket for it."""
        try:
            if self._sock is None:
                raise OSError("socket is not open")
            conn, _ = self._sock.accept()
        except OSError:
            failed = type(self)()
            failed._error = SocketError.BAD_INIT
            return failed
        return type(self)(conn)

    def connect(self, host: str | InetAddress, port: int | None = None) -> bool:
        """Connect to a host and port (trying each of its addresses), ``"host:port"`` or an InetAddress."""
        if isinstance(host, InetAddress):
            return self._connect_address(host)
        if port is None:
            return self._connect_address(InetAddress(host))
        addresses = InetAddress.lookup(host)
        if not addresses:
            self._error = SocketError.BAD_DNS
            return False
        self._hostname = host
        for address in addresses:
            if self._connect_address(address.set_port(port)):
                return True
        self._error = SocketError.BAD_CONNECT
        return False

    def close(self) -> None:
        """Close the socket."""
        self._close_handle()

    def available(self) -> int:
        """Return the bytes readable without blocking, or -1 after an error."""
        if self._error != SocketError.OK or self._sock is None:
            return -1
        try:
            return _pending(self._sock)
        except OSError:
            return -1

    def read(self, n: int = -1) -> bytes:
        """Read ``n`` bytes (all that is available if ``n`` is negative).

        A blocking socket keeps reading until it has ``n`` bytes or the peer is gone,
        in which case fewer bytes are returned and the error is set.
        """
        if n < 0:
            n = max(0, self.available())
        if n == 0:
            return b""
        if self._sock is None:
            self._error = SocketError.BAD_RECV
            return b""
        data = bytearray()
        while len(data) < n:
            try:
                chunk = self._sock.recv(n - len(data))
            except OSError:
                chunk = b""
            if not self._blocking:
                return chunk
            if not chunk:
                self._error = SocketError.BAD_RECV
                break
            data += chunk
        return bytes(data)

    def write(self, data: bytes | bytearray | memoryview | str) -> int:
        """Send data (text as UTF-8) and return the number of bytes sent."""
        payload = _as_bytes(data)
        if not payload:
            return 0
        if self._sock is None:
            self._error = SocketError.BAD_DATA
            return 0
        view = memoryview(payload)
        sent = 0
        while sent < len(payload):
            try:
                n = self._sock.send(view[sent:])
            except OSError:
                if not self._blocking:
                    return -1
                self._error = SocketError.BAD_DATA
                break
            if not self._blocking:
                return n
            sent += n
        return sent

    def read_line(self) -> str:
        """Read a line of text without its newline; lines over 16000 bytes give ``""`` and an error."""
        line = bytearray()
        if self.available() > 0 or self.wait_input(60):
            while True:
                c = self.read(1)
                if not c or c == b"\n" or self._error != SocketError.OK:
                    break
                if len(line) > _MAX_LINE:
                    self._error = SocketError.BAD_LINE
                    line.clear()
                    break
                line += c
        return line.decode("utf-8", errors="replace")

    def skip(self, n: int) -> None:
        """Read and discard ``n`` bytes."""
        self.read(n)

    def wait_input(self, timeout: float = 2) -> bool:
        """Wait for incoming data or a disconnection; True if either happened in time."""
        if self._sock is None:
            return False
        pending = self.available()
        if pending > 0:
            return True
        if pending < 0:
            self._error = SocketError.BAD_DATA
            return True
        try:
            readable, _, _ = select.select([self._sock], [], [], max(0.0, timeout))
        except (OSError, ValueError):
            self._error = SocketError.BAD_WAIT
            return True
        return bool(readable)

    def wait_data(self, timeout: float = 2) -> bool:
        """Wait for incoming data; True only if there is data to read."""
        return self.wait_input(timeout) and not self.disconnected()

    def disconnected(self) -> bool:
        """Tell whether the connection was lost (or never made)."""
        return (
            self._sock is None
            or self._error != SocketError.OK
            or (self.wait_input(0) and self.available() <= 0)
        )

    def connected(self) -> bool:
        """Tell whether the connection is open."""
        return not self.disconnected()

    def error(self) -> SocketError:
        """Return the last recorded error."""
        return self._error

    def error_msg(self) -> str:
        """Return the last recorded error as text."""
        return self._error.message

    def remote_address(self) -> InetAddress:
        """Return the peer's address, or an empty address if not connected."""
        if self._sock is None:
            return InetAddress()
        try:
            return _address_from(self._sock.family, self._sock.getpeername())
        except OSError:
            return InetAddress()

    def local_address(self) -> InetAddress:
        """Return the address this socket is bound to."""
        if self._sock is None:
            return InetAddress(self._family)
        try:
            return _address_from(self._sock.family, self._sock.getsockname())
        except OSError:
            return InetAddress(self._family)

    def __enter__(self) -> Socket:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()


class PacketSocket(Socket):
    """A UDP datagram socket."""

    _SOCK_TYPE = socket.SOCK_DGRAM
    _DEFAULT_BLOCKING = False

    def send_to(self, address: InetAddress, data: bytes | bytearray | memoryview | str) -> int:
        """Send one datagram to ``address``; return the bytes sent or -1 on failure."""
        if self._sock is None:
            if address:
                self._family = address.type
            if not self._init():
                return -1
        try:
            return self._sock.sendto(_as_bytes(data), address.sockaddr())  # type: ignore[union-attr]
        except (OSError, ValueError):
            return -1

    def read_from(self, n: int = 1000) -> tuple[bytes, InetAddress]:
        """Wait for a datagram of at most ``n`` bytes and return it with its sender's address."""
        if self._sock is None and not self._init():
            return b"", InetAddress()
        try:
            data, sender = self._sock.recvfrom(n)  # type: ignore[union-attr]
        except OSError:
            return b"", InetAddress()
        return data, _address_from(self._sock.family, sender)  # type: ignore[union-attr]


class LocalSocket(Socket):
    """A stream socket bound to a path in the file system, for communication within a machine."""

    _DEFAULT_FAMILY = AddressType.LOCAL

    def __init__(self, sock: socket.socket | None = None) -> None:
        super().__init__(sock)
        self._bound_path: str | None = None

    def bind(self, path: str) -> bool:  # type: ignore[override]
        """Bind to ``path``, replacing any file left there."""
        if not _HAS_UNIX:
            self._error = SocketError.BAD_BIND
            return False
        try:
            os.unlink(path)
        except OSError:
            pass
        self._family = AddressType.LOCAL
        if not self._init():
            return False
        try:
            self._sock.bind(path)  # type: ignore[union-attr]
        except OSError:
            self._error = SocketError.BAD_BIND
            return False
        self._bound_path = path
        return True

    def connect(self, path: str) -> bool:  # type: ignore[override]
        """Connect to the socket bound at ``path``."""
        if not _HAS_UNIX:
            self._error = SocketError.BAD_CONNECT
            return False
        self._family = AddressType.LOCAL
        if not self._init():
            return False
        try:
            self._sock.connect(path)  # type: ignore[union-attr]
        except OSError:
            self._close_handle()
            self._error = SocketError.BAD_CONNECT
            return False
        return True

    def close(self) -> None:
        """Close the socket and remove the file it was bound to."""
        super().close()
        if self._bound_path is not None:
            try:
                os.unlink(self._bound_path)
            except OSError:
                pass
            self._bound_path = None


class SocketSet:
    """A group of sockets that can be waited on together."""

    def __init__(self) -> None:
        self._sockets: list[Socket] = []
        self._active: list[Socket] = []

    def add(self, sock: Socket) -> SocketSet:
        """Add a socket to the set and return the set."""
        self._sockets.append(sock)
        return self

    def __len__(self) -> int:
        return len(self._sockets)

    def __iter__(self) -> Iterator[Socket]:
        return iter(self._sockets)

    def __getitem__(self, index: int) -> Socket:
        return self._sockets[index]

    def wait_input(self, timeout: float = 60) -> int:
        """Wait for input on any socket; return how many have some, or -1 on error."""
        if any(s.handle() < 0 for s in self._sockets):
            return -1
        try:
            readable, _, _ = select.select(self._sockets, [], [], max(0.0, timeout))
        except (OSError, ValueError):
            return -1
        self._active = [s for s in self._sockets if any(s is r for r in readable)]
        return len(self._active)

    def has_input(self, sock: Socket) -> bool:
        """Tell whether ``sock`` had input in the last wait."""
        return any(s is sock for s in self._active)

    def active(self) -> list[Socket]:
        """Return the sockets that had input in the last wait."""
        return list(self._active)

    def close(self) -> None:
        """Close every socket in the set."""
        for sock in self._sockets:
            sock.close()