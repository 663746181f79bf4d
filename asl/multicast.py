"""UDP sockets that send to and receive from multicast groups."""

from __future__ import annotations

import socket
import struct

from asl.address import AddressType, InetAddress
from asl.sockets import PacketSocket


def _interface_bytes(interface: int | str) -> bytes:
    if isinstance(interface, str):
        return socket.inet_aton(interface)
    return struct.pack("=I", interface & 0xFFFFFFFF)


class MulticastSocket(PacketSocket):
    """A UDP socket that can join multicast groups.

    ``interface`` is an interface index for IPv6 groups, and an interface address
    (as text or a raw 32-bit value, 0 meaning any) for IPv4 groups.
    """

    def _membership(self, address: InetAddress, interface: int | str, join: bool) -> bool:
        if not address:
            return False
        host = str(address.sockaddr()[0]).split("%")[0]
        try:
            if self._family == AddressType.IPv6:
                option = socket.IPV6_JOIN_GROUP if join else socket.IPV6_LEAVE_GROUP
                index = socket.if_nametoindex(interface) if isinstance(interface, str) else interface
                request = socket.inet_pton(socket.AF_INET6, host) + struct.pack("=I", index)
                return self._set_option(socket.IPPROTO_IPV6, option, request)
            option = socket.IP_ADD_MEMBERSHIP if join else socket.IP_DROP_MEMBERSHIP
            request = socket.inet_aton(host) + _interface_bytes(interface)
        except (OSError, ValueError):
            return False
        return self._set_option(socket.IPPROTO_IP, option, request)

    def join(self, address: InetAddress, interface: int | str = 0) -> bool:
        """Join a group; the socket is first bound to the group's port if it is not bound yet."""
        force = address.type != self._family
        self._family = address.type
        if not self._init(force):
            return False
        if self.local_address().port() == 0:
            any_host = "::" if self._family == AddressType.IPv6 else "0.0.0.0"
            if not self.bind(any_host, address.port()):
                return False
        return self._membership(address, interface, True)

    def leave(self, address: InetAddress, interface: int | str = 0) -> bool:
        """Leave a group and stop receiving its packets."""
        return self._membership(address, interface, False)

    def set_loop(self, on: bool) -> bool:
        """Choose whether packets sent to a group are also received on this host."""
        value = 1 if on else 0
        if self._family == AddressType.IPv6:
            return self._set_option(socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_LOOP, value)
        return self._set_option(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, value)

    def set_ttl(self, ttl: int) -> bool:
        """Set how many router hops multicast packets may cross (default 1)."""
        if self._family == AddressType.IPv6:
            return self._set_option(socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_HOPS, ttl)
        return self._set_option(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)

    def set_options(self, loop: bool, ttl: int) -> bool:
        """Set loopback and TTL together; True if both succeeded."""
        return self.set_loop(loop) and self.set_ttl(ttl)