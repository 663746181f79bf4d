import socket

from asl.address import InetAddress
from asl.multicast import MulticastSocket


def _free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.bind(("0.0.0.0", 0))
        return s.getsockname()[1]


def _read_option(sock, option):
    probe = socket.fromfd(sock.handle(), socket.AF_INET, socket.SOCK_DGRAM)
    try:
        return probe.getsockopt(socket.IPPROTO_IP, option)
    finally:
        probe.close()


def test_set_ttl_is_applied():
    m = MulticastSocket()
    try:
        assert m.set_ttl(4) is True
        assert _read_option(m, socket.IP_MULTICAST_TTL) == 4
    finally:
        m.close()


def test_set_loop_off():
    m = MulticastSocket()
    try:
        assert m.set_loop(False) is True
        assert _read_option(m, socket.IP_MULTICAST_LOOP) == 0
    finally:
        m.close()


def test_set_options_sets_both():
    m = MulticastSocket()
    try:
        assert m.set_options(True, 3) is True
        assert _read_option(m, socket.IP_MULTICAST_TTL) == 3
        assert _read_option(m, socket.IP_MULTICAST_LOOP) == 1
    finally:
        m.close()


def test_join_binds_to_group_port():
    port = _free_udp_port()
    group = InetAddress("224.0.1.1", port)
    m = MulticastSocket()
    try:
        m.join(group)
        assert m.local_address().port() == port
    finally:
        m.close()


def test_leave_group_not_joined_fails():
    group = InetAddress("224.0.1.1", _free_udp_port())
    m = MulticastSocket()
    try:
        m.set_ttl(1)
        assert m.leave(group) is False
    finally:
        m.close()


def test_leave_empty_address_fails():
    m = MulticastSocket()
    try:
        assert m.leave(InetAddress()) is False
    finally:
        m.close()