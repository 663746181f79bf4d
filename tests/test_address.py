import socket
from unittest import mock

import pytest

from asl.address import (
    AddressType,
    InetAddress,
    SocketError,
    SocketException,
    parse_host_port,
)

LOOPBACK6 = "0:0:0:0:0:0:0:1"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("host:80", ("host", "80")),
        ("[::1]:8080", ("::1", "8080")),
        ("[::1]", ("::1", "")),
        ("C:\\dir", ("C:\\dir", "")),
        ("[::1", ("", "")),
        ("plain", ("plain", "")),
    ],
)
def test_parse_host_port(text, expected):
    assert parse_host_port(text) == expected


def test_ipv4_host_and_port():
    a = InetAddress("127.0.0.1", 80)
    assert a.type == AddressType.IPv4
    assert a.host() == "127.0.0.1"
    assert a.port() == 80
    assert str(a) == "127.0.0.1:80"
    assert a.sockaddr() == ("127.0.0.1", 80)


def test_host_port_string_equals_separate_form():
    assert InetAddress("127.0.0.1:8080") == InetAddress("127.0.0.1", 8080)
    assert InetAddress("127.0.0.1:8080") != InetAddress("127.0.0.1", 8081)


def test_ipv6_formatting():
    a = InetAddress("::1", 80)
    assert a.type == AddressType.IPv6
    assert a.host() == LOOPBACK6
    assert str(a) == f"[{LOOPBACK6}]:80"


def test_bare_ipv6_without_port():
    a = InetAddress("::1")
    assert a.type == AddressType.IPv6
    assert a.port() == 0
    assert str(a) == a.host()


def test_bracketed_ipv6_with_port():
    assert InetAddress("[::1]:443") == InetAddress("::1", 443)


def test_empty_host_is_any_interface():
    a = InetAddress("", 5000)
    assert a.host() == "0.0.0.0"
    assert a.port() == 5000


def test_local_path():
    a = InetAddress("/tmp/comm.sock")
    assert a.type == AddressType.LOCAL
    assert a.host() == "/tmp/comm.sock"
    assert str(a) == "/tmp/comm.sock"
    assert a.port() == 0


def test_set_port_returns_self():
    a = InetAddress("127.0.0.1", 1)
    assert a.set_port(9000) is a
    assert a.port() == 9000


def test_zero_addresses():
    assert InetAddress(AddressType.IPv6).host() == "0:0:0:0:0:0:0:0"
    assert InetAddress(AddressType.IPv4).host() == "0.0.0.0"


def test_empty_address():
    a = InetAddress()
    assert not a
    assert a.host() == ""
    with pytest.raises(ValueError):
        a.sockaddr()


def test_unresolvable_host():
    with mock.patch("socket.getaddrinfo", side_effect=socket.gaierror("fail")):
        a = InetAddress("nowhere.invalid", 10)
        assert a.type == AddressType.ANY
        assert not a
        assert a.set("nowhere.invalid", 10) is False


def test_set_prefers_ipv4():
    infos = [
        (socket.AF_INET6, socket.SOCK_STREAM, 0, "", ("::1", 0, 0, 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 0, "", ("10.0.0.1", 0)),
    ]
    with mock.patch("socket.getaddrinfo", return_value=infos):
        a = InetAddress("dual.example.com", 21)
    assert a.type == AddressType.IPv4
    assert a.host() == "10.0.0.1"
    assert a.port() == 21


def test_lookup_literal():
    found = InetAddress.lookup("127.0.0.1")
    assert len(found) == 1
    assert found[0].host() == "127.0.0.1"


def test_lookup_orders_ipv4_first_and_deduplicates():
    infos = [
        (socket.AF_INET6, socket.SOCK_STREAM, 0, "", ("::1", 0, 0, 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 0, "", ("10.0.0.1", 0)),
        (socket.AF_INET, socket.SOCK_DGRAM, 0, "", ("10.0.0.1", 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 0, "", ("10.0.0.2", 0)),
    ]
    with mock.patch("socket.getaddrinfo", return_value=infos):
        found = InetAddress.lookup("multi.example.com")
    assert [a.host() for a in found] == ["10.0.0.2", "10.0.0.1", LOOPBACK6]


def test_lookup_failure_gives_empty_list():
    with mock.patch("socket.getaddrinfo", side_effect=socket.gaierror("fail")):
        assert InetAddress.lookup("nowhere.invalid") == []


def test_socket_error_messages():
    assert SocketError.OK.message == "OK"
    assert SocketError.BAD_BIND.message == "SOCKET_BAD_BIND"
    assert SocketError.BAD_DNS.message == "SOCKET_BAD_DNS"
    assert str(SocketException(SocketError.BAD_BIND)) == "SOCKET_BAD_BIND"
    assert str(SocketException(SocketError.BAD_DNS)) == "SOCKET_BAD_DNS"


def test_socket_exception_carries_error():
    exc = SocketException(SocketError.BAD_CONNECT)
    assert exc.error is SocketError.BAD_CONNECT
    assert str(exc) == "SOCKET_BAD_CONNECT"
    with pytest.raises(SocketException) as info:
        raise exc
    assert info.value is exc