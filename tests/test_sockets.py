import socket
import uuid

import pytest

from asl.address import InetAddress, SocketError
from asl.sockets import LocalSocket, PacketSocket, Socket, SocketSet


@pytest.fixture
def listener():
    server = Socket()
    assert server.bind("127.0.0.1", 0)
    server.listen()
    yield server
    server.close()


@pytest.fixture
def tcp_pair(listener):
    port = listener.local_address().port()
    client = Socket()
    assert client.connect("127.0.0.1", port)
    accepted = listener.accept()
    yield client, accepted
    client.close()
    accepted.close()


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_write_and_read_round_trip(tcp_pair):
    client, accepted = tcp_pair
    assert client.write(b"hello") == 5
    assert accepted.read(5) == b"hello"
    assert accepted.error() == SocketError.OK


def test_text_is_sent_as_utf8(tcp_pair):
    client, accepted = tcp_pair
    client.write("héllo")
    assert accepted.read(len("héllo".encode("utf-8"))).decode("utf-8") == "héllo"


def test_available_after_wait(tcp_pair):
    client, accepted = tcp_pair
    client.write(b"abc")
    assert accepted.wait_data(2)
    assert accepted.available() == 3
    assert accepted.read() == b"abc"


def test_read_line(tcp_pair):
    client, accepted = tcp_pair
    client.write(b"first\nsecond\n")
    assert accepted.read_line() == "first"
    assert accepted.read_line() == "second"


def test_skip(tcp_pair):
    client, accepted = tcp_pair
    client.write(b"xxhello")
    accepted.skip(2)
    assert accepted.read(5) == b"hello"


def test_connected_then_disconnected(tcp_pair):
    client, accepted = tcp_pair
    assert accepted.connected()
    client.close()
    assert accepted.wait_input(2)
    assert accepted.disconnected()


def test_short_read_when_peer_closes(tcp_pair):
    client, accepted = tcp_pair
    client.write(b"ab")
    client.close()
    assert accepted.read(5) == b"ab"
    assert accepted.error() == SocketError.BAD_RECV


def test_addresses_of_connection(listener, tcp_pair):
    client, accepted = tcp_pair
    assert client.remote_address().port() == listener.local_address().port()
    assert accepted.remote_address().port() == client.local_address().port()
    assert client.remote_address().host() == "127.0.0.1"


def test_bind_bad_port():
    s = Socket()
    assert s.bind("127.0.0.1", 70000) is False
    assert s.error() == SocketError.BAD_BIND
    assert s.error_msg() == "SOCKET_BAD_BIND"


def test_bind_host_port_string():
    with Socket() as s:
        assert s.bind("127.0.0.1:0")
        assert s.local_address().host() == "127.0.0.1"
        assert s.local_address().port() > 0


def test_bind_port_only_uses_all_interfaces():
    with Socket() as s:
        assert s.bind(0)
        assert s.local_address().host() == "0.0.0.0"


def test_context_manager_closes():
    with Socket() as s:
        s.bind("127.0.0.1", 0)
        assert s.handle() >= 0
    assert s.handle() == -1


def test_connect_refused():
    s = Socket()
    assert s.connect("127.0.0.1", _free_port()) is False
    assert s.error() == SocketError.BAD_CONNECT
    assert s.disconnected()


def test_connect_empty_address():
    s = Socket()
    assert s.connect(InetAddress()) is False
    assert s.error() == SocketError.BAD_CONNECT


def test_packet_round_trip():
    receiver = PacketSocket()
    sender = PacketSocket()
    try:
        assert receiver.bind("127.0.0.1", 0)
        target = InetAddress("127.0.0.1", receiver.local_address().port())
        assert sender.send_to(target, b"hello") == 5
        assert receiver.wait_input(2)
        data, origin = receiver.read_from()
        assert data == b"hello"
        assert origin.port() == sender.local_address().port()
    finally:
        receiver.close()
        sender.close()


def test_local_socket_round_trip(tmp_path):
    path = str(tmp_path / f"{uuid.uuid4().hex[:8]}.sock")
    server = LocalSocket()
    assert server.bind(path)
    server.listen()
    client = LocalSocket()
    try:
        assert client.connect(path)
        accepted = server.accept()
        client.write(b"ping\n")
        assert accepted.read_line() == "ping"
        accepted.close()
    finally:
        client.close()
        server.close()
    assert not (tmp_path / path).exists()


def test_socket_set_reports_active(listener):
    sockets = SocketSet().add(listener)
    assert len(sockets) == 1
    client = Socket()
    try:
        assert client.connect("127.0.0.1", listener.local_address().port())
        assert sockets.wait_input(2) == 1
        assert sockets.has_input(listener)
        assert sockets.active()[0] is listener
        listener.accept().close()
    finally:
        client.close()


def test_socket_set_timeout(listener):
    sockets = SocketSet().add(listener)
    assert sockets.wait_input(0.05) == 0
    assert sockets.active() == []
    assert not sockets.has_input(listener)


def test_socket_set_with_closed_socket():
    sockets = SocketSet().add(Socket())
    assert sockets.wait_input(0) == -1


def test_socket_set_close(listener):
    sockets = SocketSet().add(listener)
    sockets.close()
    assert listener.handle() == -1