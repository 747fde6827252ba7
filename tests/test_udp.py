import socket
import threading

import pytest

from osdemos.udp import (
    BUFFER_SIZE,
    close,
    open_socket,
    receive,
    resolve,
    run_client,
    send,
    serve,
)


@pytest.fixture
def pair():
    a = open_socket(0)
    b = open_socket(0)
    a.settimeout(5)
    b.settimeout(5)
    yield a, b
    a.close()
    b.close()


def _port(sock):
    return sock.getsockname()[1]


def test_open_socket_binds_datagram_socket():
    sock = open_socket(0)
    try:
        assert sock.type == socket.SOCK_DGRAM
        assert _port(sock) > 0
    finally:
        sock.close()


def test_open_socket_port_in_use_raises():
    first = open_socket(0)
    try:
        with pytest.raises(OSError):
            open_socket(_port(first))
    finally:
        first.close()


def test_resolve_without_hostname_gives_no_address():
    assert resolve(None, 10000) is None


def test_resolve_numeric_address():
    assert resolve("127.0.0.1", 4321) == ("127.0.0.1", 4321)


def test_resolve_localhost_is_loopback():
    host, port = resolve("localhost", 10000)
    assert host.startswith("127.")
    assert port == 10000


def test_resolve_unknown_host_raises():
    with pytest.raises(OSError):
        resolve("no-such-host.invalid", 10000)


def test_send_receive_round_trip(pair):
    a, b = pair
    sent = send(a, ("127.0.0.1", _port(b)), "hello world", BUFFER_SIZE)
    assert sent == BUFFER_SIZE
    got = receive(b, BUFFER_SIZE)
    assert len(got.data) == BUFFER_SIZE
    assert got.text == "hello world"
    assert got.addr[1] == _port(a)


def test_send_bytes_message(pair):
    a, b = pair
    send(a, ("127.0.0.1", _port(b)), b"raw", 8)
    got = receive(b, BUFFER_SIZE)
    assert got.data == b"raw\0\0\0\0\0"


def test_send_message_too_long_raises(pair):
    a, b = pair
    with pytest.raises(ValueError):
        send(a, ("127.0.0.1", _port(b)), "x" * 11, 10)


def test_close_releases_socket():
    sock = open_socket(0)
    close(sock)
    assert sock.fileno() == -1


def test_serve_ignores_empty_datagram(pair):
    server, other = pair
    other.sendto(b"", ("127.0.0.1", _port(server)))
    assert serve(server, 1) == 0


def test_client_and_server_exchange(capsys):
    server = open_socket(0)
    server.settimeout(5)
    results = []
    worker = threading.Thread(target=lambda: results.append(serve(server, 1)))
    worker.start()
    try:
        reply = run_client("127.0.0.1", _port(server), 0)
    finally:
        worker.join(5)
        server.close()
    assert reply.text == "goodbye world"
    assert len(reply.data) == BUFFER_SIZE
    assert results == [1]
    out = capsys.readouterr().out
    assert "client:: send message [hello world]" in out
    assert "server:: read message [size:1000 contents:(hello world)]" in out
    assert "client:: got reply [size:1000 contents:(goodbye world)" in out