"""A minimal UDP messaging layer with a hello/goodbye client and server."""

from __future__ import annotations

import socket
import sys
from typing import NamedTuple, Sequence

BUFFER_SIZE = 1000
SERVER_PORT = 10000
CLIENT_PORT = 20000

Address = tuple[str, int]


class Datagram(NamedTuple):
    """A received datagram and the address it came from."""

    data: bytes
    addr: Address

    @property
    def text(self) -> str:
        """The payload up to its first NUL byte, decoded as text."""
        return self.data.split(b"\0", 1)[0].decode(errors="replace")


def open_socket(port: int) -> socket.socket:
    """Create a UDP socket bound to ``port`` on every local interface."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind(("", port))
    except OSError:
        sock.close()
        raise
    return sock


def resolve(hostname: str | None, port: int) -> Address | None:
    """Look up ``hostname`` and pair its IPv4 address with ``port``.

    A missing hostname gives no address at all.
    """
    if hostname is None:
        return None
    return socket.gethostbyname(hostname), port


def send(sock: socket.socket, addr: Address, message: str | bytes, size: int = BUFFER_SIZE) -> int:
    """Send ``message`` padded with NUL bytes to exactly ``size`` bytes."""
    data = message.encode() if isinstance(message, str) else bytes(message)
    if len(data) > size:
        raise ValueError(f"message of {len(data)} bytes does not fit in {size}")
    return sock.sendto(data.ljust(size, b"\0"), addr)


def receive(sock: socket.socket, size: int = BUFFER_SIZE) -> Datagram:
    """Wait for one datagram of at most ``size`` bytes."""
    data, addr = sock.recvfrom(size)
    return Datagram(data, addr)


def close(sock: socket.socket) -> None:
    sock.close()


def run_client(
    server_host: str = "localhost",
    server_port: int = SERVER_PORT,
    client_port: int = CLIENT_PORT,
) -> Datagram:
    """Send a greeting to the server and return its reply."""
    with open_socket(client_port) as sock:
        addr = resolve(server_host, server_port)
        message = "hello world"
        print(f"client:: send message [{message}]")
        send(sock, addr, message, BUFFER_SIZE)
        print("client:: wait for reply...")
        reply = receive(sock, BUFFER_SIZE)
        print(f"client:: got reply [size:{len(reply.data)} contents:({reply.text})")
        return reply


def serve(sock: socket.socket, max_requests: int | None = None) -> int:
    """Answer datagrams on ``sock``; return how many were answered.

    Reads ``max_requests`` datagrams, or keeps going forever when it is None.
    Empty datagrams are read but not answered.
    """
    handled = 0
    replies = 0
    while max_requests is None or handled < max_requests:
        print("server:: waiting...")
        request = receive(sock, BUFFER_SIZE)
        handled += 1
        print(f"server:: read message [size:{len(request.data)} contents:({request.text})]")
        if request.data:
            send(sock, request.addr, "goodbye world", BUFFER_SIZE)
            replies += 1
            print("server:: reply")
    return replies


def client_main(argv: Sequence[str] | None = None) -> int:
    try:
        run_client()
    except OSError as exc:
        print(f"client:: {exc}", file=sys.stderr)
        print("client:: failed to send")
        return 1
    return 0


def server_main(argv: Sequence[str] | None = None) -> int:
    try:
        sock = open_socket(SERVER_PORT)
    except OSError as exc:
        print(f"server:: {exc}", file=sys.stderr)
        return 1
    with sock:
        serve(sock)
    return 0