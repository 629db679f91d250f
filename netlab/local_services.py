"""Services over UNIX-domain stream sockets and a UDP even-parity service."""

from __future__ import annotations

import argparse
import contextlib
import os
import socket
import sys
from collections.abc import Iterable, Iterator

from netlab.coding import even_parity, odd_parity
from netlab.numbers import bubble_sort, conversion_report, parity_word
from netlab.tcp_services import pack_ints, unpack_ints

Address = tuple[str, int]

CONVERSION_PATH = "converter_socket"
EVEN_ODD_PATH = "even_odd_socket"
PARITY_PATH = "parity_socket"
SORT_PATH = "server_socket"
PARITY_ADDRESS: Address = ("127.0.0.1", 8080)

CONVERSION_REPLY_SIZE = 100
EVEN_ODD_REPLY_SIZE = 10
PARITY_BUFFER_SIZE = 100
DATAGRAM_SIZE = 1024
_INT_SIZE = 4


@contextlib.contextmanager
def unix_listener(path: str) -> Iterator[socket.socket]:
    """Listen on a UNIX-domain stream socket at path, removing the file afterwards.

    A stale socket file left at path is removed before binding.
    """
    with contextlib.suppress(FileNotFoundError):
        os.unlink(path)
    listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        listener.bind(path)
        listener.listen(5)
        yield listener
    finally:
        listener.close()
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)


def _recv_exact(conn: socket.socket, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = conn.recv(remaining)
        if not chunk:
            raise ConnectionError(f"connection closed after {size - remaining} of {size} bytes")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _recv_int(conn: socket.socket) -> int:
    return unpack_ints(_recv_exact(conn, _INT_SIZE))[0]


def _recv_text(conn: socket.socket, limit: int) -> str:
    """Read until a NUL byte, end of stream or limit bytes; return the text before NUL."""
    data = b""
    while len(data) < limit and b"\0" not in data:
        chunk = conn.recv(limit - len(data))
        if not chunk:
            break
        data += chunk
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _connect(path: str) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(path)
    except OSError:
        sock.close()
        raise
    return sock


def handle_conversion(conn: socket.socket) -> str:
    """Read a number, reply with its binary/octal/hex report and return the report."""
    number = _recv_int(conn)
    print(f"Received number: {number}")
    report = conversion_report(number)
    conn.sendall(report.encode() + b"\0")
    return report


def request_conversion(number: int, path: str = CONVERSION_PATH) -> str:
    """Send a number to the conversion server and return its report."""
    with _connect(path) as sock:
        sock.sendall(pack_ints([number]))
        return _recv_text(sock, CONVERSION_REPLY_SIZE)


def handle_even_odd(conn: socket.socket) -> str:
    """Read a number, reply "Even" or "Odd" and return that word."""
    number = _recv_int(conn)
    print(f"Received number: {number}")
    word = parity_word(number)
    conn.sendall(word.encode().ljust(EVEN_ODD_REPLY_SIZE, b"\0"))
    return word


def request_even_odd(number: int, path: str = EVEN_ODD_PATH) -> str:
    """Ask the server whether a number is even or odd."""
    with _connect(path) as sock:
        sock.sendall(pack_ints([number]))
        return _recv_text(sock, EVEN_ODD_REPLY_SIZE)


def handle_odd_parity(conn: socket.socket) -> str:
    """Read a bit stream, reply with an odd parity bit appended and return the reply."""
    bits = _recv_text(conn, PARITY_BUFFER_SIZE)
    print(f"Received from client: {bits}")
    result = odd_parity(bits)
    conn.sendall(result.encode() + b"\0")
    print(f"Sent to client (with odd parity): {result}")
    return result


def request_odd_parity(bits: str, path: str = PARITY_PATH) -> str:
    """Send a bit stream and return it with the server's odd parity bit."""
    with _connect(path) as sock:
        sock.sendall(bits.encode() + b"\0")
        return _recv_text(sock, PARITY_BUFFER_SIZE)


def send_sorted_array(conn: socket.socket, values: Iterable[int]) -> list[int]:
    """Sort values, send their count and then the values; return the sorted list."""
    ordered = bubble_sort(values)
    print("Sorted array in server: " + "".join(f"{value} " for value in ordered))
    conn.sendall(pack_ints([len(ordered)]) + pack_ints(ordered))
    return ordered


def receive_sorted_array(path: str = SORT_PATH) -> list[int]:
    """Connect to the sorting server and return the array it sends."""
    with _connect(path) as sock:
        count = _recv_int(sock)
        if count < 0:
            raise ValueError(f"invalid array length {count}")
        return unpack_ints(_recv_exact(sock, count * _INT_SIZE))


def handle_even_parity_datagram(sock: socket.socket) -> str:
    """Answer one datagram with its bit stream plus an even parity bit; return the reply."""
    data, sender = sock.recvfrom(DATAGRAM_SIZE)
    bits = data.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    print(f"Received bit stream: {bits}")
    result = even_parity(bits)
    print(f"Sending back with even parity: {result}")
    sock.sendto(result.encode(), sender)
    return result


def request_even_parity(bits: str, address: Address = PARITY_ADDRESS) -> str:
    """Send a bit stream over UDP and return it with the even parity bit added."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(bits.encode(), address)
        data, _ = sock.recvfrom(DATAGRAM_SIZE)
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _stdin_tokens() -> Iterator[str]:
    while True:
        line = sys.stdin.readline()
        if not line:
            raise EOFError("input ended")
        yield from line.split()


def _prompt(tokens: Iterator[str], text: str) -> str:
    print(text, end="", flush=True)
    return next(tokens)


_DEFAULT_PATHS = {
    "conversion": CONVERSION_PATH,
    "even-odd": EVEN_ODD_PATH,
    "odd-parity": PARITY_PATH,
    "sort": SORT_PATH,
}

_BANNERS = {
    "conversion": "Server ready. Waiting for client...",
    "even-odd": "Server waiting for client...",
    "odd-parity": "Server is listening...",
    "sort": "Server waiting for client connection...",
}

_CONNECTED = {
    "conversion": "Client connected.",
    "even-odd": "Client connected.",
    "sort": "Client connected!",
}


def _unix_server(service: str, path: str) -> None:
    with unix_listener(path) as listener:
        print(_BANNERS[service], flush=True)
        conn, _ = listener.accept()
        with conn:
            if service in _CONNECTED:
                print(_CONNECTED[service], flush=True)
            if service == "conversion":
                handle_conversion(conn)
            elif service == "even-odd":
                handle_even_odd(conn)
            elif service == "odd-parity":
                handle_odd_parity(conn)
            else:
                tokens = _stdin_tokens()
                count = int(_prompt(tokens, "Enter the number of integers: "))
                if count < 0:
                    raise ValueError("the number of integers must not be negative")
                print(f"Enter {count} integers: ", end="", flush=True)
                values = [int(next(tokens)) for _ in range(count)]
                send_sorted_array(conn, values)


def _unix_client(service: str, path: str) -> None:
    tokens = _stdin_tokens()
    if service == "conversion":
        number = int(_prompt(tokens, "Enter a decimal number: "))
        print(f"Conversions received from server:\n{request_conversion(number, path)}", end="")
    elif service == "even-odd":
        number = int(_prompt(tokens, "Enter a number: "))
        print(f"The number is: {request_even_odd(number, path)}")
    elif service == "odd-parity":
        bits = _prompt(tokens, "Enter bit stream (e.g., 10101): ")
        print(f"Received from server (with odd parity): {request_odd_parity(bits, path)}")
    else:
        values = receive_sorted_array(path)
        print("Sorted array received in client: " + "".join(f"{value} " for value in values))


def _udp_server(address: Address) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(address)
        print("Server is running and waiting for client...", flush=True)
        while True:
            handle_even_parity_datagram(sock)


def main(argv: list[str] | None = None) -> int:
    """Run one of the local services as a server or as a client."""
    parser = argparse.ArgumentParser(
        prog="netlab-local", description="UNIX-socket and UDP services."
    )
    parser.add_argument("service", choices=sorted([*_DEFAULT_PATHS, "even-parity"]))
    parser.add_argument("role", choices=["server", "client"])
    parser.add_argument("--path", help="UNIX socket path")
    parser.add_argument("--host", help="UDP address to bind or send to")
    parser.add_argument("--port", type=int, default=PARITY_ADDRESS[1], help="UDP port")
    args = parser.parse_args(argv)

    try:
        if args.service == "even-parity":
            if args.role == "server":
                _udp_server((args.host or "", args.port))
            else:
                bits = _prompt(_stdin_tokens(), "Enter bit stream (only 0s and 1s): ")
                reply = request_even_parity(bits, (args.host or PARITY_ADDRESS[0], args.port))
                print(f"Received bit stream with even parity: {reply}")
            return 0
        path = args.path or _DEFAULT_PATHS[args.service]
        if args.role == "server":
            _unix_server(args.service, path)
        else:
            _unix_client(args.service, path)
    except (OSError, ValueError, EOFError) as exc:
        print(f"{args.service} {args.role} failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0