"""Small request/response TCP services: bit stuffing, name length, CRC and roll sorting."""

from __future__ import annotations

import argparse
import socket
import struct
import sys
import threading
from collections.abc import Callable, Iterable, Sequence

from netlab.coding import bit_destuff, bit_stuff, crc_codeword

Address = tuple[str, int]

BITSTUFF_ADDRESS: Address = ("127.0.0.1", 9734)
SERVICE_ADDRESS: Address = ("127.0.0.1", 8080)
MAX_SIZE = 1024
ROLL_COUNT = 6
_INT = struct.Struct("<i")


def pack_ints(values: Iterable[int]) -> bytes:
    """Encode integers as consecutive 32-bit little-endian signed values."""
    try:
        return b"".join(_INT.pack(value) for value in values)
    except struct.error as exc:
        raise ValueError(f"value does not fit in 32 bits: {exc}") from exc


def unpack_ints(data: bytes) -> list[int]:
    """Decode consecutive 32-bit little-endian signed values."""
    if len(data) % _INT.size:
        raise ValueError("data length is not a multiple of 4 bytes")
    return [value for (value,) in _INT.iter_unpack(data)]


def _until_nul(data: bytes) -> bytes:
    return data.split(b"\0", 1)[0]


def _recv_text(conn: socket.socket, size: int = MAX_SIZE) -> str:
    data = conn.recv(size)
    if not data:
        raise ConnectionError("Read error: connection closed before any data arrived")
    return _until_nul(data).decode("utf-8", errors="replace")


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


def handle_bitstuff(conn: socket.socket) -> str:
    """Read a stuffed bit stream, reply with it de-stuffed and return that."""
    print("Client connected.")
    stuffed = _recv_text(conn, MAX_SIZE - 1)
    print(f"Received Stuffed Data: {stuffed}")
    destuffed = bit_destuff(stuffed)
    print(f"After De-Stuffing: {destuffed}")
    conn.sendall(destuffed.encode() + b"\0")
    print("Client disconnected. Waiting for new connection...")
    return destuffed


def request_bitstuff(bits: str, address: Address = BITSTUFF_ADDRESS) -> str:
    """Send the stuffed form of bits and return the de-stuffed reply."""
    with socket.create_connection(address) as sock:
        sock.sendall(bit_stuff(bits).encode() + b"\0")
        return _recv_text(sock, MAX_SIZE - 1)


def handle_name_length(conn: socket.socket) -> int:
    """Read a name, reply with its length in bytes and return that length."""
    raw = _until_nul(conn.recv(MAX_SIZE))
    print(f"Received name: {raw.decode('utf-8', errors='replace')}")
    conn.sendall(f"Length: {len(raw)}".encode())
    return len(raw)


def request_name_length(name: str, address: Address = SERVICE_ADDRESS) -> str:
    """Send a name and return the server's reply text."""
    name = name.split("\n", 1)[0]
    with socket.create_connection(address) as sock:
        sock.sendall(name.encode())
        return _until_nul(sock.recv(MAX_SIZE)).decode("utf-8", errors="replace")


def handle_crc(conn: socket.socket) -> str:
    """Read "dataword divisor", reply with the CRC codeword and return it."""
    received = _recv_text(conn, MAX_SIZE)
    print("\n[+] Client connected.")
    print(f"[>] Received from client: {received}")
    fields = received.split()
    if len(fields) < 2:
        raise ValueError("expected a dataword and a divisor")
    dataword, divisor = fields[:2]
    print(f"[>] Dataword: {dataword} | Divisor: {divisor}")
    codeword = crc_codeword(dataword, divisor)
    print(f"[✓] Computed Codeword: {codeword}")
    conn.sendall(codeword.encode())
    return codeword


def request_crc(dataword: str, divisor: str, address: Address = SERVICE_ADDRESS) -> str:
    """Ask the server for the CRC codeword of a dataword."""
    with socket.create_connection(address) as sock:
        sock.sendall(f"{dataword} {divisor}".encode())
        return _until_nul(sock.recv(MAX_SIZE)).decode("utf-8", errors="replace")


def _format_numbers(values: Iterable[int]) -> str:
    return "".join(f"{value} " for value in values)


def handle_roll_sort(conn: socket.socket) -> list[int]:
    """Read six roll numbers, reply with them sorted and return the sorted list."""
    numbers = sorted(unpack_ints(_recv_exact(conn, ROLL_COUNT * _INT.size)))
    print(f"Server: Sorted roll numbers: {_format_numbers(numbers)}")
    conn.sendall(pack_ints(numbers))
    return numbers


def request_roll_sort(numbers: Sequence[int], address: Address = SERVICE_ADDRESS) -> list[int]:
    """Send exactly six roll numbers and return them as sorted by the server."""
    if len(numbers) != ROLL_COUNT:
        raise ValueError(f"exactly {ROLL_COUNT} roll numbers are required")
    payload = pack_ints(numbers)
    with socket.create_connection(address) as sock:
        sock.sendall(payload)
        return unpack_ints(_recv_exact(sock, len(payload)))


def _run_handler(handler: Callable[[socket.socket], object], conn: socket.socket) -> None:
    with conn:
        try:
            handler(conn)
        except (OSError, ValueError) as exc:
            print(f"{getattr(handler, '__name__', 'handler')} failed: {exc}", file=sys.stderr)


def serve(
    listener: socket.socket,
    handler: Callable[[socket.socket], object],
    concurrent: bool = False,
    max_connections: int | None = None,
) -> int:
    """Accept connections and run handler on each; return how many were served.

    With concurrent set each connection gets its own thread. Without a
    max_connections limit the loop runs until accept fails.
    """
    served = 0
    workers: list[threading.Thread] = []
    while max_connections is None or served < max_connections:
        conn, _ = listener.accept()
        served += 1
        if concurrent:
            worker = threading.Thread(target=_run_handler, args=(handler, conn), daemon=True)
            worker.start()
            workers.append(worker)
        else:
            _run_handler(handler, conn)
    for worker in workers:
        worker.join()
    return served


_SERVERS = {
    "bitstuff": (handle_bitstuff, "127.0.0.1", 9734, 5, False, None,
                 "Server started. Waiting for client..."),
    "name-length": (handle_name_length, "", 8080, 5, True, None,
                    "Server listening on port {port}..."),
    "crc": (handle_crc, "", 8080, 5, True, None,
            "[*] Server listening on port {port}..."),
    "roll": (handle_roll_sort, "", 8080, 3, False, 1,
             "Server is listening on port {port}..."),
}


def _first_token(prompt: str) -> str:
    tokens = input(prompt).split()
    if not tokens:
        raise ValueError("no input given")
    return tokens[0]


def _run_client(service: str, address: Address) -> None:
    if service == "bitstuff":
        bits = _first_token("Enter a binary string: ")
        print(f"After Bit Stuffing: {bit_stuff(bits)}")
        print(f"De-Stuffed Data received from Server: {request_bitstuff(bits, address)}")
    elif service == "name-length":
        name = input("Enter your name: ")
        print(f"Server response: {request_name_length(name, address)}")
    elif service == "crc":
        dataword = _first_token("Enter dataword: ")
        divisor = _first_token("Enter divisor: ")
        print(f"[✓] Received Codeword from Server: {request_crc(dataword, divisor, address)}")
    else:
        print(f"Enter {ROLL_COUNT} roll numbers:")
        numbers = [int(_first_token(f"Roll number {i}: ")) for i in range(1, ROLL_COUNT + 1)]
        print(f"Client: Sorted roll numbers: {_format_numbers(request_roll_sort(numbers, address))}")


def main(argv: list[str] | None = None) -> int:
    """Run one of the TCP services as a server or as a client."""
    parser = argparse.ArgumentParser(prog="netlab-tcp", description="Small TCP services.")
    parser.add_argument("service", choices=sorted(_SERVERS))
    parser.add_argument("role", choices=["server", "client"])
    parser.add_argument("--host", help="address to bind or connect to")
    parser.add_argument("--port", type=int, help="port to bind or connect to")
    args = parser.parse_args(argv)

    handler, bind_host, default_port, backlog, concurrent, limit, banner = _SERVERS[args.service]
    port = default_port if args.port is None else args.port

    if args.role == "client":
        address = (args.host or "127.0.0.1", port)
        try:
            _run_client(args.service, address)
        except (OSError, ValueError, EOFError) as exc:
            print(f"Request failed: {exc}", file=sys.stderr)
            return 1
        return 0

    host = bind_host if args.host is None else args.host
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((host, port))
            listener.listen(backlog)
            print(banner.format(port=port), flush=True)
            serve(listener, handler, concurrent, limit)
    except OSError as exc:
        print(f"Server failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0