"""Line-based TCP chat: a one-to-one chat and a small multi-client chat room."""

from __future__ import annotations

import argparse
import socket
import sys
import threading
from typing import TextIO

FRAME_SIZE = 200
DISCONNECT = "!DISCONNECT\n"
BYE = "bye"
CHAT_ADDRESS = ("127.0.0.1", 8760)
MAX_CLIENTS = 3


def frame_message(text: str) -> bytes:
    """Encode text as one fixed-size, NUL-padded chat frame."""
    payload = text.encode("utf-8")[: FRAME_SIZE - 1]
    return payload.ljust(FRAME_SIZE, b"\0")


def unframe_message(data: bytes) -> str:
    """Decode the text of a chat frame, up to its first NUL byte."""
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _recv_frame(sock: socket.socket) -> bytes | None:
    """Read one whole frame; None when the connection ends first."""
    chunks = []
    remaining = FRAME_SIZE
    while remaining:
        try:
            chunk = sock.recv(remaining)
        except OSError:
            return None
        if not chunk:
            return None
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class _Writer:
    """Thread-safe line output to a stream, stdout unless one is given."""

    def __init__(self, output: TextIO | None) -> None:
        self._output = output
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        stream = self._output if self._output is not None else sys.stdout
        with self._lock:
            stream.write(text)
            stream.flush()


class ChatPeer:
    """One end of a two-party chat over a connected socket."""

    def __init__(
        self,
        sock: socket.socket,
        peer_name: str = "Server",
        output: TextIO | None = None,
        stop_word: str | None = BYE,
    ) -> None:
        self.sock = sock
        self.peer_name = peer_name
        self.stop_word = stop_word
        self._writer = _Writer(output)

    def _is_stop(self, text: str) -> bool:
        return self.stop_word is not None and text.startswith(self.stop_word)

    def send(self, text: str) -> bool:
        """Send one line; True when it is the word that ends the chat."""
        self.sock.sendall(frame_message(text))
        return self._is_stop(text)

    def receive_loop(self) -> bool:
        """Print incoming lines until the stop word (True) or the connection ends (False)."""
        while True:
            frame = _recv_frame(self.sock)
            if frame is None:
                return False
            text = unframe_message(frame)
            self._writer.write(f"{self.peer_name}: {text}")
            if self._is_stop(text):
                self._writer.write(f"{self.peer_name} has disconnected.\n")
                return True

    def close(self) -> None:
        """Shut down and close the socket."""
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


class ChatRoom:
    """A server that accepts a fixed number of clients and broadcasts to them."""

    def __init__(
        self,
        listener: socket.socket,
        max_clients: int = MAX_CLIENTS,
        output: TextIO | None = None,
    ) -> None:
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")
        self.listener = listener
        self.max_clients = max_clients
        self._writer = _Writer(output)
        self._clients: list[socket.socket] = []
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def accept_clients(self) -> int:
        """Accept clients until the room is full; return how many joined."""
        while len(self._clients) < self.max_clients:
            try:
                conn, _ = self.listener.accept()
            except OSError:
                break
            with self._lock:
                self._clients.append(conn)
                number = len(self._clients)
            self._writer.write(f"Client[{number}] Joined!\n")
            worker = threading.Thread(
                target=self._receive_from, args=(conn, number), daemon=True
            )
            worker.start()
            self._threads.append(worker)
        return len(self._clients)

    def _receive_from(self, conn: socket.socket, number: int) -> None:
        while True:
            frame = _recv_frame(conn)
            if frame is None:
                return
            text = unframe_message(frame)
            if text == DISCONNECT:
                self._writer.write(f"Client[{number}] Left!\n")
            else:
                self._writer.write(f"Client[{number}]: {text}")

    def broadcast(self, text: str) -> int:
        """Send a line to every client; return how many received it."""
        frame = frame_message(text)
        with self._lock:
            clients = list(self._clients)
        delivered = 0
        for conn in clients:
            try:
                conn.sendall(frame)
            except OSError:
                continue
            delivered += 1
        return delivered

    def close(self) -> None:
        """Close every client connection and the listening socket."""
        with self._lock:
            clients, self._clients = self._clients, []
        for conn in clients:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()
        self.listener.close()
        for worker in self._threads:
            worker.join(timeout=1.0)


def _pump_stdin(peer: ChatPeer, done: threading.Event) -> None:
    try:
        while True:
            line = sys.stdin.readline()
            if not line:
                return
            if peer.send(line):
                print(f"Disconnected from {peer.peer_name.lower()}.", flush=True)
                return
    except OSError:
        return
    finally:
        done.set()


def _run_peer(peer: ChatPeer, stop_on_receive: bool) -> int:
    done = threading.Event()

    def receive() -> None:
        peer.receive_loop()
        if stop_on_receive:
            done.set()

    threading.Thread(target=_pump_stdin, args=(peer, done), daemon=True).start()
    threading.Thread(target=receive, daemon=True).start()
    try:
        done.wait()
    except KeyboardInterrupt:
        pass
    peer.close()
    return 0


def _room_server(address: tuple[str, int], max_clients: int) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(address)
        print("Chatroom Ready!", flush=True)
        listener.listen(max_clients)
        room = ChatRoom(listener, max_clients)
        threading.Thread(target=room.accept_clients, daemon=True).start()
        try:
            while True:
                line = sys.stdin.readline()
                if not line or line == DISCONNECT:
                    break
                room.broadcast(line)
        except KeyboardInterrupt:
            pass
        room.close()
    return 0


def _unicast_server(address: tuple[str, int]) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(address)
        listener.listen(1)
        print(f"Server listening on {address[0]}:{address[1]}...", flush=True)
        conn, _ = listener.accept()
    print("Client connected.", flush=True)
    return _run_peer(ChatPeer(conn, "Client", stop_word=BYE), stop_on_receive=True)


def main(argv: list[str] | None = None) -> int:
    """Run a chat room or a one-to-one chat, as server or client."""
    parser = argparse.ArgumentParser(prog="netlab-chat", description="Terminal TCP chat.")
    parser.add_argument(
        "mode", choices=["room-server", "room-client", "server", "client"]
    )
    parser.add_argument("--host", default=CHAT_ADDRESS[0])
    parser.add_argument("--port", type=int, default=CHAT_ADDRESS[1])
    parser.add_argument("--max-clients", type=int, default=MAX_CLIENTS)
    args = parser.parse_args(argv)
    address = (args.host, args.port)

    try:
        if args.mode == "room-server":
            return _room_server(address, args.max_clients)
        if args.mode == "server":
            return _unicast_server(address)
        try:
            sock = socket.create_connection(address)
        except OSError:
            if args.mode == "room-client":
                print("Unable to establish connection!")
                return 0
            raise
        if args.mode == "room-client":
            peer = ChatPeer(sock, "Server", stop_word=DISCONNECT)
            return _run_peer(peer, stop_on_receive=False)
        print(f"Connected to server at {address[0]}:{address[1]}", flush=True)
        return _run_peer(ChatPeer(sock, "Server", stop_word=BYE), stop_on_receive=True)
    except OSError as exc:
        print(f"Chat failed: {exc}", file=sys.stderr)
        return 1