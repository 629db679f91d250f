import io
import socket
import threading
import time

import pytest

from netlab.chat import (
    FRAME_SIZE,
    ChatPeer,
    ChatRoom,
    frame_message,
    unframe_message,
)


def _recv_exact(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_frame_is_fixed_size_and_nul_padded():
    frame = frame_message("hi\n")
    assert len(frame) == FRAME_SIZE
    assert frame.startswith(b"hi\n\0")
    assert set(frame[3:]) == {0}


@pytest.mark.parametrize("text", ["", "hello\n", "bye\n", "!DISCONNECT\n", "héllo wörld\n"])
def test_frame_round_trip(text):
    assert unframe_message(frame_message(text)) == text


def test_frame_truncates_long_text():
    text = "a" * 300
    assert unframe_message(frame_message(text)) == text[: FRAME_SIZE - 1]
    assert len(frame_message(text)) == FRAME_SIZE


def test_unframe_without_nul_keeps_everything():
    assert unframe_message(b"abc") == "abc"


def test_peer_receive_loop_stops_on_stop_word():
    a, b = socket.socketpair()
    out = io.StringIO()
    peer = ChatPeer(a, "Server", out, "bye")
    b.sendall(frame_message("hello\n"))
    b.sendall(frame_message("bye\n"))
    assert peer.receive_loop() is True
    assert out.getvalue() == "Server: hello\nServer: bye\nServer has disconnected.\n"
    peer.close()
    b.close()


def test_peer_receive_loop_returns_false_on_close():
    a, b = socket.socketpair()
    out = io.StringIO()
    peer = ChatPeer(a, "Client", out, "bye")
    b.sendall(frame_message("one\n"))
    b.close()
    assert peer.receive_loop() is False
    assert out.getvalue() == "Client: one\n"
    peer.close()


def test_peer_reassembles_split_frames():
    a, b = socket.socketpair()
    out = io.StringIO()
    peer = ChatPeer(a, "Server", out, "bye")
    frame = frame_message("split\n")
    b.sendall(frame[:50])
    b.sendall(frame[50:])
    b.close()
    assert peer.receive_loop() is False
    assert out.getvalue() == "Server: split\n"
    peer.close()


def test_peer_send_reports_stop_word():
    a, b = socket.socketpair()
    peer = ChatPeer(a, "Server", io.StringIO(), "bye")
    assert peer.send("hello\n") is False
    assert peer.send("bye now\n") is True
    assert unframe_message(_recv_exact(b, FRAME_SIZE)) == "hello\n"
    assert unframe_message(_recv_exact(b, FRAME_SIZE)) == "bye now\n"
    peer.close()
    b.close()


def test_peer_without_stop_word_never_stops_on_send():
    a, b = socket.socketpair()
    peer = ChatPeer(a, "Server", io.StringIO(), None)
    assert peer.send("bye\n") is False
    assert len(_recv_exact(b, FRAME_SIZE)) == FRAME_SIZE
    peer.close()
    b.close()


def test_room_rejects_zero_clients():
    with socket.socket() as listener:
        with pytest.raises(ValueError):
            ChatRoom(listener, 0, io.StringIO())


def test_room_accepts_broadcasts_and_relays():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(2)
    address = listener.getsockname()
    out = io.StringIO()
    room = ChatRoom(listener, 2, out)
    result = {}
    acceptor = threading.Thread(target=lambda: result.update(count=room.accept_clients()))
    acceptor.start()

    first = socket.create_connection(address)
    assert _wait_for(lambda: "Client[1] Joined!\n" in out.getvalue())
    second = socket.create_connection(address)
    acceptor.join(timeout=5)
    assert result["count"] == 2
    assert "Client[2] Joined!\n" in out.getvalue()

    assert room.broadcast("hi all\n") == 2
    assert unframe_message(_recv_exact(first, FRAME_SIZE)) == "hi all\n"
    assert unframe_message(_recv_exact(second, FRAME_SIZE)) == "hi all\n"

    first.sendall(frame_message("hello\n"))
    assert _wait_for(lambda: "Client[1]: hello\n" in out.getvalue())
    second.sendall(frame_message("!DISCONNECT\n"))
    assert _wait_for(lambda: "Client[2] Left!\n" in out.getvalue())

    room.close()
    assert _recv_exact(first, FRAME_SIZE) == b""
    assert room.broadcast("late\n") == 0
    first.close()
    second.close()


def test_room_accept_stops_when_listener_closed():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    room = ChatRoom(listener, 3, io.StringIO())
    listener.close()
    assert room.accept_clients() == 0