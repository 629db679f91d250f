import io
import os
import socket
import threading

import pytest

from netlab.coding import count_ones
from netlab.local_services import (
    handle_conversion,
    handle_even_odd,
    handle_even_parity_datagram,
    handle_odd_parity,
    main,
    receive_sorted_array,
    request_conversion,
    request_even_odd,
    request_even_parity,
    request_odd_parity,
    send_sorted_array,
    unix_listener,
)
from netlab.numbers import conversion_report
from netlab.tcp_services import pack_ints


@pytest.fixture
def sock_path(tmp_path):
    return str(tmp_path / "s")


def exchange(path, handler, client):
    """Serve one connection with handler while client(path) runs; return both results."""
    box = {}
    with unix_listener(path) as listener:
        listener.settimeout(5)

        def worker():
            conn, _ = listener.accept()
            with conn:
                box["server"] = handler(conn)

        thread = threading.Thread(target=worker)
        thread.start()
        reply = client(path)
        thread.join(5)
    return box.get("server"), reply


def test_conversion_report_round_trip(sock_path):
    server, reply = exchange(sock_path, handle_conversion, lambda p: request_conversion(10, p))
    assert reply == server == conversion_report(10)
    assert reply == "Binary: 1010\nOctal: 12\nHexadecimal: A\n"


@pytest.mark.parametrize("number, word", [(7, "Odd"), (4, "Even"), (0, "Even"), (-3, "Odd")])
def test_even_odd(sock_path, number, word):
    server, reply = exchange(sock_path, handle_even_odd, lambda p: request_even_odd(number, p))
    assert reply == word
    assert server == word


@pytest.mark.parametrize("bits", ["10101", "11", "0", ""])
def test_odd_parity_makes_ones_odd(sock_path, bits):
    server, reply = exchange(sock_path, handle_odd_parity, lambda p: request_odd_parity(bits, p))
    assert reply == server
    assert reply[:-1] == bits
    assert len(reply) == len(bits) + 1
    assert count_ones(reply) % 2 == 1


@pytest.mark.parametrize("values", [[5, -1, 3, 3, 0], [], [42]])
def test_sorted_array_round_trip(sock_path, values):
    server, reply = exchange(
        sock_path, lambda conn: send_sorted_array(conn, values), receive_sorted_array
    )
    assert reply == sorted(values)
    assert server == sorted(values)


def test_receive_sorted_array_rejects_negative_length(sock_path):
    def handler(conn):
        conn.sendall(pack_ints([-1]))

    with pytest.raises(ValueError):
        exchange(sock_path, handler, receive_sorted_array)


def test_receive_sorted_array_short_payload(sock_path):
    def handler(conn):
        conn.sendall(pack_ints([3, 1]))

    with pytest.raises(ConnectionError):
        exchange(sock_path, handler, receive_sorted_array)


def test_unix_listener_replaces_stale_file_and_cleans_up(sock_path):
    with open(sock_path, "w") as stale:
        stale.write("old")
    with unix_listener(sock_path) as listener:
        assert listener.getsockname() == sock_path
    assert not os.path.exists(sock_path)


@pytest.mark.parametrize("bits", ["1101", "1111", "0"])
def test_even_parity_datagram(bits):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server_sock:
        server_sock.bind(("127.0.0.1", 0))
        server_sock.settimeout(5)
        box = {}
        thread = threading.Thread(
            target=lambda: box.update(server=handle_even_parity_datagram(server_sock))
        )
        thread.start()
        reply = request_even_parity(bits, server_sock.getsockname())
        thread.join(5)
    assert reply == box["server"]
    assert reply[:-1] == bits
    assert count_ones(reply) % 2 == 0


def test_main_even_odd_client(sock_path, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("7\n"))
    _, status = exchange(
        sock_path,
        handle_even_odd,
        lambda p: main(["even-odd", "client", "--path", p]),
    )
    assert status == 0
    assert "The number is: Odd" in capsys.readouterr().out


def test_main_client_without_server_fails(sock_path, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("5\n"))
    assert main(["even-odd", "client", "--path", sock_path]) == 1