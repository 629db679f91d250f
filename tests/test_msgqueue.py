import threading

import pytest

from netlab.msgqueue import (
    Message,
    MessageQueue,
    addition_messages,
    conversion_messages,
    evenodd_lines,
    is_end,
    receive_until_end,
    sorting_lines,
)


def test_receive_any_is_fifo():
    queue = MessageQueue()
    queue.send(2, "first")
    queue.send(1, "second")
    assert queue.receive(0) == Message(2, "first")
    assert queue.receive(0) == Message(1, "second")
    assert len(queue) == 0


def test_receive_by_type_skips_others():
    queue = MessageQueue()
    queue.send(1, "a")
    queue.send(2, "b")
    queue.send(2, "c")
    assert queue.receive(2).text == "b"
    assert len(queue) == 2
    assert queue.receive(1).text == "a"


def test_negative_type_takes_lowest_eligible():
    queue = MessageQueue()
    queue.send(5, "five")
    queue.send(3, "three")
    queue.send(1, "one")
    assert queue.receive(-4).text == "one"
    assert queue.receive(-4).text == "three"
    with pytest.raises(TimeoutError):
        queue.receive(-4, timeout=0.01)


def test_invalid_type_rejected():
    queue = MessageQueue()
    with pytest.raises(ValueError):
        queue.send(0, "x")


def test_timeout_when_no_match():
    queue = MessageQueue()
    queue.send(1, "x")
    with pytest.raises(TimeoutError):
        queue.receive(7, timeout=0.01)
    assert len(queue) == 1


def test_blocking_receive_wakes_on_send():
    queue = MessageQueue()
    results = []
    worker = threading.Thread(target=lambda: results.append(queue.receive(16, timeout=5)))
    worker.start()
    queue.send(16, "FF")
    worker.join(5)
    assert results == [Message(16, "FF")]


def test_is_end():
    assert is_end("end\n")
    assert is_end("ending")
    assert not is_end(" end")


@pytest.mark.parametrize("number", [0, 5, -40, 123456])
def test_addition_messages(number):
    ten, twenty = addition_messages(number)
    assert (ten.msg_type, twenty.msg_type) == (1, 2)
    assert int(ten.text) - number == 10
    assert int(twenty.text) - number == 20


@pytest.mark.parametrize("number", [1, 10, 255, 4096])
def test_conversion_messages_round_trip(number):
    binary, octal, hexa = conversion_messages(f"{number}\n")
    assert [m.msg_type for m in (binary, octal, hexa)] == [2, 8, 16]
    assert int(binary.text, 2) == number
    assert int(octal.text, 8) == number
    assert int(hexa.text, 16) == number
    assert hexa.text == hexa.text.upper()


def test_conversion_messages_end_forwarded():
    messages = conversion_messages("end\n")
    assert [m.text for m in messages] == ["end\n"] * 3


def test_evenodd_lines():
    assert evenodd_lines("7\n") == ["Received number: 7", "It is an ODD number."]
    assert evenodd_lines("12\n")[1] == "It is an EVEN number."
    assert evenodd_lines("end\n") == []


def test_sorting_lines():
    lines = sorting_lines("3 1 2\n")
    assert lines[0] == "Received array string: 3 1 2\n"
    assert lines[1] == "Sorted array: 1 2 3 "
    assert sorting_lines("end") == []


def test_receive_until_end_stops_at_end():
    queue = MessageQueue()
    for message in conversion_messages("6\n") + conversion_messages("end\n"):
        queue.send(message.msg_type, message.text)
    queue.send(2, "leftover")

    def fmt(text):
        lines = [f"Dec to Binary: {text}"]
        if is_end(text):
            lines.append("Program terminated")
        return lines

    output = list(receive_until_end(queue, 2, fmt))
    assert output[-1] == "Program terminated"
    assert len(output) == 3
    assert int(output[0].split(": ")[1], 2) == 6
    assert queue.receive(2, timeout=0.1).text == "leftover"


def test_receive_until_end_with_evenodd():
    queue = MessageQueue()
    for text in ["4\n", "9\n", "end\n"]:
        queue.send(1, text)
    output = list(receive_until_end(queue, 0, evenodd_lines))
    assert output == evenodd_lines("4\n") + evenodd_lines("9\n")
    assert len(queue) == 0