"""Typed in-process message queues and the messages exchanged over them."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from netlab.numbers import base_digits_as_decimal, bubble_sort, c_atoi, hex_digits, parse_ints

END_WORD = "end"

ADD_TEN_TYPE = 1
ADD_TWENTY_TYPE = 2
BINARY_TYPE = 2
OCTAL_TYPE = 8
HEX_TYPE = 16
TEXT_TYPE = 1


@dataclass(frozen=True)
class Message:
    """One queued message: a positive type and its text."""

    msg_type: int
    text: str


class MessageQueue:
    """A thread-safe queue whose messages are selected by type on receipt.

    Receiving with type 0 takes the oldest message; a positive type takes the
    oldest message of exactly that type; a negative type takes the oldest
    message of the lowest type not above its absolute value.
    """

    def __init__(self) -> None:
        self._messages: deque[Message] = deque()
        self._ready = threading.Condition()

    def send(self, msg_type: int, text: str) -> None:
        """Append a message; the type must be a positive integer."""
        if msg_type < 1:
            raise ValueError("message type must be positive")
        with self._ready:
            self._messages.append(Message(msg_type, text))
            self._ready.notify_all()

    def _take(self, msg_type: int) -> Message | None:
        if msg_type == 0:
            chosen = self._messages[0] if self._messages else None
        elif msg_type > 0:
            chosen = next((m for m in self._messages if m.msg_type == msg_type), None)
        else:
            eligible = [m for m in self._messages if m.msg_type <= -msg_type]
            chosen = min(eligible, key=lambda m: m.msg_type) if eligible else None
        if chosen is not None:
            self._messages.remove(chosen)
        return chosen

    def receive(self, msg_type: int = 0, timeout: float | None = None) -> Message:
        """Wait for and remove a message matching msg_type.

        Raises TimeoutError if nothing matches within timeout seconds.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._ready:
            while True:
                message = self._take(msg_type)
                if message is not None:
                    return message
                if deadline is None:
                    self._ready.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError(f"no message of type {msg_type} arrived")
                self._ready.wait(remaining)

    def __len__(self) -> int:
        with self._ready:
            return len(self._messages)


def is_end(text: str) -> bool:
    """True when the text begins with the terminating word."""
    return text.startswith(END_WORD)


def addition_messages(number: int) -> list[Message]:
    """Messages carrying number + 10 (type 1) and number + 20 (type 2)."""
    return [
        Message(ADD_TEN_TYPE, str(number + 10)),
        Message(ADD_TWENTY_TYPE, str(number + 20)),
    ]


def conversion_messages(line: str) -> list[Message]:
    """Binary, octal and hex messages for a line of input, or the end line three times."""
    if is_end(line):
        texts = [line, line, line]
    else:
        number = c_atoi(line)
        texts = [
            str(base_digits_as_decimal(number, 2)),
            str(base_digits_as_decimal(number, 8)),
            hex_digits(number),
        ]
    return [
        Message(msg_type, text)
        for msg_type, text in zip((BINARY_TYPE, OCTAL_TYPE, HEX_TYPE), texts)
    ]


def evenodd_lines(text: str) -> list[str]:
    """Report lines for a received number; nothing for the end message."""
    if is_end(text):
        return []
    number = c_atoi(text)
    verdict = "EVEN" if number % 2 == 0 else "ODD"
    return [f"Received number: {number}", f"It is an {verdict} number."]


def sorting_lines(text: str) -> list[str]:
    """Report lines for a received list of numbers; nothing for the end message."""
    if is_end(text):
        return []
    ordered = bubble_sort(parse_ints(text, 100))
    return [
        f"Received array string: {text}",
        "Sorted array: " + "".join(f"{value} " for value in ordered),
    ]


def receive_until_end(
    queue: MessageQueue,
    msg_type: int,
    format_message: Callable[[str], Iterable[str]],
) -> Iterator[str]:
    """Yield formatted lines for each received message, stopping after the end message."""
    while True:
        message = queue.receive(msg_type)
        yield from format_message(message.text)
        if is_end(message.text):
            return