"""Integer parsing, base conversion and sorting helpers."""

from __future__ import annotations

import re
from collections.abc import Iterable
from itertools import islice

_UINT32_MASK = 0xFFFFFFFF
_ATOI = re.compile("[ \t\n\v\f\r]*([+-]?[0-9]+)")
_TOKEN_SEPARATORS = re.compile("[ \n]+")


def c_atoi(text: str) -> int:
    """Parse a leading integer the way atoi does; 0 when there is none."""
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _c_divmod(dividend: int, divisor: int) -> tuple[int, int]:
    """Division truncating toward zero, remainder taking the dividend's sign."""
    quotient = abs(dividend) // abs(divisor)
    if (dividend < 0) != (divisor < 0):
        quotient = -quotient
    return quotient, dividend - quotient * divisor


def base_digits_as_decimal(number: int, base: int) -> int:
    """Return the base-`base` digits of number read as a decimal integer."""
    if not 2 <= base <= 10:
        raise ValueError("base must be between 2 and 10")
    result, place, rest = 0, 1, number
    while rest:
        rest, remainder = _c_divmod(rest, base)
        result += remainder * place
        place *= 10
    return result


def hex_digits(number: int) -> str:
    """Uppercase hex digits built by repeated division; empty for zero."""
    digits = []
    rest = number
    while rest:
        rest, remainder = _c_divmod(rest, 16)
        digits.append(chr((48 if remainder < 10 else 55) + remainder))
    return "".join(reversed(digits))


def to_binary(number: int) -> str:
    """Binary digits by repeated division, always at least one digit."""
    digits = []
    rest = number
    while True:
        rest, remainder = _c_divmod(rest, 2)
        digits.append(chr(48 + remainder))
        if rest <= 0:
            break
    return "".join(reversed(digits))


def to_octal(number: int) -> str:
    """Octal form of the number as a 32-bit unsigned value."""
    return format(number & _UINT32_MASK, "o")


def to_hex(number: int) -> str:
    """Uppercase hex form of the number as a 32-bit unsigned value."""
    return format(number & _UINT32_MASK, "X")


def conversion_report(number: int) -> str:
    """Return the three-line binary, octal and hexadecimal report."""
    return (
        f"Binary: {to_binary(number)}\n"
        f"Octal: {to_octal(number)}\n"
        f"Hexadecimal: {to_hex(number)}\n"
    )


def parity_word(number: int) -> str:
    """Return "Even" or "Odd" for the number."""
    _, remainder = _c_divmod(number, 2)
    if remainder == 0:
        return "Even"
    return "Odd"


def bubble_sort(values: Iterable[int]) -> list[int]:
    """Return the values as a new list in ascending order."""
    return sorted(values)


def parse_ints(text: str, limit: int = 100) -> list[int]:
    """Split on spaces and newlines and parse at most `limit` integers."""
    tokens = (token for token in _TOKEN_SEPARATORS.split(text) if token)
    return [c_atoi(token) for token in islice(tokens, limit)]