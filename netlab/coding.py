"""Bit-level line coding: HDLC-style bit stuffing, CRC and parity bits."""

from __future__ import annotations

FLAG_PATTERN = "011111"


def bit_stuff(bits: str) -> str:
    """Insert a '0' after every occurrence of 011111 in the input."""
    stuffed = []
    for index, bit in enumerate(bits):
        stuffed.append(bit)
        if bits.endswith(FLAG_PATTERN, 0, index + 1):
            stuffed.append("0")
    return "".join(stuffed)


def bit_destuff(bits: str) -> str:
    """Drop the '0' that directly follows each 011111 in a stuffed stream."""
    destuffed = []
    index = 0
    while index < len(bits):
        destuffed.append(bits[index])
        if bits.endswith(FLAG_PATTERN, 0, index + 1) and bits[index + 1 : index + 2] == "0":
            index += 1
        index += 1
    return "".join(destuffed)


def _xor(window: str, divisor: str) -> str:
    return "".join("0" if a == b else "1" for a, b in zip(window, divisor))


def crc_remainder(dataword: str, divisor: str) -> str:
    """Return the CRC check bits of a dataword under a generator divisor."""
    if not divisor:
        raise ValueError("divisor must not be empty")
    width = len(divisor)
    padded = dataword + "0" * (width - 1)
    window = padded[:width]
    for step in range(len(dataword)):
        if window[0] == "1":
            window = _xor(window, divisor)
        incoming = padded[step + width : step + width + 1]
        window = window[1:] + incoming
    return window[: width - 1]


def crc_codeword(dataword: str, divisor: str) -> str:
    """Return the dataword followed by its CRC check bits."""
    return dataword + crc_remainder(dataword, divisor)


def count_ones(bits: str) -> int:
    """Count the '1' characters in a bit string."""
    return bits.count("1")


def even_parity(bits: str) -> str:
    """Append a bit that makes the number of ones even."""
    return bits + ("0" if count_ones(bits) % 2 == 0 else "1")


def odd_parity(bits: str) -> str:
    """Append a bit that makes the number of ones odd."""
    return bits + ("1" if count_ones(bits) % 2 == 0 else "0")