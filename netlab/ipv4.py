"""Classful IPv4 address analysis."""

from __future__ import annotations

import argparse
import re
from dataclasses import dataclass
from enum import Enum

_SPACE = "[ \t\n\v\f\r]*"
_INT = "[+-]?[0-9]+"
_FIRST_OCTET = re.compile(f"{_SPACE}({_INT})")
_DOTTED_QUAD = re.compile(r"\.".join([f"{_SPACE}({_INT})"] * 4))


class InvalidAddressError(ValueError):
    """Raised when a string is not a usable IPv4 address."""


class IPClass(Enum):
    """The five classes of the classful IPv4 scheme."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @classmethod
    def from_octet(cls, octet: int) -> IPClass:
        """Return the class that a first octet in 0..255 belongs to."""
        if not 0 <= octet <= 255:
            raise InvalidAddressError("Invalid first octet value.")
        if octet <= 127:
            return cls.A
        if octet <= 191:
            return cls.B
        if octet <= 223:
            return cls.C
        if octet <= 239:
            return cls.D
        return cls.E

    @property
    def label(self) -> str:
        """Short label, as printed by the class-only check."""
        return _SHORT_LABELS[self]

    @property
    def detailed_label(self) -> str:
        """Label used in the full address report."""
        return _DETAILED_LABELS[self]

    @property
    def network_octets(self) -> int:
        """Number of leading octets that form the network part (0 if none)."""
        return _NETWORK_OCTETS[self]


_SHORT_LABELS = {
    IPClass.A: "Class A",
    IPClass.B: "Class B",
    IPClass.C: "Class C",
    IPClass.D: "Class D (Multicast)",
    IPClass.E: "Class E (Experimental)",
}

_DETAILED_LABELS = {
    IPClass.A: "Class A",
    IPClass.B: "Class B",
    IPClass.C: "Class C",
    IPClass.D: "Class D (Multicast Address)",
    IPClass.E: "Class E (Experimental Use)",
}

_NETWORK_OCTETS = {IPClass.A: 1, IPClass.B: 2, IPClass.C: 3, IPClass.D: 0, IPClass.E: 0}


@dataclass(frozen=True)
class AddressInfo:
    """A valid IPv4 address together with its class details."""

    octets: tuple[int, int, int, int]
    ip_class: IPClass

    def _fill(self, filler: str) -> str | None:
        kept = self.ip_class.network_octets
        if not kept:
            return None
        parts = [str(octet) for octet in self.octets[:kept]]
        return ".".join(parts + [filler] * (4 - kept))

    @property
    def network_id(self) -> str | None:
        return self._fill("0")

    @property
    def broadcast_id(self) -> str | None:
        return self._fill("255")

    @property
    def default_mask(self) -> str | None:
        kept = self.ip_class.network_octets
        if not kept:
            return None
        return ".".join(["255"] * kept + ["0"] * (4 - kept))

    def describe(self) -> str:
        """Return the multi-line report for this address."""
        lines = ["Valid IPv4 Address.", self.ip_class.detailed_label]
        if self.network_id is not None:
            lines += [
                f"Network ID: {self.network_id}",
                f"Broadcast ID: {self.broadcast_id}",
                f"Default Mask: {self.default_mask}",
            ]
        return "\n".join(lines)


def first_octet_class(ip: str) -> IPClass:
    """Classify an address by reading only its leading integer."""
    match = _FIRST_OCTET.match(ip)
    if match is None or not 0 <= int(match.group(1)) <= 255:
        raise InvalidAddressError(
            "Invalid IP address format or first octet out of range."
        )
    return IPClass.from_octet(int(match.group(1)))


def analyze_address(ip: str) -> AddressInfo:
    """Parse a dotted quad with nothing trailing and report its class."""
    match = _DOTTED_QUAD.fullmatch(ip)
    if match is None:
        raise InvalidAddressError("Invalid IP address format.")
    octets = tuple(int(group) for group in match.groups())
    for position, octet in enumerate(octets, start=1):
        if not 0 <= octet <= 255:
            raise InvalidAddressError(
                f"Invalid IP address: octet {position} out of range."
            )
    return AddressInfo(octets, IPClass.from_octet(octets[0]))  # type: ignore[arg-type]


def main(argv: list[str] | None = None) -> int:
    """Classify an IPv4 address given as an argument or read from stdin."""
    parser = argparse.ArgumentParser(
        prog="netlab-ipv4", description="Report the class of an IPv4 address."
    )
    parser.add_argument("address", nargs="?", help="address in x.x.x.x form")
    parser.add_argument(
        "--class-only",
        action="store_true",
        help="only look at the first octet and print the class",
    )
    args = parser.parse_args(argv)
    limit = 19 if args.class_only else 99

    address = args.address
    if address is None:
        try:
            line = input("Enter an IPv4 address (x.x.x.x): ")
        except EOFError:
            line = ""
        tokens = line.split()
        address = tokens[0][:limit] if tokens else ""

    try:
        if args.class_only:
            print(first_octet_class(address).label)
        else:
            print(analyze_address(address).describe())
    except InvalidAddressError as exc:
        print(exc)
    return 0