"""Minimal DER tag-length-value scanner.

Only the handful of structures needed to recognise RSA key envelopes are
supported: SEQUENCE, INTEGER, OBJECT IDENTIFIER, NULL, BIT STRING and
OCTET STRING. Full parsing is left to :mod:`cryptography`; this module
checks that the DER matches the envelope the PEM label declared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..errors import MalformedKeyError

INTEGER = 0x02
BIT_STRING = 0x03
OCTET_STRING = 0x04
NULL = 0x05
OBJECT_IDENTIFIER = 0x06
SEQUENCE = 0x30

RSA_ENCRYPTION_OID = "1.2.840.113549.1.1.1"

_MAX_LENGTH_OCTETS = 4


@dataclass(frozen=True, slots=True)
class DerValue:
    tag: int
    content: bytes

    def children(self) -> list[DerValue]:
        if self.tag != SEQUENCE:
            raise MalformedKeyError("Expected a DER SEQUENCE")
        return list(iter_values(self.content))

    def as_integer(self) -> int:
        if self.tag != INTEGER:
            raise MalformedKeyError("Expected a DER INTEGER")
        if not self.content:
            raise MalformedKeyError("Empty DER INTEGER")
        return int.from_bytes(self.content, "big", signed=True)

    def as_oid(self) -> str:
        if self.tag != OBJECT_IDENTIFIER:
            raise MalformedKeyError("Expected a DER OBJECT IDENTIFIER")
        return decode_oid(self.content)

    def as_bit_string(self) -> bytes:
        if self.tag != BIT_STRING:
            raise MalformedKeyError("Expected a DER BIT STRING")
        if not self.content or self.content[0] != 0:
            raise MalformedKeyError("Unsupported DER BIT STRING padding")
        return self.content[1:]

    def as_octet_string(self) -> bytes:
        if self.tag != OCTET_STRING:
            raise MalformedKeyError("Expected a DER OCTET STRING")
        return self.content


def _read_length(data: bytes, offset: int) -> tuple[int, int]:
    if offset >= len(data):
        raise MalformedKeyError("Truncated DER length")
    first = data[offset]
    offset += 1
    if first < 0x80:
        return first, offset
    count = first & 0x7F
    if count == 0:
        raise MalformedKeyError("Indefinite DER lengths are not allowed")
    if count > _MAX_LENGTH_OCTETS or offset + count > len(data):
        raise MalformedKeyError("Invalid DER length")
    length = int.from_bytes(data[offset : offset + count], "big")
    if length < 0x80 or data[offset] == 0:
        raise MalformedKeyError("Non-minimal DER length")
    return length, offset + count


def read_value(data: bytes, offset: int = 0) -> tuple[DerValue, int]:
    """Read one TLV from ``data`` at ``offset``; return it and the next offset."""

    if offset >= len(data):
        raise MalformedKeyError("Truncated DER value")
    tag = data[offset]
    if tag & 0x1F == 0x1F:
        raise MalformedKeyError("High-tag-number DER values are not supported")
    length, start = _read_length(data, offset + 1)
    end = start + length
    if end > len(data):
        raise MalformedKeyError("Truncated DER value")
    return DerValue(tag=tag, content=bytes(data[start:end])), end


def iter_values(data: bytes) -> Iterator[DerValue]:
    offset = 0
    while offset < len(data):
        value, offset = read_value(data, offset)
        yield value


def parse_single(data: bytes) -> DerValue:
    """Parse ``data`` as exactly one TLV with no trailing bytes."""

    value, end = read_value(data, 0)
    if end != len(data):
        raise MalformedKeyError("Trailing bytes after DER value")
    return value


def decode_oid(content: bytes) -> str:
    if not content:
        raise MalformedKeyError("Empty DER OBJECT IDENTIFIER")
    arcs: list[int] = []
    value = 0
    for index, byte in enumerate(content):
        if value == 0 and byte == 0x80:
            raise MalformedKeyError("Non-minimal OBJECT IDENTIFIER arc")
        value = (value << 7) | (byte & 0x7F)
        if byte & 0x80:
            if index == len(content) - 1:
                raise MalformedKeyError("Truncated OBJECT IDENTIFIER")
            continue
        arcs.append(value)
        value = 0
    first = arcs[0]
    if first < 40:
        head = [0, first]
    elif first < 80:
        head = [1, first - 40]
    else:
        head = [2, first - 80]
    return ".".join(str(arc) for arc in head + arcs[1:])


def algorithm_oid(identifier: DerValue) -> str:
    """Return the OID of an ``AlgorithmIdentifier`` SEQUENCE."""

    parts = identifier.children()
    if not parts:
        raise MalformedKeyError("Empty AlgorithmIdentifier")
    return parts[0].as_oid()


__all__ = [
    "BIT_STRING",
    "DerValue",
    "INTEGER",
    "NULL",
    "OBJECT_IDENTIFIER",
    "OCTET_STRING",
    "RSA_ENCRYPTION_OID",
    "SEQUENCE",
    "algorithm_oid",
    "decode_oid",
    "iter_values",
    "parse_single",
    "read_value",
]
