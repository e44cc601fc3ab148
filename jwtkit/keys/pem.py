"""RFC 7468 PEM framing.

Anything before the first ``-----BEGIN`` line (``Proc-Type`` notes,
``Bag Attributes`` dumps, free-form comments) is ignored.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from ..errors import MalformedKeyError, UnsupportedKeyError

_BEGIN = "-----BEGIN "
_END = "-----END "
_DASHES = "-----"


class PemFormat(str, Enum):
    """Key envelopes recognised by the PEM label."""

    PKCS1_PRIVATE = "RSA PRIVATE KEY"
    PKCS8_PRIVATE = "PRIVATE KEY"
    SPKI_PUBLIC = "PUBLIC KEY"
    PKCS1_PUBLIC = "RSA PUBLIC KEY"
    CERTIFICATE = "CERTIFICATE"

    @property
    def is_private(self) -> bool:
        return self in (PemFormat.PKCS1_PRIVATE, PemFormat.PKCS8_PRIVATE)


_UNSUPPORTED_LABELS = {
    "ENCRYPTED PRIVATE KEY": "Encrypted PKCS#8 keys are not supported",
    "EC PRIVATE KEY": "EC keys are not supported",
    "DSA PRIVATE KEY": "DSA keys are not supported",
    "OPENSSH PRIVATE KEY": "OpenSSH keys are not supported",
}


@dataclass(frozen=True, slots=True)
class PemBlock:
    format: PemFormat
    der: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.format.value


def _to_text(data: str | bytes) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("ascii")
    except UnicodeDecodeError:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedKeyError("PEM data is not text") from exc


def _label_of(line: str, prefix: str) -> str:
    if not line.endswith(_DASHES) or len(line) <= len(prefix) + len(_DASHES):
        raise MalformedKeyError("Invalid PEM boundary line")
    return line[len(prefix) : -len(_DASHES)]


def _split_headers(body: list[str]) -> tuple[dict[str, str], list[str]]:
    """Separate RFC 1421 encapsulated headers from the base64 body."""

    headers: dict[str, str] = {}
    index = 0
    while index < len(body) and ":" in body[index]:
        name, _, value = body[index].partition(":")
        headers[name.strip()] = value.strip()
        index += 1
    if headers:
        while index < len(body) and not body[index]:
            index += 1
    return headers, body[index:]


def parse_pem(data: str | bytes) -> PemBlock:
    """Parse the first PEM block in ``data``.

    Raises
    ------
    MalformedKeyError
        Missing or mismatched boundaries, or a body that is not base64.
    UnsupportedKeyError
        A label for a key type this package cannot use, or an encrypted key.
    """

    lines = [line.strip() for line in _to_text(data).splitlines()]
    try:
        start = next(i for i, line in enumerate(lines) if line.startswith(_BEGIN))
    except StopIteration:
        raise MalformedKeyError("No PEM BEGIN line found") from None

    label = _label_of(lines[start], _BEGIN)
    try:
        end = next(i for i in range(start + 1, len(lines)) if lines[i].startswith(_END))
    except StopIteration:
        raise MalformedKeyError(f"No PEM END line for '{label}'") from None
    if _label_of(lines[end], _END) != label:
        raise MalformedKeyError("PEM BEGIN and END labels differ")

    if label in _UNSUPPORTED_LABELS:
        raise UnsupportedKeyError(_UNSUPPORTED_LABELS[label])
    try:
        pem_format = PemFormat(label)
    except ValueError:
        raise UnsupportedKeyError(f"Unsupported PEM label '{label}'") from None

    headers, body = _split_headers(lines[start + 1 : end])
    if "ENCRYPTED" in headers.get("Proc-Type", "").upper() or "DEK-Info" in headers:
        raise UnsupportedKeyError("Encrypted PEM keys are not supported")

    encoded = "".join(body)
    if not encoded:
        raise MalformedKeyError("PEM body is empty")
    try:
        der = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedKeyError("PEM body is not valid base64") from exc

    return PemBlock(format=pem_format, der=der, headers=headers)


__all__ = ["PemBlock", "PemFormat", "parse_pem"]
