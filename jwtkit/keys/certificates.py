"""X.509 certificate helpers for RSA verifiers."""

from __future__ import annotations

import hashlib

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ..codec import b64url_encode
from ..errors import MalformedKeyError, UnsupportedKeyError
from .pem import PemFormat, parse_pem

_THUMBPRINT_HASHES = {"sha1": hashlib.sha1, "sha256": hashlib.sha256}


def load_certificate(data: str | bytes | x509.Certificate) -> x509.Certificate:
    """Load a PEM ``CERTIFICATE`` block (or pass a loaded certificate through)."""

    if isinstance(data, x509.Certificate):
        return data
    block = parse_pem(data)
    if block.format is not PemFormat.CERTIFICATE:
        raise UnsupportedKeyError(f"Expected a CERTIFICATE, found '{block.label}'")
    return load_der_certificate(block.der)


def load_der_certificate(der: bytes) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise MalformedKeyError("Invalid X.509 certificate") from exc


def thumbprint(data: str | bytes | x509.Certificate, algorithm: str = "sha1") -> str:
    """Return the base64url ``x5t`` (SHA-1) or ``x5t#S256`` (SHA-256) thumbprint."""

    try:
        hash_factory = _THUMBPRINT_HASHES[algorithm.lower()]
    except KeyError:
        raise ValueError(f"Unsupported thumbprint algorithm '{algorithm}'") from None
    certificate = load_certificate(data)
    der = certificate.public_bytes(serialization.Encoding.DER)
    return b64url_encode(hash_factory(der).digest())


def thumbprint_headers(data: str | bytes | x509.Certificate) -> dict[str, str]:
    """Header members identifying ``data``; pass them as extra header fields."""

    certificate = load_certificate(data)
    return {
        "x5t": thumbprint(certificate, "sha1"),
        "x5t#S256": thumbprint(certificate, "sha256"),
    }


__all__ = [
    "load_certificate",
    "load_der_certificate",
    "thumbprint",
    "thumbprint_headers",
]
