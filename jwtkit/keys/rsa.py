"""Load RSA keys from PEM and enforce a minimum modulus size."""

from __future__ import annotations

import logging

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..errors import MalformedKeyError, UnsupportedKeyError, WeakKeyError
from . import der as asn1
from .certificates import load_der_certificate
from .pem import PemBlock, PemFormat, parse_pem

logger = logging.getLogger(__name__)

DEFAULT_MIN_RSA_KEY_BITS = 2048

_KNOWN_KEY_OIDS = {
    "1.2.840.10045.2.1": "EC",
    "1.2.840.10040.4.1": "DSA",
    "1.2.840.113549.1.1.10": "RSASSA-PSS",
    "1.3.101.112": "Ed25519",
    "1.3.101.113": "Ed448",
}

PrivateKeyInput = str | bytes | rsa.RSAPrivateKey
PublicKeyInput = str | bytes | rsa.RSAPublicKey | rsa.RSAPrivateKey | x509.Certificate


def _require_rsa_oid(identifier: asn1.DerValue) -> None:
    oid = asn1.algorithm_oid(identifier)
    if oid != asn1.RSA_ENCRYPTION_OID:
        name = _KNOWN_KEY_OIDS.get(oid, oid)
        raise UnsupportedKeyError(f"Expected an RSA key, found {name}")


def _check_pkcs1_private(der: bytes) -> None:
    parts = asn1.parse_single(der).children()
    if len(parts) < 9 or any(part.tag != asn1.INTEGER for part in parts[:9]):
        raise MalformedKeyError("Invalid PKCS#1 RSAPrivateKey structure")
    if parts[0].as_integer() != 0:
        raise UnsupportedKeyError("Multi-prime RSA keys are not supported")


def _check_pkcs8_private(der: bytes) -> None:
    parts = asn1.parse_single(der).children()
    if len(parts) < 3 or parts[0].tag != asn1.INTEGER or parts[1].tag != asn1.SEQUENCE:
        raise MalformedKeyError("Invalid PKCS#8 PrivateKeyInfo structure")
    _require_rsa_oid(parts[1])
    _check_pkcs1_private(parts[2].as_octet_string())


def _pkcs1_public_numbers(der: bytes) -> rsa.RSAPublicNumbers:
    parts = asn1.parse_single(der).children()
    if len(parts) != 2:
        raise MalformedKeyError("Invalid PKCS#1 RSAPublicKey structure")
    modulus, exponent = (part.as_integer() for part in parts)
    if modulus <= 0 or exponent <= 0:
        raise MalformedKeyError("Invalid PKCS#1 RSAPublicKey values")
    return rsa.RSAPublicNumbers(e=exponent, n=modulus)


def _check_spki(der: bytes) -> None:
    parts = asn1.parse_single(der).children()
    if len(parts) != 2 or parts[0].tag != asn1.SEQUENCE:
        raise MalformedKeyError("Invalid SubjectPublicKeyInfo structure")
    _require_rsa_oid(parts[0])
    _pkcs1_public_numbers(parts[1].as_bit_string())


def enforce_key_strength(key: rsa.RSAPrivateKey | rsa.RSAPublicKey, min_key_bits: int) -> None:
    if key.key_size < min_key_bits:
        raise WeakKeyError(f"RSA key is {key.key_size} bits; at least {min_key_bits} bits required")


def _load_private(block: PemBlock) -> rsa.RSAPrivateKey:
    if block.format is PemFormat.PKCS1_PRIVATE:
        _check_pkcs1_private(block.der)
    else:
        _check_pkcs8_private(block.der)
    try:
        key = serialization.load_der_private_key(block.der, password=None)
    except TypeError as exc:
        raise UnsupportedKeyError("Encrypted private keys are not supported") from exc
    except UnsupportedAlgorithm as exc:
        raise UnsupportedKeyError("Unsupported private key algorithm") from exc
    except ValueError as exc:
        raise MalformedKeyError("Invalid RSA private key") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise UnsupportedKeyError("Expected an RSA private key")
    return key


def _load_public(block: PemBlock) -> rsa.RSAPublicKey:
    if block.format is PemFormat.PKCS1_PUBLIC:
        numbers = _pkcs1_public_numbers(block.der)
        try:
            return numbers.public_key()
        except ValueError as exc:
            raise MalformedKeyError("Invalid RSA public key") from exc

    if block.format is PemFormat.CERTIFICATE:
        public_key = load_der_certificate(block.der).public_key()
    else:
        _check_spki(block.der)
        try:
            public_key = serialization.load_der_public_key(block.der)
        except UnsupportedAlgorithm as exc:
            raise UnsupportedKeyError("Unsupported public key algorithm") from exc
        except ValueError as exc:
            raise MalformedKeyError("Invalid RSA public key") from exc
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise UnsupportedKeyError("Expected an RSA public key")
    return public_key


def load_rsa_private_key(
    key: PrivateKeyInput,
    *,
    min_key_bits: int = DEFAULT_MIN_RSA_KEY_BITS,
) -> rsa.RSAPrivateKey:
    """Return an RSA private key from PKCS#1 or PKCS#8 PEM text.

    Parameters
    ----------
    key:
        PEM text/bytes, or an already loaded ``RSAPrivateKey``.
    min_key_bits:
        Smallest accepted modulus; smaller keys raise :class:`WeakKeyError`.
    """

    if isinstance(key, rsa.RSAPrivateKey):
        private_key = key
    elif isinstance(key, (str, bytes)):
        block = parse_pem(key)
        if not block.format.is_private:
            raise UnsupportedKeyError(f"Signing requires a private key, found '{block.label}'")
        private_key = _load_private(block)
        logger.debug("Loaded %s RSA private key (%d bits)", block.label, private_key.key_size)
    else:
        raise UnsupportedKeyError("Expected an RSA private key")
    enforce_key_strength(private_key, min_key_bits)
    return private_key


def load_rsa_public_key(
    key: PublicKeyInput,
    *,
    min_key_bits: int = DEFAULT_MIN_RSA_KEY_BITS,
) -> rsa.RSAPublicKey:
    """Return an RSA public key for verification.

    Accepts SPKI ``PUBLIC KEY``, PKCS#1 ``RSA PUBLIC KEY``, an X.509
    ``CERTIFICATE``, a private key PEM (its public half is used), or loaded
    ``cryptography`` objects of the same kinds.
    """

    if isinstance(key, rsa.RSAPublicKey):
        public_key = key
    elif isinstance(key, rsa.RSAPrivateKey):
        public_key = key.public_key()
    elif isinstance(key, x509.Certificate):
        candidate = key.public_key()
        if not isinstance(candidate, rsa.RSAPublicKey):
            raise UnsupportedKeyError("Certificate does not carry an RSA public key")
        public_key = candidate
    elif isinstance(key, (str, bytes)):
        block = parse_pem(key)
        if block.format.is_private:
            public_key = _load_private(block).public_key()
        else:
            public_key = _load_public(block)
        logger.debug("Loaded RSA public key from %s (%d bits)", block.label, public_key.key_size)
    else:
        raise UnsupportedKeyError("Expected an RSA public key")
    enforce_key_strength(public_key, min_key_bits)
    return public_key


__all__ = [
    "DEFAULT_MIN_RSA_KEY_BITS",
    "enforce_key_strength",
    "load_rsa_private_key",
    "load_rsa_public_key",
]
