"""Signers for the HMAC, RSA and ``none`` algorithm families.

Signers are immutable after construction. Hash and MAC objects are created
per call, so one signer can be shared between threads.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hmac as crypto_hmac
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .algorithms import Algorithm, AlgorithmFamily, resolve_algorithm
from .errors import SigningError, UnsupportedAlgorithmError, UnsupportedKeyError
from .keys.rsa import DEFAULT_MIN_RSA_KEY_BITS, PrivateKeyInput, load_rsa_private_key
from .keys.secret import HmacSecret

logger = logging.getLogger(__name__)

SecretInput = HmacSecret | str | bytes | bytearray | memoryview


@runtime_checkable
class Signer(Protocol):
    """Produces the signature bytes for a JWS signing input."""

    @property
    def algorithm(self) -> Algorithm:
        ...

    def sign(self, message: bytes) -> bytes:
        ...


def _as_bytes(message: bytes | str) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


def _require_family(algorithm: Algorithm | str, family: AlgorithmFamily) -> Algorithm:
    resolved = resolve_algorithm(algorithm)
    if resolved.family is not family:
        raise UnsupportedAlgorithmError(f"{resolved.value} is not an {family.value} algorithm")
    return resolved


def hmac_digest(algorithm: Algorithm, secret: HmacSecret, message: bytes) -> bytes:
    """Compute the HMAC of ``message``; shared by signer and verifier."""

    try:
        mac = crypto_hmac.HMAC(secret.material(), algorithm.hash_algorithm())
        mac.update(message)
        return mac.finalize()
    except (UnsupportedAlgorithm, TypeError, ValueError) as exc:
        raise SigningError(f"Unable to compute {algorithm.primitive_name}") from exc


class HmacSigner:
    """Sign with HMAC-SHA256/384/512 over a shared secret."""

    __slots__ = ("_algorithm", "_secret")

    def __init__(self, algorithm: Algorithm | str, secret: SecretInput) -> None:
        self._algorithm = _require_family(algorithm, AlgorithmFamily.HMAC)
        if isinstance(secret, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            raise UnsupportedKeyError("HMAC algorithms require a shared secret")
        self._secret = HmacSecret.coerce(secret)

    @classmethod
    def sha256(cls, secret: SecretInput) -> HmacSigner:
        return cls(Algorithm.HS256, secret)

    @classmethod
    def sha384(cls, secret: SecretInput) -> HmacSigner:
        return cls(Algorithm.HS384, secret)

    @classmethod
    def sha512(cls, secret: SecretInput) -> HmacSigner:
        return cls(Algorithm.HS512, secret)

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    def sign(self, message: bytes | str) -> bytes:
        return hmac_digest(self._algorithm, self._secret, _as_bytes(message))

    def __repr__(self) -> str:
        return f"HmacSigner({self._algorithm.value}, {self._secret!r})"


class RsaSigner:
    """Sign with RSASSA-PKCS1-v1_5 using SHA-256/384/512."""

    __slots__ = ("_algorithm", "_private_key")

    def __init__(
        self,
        algorithm: Algorithm | str,
        private_key: PrivateKeyInput,
        *,
        min_key_bits: int = DEFAULT_MIN_RSA_KEY_BITS,
    ) -> None:
        self._algorithm = _require_family(algorithm, AlgorithmFamily.RSA)
        self._private_key = load_rsa_private_key(private_key, min_key_bits=min_key_bits)

    @classmethod
    def sha256(cls, private_key: PrivateKeyInput, **options: Any) -> RsaSigner:
        return cls(Algorithm.RS256, private_key, **options)

    @classmethod
    def sha384(cls, private_key: PrivateKeyInput, **options: Any) -> RsaSigner:
        return cls(Algorithm.RS384, private_key, **options)

    @classmethod
    def sha512(cls, private_key: PrivateKeyInput, **options: Any) -> RsaSigner:
        return cls(Algorithm.RS512, private_key, **options)

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    @property
    def key_size(self) -> int:
        return self._private_key.key_size

    def public_key(self) -> rsa.RSAPublicKey:
        return self._private_key.public_key()

    def sign(self, message: bytes | str) -> bytes:
        try:
            return self._private_key.sign(
                _as_bytes(message),
                padding.PKCS1v15(),
                self._algorithm.hash_algorithm(),
            )
        except (UnsupportedAlgorithm, TypeError, ValueError) as exc:
            raise SigningError(f"Unable to compute {self._algorithm.primitive_name}") from exc

    def __repr__(self) -> str:
        return f"RsaSigner({self._algorithm.value}, {self.key_size} bits)"


class NoneSigner:
    """Produces unsecured tokens (``alg=none``); never selected implicitly."""

    __slots__ = ()

    @property
    def algorithm(self) -> Algorithm:
        return Algorithm.NONE

    def sign(self, message: bytes | str) -> bytes:
        return b""

    def __repr__(self) -> str:
        return "NoneSigner()"


def signer_for(algorithm: Algorithm | str, key: Any = None, **options: Any) -> Signer:
    """Build the signer for ``algorithm`` from ``key``.

    ``options`` are forwarded to the RSA signer (``min_key_bits``).
    """

    resolved = resolve_algorithm(algorithm)
    if resolved.family is AlgorithmFamily.HMAC:
        if key is None:
            raise UnsupportedKeyError(f"{resolved.value} requires a shared secret")
        return HmacSigner(resolved, key)
    if resolved.family is AlgorithmFamily.RSA:
        if key is None:
            raise UnsupportedKeyError(f"{resolved.value} requires an RSA private key")
        return RsaSigner(resolved, key, **options)
    if key is not None:
        raise UnsupportedKeyError("The none algorithm does not take a key")
    logger.debug("Building unsecured none signer")
    return NoneSigner()


__all__ = [
    "HmacSigner",
    "NoneSigner",
    "RsaSigner",
    "SecretInput",
    "Signer",
    "hmac_digest",
    "signer_for",
]
