"""Verifiers for the HMAC, RSA and ``none`` algorithm families.

The caller picks the verifier; the token header never does. A verifier
built for HS256 refuses a token that claims RS256 (or ``none``), which
closes the classic algorithm-confusion attacks.
"""

from __future__ import annotations

import hmac
from typing import Any, Protocol, runtime_checkable

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .algorithms import Algorithm, AlgorithmFamily, resolve_algorithm
from .errors import InvalidSignatureError, SigningError, UnsupportedAlgorithmError, UnsupportedKeyError
from .keys.rsa import DEFAULT_MIN_RSA_KEY_BITS, PublicKeyInput, load_rsa_public_key
from .keys.secret import HmacSecret
from .signers import SecretInput, hmac_digest


@runtime_checkable
class Verifier(Protocol):
    """Checks a signature over a JWS signing input."""

    @property
    def algorithm(self) -> Algorithm:
        ...

    def can_verify(self, algorithm: Algorithm) -> bool:
        ...

    def verify(self, message: bytes, signature: bytes) -> None:
        ...


def _as_bytes(message: bytes | str) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


def constant_time_equals(expected: bytes, actual: bytes) -> bool:
    """Compare MACs without leaking the position of the first difference."""

    return hmac.compare_digest(expected, actual)


class _BaseVerifier:
    __slots__ = ("_algorithm",)

    _family: AlgorithmFamily

    def __init__(self, algorithm: Algorithm | str) -> None:
        resolved = resolve_algorithm(algorithm)
        if resolved.family is not self._family:
            raise UnsupportedAlgorithmError(f"{resolved.value} is not an {self._family.value} algorithm")
        self._algorithm = resolved

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    def can_verify(self, algorithm: Algorithm | str) -> bool:
        try:
            return resolve_algorithm(algorithm) is self._algorithm
        except UnsupportedAlgorithmError:
            return False


class HmacVerifier(_BaseVerifier):
    """Verify HMAC-SHA256/384/512 signatures in constant time."""

    __slots__ = ("_secret",)

    _family = AlgorithmFamily.HMAC

    def __init__(self, algorithm: Algorithm | str, secret: SecretInput) -> None:
        super().__init__(algorithm)
        if isinstance(secret, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            raise UnsupportedKeyError("HMAC algorithms require a shared secret")
        self._secret = HmacSecret.coerce(secret)

    @classmethod
    def sha256(cls, secret: SecretInput) -> HmacVerifier:
        return cls(Algorithm.HS256, secret)

    @classmethod
    def sha384(cls, secret: SecretInput) -> HmacVerifier:
        return cls(Algorithm.HS384, secret)

    @classmethod
    def sha512(cls, secret: SecretInput) -> HmacVerifier:
        return cls(Algorithm.HS512, secret)

    def verify(self, message: bytes | str, signature: bytes) -> None:
        expected = hmac_digest(self._algorithm, self._secret, _as_bytes(message))
        if not constant_time_equals(expected, bytes(signature)):
            raise InvalidSignatureError("Invalid token signature")

    def __repr__(self) -> str:
        return f"HmacVerifier({self._algorithm.value}, {self._secret!r})"


class RsaVerifier(_BaseVerifier):
    """Verify RSASSA-PKCS1-v1_5 signatures."""

    __slots__ = ("_public_key",)

    _family = AlgorithmFamily.RSA

    def __init__(
        self,
        algorithm: Algorithm | str,
        public_key: PublicKeyInput,
        *,
        min_key_bits: int = DEFAULT_MIN_RSA_KEY_BITS,
    ) -> None:
        super().__init__(algorithm)
        self._public_key = load_rsa_public_key(public_key, min_key_bits=min_key_bits)

    @classmethod
    def sha256(cls, public_key: PublicKeyInput, **options: Any) -> RsaVerifier:
        return cls(Algorithm.RS256, public_key, **options)

    @classmethod
    def sha384(cls, public_key: PublicKeyInput, **options: Any) -> RsaVerifier:
        return cls(Algorithm.RS384, public_key, **options)

    @classmethod
    def sha512(cls, public_key: PublicKeyInput, **options: Any) -> RsaVerifier:
        return cls(Algorithm.RS512, public_key, **options)

    @property
    def key_size(self) -> int:
        return self._public_key.key_size

    def verify(self, message: bytes | str, signature: bytes) -> None:
        try:
            self._public_key.verify(
                bytes(signature),
                _as_bytes(message),
                padding.PKCS1v15(),
                self._algorithm.hash_algorithm(),
            )
        except InvalidSignature as exc:
            raise InvalidSignatureError("Invalid token signature") from exc
        except (UnsupportedAlgorithm, TypeError) as exc:
            raise SigningError(f"Unable to verify {self._algorithm.primitive_name}") from exc

    def __repr__(self) -> str:
        return f"RsaVerifier({self._algorithm.value}, {self.key_size} bits)"


class NoneVerifier(_BaseVerifier):
    """Accepts unsecured tokens, i.e. an empty signature segment."""

    __slots__ = ()

    _family = AlgorithmFamily.NONE

    def __init__(self) -> None:
        super().__init__(Algorithm.NONE)

    def verify(self, message: bytes | str, signature: bytes) -> None:
        if signature:
            raise InvalidSignatureError("Unsecured tokens must have an empty signature")

    def __repr__(self) -> str:
        return "NoneVerifier()"


def verifier_for(algorithm: Algorithm | str, key: Any = None, **options: Any) -> Verifier:
    """Build the verifier for ``algorithm`` from ``key``.

    ``options`` are forwarded to the RSA verifier (``min_key_bits``).
    """

    resolved = resolve_algorithm(algorithm)
    if resolved.family is AlgorithmFamily.HMAC:
        if key is None:
            raise UnsupportedKeyError(f"{resolved.value} requires a shared secret")
        return HmacVerifier(resolved, key)
    if resolved.family is AlgorithmFamily.RSA:
        if key is None:
            raise UnsupportedKeyError(f"{resolved.value} requires an RSA public key")
        return RsaVerifier(resolved, key, **options)
    if key is not None:
        raise UnsupportedKeyError("The none algorithm does not take a key")
    return NoneVerifier()


__all__ = [
    "HmacVerifier",
    "NoneVerifier",
    "RsaVerifier",
    "Verifier",
    "constant_time_equals",
    "verifier_for",
]
