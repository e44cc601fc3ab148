"""Algorithm registry for the supported JWS signature algorithms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from cryptography.hazmat.primitives import hashes

from .errors import UnsupportedAlgorithmError


class AlgorithmFamily(str, Enum):
    """Signature families with a distinct key kind."""

    HMAC = "HMAC"
    RSA = "RSA"
    NONE = "NONE"


class KeyKind(str, Enum):
    SHARED_SECRET = "shared_secret"
    RSA_KEYPAIR = "rsa_keypair"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class AlgorithmInfo:
    """Static facts about one registry entry."""

    id: str
    family: AlgorithmFamily
    hash_bits: int | None
    primitive_name: str
    key_kind: KeyKind
    hash_factory: Callable[[], hashes.HashAlgorithm] | None


class Algorithm(str, Enum):
    """Algorithm identifiers as they appear in the ``alg`` header."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    NONE = "none"

    def __str__(self) -> str:
        return self.value

    @property
    def info(self) -> AlgorithmInfo:
        return REGISTRY[self.value]

    @property
    def family(self) -> AlgorithmFamily:
        return self.info.family

    @property
    def hash_bits(self) -> int | None:
        return self.info.hash_bits

    @property
    def primitive_name(self) -> str:
        return self.info.primitive_name

    @property
    def key_kind(self) -> KeyKind:
        return self.info.key_kind

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Return a fresh ``cryptography`` hash instance for this algorithm."""

        factory = self.info.hash_factory
        if factory is None:
            raise UnsupportedAlgorithmError(f"Algorithm {self.value} has no hash function")
        return factory()


def _entry(
    alg_id: str,
    family: AlgorithmFamily,
    bits: int | None,
    factory: Callable[[], hashes.HashAlgorithm] | None,
) -> AlgorithmInfo:
    if family is AlgorithmFamily.HMAC:
        primitive = f"HMAC-SHA{bits}"
        key_kind = KeyKind.SHARED_SECRET
    elif family is AlgorithmFamily.RSA:
        primitive = f"RSASSA-PKCS1-v1_5-SHA{bits}"
        key_kind = KeyKind.RSA_KEYPAIR
    else:
        primitive = "none"
        key_kind = KeyKind.NONE
    return AlgorithmInfo(
        id=alg_id,
        family=family,
        hash_bits=bits,
        primitive_name=primitive,
        key_kind=key_kind,
        hash_factory=factory,
    )


REGISTRY: Mapping[str, AlgorithmInfo] = MappingProxyType(
    {
        "HS256": _entry("HS256", AlgorithmFamily.HMAC, 256, hashes.SHA256),
        "HS384": _entry("HS384", AlgorithmFamily.HMAC, 384, hashes.SHA384),
        "HS512": _entry("HS512", AlgorithmFamily.HMAC, 512, hashes.SHA512),
        "RS256": _entry("RS256", AlgorithmFamily.RSA, 256, hashes.SHA256),
        "RS384": _entry("RS384", AlgorithmFamily.RSA, 384, hashes.SHA384),
        "RS512": _entry("RS512", AlgorithmFamily.RSA, 512, hashes.SHA512),
        "none": _entry("none", AlgorithmFamily.NONE, None, None),
    }
)

SIGNING_ALGORITHMS: frozenset[Algorithm] = frozenset(
    alg for alg in Algorithm if alg is not Algorithm.NONE
)


def resolve_algorithm(value: object) -> Algorithm:
    """Resolve a header ``alg`` value to an :class:`Algorithm`.

    Resolution is case-sensitive; ``"hs256"`` is not ``HS256``.
    """

    if isinstance(value, Algorithm):
        return value
    if not isinstance(value, str):
        raise UnsupportedAlgorithmError("Algorithm identifier must be a string")
    if value not in REGISTRY:
        raise UnsupportedAlgorithmError(f"Unsupported algorithm '{value}'")
    return Algorithm(value)


def algorithms_for(family: AlgorithmFamily) -> tuple[Algorithm, ...]:
    return tuple(alg for alg in Algorithm if alg.family is family)


__all__ = [
    "Algorithm",
    "AlgorithmFamily",
    "AlgorithmInfo",
    "KeyKind",
    "REGISTRY",
    "SIGNING_ALGORITHMS",
    "algorithms_for",
    "resolve_algorithm",
]
