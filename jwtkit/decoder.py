"""Decode, authenticate and validate compact JWTs.

The decoder fails fast: the first rejecting check raises and no partial
claims are returned. Checks run in a fixed order: structure, header,
algorithm policy, verifier selection, signature, claims, time window,
issuer and audience.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Collection, Iterable, Mapping, Sequence

from .algorithms import SIGNING_ALGORITHMS, Algorithm, resolve_algorithm
from .claims import Claims, parse_json_object
from .codec import b64url_decode
from .errors import (
    AlgorithmMismatchError,
    AudienceMismatchError,
    DisallowedAlgorithmError,
    ExpiredTokenError,
    IssuerMismatchError,
    JwtError,
    MalformedClaimError,
    MalformedTokenError,
    MissingVerifierError,
    NotYetValidError,
)
from .models import Header, Jwt
from .verifiers import Verifier

logger = logging.getLogger(__name__)

VerifierSource = Verifier | Sequence[Verifier] | Mapping[str, Verifier]
Instant = int | float | datetime


@dataclass(frozen=True, slots=True)
class ValidationPolicy:
    """Caller policy applied after the signature has been checked.

    ``allowed_algorithms`` defaults to every signing algorithm; ``none`` is
    only accepted when ``allow_none`` is set. ``now`` pins the validation
    instant, otherwise ``clock`` (epoch seconds) is consulted per call.
    """

    allowed_algorithms: frozenset[Algorithm] | None = None
    expected_issuer: str | None = None
    audience: str | Collection[str] | None = None
    clock_skew_seconds: float = 0
    now: Instant | None = None
    clock: Callable[[], float] = field(default=time.time, repr=False)
    allow_none: bool = False
    strict_header: bool = False

    def __post_init__(self) -> None:
        if self.allowed_algorithms is not None:
            allowed = frozenset(resolve_algorithm(alg) for alg in self.allowed_algorithms)
            object.__setattr__(self, "allowed_algorithms", allowed)
        if self.clock_skew_seconds < 0:
            raise ValueError("clock_skew_seconds must not be negative")

    def permitted_algorithms(self) -> frozenset[Algorithm]:
        allowed = self.allowed_algorithms
        if allowed is None:
            allowed = (SIGNING_ALGORITHMS | {Algorithm.NONE}) if self.allow_none else SIGNING_ALGORITHMS
        if not self.allow_none:
            allowed = allowed - {Algorithm.NONE}
        return allowed

    def current_time(self) -> float:
        value = self.now if self.now is not None else self.clock()
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.timestamp()
        return float(value)


DEFAULT_POLICY = ValidationPolicy()


def _as_text(token: str | bytes) -> str:
    if isinstance(token, bytes):
        try:
            return token.decode("ascii")
        except UnicodeDecodeError as exc:
            raise MalformedTokenError("Token must be ASCII") from exc
    if not isinstance(token, str):
        raise MalformedTokenError("Token must be a string")
    return token


def _split(token: str, allow_two_segments: bool) -> tuple[str, str, str]:
    parts = token.split(".")
    if len(parts) == 3:
        header_segment, claims_segment, signature_segment = parts
    elif len(parts) == 2 and allow_two_segments:
        header_segment, claims_segment = parts
        signature_segment = ""
    else:
        raise MalformedTokenError("Invalid token format")
    if not header_segment or not claims_segment:
        raise MalformedTokenError("Invalid token format")
    return header_segment, claims_segment, signature_segment


def _parse_header(segment: str) -> Header:
    return Header.from_dict(parse_json_object(b64url_decode(segment), "header"))


def _check_header(header: Header, policy: ValidationPolicy) -> None:
    crit = header.extra.get("crit")
    if crit is not None:
        # No header extensions are understood, so any critical one is fatal.
        raise MalformedTokenError("Unsupported critical header parameters")
    if policy.strict_header:
        unknown = header.unknown_members()
        if unknown:
            raise MalformedTokenError(f"Unknown header members: {', '.join(sorted(unknown))}")


def _select_verifier(verifiers: VerifierSource, header: Header) -> Verifier:
    alg = header.alg
    if isinstance(verifiers, Mapping):
        if header.kid is None:
            raise MissingVerifierError("Token header has no 'kid' to select a verifier")
        verifier = verifiers.get(header.kid)
        if verifier is None:
            raise MissingVerifierError(f"No verifier registered for key id '{header.kid}'")
        if verifier.algorithm is not alg:
            raise AlgorithmMismatchError(
                f"Token uses {alg.value} but key '{header.kid}' verifies {verifier.algorithm.value}"
            )
        return verifier

    if isinstance(verifiers, (list, tuple)):
        for verifier in verifiers:
            if verifier.can_verify(alg):
                return verifier
        raise AlgorithmMismatchError(f"No verifier accepts {alg.value}")

    if verifiers.algorithm is not alg:
        raise AlgorithmMismatchError(
            f"Token uses {alg.value} but the verifier expects {verifiers.algorithm.value}"
        )
    return verifiers


def _check_time_window(claims: Claims, policy: ValidationPolicy) -> None:
    now = policy.current_time()
    skew = policy.clock_skew_seconds
    exp = claims.get("exp")
    nbf = claims.get("nbf")
    iat = claims.get("iat")

    if exp is not None and nbf is not None and exp <= nbf:
        raise MalformedClaimError("Claim 'exp' must be later than 'nbf'")
    if exp is not None and now >= exp + skew:
        raise ExpiredTokenError("Token has expired")
    if nbf is not None and now + skew < nbf:
        raise NotYetValidError("Token is not valid yet")
    if iat is not None and iat > now + skew:
        raise ExpiredTokenError("Token was issued in the future")


def _audience_matches(expected: str | Collection[str], actual: tuple[str, ...] | None) -> bool:
    if actual is None:
        return False
    wanted: Iterable[str] = (expected,) if isinstance(expected, str) else expected
    return any(candidate in actual for candidate in wanted)


def _check_subject_claims(claims: Claims, policy: ValidationPolicy) -> None:
    if policy.expected_issuer is not None and claims.issuer != policy.expected_issuer:
        raise IssuerMismatchError("Token issuer does not match")
    if policy.audience is not None and not _audience_matches(policy.audience, claims.audience):
        raise AudienceMismatchError("Token audience does not match")


def _decode(token: str | bytes, verifiers: VerifierSource, policy: ValidationPolicy) -> Jwt:
    compact = _as_text(token)
    header_segment, claims_segment, signature_segment = _split(compact, policy.allow_none)

    header = _parse_header(header_segment)
    _check_header(header, policy)

    if header.alg not in policy.permitted_algorithms():
        raise DisallowedAlgorithmError(f"Algorithm {header.alg.value} is not allowed")
    if header.alg is not Algorithm.NONE and compact.count(".") == 1:
        raise MalformedTokenError("Invalid token format")

    verifier = _select_verifier(verifiers, header)
    signature = b64url_decode(signature_segment)
    # Decoding first also confines the signing input to the base64url alphabet.
    claims_json = b64url_decode(claims_segment)
    verifier.verify(f"{header_segment}.{claims_segment}".encode("ascii"), signature)

    claims = Claims.from_json(claims_json)
    _check_time_window(claims, policy)
    _check_subject_claims(claims, policy)

    return Jwt(header=header, claims=claims, signature=signature, compact=compact)


def decode_jwt(
    token: str | bytes,
    verifier: VerifierSource,
    policy: ValidationPolicy | None = None,
) -> Jwt:
    """Authenticate and validate ``token``; return the full :class:`Jwt`.

    ``verifier`` is a single verifier, a sequence (the first one able to
    verify the header algorithm is used) or a mapping keyed by ``kid``.
    """

    active = policy or DEFAULT_POLICY
    try:
        return _decode(token, verifier, active)
    except JwtError as exc:
        logger.debug("Rejected token: %s", exc.kind)
        raise


def decode(
    token: str | bytes,
    verifier: VerifierSource,
    policy: ValidationPolicy | None = None,
) -> Claims:
    """Authenticate and validate ``token`` and return its claims."""

    return decode_jwt(token, verifier, policy).claims


def decode_header(token: str | bytes) -> Header:
    """Parse the header of ``token`` without verifying anything.

    Useful to route a token to the right key via ``kid`` before decoding.
    """

    header_segment, _, _ = _split(_as_text(token), allow_two_segments=True)
    return _parse_header(header_segment)


def decode_unverified(token: str | bytes) -> Claims:
    """Parse the claims of ``token`` WITHOUT authenticating them."""

    _, claims_segment, _ = _split(_as_text(token), allow_two_segments=True)
    return Claims.from_json(b64url_decode(claims_segment))


__all__ = [
    "DEFAULT_POLICY",
    "ValidationPolicy",
    "VerifierSource",
    "decode",
    "decode_header",
    "decode_jwt",
    "decode_unverified",
]
