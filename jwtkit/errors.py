"""Error taxonomy shared by every jwtkit component.

Each error carries a stable ``kind`` tag so callers can branch on the
failure category without matching on class names. Messages never contain
key material and are safe to log.
"""

from __future__ import annotations

from typing import ClassVar


class JwtError(ValueError):
    """Base class for all jwtkit failures."""

    kind: ClassVar[str] = "JwtError"


class MalformedTokenError(JwtError):
    """Raised for bad segmentation, base64 or JSON."""

    kind = "MalformedToken"


class MalformedClaimError(JwtError):
    """Raised when a reserved claim has the wrong JSON type."""

    kind = "MalformedClaim"


class KeyMaterialError(JwtError):
    """Base class for key loading and key usage failures."""

    kind = "KeyMaterial"


class MalformedKeyError(KeyMaterialError):
    kind = "MalformedKey"


class UnsupportedKeyError(KeyMaterialError):
    kind = "UnsupportedKey"


class WeakKeyError(KeyMaterialError):
    kind = "WeakKey"


class InvalidKeyError(KeyMaterialError):
    kind = "InvalidKey"


class UnsupportedAlgorithmError(JwtError):
    kind = "UnsupportedAlgorithm"


class SigningError(JwtError):
    """Raised when the underlying signature primitive fails unexpectedly."""

    kind = "SigningError"


class JwtVerificationError(JwtError):
    """Raised when a JWT fails validation."""

    kind = "Verification"


class DisallowedAlgorithmError(JwtVerificationError):
    kind = "DisallowedAlgorithm"


class AlgorithmMismatchError(JwtVerificationError):
    kind = "AlgorithmMismatch"


class MissingVerifierError(JwtVerificationError):
    kind = "MissingVerifier"


class InvalidSignatureError(JwtVerificationError):
    kind = "InvalidSignature"


class ExpiredTokenError(JwtVerificationError):
    kind = "Expired"


class NotYetValidError(JwtVerificationError):
    kind = "NotYetValid"


class IssuerMismatchError(JwtVerificationError):
    kind = "IssuerMismatch"


class AudienceMismatchError(JwtVerificationError):
    kind = "AudienceMismatch"


__all__ = [
    "AlgorithmMismatchError",
    "AudienceMismatchError",
    "DisallowedAlgorithmError",
    "ExpiredTokenError",
    "InvalidKeyError",
    "InvalidSignatureError",
    "IssuerMismatchError",
    "JwtError",
    "JwtVerificationError",
    "KeyMaterialError",
    "MalformedClaimError",
    "MalformedKeyError",
    "MalformedTokenError",
    "MissingVerifierError",
    "NotYetValidError",
    "SigningError",
    "UnsupportedAlgorithmError",
    "UnsupportedKeyError",
    "WeakKeyError",
]
