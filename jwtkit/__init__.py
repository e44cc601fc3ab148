"""JSON Web Token signing and verification (HS256/384/512, RS256/384/512)."""

from .algorithms import Algorithm, AlgorithmFamily, resolve_algorithm
from .claims import Claims, from_numeric_date, to_numeric_date
from .codec import b64url_decode, b64url_encode
from .decoder import ValidationPolicy, decode, decode_header, decode_jwt, decode_unverified
from .encoder import encode, encode_jwt
from .errors import (
    AlgorithmMismatchError,
    AudienceMismatchError,
    DisallowedAlgorithmError,
    ExpiredTokenError,
    InvalidKeyError,
    InvalidSignatureError,
    IssuerMismatchError,
    JwtError,
    JwtVerificationError,
    KeyMaterialError,
    MalformedClaimError,
    MalformedKeyError,
    MalformedTokenError,
    MissingVerifierError,
    NotYetValidError,
    SigningError,
    UnsupportedAlgorithmError,
    UnsupportedKeyError,
    WeakKeyError,
)
from .keys import HmacSecret, load_rsa_private_key, load_rsa_public_key
from .models import Header, Jwt
from .settings import JwtSettings
from .signers import HmacSigner, NoneSigner, RsaSigner, Signer, signer_for
from .verifiers import HmacVerifier, NoneVerifier, RsaVerifier, Verifier, verifier_for

__all__ = [
    "Algorithm",
    "AlgorithmFamily",
    "AlgorithmMismatchError",
    "AudienceMismatchError",
    "Claims",
    "DisallowedAlgorithmError",
    "ExpiredTokenError",
    "Header",
    "HmacSecret",
    "HmacSigner",
    "HmacVerifier",
    "InvalidKeyError",
    "InvalidSignatureError",
    "IssuerMismatchError",
    "Jwt",
    "JwtError",
    "JwtSettings",
    "JwtVerificationError",
    "KeyMaterialError",
    "MalformedClaimError",
    "MalformedKeyError",
    "MalformedTokenError",
    "MissingVerifierError",
    "NoneSigner",
    "NoneVerifier",
    "NotYetValidError",
    "RsaSigner",
    "RsaVerifier",
    "Signer",
    "SigningError",
    "UnsupportedAlgorithmError",
    "UnsupportedKeyError",
    "ValidationPolicy",
    "Verifier",
    "WeakKeyError",
    "b64url_decode",
    "b64url_encode",
    "decode",
    "decode_header",
    "decode_jwt",
    "decode_unverified",
    "encode",
    "encode_jwt",
    "from_numeric_date",
    "load_rsa_private_key",
    "load_rsa_public_key",
    "resolve_algorithm",
    "signer_for",
    "to_numeric_date",
    "verifier_for",
]
