"""Key material: HMAC secrets, RSA keys and certificates."""

from .certificates import load_certificate, thumbprint, thumbprint_headers
from .pem import PemBlock, PemFormat, parse_pem
from .rsa import (
    DEFAULT_MIN_RSA_KEY_BITS,
    enforce_key_strength,
    load_rsa_private_key,
    load_rsa_public_key,
)
from .secret import HmacSecret

__all__ = [
    "DEFAULT_MIN_RSA_KEY_BITS",
    "HmacSecret",
    "PemBlock",
    "PemFormat",
    "enforce_key_strength",
    "load_certificate",
    "load_rsa_private_key",
    "load_rsa_public_key",
    "parse_pem",
    "thumbprint",
    "thumbprint_headers",
]
