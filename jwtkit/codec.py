"""Unpadded URL-safe base64 used by every compact JWT segment."""

from __future__ import annotations

import base64
import binascii
import re

from .errors import MalformedTokenError

_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def b64url_encode(data: bytes) -> str:
    """Base64url encode ``data`` without padding."""

    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str | bytes) -> bytes:
    """Decode a base64url ``segment`` with or without padding.

    Any character outside the URL-safe alphabet, padding in the middle of
    the segment, or a length that cannot come from an encoder raises
    :class:`MalformedTokenError`.
    """

    if isinstance(segment, bytes):
        try:
            segment = segment.decode("ascii")
        except UnicodeDecodeError as exc:
            raise MalformedTokenError("Invalid base64url segment") from exc

    if not _SEGMENT_RE.fullmatch(segment):
        raise MalformedTokenError("Invalid base64url segment")

    stripped = segment.rstrip("=")
    if len(stripped) % 4 == 1:
        raise MalformedTokenError("Invalid base64url segment length")
    if segment != stripped and len(segment) % 4 != 0:
        raise MalformedTokenError("Invalid base64url padding")

    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        decoded = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("Invalid base64url segment") from exc

    # Unused trailing bits must be zero so every byte string has one encoding.
    if b64url_encode(decoded) != stripped:
        raise MalformedTokenError("Non-canonical base64url segment")
    return decoded


__all__ = ["b64url_decode", "b64url_encode"]
