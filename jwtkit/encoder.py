"""Compact serialization of signed tokens."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .claims import Claims
from .codec import b64url_encode
from .errors import AlgorithmMismatchError
from .models import Header, Jwt
from .signers import Signer

logger = logging.getLogger(__name__)


def _build_header(
    signer: Signer,
    header: Header | Mapping[str, Any] | None,
    kid: str | None,
    typ: str | None,
) -> Header:
    if header is None:
        return Header(alg=signer.algorithm, typ=typ, kid=kid)

    if isinstance(header, Header):
        base = header
    else:
        fields = dict(header)
        fields.setdefault("alg", signer.algorithm.value)
        fields.setdefault("typ", typ)
        base = Header.from_dict(fields)

    if base.alg is not signer.algorithm:
        raise AlgorithmMismatchError(
            f"Header declares {base.alg.value} but the signer uses {signer.algorithm.value}"
        )
    if kid is not None and base.kid != kid:
        base = Header(alg=base.alg, typ=base.typ, kid=kid, extra=base.extra)
    return base


def encode_jwt(
    claims: Claims | Mapping[str, Any],
    signer: Signer,
    *,
    kid: str | None = None,
    header: Header | Mapping[str, Any] | None = None,
    typ: str | None = "JWT",
) -> Jwt:
    """Sign ``claims`` with ``signer`` and return the assembled :class:`Jwt`.

    Parameters
    ----------
    claims:
        Claims to embed. Plain mappings are validated through :class:`Claims`.
    signer:
        Signer whose algorithm becomes the header ``alg``.
    kid:
        Optional key identifier for the header.
    header:
        Optional header or header members (``x5t``, ``cty``, ...). Its ``alg``
        must match the signer.
    typ:
        Value of ``typ`` when the header is built here; ``None`` omits it.
    """

    token_claims = claims if isinstance(claims, Claims) else Claims(claims)
    token_header = _build_header(signer, header, kid, typ)

    header_segment = b64url_encode(token_header.to_json())
    claims_segment = b64url_encode(token_claims.to_json())
    signing_input = f"{header_segment}.{claims_segment}".encode("ascii")
    signature = signer.sign(signing_input)
    compact = f"{header_segment}.{claims_segment}.{b64url_encode(signature)}"

    logger.debug("Encoded %s token (kid=%s)", token_header.alg.value, token_header.kid)
    return Jwt(header=token_header, claims=token_claims, signature=signature, compact=compact)


def encode(
    claims: Claims | Mapping[str, Any],
    signer: Signer,
    *,
    kid: str | None = None,
    header: Header | Mapping[str, Any] | None = None,
    typ: str | None = "JWT",
) -> str:
    """Return the compact ``header.claims.signature`` form of ``claims``."""

    return encode_jwt(claims, signer, kid=kid, header=header, typ=typ).compact


__all__ = ["encode", "encode_jwt"]
