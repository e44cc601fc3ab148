"""Claim model and numeric-date serializer.

Claims keep insertion order because the order of members drives the
canonical JSON encoding and therefore the signature. Reserved claims are
type-checked on construction; everything else passes through verbatim.
"""

from __future__ import annotations

import copy
import json
import math
from collections.abc import Mapping as MappingABC
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .errors import MalformedClaimError, MalformedTokenError

STRING_CLAIMS = ("iss", "sub", "jti")
DATE_CLAIMS = ("exp", "nbf", "iat")
RESERVED_CLAIMS = ("iss", "sub", "aud", "exp", "nbf", "iat", "jti")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

NumericDate = int | float | datetime


def to_numeric_date(value: NumericDate | None) -> int | None:
    """Serialize an instant as integral seconds since the UNIX epoch.

    Fractional seconds are floored. ``None`` maps to ``None`` so the claim
    serializes as JSON ``null``. Naive datetimes are taken as UTC.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedClaimError("Numeric date cannot be a boolean")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - _EPOCH
        return delta.days * 86400 + delta.seconds
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedClaimError("Numeric date must be finite")
        return math.floor(value)
    raise MalformedClaimError(f"Unsupported numeric date type {type(value).__name__}")


def from_numeric_date(value: Any) -> datetime | None:
    """Parse a JSON numeric date into an aware UTC datetime.

    Integers and floats are accepted; fractional seconds are floored, as in
    :func:`to_numeric_date`.
    """

    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedClaimError("Numeric date must be a JSON number")
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedClaimError("Numeric date must be finite")
    try:
        return datetime.fromtimestamp(math.floor(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedClaimError("Numeric date is out of range") from exc


def _coerce_reserved(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in STRING_CLAIMS:
        if not isinstance(value, str):
            raise MalformedClaimError(f"Claim '{name}' must be a string")
        return value
    if name == "aud":
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple)):
            if not all(isinstance(item, str) for item in value):
                raise MalformedClaimError("Claim 'aud' must contain only strings")
            return list(value)
        raise MalformedClaimError("Claim 'aud' must be a string or a list of strings")
    if name in DATE_CLAIMS:
        try:
            return to_numeric_date(value)
        except MalformedClaimError as exc:
            raise MalformedClaimError(f"Claim '{name}' must be a numeric date") from exc
    return value


def _to_seconds(now: NumericDate) -> float:
    if isinstance(now, datetime):
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.timestamp()
    return float(now)


class Claims(MappingABC):
    """Immutable, ordered set of JWT claims.

    Reserved claims are exposed through typed properties; numeric dates are
    held as integral epoch seconds and surfaced as aware ``datetime``.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None, **extra: Any) -> None:
        items: dict[str, Any] = {}
        source = dict(data or {})
        source.update(extra)
        for key, value in source.items():
            if not isinstance(key, str):
                raise MalformedClaimError("Claim names must be strings")
            if key in RESERVED_CLAIMS:
                items[key] = _coerce_reserved(key, value)
            else:
                items[key] = copy.deepcopy(value)
        self._data = items

    # Mapping protocol ---------------------------------------------------
    def __getitem__(self, key: str) -> Any:
        value = self._data[key]
        if isinstance(value, (list, dict)):
            return copy.deepcopy(value)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Claims({self._data!r})"

    # Reserved claims ----------------------------------------------------
    @property
    def issuer(self) -> str | None:
        return self._data.get("iss")

    @property
    def subject(self) -> str | None:
        return self._data.get("sub")

    @property
    def jwt_id(self) -> str | None:
        return self._data.get("jti")

    @property
    def audience(self) -> tuple[str, ...] | None:
        """Return ``aud`` as a tuple, whether it was a string or a list."""

        aud = self._data.get("aud")
        if aud is None:
            return None
        if isinstance(aud, str):
            return (aud,)
        return tuple(aud)

    @property
    def expiration(self) -> datetime | None:
        return from_numeric_date(self._data.get("exp"))

    @property
    def not_before(self) -> datetime | None:
        return from_numeric_date(self._data.get("nbf"))

    @property
    def issued_at(self) -> datetime | None:
        return from_numeric_date(self._data.get("iat"))

    # Builders -----------------------------------------------------------
    def with_claim(self, name: str, value: Any) -> Claims:
        data = dict(self._data)
        data[name] = value
        return Claims(data)

    def without(self, *names: str) -> Claims:
        return Claims({k: v for k, v in self._data.items() if k not in names})

    def with_issuer(self, issuer: str) -> Claims:
        return self.with_claim("iss", issuer)

    def with_subject(self, subject: str) -> Claims:
        return self.with_claim("sub", subject)

    def with_audience(self, audience: str | Sequence[str]) -> Claims:
        return self.with_claim("aud", audience)

    def with_jwt_id(self, jwt_id: str) -> Claims:
        return self.with_claim("jti", jwt_id)

    def with_expiration(self, instant: NumericDate | None) -> Claims:
        return self.with_claim("exp", to_numeric_date(instant))

    def with_not_before(self, instant: NumericDate | None) -> Claims:
        return self.with_claim("nbf", to_numeric_date(instant))

    def with_issued_at(self, instant: NumericDate | None) -> Claims:
        return self.with_claim("iat", to_numeric_date(instant))

    # Typed getters for custom claims -----------------------------------
    def _typed(self, name: str, expected: tuple[type, ...], label: str) -> Any:
        value = self._data.get(name)
        if value is None:
            return None
        # bool is an int subclass; only accept it when asked for.
        if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
            raise MalformedClaimError(f"Claim '{name}' must be {label}")
        return copy.deepcopy(value)

    def get_string(self, name: str) -> str | None:
        return self._typed(name, (str,), "a string")

    def get_int(self, name: str) -> int | None:
        return self._typed(name, (int,), "an integer")

    def get_number(self, name: str) -> int | float | None:
        return self._typed(name, (int, float), "a number")

    def get_bool(self, name: str) -> bool | None:
        return self._typed(name, (bool,), "a boolean")

    def get_list(self, name: str) -> list[Any] | None:
        return self._typed(name, (list,), "an array")

    def get_object(self, name: str) -> dict[str, Any] | None:
        return self._typed(name, (dict,), "an object")

    # Temporal helpers ---------------------------------------------------
    def is_expired(self, now: NumericDate) -> bool:
        exp = self._data.get("exp")
        return exp is not None and _to_seconds(now) >= exp

    def is_unavailable_for_processing(self, now: NumericDate) -> bool:
        nbf = self._data.get("nbf")
        return nbf is not None and _to_seconds(now) < nbf

    # JSON ---------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def to_json(self) -> bytes:
        return canonical_json(self._data, error=MalformedClaimError)

    @classmethod
    def from_json(cls, data: bytes) -> Claims:
        return cls(parse_json_object(data, "claims"))


def canonical_json(value: Mapping[str, Any], *, error: type[Exception] = MalformedClaimError) -> bytes:
    """Serialize ``value`` compactly as UTF-8 JSON in insertion order."""

    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise error("Value contains text that is not valid UTF-8") from exc
    except (TypeError, ValueError) as exc:
        raise error(f"Value is not JSON serializable: {exc}") from exc


def parse_json_object(data: bytes, label: str) -> dict[str, Any]:
    """Parse ``data`` as a UTF-8 JSON object or raise :class:`MalformedTokenError`."""

    try:
        parsed = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedTokenError(f"Invalid JWT {label} JSON") from exc
    if not isinstance(parsed, dict):
        raise MalformedTokenError(f"JWT {label} must decode to an object")
    return parsed


__all__ = [
    "Claims",
    "DATE_CLAIMS",
    "RESERVED_CLAIMS",
    "canonical_json",
    "from_numeric_date",
    "parse_json_object",
    "to_numeric_date",
]
