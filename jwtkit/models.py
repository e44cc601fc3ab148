"""Header and token value types for the compact serialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .algorithms import Algorithm, resolve_algorithm
from .claims import Claims, canonical_json
from .errors import MalformedTokenError

# Header members this package understands; anything else lands in ``extra``.
KNOWN_HEADER_MEMBERS = frozenset({"alg", "typ", "kid", "cty", "x5t", "x5t#S256"})


@dataclass(frozen=True, slots=True)
class Header:
    """JOSE header of a compact JWT.

    JSON member order is ``alg``, ``typ``, ``kid`` and then ``extra`` in
    insertion order, so signatures are reproducible.
    """

    alg: Algorithm
    typ: str | None = "JWT"
    kid: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "alg", resolve_algorithm(self.alg))
        for reserved in ("alg", "typ", "kid"):
            if reserved in self.extra:
                raise MalformedTokenError(f"Header member '{reserved}' must not be passed as extra")
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def get(self, name: str, default: Any = None) -> Any:
        if name == "alg":
            return self.alg.value
        if name == "typ":
            return self.typ if self.typ is not None else default
        if name == "kid":
            return self.kid if self.kid is not None else default
        return self.extra.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"alg": self.alg.value}
        if self.typ is not None:
            data["typ"] = self.typ
        if self.kid is not None:
            data["kid"] = self.kid
        data.update(self.extra)
        return data

    def to_json(self) -> bytes:
        return canonical_json(self.to_dict(), error=MalformedTokenError)

    def unknown_members(self) -> tuple[str, ...]:
        return tuple(name for name in self.extra if name not in KNOWN_HEADER_MEMBERS)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Header:
        if "alg" not in data:
            raise MalformedTokenError("JWT header is missing 'alg'")
        typ = data.get("typ")
        if typ is not None and not isinstance(typ, str):
            raise MalformedTokenError("JWT header 'typ' must be a string")
        kid = data.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise MalformedTokenError("JWT header 'kid' must be a string")
        extra = {k: v for k, v in data.items() if k not in ("alg", "typ", "kid")}
        return cls(alg=resolve_algorithm(data["alg"]), typ=typ, kid=kid, extra=extra)


@dataclass(frozen=True, slots=True)
class Jwt:
    """A decoded or freshly encoded token."""

    header: Header
    claims: Claims
    signature: bytes = b""
    compact: str = ""

    @property
    def algorithm(self) -> Algorithm:
        return self.header.alg


__all__ = ["Header", "Jwt", "KNOWN_HEADER_MEMBERS"]
