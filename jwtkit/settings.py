"""Environment-driven validation settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator

from .algorithms import SIGNING_ALGORITHMS, Algorithm, resolve_algorithm
from .decoder import ValidationPolicy
from .env import load_env
from .errors import UnsupportedAlgorithmError
from .keys.rsa import DEFAULT_MIN_RSA_KEY_BITS
from .signers import Signer
from .signers import signer_for as _signer_for
from .verifiers import Verifier
from .verifiers import verifier_for as _verifier_for

_TRUE_VALUES = ("1", "true", "yes", "on")


def _parse_csv(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    values = [item.strip() for item in raw.split(",") if item.strip()]
    return values or None


def _parse_bool(raw: str | None, default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


class JwtSettings(BaseModel):
    """Defaults for token validation, usually read from ``JWT_*`` variables."""

    model_config = {"frozen": True}

    clock_skew_seconds: float = Field(0, ge=0)
    min_rsa_key_bits: int = Field(DEFAULT_MIN_RSA_KEY_BITS, ge=512)
    allowed_algorithms: tuple[Algorithm, ...] = tuple(sorted(SIGNING_ALGORITHMS, key=lambda alg: alg.value))
    allow_none: bool = False
    strict_header: bool = False
    expected_issuer: str | None = None
    audience: str | None = None

    @field_validator("allowed_algorithms", mode="before")
    @classmethod
    def _resolve_algorithms(cls, value: object) -> tuple[Algorithm, ...]:
        if isinstance(value, str):
            value = _parse_csv(value) or []
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("allowed_algorithms must be a list of algorithm ids")
        resolved: list[Algorithm] = []
        for item in value:
            try:
                resolved.append(resolve_algorithm(item))
            except UnsupportedAlgorithmError as exc:
                raise ValueError(str(exc)) from exc
        if not resolved:
            raise ValueError("allowed_algorithms must not be empty")
        return tuple(resolved)

    @field_validator("expected_issuer", "audience")
    @classmethod
    def _blank_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        env_file: Path | str | None = None,
    ) -> JwtSettings:
        """Build settings from ``environ`` (default :data:`os.environ`).

        When ``env_file`` is given its values fill in variables missing from
        ``environ``; the process environment itself is left untouched.
        """

        env: Mapping[str, str] = os.environ if environ is None else environ
        if env_file is not None:
            merged = dict(env)
            load_env(env_file, merged)
            env = merged

        data: dict[str, object] = {}
        if "JWT_CLOCK_SKEW_SECONDS" in env:
            data["clock_skew_seconds"] = env["JWT_CLOCK_SKEW_SECONDS"]
        if "JWT_MIN_RSA_KEY_BITS" in env:
            data["min_rsa_key_bits"] = env["JWT_MIN_RSA_KEY_BITS"]
        algorithms = _parse_csv(env.get("JWT_ALLOWED_ALGORITHMS"))
        if algorithms is not None:
            data["allowed_algorithms"] = algorithms
        data["allow_none"] = _parse_bool(env.get("JWT_ALLOW_NONE"))
        data["strict_header"] = _parse_bool(env.get("JWT_STRICT_HEADER"))
        data["expected_issuer"] = env.get("JWT_EXPECTED_ISSUER")
        data["audience"] = env.get("JWT_AUDIENCE")
        return cls.model_validate(data)

    def to_policy(self, **overrides: object) -> ValidationPolicy:
        """Return a :class:`ValidationPolicy`; ``overrides`` replace fields."""

        values: dict[str, object] = {
            "allowed_algorithms": frozenset(self.allowed_algorithms),
            "expected_issuer": self.expected_issuer,
            "audience": self.audience,
            "clock_skew_seconds": self.clock_skew_seconds,
            "allow_none": self.allow_none,
            "strict_header": self.strict_header,
        }
        values.update(overrides)
        return ValidationPolicy(**values)  # type: ignore[arg-type]

    def signer_for(self, algorithm: Algorithm | str, key: Any = None) -> Signer:
        """Build a signer; RSA keys must meet ``min_rsa_key_bits``."""

        return _signer_for(algorithm, key, min_key_bits=self.min_rsa_key_bits)

    def verifier_for(self, algorithm: Algorithm | str, key: Any = None) -> Verifier:
        """Build a verifier; RSA keys must meet ``min_rsa_key_bits``."""

        return _verifier_for(algorithm, key, min_key_bits=self.min_rsa_key_bits)


__all__ = ["JwtSettings"]
