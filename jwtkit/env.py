""".env support for the ``JWT_*`` settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import MutableMapping

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def load_env(
    path: Path | str = Path(".env"),
    environ: MutableMapping[str, str] | None = None,
) -> dict[str, str]:
    """Load ``KEY=VALUE`` pairs from ``path`` into ``environ``.

    Variables already present are not overwritten and keys without a value
    are ignored. Returns the pairs that were applied; a missing file applies
    nothing.
    """

    target = os.environ if environ is None else environ
    env_path = Path(path)
    if not env_path.exists():
        return {}

    applied: dict[str, str] = {}
    for key, value in dotenv_values(env_path).items():
        if value is None or key in target:
            continue
        target[key] = applied[key] = value
    logger.debug("Applied %d variable(s) from %s", len(applied), env_path)
    return applied


__all__ = ["load_env"]
