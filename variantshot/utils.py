"""Shared utilities for variantshot."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
import tomllib
from typing import Any

from .errors import ConfigurationError


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def getenv_flag(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def parse_flag(value: Any, key: str) -> bool:
    """Read a boolean setting written either as a TOML bool or as a string."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    raise ConfigurationError(f"'{key}' must be a boolean, got {value!r}.")


def getenv_list(key: str) -> list[str] | None:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    return [part.strip() for part in raw.split(",") if part.strip()]


def safe_slug(value: str) -> str:
    cleaned = "".join(ch.lower() if ch.isalnum() else "-" for ch in str(value))
    cleaned = "-".join(part for part in cleaned.split("-") if part)
    return cleaned[:64] or "x"


def read_toml(path: Path) -> dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def find_project_root(start: Path) -> Path | None:
    for current in (start,) + tuple(start.parents):
        if (current / "variantshot.toml").exists():
            return current
        pyproject = current / "pyproject.toml"
        if pyproject.exists():
            try:
                data = read_toml(pyproject)
            except Exception:
                continue
            if "variantshot" in data.get("tool", {}):
                return current
    return None
