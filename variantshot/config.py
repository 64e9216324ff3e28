"""Harness configuration.

Values are layered, later layers winning: built-in defaults, the
``[tool.variantshot]`` table of ``pyproject.toml`` (or a standalone
``variantshot.toml``), ``VARIANTSHOT_*`` environment variables, and finally
explicit overrides such as pytest command-line options.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigurationError
from .utils import find_project_root, getenv_flag, getenv_list, parse_flag, read_toml
from .variants import VariantProvider, VariantSet, parse_variant_sets


@dataclass
class HarnessConfig:
    root: Path
    baseline_dir: Path
    output_dir: Path
    variant_set: str = "theme"
    only: list[str] | None = None
    variant_sets: dict[str, VariantSet] = field(default_factory=dict)
    record: bool = False
    strict: bool = False
    threshold: int = 0
    max_diff_ratio: float = 0.0
    qualified_suites: bool = False
    telemetry: bool = True

    def provider(self) -> VariantProvider:
        return VariantProvider(self.variant_sets, default_set=self.variant_set, only=self.only)

    @property
    def telemetry_path(self) -> Path | None:
        return self.output_dir / "telemetry.jsonl" if self.telemetry else None


def load_file_settings(root: Path) -> dict[str, Any]:
    standalone = root / "variantshot.toml"
    try:
        if standalone.exists():
            return dict(read_toml(standalone))
        pyproject = root / "pyproject.toml"
        if pyproject.exists():
            section = read_toml(pyproject).get("tool", {}).get("variantshot", {})
            return dict(section) if isinstance(section, Mapping) else {}
    except ValueError as exc:
        raise ConfigurationError(f"Could not parse variantshot settings under {root}: {exc}") from exc
    return {}


def load_config(root: str | Path | None = None, overrides: Mapping[str, Any] | None = None) -> HarnessConfig:
    if root is None:
        cwd = Path.cwd()
        root_path = find_project_root(cwd) or cwd
    else:
        root_path = Path(root).expanduser()

    settings = load_file_settings(root_path)
    settings.update(_env_settings())
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})

    only = settings.get("variants")
    if isinstance(only, str):
        only = [part.strip() for part in only.split(",") if part.strip()]
    if only is not None and not isinstance(only, list):
        raise ConfigurationError("'variants' must be a list of variant names.")

    try:
        threshold = int(settings.get("threshold", 0))
        max_diff_ratio = float(settings.get("max_diff_ratio", 0.0))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid comparison tolerance: {exc}") from exc

    return HarnessConfig(
        root=root_path,
        baseline_dir=_resolve_path(root_path, settings.get("baseline_dir") or "tests/baselines"),
        output_dir=_resolve_path(root_path, settings.get("output_dir") or ".variantshot"),
        variant_set=str(settings.get("variant_set") or "theme"),
        only=only,
        variant_sets=parse_variant_sets(settings.get("variant_sets")),
        record=parse_flag(settings.get("record", False), "record"),
        strict=parse_flag(settings.get("strict", False), "strict"),
        threshold=threshold,
        max_diff_ratio=max_diff_ratio,
        qualified_suites=parse_flag(settings.get("qualified_suites", False), "qualified_suites"),
        telemetry=parse_flag(settings.get("telemetry", True), "telemetry"),
    )


def _env_settings() -> dict[str, Any]:
    out: dict[str, Any] = {}
    if os.getenv("VARIANTSHOT_RECORD") is not None:
        out["record"] = getenv_flag("VARIANTSHOT_RECORD")
    if os.getenv("VARIANTSHOT_STRICT") is not None:
        out["strict"] = getenv_flag("VARIANTSHOT_STRICT")
    baseline_dir = os.getenv("VARIANTSHOT_BASELINE_DIR")
    if baseline_dir:
        out["baseline_dir"] = baseline_dir
    variant_set = os.getenv("VARIANTSHOT_VARIANT_SET")
    if variant_set:
        out["variant_set"] = variant_set.strip()
    only = getenv_list("VARIANTSHOT_VARIANTS")
    if only is not None:
        out["variants"] = only
    return out


def _resolve_path(root: Path, value: Any) -> Path:
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else root / path
