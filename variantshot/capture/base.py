"""Capture/comparison collaborator interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol

from PIL import Image

from ..harness.context import Themed


@dataclass
class CaptureResult:
    artifact_name: str
    status: str  # "recorded" | "matched"
    baseline_path: Path | None = None
    metadata: Mapping[str, Any] | None = None


class Renderer(Protocol):
    def __call__(self, surface: Themed) -> Image.Image:
        ...


class SnapshotComparator(Protocol):
    def compare(self, surface: Themed, artifact_name: str) -> CaptureResult | None:
        ...
