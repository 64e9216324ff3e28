"""File-system baseline store and Pillow comparator.

Baselines live at ``<baseline_dir>/<artifact_name>.png``. On mismatch the
rendered image and a highlighted diff are written under
``<output_dir>/failures/`` so triage can open them next to the baseline.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageChops

from ..errors import ComparisonFailure
from ..harness.context import Themed
from ..utils import ensure_dir
from .base import CaptureResult, Renderer
from .render import render_surface


@dataclass
class DiffStats:
    total_pixels: int
    diff_pixels: int
    bbox: tuple[int, int, int, int] | None

    @property
    def diff_ratio(self) -> float:
        if self.total_pixels == 0:
            return 0.0
        return self.diff_pixels / float(self.total_pixels)


class ImageSnapshotComparator:
    def __init__(
        self,
        baseline_dir: str | Path,
        output_dir: str | Path | None = None,
        renderer: Renderer = render_surface,
        *,
        record: bool = False,
        strict: bool = False,
        threshold: int = 0,
        max_diff_ratio: float = 0.0,
    ) -> None:
        self.baseline_dir = Path(baseline_dir).expanduser()
        self.output_dir = Path(output_dir).expanduser() if output_dir else self.baseline_dir.parent / ".variantshot"
        self.renderer = renderer
        self.record = record
        self.strict = strict
        self.threshold = max(0, int(threshold))
        self.max_diff_ratio = max(0.0, float(max_diff_ratio))

    def baseline_path(self, artifact_name: str) -> Path:
        return self.baseline_dir / f"{artifact_name}.png"

    def compare(self, surface: Themed, artifact_name: str) -> CaptureResult:
        image = self.renderer(surface).convert("RGB")
        baseline_path = self.baseline_path(artifact_name)

        if self.record or not baseline_path.exists():
            if not self.record and self.strict:
                raise ComparisonFailure(artifact_name, f"no baseline at {baseline_path} (strict mode)")
            ensure_dir(baseline_path.parent)
            image.save(baseline_path)
            return CaptureResult(artifact_name=artifact_name, status="recorded", baseline_path=baseline_path)

        with Image.open(baseline_path) as handle:
            baseline = handle.convert("RGB")

        if baseline.size != image.size:
            actual_path = self._write_actual(artifact_name, image)
            raise ComparisonFailure(
                artifact_name,
                f"size {image.size[0]}x{image.size[1]} != baseline {baseline.size[0]}x{baseline.size[1]} "
                f"(actual: {actual_path}, baseline: {baseline_path})",
            )

        stats, diff_image = diff_images(baseline, image, self.threshold)
        if stats.diff_pixels and stats.diff_ratio > self.max_diff_ratio:
            actual_path = self._write_actual(artifact_name, image)
            diff_path = self._failure_dir() / f"{artifact_name}.diff.png"
            diff_image.save(diff_path)
            raise ComparisonFailure(
                artifact_name,
                f"{stats.diff_pixels}/{stats.total_pixels} pixels differ ({stats.diff_ratio:.4%}) in {stats.bbox} "
                f"(actual: {actual_path}, diff: {diff_path}, baseline: {baseline_path})",
            )
        return CaptureResult(
            artifact_name=artifact_name,
            status="matched",
            baseline_path=baseline_path,
            metadata={"diff_pixels": stats.diff_pixels, "diff_ratio": stats.diff_ratio},
        )

    def _failure_dir(self) -> Path:
        path = self.output_dir / "failures"
        ensure_dir(path)
        return path

    def _write_actual(self, artifact_name: str, image: Image.Image) -> Path:
        path = self._failure_dir() / f"{artifact_name}.actual.png"
        image.save(path)
        return path


def diff_images(baseline: Image.Image, candidate: Image.Image, threshold: int = 0) -> tuple[DiffStats, Image.Image]:
    """Per-pixel max-channel difference; returns stats and a red-on-gray highlight."""

    delta = ImageChops.difference(baseline, candidate)
    channels = delta.split()
    peak = channels[0]
    for channel in channels[1:]:
        peak = ImageChops.lighter(peak, channel)
    mask = peak.point(lambda v: 255 if v > threshold else 0)
    diff_pixels = mask.histogram()[255]

    highlight = baseline.convert("L").convert("RGB")
    highlight.paste((255, 0, 0), mask=mask)
    total = baseline.size[0] * baseline.size[1]
    return DiffStats(total_pixels=total, diff_pixels=diff_pixels, bbox=mask.getbbox()), highlight
