from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from variantshot.capture.image import ImageSnapshotComparator, diff_images
from variantshot.capture.render import TextContent, render_surface
from variantshot.errors import ComparisonFailure
from variantshot.harness.context import apply_variant
from variantshot.variants import THEME_VARIANTS


LIGHT = THEME_VARIANTS.get("Light")
DARK = THEME_VARIANTS.get("Dark")


def test_render_text_uses_variant_colors() -> None:
    light = render_surface(apply_variant(TextContent("Label", width=40, height=20), LIGHT))
    dark = render_surface(apply_variant(TextContent("Label", width=40, height=20), DARK))
    assert light.size == (40, 20)
    assert light.getpixel((0, 0)) == (255, 255, 255)
    assert dark.getpixel((0, 0)) == (18, 18, 18)


def test_render_callable_receives_context() -> None:
    seen = []

    def content(context):
        seen.append(context.dark_mode)
        return Image.new("RGB", (4, 4), context.background)

    image = render_surface(apply_variant(content, DARK))
    assert seen == [True]
    assert image.getpixel((0, 0)) == (18, 18, 18)


def test_render_rejects_unknown_content() -> None:
    with pytest.raises(TypeError):
        render_surface(apply_variant(42, LIGHT))


def test_first_run_records_then_matches(tmp_path: Path) -> None:
    comparator = ImageSnapshotComparator(tmp_path / "baselines", tmp_path / "out")
    surface = apply_variant(TextContent("Label"), LIGHT)

    first = comparator.compare(surface, "TypographyTest_label_light")
    second = comparator.compare(surface, "TypographyTest_label_light")

    assert first.status == "recorded"
    assert (tmp_path / "baselines" / "TypographyTest_label_light.png").exists()
    assert second.status == "matched"


def test_changed_content_fails_with_artifact_name_and_diff(tmp_path: Path) -> None:
    comparator = ImageSnapshotComparator(tmp_path / "baselines", tmp_path / "out")
    comparator.compare(apply_variant(TextContent("Label"), DARK), "TypographyTest_label_dark")

    with pytest.raises(ComparisonFailure, match="TypographyTest_label_dark") as excinfo:
        comparator.compare(apply_variant(TextContent("Changed"), DARK), "TypographyTest_label_dark")

    assert "pixels differ" in excinfo.value.detail
    assert (tmp_path / "out" / "failures" / "TypographyTest_label_dark.actual.png").exists()
    assert (tmp_path / "out" / "failures" / "TypographyTest_label_dark.diff.png").exists()


def test_size_change_fails(tmp_path: Path) -> None:
    comparator = ImageSnapshotComparator(tmp_path / "baselines", tmp_path / "out")
    comparator.compare(apply_variant(TextContent("Label", width=40), LIGHT), "S_c_light")
    with pytest.raises(ComparisonFailure, match="size"):
        comparator.compare(apply_variant(TextContent("Label", width=41), LIGHT), "S_c_light")


def test_baselines_are_independent_per_variant(tmp_path: Path) -> None:
    comparator = ImageSnapshotComparator(tmp_path / "baselines", tmp_path / "out")
    comparator.compare(apply_variant(TextContent("Label"), LIGHT), "S_c_light")

    result = comparator.compare(apply_variant(TextContent("Label"), DARK), "S_c_dark")
    assert result.status == "recorded"
    assert comparator.compare(apply_variant(TextContent("Label"), LIGHT), "S_c_light").status == "matched"


def test_strict_mode_refuses_to_record(tmp_path: Path) -> None:
    comparator = ImageSnapshotComparator(tmp_path / "baselines", strict=True)
    with pytest.raises(ComparisonFailure, match="strict"):
        comparator.compare(apply_variant(TextContent("Label"), LIGHT), "S_c_light")
    assert not (tmp_path / "baselines" / "S_c_light.png").exists()


def test_record_mode_overwrites_baseline(tmp_path: Path) -> None:
    baselines = tmp_path / "baselines"
    ImageSnapshotComparator(baselines).compare(apply_variant(TextContent("Old"), LIGHT), "S_c_light")
    recorder = ImageSnapshotComparator(baselines, record=True)
    assert recorder.compare(apply_variant(TextContent("New"), LIGHT), "S_c_light").status == "recorded"

    checker = ImageSnapshotComparator(baselines)
    assert checker.compare(apply_variant(TextContent("New"), LIGHT), "S_c_light").status == "matched"


def test_diff_ratio_tolerance(tmp_path: Path) -> None:
    base = Image.new("RGB", (10, 10), (0, 0, 0))
    changed = base.copy()
    changed.putpixel((3, 4), (255, 255, 255))

    stats, highlight = diff_images(base, changed)
    assert stats.diff_pixels == 1
    assert stats.bbox == (3, 4, 4, 5)
    assert highlight.getpixel((3, 4)) == (255, 0, 0)

    baselines = tmp_path / "baselines"
    ImageSnapshotComparator(baselines).compare(apply_variant(base, LIGHT), "S_c_light")
    tolerant = ImageSnapshotComparator(baselines, max_diff_ratio=0.05)
    assert tolerant.compare(apply_variant(changed, LIGHT), "S_c_light").status == "matched"
    with pytest.raises(ComparisonFailure):
        ImageSnapshotComparator(baselines).compare(apply_variant(changed, LIGHT), "S_c_light")


def test_threshold_ignores_small_channel_noise() -> None:
    base = Image.new("RGB", (4, 4), (100, 100, 100))
    noisy = Image.new("RGB", (4, 4), (102, 100, 99))
    stats, _ = diff_images(base, noisy, threshold=2)
    assert stats.diff_pixels == 0
    stats, _ = diff_images(base, noisy, threshold=1)
    assert stats.diff_pixels == 16
