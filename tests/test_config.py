from __future__ import annotations

from pathlib import Path

import pytest

from variantshot.config import load_config
from variantshot.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in (
        "VARIANTSHOT_RECORD",
        "VARIANTSHOT_STRICT",
        "VARIANTSHOT_BASELINE_DIR",
        "VARIANTSHOT_VARIANTS",
        "VARIANTSHOT_VARIANT_SET",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.baseline_dir == tmp_path / "tests" / "baselines"
    assert config.output_dir == tmp_path / ".variantshot"
    assert config.telemetry_path == tmp_path / ".variantshot" / "telemetry.jsonl"
    assert config.record is False
    assert [v.name for v in config.provider().variants_for()] == ["Light", "Dark"]


def test_pyproject_table_declares_variant_sets(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[tool.variantshot]
baseline_dir = "snapshots"
variant_set = "density"
max_diff_ratio = 0.01

[tool.variantshot.variant_sets.density.Compact]
scale = 0.85

[tool.variantshot.variant_sets.density.Comfortable]
scale = 1.0
""",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config.baseline_dir == tmp_path / "snapshots"
    assert config.max_diff_ratio == 0.01
    variants = config.provider().variants_for()
    assert [v.name for v in variants] == ["Compact", "Comfortable"]
    assert variants[0].params["scale"] == 0.85


def test_standalone_file_wins_over_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.variantshot]\nbaseline_dir = "a"\n', encoding="utf-8")
    (tmp_path / "variantshot.toml").write_text('baseline_dir = "b"\n', encoding="utf-8")
    assert load_config(tmp_path).baseline_dir == tmp_path / "b"


def test_environment_then_overrides(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.variantshot]\nbaseline_dir = "a"\n', encoding="utf-8")
    monkeypatch.setenv("VARIANTSHOT_BASELINE_DIR", "from-env")
    monkeypatch.setenv("VARIANTSHOT_RECORD", "yes")
    monkeypatch.setenv("VARIANTSHOT_VARIANTS", "Dark")

    config = load_config(tmp_path)
    assert config.baseline_dir == tmp_path / "from-env"
    assert config.record is True
    assert [v.name for v in config.provider().variants_for()] == ["Dark"]

    config = load_config(tmp_path, {"baseline_dir": "from-cli", "record": None})
    assert config.baseline_dir == tmp_path / "from-cli"
    assert config.record is True


def test_invalid_toml_is_configuration_error(tmp_path: Path) -> None:
    (tmp_path / "variantshot.toml").write_text("baseline_dir = ", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


def test_unknown_variant_set_is_configuration_error(tmp_path: Path) -> None:
    config = load_config(tmp_path, {"variant_set": "locale"})
    with pytest.raises(ConfigurationError, match="Unknown variant set"):
        config.provider()


def test_string_flags_are_parsed_not_truth_tested(tmp_path: Path) -> None:
    (tmp_path / "variantshot.toml").write_text(
        'record = "false"\nstrict = "on"\nqualified_suites = "no"\ntelemetry = "0"\n', encoding="utf-8"
    )
    config = load_config(tmp_path)
    assert config.record is False
    assert config.strict is True
    assert config.qualified_suites is False
    assert config.telemetry_path is None


@pytest.mark.parametrize("line", ['record = "maybe"', "telemetry = 3"])
def test_unreadable_flag_is_configuration_error(tmp_path: Path, line: str) -> None:
    (tmp_path / "variantshot.toml").write_text(line + "\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must be a boolean"):
        load_config(tmp_path)
