from __future__ import annotations

import pytest

pytest_plugins = ["pytester"]


@pytest.fixture
def run_variants(pytester: pytest.Pytester, monkeypatch: pytest.MonkeyPatch):
    """Run an inner pytest session with only the variantshot plugin loaded."""

    monkeypatch.setenv("PYTEST_DISABLE_PLUGIN_AUTOLOAD", "1")
    for key in (
        "VARIANTSHOT_RECORD",
        "VARIANTSHOT_STRICT",
        "VARIANTSHOT_BASELINE_DIR",
        "VARIANTSHOT_VARIANTS",
        "VARIANTSHOT_VARIANT_SET",
    ):
        monkeypatch.delenv(key, raising=False)

    def _run(*args: str) -> pytest.RunResult:
        return pytester.runpytest("-p", "variantshot.pytest_plugin", "-p", "no:cacheprovider", *args)

    return _run
