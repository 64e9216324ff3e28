"""pytest integration.

Any test whose fixture closure contains ``variant`` (directly, or through the
``variant_harness`` fixture) is parametrized once per active variant:

    class TypographyTest:
        def test_label(self, variant_harness):
            variant_harness.run_variant_test(TextContent("Label"))

``@pytest.mark.variants("Dark", set="theme")`` narrows the variants or picks
another declared set for a single test.
"""

from __future__ import annotations

import uuid
from typing import Any

import pytest

from .capture.image import ImageSnapshotComparator
from .config import HarnessConfig, load_config
from .errors import ConfigurationError
from .harness.runner import VariantHarness
from .identity import TestIdentity, identity_for
from .runs.events import EventWriter
from .runs.ledger import ArtifactLedger
from .utils import safe_slug
from .variants import Variant, VariantProvider


config_key = pytest.StashKey[HarnessConfig]()
provider_key = pytest.StashKey[VariantProvider]()
ledger_key = pytest.StashKey[ArtifactLedger]()
events_key = pytest.StashKey["EventWriter | None"]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("variantshot", "visual regression variants")
    group.addoption(
        "--variantshot-record",
        action="store_true",
        default=None,
        help="Overwrite stored baselines with the current renderings.",
    )
    group.addoption(
        "--variantshot-strict",
        action="store_true",
        default=None,
        help="Fail instead of recording when a baseline is missing.",
    )
    group.addoption("--variantshot-baseline-dir", default=None, help="Directory holding baseline images.")
    group.addoption(
        "--variantshot-variants",
        default=None,
        help="Comma-separated subset of variants to run (e.g. 'Dark').",
    )
    group.addoption("--variantshot-set", default=None, help="Variant set to run tests under.")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "variants(*names, set=None): run this test under the named variants of a variant set.",
    )
    overrides: dict[str, Any] = {
        "record": config.getoption("--variantshot-record"),
        "strict": config.getoption("--variantshot-strict"),
        "baseline_dir": config.getoption("--variantshot-baseline-dir"),
        "variants": config.getoption("--variantshot-variants"),
        "variant_set": config.getoption("--variantshot-set"),
    }
    try:
        settings = load_config(config.rootpath, overrides)
        provider = settings.provider()
    except ConfigurationError as exc:
        raise pytest.UsageError(f"variantshot: {exc}") from exc

    config.stash[config_key] = settings
    config.stash[provider_key] = provider
    config.stash[ledger_key] = ArtifactLedger()
    telemetry_path = settings.telemetry_path
    config.stash[events_key] = EventWriter(telemetry_path, str(uuid.uuid4())) if telemetry_path else None


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    if "variant" not in metafunc.fixturenames:
        return
    provider = metafunc.config.stash[provider_key]
    marker = metafunc.definition.get_closest_marker("variants")
    set_name = marker.kwargs.get("set") if marker else None
    only = list(marker.args) if marker and marker.args else None
    variants = provider.variants_for(set_name, only)
    metafunc.parametrize("variant", variants, ids=[v.slug for v in variants])


@pytest.fixture
def variant_comparator(request: pytest.FixtureRequest) -> ImageSnapshotComparator:
    """Snapshot collaborator; override this fixture to plug in another one."""

    settings = request.config.stash[config_key]
    return ImageSnapshotComparator(
        settings.baseline_dir,
        settings.output_dir,
        record=settings.record,
        strict=settings.strict,
        threshold=settings.threshold,
        max_diff_ratio=settings.max_diff_ratio,
    )


@pytest.fixture
def variant_harness(request: pytest.FixtureRequest, variant: Variant, variant_comparator: Any) -> VariantHarness:
    settings = request.config.stash[config_key]
    return VariantHarness(
        variant,
        variant_comparator,
        identity=item_identity(request.node, settings.qualified_suites),
        events=request.config.stash[events_key],
        ledger=request.config.stash[ledger_key],
        qualified_suites=settings.qualified_suites,
    )


def item_identity(item: pytest.Function, qualified: bool = False) -> TestIdentity:
    identity = identity_for(item.function, item.cls, qualified)
    callspec = getattr(item, "callspec", None)
    if callspec is None:
        return identity
    extras = [safe_slug(str(value)) for key, value in callspec.params.items() if key != "variant"]
    if not extras:
        return identity
    return TestIdentity(identity.suite, "-".join([identity.case, *extras]))


def pytest_collection_modifyitems(session: pytest.Session, config: pytest.Config, items: list[pytest.Item]) -> None:
    """Refuse the run when two collected items would capture the same artifact."""

    qualified = config.stash[config_key].qualified_suites
    owners: dict[str, str] = {}
    clashes: list[str] = []
    for item in items:
        if not isinstance(item, pytest.Function) or "variant_harness" not in item.fixturenames:
            continue
        callspec = getattr(item, "callspec", None)
        variant = callspec.params.get("variant") if callspec is not None else None
        if not isinstance(variant, Variant):
            continue
        name = item_identity(item, qualified).artifact_name(variant)
        if name in owners:
            clashes.append(f"{name}: {owners[name]} and {item.nodeid}")
        else:
            owners[name] = item.nodeid
    if clashes:
        hint = "" if qualified else " Set qualified_suites = true to prefix suites with their module."
        raise pytest.UsageError(
            "variantshot: several tests map to the same artifact name; " + "; ".join(clashes) + "." + hint
        )


def pytest_terminal_summary(terminalreporter: Any, exitstatus: int, config: pytest.Config) -> None:
    ledger = config.stash.get(ledger_key, None)
    if ledger is None or not ledger.records():
        return
    counts = ledger.summary()
    terminalreporter.section("variantshot")
    terminalreporter.write_line(
        f"{sum(counts.values())} artifacts: {counts['recorded']} recorded, {counts['matched']} matched, "
        f"{counts['failed']} failed, {counts['unresolved']} unresolved"
    )
    for record in ledger.failed():
        terminalreporter.write_line(f"FAILED {record.artifact_name} ({record.state.value})")
