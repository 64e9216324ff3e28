"""Variant harness: the single call a visual test makes.

`run_variant_test(content)` applies the active variant to the content, works
out which test is calling, names the artifact `{suite}_{case}_{variant}` and
hands the themed content to the snapshot comparator. Nothing is retried and
nothing the comparator raises is swallowed.
"""

from __future__ import annotations

import sys
from typing import Any, Sequence

from ..capture.base import CaptureResult, SnapshotComparator
from ..errors import ComparisonFailure, DuplicateArtifactError, IdentityResolutionFailure
from ..identity import DEFAULT_FUNCTION_PATTERNS, TestIdentity, resolve_identity
from ..runs.events import EventWriter
from ..runs.ledger import ArtifactLedger
from ..variants import Variant
from .context import apply_variant
from .state import InvocationRecord, InvocationState


class VariantHarness:
    def __init__(
        self,
        variant: Variant,
        comparator: SnapshotComparator,
        *,
        identity: TestIdentity | None = None,
        events: EventWriter | None = None,
        ledger: ArtifactLedger | None = None,
        test_patterns: Sequence[str] = DEFAULT_FUNCTION_PATTERNS,
        qualified_suites: bool = False,
    ) -> None:
        self.variant = variant
        self.comparator = comparator
        self.identity = identity
        self.events = events
        self.ledger = ledger
        self.test_patterns = tuple(test_patterns)
        self.qualified_suites = qualified_suites
        self.state = InvocationState.NOT_STARTED
        self.last_record: InvocationRecord | None = None

    def run_variant_test(self, content: Any) -> None:
        self.state = InvocationState.NOT_STARTED
        surface = apply_variant(content, self.variant)
        self.state = InvocationState.VARIANT_APPLIED
        if self.events is not None:
            self.events.variant_applied(self.variant)

        try:
            identity = self.identity or resolve_identity(
                sys._getframe(1),
                patterns=self.test_patterns,
                qualified=self.qualified_suites,
                variant=self.variant,
            )
        except IdentityResolutionFailure as exc:
            self._finish(exc.attempted_name, InvocationState.IDENTITY_RESOLUTION_FAILURE, error=str(exc))
            raise

        name = identity.artifact_name(self.variant)
        self.state = InvocationState.IDENTITY_RESOLVED
        if self.events is not None:
            self.events.identity_resolved(self.variant, identity)
        if self.ledger is not None:
            try:
                self.ledger.claim(name)
            except DuplicateArtifactError as exc:
                self._finish(name, InvocationState.DUPLICATE_ARTIFACT, error=str(exc))
                raise

        self.state = InvocationState.DELEGATED
        if self.events is not None:
            self.events.delegated(self.variant, name)
        try:
            result = self.comparator.compare(surface, name)
        except ComparisonFailure as exc:
            self._finish(name, InvocationState.COMPARISON_FAILED, error=str(exc))
            raise
        except Exception as exc:
            exc.add_note(f"variantshot artifact: {name}")
            self._finish(name, InvocationState.COMPARISON_FAILED, error=f"{type(exc).__name__}: {exc}")
            raise
        self._finish(name, InvocationState.SUCCESS, outcome=_outcome(result))

    def _finish(
        self,
        artifact_name: str,
        state: InvocationState,
        *,
        outcome: str | None = None,
        error: str | None = None,
    ) -> None:
        self.state = state
        record = InvocationRecord(
            artifact_name=artifact_name,
            variant=self.variant.name,
            state=state,
            outcome=outcome,
            error=error,
        )
        self.last_record = record
        if self.ledger is not None:
            self.ledger.add(record)
        if self.events is not None:
            self.events.invocation_finished(record)


def _outcome(result: CaptureResult | None) -> str:
    if result is None:
        return "compared"
    return result.status
