"""Per-invocation lifecycle."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class InvocationState(enum.Enum):
    NOT_STARTED = "not_started"
    VARIANT_APPLIED = "variant_applied"
    IDENTITY_RESOLVED = "identity_resolved"
    DELEGATED = "delegated"
    SUCCESS = "success"
    COMPARISON_FAILED = "comparison_failed"
    IDENTITY_RESOLUTION_FAILURE = "identity_resolution_failure"
    DUPLICATE_ARTIFACT = "duplicate_artifact"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = {
    InvocationState.SUCCESS,
    InvocationState.COMPARISON_FAILED,
    InvocationState.IDENTITY_RESOLUTION_FAILURE,
    InvocationState.DUPLICATE_ARTIFACT,
}


@dataclass(frozen=True)
class InvocationRecord:
    artifact_name: str
    variant: str
    state: InvocationState
    outcome: str | None = None
    error: str | None = None
