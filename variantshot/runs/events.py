"""Append-only telemetry stream for variant runs.

One JSON object per line. Every event carries the run id, a UTC timestamp
and, under pytest-xdist, the worker id so parallel workers can share a file.
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..harness.state import InvocationRecord, InvocationState
from ..identity import TestIdentity
from ..utils import now_utc_iso
from ..variants import Variant


@dataclass
class EventWriter:
    path: Path
    run_id: str
    worker: str | None = field(default_factory=lambda: os.getenv("PYTEST_XDIST_WORKER"))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, init=False)

    def variant_applied(self, variant: Variant) -> dict[str, Any]:
        return self.emit(InvocationState.VARIANT_APPLIED.value, variant=variant.name, params=dict(variant.params))

    def identity_resolved(self, variant: Variant, identity: TestIdentity) -> dict[str, Any]:
        return self.emit(
            InvocationState.IDENTITY_RESOLVED.value,
            variant=variant.name,
            suite=identity.suite,
            case=identity.case,
            artifact_name=identity.artifact_name(variant),
        )

    def delegated(self, variant: Variant, artifact_name: str) -> dict[str, Any]:
        return self.emit(InvocationState.DELEGATED.value, variant=variant.name, artifact_name=artifact_name)

    def invocation_finished(self, record: InvocationRecord) -> dict[str, Any]:
        return self.emit(
            "invocation_finished",
            artifact_name=record.artifact_name,
            variant=record.variant,
            state=record.state.value,
            outcome=record.outcome,
            error=record.error,
        )

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        event: dict[str, Any] = {"type": event_type, "run_id": self.run_id, "ts": now_utc_iso()}
        if self.worker:
            event["worker"] = self.worker
        event.update(payload)
        line = f"{json.dumps(event, default=str)}\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
        return event
