"""Per-process record of the artifacts captured during a run."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable

from ..errors import DuplicateArtifactError
from ..harness.state import InvocationRecord, InvocationState


@dataclass
class ArtifactLedger:
    _claimed: set[str] = field(default_factory=set, init=False, repr=False)
    _records: list[InvocationRecord] = field(default_factory=list, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, init=False)

    def claim(self, artifact_name: str) -> None:
        with self._lock:
            if artifact_name in self._claimed:
                raise DuplicateArtifactError(artifact_name)
            self._claimed.add(artifact_name)

    def add(self, record: InvocationRecord) -> None:
        if not record.state.terminal:
            raise ValueError(f"Invocation of '{record.artifact_name}' is still {record.state.value}.")
        with self._lock:
            self._records.append(record)

    def records(self) -> list[InvocationRecord]:
        with self._lock:
            return list(self._records)

    def summary(self) -> dict[str, int]:
        counts = {"recorded": 0, "matched": 0, "failed": 0, "unresolved": 0}
        for record in self.records():
            if record.state is InvocationState.SUCCESS:
                key = "recorded" if record.outcome == "recorded" else "matched"
            elif record.state is InvocationState.IDENTITY_RESOLUTION_FAILURE:
                key = "unresolved"
            else:
                key = "failed"
            counts[key] += 1
        return counts

    def failed(self) -> Iterable[InvocationRecord]:
        return [r for r in self.records() if r.state is not InvocationState.SUCCESS]
