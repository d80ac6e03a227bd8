from __future__ import annotations

from typing import Protocol

from clmm_rebalancer.application.dto.worker import WorkerState


class WorkerStatePort(Protocol):
    def load(self, *, pool_id: str) -> WorkerState | None:
        ...

    def save(self, *, state: WorkerState) -> None:
        ...
