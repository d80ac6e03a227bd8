from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WorkerState:
    pool_id: str
    position_id: str | None
    last_compound_at: float | None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class WorkerStatus:
    pool_id: str
    owner: str
    running: bool
    position_id: str | None
    tick_lower: int | None
    tick_upper: int | None
    tick_current: int | None
    active_range: tuple[int, int] | None
    in_range: bool | None
    price: str | None
    range_ratio: str | None
    cycles_completed: int
    cycles_failed: int
    last_cycle_at: datetime | None
    last_error: str | None
