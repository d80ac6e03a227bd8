from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    worker_enabled: bool


class ActiveRangeResponse(BaseModel):
    tick_lower: int
    tick_upper: int


class WorkerStatusResponse(BaseModel):
    pool_id: str
    owner: str
    running: bool
    position_id: str | None
    tick_lower: int | None
    tick_upper: int | None
    tick_current: int | None
    active_range: ActiveRangeResponse | None
    in_range: bool | None
    price: str | None
    range_ratio: str | None
    cycles_completed: int
    cycles_failed: int
    last_cycle_at: datetime | None
    last_error: str | None
