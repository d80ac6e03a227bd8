from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from clmm_rebalancer.application.dto.worker import WorkerState


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def map_row_to_worker_state(row: Mapping[str, Any]) -> WorkerState:
    last_compound_at = row.get("last_compound_at")
    return WorkerState(
        pool_id=row["pool_id"],
        position_id=row.get("position_id"),
        last_compound_at=float(last_compound_at) if last_compound_at is not None else None,
        updated_at=_as_datetime(row.get("updated_at")),
    )
