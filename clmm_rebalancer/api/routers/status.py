from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from clmm_rebalancer.api.deps import get_rebalance_worker
from clmm_rebalancer.api.schemas.status import (
    ActiveRangeResponse,
    HealthResponse,
    WorkerStatusResponse,
)
from clmm_rebalancer.application.use_cases.rebalance_worker import RebalanceWorker


router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
def healthz(request: Request):
    worker = getattr(request.app.state, "rebalance_worker", None)
    return HealthResponse(status="ok", worker_enabled=worker is not None)


@router.get("/v1/worker/status", response_model=WorkerStatusResponse)
def worker_status(worker: RebalanceWorker = Depends(get_rebalance_worker)):
    status = worker.status()
    active_range = None
    if status.active_range is not None:
        active_range = ActiveRangeResponse(
            tick_lower=status.active_range[0],
            tick_upper=status.active_range[1],
        )
    return WorkerStatusResponse(
        pool_id=status.pool_id,
        owner=status.owner,
        running=status.running,
        position_id=status.position_id,
        tick_lower=status.tick_lower,
        tick_upper=status.tick_upper,
        tick_current=status.tick_current,
        active_range=active_range,
        in_range=status.in_range,
        price=status.price,
        range_ratio=status.range_ratio,
        cycles_completed=status.cycles_completed,
        cycles_failed=status.cycles_failed,
        last_cycle_at=status.last_cycle_at,
        last_error=status.last_error,
    )
