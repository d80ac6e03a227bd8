from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from clmm_rebalancer.api.deps import build_rebalance_worker
from clmm_rebalancer.api.routers.status import router as status_router
from clmm_rebalancer.core.config import get_settings, validate_settings
from clmm_rebalancer.core.watchdog import exit_process


logger = logging.getLogger(__name__)


def _on_worker_done(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        logger.info("main: worker_stopped")
        return
    logger.critical("main: worker_crashed error=%s", exc, exc_info=exc)
    # run_forever only raises on fatal errors
    exit_process()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app.state.rebalance_worker = None
    task: asyncio.Task | None = None

    if settings.worker_enabled:
        validate_settings(settings)
        worker = build_rebalance_worker(settings)
        app.state.rebalance_worker = worker
        task = asyncio.create_task(worker.run_forever())
        task.add_done_callback(_on_worker_done)
        logger.info(
            "main: worker_scheduled protocol=%s pool_id=%s",
            settings.protocol.value,
            settings.pool_id,
        )

    try:
        yield
    finally:
        if task is not None:
            app.state.rebalance_worker.stop()
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)


app = FastAPI(title="CLMM Rebalancer", lifespan=lifespan)
app.include_router(status_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("clmm_rebalancer.main:app", host="0.0.0.0", port=8000)
