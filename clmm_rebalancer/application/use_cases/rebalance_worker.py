from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import time
from typing import Awaitable, Callable

from clmm_rebalancer.application.dto.liquidity_plan import LiquidityPlan
from clmm_rebalancer.application.dto.submission import SubmissionResult
from clmm_rebalancer.application.dto.worker import WorkerState, WorkerStatus
from clmm_rebalancer.application.ports.ledger_read_port import LedgerReadPort
from clmm_rebalancer.application.ports.plan_submitter_port import PlanSubmitterPort
from clmm_rebalancer.application.ports.worker_state_port import WorkerStatePort
from clmm_rebalancer.application.use_cases.position_manager import PositionManager
from clmm_rebalancer.core.watchdog import CycleWatchdog
from clmm_rebalancer.domain.entities.coin import normalize_object_id
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.exceptions import (
    ExecutionFailedError,
    NoPositionFoundError,
    PositionNotFoundError,
    WorkerTimeoutError,
)
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.price_tick_conversions import pool_display_price
from clmm_rebalancer.domain.services.range_selector import closest_active_range, select_target_range


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebalanceWorkerOptions:
    pool_id: str
    owner: str
    multiplier: int
    b_price_percent: Fraction
    t_price_percent: Fraction
    compound_interval_seconds: float | None
    cycle_delay_seconds: float = 5.0
    cycle_timeout_seconds: float = 300.0
    settle_delay_seconds: float = 5.0
    widening_spacings: int = 1


class RebalanceWorker:
    """Control loop: synchronize, rebalance check, compound check."""

    def __init__(
        self,
        *,
        options: RebalanceWorkerOptions,
        ledger: LedgerReadPort,
        position_manager: PositionManager,
        submitter: PlanSubmitterPort,
        position_object_type: str,
        state_store: WorkerStatePort | None = None,
        watchdog: CycleWatchdog | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._options = options
        self._ledger = ledger
        self._position_manager = position_manager
        self._submitter = submitter
        self._position_object_type = position_object_type
        self._state_store = state_store
        self._watchdog = watchdog or CycleWatchdog(options.cycle_timeout_seconds)
        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep

        self._position_id: str | None = None
        self._position: Position | None = None
        self._last_compound_at = clock()
        self._stopped = False
        self._running = False
        self._cycles_completed = 0
        self._cycles_failed = 0
        self._last_cycle_at: datetime | None = None
        self._last_error: str | None = None

    @property
    def position(self) -> Position | None:
        return self._position

    @property
    def last_compound_at(self) -> float:
        return self._last_compound_at

    def stop(self) -> None:
        self._stopped = True

    async def restore_state(self) -> None:
        self._last_compound_at = self._clock()
        if self._state_store is None:
            return
        # synchronous store, run off the event loop
        state = await asyncio.to_thread(
            self._state_store.load,
            pool_id=normalize_object_id(self._options.pool_id),
        )
        if state is None:
            return
        if state.position_id:
            self._position_id = state.position_id
        if state.last_compound_at is not None:
            elapsed = max(0.0, self._wall_clock() - state.last_compound_at)
            self._last_compound_at = self._clock() - elapsed
        logger.info(
            "rebalance_worker: state_restored pool_id=%s position_id=%s last_compound_at=%s",
            state.pool_id,
            state.position_id,
            state.last_compound_at,
        )

    async def run_forever(self) -> None:
        await self.restore_state()
        self._running = True
        logger.info(
            "rebalance_worker: started pool_id=%s owner=%s multiplier=%s",
            self._options.pool_id,
            self._options.owner,
            self._options.multiplier,
        )
        try:
            while not self._stopped:
                await self.run_guarded_cycle()
                await self._sleep(self._options.cycle_delay_seconds)
        finally:
            self._running = False

    async def run_guarded_cycle(self) -> bool:
        started_at = self._clock()
        self._watchdog.arm()
        try:
            await self.run_cycle()
        except NoPositionFoundError as exc:
            self._record_failure(exc)
            logger.critical("rebalance_worker: no_position_found stopping error=%s", exc)
            raise
        except Exception as exc:
            self._record_failure(exc)
            elapsed = self._clock() - started_at
            if elapsed >= self._options.cycle_timeout_seconds:
                logger.critical(
                    "rebalance_worker: cycle_failed_after_timeout elapsed=%.1f error=%s",
                    elapsed,
                    exc,
                )
                raise WorkerTimeoutError(
                    f"Cycle failed after {elapsed:.1f}s, past the {self._options.cycle_timeout_seconds}s timeout."
                ) from exc
            logger.exception("rebalance_worker: cycle_failed error=%s", exc)
            return False
        finally:
            self._watchdog.disarm()

        self._cycles_completed += 1
        self._last_cycle_at = datetime.now(timezone.utc)
        self._last_error = None
        return True

    async def run_cycle(self) -> None:
        position = await self.synchronize()
        logger.info(
            "rebalance_worker: tracking position_id=%s tick_lower=%s tick_upper=%s liquidity=%s tick_current=%s",
            position.id,
            position.tick_lower,
            position.tick_upper,
            position.liquidity,
            position.pool.tick_current,
        )

        current = await self.rebalance_if_necessary(position)
        if current is None:
            return
        await self.compound_if_necessary(current)

    async def synchronize(self) -> Position:
        position: Position | None = None
        if self._position_id is not None:
            try:
                position = await self._ledger.get_position_by_id(position_id=self._position_id)
            except PositionNotFoundError:
                logger.warning(
                    "rebalance_worker: tracked_position_missing position_id=%s rediscovering",
                    self._position_id,
                )
                self._forget_position()

        if position is None:
            position = await self._ledger.get_largest_position(
                owner=self._options.owner,
                pool_id=self._options.pool_id,
            )
            if position is None:
                raise NoPositionFoundError(
                    f"No position found for owner {self._options.owner} and pool {self._options.pool_id}. "
                    "Ensure you have an open position in this pool."
                )

        self._track(position)
        return position

    async def rebalance_if_necessary(self, position: Position) -> Position | None:
        target = select_target_range(
            position,
            multiplier=self._options.multiplier,
            b_price_percent=self._options.b_price_percent,
            t_price_percent=self._options.t_price_percent,
            widening_spacings=self._options.widening_spacings,
        )
        if not target.differs_from(position):
            return position

        logger.info(
            "rebalance_worker: rebalance position_id=%s current=[%s,%s] active=[%s,%s] target=[%s,%s] widened=%s",
            position.id,
            position.tick_lower,
            position.tick_upper,
            target.active_range[0],
            target.active_range[1],
            target.tick_lower,
            target.tick_upper,
            target.widened,
        )
        liquidity_plan = await self._position_manager.migrate(position, target.tick_lower, target.tick_upper)
        result = await self._submit(liquidity_plan)
        await self._mark_compounded()

        new_position_id = result.find_created(self._position_object_type)
        if new_position_id is None:
            logger.warning(
                "rebalance_worker: new_position_not_reported digest=%s rediscovering next cycle",
                result.digest,
            )
            self._forget_position()
            await self._persist_state()
            return None

        await self._sleep(self._options.settle_delay_seconds)
        new_position = await self._ledger.get_position_by_id(position_id=new_position_id)
        self._track(new_position)
        await self._persist_state()
        return new_position

    async def compound_if_necessary(self, position: Position) -> bool:
        if position.contains_tick(position.pool.tick_current):
            logger.info(
                "rebalance_worker: skip_compound price_in_range position_id=%s tick_current=%s",
                position.id,
                position.pool.tick_current,
            )
            return False

        interval = self._options.compound_interval_seconds
        if interval is None:
            return False
        elapsed = self._clock() - self._last_compound_at
        if elapsed <= interval:
            return False

        liquidity_plan = await self._position_manager.compound(position)
        result = await self._submit(liquidity_plan)
        await self._mark_compounded()
        logger.info(
            "rebalance_worker: compound_done position_id=%s digest=%s",
            position.id,
            result.digest,
        )
        return True

    def status(self) -> WorkerStatus:
        position = self._position
        if position is None:
            return WorkerStatus(
                pool_id=self._options.pool_id,
                owner=self._options.owner,
                running=self._running,
                position_id=self._position_id,
                tick_lower=None,
                tick_upper=None,
                tick_current=None,
                active_range=None,
                in_range=None,
                price=None,
                range_ratio=None,
                cycles_completed=self._cycles_completed,
                cycles_failed=self._cycles_failed,
                last_cycle_at=self._last_cycle_at,
                last_error=self._last_error,
            )

        pool = position.pool
        return WorkerStatus(
            pool_id=pool.id,
            owner=self._options.owner,
            running=self._running,
            position_id=position.id,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            tick_current=pool.tick_current,
            active_range=closest_active_range(pool, self._options.multiplier),
            in_range=position.contains_tick(pool.tick_current),
            price=pool_display_price(pool).to_fixed(max(pool.coin_y.decimals, 6)),
            range_ratio=pool.get_ratio(position.tick_lower, position.tick_upper).to_fixed(6),
            cycles_completed=self._cycles_completed,
            cycles_failed=self._cycles_failed,
            last_cycle_at=self._last_cycle_at,
            last_error=self._last_error,
        )

    async def _submit(self, liquidity_plan: LiquidityPlan) -> SubmissionResult:
        result = await self._submitter.submit(plan=liquidity_plan.transaction)
        if not result.success:
            raise ExecutionFailedError(
                f"Plan rejected digest={result.digest or '-'} error={result.error or 'unknown'}"
            )
        return result

    def _track(self, position: Position) -> None:
        self._position = position
        self._position_id = position.id

    def _forget_position(self) -> None:
        self._position = None
        self._position_id = None

    async def _mark_compounded(self) -> None:
        self._last_compound_at = self._clock()
        await self._persist_state()

    async def _persist_state(self) -> None:
        if self._state_store is None:
            return
        elapsed = self._clock() - self._last_compound_at
        await asyncio.to_thread(
            self._state_store.save,
            state=WorkerState(
                pool_id=normalize_object_id(self._options.pool_id),
                position_id=self._position_id,
                last_compound_at=self._wall_clock() - elapsed,
                updated_at=datetime.now(timezone.utc),
            )
        )

    def _record_failure(self, exc: Exception) -> None:
        self._cycles_failed += 1
        self._last_cycle_at = datetime.now(timezone.utc)
        self._last_error = f"{type(exc).__name__}: {exc}"
