from __future__ import annotations

import asyncio
import threading

import pytest

from clmm_rebalancer.application.dto.liquidity_plan import LiquidityPlan
from clmm_rebalancer.application.dto.submission import CreatedObject, SubmissionResult
from clmm_rebalancer.application.dto.worker import WorkerState
from clmm_rebalancer.application.use_cases.rebalance_worker import RebalanceWorker, RebalanceWorkerOptions
from clmm_rebalancer.domain.entities.coin import normalize_object_id
from clmm_rebalancer.domain.entities.transaction_plan import TransactionPlan
from clmm_rebalancer.domain.exceptions import (
    NoPositionFoundError,
    PositionNotFoundError,
    WorkerTimeoutError,
)
from clmm_rebalancer.domain.services.fraction import Percent

from tests.factories import OWNER, POOL_ID, make_pool, make_position


POSITION_TYPE = "0xpkg::position::Position"
NEW_POSITION_ID = "0x" + "e5" * 32


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeWatchdog:
    def __init__(self):
        self.armed_count = 0
        self.disarmed_count = 0

    def arm(self) -> None:
        self.armed_count += 1

    def disarm(self) -> None:
        self.disarmed_count += 1


class FakeLedger:
    def __init__(self, *, largest=None, by_id=None):
        self.largest = largest
        self.by_id = dict(by_id or {})
        self.largest_calls = 0
        self.by_id_calls: list[str] = []

    async def get_position_by_id(self, *, position_id):
        self.by_id_calls.append(position_id)
        if position_id not in self.by_id:
            raise PositionNotFoundError(position_id)
        return self.by_id[position_id]

    async def get_largest_position(self, *, owner, pool_id):
        _ = (owner, pool_id)
        self.largest_calls += 1
        return self.largest

    async def get_pool_by_id(self, *, pool_id):
        _ = pool_id
        raise NotImplementedError


class FakePositionManager:
    def __init__(self, *, clock: FakeClock | None = None, advance_by: float = 0.0):
        self.migrations: list[tuple[str, int, int]] = []
        self.compounds: list[str] = []
        self._clock = clock
        self._advance_by = advance_by

    async def migrate(self, position, tick_lower, tick_upper):
        self.migrations.append((position.id, tick_lower, tick_upper))
        if self._clock is not None:
            self._clock.now += self._advance_by
        return LiquidityPlan(transaction=TransactionPlan(sender=OWNER), projected_position=position)

    async def compound(self, position):
        self.compounds.append(position.id)
        return LiquidityPlan(transaction=TransactionPlan(sender=OWNER), projected_position=position)


class FakeSubmitter:
    def __init__(self, result: SubmissionResult | None = None):
        self.result = result or SubmissionResult(
            digest="digest-1",
            success=True,
            created_objects=(CreatedObject(object_id=NEW_POSITION_ID, object_type=POSITION_TYPE),),
        )
        self.plans: list[TransactionPlan] = []

    async def submit(self, *, plan):
        self.plans.append(plan)
        return self.result


class FakeStateStore:
    def __init__(self, state: WorkerState | None = None):
        self.state = state
        self.saved: list[WorkerState] = []

    def load(self, *, pool_id):
        _ = pool_id
        return self.state

    def save(self, *, state):
        self.saved.append(state)


class FakeSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _options(**overrides) -> RebalanceWorkerOptions:
    values = dict(
        pool_id=POOL_ID,
        owner=OWNER,
        multiplier=2,
        b_price_percent=Percent(1, 10),
        t_price_percent=Percent(2, 10),
        compound_interval_seconds=60.0,
        cycle_delay_seconds=5.0,
        cycle_timeout_seconds=300.0,
        settle_delay_seconds=3.0,
    )
    values.update(overrides)
    return RebalanceWorkerOptions(**values)


def _worker(
    *,
    ledger: FakeLedger,
    manager: FakePositionManager | None = None,
    submitter: FakeSubmitter | None = None,
    state_store: FakeStateStore | None = None,
    clock: FakeClock | None = None,
    sleep: FakeSleep | None = None,
    watchdog: FakeWatchdog | None = None,
    **overrides,
) -> RebalanceWorker:
    return RebalanceWorker(
        options=_options(**overrides),
        ledger=ledger,
        position_manager=manager or FakePositionManager(),
        submitter=submitter or FakeSubmitter(),
        position_object_type=POSITION_TYPE,
        state_store=state_store,
        watchdog=watchdog or FakeWatchdog(),
        clock=clock or FakeClock(),
        wall_clock=lambda: 1_700_000_000.0,
        sleep=sleep or FakeSleep(),
    )


def test_first_cycle_discovers_largest_position():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=960, tick_upper=1080)
    ledger = FakeLedger(largest=position, by_id={position.id: position})
    manager = FakePositionManager()
    worker = _worker(ledger=ledger, manager=manager)

    asyncio.run(worker.run_cycle())
    asyncio.run(worker.run_cycle())

    assert ledger.largest_calls == 1
    assert ledger.by_id_calls == [position.id]
    assert worker.position == position
    assert manager.migrations == []
    assert manager.compounds == []


def test_missing_position_is_fatal():
    watchdog = FakeWatchdog()
    worker = _worker(ledger=FakeLedger(largest=None), watchdog=watchdog)

    with pytest.raises(NoPositionFoundError):
        asyncio.run(worker.run_guarded_cycle())
    assert watchdog.armed_count == 1
    assert watchdog.disarmed_count == 1


def test_out_of_range_position_is_migrated_and_refetched():
    pool = make_pool(tick_current=1000)
    old = make_position(pool=pool, tick_lower=600, tick_upper=720)
    new = make_position(pool=pool, tick_lower=960, tick_upper=1080, position_id=NEW_POSITION_ID)
    ledger = FakeLedger(largest=old, by_id={NEW_POSITION_ID: new})
    manager = FakePositionManager()
    submitter = FakeSubmitter()
    store = FakeStateStore()
    sleep = FakeSleep()
    worker = _worker(ledger=ledger, manager=manager, submitter=submitter, state_store=store, sleep=sleep)

    asyncio.run(worker.run_cycle())

    assert manager.migrations == [(old.id, 960, 1080)]
    assert len(submitter.plans) == 1
    assert sleep.delays == [3.0]
    assert worker.position == new
    assert manager.compounds == []
    assert store.saved[-1].position_id == NEW_POSITION_ID
    assert store.saved[-1].pool_id == normalize_object_id(POOL_ID)


def test_in_range_position_from_scenario_skips_compound():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=900, tick_upper=1020)
    worker = _worker(ledger=FakeLedger(), manager=FakePositionManager())

    compounded = asyncio.run(worker.compound_if_necessary(position))

    assert compounded is False


def test_unreported_position_is_rediscovered_next_cycle():
    pool = make_pool(tick_current=1000)
    old = make_position(pool=pool, tick_lower=600, tick_upper=720)
    ledger = FakeLedger(largest=old)
    submitter = FakeSubmitter(SubmissionResult(digest="digest-2", success=True))
    store = FakeStateStore()
    worker = _worker(ledger=ledger, submitter=submitter, state_store=store)

    asyncio.run(worker.run_cycle())

    assert worker.position is None
    assert store.saved[-1].position_id is None

    asyncio.run(worker.synchronize())
    assert ledger.largest_calls == 2


def test_missing_tracked_position_falls_back_to_discovery():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=960, tick_upper=1080)
    store = FakeStateStore(WorkerState(pool_id=POOL_ID, position_id="0xgone", last_compound_at=None))
    ledger = FakeLedger(largest=position)
    worker = _worker(ledger=ledger, state_store=store)

    asyncio.run(worker.restore_state())
    synced = asyncio.run(worker.synchronize())

    assert ledger.by_id_calls == ["0xgone"]
    assert ledger.largest_calls == 1
    assert synced == position


def test_compound_runs_only_when_out_of_bounds_and_interval_elapsed():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=600, tick_upper=720)
    clock = FakeClock(1000.0)
    manager = FakePositionManager()
    submitter = FakeSubmitter()
    worker = _worker(ledger=FakeLedger(), manager=manager, submitter=submitter, clock=clock)

    clock.now += 30
    assert asyncio.run(worker.compound_if_necessary(position)) is False

    clock.now += 31
    assert asyncio.run(worker.compound_if_necessary(position)) is True
    assert manager.compounds == [position.id]
    assert worker.last_compound_at == clock.now

    clock.now += 10
    assert asyncio.run(worker.compound_if_necessary(position)) is False


def test_compound_disabled_without_schedule():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=600, tick_upper=720)
    clock = FakeClock()
    manager = FakePositionManager()
    worker = _worker(ledger=FakeLedger(), manager=manager, clock=clock, compound_interval_seconds=None)

    clock.now += 10_000
    assert asyncio.run(worker.compound_if_necessary(position)) is False
    assert manager.compounds == []


def test_rejected_submission_is_recorded_and_swallowed():
    pool = make_pool(tick_current=1000)
    old = make_position(pool=pool, tick_lower=600, tick_upper=720)
    submitter = FakeSubmitter(SubmissionResult(digest="digest-3", success=False, error="MoveAbort"))
    worker = _worker(ledger=FakeLedger(largest=old), submitter=submitter)

    completed = asyncio.run(worker.run_guarded_cycle())

    status = worker.status()
    assert completed is False
    assert status.cycles_failed == 1
    assert status.cycles_completed == 0
    assert "ExecutionFailedError" in status.last_error
    assert "MoveAbort" in status.last_error


def test_error_after_timeout_is_fatal():
    pool = make_pool(tick_current=1000)
    old = make_position(pool=pool, tick_lower=600, tick_upper=720)
    clock = FakeClock()
    manager = FakePositionManager(clock=clock, advance_by=301.0)
    submitter = FakeSubmitter(SubmissionResult(digest="digest-4", success=False))
    worker = _worker(ledger=FakeLedger(largest=old), manager=manager, submitter=submitter, clock=clock)

    with pytest.raises(WorkerTimeoutError):
        asyncio.run(worker.run_guarded_cycle())


def test_restore_state_rebases_compound_timer():
    clock = FakeClock(500.0)
    store = FakeStateStore(
        WorkerState(pool_id=POOL_ID, position_id="0xtracked", last_compound_at=1_700_000_000.0 - 100)
    )
    worker = _worker(ledger=FakeLedger(), state_store=store, clock=clock)

    asyncio.run(worker.restore_state())

    assert worker.last_compound_at == 400.0


def test_state_store_runs_off_the_event_loop_thread():
    class ThreadRecordingStore(FakeStateStore):
        def __init__(self):
            super().__init__()
            self.threads: list[int] = []

        def load(self, *, pool_id):
            self.threads.append(threading.get_ident())
            return super().load(pool_id=pool_id)

        def save(self, *, state):
            self.threads.append(threading.get_ident())
            super().save(state=state)

    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=600, tick_upper=720)
    store = ThreadRecordingStore()
    clock = FakeClock(1000.0)
    worker = _worker(ledger=FakeLedger(), state_store=store, clock=clock)

    async def scenario() -> int:
        await worker.restore_state()
        clock.now += 61
        await worker.compound_if_necessary(position)
        return threading.get_ident()

    loop_thread = asyncio.run(scenario())

    assert len(store.saved) == 1
    assert len(store.threads) == 2
    assert loop_thread not in store.threads


def test_run_forever_waits_between_cycles_until_stopped():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=960, tick_upper=1080)
    ledger = FakeLedger(largest=position, by_id={position.id: position})

    class StoppingSleep(FakeSleep):
        async def __call__(self, delay: float) -> None:
            await super().__call__(delay)
            if len(self.delays) == 2:
                worker.stop()

    sleep = StoppingSleep()
    worker = _worker(ledger=ledger, sleep=sleep)

    asyncio.run(worker.run_forever())

    assert sleep.delays == [5.0, 5.0]
    status = worker.status()
    assert status.cycles_completed == 2
    assert status.running is False


def test_status_reports_tracked_position():
    pool = make_pool(tick_current=1000)
    position = make_position(pool=pool, tick_lower=960, tick_upper=1080)
    worker = _worker(ledger=FakeLedger(largest=position))

    asyncio.run(worker.run_guarded_cycle())
    status = worker.status()

    assert status.position_id == position.id
    assert status.active_range == (960, 1080)
    assert status.in_range is True
    assert status.tick_current == 1000
    assert status.cycles_completed == 1
    assert status.price is not None
    assert status.range_ratio is not None


def test_status_before_first_cycle_is_empty():
    status = _worker(ledger=FakeLedger()).status()
    assert status.position_id is None
    assert status.in_range is None
    assert status.running is False
