from __future__ import annotations

import threading

from clmm_rebalancer.core.watchdog import CycleWatchdog


def test_expired_watchdog_calls_handler():
    fired = threading.Event()
    watchdog = CycleWatchdog(0.01, on_expire=fired.set)

    watchdog.arm()

    assert fired.wait(2)


def test_disarm_cancels_pending_expiry():
    fired = threading.Event()
    watchdog = CycleWatchdog(0.2, on_expire=fired.set)

    watchdog.arm()
    assert watchdog.armed
    watchdog.disarm()

    assert not watchdog.armed
    assert not fired.wait(0.4)


def test_rearming_keeps_a_single_timer():
    fired = threading.Event()
    watchdog = CycleWatchdog(0.2, on_expire=fired.set)

    watchdog.arm()
    watchdog.arm()
    watchdog.disarm()

    assert not fired.wait(0.4)
