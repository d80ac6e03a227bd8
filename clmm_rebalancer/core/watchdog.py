from __future__ import annotations

import logging
import os
import threading
from typing import Callable


logger = logging.getLogger(__name__)


def exit_process() -> None:
    logger.critical("watchdog: cycle_timeout exiting process")
    logging.shutdown()
    os._exit(1)


class CycleWatchdog:
    """Hard per-cycle deadline enforced from a separate thread.

    The timer runs outside the event loop so a cycle stuck on I/O still
    triggers ``on_expire``.
    """

    def __init__(self, timeout_seconds: float, on_expire: Callable[[], None] = exit_process):
        self._timeout_seconds = timeout_seconds
        self._on_expire = on_expire
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def armed(self) -> bool:
        return self._timer is not None

    def arm(self) -> None:
        with self._lock:
            self._cancel_locked()
            timer = threading.Timer(self._timeout_seconds, self._expire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def disarm(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _expire(self) -> None:
        logger.error("watchdog: cycle exceeded timeout_seconds=%s", self._timeout_seconds)
        self._on_expire()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
