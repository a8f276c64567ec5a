"""Idle polling loop that feeds the shared activity signal."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from pushel.logger import get_logger
from pushel.model.models import PresenceState
from pushel.scheduler.activity import ActivitySignal
from pushel.watchers.idle import IdleQueryError, get_idle_seconds

__all__ = ["ACTIVITY_THRESHOLD", "POLL_INTERVAL", "IdleMonitor"]

# Poll cadence and "user is at the keyboard" threshold, both in seconds
POLL_INTERVAL = 10
ACTIVITY_THRESHOLD = 10

logger = get_logger("idle")


class IdleMonitor:
    """Poll the system idle time and translate it into activity and presence."""

    def __init__(
        self,
        signal: ActivitySignal,
        idle_query: Callable[[], int] = get_idle_seconds,
        *,
        poll_interval: float = POLL_INTERVAL,
        threshold: int = ACTIVITY_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialise the monitor.

        Args:
            signal: activity signal to update
            idle_query: returns idle seconds or raises :class:`IdleQueryError`
            poll_interval: seconds between polls
            threshold: idle seconds below which the user counts as active
            clock: monotonic time source for ``record_activity``
            sleep: blocking wait between polls

        """
        self.signal = signal
        self.idle_query = idle_query
        self.poll_interval = poll_interval
        self.threshold = threshold
        self._clock = clock
        self._sleep = sleep
        self._thread: threading.Thread | None = None

        # written only by the monitor thread, read elsewhere as a snapshot
        self.stats = {"polls": 0, "errors": 0}

    def run_once(self) -> int | None:
        """Run one poll cycle.

        Returns:
            int | None: the idle seconds observed, or None if the query failed

        """
        self.stats["polls"] += 1
        try:
            idle_seconds = self.idle_query()
        except (IdleQueryError, OSError) as e:
            self.stats["errors"] += 1
            logger.error("Failed to query idle time: %s", e)
            return None

        if idle_seconds < self.threshold:
            self.signal.record_activity(self._clock())
            self.signal.set_presence(PresenceState.ACTIVE)
            logger.debug("User is active (idle: %ss)", idle_seconds)
        else:
            # last activity is left alone so gating decays with elapsed time
            self.signal.set_presence(PresenceState.INACTIVE)
            logger.debug("User is idle (%ss)", idle_seconds)
        return idle_seconds

    def run_forever(self) -> None:
        """Poll at a fixed cadence for the lifetime of the process."""
        logger.info("Idle monitor started (interval: %ss)", self.poll_interval)
        while True:
            started = self._clock()
            try:
                self.run_once()
            except Exception:
                self.stats["errors"] += 1
                logger.exception("Idle poll failed unexpectedly")
            elapsed = self._clock() - started
            self._sleep(max(0.0, self.poll_interval - elapsed))

    def start(self) -> threading.Thread:
        """Run :meth:`run_forever` on a daemon thread."""
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.run_forever, name="idle-monitor", daemon=True
            )
            self._thread.start()
        return self._thread
