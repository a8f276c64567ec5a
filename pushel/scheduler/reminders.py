"""Independent periodic timers, one per configured reminder."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from typing import Protocol

from pushel.logger import get_logger
from pushel.model.models import NotificationRequest, ReminderSpec
from pushel.scheduler.activity import SUPPRESSION_WINDOW, ActivitySignal
from pushel.scheduler.interval import parse_interval

__all__ = ["NotificationSink", "ReminderTimer", "build_timers"]

logger = get_logger("reminders")


class NotificationSink(Protocol):
    def notify(self, request: NotificationRequest) -> bool: ...


class ReminderTimer:
    """Evaluate one reminder every ``interval`` seconds, forever.

    The first evaluation happens one full interval after :meth:`start`.
    Missed ticks are never replayed: each sleep is followed by exactly one
    evaluation against the activity state at that moment.
    """

    def __init__(
        self,
        spec: ReminderSpec,
        interval: float,
        signal: ActivitySignal,
        sink: NotificationSink,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            msg = f"reminder interval must be positive, got {interval}"
            raise ValueError(msg)
        self.spec = spec
        self.interval = interval
        self.signal = signal
        self.sink = sink
        self._sleep = sleep
        self._notification = spec.to_notification()
        self._thread: threading.Thread | None = None

        # written only by this timer's thread, read elsewhere as a snapshot
        self.stats = {"ticks": 0, "delivered": 0, "suppressed": 0, "failed": 0}

    def tick(self) -> bool:
        """Run one evaluation. Returns True if the notification was sent."""
        self.stats["ticks"] += 1
        if not self.signal.is_recently_active(window=SUPPRESSION_WINDOW):
            self.stats["suppressed"] += 1
            logger.info(
                "No activity within the last %d minutes, suppressing %r",
                SUPPRESSION_WINDOW // 60,
                self.spec.message,
            )
            return False

        try:
            delivered = self.sink.notify(self._notification)
        except Exception:
            self.stats["failed"] += 1
            logger.exception("Notifier raised while delivering %r", self.spec.message)
            return False

        if delivered:
            self.stats["delivered"] += 1
            logger.info("Activity seen recently, delivered %r", self.spec.message)
        else:
            self.stats["failed"] += 1
            logger.warning("Notifier could not deliver %r", self.spec.message)
        return delivered

    def run_forever(self) -> None:
        """Sleep, evaluate, repeat. Never returns."""
        logger.debug("Reminder %r scheduled every %ss", self.spec.message, self.interval)
        while True:
            self._sleep(self.interval)
            self.tick()

    def start(self, name: str | None = None) -> threading.Thread:
        """Run :meth:`run_forever` on a daemon thread."""
        if self._thread is not None:
            return self._thread
        self._thread = threading.Thread(
            target=self.run_forever,
            name=name or f"reminder-{self.spec.interval}",
            daemon=True,
        )
        self._thread.start()
        return self._thread


def build_timers(
    specs: Sequence[ReminderSpec],
    signal: ActivitySignal,
    sink: NotificationSink,
) -> list[ReminderTimer]:
    """Create a timer for every spec without starting any of them.

    Every interval is parsed up front so that a single bad entry aborts
    startup before anything has been scheduled.

    Raises:
        IntervalError: an interval string is malformed
        ValueError: an interval evaluates to zero seconds

    """
    parsed = [(spec, parse_interval(spec.interval)) for spec in specs]
    return [ReminderTimer(spec, seconds, signal, sink) for spec, seconds in parsed]
