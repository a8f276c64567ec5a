"""Shared activity signal read by the reminder timers and the idle monitor."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from pushel.logger import get_logger
from pushel.model.models import PresenceState, PresenceTransition

__all__ = ["SUPPRESSION_WINDOW", "ActivitySignal", "TransitionListener"]

# Reminders only fire when activity was seen within this many seconds
SUPPRESSION_WINDOW = 15 * 60

TransitionListener = Callable[[PresenceTransition], None]

logger = get_logger("activity")


class ActivitySignal:
    """Last-activity timestamp plus the derived presence state.

    The two fields are guarded by separate locks and never updated together.
    ``last_activity_at`` is a :func:`time.monotonic` value and only drives
    reminder gating; ``presence`` only drives external reporting.
    """

    def __init__(self, on_transition: TransitionListener | None = None) -> None:
        self._activity_lock = threading.Lock()
        self._presence_lock = threading.Lock()
        self._last_activity_at: float | None = None
        self._presence = PresenceState.INACTIVE
        self._on_transition = on_transition

    def record_activity(self, now: float | None = None) -> None:
        """Mark *now* (monotonic seconds) as the latest observed activity."""
        stamp = time.monotonic() if now is None else now
        with self._activity_lock:
            self._last_activity_at = stamp

    def is_recently_active(
        self,
        now: float | None = None,
        window: float = SUPPRESSION_WINDOW,
    ) -> bool:
        """Return True if activity was recorded at most *window* seconds ago."""
        with self._activity_lock:
            last = self._last_activity_at
        if last is None:
            return False
        current = time.monotonic() if now is None else now
        return current - last <= window

    @property
    def presence(self) -> PresenceState:
        with self._presence_lock:
            return self._presence

    def set_presence(self, state: PresenceState) -> PresenceTransition | None:
        """Store *state* and report a transition if it differs from the current one.

        The transition listener runs after the lock is released; it is expected
        to hand the event off (e.g. to :class:`PresencePublisher`) and return.
        """
        with self._presence_lock:
            old = self._presence
            if old == state:
                return None
            self._presence = state

        transition = PresenceTransition(old=old, new=state, at=time.time())
        logger.info("Presence changed: %s -> %s", old.value, state.value)
        if self._on_transition is not None:
            try:
                self._on_transition(transition)
            except Exception:
                logger.exception("Presence transition listener failed")
        return transition
