"""Home Assistant presence publisher (best effort, fire-and-forget)."""

from __future__ import annotations

import threading
import time
from collections import deque

import requests

from pushel.logger import get_logger
from pushel.model.models import PresenceState, PresenceTransition

__all__ = ["ENTITY_ID", "PresencePublisher", "create_presence_publisher"]

ENTITY_ID = "sensor.pushel_motion"
FRIENDLY_NAME = "Pushel Motion Detection"
HTTP_SUCCESS_MIN = 200
HTTP_SUCCESS_MAX = 300

logger = get_logger("presence")


class PresencePublisher:
    """Push presence transitions to the Home Assistant states API.

    :meth:`submit` only appends to a bounded buffer and wakes the worker
    thread, so the idle polling loop never waits on the network. When the
    buffer is full the oldest pending transition is discarded.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        max_pending: int = 16,
        session: requests.Session | None = None,
    ) -> None:
        """Initialise the publisher.

        Args:
            base_url: Home Assistant base URL (e.g. http://homeassistant.local:8123)
            api_key: long-lived access token
            timeout: HTTP timeout in seconds
            max_pending: transitions kept while the worker is busy
            session: optional pre-configured requests session

        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.state_url = f"{self.base_url}/api/states/{ENTITY_ID}"
        self._session = session or requests.Session()
        self._pending: deque[PresenceTransition] = deque(maxlen=max_pending)
        self._cond = threading.Condition()
        self._worker: threading.Thread | None = None

        self.stats = {"published": 0, "failed": 0, "dropped": 0}

    # ------------------------------------------------------------------
    # Producer side
    def submit(self, transition: PresenceTransition) -> None:
        """Queue *transition* for publishing and return immediately."""
        with self._cond:
            if len(self._pending) == self._pending.maxlen:
                self.stats["dropped"] += 1
                logger.warning("Presence queue full, dropping oldest transition")
            self._pending.append(transition)
            self._ensure_worker()
            self._cond.notify()

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(
                target=self._drain_forever, name="presence-publisher", daemon=True
            )
            self._worker.start()

    # ------------------------------------------------------------------
    # Worker side
    def _drain_forever(self) -> None:
        while True:
            with self._cond:
                while not self._pending:
                    self._cond.wait()
                transition = self._pending.popleft()
            try:
                self.publish(transition.new, transition.at)
            except Exception:
                self.stats["failed"] += 1
                logger.exception("Unexpected error while pushing presence")

    def build_payload(self, state: PresenceState, timestamp: float) -> dict:
        """Request body for the states API."""
        return {
            "state": state.value,
            "attributes": {
                "friendly_name": FRIENDLY_NAME,
                "last_update": int(timestamp),
                "device_class": "motion",
            },
        }

    def publish(self, state: PresenceState, timestamp: float | None = None) -> bool:
        """POST *state* synchronously. Failures are logged, never raised.

        Returns:
            bool: True on a 2xx response

        """
        payload = self.build_payload(state, time.time() if timestamp is None else timestamp)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = self._session.post(
                self.state_url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.stats["failed"] += 1
            logger.error("Failed to push presence to Home Assistant: %s", e)
            return False

        if HTTP_SUCCESS_MIN <= response.status_code < HTTP_SUCCESS_MAX:
            self.stats["published"] += 1
            logger.info("Pushed presence to Home Assistant: %s", state.value)
            return True

        self.stats["failed"] += 1
        logger.error(
            "Home Assistant rejected presence update. Status: %s, Response: %s",
            response.status_code,
            response.text[:200],
        )
        return False


def create_presence_publisher(
    base_url: str | None,
    api_key: str | None,
) -> PresencePublisher | None:
    """Return a publisher, or None when Home Assistant is not configured."""
    if not base_url or not api_key:
        logger.info("Home Assistant not configured, presence reporting disabled")
        return None
    return PresencePublisher(base_url=base_url, api_key=api_key)
