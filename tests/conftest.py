from unittest.mock import Mock

import pytest

from pushel.model.models import ReminderSpec
from pushel.scheduler.activity import ActivitySignal


class StopLoop(Exception):
    """Raised by fake sleep functions to break out of run_forever()."""


@pytest.fixture
def signal():
    """A fresh signal with no activity recorded."""
    return ActivitySignal()


@pytest.fixture
def sink():
    """Notification sink that always reports success."""
    mock = Mock()
    mock.notify = Mock(return_value=True)
    return mock


@pytest.fixture
def water_spec():
    """A typical reminder entry."""
    return ReminderSpec(
        title="Reminder",
        message="Drink some water!",
        interval="30m",
        urgency="low",
        expire_time=5000,
        app_name="Pushel",
        icon="dialog-information",
        category="reminder",
        transient=True,
    )


@pytest.fixture
def fake_sleep():
    """Sleep replacement that records calls and stops after a limit."""

    def make(limit):
        calls = []

        def sleep(seconds):
            calls.append(seconds)
            if len(calls) >= limit:
                raise StopLoop

        sleep.calls = calls
        sleep.error = StopLoop
        return sleep

    return make
