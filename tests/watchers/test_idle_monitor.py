from unittest.mock import Mock

import pytest

from pushel.model.models import PresenceState
from pushel.scheduler.activity import ActivitySignal
from pushel.watchers.idle import IdleQueryError
from pushel.watchers.monitor import ACTIVITY_THRESHOLD, POLL_INTERVAL, IdleMonitor


class TestIdleMonitor:
    """Idle poll cycle -> activity signal updates."""

    def test_fixed_constants(self):
        assert POLL_INTERVAL == 10
        assert ACTIVITY_THRESHOLD == 10

    def test_active_user_records_activity(self, signal):
        monitor = IdleMonitor(signal, idle_query=lambda: 3, clock=lambda: 500.0)
        assert monitor.run_once() == 3
        assert signal.presence is PresenceState.ACTIVE
        assert signal.is_recently_active(now=500.0) is True

    def test_threshold_is_exclusive(self, signal):
        monitor = IdleMonitor(signal, idle_query=lambda: ACTIVITY_THRESHOLD)
        monitor.run_once()
        assert signal.presence is PresenceState.INACTIVE
        assert signal.is_recently_active() is False

    def test_idle_user_keeps_last_activity(self, signal):
        readings = iter([0, 120])
        monitor = IdleMonitor(signal, idle_query=lambda: next(readings), clock=lambda: 100.0)
        monitor.run_once()
        monitor.run_once()

        assert signal.presence is PresenceState.INACTIVE
        # decay is driven by elapsed time only
        assert signal.is_recently_active(now=100.0 + 60) is True

    def test_query_failure_leaves_signal_untouched(self):
        listener = Mock()
        signal = ActivitySignal(on_transition=listener)
        monitor = IdleMonitor(signal, idle_query=Mock(side_effect=IdleQueryError("no display")))

        assert monitor.run_once() is None
        assert monitor.stats == {"polls": 1, "errors": 1}
        assert signal.is_recently_active() is False
        listener.assert_not_called()

    def test_os_error_is_not_fatal(self, signal):
        monitor = IdleMonitor(signal, idle_query=Mock(side_effect=OSError("denied")))
        assert monitor.run_once() is None

    def test_only_transitions_reach_listener(self):
        listener = Mock()
        signal = ActivitySignal(on_transition=listener)
        readings = iter([1, 2, 3, 50, 60, 4])
        monitor = IdleMonitor(signal, idle_query=lambda: next(readings))
        for _ in range(6):
            monitor.run_once()

        news = [call.args[0].new for call in listener.call_args_list]
        assert news == [PresenceState.ACTIVE, PresenceState.INACTIVE, PresenceState.ACTIVE]

    def test_loop_continues_after_failures(self, signal, fake_sleep):
        sleep = fake_sleep(3)
        query = Mock(side_effect=[IdleQueryError("x"), IdleQueryError("y"), 0])
        monitor = IdleMonitor(signal, idle_query=query, sleep=sleep)

        with pytest.raises(sleep.error):
            monitor.run_forever()

        assert monitor.stats == {"polls": 3, "errors": 2}
        assert signal.presence is PresenceState.ACTIVE

    def test_loop_survives_unexpected_query_error(self, signal, fake_sleep):
        sleep = fake_sleep(2)
        query = Mock(side_effect=[ValueError("garbled reply"), 0])
        monitor = IdleMonitor(signal, idle_query=query, sleep=sleep)

        with pytest.raises(sleep.error):
            monitor.run_forever()

        assert query.call_count == 2
        assert monitor.stats["errors"] == 1
        assert signal.presence is PresenceState.ACTIVE
        assert signal.is_recently_active() is True

    def test_loop_sleeps_remaining_cadence(self, signal, fake_sleep):
        sleep = fake_sleep(1)
        ticks = iter([0.0, 2.5])
        monitor = IdleMonitor(
            signal,
            idle_query=lambda: 100,
            clock=lambda: next(ticks),
            sleep=sleep,
        )

        with pytest.raises(sleep.error):
            monitor.run_forever()

        assert sleep.calls == [7.5]
