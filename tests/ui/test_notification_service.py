import subprocess
from unittest.mock import Mock, patch

import pytest

from pushel.model.models import NotificationRequest
from pushel.ui.notifications import DEFAULT_TITLE, NotificationService


@pytest.fixture
def linux_service():
    service = NotificationService()
    service.platform = "Linux"
    return service


def _completed(returncode=0, stderr=""):
    return Mock(returncode=returncode, stderr=stderr, stdout="")


class TestNotifySendArgs:
    """Command line construction for notify-send."""

    def test_minimal_request(self):
        request = NotificationRequest(message="Hello")
        args = NotificationService.build_notify_send_args("Title", request)
        assert args == ["notify-send", "Title", "Hello"]

    def test_all_options(self):
        request = NotificationRequest(
            title="ignored here",
            message="Drink some water!",
            urgency="critical",
            expire_time=5000,
            app_name="Pushel",
            icon="dialog-information",
            category="reminder",
            transient=True,
        )
        args = NotificationService.build_notify_send_args("Reminder", request)
        assert args == [
            "notify-send",
            "Reminder",
            "Drink some water!",
            "--urgency=critical",
            "--expire-time=5000",
            "--app-name=Pushel",
            "--icon=dialog-information",
            "--category=reminder",
            "--transient",
        ]

    def test_zero_expire_time_is_passed(self):
        request = NotificationRequest(message="m", expire_time=0)
        assert "--expire-time=0" in NotificationService.build_notify_send_args("t", request)

    def test_transient_false_is_omitted(self):
        request = NotificationRequest(message="m", transient=False)
        assert "--transient" not in NotificationService.build_notify_send_args("t", request)


class TestNotificationService:
    """Delivery and history tracking."""

    def test_default_title_used(self, linux_service):
        with (
            patch("shutil.which", return_value="/usr/bin/notify-send"),
            patch("subprocess.run", return_value=_completed()) as mock_run,
        ):
            assert linux_service.notify(NotificationRequest(message="Hi")) is True

        args = mock_run.call_args.args[0]
        assert args[1] == DEFAULT_TITLE
        assert mock_run.call_args.kwargs["timeout"] > 0

    def test_configured_default_title(self):
        service = NotificationService(default_title="Erinnerung")
        service.platform = "Linux"
        with (
            patch("shutil.which", return_value="/usr/bin/notify-send"),
            patch("subprocess.run", return_value=_completed()) as mock_run,
        ):
            service.notify(NotificationRequest(message="Hi"))
        assert mock_run.call_args.args[0][1] == "Erinnerung"

    def test_missing_binary_reports_failure(self, linux_service):
        with patch("shutil.which", return_value=None), patch("subprocess.run") as mock_run:
            assert linux_service.notify(NotificationRequest(message="Hi")) is False
        mock_run.assert_not_called()

    def test_non_zero_exit_reports_failure(self, linux_service):
        with (
            patch("shutil.which", return_value="/usr/bin/notify-send"),
            patch("subprocess.run", return_value=_completed(1, "no dbus")),
        ):
            assert linux_service.notify(NotificationRequest(message="Hi")) is False

    @pytest.mark.parametrize(
        "error",
        [OSError("exec failed"), subprocess.TimeoutExpired("notify-send", 10)],
    )
    def test_subprocess_errors_are_swallowed(self, linux_service, error):
        with (
            patch("shutil.which", return_value="/usr/bin/notify-send"),
            patch("subprocess.run", side_effect=error),
        ):
            assert linux_service.notify(NotificationRequest(message="Hi")) is False

    def test_history_records_attempts(self, linux_service):
        with (
            patch("shutil.which", return_value="/usr/bin/notify-send"),
            patch("subprocess.run", side_effect=[_completed(), _completed(1)]),
        ):
            linux_service.notify(NotificationRequest(title="A", message="one", urgency="low"))
            linux_service.notify(NotificationRequest(message="two"))

        history = linux_service.get_notification_history()
        assert [h["message"] for h in history] == ["one", "two"]
        assert [h["delivered"] for h in history] == [True, False]
        assert history[0]["title"] == "A"
        assert history[0]["urgency"] == "low"
        assert history[1]["urgency"] is None

    def test_history_is_a_copy(self, linux_service):
        history = linux_service.get_notification_history()
        history.append({"message": "x"})
        assert linux_service.get_notification_history() == []

    def test_macos_uses_osascript(self):
        service = NotificationService()
        service.platform = "Darwin"
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            assert service.notify(NotificationRequest(title='Say "hi"', message="m")) is True
        args = mock_run.call_args.args[0]
        assert args[:2] == ["osascript", "-e"]
        assert 'with title "Say \\"hi\\""' in args[2]
