import platform
import shutil
import subprocess
import sys
import time
from collections import deque
from typing import Any

from pushel.logger import get_logger
from pushel.model.models import NotificationRequest

if sys.platform == "win32":
    from win10toast import ToastNotifier  # type: ignore[import-untyped, unused-ignore]

__all__ = ["DEFAULT_TITLE", "NotificationService"]

DEFAULT_TITLE = "Reminder"
HISTORY_SIZE = 100
NOTIFY_TIMEOUT = 10  # seconds
DEFAULT_TOAST_SECONDS = 5

logger = get_logger("notify")


class NotificationService:
    """Render desktop notifications and keep a short delivery history.

    Linux uses ``notify-send``, Windows a toast via ``win10toast`` and macOS
    ``osascript``. A failure is logged and reported as ``False``; it never
    raises into the caller.
    """

    def __init__(self, default_title: str = DEFAULT_TITLE) -> None:
        self.platform = platform.system()
        self.default_title = default_title
        self._history: deque[dict[str, Any]] = deque(maxlen=HISTORY_SIZE)

    def notify(self, request: NotificationRequest) -> bool:
        """Display *request* and record the attempt."""
        title = request.title or self.default_title
        try:
            if self.platform == "Windows":
                success = self._send_toast(title, request)
            elif self.platform == "Darwin":
                success = self._send_osascript(title, request)
            else:
                success = self._send_notify_send(title, request)
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("Failed to send notification: %s", e)
            success = False

        if success:
            logger.info("Notification sent: %s - %s", title, request.message)
        self._history.append(
            {
                "title": title,
                "message": request.message,
                "urgency": request.urgency.value if request.urgency else None,
                "timestamp": time.time(),
                "delivered": success,
            },
        )
        return success

    # ------------------------------------------------------------------
    # Backends
    @staticmethod
    def build_notify_send_args(title: str, request: NotificationRequest) -> list[str]:
        """Command line for ``notify-send``."""
        args = ["notify-send", title, request.message]
        if request.urgency is not None:
            args.append(f"--urgency={request.urgency.value}")
        if request.expire_time is not None:
            args.append(f"--expire-time={request.expire_time}")
        if request.app_name:
            args.append(f"--app-name={request.app_name}")
        if request.icon:
            args.append(f"--icon={request.icon}")
        if request.category:
            args.append(f"--category={request.category}")
        if request.transient:
            args.append("--transient")
        return args

    def _send_notify_send(self, title: str, request: NotificationRequest) -> bool:
        if shutil.which("notify-send") is None:
            logger.error("notify-send not found on PATH")
            return False
        result = subprocess.run(  # noqa: S603
            self.build_notify_send_args(title, request),
            capture_output=True,
            text=True,
            timeout=NOTIFY_TIMEOUT,
            check=False,
        )
        if result.returncode != 0:
            logger.error(
                "notify-send exited with %s: %s", result.returncode, result.stderr.strip()
            )
            return False
        return True

    def _send_toast(self, title: str, request: NotificationRequest) -> bool:
        duration = DEFAULT_TOAST_SECONDS
        if request.expire_time:
            duration = max(1, request.expire_time // 1000)
        notifier = ToastNotifier()
        notifier.show_toast(  # pyright: ignore[reportUnknownMemberType]
            title,
            request.message,
            icon_path=None,
            duration=duration,
            threaded=True,
        )
        return True

    def _send_osascript(self, title: str, request: NotificationRequest) -> bool:
        script = (
            f"display notification {_applescript_quote(request.message)} "
            f"with title {_applescript_quote(title)}"
        )
        result = subprocess.run(  # noqa: S603
            ["osascript", "-e", script],  # noqa: S607
            capture_output=True,
            text=True,
            timeout=NOTIFY_TIMEOUT,
            check=False,
        )
        return result.returncode == 0

    # ------------------------------------------------------------------
    # Query helpers
    def get_notification_history(self) -> list[dict[str, Any]]:
        """Return a copy of the notification history."""
        return list(self._history)


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
