"""Daemon entry point: wire the idle monitor, reminders, publisher and API."""

from __future__ import annotations

import argparse
import threading
from dataclasses import dataclass
from pathlib import Path

import uvicorn

from pushel.api.main import create_app
from pushel.config.loader import (
    AppConfig,
    ConfigError,
    ensure_config_dir,
    load_app_config,
    load_reminders,
    resolve_config_dir,
)
from pushel.logger import LOG_FORMATS, configure_logging, get_logger
from pushel.model.models import ReminderSpec
from pushel.scheduler.activity import ActivitySignal
from pushel.scheduler.interval import IntervalError
from pushel.scheduler.reminders import ReminderTimer, build_timers
from pushel.services.presence import PresencePublisher, create_presence_publisher
from pushel.ui.notifications import NotificationService
from pushel.watchers.monitor import IdleMonitor

logger = get_logger("daemon")


@dataclass
class Daemon:
    """Every long-lived component of a running daemon."""

    config: AppConfig
    signal: ActivitySignal
    notifier: NotificationService
    monitor: IdleMonitor
    timers: list[ReminderTimer]
    publisher: PresencePublisher | None = None

    def start(self) -> None:
        """Start the idle monitor and every reminder timer."""
        self.monitor.start()
        for index, timer in enumerate(self.timers):
            timer.start(name=f"reminder-{index}-{timer.spec.interval}")
        logger.info("Scheduled %d reminder(s)", len(self.timers))


def build_daemon(config: AppConfig, reminders: list[ReminderSpec]) -> Daemon:
    """Assemble the components without starting any thread.

    Raises:
        IntervalError: a reminder interval is malformed
        ValueError: a reminder interval is zero

    """
    publisher = create_presence_publisher(
        config.homeassistant_url, config.homeassistant_api_key
    )
    signal = ActivitySignal(on_transition=publisher.submit if publisher else None)
    notifier = NotificationService(default_title=config.default_title)
    timers = build_timers(reminders, signal, notifier)
    return Daemon(
        config=config,
        signal=signal,
        notifier=notifier,
        monitor=IdleMonitor(signal),
        timers=timers,
        publisher=publisher,
    )


def serve(daemon: Daemon) -> None:
    """Block the main thread: run the web server, or just wait."""
    config = daemon.config
    if config.webserver_enabled:
        logger.info(
            "Web server listening on http://%s:%s", config.listen_address, config.port
        )
        uvicorn.run(
            create_app(daemon.notifier),
            host=config.listen_address,
            port=config.port,
        )
    else:
        threading.Event().wait()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pushel reminder daemon")
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="directory holding config.json and notifications.json",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="override the log format from config.json",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the daemon. Returns a process exit status."""
    args = parse_args(argv)
    configure_logging(args.log_format or "pretty")

    try:
        config_dir = ensure_config_dir(resolve_config_dir(args.config_dir))
        config = load_app_config(config_dir)
        configure_logging(args.log_format or config.log_format, config.log_file)
        reminders = load_reminders(config_dir)
        daemon = build_daemon(config, reminders)
    except (ConfigError, IntervalError, ValueError, OSError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    daemon.start()
    try:
        serve(daemon)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
