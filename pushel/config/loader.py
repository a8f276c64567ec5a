"""Loading of ``config.json`` and ``notifications.json`` from the config dir."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from pushel.logger import get_logger
from pushel.model.models import ReminderSpec

__all__ = [
    "AppConfig",
    "ConfigError",
    "load_app_config",
    "load_reminders",
    "resolve_config_dir",
]

CONFIG_FILE = "config.json"
NOTIFICATIONS_FILE = "notifications.json"
ENV_FILE = ".env"

logger = get_logger("config")


class ConfigError(RuntimeError):
    """A configuration file is missing, unreadable or invalid."""


class AppConfig(BaseModel):
    """Daemon-wide settings from ``config.json``."""

    listen_address: str = "0.0.0.0"  # noqa: S104
    port: int = Field(default=3030, ge=1, le=65535)
    webserver_enabled: bool = True
    default_title: str = "Reminder"
    log_format: Literal["pretty", "json"] = "pretty"
    log_file: str | None = None
    homeassistant_url: str | None = None
    homeassistant_api_key: str | None = None


DEFAULT_CONFIG = AppConfig().model_dump()

_REMINDER_DEFAULTS = {
    "title": "Reminder",
    "expire_time": 5000,
    "app_name": "Pushel",
    "icon": "dialog-information",
    "category": "reminder",
    "transient": True,
}

DEFAULT_NOTIFICATIONS = [
    {**_REMINDER_DEFAULTS, "message": "Drink some water!", "interval": "30m", "urgency": "low"},
    {
        **_REMINDER_DEFAULTS,
        "message": "Take a break and stretch!",
        "interval": "2h",
        "urgency": "normal",
    },
    {
        **_REMINDER_DEFAULTS,
        "message": "Look into the distance to relax your eyes!",
        "interval": "40m",
        "urgency": "low",
    },
    {
        **_REMINDER_DEFAULTS,
        "message": "Stand up and walk a few steps!",
        "interval": "1h",
        "urgency": "normal",
    },
    {**_REMINDER_DEFAULTS, "message": "Check your posture!", "interval": "15m", "urgency": "low"},
]

_REMINDER_LIST = TypeAdapter(list[ReminderSpec])


def resolve_config_dir(config_dir: str | Path | None = None) -> Path:
    """Pick the config directory.

    Order: explicit argument, ``PUSHEL_CONFIG_DIR``, ``$XDG_CONFIG_HOME/pushel``,
    ``~/.config/pushel``.
    """
    if config_dir is not None:
        return Path(config_dir).expanduser()
    if env_dir := os.getenv("PUSHEL_CONFIG_DIR"):
        return Path(env_dir).expanduser()
    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "pushel"


def create_default_files(config_dir: Path) -> None:
    """Write the sample ``config.json`` and ``notifications.json``."""
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / CONFIG_FILE).write_text(
        json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8"
    )
    (config_dir / NOTIFICATIONS_FILE).write_text(
        json.dumps(DEFAULT_NOTIFICATIONS, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def ensure_config_dir(config_dir: Path) -> Path:
    """Create the directory with default files on first run."""
    if not config_dir.exists():
        logger.info("Creating default configuration in %s", config_dir)
        create_default_files(config_dir)
    return config_dir


def _read_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        msg = f"cannot read {path}: {e}"
        raise ConfigError(msg) from e
    except json.JSONDecodeError as e:
        msg = f"invalid JSON in {path}: {e}"
        raise ConfigError(msg) from e


def load_app_config(config_dir: Path) -> AppConfig:
    """Parse ``config.json`` and apply environment overrides.

    A ``.env`` file in *config_dir* is loaded first (existing environment
    variables win), so the Home Assistant token can live outside the JSON.
    """
    load_dotenv(dotenv_path=config_dir / ENV_FILE, override=False)
    path = config_dir / CONFIG_FILE
    raw = _read_json(path)
    if not isinstance(raw, dict):
        msg = f"{path} must contain a JSON object"
        raise ConfigError(msg)

    if url := os.getenv("PUSHEL_HOMEASSISTANT_URL"):
        raw["homeassistant_url"] = url
    if api_key := os.getenv("PUSHEL_HOMEASSISTANT_API_KEY"):
        raw["homeassistant_api_key"] = api_key

    try:
        config = AppConfig.model_validate(raw)
    except ValidationError as e:
        msg = f"invalid settings in {path}: {e}"
        raise ConfigError(msg) from e
    logger.info("Configuration loaded: %s", path)
    return config


def load_reminders(config_dir: Path) -> list[ReminderSpec]:
    """Parse ``notifications.json`` into reminder specs (order preserved)."""
    path = config_dir / NOTIFICATIONS_FILE
    raw = _read_json(path)
    try:
        reminders = _REMINDER_LIST.validate_python(raw)
    except ValidationError as e:
        msg = f"invalid reminders in {path}: {e}"
        raise ConfigError(msg) from e
    logger.info("Loaded %d reminder(s) from %s", len(reminders), path)
    return reminders
