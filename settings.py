# settings.py
import os
import json
import logging
import pytz
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv
from app_logging import setup_logger
from errors import ConfigError

logger = setup_logger('settings', 'settings.log', level=logging.INFO)

DEFAULT_SETTINGS = {
    "latitude": 37.8044,
    "longitude": -122.2708,
    "timezone": "America/Los_Angeles",
    "threshold_inches": 0.5,
    "window_days": 7,
    "medium_min_inches": 0.5,
    "medium_max_inches": 1.0,
    "medium_weeks": 2,
    "high_min_inches": 1.0,
    "high_weeks": 3,
    "snooze_db": "snooze.db",
    "notifier": "resend",
    "http_timeout_seconds": 10,
}

# settings key -> environment variable
ENV_OVERRIDES = {
    "latitude": "LOCATION_LATITUDE",
    "longitude": "LOCATION_LONGITUDE",
    "timezone": "LOCATION_TIMEZONE",
    "threshold_inches": "PRECIPITATION_THRESHOLD_INCHES",
    "window_days": "PRECIPITATION_WINDOW_DAYS",
    "medium_min_inches": "SNOOZE_MEDIUM_MIN_INCHES",
    "medium_max_inches": "SNOOZE_MEDIUM_MAX_INCHES",
    "medium_weeks": "SNOOZE_MEDIUM_WEEKS",
    "high_min_inches": "SNOOZE_HIGH_MIN_INCHES",
    "high_weeks": "SNOOZE_HIGH_WEEKS",
    "snooze_db": "SNOOZE_DB",
    "notifier": "NOTIFIER",
    "http_timeout_seconds": "HTTP_TIMEOUT_SECONDS",
    "resend_api_key": "RESEND_API_KEY",
    "alert_email": "ALERT_EMAIL",
    "sender_email": "SENDER_EMAIL",
    "pushover_api_token": "PUSHOVER_API_TOKEN",
    "pushover_user_key": "PUSHOVER_USER_KEY",
}

REQUIRED_CREDENTIALS = {
    "resend": ("resend_api_key", "alert_email", "sender_email"),
    "pushover": ("pushover_api_token", "pushover_user_key"),
}


@dataclass(frozen=True)
class SnoozeTier:
    """A rainfall band and the number of weeks alerts stay quiet after it fires."""
    name: str
    min_inches: float
    max_inches: Optional[float]  # None means unbounded
    weeks: float

    def matches(self, total_inches):
        if total_inches < self.min_inches:
            return False
        return self.max_inches is None or total_inches <= self.max_inches


@dataclass(frozen=True)
class MonitorConfig:
    latitude: float
    longitude: float
    timezone: str
    threshold_inches: float
    window_days: int
    tiers: Tuple[SnoozeTier, ...]  # precedence order, first match wins
    snooze_db: Optional[str]
    notifier: str
    recipient: Optional[str]
    sender: Optional[str]
    api_key: Optional[str]
    http_timeout_seconds: float = 10


def load_settings(settings_path='settings.json'):
    """Defaults, then settings.json, then environment variables."""
    load_dotenv()
    settings = dict(DEFAULT_SETTINGS)

    if os.path.exists(settings_path):
        try:
            with open(settings_path, 'r') as file:
                settings.update(json.load(file))
        except json.JSONDecodeError as e:
            logger.warning(f"Error decoding JSON from settings file: {e}. Using default settings.")
    else:
        logger.info("Settings file not found. Using default settings.")

    for key, env_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is not None:
            settings[key] = value
    return settings


def _number(settings, key, cast=float):
    try:
        return cast(settings[key])
    except (TypeError, ValueError):
        raise ConfigError(f"Setting {key} must be numeric, got {settings[key]!r}")


def _timezone(settings):
    try:
        return pytz.timezone(settings["timezone"]).zone
    except pytz.UnknownTimeZoneError:
        raise ConfigError(f"Unknown timezone: {settings['timezone']}")


def build_config(settings):
    """Freeze a settings dict into the MonitorConfig used for one run."""
    notifier = str(settings.get("notifier", "resend")).lower()
    if notifier not in REQUIRED_CREDENTIALS:
        raise ConfigError(f"Unknown notifier: {notifier}")

    missing = [key for key in REQUIRED_CREDENTIALS[notifier] if not settings.get(key)]
    if missing:
        logger.error(f"Missing required settings for {notifier}: {', '.join(missing)}")
        raise ConfigError("Missing required environment variables")

    tiers = (
        SnoozeTier("high", _number(settings, "high_min_inches"), None,
                   _number(settings, "high_weeks")),
        SnoozeTier("medium", _number(settings, "medium_min_inches"),
                   _number(settings, "medium_max_inches"), _number(settings, "medium_weeks")),
    )

    if notifier == "resend":
        recipient = settings["alert_email"]
        sender = settings["sender_email"]
        api_key = settings["resend_api_key"]
    else:
        recipient = settings["pushover_user_key"]
        sender = None
        api_key = settings["pushover_api_token"]

    return MonitorConfig(
        latitude=_number(settings, "latitude"),
        longitude=_number(settings, "longitude"),
        timezone=_timezone(settings),
        threshold_inches=_number(settings, "threshold_inches"),
        window_days=_number(settings, "window_days", int),
        tiers=tiers,
        snooze_db=settings.get("snooze_db") or None,
        notifier=notifier,
        recipient=recipient,
        sender=sender,
        api_key=api_key,
        http_timeout_seconds=_number(settings, "http_timeout_seconds"),
    )
