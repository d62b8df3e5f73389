# rain_alarm.py
import json
import sys
import time
from dataclasses import dataclass
from typing import Optional
from settings import load_settings, build_config
from app_logging import setup_logger
from errors import ConfigError, DataUnavailable, DeliveryError
from fetch_data import OpenMeteoSource, date_window
from notify import build_notifier, format_alert
from precipitation import evaluate
from snooze_control import SnoozeController, SNOOZED, EXPIRING
from snooze_store import SnoozeStore, location_key

logger = setup_logger('rain', 'rain.log')

ALERT_SENT = 'alert_sent'
NO_ALERT = 'no_alert'
SNOOZED_SKIP = 'snoozed'
DATA_UNAVAILABLE = 'data_unavailable'
DELIVERY_FAILED = 'delivery_failed'

MESSAGES = {
    ALERT_SENT: "Alert sent",
    NO_ALERT: "No alert needed",
    SNOOZED_SKIP: "Alerts snoozed",
    DATA_UNAVAILABLE: "Failed to fetch weather data",
    DELIVERY_FAILED: "Failed to send alert email",
}


@dataclass
class CheckResult:
    """Outcome of one precipitation check."""
    latitude: float
    longitude: float
    threshold: float
    status: str = NO_ALERT
    precipitation: Optional[float] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    alert_fired: bool = False
    snoozed_until: Optional[float] = None
    snooze_applied: bool = False
    snooze_weeks: Optional[float] = None
    resume_notice_sent: bool = False
    error: Optional[str] = None

    @property
    def success(self):
        return self.status in (ALERT_SENT, NO_ALERT, SNOOZED_SKIP)

    def to_dict(self):
        data = {
            "success": self.success,
            "message": MESSAGES[self.status],
            "alert": self.alert_fired,
            "precipitation": self.precipitation,
            "threshold": self.threshold,
            "location": {"latitude": self.latitude, "longitude": self.longitude},
            "dateRange": {"start": self.start_date, "end": self.end_date},
            "snoozed": self.status == SNOOZED_SKIP,
            "snoozedUntil": self.snoozed_until,
            "snoozeApplied": self.snooze_applied,
            "snoozeWeeks": self.snooze_weeks,
            "resumeNoticeSent": self.resume_notice_sent,
        }
        if self.error:
            data["error"] = self.error
        return data


def check_rain_alert(config, source, notifier, store=None, now=None):
    """
    Run one precipitation check for the configured location.

    With a store, an active snooze ends the run before the weather source is
    asked for anything; a lapsed snooze is resolved (resume notice, clear) and
    the check carries on in the same run. Data and delivery failures are
    reported in the result, never raised.
    """
    if now is None:
        now = time.time()
    result = CheckResult(config.latitude, config.longitude, config.threshold_inches)
    # computed before any snooze transition
    start_date, end_date = date_window(now, config.window_days, config.timezone)

    controller = None
    if store is not None:
        key = location_key(config.latitude, config.longitude)
        controller = SnoozeController(store, key, notifier, config.recipient)
        status, record = controller.state(now)
        if status == SNOOZED:
            logger.info(f"Alerts for {key} snoozed until {record.expires_at}, skipping check")
            result.status = SNOOZED_SKIP
            result.snoozed_until = record.expires_at
            return result
        if status == EXPIRING:
            result.resume_notice_sent = controller.resolve_expiry(now)

    result.start_date, result.end_date = start_date, end_date
    logger.info(f"Checking precipitation for location ({config.latitude}, {config.longitude})")
    logger.info(f"Date range: {start_date} to {end_date}, threshold: {config.threshold_inches} inches")

    try:
        total = source.fetch_total(config.latitude, config.longitude, start_date, end_date)
    except DataUnavailable as e:
        logger.error(f"No usable weather data: {e}")
        result.status = DATA_UNAVAILABLE
        result.error = str(e)
        return result
    result.precipitation = total

    evaluation = evaluate(total, config.threshold_inches, config.tiers)
    if not evaluation.alert:
        logger.info(f"Precipitation ({total:.2f}\") below threshold ({config.threshold_inches}\")")
        result.status = NO_ALERT
        return result

    logger.info("Threshold exceeded! Sending alert...")
    subject, body = format_alert(total, config.threshold_inches, config.latitude, config.longitude,
                                 start_date, end_date, evaluation.tier if controller else None)
    try:
        notifier.send(subject, body, config.recipient)
    except DeliveryError as e:
        logger.error(f"Failed to send alert: {e}")
        result.status = DELIVERY_FAILED
        result.error = str(e)
        return result
    result.status = ALERT_SENT
    result.alert_fired = True

    if controller is not None and evaluation.tier is not None:
        expires_at = controller.apply_snooze(evaluation.tier, now)
        if expires_at is not None:
            result.snooze_applied = True
            result.snooze_weeks = evaluation.tier.weeks
            result.snoozed_until = expires_at
    return result


def build_store(config):
    if not config.snooze_db:
        return None
    return SnoozeStore(config.snooze_db)


def run_check(settings=None, now=None):
    """Build everything from settings and run one check."""
    if settings is None:
        settings = load_settings()
    config = build_config(settings)
    source = OpenMeteoSource(config.timezone, timeout=config.http_timeout_seconds)
    return check_rain_alert(config, source, build_notifier(config), build_store(config), now=now)


if __name__ == '__main__':
    try:
        result = run_check()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(json.dumps({"error": str(e)}, indent=2))
        sys.exit(1)
    print(json.dumps(result.to_dict(), indent=2))
    sys.exit(0 if result.success else 1)
