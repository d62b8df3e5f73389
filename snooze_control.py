# snooze_control.py
from app_logging import setup_logger
from errors import DeliveryError
from notify import format_resume

logger = setup_logger('snooze_control', 'snooze_control.log')

ACTIVE = 'ACTIVE'
SNOOZED = 'SNOOZED'
EXPIRING = 'EXPIRING'

SECONDS_PER_WEEK = 7 * 24 * 3600


class SnoozeController:
    """
    Snooze state machine for one location.

    ACTIVE -> SNOOZED when an alert applies a snooze, SNOOZED -> EXPIRING once
    expires_at has passed, EXPIRING -> ACTIVE through resolve_expiry(). The
    record is re-read on every call since other runs may change it.

    Two overlapping runs can both see ACTIVE and both alert; the last
    apply_snooze wins. No lock is taken for that.
    """

    def __init__(self, store, key, notifier, recipient):
        self.store = store
        self.key = key
        self.notifier = notifier
        self.recipient = recipient

    def record(self):
        return self.store.get(self.key)

    def state(self, now):
        """(status, record) from a single read of the store."""
        record = self.record()
        if record is None:
            return ACTIVE, None
        if record.expires_at > now:
            return SNOOZED, record
        return EXPIRING, record

    def status(self, now):
        return self.state(now)[0]

    def resolve_expiry(self, now):
        """
        Send the resume notice for a lapsed snooze and clear the record.

        Returns True when the notice was sent during this call. The record is
        only marked after a confirmed send, so a crash in between leads to a
        duplicate notice on the next run rather than a lost one. A failed send
        leaves the record untouched for the next run to retry.
        """
        record = self.record()
        if record is None or record.expires_at > now:
            return False

        sent = False
        if not record.resume_notice_sent:
            subject, body = format_resume(self.key, record.expires_at)
            try:
                self.notifier.send(subject, body, self.recipient)
            except DeliveryError as e:
                logger.error(f"Resume notice for {self.key} not delivered: {e}")
                return False
            sent = True
            logger.info(f"Resume notice sent for {self.key}")
            if not self.store.mark_resume_sent(self.key):
                logger.warning(f"Could not mark resume notice sent for {self.key}")

        if self.store.clear(self.key):
            logger.info(f"Snooze for {self.key} cleared")
        return sent

    def apply_snooze(self, tier, now):
        """Start a fresh snooze for the tier. Returns expires_at, or None if not stored."""
        expires_at = now + tier.weeks * SECONDS_PER_WEEK
        if not self.store.set(self.key, expires_at, resume_notice_sent=False):
            logger.error(f"Alert sent but snooze for {self.key} could not be stored")
            return None
        logger.info(f"Snoozed {self.key} for {tier.weeks:g} weeks ({tier.name}) until {expires_at}")
        return expires_at

    def clear(self):
        return self.store.clear(self.key)
