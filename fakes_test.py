# fakes_test.py
# In-memory stand-ins for the weather source, notifier and snooze store.
from errors import DataUnavailable, DeliveryError
from settings import SnoozeTier, MonitorConfig
from snooze_store import SnoozeRecord

HIGH = SnoozeTier("high", 1.0, None, 3)
MEDIUM = SnoozeTier("medium", 0.5, 1.0, 2)


def make_config(**overrides):
    values = dict(
        latitude=37.8044,
        longitude=-122.2708,
        timezone="America/Los_Angeles",
        threshold_inches=0.5,
        window_days=7,
        tiers=(HIGH, MEDIUM),
        snooze_db=None,
        notifier="resend",
        recipient="alerts@example.com",
        sender="monitor@example.com",
        api_key="test-key",
    )
    values.update(overrides)
    return MonitorConfig(**values)


class FakeSource:
    def __init__(self, total=None, error=None):
        self.total = total
        self.error = error
        self.calls = []

    def fetch_total(self, latitude, longitude, start_date, end_date):
        self.calls.append((latitude, longitude, start_date, end_date))
        if self.error:
            raise DataUnavailable(self.error)
        return self.total


class FakeNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, subject, body, recipient):
        if self.fail:
            raise DeliveryError("delivery refused")
        self.sent.append((subject, body, recipient))
        return True


class MemoryStore:
    """Dict-backed snooze store; `down` simulates an unreachable database."""

    def __init__(self, down=False):
        self.records = {}
        self.down = down
        self.writes = 0

    def get(self, key):
        if self.down:
            return None
        return self.records.get(key)

    def set(self, key, expires_at, resume_notice_sent=False):
        if self.down:
            return False
        self.writes += 1
        self.records[key] = SnoozeRecord(expires_at, resume_notice_sent)
        return True

    def mark_resume_sent(self, key):
        if self.down or key not in self.records:
            return False
        self.writes += 1
        self.records[key] = self.records[key]._replace(resume_notice_sent=True)
        return True

    def clear(self, key):
        if self.down:
            return False
        self.writes += 1
        self.records.pop(key, None)
        return True
