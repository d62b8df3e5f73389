# snooze_control_test.py
import unittest
from snooze_control import SnoozeController, ACTIVE, SNOOZED, EXPIRING, SECONDS_PER_WEEK
from snooze_store import SnoozeRecord
from fakes_test import FakeNotifier, MemoryStore, HIGH, MEDIUM

KEY = "37.8044,-122.2708"
NOW = 1_700_000_000

class TestSnoozeController(unittest.TestCase):
    def setUp(self):
        self.store = MemoryStore()
        self.notifier = FakeNotifier()
        self.controller = SnoozeController(self.store, KEY, self.notifier, "alerts@example.com")

    def test_no_record_is_active(self):
        self.assertEqual(self.controller.status(NOW), ACTIVE)

    def test_future_expiry_is_snoozed(self):
        self.store.records[KEY] = SnoozeRecord(NOW + 1, False)
        self.assertEqual(self.controller.status(NOW), SNOOZED)

    def test_expiry_at_now_is_expiring(self):
        self.store.records[KEY] = SnoozeRecord(NOW, False)
        self.assertEqual(self.controller.status(NOW), EXPIRING)

    def test_apply_then_status_round_trip(self):
        expires_at = self.controller.apply_snooze(MEDIUM, NOW)
        self.assertEqual(expires_at, NOW + 2 * 604800)
        status, record = self.controller.state(NOW)
        self.assertEqual(status, SNOOZED)
        self.assertEqual(record.expires_at, NOW + MEDIUM.weeks * SECONDS_PER_WEEK)
        self.assertFalse(record.resume_notice_sent)

    def test_apply_restarts_window(self):
        self.controller.apply_snooze(HIGH, NOW)
        self.store.mark_resume_sent(KEY)
        self.controller.apply_snooze(MEDIUM, NOW + 100)
        self.assertEqual(self.store.records[KEY], SnoozeRecord(NOW + 100 + 2 * 604800, False))

    def test_apply_failure_returns_none(self):
        self.store.down = True
        self.assertIsNone(self.controller.apply_snooze(HIGH, NOW))

    def test_resolve_expiry_sends_marks_and_clears(self):
        self.store.records[KEY] = SnoozeRecord(NOW - 10, False)
        self.assertTrue(self.controller.resolve_expiry(NOW))
        self.assertEqual(len(self.notifier.sent), 1)
        subject, _, recipient = self.notifier.sent[0]
        self.assertEqual(subject, "Rain monitoring resumed")
        self.assertEqual(recipient, "alerts@example.com")
        self.assertEqual(self.controller.status(NOW), ACTIVE)

    def test_resolve_expiry_twice_sends_once(self):
        self.store.records[KEY] = SnoozeRecord(NOW - 10, False)
        self.controller.resolve_expiry(NOW)
        self.assertFalse(self.controller.resolve_expiry(NOW))
        self.assertEqual(len(self.notifier.sent), 1)
        self.assertEqual(self.controller.status(NOW), ACTIVE)

    def test_already_sent_notice_is_not_repeated(self):
        # a previous run sent and marked but never cleared
        self.store.records[KEY] = SnoozeRecord(NOW - 10, True)
        self.assertFalse(self.controller.resolve_expiry(NOW))
        self.assertEqual(self.notifier.sent, [])
        self.assertEqual(self.controller.status(NOW), ACTIVE)

    def test_failed_clear_converges_on_next_call(self):
        self.store.records[KEY] = SnoozeRecord(NOW - 10, False)
        original_clear = self.store.clear
        self.store.clear = lambda key: False
        self.controller.resolve_expiry(NOW)
        self.assertTrue(self.store.records[KEY].resume_notice_sent)
        self.store.clear = original_clear
        self.controller.resolve_expiry(NOW)
        self.assertEqual(len(self.notifier.sent), 1)
        self.assertEqual(self.controller.status(NOW), ACTIVE)

    def test_delivery_failure_leaves_record_for_retry(self):
        self.store.records[KEY] = SnoozeRecord(NOW - 10, False)
        self.notifier.fail = True
        self.assertFalse(self.controller.resolve_expiry(NOW))
        self.assertEqual(self.store.records[KEY], SnoozeRecord(NOW - 10, False))
        self.assertEqual(self.controller.status(NOW), EXPIRING)

        self.notifier.fail = False
        self.assertTrue(self.controller.resolve_expiry(NOW + 60))
        self.assertEqual(self.controller.status(NOW + 60), ACTIVE)

    def test_resolve_expiry_ignores_active_snooze(self):
        self.store.records[KEY] = SnoozeRecord(NOW + 100, False)
        self.assertFalse(self.controller.resolve_expiry(NOW))
        self.assertEqual(self.controller.status(NOW), SNOOZED)
        self.assertEqual(self.notifier.sent, [])

if __name__ == '__main__':
    unittest.main()
