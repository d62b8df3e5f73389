# clear_snooze_test.py
import io
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch
import clear_snooze
from settings import DEFAULT_SETTINGS
from snooze_store import SnoozeStore, location_key

@patch('clear_snooze.SECRET_CODE', 'letmein')
@patch('clear_snooze.getpass', return_value='letmein')
class TestClearSnooze(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.tmpdir, "snooze.db")
        self.key = location_key(DEFAULT_SETTINGS["latitude"], DEFAULT_SETTINGS["longitude"])

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_clears_record(self, mock_getpass):
        settings = dict(DEFAULT_SETTINGS, snooze_db=self.db_path, resend_api_key="key",
                        alert_email="to@example.com", sender_email="from@example.com")
        store = SnoozeStore(self.db_path)
        store.set(self.key, 9999999999.0)
        with patch('clear_snooze.load_settings', return_value=settings):
            self.assertTrue(clear_snooze.clear_snooze())
        self.assertIsNone(store.get(self.key))

    def test_missing_credentials_reported(self, mock_getpass):
        settings = dict(DEFAULT_SETTINGS, snooze_db=self.db_path)
        with patch('clear_snooze.load_settings', return_value=settings), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            self.assertFalse(clear_snooze.clear_snooze())
        self.assertIn("Missing required environment variables", stdout.getvalue())

    def test_wrong_secret_code(self, mock_getpass):
        mock_getpass.return_value = 'nope'
        with patch('clear_snooze.load_settings') as mock_load:
            self.assertFalse(clear_snooze.clear_snooze())
        mock_load.assert_not_called()

if __name__ == '__main__':
    unittest.main()
