# snooze_store.py
import sqlite3
from collections import namedtuple
from app_logging import setup_logger, should_log
from errors import StoreUnavailable

logger = setup_logger('snooze_store', 'snooze_store.log')

KEY_PRECISION = 4

SnoozeRecord = namedtuple('SnoozeRecord', ['expires_at', 'resume_notice_sent'])


def location_key(latitude, longitude):
    """Stable key for a location, rounded to 4 decimal degrees."""
    # adding 0.0 folds -0.0 into 0.0
    lat = round(float(latitude), KEY_PRECISION) + 0.0
    lon = round(float(longitude), KEY_PRECISION) + 0.0
    return f"{lat:.{KEY_PRECISION}f},{lon:.{KEY_PRECISION}f}"


class SnoozeStore:
    """
    Snooze records in a sqlite database, one row per location key.

    Each call opens and closes its own connection. get() never raises: an
    unreachable database reads as "no snooze". Writes return True on success
    and False when the database could not be updated.
    """

    def __init__(self, db_path):
        self.db_path = db_path

    def _connect(self):
        try:
            conn = sqlite3.connect(self.db_path)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snooze (
                    location_key TEXT PRIMARY KEY,
                    expires_at REAL,
                    resume_notice_sent INTEGER NOT NULL DEFAULT 0
                )
            """)
            return conn
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open snooze database {self.db_path}: {e}")

    def _write(self, action, query, params):
        try:
            conn = self._connect()
        except StoreUnavailable as e:
            logger.error(f"Failed to {action}: {e}")
            return False
        try:
            conn.execute(query, params)
            conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to {action} for {params[-1]}: {e}")
            return False
        finally:
            conn.close()

    def get(self, key):
        try:
            conn = self._connect()
        except StoreUnavailable as e:
            message = f"Snooze store unavailable, treating {key} as not snoozed: {e}"
            if should_log(message):
                logger.warning(message)
            return None
        try:
            row = conn.execute(
                "SELECT expires_at, resume_notice_sent FROM snooze WHERE location_key = ?",
                (key,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.warning(f"Failed to read snooze record for {key}: {e}")
            return None
        finally:
            conn.close()

        if row is None or row[0] is None:
            return None
        return SnoozeRecord(expires_at=row[0], resume_notice_sent=bool(row[1]))

    def set(self, key, expires_at, resume_notice_sent=False):
        return self._write(
            "set snooze",
            """
                INSERT INTO snooze (expires_at, resume_notice_sent, location_key)
                VALUES (?, ?, ?)
                ON CONFLICT(location_key) DO UPDATE SET
                    expires_at = excluded.expires_at,
                    resume_notice_sent = excluded.resume_notice_sent
            """,
            (expires_at, int(resume_notice_sent), key)
        )

    def mark_resume_sent(self, key):
        return self._write(
            "mark resume notice sent",
            "UPDATE snooze SET resume_notice_sent = 1 WHERE location_key = ?",
            (key,)
        )

    def clear(self, key):
        return self._write(
            "clear snooze",
            "DELETE FROM snooze WHERE location_key = ?",
            (key,)
        )
