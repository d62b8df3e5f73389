# fetch_data.py
import requests
import pytz
from datetime import datetime, timedelta
from app_logging import setup_logger
from errors import ConfigError, DataUnavailable

logger = setup_logger('fetch_data', 'fetch_data.log')

ARCHIVE_URL = 'https://archive-api.open-meteo.com/v1/archive'
MM_PER_INCH = 25.4


def date_window(now, days, tz_name):
    """
    Start and end dates (YYYY-MM-DD) of the trailing window ending at `now`.
    `now` is epoch seconds; dates are local to the given timezone.
    """
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise ConfigError(f"Unknown timezone: {tz_name}")
    local_now = datetime.fromtimestamp(now, tz=pytz.utc).astimezone(tz)
    end_date = local_now.date()
    start_date = end_date - timedelta(days=days)
    return start_date.isoformat(), end_date.isoformat()


class OpenMeteoSource:
    """Daily precipitation totals from the Open-Meteo historical archive."""

    def __init__(self, tz_name='America/Los_Angeles', timeout=10, url=ARCHIVE_URL):
        self.tz_name = tz_name
        self.timeout = timeout
        self.url = url

    def fetch_total(self, latitude, longitude, start_date, end_date):
        """
        Total precipitation in inches for the inclusive date range.
        Raises DataUnavailable when no daily values come back.
        """
        params = {
            'latitude': latitude,
            'longitude': longitude,
            'start_date': start_date,
            'end_date': end_date,
            'daily': 'precipitation_sum',
            'timezone': self.tz_name,
        }
        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()  # Will raise an exception for 4XX/5XX responses
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise DataUnavailable(f"Failed to fetch weather data: {e}")
        except ValueError as e:
            raise DataUnavailable(f"Invalid JSON from weather API: {e}")

        daily = data.get('daily') if isinstance(data, dict) else None
        if not daily:
            raise DataUnavailable("No daily weather data available")

        values = [v for v in daily.get('precipitation_sum') or [] if v is not None]
        if not values:
            raise DataUnavailable("No precipitation data available")

        total_mm = sum(values)
        total_inches = total_mm / MM_PER_INCH
        logger.info(f"Total precipitation {start_date} to {end_date}: {total_inches:.2f} inches "
                    f"({len(values)} days)")
        return total_inches
