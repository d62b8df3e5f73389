# clear_snooze.py
import os
from getpass import getpass
from dotenv import load_dotenv

from errors import ConfigError
from settings import load_settings, build_config
from snooze_store import SnoozeStore, location_key

load_dotenv()

SECRET_CODE = os.getenv('SECRET_CODE', 'default_secret_code')

def clear_snooze():
    secret_code = getpass("Enter the secret code to proceed: ")

    if secret_code != SECRET_CODE:
        print("Incorrect secret code. Exiting without clearing the snooze.")
        return False

    try:
        config = build_config(load_settings())
    except ConfigError as e:
        print(f"Cannot load settings: {e}")
        return False
    if not config.snooze_db:
        print("No snooze database configured.")
        return False

    key = location_key(config.latitude, config.longitude)
    if SnoozeStore(config.snooze_db).clear(key):
        print(f"Snooze for {key} has been cleared.")
        return True
    print(f"An error occurred while trying to clear the snooze for {key}.")
    return False

if __name__ == "__main__":
    clear_snooze()
