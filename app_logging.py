# app_logging.py
import logging
import logging.handlers
import os
import sys
from dotenv import load_dotenv
from datetime import datetime, timedelta

load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Track last log times for messages
last_logged_time = {}
log_interval = timedelta(minutes=1)  # Default log interval

def should_log(message, interval=log_interval):
    """
    Determines if a log message should be logged based on the interval.
    Avoids duplicate log entries within the specified interval.
    """
    current_time = datetime.now()
    if message in last_logged_time and current_time - last_logged_time[message] < interval:
        return False
    last_logged_time[message] = current_time
    return True

def setup_handlers(logger, log_file, log_level=logging.INFO, to_stdout=True):
    log_directory = os.getenv('LOG_DIR', 'logs')
    if not os.path.exists(log_directory):
        os.makedirs(log_directory)
    log_file_path = os.path.join(log_directory, log_file)

    if not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers):
        file_handler = logging.handlers.RotatingFileHandler(log_file_path, maxBytes=1048576, backupCount=5)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    logger.setLevel(log_level)

    if to_stdout:
        # RotatingFileHandler is a StreamHandler subclass too
        if not any(type(h) is logging.StreamHandler for h in logger.handlers):
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(console_handler)

def setup_email_logging(logger):
    """Forward ERROR records by mail when EMAIL_HOST is configured."""
    email_host = os.getenv('EMAIL_HOST')
    if not email_host:
        return
    if any(isinstance(h, logging.handlers.SMTPHandler) for h in logger.handlers):
        return

    email_username = os.getenv('EMAIL_USERNAME')
    email_password = os.getenv('EMAIL_PASSWORD')

    # Email error logger setup
    email_error_logger = logging.getLogger('email_error')
    if not email_error_logger.handlers:
        fh = logging.FileHandler('email_errors.log')
        fh.setLevel(logging.ERROR)
        fh.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        email_error_logger.addHandler(fh)

    try:
        email_port = int(os.getenv('EMAIL_PORT', '587'))
        mail_handler = logging.handlers.SMTPHandler(
            mailhost=(email_host, email_port),
            fromaddr=email_username,
            toaddrs=os.getenv('LOG_EMAIL_TO', email_username),
            subject="Rain monitor error logged",
            credentials=(email_username, email_password) if email_username else None,
            secure=() if email_username else None
        )
        mail_handler.setLevel(logging.ERROR)
        mail_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(mail_handler)
    except Exception as e:
        email_error_logger.error("Failed to set up email logging: %s", str(e))


def setup_logger(name, log_file, level=logging.INFO):
    try:
        logger = logging.getLogger(name)
        setup_handlers(logger, log_file, log_level=level)  # Setup with console output
        setup_email_logging(logger)
        return logger
    except Exception as e:
        sys.stderr.write("Failed to set up logger: {}\n".format(e))
        sys.exit(1)
