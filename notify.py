# notify.py
import re
import requests
from datetime import datetime, timezone
from app_logging import setup_logger
from errors import DeliveryError

logger = setup_logger('notify', 'notify.log')

RESEND_URL = 'https://api.resend.com/emails'
PUSHOVER_URL = 'https://api.pushover.net/1/messages.json'


class ResendNotifier:
    """Send notifications as HTML email through the Resend API."""

    def __init__(self, api_key, sender, timeout=10):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def send(self, subject, body, recipient):
        payload = {
            'from': self.sender,
            'to': recipient,
            'subject': subject,
            'html': body,
        }
        headers = {'Authorization': f'Bearer {self.api_key}'}
        try:
            response = requests.post(RESEND_URL, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DeliveryError(f"Resend request failed: {e}")

        if not 200 <= response.status_code < 300:
            raise DeliveryError(f"Resend returned status {response.status_code}: {response.text}")
        logger.info(f"Email sent to {recipient}: {subject}")
        return True


class PushoverNotifier:
    """Send notifications via Pushover. The recipient is the user key."""

    def __init__(self, api_token, timeout=10):
        self.api_token = api_token
        self.timeout = timeout

    def send(self, subject, body, recipient):
        data = {
            'token': self.api_token,
            'user': recipient,
            'title': subject,
            'message': html_to_text(body),
            'priority': 1,  # Set priority to high
        }
        try:
            response = requests.post(PUSHOVER_URL, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DeliveryError(f"Pushover request failed: {e}")

        if response.status_code != 200:
            raise DeliveryError(f"Pushover returned status {response.status_code}: {response.text}")
        logger.info(f"Pushover sent: {subject}")
        return True


def build_notifier(config):
    if config.notifier == 'pushover':
        return PushoverNotifier(config.api_key, timeout=config.http_timeout_seconds)
    return ResendNotifier(config.api_key, config.sender, timeout=config.http_timeout_seconds)


def format_timestamp(epoch_seconds):
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime('%Y-%m-%d %H:%M UTC')


def format_alert(total_inches, threshold_inches, latitude, longitude, start_date, end_date, tier=None):
    """Subject and HTML body for a rain alert."""
    subject = f'Rain Alert: {total_inches:.2f}" of rain in the past week'
    snooze_line = ''
    if tier is not None:
        snooze_line = f"<p>Further alerts will be snoozed for {tier.weeks:g} weeks ({tier.name} rainfall).</p>"
    body = f"""
          <h2>Rain Alert</h2>
          <p>Precipitation threshold has been exceeded!</p>
          <ul>
            <li><strong>Location:</strong> {latitude}, {longitude}</li>
            <li><strong>Date Range:</strong> {start_date} to {end_date}</li>
            <li><strong>Total Precipitation:</strong> {total_inches:.2f} inches</li>
            <li><strong>Threshold:</strong> {threshold_inches} inches</li>
          </ul>
          {snooze_line}
        """
    return subject, body


def format_resume(location, expired_at):
    subject = 'Rain monitoring resumed'
    body = f"""
          <h2>Rain monitoring resumed</h2>
          <p>The alert snooze for {location} ended at {format_timestamp(expired_at)}.</p>
          <p>Rain alerts will be sent again when the threshold is exceeded.</p>
        """
    return subject, body


def html_to_text(body):
    """Plain-text rendering of the HTML message bodies, for Pushover."""
    text = re.sub(r'<li>\s*', '- ', body)
    text = re.sub(r'<[^>]+>', '', text)
    lines = [line.strip() for line in text.splitlines()]
    return '\n'.join(line for line in lines if line)
