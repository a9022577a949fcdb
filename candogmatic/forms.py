"""
Newsletter, contact and donation form handling.

Each handler takes the submitted fields (any mapping) and the visitor's
I18n, and returns a FormResult carrying one notification for the page.
"""

import logging
import math
import re
import time

from candogmatic.config import CHECKOUT_REDIRECT_DELAY_MS, CHECKOUT_URLS, MIN_DONATION
from candogmatic.notifications import translated_notification
from candogmatic.utils import is_truthy

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'[^\s@]+@[^\s@]+\.[^\s@]+')

CONTACT_REQUIRED = ('name', 'email', 'message')
DONATION_REQUIRED = ('fullName', 'email', 'confirmEmail', 'donationAmount', 'paymentMethod')


class FormResult:
    def __init__(self, success, notification, data=None, **extra):
        self.success = success
        self.notification = notification
        self.data = data
        self.extra = extra

    def to_dict(self):
        result = {'success': self.success, 'notification': self.notification.to_dict()}
        result.update(self.extra)
        return result


def validate_email(email):
    if not email or not isinstance(email, str):
        return False
    return EMAIL_RE.fullmatch(email) is not None


def field(form, name):
    """A submitted value as a stripped string. Lists, objects and booleans count as blank."""
    value = form.get(name)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ''
    return str(value).strip()


def missing_fields(form, required):
    """Names of required fields that are absent or blank."""
    return [name for name in required if not field(form, name)]


def _error(i18n, key, **extra):
    return FormResult(False, translated_notification(i18n, key, 'error'), **extra)


def handle_newsletter(form, i18n=None):
    email = field(form, 'email')
    if not validate_email(email):
        return _error(i18n, 'notifications.invalid_email')

    logger.info("Newsletter signup: %s", email)
    return FormResult(True, translated_notification(i18n, 'notifications.newsletter_success'),
                      data={'email': email})


def handle_contact(form, i18n=None):
    missing = missing_fields(form, CONTACT_REQUIRED)
    if missing:
        # The page focuses the first missing field
        return _error(i18n, 'notifications.required_fields', fields=missing)

    data = {name: field(form, name) for name in form.keys()}
    logger.info("Contact form from %s", data.get('email'))
    return FormResult(True, translated_notification(i18n, 'notifications.contact_success'), data=data)


def parse_amount(value):
    """Parse a donation amount; '12,50' and '12.50' both work. None when invalid."""
    if value is None:
        return None
    try:
        amount = float(str(value).strip().replace(',', '.'))
    except ValueError:
        return None
    if math.isnan(amount) or math.isinf(amount):
        return None
    return amount


def process_donation(data, now=None):
    """Hand the donation over for payment. Only a transaction id is produced here."""
    now = time.time() if now is None else now
    logger.info("Processing donation for: %s", data['fullName'])
    return {'success': True, 'transactionId': f"TXN_{int(now * 1000)}"}


def handle_donation(form, i18n=None, now=None):
    missing = missing_fields(form, DONATION_REQUIRED)
    if not is_truthy(form.get('consent')):
        return _error(i18n, 'notifications.consent_required', fields=missing)
    if missing:
        return _error(i18n, 'notifications.required_fields', fields=missing)

    email = field(form, 'email')
    if email != field(form, 'confirmEmail'):
        return _error(i18n, 'notifications.emails_mismatch', fields=['confirmEmail'])

    amount = parse_amount(field(form, 'donationAmount'))
    if amount is None or amount < MIN_DONATION:
        return _error(i18n, 'notifications.invalid_amount', fields=['donationAmount'])

    data = {
        'fullName': field(form, 'fullName'),
        'email': email,
        'gender': field(form, 'gender') or None,
        'mailingList': is_truthy(form.get('mailingList')),
        'donationAmount': amount,
        'paymentMethod': field(form, 'paymentMethod'),
        'message': field(form, 'message'),
        'consent': True,
    }
    transaction = process_donation(data, now=now)

    return FormResult(
        True,
        translated_notification(i18n, 'notifications.donation_success'),
        data=data,
        transactionId=transaction['transactionId'],
        # Unknown payment methods get no checkout; the form is still accepted
        redirect=CHECKOUT_URLS.get(data['paymentMethod']),
        redirectDelay=CHECKOUT_REDIRECT_DELAY_MS,
    )
