"""Toast notifications shown by the page scripts after an action."""

from candogmatic.config import NOTIFICATION_DURATION_MS

NOTIFICATION_TYPES = ('success', 'error', 'info')

# Used when the active catalog has no text for a notification key
DEFAULT_MESSAGES = {
    'notifications.newsletter_success': 'Thank you for subscribing to our newsletter!',
    'notifications.invalid_email': 'Please enter a valid email address',
    'notifications.contact_success': 'Message sent successfully! We will get back to you shortly.',
    'notifications.required_fields': 'Please fill in all required fields',
    'notifications.consent_required': 'You must accept the privacy policy',
    'notifications.emails_mismatch': 'The email addresses do not match',
    'notifications.invalid_amount': 'Please enter a valid amount (minimum €1)',
    'notifications.donation_success': 'Thank you for your donation! Redirecting to the payment system...',
    'notifications.loading_page': 'Loading page {page}...',
}


class Notification:
    def __init__(self, message, type='success', duration=NOTIFICATION_DURATION_MS):
        if type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {type}")
        self.message = message
        self.type = type
        self.duration = duration

    def to_dict(self):
        return {'message': self.message, 'type': self.type, 'duration': self.duration}

    def __repr__(self):
        return f"Notification({self.message!r}, type={self.type!r})"


def translated_notification(i18n, key, type='success', **params):
    """Build a notification whose text comes from the visitor's catalog."""
    message = i18n.t(key) if i18n is not None else key
    if message == key:
        message = DEFAULT_MESSAGES.get(key, key)
    if params:
        message = message.format(**params)
    return Notification(message, type)

