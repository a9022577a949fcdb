import logging
import json
from logging.handlers import TimedRotatingFileHandler
import os
import time
from candogmatic.config import AUDIT_DIR

# Logger configuration
logger = logging.getLogger('audit_logger')
logger.setLevel(logging.INFO)
logger.propagate = False

# Rotate log file every day at midnight (Retention: 90 days)
# Saved in audit/audit.log
handler = TimedRotatingFileHandler(
    os.path.join(AUDIT_DIR, 'audit.log'),
    when='midnight',
    interval=1,
    backupCount=90,
    encoding='utf-8'
)
formatter = logging.Formatter('%(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)


def mask_email(email):
    """Keep enough of an address to correlate entries without storing it whole."""
    if not email or '@' not in email:
        return None
    local, domain = email.rsplit('@', 1)
    return f"{local[:1]}***@{domain}"


def log_action(action, ip, lang, details=None):
    """
    Log structured JSON action record.
    Actions: LANGUAGE_CHANGE, COOKIE_CONSENT, NEWSLETTER_SIGNUP, CONTACT_MESSAGE, DONATION
    """
    log_entry = {
        'timestamp': time.strftime('%Y-%m-%d %H:%M:%S', time.gmtime()),  # UTC
        'ip': ip,
        'action': action,
        'lang': lang,
        'details': details or {}
    }
    logger.info(json.dumps(log_entry, ensure_ascii=False))
    return log_entry
