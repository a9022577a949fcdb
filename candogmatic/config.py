import os
import ipaddress

# Configuration
PORT = int(os.getenv('PORT', 8080))
# SECURITY: Default to false in production to prevent information disclosure
DEBUG = os.getenv('DEBUG', 'false').lower() == 'true'

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
VIEWS_DIR = os.path.join(PACKAGE_DIR, 'views')
STATIC_DIR = os.path.abspath(os.getenv('STATIC_DIR', os.path.join(PACKAGE_DIR, 'static')))
LOCALES_DIR = os.path.join(PACKAGE_DIR, 'i18n', 'locales')
AUDIT_DIR = os.path.abspath(os.getenv('AUDIT_DIR', 'audit'))

BASE_URL = os.getenv('BASE_URL', '/').strip()
if not BASE_URL:
    BASE_URL = '/'

# Check if BASE_URL is a full URL (http:// or https://)
is_full_url = BASE_URL.startswith('http://') or BASE_URL.startswith('https://')

if not is_full_url:
    # For path prefixes, ensure it starts with /
    if not BASE_URL.startswith('/'):
        BASE_URL = '/' + BASE_URL
    # Ensure BASE_URL doesn't end with / for consistent joins, unless it's just "/"
    if len(BASE_URL) > 1:
        BASE_URL = BASE_URL.rstrip('/')

# URL_PREFIX is used for constructing routes like f'{URL_PREFIX}/lang/<lang>.json'
# If BASE_URL is a full URL or "/", URL_PREFIX should be empty
URL_PREFIX = '' if is_full_url or BASE_URL == '/' else BASE_URL

# SECURITY: Trusted proxies for IP detection (comma-separated list of IPs or CIDR networks)
# Only trust X-Forwarded-For if it comes from these networks.
TRUSTED_PROXIES = []
for p in os.getenv('TRUSTED_PROXIES', '').split(','):
    p = p.strip()
    if p:
        try:
            # strict=False allows host bits to be set (e.g., 10.0.0.1/24)
            TRUSTED_PROXIES.append(ipaddress.ip_network(p, strict=False))
        except ValueError:
            pass

# i18n Configuration
SUPPORTED_LANGUAGES = ('ca', 'es', 'fr', 'en')
DEFAULT_LANGUAGE = os.getenv('DEFAULT_LANGUAGE', 'ca')
if DEFAULT_LANGUAGE not in SUPPORTED_LANGUAGES:
    DEFAULT_LANGUAGE = 'ca'

# Where deployed catalogs live (<CATALOG_BASE_URL>/lang/<lang>.json)
CATALOG_BASE_URL = os.getenv('CATALOG_BASE_URL', 'http://localhost:8080').rstrip('/')
CATALOG_TIMEOUT = float(os.getenv('CATALOG_TIMEOUT', '10'))

# Client-side persistent keys (cookies when serving)
LANGUAGE_STORAGE_KEY = 'preferredLang'
COOKIES_STORAGE_KEY = 'cookiesAccepted'
PREFERENCE_COOKIE_MAX_AGE = int(os.getenv('PREFERENCE_COOKIE_MAX_AGE', 365 * 24 * 3600))

# UI timings (milliseconds), handed to the page scripts
NOTIFICATION_DURATION_MS = int(os.getenv('NOTIFICATION_DURATION_MS', '5000'))
COOKIE_BANNER_DELAY_MS = int(os.getenv('COOKIE_BANNER_DELAY_MS', '2000'))
CHECKOUT_REDIRECT_DELAY_MS = int(os.getenv('CHECKOUT_REDIRECT_DELAY_MS', '2000'))

# Footer copyright year written in the static markup
COPYRIGHT_BASE_YEAR = os.getenv('COPYRIGHT_BASE_YEAR', '2024')

# Donations
MIN_DONATION = float(os.getenv('MIN_DONATION', '1'))
CHECKOUT_URLS = {
    'stripe': os.getenv('STRIPE_CHECKOUT_URL', 'https://stripe.com/checkout'),
    'paypal': os.getenv('PAYPAL_CHECKOUT_URL', 'https://paypal.com/checkout'),
}

# Ensure directories exist
if not os.path.exists(AUDIT_DIR):
    os.makedirs(AUDIT_DIR, exist_ok=True)
