import ipaddress
from bottle import response, request
from candogmatic.config import TRUSTED_PROXIES


def get_client_ip():
    """Get the client's IP address, handling potential reverse proxies securely."""
    remote_addr = request.remote_addr
    forwarded = request.environ.get('HTTP_X_FORWARDED_FOR')

    if forwarded and TRUSTED_PROXIES:
        try:
            client_addr = ipaddress.ip_address(remote_addr)
            if any(client_addr in net for net in TRUSTED_PROXIES):
                return forwarded.split(',')[0].strip()
        except ValueError:
            pass

    return remote_addr


def browser_language(header):
    """
    Return the visitor's preferred language tag from an Accept-Language header.

    Example header: "fr-FR,fr;q=0.9,en;q=0.8"
    Returns: 'fr-FR' (the highest q-value entry), or None
    """
    if not header:
        return None

    languages = []
    for position, part in enumerate(header.split(',')):
        part = part.strip()
        if not part:
            continue

        # Parse "en-US;q=0.9" format
        if ';' in part:
            lang, q = part.split(';', 1)
            lang = lang.strip()
            try:
                q = float(q.split('=')[1].strip()) if '=' in q else 1.0
            except ValueError:
                q = 0.0
        else:
            lang = part
            q = 1.0

        if lang and lang != '*' and q > 0:
            languages.append((lang, q, position))

    if not languages:
        return None

    # Highest q-value first; header order breaks ties
    languages.sort(key=lambda x: (-x[1], x[2]))
    return languages[0][0]


def is_truthy(value):
    """Interpret checkbox / flag form values ('on', 'true', '1')."""
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in ('on', 'true', '1', 'yes')


def set_security_headers():
    """Set security HTTP headers to prevent various attacks.

    SECURITY: Headers protect against XSS, clickjacking, MIME sniffing, etc.
    """
    response.set_header('X-Content-Type-Options', 'nosniff')
    response.set_header('X-Frame-Options', 'DENY')
    response.set_header('X-XSS-Protection', '1; mode=block')
    response.set_header('Referrer-Policy', 'strict-origin-when-cross-origin')
    response.set_header('Permissions-Policy', 'geolocation=(), microphone=(), camera=()')
    # Checkout providers are opened in a new tab, never framed or fetched
    csp = "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
    response.set_header('Content-Security-Policy', csp)
