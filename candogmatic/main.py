#!/usr/bin/env python3

from bottle import Bottle, request, response, static_file, abort, template
import asyncio
import json
import logging
import os
import traceback
from datetime import datetime

from candogmatic.config import (
    PORT, DEBUG, URL_PREFIX, VIEWS_DIR, STATIC_DIR, LOCALES_DIR,
    SUPPORTED_LANGUAGES, LANGUAGE_STORAGE_KEY, NOTIFICATION_DURATION_MS
)
from candogmatic.utils import browser_language, get_client_ip, is_truthy, set_security_headers
from candogmatic.storage import CookieStore
from candogmatic.audit import log_action, mask_email
from candogmatic.i18n import I18n, DirectoryCatalogFetcher
from candogmatic.page import (
    parse_document, should_show_cookie_banner, cookies_accepted, record_cookie_consent,
    render_cookie_banner, update_copyright_year, filter_scholars, select_scholar_page,
    prepare_stat_counters
)
from candogmatic.forms import handle_newsletter, handle_contact, handle_donation
from candogmatic.notifications import translated_notification

logger = logging.getLogger(__name__)

app = Bottle()

# The server reads its own catalogs from disk; they are also published at /lang/<lang>.json
catalog_fetcher = DirectoryCatalogFetcher(LOCALES_DIR)


def route(path, method='GET'):
    """Register a handler at the site root and, if configured, under URL_PREFIX."""
    def decorator(callback):
        app.route(path, method, callback)
        if URL_PREFIX:
            app.route(f'{URL_PREFIX}{path}', method, callback)
        return callback
    return decorator


def log_language_change(event):
    log_action('LANGUAGE_CHANGE', get_client_ip(), event.language)


def visitor_i18n(store, document=None):
    """Build the I18n context for the current visitor."""
    i18n = I18n(
        catalog_fetcher,
        store=store,
        browser_language=browser_language(request.get_header('Accept-Language')),
        document=document
    )
    i18n.subscribe(log_language_change)
    return i18n


def submitted_fields():
    """Form fields from a JSON body or a regular form post."""
    if request.json and isinstance(request.json, dict):
        return request.json
    # decode() turns bottle's latin-1 form values into proper UTF-8 strings
    return request.forms.decode()


@app.error(500)
def error500(error):
    """Log unhandled exceptions and return a generic page."""
    err_msg = "Unknown Internal Error"
    tb = "No traceback available"
    if hasattr(error, 'exception') and error.exception:
        err_msg = str(error.exception)
        tb = getattr(error, 'traceback', None) or traceback.format_exc()
    logger.error("Unhandled Exception: %s\n\n%s", err_msg, tb)
    return template('<b>Internal Server Error</b><p>Something went wrong.</p>')


@route('/lang/<lang>.json')
def serve_catalog(lang):
    """Publish a translation catalog."""
    set_security_headers()
    if lang not in SUPPORTED_LANGUAGES:
        abort(404, "Unknown language")
    response.set_header('Cache-Control', 'public, max-age=300')
    return static_file(f'{lang}.json', root=LOCALES_DIR, mimetype='application/json', charset='utf-8')


@route('/static/<filepath:path>')
def serve_static(filepath):
    set_security_headers()
    return static_file(filepath, root=STATIC_DIR)


@route('/')
@route('/<page:re:[a-z0-9_-]+>.html')
def page_view(page='index'):
    """Render a site page translated for the visitor.

    ?lang=xx switches language (and remembers it), ?category=xx filters the scholar
    cards and ?page=n selects a page of them.
    """
    set_security_headers()

    page_path = os.path.join(VIEWS_DIR, f'{page}.html')
    if not os.path.isfile(page_path):
        abort(404, "Page not found")
    with open(page_path, 'r', encoding='utf-8') as f:
        document = parse_document(f.read())

    store = CookieStore(request, response)
    i18n = visitor_i18n(store, document)
    requested_lang = request.query.get('lang')

    async def prepare():
        await i18n.initialize()
        if requested_lang:
            await i18n.change_language(requested_lang)

    asyncio.run(prepare())

    render_cookie_banner(document, should_show_cookie_banner(store))
    if document.body is not None:
        document.body['data-cookies-accepted'] = 'true' if cookies_accepted(store) else 'false'
        document.body['data-notification-duration'] = str(NOTIFICATION_DURATION_MS)
    update_copyright_year(document, datetime.now().year)
    category = request.query.get('category')
    if category:
        filter_scholars(document, category)
    scholar_page = (request.query.get('page') or '').strip()
    if scholar_page and select_scholar_page(document, scholar_page) and document.body is not None:
        # The page script shows this toast once the page has loaded
        notification = translated_notification(i18n, 'notifications.loading_page', 'info',
                                               page=scholar_page)
        document.body['data-notification'] = json.dumps(notification.to_dict(), ensure_ascii=False)
    prepare_stat_counters(document)

    response.set_header('Content-Language', i18n.current_lang)
    return str(document)


@route('/language', 'POST')
def change_language():
    """Switch the visitor's language."""
    set_security_headers()
    lang = submitted_fields().get('lang')

    store = CookieStore(request, response)
    i18n = visitor_i18n(store)

    async def switch():
        await i18n.initialize()
        return await i18n.change_language(lang)

    changed = asyncio.run(switch())

    if lang not in SUPPORTED_LANGUAGES:
        response.status = 400
        return {'success': False, 'error': f"Unsupported language: {lang}"}

    return {
        'success': True,
        'lang': i18n.current_lang,
        'label': i18n.language_label,
        'changed': changed
    }


@route('/cookies', 'POST')
def cookie_consent():
    """Record the cookie banner choice."""
    set_security_headers()
    accepted = is_truthy(submitted_fields().get('accepted'))

    store = CookieStore(request, response)
    record_cookie_consent(store, accepted)
    log_action('COOKIE_CONSENT', get_client_ip(), store.get_item(LANGUAGE_STORAGE_KEY),
               {'accepted': accepted})
    return {'success': True, 'cookiesAccepted': 'true' if accepted else 'false'}


def form_i18n():
    i18n = visitor_i18n(CookieStore(request, response))
    asyncio.run(i18n.initialize())
    return i18n


@route('/newsletter', 'POST')
def newsletter_signup():
    set_security_headers()
    i18n = form_i18n()
    result = handle_newsletter(submitted_fields(), i18n)
    if not result.success:
        response.status = 400
        return result.to_dict()

    log_action('NEWSLETTER_SIGNUP', get_client_ip(), i18n.current_lang,
               {'email': mask_email(result.data['email'])})
    return result.to_dict()


@route('/contact', 'POST')
def contact_message():
    set_security_headers()
    i18n = form_i18n()
    result = handle_contact(submitted_fields(), i18n)
    if not result.success:
        response.status = 400
        return result.to_dict()

    log_action('CONTACT_MESSAGE', get_client_ip(), i18n.current_lang,
               {'email': mask_email(result.data.get('email')),
                'length': len(result.data.get('message', ''))})
    return result.to_dict()


@route('/donation', 'POST')
def donation():
    set_security_headers()
    i18n = form_i18n()
    result = handle_donation(submitted_fields(), i18n)
    if not result.success:
        response.status = 400
        return result.to_dict()

    log_action('DONATION', get_client_ip(), i18n.current_lang, {
        'email': mask_email(result.data['email']),
        'amount': result.data['donationAmount'],
        'payment_method': result.data['paymentMethod'],
        'transaction_id': result.extra['transactionId'],
        'mailing_list': result.data['mailingList']
    })
    return result.to_dict()


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    app.run(host='0.0.0.0', port=PORT, debug=DEBUG, reloader=DEBUG)
