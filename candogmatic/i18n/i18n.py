"""
Internationalization (i18n) resolver for the Can Dogmatic site.

An ``I18n`` object owns the active language and its catalog. It is built
by whoever renders a page (one per request on the server) and driven
through ``initialize`` / ``change_language``.
"""

import logging
import re
from collections import namedtuple

from candogmatic.config import DEFAULT_LANGUAGE, LANGUAGE_STORAGE_KEY, SUPPORTED_LANGUAGES
from candogmatic.i18n.catalog import CatalogUnavailable, LocaleUnsupported, lookup

logger = logging.getLogger(__name__)

# Short codes shown in the language selector
LANGUAGE_LABELS = {
    'ca': 'CA',
    'es': 'ES',
    'fr': 'FR',
    'en': 'EN',
}

# Marker attribute -> element attribute it fills (None means text content)
MARKERS = (
    ('data-i18n', None),
    ('data-i18n-placeholder', 'placeholder'),
    ('data-i18n-title', 'title'),
)

WARNING_KEY = 'warning.message'

# First two-letter language segment of an alternate link path, e.g. /es/
LANG_SEGMENT_RE = re.compile(r'/[a-z]{2}/')

LanguageChanged = namedtuple('LanguageChanged', ['language'])


def detect_language(saved, browser_tag, supported=SUPPORTED_LANGUAGES, default=DEFAULT_LANGUAGE):
    """
    Pick the initial language.

    Priority:
    1. Saved user preference
    2. Browser language (primary subtag, e.g. "fr-FR" -> "fr")
    3. Default language
    """
    if saved and saved in supported:
        return saved

    browser_lang = browser_tag.split('-')[0].strip().lower() if browser_tag else None
    if browser_lang and browser_lang in supported:
        return browser_lang

    return default


class I18n:
    """Active language, its catalog, and the page rewriting that follows from them."""

    def __init__(self, fetcher, store=None, browser_language=None, document=None,
                 supported_languages=SUPPORTED_LANGUAGES, default_language=DEFAULT_LANGUAGE):
        self.fetcher = fetcher
        self.store = store
        self.browser_language = browser_language
        self.document = document
        self.supported_languages = tuple(supported_languages)
        self.default_language = default_language

        self.current_lang = default_language
        self.translations = {}
        # Language whose catalog is loaded; differs from current_lang after a fallback
        self.catalog_lang = None
        self._listeners = []

    async def initialize(self):
        saved = self.store.get_item(LANGUAGE_STORAGE_KEY) if self.store is not None else None
        self.current_lang = detect_language(
            saved, self.browser_language, self.supported_languages, self.default_language
        )
        await self.load(self.current_lang)
        self.apply()

    async def load(self, lang):
        """
        Replace the catalog with ``lang``'s.

        A failed non-default language gets exactly one retry with the default
        catalog. If that fails too, the previous catalog stays in place.
        Returns the language whose catalog was loaded, or None.
        """
        try:
            self._set_catalog(lang, await self.fetcher.fetch(lang))
            return lang
        except CatalogUnavailable as e:
            logger.error("Error loading translations: %s", e)

        if lang == self.default_language:
            return None

        logger.info("Fallback to %s translations", self.default_language)
        try:
            self._set_catalog(self.default_language, await self.fetcher.fetch(self.default_language))
            return self.default_language
        except CatalogUnavailable as e:
            logger.error("Fallback translation also failed: %s", e)
            return None

    def _set_catalog(self, lang, catalog):
        self.translations = catalog
        self.catalog_lang = lang

    def t(self, key):
        """Translate ``key``; the key itself comes back when it does not resolve to a string."""
        if not key or not isinstance(key, str):
            return key
        value = lookup(self.translations, key)
        if isinstance(value, str):
            return value
        return key

    resolve = t

    @property
    def language_label(self):
        return LANGUAGE_LABELS.get(self.current_lang, 'CA')

    def _translation_for(self, key):
        translation = self.t(key)
        if translation and translation != key:
            return translation
        return None

    def apply(self, document=None):
        """Rewrite a parsed page (BeautifulSoup) for the current language."""
        if document is None:
            document = self.document
        if document is None:
            return

        for marker, attribute in MARKERS:
            for element in document.select(f'[{marker}]'):
                translation = self._translation_for(element.get(marker))
                if translation is None:
                    continue
                if attribute is None:
                    element.string = translation
                else:
                    element[attribute] = translation

        html = document.find('html')
        if html is not None:
            html['lang'] = self.current_lang

        toggle = document.select_one('#languageToggle')
        if toggle is not None:
            current = toggle.select_one('.current-lang')
            if current is not None:
                current.string = self.language_label

        self._update_warning_text(document)
        self._update_alternate_links(document)

    def _update_warning_text(self, document):
        warning = document.select_one('.warning-text')
        if warning is not None:
            translation = self._translation_for(WARNING_KEY)
            if translation is not None:
                warning.string = translation

    def _update_alternate_links(self, document):
        for link in document.select('link[rel="alternate"]'):
            href = link.get('href')
            if href:
                link['href'] = LANG_SEGMENT_RE.sub(f'/{self.current_lang}/', href, count=1)

    async def change_language(self, lang):
        """Switch language, persist it, reload and re-apply. Returns True if it changed."""
        if lang not in self.supported_languages:
            logger.error("%s", LocaleUnsupported(lang))
            return False

        if lang == self.current_lang:
            return False

        self.current_lang = lang
        if self.store is not None:
            self.store.set_item(LANGUAGE_STORAGE_KEY, lang)
        await self.load(lang)
        self.apply()

        self._emit(LanguageChanged(language=lang))
        logger.info("Language changed to: %s", lang)
        return True

    # --- languageChanged event ---

    def subscribe(self, listener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken listener must not stop the others
                logger.exception("languageChanged listener %r failed", listener)
