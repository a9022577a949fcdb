"""
Internationalization (i18n) module for the Can Dogmatic site.
Catalan, Spanish, French and English catalogs with nested JSON keys.
"""

from .catalog import (
    I18nError,
    CatalogUnavailable,
    LocaleUnsupported,
    MISSING,
    lookup,
    flatten_keys,
    available_languages
)
from .fetchers import HttpCatalogFetcher, DirectoryCatalogFetcher
from .i18n import (
    I18n,
    LanguageChanged,
    detect_language,
    LANGUAGE_LABELS,
    WARNING_KEY
)

__all__ = [
    'I18n',
    'I18nError',
    'CatalogUnavailable',
    'LocaleUnsupported',
    'LanguageChanged',
    'MISSING',
    'lookup',
    'flatten_keys',
    'available_languages',
    'detect_language',
    'HttpCatalogFetcher',
    'DirectoryCatalogFetcher',
    'LANGUAGE_LABELS',
    'WARNING_KEY'
]
