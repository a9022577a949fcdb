"""
Translation catalogs: nested JSON objects whose leaves are strings.
"""

import os

from candogmatic.config import LOCALES_DIR, SUPPORTED_LANGUAGES


class I18nError(Exception):
    """Base class for translation errors."""


class CatalogUnavailable(I18nError):
    """A catalog could not be fetched or parsed."""

    def __init__(self, lang, reason):
        super().__init__(f"Catalog '{lang}' unavailable: {reason}")
        self.lang = lang
        self.reason = reason


class LocaleUnsupported(I18nError):
    """A language outside SUPPORTED_LANGUAGES was requested."""

    def __init__(self, lang):
        super().__init__(f"Unsupported language: {lang!r}")
        self.lang = lang


class _Missing:
    """Sentinel for a lookup path that does not exist in a catalog."""

    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False


MISSING = _Missing()


def lookup(catalog, key):
    """
    Walk ``key`` (dot-delimited) through ``catalog``.

    Returns the node at the end of the path, which may be a nested mapping
    or any JSON leaf, or MISSING when a segment is absent or an
    intermediate node is not a mapping.
    """
    node = catalog
    for segment in key.split('.'):
        if not isinstance(node, dict) or segment not in node:
            return MISSING
        node = node[segment]
    return node


def validate_catalog(lang, data):
    """Make sure a decoded catalog document is usable."""
    if not isinstance(data, dict):
        raise CatalogUnavailable(lang, f"expected a JSON object, got {type(data).__name__}")
    return data


def flatten_keys(catalog, prefix=''):
    """Yield the dotted key of every leaf in ``catalog``."""
    for key, value in catalog.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            yield from flatten_keys(value, path)
        else:
            yield path


def available_languages(locales_dir=LOCALES_DIR):
    """Get the supported language codes that ship a catalog file."""
    languages = []
    if os.path.exists(locales_dir):
        for filename in os.listdir(locales_dir):
            if filename.endswith('.json'):
                lang_code = filename[:-5]  # Remove .json extension
                if lang_code in SUPPORTED_LANGUAGES:
                    languages.append(lang_code)
    # Keep the order of SUPPORTED_LANGUAGES (default first)
    return sorted(languages, key=SUPPORTED_LANGUAGES.index)
