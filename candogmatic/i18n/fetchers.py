"""
Catalog fetchers: where ``I18n.load`` gets a language's catalog from.

Every fetcher exposes ``async fetch(lang) -> dict`` and raises
CatalogUnavailable on any failure.
"""

import asyncio
import json
import os

import aiohttp

from candogmatic.config import CATALOG_BASE_URL, CATALOG_TIMEOUT, LOCALES_DIR
from candogmatic.i18n.catalog import CatalogUnavailable, validate_catalog


class HttpCatalogFetcher:
    """Fetch ``<base_url>/lang/<lang>.json`` over HTTP."""

    def __init__(self, base_url=CATALOG_BASE_URL, timeout=CATALOG_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def catalog_url(self, lang):
        return f"{self.base_url}/lang/{lang}.json"

    async def fetch(self, lang):
        url = self.catalog_url(lang)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    if not 200 <= response.status < 300:
                        raise CatalogUnavailable(lang, f"HTTP error! status: {response.status}")
                    # Static hosts often serve .json with a generic content type
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CatalogUnavailable(lang, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise CatalogUnavailable(lang, f"malformed JSON: {e}") from e
        return validate_catalog(lang, data)


class DirectoryCatalogFetcher:
    """Read ``<locales_dir>/<lang>.json`` from disk, cached until the file changes."""

    def __init__(self, locales_dir=LOCALES_DIR):
        self.locales_dir = locales_dir
        self._cache = {}  # {lang: (mtime, catalog)}

    async def fetch(self, lang):
        file_path = os.path.join(self.locales_dir, f'{lang}.json')
        try:
            mtime = os.path.getmtime(file_path)
            cached = self._cache.get(lang)
            if cached and cached[0] == mtime:
                return cached[1]
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except OSError as e:
            raise CatalogUnavailable(lang, e.strerror or str(e)) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise CatalogUnavailable(lang, f"malformed catalog: {e}") from e

        catalog = validate_catalog(lang, data)
        self._cache[lang] = (mtime, catalog)
        return catalog
