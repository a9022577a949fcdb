#!/usr/bin/env python3
"""
Fetch every published translation catalog and report keys that drift
from the default language's catalog.

Usage: check_catalogs.py [BASE_URL] [--local] [--locales-dir DIR]
"""
# builtin modules
import argparse
import asyncio
import os
import sys
from datetime import datetime

# Allow running from a checkout without installing the package
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from candogmatic.config import CATALOG_BASE_URL, DEFAULT_LANGUAGE, LOCALES_DIR, SUPPORTED_LANGUAGES
from candogmatic.i18n import (
    CatalogUnavailable, DirectoryCatalogFetcher, HttpCatalogFetcher, available_languages, flatten_keys
)


def compare_catalogs(reference, catalog):
    """Return (missing, extra) dotted keys of ``catalog`` against ``reference``."""
    reference_keys = set(flatten_keys(reference))
    current_keys = set(flatten_keys(catalog))
    return sorted(reference_keys - current_keys), sorted(current_keys - reference_keys)


async def fetch(fetcher, lang):
    try:
        catalog = await fetcher.fetch(lang)
        print(f"[SUCCESS] - {lang}")
        return catalog
    except CatalogUnavailable as e:
        print(f"[ERROR] - {e}")
        return None


async def fetch_all(fetcher, languages=SUPPORTED_LANGUAGES):
    catalogs = await asyncio.gather(*(fetch(fetcher, lang) for lang in languages))
    return dict(zip(languages, catalogs))


def report(catalogs, reference_lang=DEFAULT_LANGUAGE):
    """Print drift per language. Returns the list of problems found."""
    problems = []
    reference = catalogs.get(reference_lang)
    if reference is None:
        problems.append(f"{reference_lang}: reference catalog unavailable")
        print(problems[0])
        return problems

    for lang, catalog in catalogs.items():
        if lang == reference_lang:
            continue
        if catalog is None:
            problems.append(f"{lang}: catalog unavailable")
            continue
        missing, extra = compare_catalogs(reference, catalog)
        if missing:
            problems.append(f"{lang}: Missing keys {missing}")
        if extra:
            problems.append(f"{lang}: Extra keys {extra}")

    for problem in problems:
        print(problem)
    if not problems:
        print(f"All {len(catalogs)} catalogs match '{reference_lang}'")
    return problems


async def main(argv=None):
    parser = argparse.ArgumentParser(description="Check translation catalogs for missing or extra keys.")
    parser.add_argument('base_url', nargs='?', default=CATALOG_BASE_URL,
                        help="site serving /lang/<lang>.json (default: %(default)s)")
    parser.add_argument('--local', action='store_true',
                        help="check the bundled catalogs instead of a deployed site")
    parser.add_argument('--locales-dir', default=LOCALES_DIR,
                        help="catalog directory checked with --local (default: bundled catalogs)")
    args = parser.parse_args(argv)

    print(f"Starting catalog check at {datetime.now()}")
    if args.local:
        # Only the catalogs present on disk; a missing default is still reported
        languages = available_languages(args.locales_dir)
        if DEFAULT_LANGUAGE not in languages:
            languages.insert(0, DEFAULT_LANGUAGE)
        fetcher = DirectoryCatalogFetcher(args.locales_dir)
    else:
        languages = SUPPORTED_LANGUAGES
        fetcher = HttpCatalogFetcher(args.base_url)
    catalogs = await fetch_all(fetcher, tuple(languages))
    return 1 if report(catalogs) else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
