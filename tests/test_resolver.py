import unittest
import os
import sys
import itertools

# Add project root to path so 'candogmatic' can be imported as a package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from bs4 import BeautifulSoup

from candogmatic.i18n import I18n, CatalogUnavailable, LanguageChanged, detect_language

SUPPORTED = ('ca', 'es', 'fr', 'en')

CATALOGS = {
    'ca': {'nav': {'home': 'Inici'}, 'warning': {'message': 'En construcció'}},
    'es': {'nav': {'home': 'Inicio'}, 'warning': {'message': 'En construcción'}},
    'fr': {'nav': {'home': 'Accueil'}},
    'en': {'nav': {'home': 'Home'}, 'contact': {'name': 'Your name'}, 'title': {'home': 'Go home'}},
}

PAGE = """<!DOCTYPE html>
<html lang="ca">
<head>
<link rel="alternate" hreflang="es" href="https://www.example.com/es/about">
<link rel="alternate" href="/ca/">
<link rel="stylesheet" href="/static/xx/style.css">
</head>
<body>
<p class="warning-text">Original warning</p>
<a data-i18n="nav.home">Inici</a>
<span data-i18n="nav.missing">Keep me</span>
<input data-i18n-placeholder="contact.name" placeholder="Nom">
<a data-i18n-title="title.home" title="Anar a l'inici">x</a>
<button id="languageToggle"><span class="current-lang">CA</span></button>
</body>
</html>"""


class FakeFetcher:
    """Serves catalogs from memory; unknown languages fail like a 404."""

    def __init__(self, catalogs):
        self.catalogs = catalogs
        self.calls = []

    async def fetch(self, lang):
        self.calls.append(lang)
        if lang not in self.catalogs:
            raise CatalogUnavailable(lang, "HTTP error! status: 404")
        return self.catalogs[lang]


class DictStore:
    def __init__(self, **items):
        self.items = dict(items)

    def get_item(self, key):
        return self.items.get(key)

    def set_item(self, key, value):
        self.items[key] = value


class TestDetectLanguage(unittest.TestCase):
    """Saved preference beats browser language beats the default."""

    def test_precedence_for_every_combination(self):
        saved_values = [None, 'xx', 'es', 'en']
        browser_values = [None, 'de-DE', 'fr-FR', 'en']
        for saved, browser in itertools.product(saved_values, browser_values):
            if saved in SUPPORTED:
                expected = saved
            elif browser and browser.split('-')[0] in SUPPORTED:
                expected = browser.split('-')[0]
            else:
                expected = 'ca'
            with self.subTest(saved=saved, browser=browser):
                self.assertEqual(detect_language(saved, browser, SUPPORTED, 'ca'), expected)

    def test_primary_subtag_only(self):
        self.assertEqual(detect_language(None, 'es-419', SUPPORTED, 'ca'), 'es')
        self.assertEqual(detect_language(None, 'FR-ca', SUPPORTED, 'ca'), 'fr')


class TestResolve(unittest.TestCase):

    def setUp(self):
        self.i18n = I18n(FakeFetcher(CATALOGS), supported_languages=SUPPORTED, default_language='ca')
        self.i18n.translations = {
            'nav': {'home': 'Accueil'},
            'count': 3,
            'list': ['a'],
            'empty': '',
        }

    def test_present_key_returns_stored_string(self):
        self.assertEqual(self.i18n.t('nav.home'), 'Accueil')
        self.assertEqual(self.i18n.resolve('nav.home'), 'Accueil')

    def test_absent_key_returns_key(self):
        self.assertEqual(self.i18n.t('nav.missing'), 'nav.missing')
        self.assertEqual(self.i18n.t('nothing.at.all'), 'nothing.at.all')

    def test_unresolved_key_is_idempotent(self):
        once = self.i18n.t('nav.missing')
        self.assertEqual(self.i18n.t(once), once)

    def test_walking_through_a_leaf_returns_key(self):
        self.assertEqual(self.i18n.t('nav.home.deeper'), 'nav.home.deeper')

    def test_non_string_values_return_key(self):
        self.assertEqual(self.i18n.t('count'), 'count')
        self.assertEqual(self.i18n.t('nav'), 'nav')
        self.assertEqual(self.i18n.t('list'), 'list')

    def test_empty_or_non_string_key(self):
        self.assertEqual(self.i18n.t(''), '')
        self.assertIsNone(self.i18n.t(None))

    def test_resolve_does_not_mutate_catalog(self):
        before = repr(self.i18n.translations)
        self.i18n.t('nav.home')
        self.i18n.t('nav.missing.key')
        self.assertEqual(repr(self.i18n.translations), before)

    def test_empty_catalog_renders_keys(self):
        self.i18n.translations = {}
        self.assertEqual(self.i18n.t('nav.home'), 'nav.home')


class TestInitialize(unittest.IsolatedAsyncioTestCase):

    async def test_browser_language_scenario(self):
        fetcher = FakeFetcher(CATALOGS)
        i18n = I18n(fetcher, store=DictStore(), browser_language='fr',
                    supported_languages=SUPPORTED, default_language='ca')
        await i18n.initialize()

        self.assertEqual(i18n.current_lang, 'fr')
        self.assertEqual(fetcher.calls, ['fr'])
        self.assertEqual(i18n.t('nav.home'), 'Accueil')
        self.assertEqual(i18n.t('nav.missing'), 'nav.missing')

    async def test_unsupported_saved_preference_is_ignored(self):
        i18n = I18n(FakeFetcher(CATALOGS), store=DictStore(preferredLang='xx'), browser_language='es',
                    supported_languages=SUPPORTED, default_language='ca')
        await i18n.initialize()
        self.assertEqual(i18n.current_lang, 'es')

    async def test_saved_preference_wins(self):
        i18n = I18n(FakeFetcher(CATALOGS), store=DictStore(preferredLang='en'), browser_language='fr-FR',
                    supported_languages=SUPPORTED, default_language='ca')
        await i18n.initialize()
        self.assertEqual(i18n.current_lang, 'en')
        self.assertEqual(i18n.t('nav.home'), 'Home')

    async def test_default_without_store_or_browser(self):
        i18n = I18n(FakeFetcher(CATALOGS), supported_languages=SUPPORTED, default_language='ca')
        await i18n.initialize()
        self.assertEqual(i18n.current_lang, 'ca')
        self.assertEqual(i18n.catalog_lang, 'ca')

    async def test_initialize_applies_attached_document(self):
        document = BeautifulSoup(PAGE, 'html.parser')
        i18n = I18n(FakeFetcher(CATALOGS), browser_language='es', document=document,
                    supported_languages=SUPPORTED, default_language='ca')
        await i18n.initialize()
        self.assertEqual(document.html['lang'], 'es')
        self.assertEqual(document.select_one('[data-i18n="nav.home"]').get_text(), 'Inicio')


class TestLoad(unittest.IsolatedAsyncioTestCase):

    async def test_failed_language_falls_back_to_default_once(self):
        catalogs = {k: v for k, v in CATALOGS.items() if k != 'en'}
        fetcher = FakeFetcher(catalogs)
        i18n = I18n(fetcher, store=DictStore(preferredLang='en'),
                    supported_languages=SUPPORTED, default_language='ca')
        await i18n.initialize()

        self.assertEqual(fetcher.calls, ['en', 'ca'])
        # Catalog comes from the fallback; the active language stays the requested one
        self.assertEqual(i18n.t('nav.home'), 'Inici')
        self.assertEqual(i18n.current_lang, 'en')
        self.assertEqual(i18n.catalog_lang, 'ca')
        self.assertEqual(i18n.language_label, 'EN')

    async def test_failed_fallback_keeps_previous_catalog(self):
        fetcher = FakeFetcher({'es': CATALOGS['es']})
        i18n = I18n(fetcher, supported_languages=SUPPORTED, default_language='ca')
        self.assertEqual(await i18n.load('es'), 'es')
        previous = i18n.translations

        fetcher.calls.clear()
        self.assertIsNone(await i18n.load('fr'))
        self.assertEqual(fetcher.calls, ['fr', 'ca'])
        self.assertIs(i18n.translations, previous)
        self.assertEqual(i18n.catalog_lang, 'es')

    async def test_failed_default_is_not_retried(self):
        fetcher = FakeFetcher({})
        i18n = I18n(fetcher, supported_languages=SUPPORTED, default_language='ca')
        self.assertIsNone(await i18n.load('ca'))
        self.assertEqual(fetcher.calls, ['ca'])
        self.assertEqual(i18n.translations, {})
        self.assertEqual(i18n.t('nav.home'), 'nav.home')

    async def test_failures_are_logged(self):
        i18n = I18n(FakeFetcher({}), supported_languages=SUPPORTED, default_language='ca')
        with self.assertLogs('candogmatic.i18n.i18n', level='ERROR') as logs:
            await i18n.load('fr')
        self.assertTrue(any('Fallback translation also failed' in line for line in logs.output))


class TestChangeLanguage(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.fetcher = FakeFetcher(CATALOGS)
        self.store = DictStore()
        self.i18n = I18n(self.fetcher, store=self.store,
                         supported_languages=SUPPORTED, default_language='ca')
        await self.i18n.initialize()
        self.fetcher.calls.clear()
        self.events = []
        self.i18n.subscribe(self.events.append)

    async def test_change_persists_loads_and_notifies(self):
        changed = await self.i18n.change_language('es')

        self.assertTrue(changed)
        self.assertEqual(self.i18n.current_lang, 'es')
        self.assertEqual(self.store.items['preferredLang'], 'es')
        self.assertEqual(self.fetcher.calls, ['es'])
        self.assertEqual(self.i18n.t('nav.home'), 'Inicio')
        self.assertEqual(self.events, [LanguageChanged(language='es')])

    async def test_unsupported_language_changes_nothing(self):
        catalog = self.i18n.translations
        with self.assertLogs('candogmatic.i18n.i18n', level='ERROR'):
            changed = await self.i18n.change_language('de')

        self.assertFalse(changed)
        self.assertEqual(self.i18n.current_lang, 'ca')
        self.assertIs(self.i18n.translations, catalog)
        self.assertEqual(self.fetcher.calls, [])
        self.assertEqual(self.events, [])
        self.assertNotIn('preferredLang', self.store.items)

    async def test_same_language_is_a_noop(self):
        changed = await self.i18n.change_language('ca')
        self.assertFalse(changed)
        self.assertEqual(self.fetcher.calls, [])
        self.assertEqual(self.events, [])

    async def test_unsubscribed_listener_is_not_called(self):
        self.i18n.unsubscribe(self.events.append)
        await self.i18n.change_language('fr')
        self.assertEqual(self.events, [])

    async def test_failing_listener_does_not_block_others(self):
        def broken(event):
            raise RuntimeError("boom")

        self.i18n.unsubscribe(self.events.append)
        self.i18n.subscribe(broken)
        self.i18n.subscribe(self.events.append)
        with self.assertLogs('candogmatic.i18n.i18n', level='ERROR'):
            await self.i18n.change_language('en')
        self.assertEqual(self.events, [LanguageChanged(language='en')])

    async def test_change_reapplies_document(self):
        document = BeautifulSoup(PAGE, 'html.parser')
        self.i18n.document = document
        await self.i18n.change_language('en')
        self.assertEqual(document.select_one('.current-lang').get_text(), 'EN')
        self.assertEqual(document.select_one('[data-i18n="nav.home"]').get_text(), 'Home')


class TestApply(unittest.TestCase):

    def setUp(self):
        self.document = BeautifulSoup(PAGE, 'html.parser')
        self.i18n = I18n(FakeFetcher(CATALOGS), supported_languages=SUPPORTED, default_language='ca')
        self.i18n.current_lang = 'en'
        self.i18n.translations = {
            'nav': {'home': 'Home'},
            'contact': {'name': 'Your name'},
            'title': {'home': 'Go home'},
            'warning': {'message': 'Under construction'},
        }

    def test_text_placeholder_and_title_markers(self):
        self.i18n.apply(self.document)
        self.assertEqual(self.document.select_one('[data-i18n="nav.home"]').get_text(), 'Home')
        self.assertEqual(self.document.select_one('[data-i18n-placeholder]')['placeholder'], 'Your name')
        self.assertEqual(self.document.select_one('[data-i18n-title]')['title'], 'Go home')

    def test_unresolved_elements_keep_their_content(self):
        self.i18n.apply(self.document)
        self.assertEqual(self.document.select_one('[data-i18n="nav.missing"]').get_text(), 'Keep me')

    def test_document_language_and_label(self):
        self.i18n.apply(self.document)
        self.assertEqual(self.document.html['lang'], 'en')
        self.assertEqual(self.document.select_one('#languageToggle .current-lang').get_text(), 'EN')

    def test_warning_text(self):
        self.i18n.apply(self.document)
        self.assertEqual(self.document.select_one('.warning-text').get_text(), 'Under construction')

    def test_warning_text_untouched_without_translation(self):
        self.i18n.translations = {}
        self.i18n.apply(self.document)
        self.assertEqual(self.document.select_one('.warning-text').get_text(), 'Original warning')

    def test_alternate_links_rewritten(self):
        self.i18n.apply(self.document)
        alternates = [link['href'] for link in self.document.select('link[rel="alternate"]')]
        self.assertEqual(alternates, ['https://www.example.com/en/about', '/en/'])
        stylesheet = self.document.select_one('link[rel="stylesheet"]')
        self.assertEqual(stylesheet['href'], '/static/xx/style.css')

    def test_missing_elements_are_skipped(self):
        document = BeautifulSoup('<div><p>plain</p></div>', 'html.parser')
        self.i18n.apply(document)
        self.assertEqual(document.get_text(), 'plain')

    def test_apply_without_document_does_nothing(self):
        self.assertIsNone(self.i18n.document)
        self.i18n.apply()


if __name__ == '__main__':
    unittest.main()
