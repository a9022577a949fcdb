"""
Page glue that does not belong to i18n: cookie banner, footer year,
scholar filters and pages, statistic counters.

Functions taking ``document`` work on a parsed BeautifulSoup page and
skip silently when the elements they target are absent.
"""

import logging
import math
import re

from bs4 import BeautifulSoup

from candogmatic.config import COOKIE_BANNER_DELAY_MS, COOKIES_STORAGE_KEY, COPYRIGHT_BASE_YEAR

logger = logging.getLogger(__name__)

LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)')


def parse_document(html):
    return BeautifulSoup(html, 'html.parser')


# --- Cookie consent ---

def should_show_cookie_banner(store):
    """The banner stays until the visitor has either accepted or rejected."""
    return store.get_item(COOKIES_STORAGE_KEY) not in ('true', 'false')


def cookies_accepted(store):
    return store.get_item(COOKIES_STORAGE_KEY) == 'true'


def record_cookie_consent(store, accepted):
    store.set_item(COOKIES_STORAGE_KEY, 'true' if accepted else 'false')
    if accepted:
        logger.info("Cookies accepted - services enabled")
    else:
        logger.info("Cookies rejected - services disabled")


def render_cookie_banner(document, visible, delay=COOKIE_BANNER_DELAY_MS):
    """Show or hide #cookieBanner; the page script reveals it after ``delay`` ms."""
    banner = document.select_one('#cookieBanner')
    if banner is None:
        return
    banner['data-delay'] = str(delay)
    classes = [c for c in banner.get('class', []) if c != 'show']
    if visible:
        classes.append('show')
    if classes:
        banner['class'] = classes
    elif banner.has_attr('class'):
        del banner['class']


# --- Footer ---

def update_copyright_year(document, year, base_year=COPYRIGHT_BASE_YEAR):
    paragraph = document.select_one('.footer-bottom p')
    if paragraph is None:
        return
    for text in paragraph.find_all(string=True):
        if base_year in text:
            text.replace_with(text.replace(base_year, str(year)))


# --- Scholar filters ---

def _set_style(element, **properties):
    """Merge CSS properties into an element's inline style."""
    style = {}
    for declaration in element.get('style', '').split(';'):
        if ':' in declaration:
            name, value = declaration.split(':', 1)
            style[name.strip()] = value.strip()
    for name, value in properties.items():
        style[name.replace('_', '-')] = value
    element['style'] = '; '.join(f"{name}: {value}" for name, value in style.items())


def filter_scholars(document, category):
    """
    Show only the scholar cards of ``category`` ('all' shows every card)
    and mark the matching filter button active.
    Returns the number of visible cards.
    """
    buttons = document.select('.filter-btn')
    cards = document.select('.scholar-card')
    if not buttons or not cards:
        return 0

    for button in buttons:
        classes = [c for c in button.get('class', []) if c != 'active']
        if button.get('data-category') == category:
            classes.append('active')
        button['class'] = classes

    visible = 0
    for card in cards:
        if category == 'all' or card.get('data-category') == category:
            _set_style(card, display='block', opacity='1', transform='translateY(0)')
            visible += 1
        else:
            _set_style(card, display='none', opacity='0', transform='translateY(20px)')
    return visible


def select_scholar_page(document, page):
    """
    Mark the .pagination-btn labelled ``page`` active.
    Returns False, leaving the buttons untouched, when no button carries that label.
    """
    label = str(page).strip()
    buttons = document.select('.pagination-btn')
    if not any(button.get_text(strip=True) == label for button in buttons):
        return False

    for button in buttons:
        classes = [c for c in button.get('class', []) if c != 'active']
        if button.get_text(strip=True) == label:
            classes.append('active')
        button['class'] = classes
    return True


# --- Statistic counters ---

def parse_stat_target(text):
    """Read the number shown in a stat, e.g. '150+' -> 150. None if there is none."""
    if text is None:
        return None
    match = LEADING_INT_RE.match(text.replace('+', ''))
    return int(match.group(1)) if match else None


def counter_frames(target, duration=2000, interval=16):
    """
    Values shown while a stat counts up from 0 to ``target``, one per tick.
    The last frame is '<target>+'.
    """
    if target <= 0:
        return [f"{target}+"]

    increment = target / (duration / interval)
    frames = []
    current = 0
    while True:
        current += increment
        if current >= target:
            frames.append(f"{target}+")
            return frames
        frames.append(str(math.floor(current)))


def prepare_stat_counters(document, duration=2000, interval=16):
    """Tag each numeric .stat-number with the target and tick count of its count-up."""
    prepared = 0
    for stat in document.select('.stat-number'):
        target = parse_stat_target(stat.get_text())
        if target is None:
            continue
        stat['data-target'] = str(target)
        stat['data-steps'] = str(len(counter_frames(target, duration, interval)))
        prepared += 1
    return prepared
