"""
Per-visitor persistent key-value storage (preferredLang, cookiesAccepted).

Stores expose ``get_item(key)`` and ``set_item(key, value)``; values are strings.
"""

from candogmatic.config import PREFERENCE_COOKIE_MAX_AGE


class CookieStore:
    """Visitor storage backed by the browser's cookies."""

    def __init__(self, request, response, max_age=PREFERENCE_COOKIE_MAX_AGE, path='/'):
        self.request = request
        self.response = response
        self.max_age = max_age
        self.path = path
        self._written = {}

    def get_item(self, key):
        # Values set during this request win over what the browser sent
        if key in self._written:
            return self._written[key]
        return self.request.get_cookie(key)

    def set_item(self, key, value):
        value = str(value)
        self._written[key] = value
        self.response.set_cookie(key, value, max_age=self.max_age, path=self.path,
                                 samesite='lax')
