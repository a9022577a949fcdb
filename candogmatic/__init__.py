"""Can Dogmatic multilingual site."""

__version__ = "1.0.0"
