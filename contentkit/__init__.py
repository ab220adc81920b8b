"""contentkit - dynamic content models and validated content items."""

__version__ = "0.1.0"
