"""Top‑level package for the landing A/B redirect service.

This package routes visitors of a single "original" landing page to one of
two variant pages.  Individual subpackages handle specific concerns such as
the campaign configuration, the cookie-backed sticky assignment, country
lookups for geo bucketing and the web server that performs the redirect.

The ``__all__`` variable enumerates the primary public modules for
convenience when using ``from landing_ab import ...``.
"""

from __future__ import annotations

__all__ = [
    "app",
    "ab_testing",
    "campaign",
    "config",
    "db",
    "geo",
    "pages",
    "web",
]

# SemVer version of the package
__version__: str = "0.1.0"
