"""HTTP layer of the redirect service.

See ``server.py`` for the FastAPI application factory.
"""

from __future__ import annotations

__all__ = ["server"]
