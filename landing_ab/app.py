"""Entry point for the redirect server.

When executed with ``python -m landing_ab.app`` this module reads the
settings from the environment, configures logging and serves the FastAPI
application with uvicorn.  Host, port and log level come from
``LANDING_AB_HOST``, ``LANDING_AB_PORT`` and ``LANDING_AB_LOG_LEVEL``.
"""

from __future__ import annotations

import logging

import uvicorn

from landing_ab.config import load_settings
from landing_ab.web.server import create_app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = create_app(settings)
    # proxy_headers lets uvicorn report https behind a TLS-terminating proxy
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
