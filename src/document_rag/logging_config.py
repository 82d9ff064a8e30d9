"""Process-wide logging setup.

Usage::

    from document_rag.logging_config import configure_logging
    configure_logging()   # once, at startup
"""

from __future__ import annotations

import logging

from document_rag.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Client libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from *level* (defaults to ``settings.log_level``)."""
    resolved = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
