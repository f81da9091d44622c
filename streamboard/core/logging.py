"""Logging configuration"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from streamboard.core.config import Settings

# Upstream client chatter; our own services log the outcome of each request
_QUIET_LOGGERS = ("uvicorn.access", "httpx")


def setup_logging(settings: Settings) -> None:
    """Route all logging through a single Rich handler"""
    handler = RichHandler(
        console=Console(force_terminal=True, width=120),
        show_path=False,
        markup=True,
        rich_tracebacks=True,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )

    # force=True: uvicorn configures the root logger first
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging: {settings.log_level} | Env: {settings.environment}"
    )
