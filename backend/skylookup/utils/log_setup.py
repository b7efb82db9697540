"""
Logging configuration for the lookup service.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """
    Configure root logging.

    Args:
        level: Log level name
        console: Rich console to render to; plain timestamped lines when None
    """
    if console is not None:
        handler: logging.Handler = RichHandler(console=console, show_path=False)
        fmt = "%(name)s - %(message)s"
    else:
        handler = logging.StreamHandler()
        fmt = LOG_FORMAT

    logging.basicConfig(level=level.upper(), format=fmt, handlers=[handler], force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
