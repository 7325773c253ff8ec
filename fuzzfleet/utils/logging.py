"""
Logging setup for fuzzfleet.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

FLEET_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
})

console = Console(theme=FLEET_THEME, stderr=True)

# Verbosity flag -> log level. Lifecycle messages are INFO and always shown.
LOG_LEVELS = {
    0: logging.INFO,
    1: logging.DEBUG,
}


def setup_logging(verbosity: int = 0, log_file: Optional[str] = None) -> None:
    """
    Configure logging for fuzzfleet.

    Args:
        verbosity: 0=info, 1+=debug
        log_file: Optional file path for logging output
    """
    level = LOG_LEVELS.get(verbosity, logging.DEBUG)

    handlers = [
        RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_show_locals=verbosity >= 2,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
