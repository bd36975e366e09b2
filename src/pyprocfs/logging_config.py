"""
Python logging configuration for the pyprocfs viewer.

Records are routed through Textual's handler so they reach the devtools
console instead of drawing over the running app.
"""

import logging

from textual.logging import TextualHandler


def setup_logging(level: str = "WARNING") -> None:
    """
    Configure root logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)

    Log Format:
        YYYY-MM-DD HH:MM:SS [LEVEL] Message
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[TextualHandler()],
    )
