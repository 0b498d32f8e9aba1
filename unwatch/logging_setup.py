"""Logging configuration."""

import logging

from textual.logging import TextualHandler

from unwatch.config import Settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(settings: Settings) -> None:
    """Send logs to UNWATCH_LOG_FILE, or through Textual so the screen stays intact."""
    if settings.log_file:
        handler: logging.Handler = logging.FileHandler(settings.log_file, encoding="utf-8")
    else:
        handler = TextualHandler()

    logging.basicConfig(
        level=settings.log_level,
        format=LOG_FORMAT,
        handlers=[handler],
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
