"""
Ludo Arena - Logging Configuration

Stdlib logging setup driven by Settings. Modules log through
``logging.getLogger(__name__)``; this only configures the root handler.
"""

import logging

from src.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings (DEBUG wins over LOG_LEVEL)."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
