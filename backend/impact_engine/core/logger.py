"""
Application logger.

Modules import the shared ``logger``.
"""

import logging

from impact_engine.core.config import get_settings

LOGGER_NAME = "impact_engine"


def _configure() -> logging.Logger:
    settings = get_settings()
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(settings.LOG_LEVEL.upper())

    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        app_logger.addHandler(handler)
    return app_logger


logger = _configure()
