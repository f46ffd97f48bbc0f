"""Logging bootstrap for services embedding the verifier."""

import logging
import sys
from typing import Optional

from alexa_verifier.settings import get_settings

JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"message": "%(message)s", "module": "%(name)s"}'
)
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging using the settings' level and format."""
    settings = get_settings()
    log_format = JSON_FORMAT if settings.log_format.lower() == "json" else TEXT_FORMAT
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
