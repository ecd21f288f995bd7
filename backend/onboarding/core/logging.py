"""Logging setup for the onboarding service."""

from __future__ import annotations

import logging
import re
import sys

_ROOT_LOGGER = "onboarding"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_CODE_PARAM = re.compile(r"(code=)[^&\s]+")


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(_ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger


def redact_url(url: str) -> str:
    """Mask the function key in a URL before it is written to a log line."""
    return _CODE_PARAM.sub(r"\1***", url)
