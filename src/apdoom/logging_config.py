import logging
import os
from typing import Optional, TextIO

ENV_LOG_LEVEL = "APDOOM_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def resolve_level(default_level: int = logging.INFO) -> int:
    """Level from ``APDOOM_LOG_LEVEL`` (a name such as ``debug`` or a number), else the default."""
    value = os.getenv(ENV_LOG_LEVEL, "").strip()
    if not value:
        return default_level
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO, stream: Optional[TextIO] = None) -> int:
    """Configure the root logger for the client. Returns the level in effect."""
    level = resolve_level(default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream)
    return level
