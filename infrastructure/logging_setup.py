"""Logging configuration"""
import logging
from pathlib import Path
from typing import List

from infrastructure.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings) -> None:
    """Configure root logging from the logging section of the settings.

    The interactive menu owns stdout, so records go to the log file when
    file logging is on and to stderr otherwise.
    """
    handlers: List[logging.Handler] = []
    if settings.logging.log_to_file:
        log_file = Path(settings.logging.log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    else:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=settings.logging.level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
