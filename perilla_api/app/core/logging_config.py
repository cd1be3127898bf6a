"""
Logging configuration shared by the HTTP application and the CLI.

``setup_logging`` attaches a console handler and, optionally, a file
handler (``app.log`` by default, removed again by ``perilla init`` when
it wipes an installation) to the ``perilla_api`` logger.  All modules
log through ``logging.getLogger(__name__)`` and therefore end up here.
Server loggers (uvicorn) keep their own configuration.
"""

import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "perilla_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> logging.Logger:
    """Configure the package logger once and return it.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        File to mirror log records into.  Relative paths resolve
        against the current working directory.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        # create_app may run several times in one process (tests)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger
