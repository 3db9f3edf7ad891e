# reception/utils/logger.py
"""
Logging setup shared by every module of the service.
Console output plus a size-rotated file under LOG_DIR (default: <repo>/logs).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from reception.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers = [logging.StreamHandler()]

    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        # 10 files × 5MB; audit rows live in the DB, this file is for operators
        handlers.append(RotatingFileHandler(
            filename=os.path.join(LOG_DIR, "reception.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        ))
    except OSError as e:
        logging.getLogger(__name__).warning(f"File logging disabled, cannot write to {LOG_DIR}: {e}")

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(fmt)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
