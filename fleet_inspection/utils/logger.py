# fleet_inspection/utils/logger.py
"""
Logging setup shared by the API, the services and the scripts.

configure_logging() installs one console handler and, when LOG_DIR is
writable, a rotating file handler on the root logger. It runs lazily on the
first get_logger() call and can be called again to switch level or directory;
handlers it installed before are replaced, handlers added by others
(uvicorn, pytest's caplog) are left alone.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from fleet_inspection.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "fleet_inspection.log"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 10

# Third-party loggers that flood INFO with per-request or per-query lines
NOISY_LOGGERS = ("multipart", "python_multipart", "httpx")

_OWNED = "_fleet_inspection_handler"
_configured = False


def _file_handler(log_dir: str) -> Optional[RotatingFileHandler]:
    """Rotating handler under log_dir, or None when the directory cannot be written."""
    try:
        os.makedirs(log_dir, exist_ok=True)
        return RotatingFileHandler(
            filename=os.path.join(log_dir, LOG_FILENAME),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        logging.getLogger(__name__).warning(f"File logging disabled, cannot write to {log_dir}: {e}")
        return None


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    global _configured
    level = (level or settings.LOG_LEVEL).upper()
    log_dir = log_dir or settings.LOG_DIR
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)
    _configured = True

    handlers = [logging.StreamHandler(), _file_handler(log_dir)]
    for handler in handlers:
        if handler is None:
            continue
        setattr(handler, _OWNED, True)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # SQL statements only when DATABASE_ECHO asks for them
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.DATABASE_ECHO else logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)
