"""
Logging configuration for the Shared Task Lists API.

Services log with `user_id=` / `task_list_id=` context so a single access
decision can be followed from request line to outcome.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "app.log"

# Libraries whose INFO output drowns out the access-control log lines
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "passlib", "slowapi")


def setup_logging(
    level: str | None = None,
    log_dir: str | Path | None = None,
    log_to_file: bool | None = None,
) -> logging.Logger:
    """
    Configure application-wide logging and return the root logger.

    Arguments fall back to LOG_LEVEL (INFO), LOG_DIR (logs) and
    LOG_TO_FILE (true). The file handler rotates at 5 MB keeping 3 files.
    Calling it again replaces the handlers instead of stacking them.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "true").lower() == "true"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_path = None
    if log_to_file:
        directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / LOG_FILE_NAME
        handlers.append(
            RotatingFileHandler(
                log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
        )

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured (level={level_name}, file={log_path or 'disabled'})"
    )
    return logging.getLogger()
