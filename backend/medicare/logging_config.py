import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from medicare.config import get_settings

DETAILED_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s (%(funcName)s:%(lineno)d): %(message)s"
SIMPLE_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for the records service.

    Console output is always enabled. When a log directory is configured,
    rotating files are written for the main log and for errors only.
    """
    settings = get_settings()
    log_dir = log_dir if log_dir is not None else settings.log_dir
    level_name = (level or settings.log_level).upper()

    detailed_formatter = logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT)
    simple_formatter = logging.Formatter(SIMPLE_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger("medicare")
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.handlers.clear()
    root_logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        main_handler = RotatingFileHandler(
            os.path.join(log_dir, "medicare.log"),
            maxBytes=MAX_LOG_BYTES,
            backupCount=5,
            encoding="utf-8",
        )
        main_handler.setLevel(logging.INFO)
        main_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(main_handler)

        error_handler = RotatingFileHandler(
            os.path.join(log_dir, "medicare_errors.log"),
            maxBytes=MAX_LOG_BYTES,
            backupCount=10,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(error_handler)

    root_logger.info("Logging configured (level=%s, log_dir=%s)", level_name, log_dir or "-")
    return root_logger
