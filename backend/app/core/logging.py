import logging
import os
import time
from logging.handlers import RotatingFileHandler


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y"}


def _get_int(value: str | None, default: int) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        return default


class LocalTimeFormatter(logging.Formatter):
    converter = time.localtime


def setup_logging(log_file_path: str | None = None) -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_file_path = log_file_path or os.getenv("LOG_FILE_PATH", "").strip()
    max_bytes = _get_int(os.getenv("LOG_MAX_BYTES"), 5000000)
    backup_count = _get_int(os.getenv("LOG_BACKUP_COUNT"), 5)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    formatter = LocalTimeFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file_path, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if _get_bool(os.getenv("LOG_SQL_ENABLED")):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.getLogger("uvicorn.access").handlers.clear()
