"""Loguru setup for the coach portal backend.

Every line carries a request_id. The HTTP middleware binds it per request
with logger.contextualize; lines logged outside a request show "-".
"""

import sys
from pathlib import Path

from loguru import logger

NO_REQUEST_ID = "-"

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru's default sink with request-aware console and file sinks.

    Args:
        level: Minimum level for both sinks
        log_file: Rotating log file path; console only when None
        rotation: File rotation trigger (e.g., "10 MB", "1 day")
        retention: How long rotated files are kept
    """
    logger.remove()
    logger.configure(extra={"request_id": NO_REQUEST_ID})

    logger.add(sys.stderr, format=_CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=_FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )

    logger.info(f"Logger initialized with level={level}, file={log_file or '-'}")


def setup_logger_from_settings() -> None:
    """Configure logging from LOG_LEVEL / LOG_FILE."""
    from app.config.settings import settings

    setup_logger(level=settings.log_level, log_file=settings.log_file)
