"""
Minimal structured logging configuration for trr_buffer.

Provides:
- File logging for errors and warnings
- Console logging for critical errors only (or INFO+ when verbose)
- Automatic log rotation
"""
import logging
import logging.handlers
from datetime import datetime
from pathlib import Path

APP_NAME = "trr_buffer"


def setup_logging(
    log_dir: "str | Path | None" = None,
    app_name: str = APP_NAME,
    verbose: bool = False,
) -> logging.Logger:
    """
    Setup structured logging with file output.

    Args:
        log_dir: Directory for log files (created if missing).  When *None*
                 the default location from utils.paths is used.
        app_name: Application name for logger
        verbose: Echo INFO and above to the console instead of CRITICAL only

    Returns:
        Configured logger instance
    """
    if log_dir is None:
        from .paths import get_logs_dir  # noqa: PLC0415
        log_path = get_logs_dir()
    else:
        log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(app_name)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    # File handler: rotating log (max 5MB, keep 3 backups)
    log_file = log_path / f"{app_name}_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding='utf-8',
    )
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    ))
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    if verbose:
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    else:
        console_handler.setLevel(logging.CRITICAL)
        console_handler.setFormatter(logging.Formatter('CRITICAL: %(message)s'))
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str = APP_NAME) -> logging.Logger:
    """
    Get configured logger instance.

    Args:
        name: Logger name (defaults to app logger)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
