"""
Logging configuration with file rotation and automatic cleanup.
Keeps gateway logs for 10 days with daily rotation.
"""
import os
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional


LOGS_DIR = os.getenv("LOG_DIR") or os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs")
os.makedirs(LOGS_DIR, exist_ok=True)

LOG_FILE = os.path.join(LOGS_DIR, "gateway.log")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 10
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def cleanup_old_logs(directory: str, retention_days: int = LOG_RETENTION_DAYS):
    """Remove rotated log files older than retention_days."""
    try:
        now = datetime.now()
        cutoff = now - timedelta(days=retention_days)

        log_dir = Path(directory)
        if not log_dir.exists():
            return

        deleted_count = 0
        for log_file in log_dir.glob("gateway.log.*"):
            if not log_file.is_file():
                continue
            # Rotated files are suffixed gateway.log.YYYY-MM-DD
            try:
                file_date = datetime.strptime(log_file.name.replace("gateway.log.", ""), "%Y-%m-%d")
            except ValueError:
                file_date = datetime.fromtimestamp(log_file.stat().st_mtime)
            try:
                if file_date < cutoff:
                    log_file.unlink()
                    deleted_count += 1
            except OSError as e:
                logging.error(f"Failed to delete log file {log_file.name}: {e}")

        if deleted_count > 0:
            logging.info(f"Cleaned up {deleted_count} old log file(s)")
    except Exception as e:
        logging.error(f"Error during log cleanup: {e}")


def setup_logger(name: str = "app", level: int = LOG_LEVEL) -> logging.Logger:
    """
    Set up logger with file rotation and console output.

    Args:
        name: Logger name
        level: Logging level (default: LOG_LEVEL env, INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(level)

    file_handler = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        interval=1,
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
        utc=True
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", "%H:%M:%S")
    )

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    cleanup_old_logs(LOGS_DIR, LOG_RETENTION_DAYS)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (if None, returns the root app logger)

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("app")
    return logging.getLogger(f"app.{name}")


app_logger = setup_logger("app")

app_logger.info("=" * 80)
app_logger.info("Gateway logger initialized")
app_logger.info(f"Log file: {LOG_FILE}")
app_logger.info(f"Log retention: {LOG_RETENTION_DAYS} days")
app_logger.info("=" * 80)
