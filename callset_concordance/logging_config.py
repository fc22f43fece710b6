"""
Centralized logging configuration for call-set comparison runs.

Provides:
- Console handler: Shows only warnings and errors unless verbose
- File handler: Captures all details with rotation (DEBUG level)
- Progress logger: Always prints to console for per-pair announcements
"""

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Module-level state
_logging_initialized = False
_log_file_path: Path | None = None

PROGRESS_LOGGER = "callset_concordance.progress"
PROGRESS_HANDLER = "progress_console"


def setup_logging(
    log_dir: Path | None = None,
    job_name: str = "compare",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
) -> Path:
    """
    Initialize logging with console and rotating file handlers.

    Args:
        log_dir: Directory for log files. If None, logs to current directory.
        job_name: Name prefix for log file.
        console_level: Log level for console output (default: WARNING).
        file_level: Log level for file output (default: DEBUG).
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of backup files to keep.

    Returns:
        Path to the log file.
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized and _log_file_path is not None:
        return _log_file_path

    log_path = (Path(log_dir) if log_dir else Path.cwd()) / "logs"
    log_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_path / f"{job_name}_{timestamp}.log"
    _log_file_path = log_file

    # Capture everything, handlers filter
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root_logger.addHandler(file_handler)

    _logging_initialized = True
    return log_file


def get_progress_logger() -> logging.Logger:
    """
    Get a logger that always prints to console.

    Use this for high-level progress messages that should always be visible,
    such as the start of each experiment and pair, and the run summary.

    Returns:
        Logger configured to always output to console.
    """
    logger = logging.getLogger(PROGRESS_LOGGER)
    logger.setLevel(logging.INFO)
    # Prevent duplicate console lines; the file handler is added directly
    logger.propagate = False

    if not any(handler.name == PROGRESS_HANDLER for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.set_name(PROGRESS_HANDLER)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    # setup_logging may run after the first call
    for handler in logging.getLogger().handlers:
        if isinstance(handler, RotatingFileHandler) and handler not in logger.handlers:
            logger.addHandler(handler)

    return logger


def get_log_file_path() -> Path | None:
    """Get the path to the current log file."""
    return _log_file_path


def reset_logging() -> None:
    """Reset logging state. Useful for testing."""
    global _logging_initialized, _log_file_path
    _logging_initialized = False

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()

    progress_logger = logging.getLogger(PROGRESS_LOGGER)
    for handler in list(progress_logger.handlers):
        if handler.name == PROGRESS_HANDLER or isinstance(handler, RotatingFileHandler):
            progress_logger.removeHandler(handler)
    _log_file_path = None
