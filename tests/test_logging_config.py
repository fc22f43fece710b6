"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from callset_concordance.logging_config import (
    PROGRESS_HANDLER,
    PROGRESS_LOGGER,
    get_log_file_path,
    get_progress_logger,
    reset_logging,
    setup_logging,
)


class TestSetupLogging:
    """Test console and file handler installation."""

    def test_creates_log_file(self, tmp_path: Path) -> None:
        """Create a timestamped log file under logs/."""
        log_file = setup_logging(log_dir=tmp_path, job_name="run")

        assert log_file.parent == tmp_path / "logs"
        assert log_file.name.startswith("run_")
        assert get_log_file_path() == log_file

        logging.getLogger("callset_concordance.test").debug("detail message")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "detail message" in log_file.read_text()

    def test_idempotent(self, tmp_path: Path) -> None:
        """Keep the first log file on repeated setup."""
        first = setup_logging(log_dir=tmp_path)
        second = setup_logging(log_dir=tmp_path / "other")

        assert first == second
        handlers = logging.getLogger().handlers
        assert sum(isinstance(h, RotatingFileHandler) for h in handlers) == 1

    def test_reset(self, tmp_path: Path) -> None:
        """Remove handlers and forget the log file."""
        setup_logging(log_dir=tmp_path)
        reset_logging()

        assert get_log_file_path() is None
        assert logging.getLogger().handlers == []


class TestProgressLogger:
    """Test the always-visible progress logger."""

    def test_does_not_propagate(self) -> None:
        """The logger has its own console handler, added once."""
        logger = get_progress_logger()

        assert logger.propagate is False
        assert logger.level == logging.INFO
        assert get_progress_logger() is logger
        own = [h for h in logger.handlers if h.name == PROGRESS_HANDLER]
        assert len(own) == 1

    def test_writes_to_log_file(self, tmp_path: Path) -> None:
        """Progress messages also reach the run's log file."""
        log_file = setup_logging(log_dir=tmp_path)
        logger = get_progress_logger()
        logger.info("pair done")

        for handler in logger.handlers:
            handler.flush()
        assert "pair done" in log_file.read_text()

    def test_foreign_handler_does_not_block_setup(self, tmp_path: Path) -> None:
        """Handlers attached by others leave the console and file handlers to be added."""
        foreign = logging.NullHandler()
        logging.getLogger(PROGRESS_LOGGER).addHandler(foreign)
        try:
            log_file = setup_logging(log_dir=tmp_path)
            logger = get_progress_logger()

            assert any(h.name == PROGRESS_HANDLER for h in logger.handlers)
            assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)

            logger.info("pair started")
            for handler in logger.handlers:
                handler.flush()
            assert "pair started" in log_file.read_text()
        finally:
            logging.getLogger(PROGRESS_LOGGER).removeHandler(foreign)

    def test_file_handler_added_after_early_use(self, tmp_path: Path) -> None:
        """Using the logger before setup_logging still gets file logging later."""
        get_progress_logger()
        log_file = setup_logging(log_dir=tmp_path)
        logger = get_progress_logger()

        logger.info("late setup")
        for handler in logger.handlers:
            handler.flush()
        assert "late setup" in log_file.read_text()
        assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1

    def test_reset_keeps_foreign_handlers(self) -> None:
        """Only the handlers added here are removed on reset."""
        foreign = logging.NullHandler()
        logger = get_progress_logger()
        logger.addHandler(foreign)

        reset_logging()

        assert foreign in logger.handlers
        assert not any(h.name == PROGRESS_HANDLER for h in logger.handlers)
        assert not any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
        logger.removeHandler(foreign)
