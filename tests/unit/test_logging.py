"""Unit tests for utils/logging.py."""

import logging
import pytest
from logging.handlers import RotatingFileHandler

from publisher.utils.logging import setup_logger


@pytest.mark.unit
class TestSetupLogger:
    """Test setup_logger function."""

    @pytest.fixture(autouse=True)
    def cleanup_loggers(self):
        """Close and detach handlers of loggers created by a test."""
        created = []
        yield created
        for name in created:
            lg = logging.getLogger(name)
            for h in list(lg.handlers):
                h.close()
                lg.removeHandler(h)

    def _unique_name(self, suffix: str) -> str:
        return f"test_publisher_logger_{suffix}"

    def test_creates_log_directory(self, tmp_path, cleanup_loggers):
        log_dir = tmp_path / "new_logs" / "subdir"
        name = self._unique_name("dir")
        cleanup_loggers.append(name)

        setup_logger(name, str(log_dir / "publisher.log"))

        assert log_dir.exists()

    def test_default_level_info(self, tmp_path, cleanup_loggers):
        name = self._unique_name("level_default")
        cleanup_loggers.append(name)

        logger = setup_logger(name, str(tmp_path / "publisher.log"))

        assert logger.name == name
        assert logger.level == logging.INFO

    def test_file_and_console_handlers(self, tmp_path, cleanup_loggers):
        name = self._unique_name("handlers")
        cleanup_loggers.append(name)

        logger = setup_logger(name, str(tmp_path / "publisher.log"), max_bytes=1024, backup_count=5)

        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        stream_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert len(stream_handlers) == 1
        assert file_handlers[0].maxBytes == 1024
        assert file_handlers[0].backupCount == 5

    def test_second_call_reuses_handlers_and_updates_level(self, tmp_path, cleanup_loggers):
        name = self._unique_name("no_dup")
        cleanup_loggers.append(name)
        log_file = str(tmp_path / "publisher.log")

        logger1 = setup_logger(name, log_file)
        handler_count = len(logger1.handlers)
        logger2 = setup_logger(name, log_file, level=logging.DEBUG)

        assert logger1 is logger2
        assert len(logger2.handlers) == handler_count
        assert logger2.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in logger2.handlers)

    def test_child_logger_reaches_file(self, tmp_path, cleanup_loggers):
        """Module loggers like <name>.manifest propagate to the configured file."""
        name = self._unique_name("child")
        cleanup_loggers.append(name)
        log_file = tmp_path / "publisher.log"

        logger = setup_logger(name, str(log_file))
        logging.getLogger(f"{name}.manifest").info("Wrote manifest.json")
        for h in logger.handlers:
            h.flush()

        content = log_file.read_text()
        assert "Wrote manifest.json" in content
        assert f"[INFO] {name}.manifest:" in content
