# tests/test_logger.py
"""Unit tests for the logging setup."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest
from fleet_inspection.utils import logger as log_setup


def owned_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, log_setup._OWNED, False)]


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    log_setup.configure_logging()


class TestConfigureLogging:
    def test_file_handler_written_under_log_dir(self, tmp_path):
        log_dir = tmp_path / "logs"
        log_setup.configure_logging(level="debug", log_dir=str(log_dir))

        files = [h for h in owned_handlers() if isinstance(h, RotatingFileHandler)]
        assert len(files) == 1
        assert files[0].baseFilename == str(log_dir / log_setup.LOG_FILENAME)
        assert files[0].maxBytes == log_setup.MAX_BYTES
        assert logging.getLogger().level == logging.DEBUG

        log_setup.get_logger("fleet_inspection.test").info("written to file")
        files[0].flush()
        assert "written to file" in (log_dir / log_setup.LOG_FILENAME).read_text(encoding="utf-8")

    def test_unwritable_dir_falls_back_to_console(self, tmp_path):
        with patch("fleet_inspection.utils.logger.os.makedirs", side_effect=PermissionError("read-only")):
            assert log_setup._file_handler(str(tmp_path / "denied")) is None
            log_setup.configure_logging(log_dir=str(tmp_path / "denied"))

        handlers = owned_handlers()
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RotatingFileHandler)

    def test_reconfiguring_replaces_own_handlers_only(self, tmp_path):
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)
        try:
            log_setup.configure_logging(log_dir=str(tmp_path / "a"))
            log_setup.configure_logging(log_dir=str(tmp_path / "b"))
            assert len(owned_handlers()) == 2
            assert foreign in logging.getLogger().handlers
        finally:
            logging.getLogger().removeHandler(foreign)

    def test_sql_logging_quiet_unless_echo(self, tmp_path, monkeypatch):
        monkeypatch.setattr(log_setup.settings, "DATABASE_ECHO", False)
        log_setup.configure_logging(log_dir=str(tmp_path))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

        monkeypatch.setattr(log_setup.settings, "DATABASE_ECHO", True)
        log_setup.configure_logging(log_dir=str(tmp_path))
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
