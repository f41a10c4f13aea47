"""
Tests for the logging infrastructure.
"""

import logging
import os

import pytest

from silent_hmm.config import reset_config, set_config
from silent_hmm.logger import (
    ROOT_LOGGER_NAME, apply_logging_config, disable_file_logging, enable_file_logging,
    get_forward_logger, get_log_files, get_logger, set_log_level
)


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    disable_file_logging()
    reset_config()
    set_log_level('INFO')


def _flush():
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()


class TestLoggers:
    """Test logger naming and levels."""

    def test_logger_names(self):
        assert get_logger('io').name == 'silent_hmm.io'
        assert get_logger('silent_hmm.hmm.model').name == 'silent_hmm.hmm.model'
        assert get_forward_logger().name == 'silent_hmm.forward'
        assert get_logger('io') is get_logger('io')

    def test_root_logger_does_not_propagate(self):
        assert logging.getLogger(ROOT_LOGGER_NAME).propagate is False

    def test_set_log_level(self):
        set_log_level('debug')
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG
        assert get_forward_logger().isEnabledFor(logging.DEBUG)

        set_log_level('WARNING')
        assert not get_forward_logger().isEnabledFor(logging.INFO)

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            set_log_level('LOUD')


class TestFileLogging:
    """Test enabling and disabling log files."""

    def test_file_logging(self, temp_dir):
        log_file = temp_dir / "logs" / "run.log"

        enable_file_logging(str(log_file))
        enable_file_logging(str(log_file))
        assert get_log_files() == [str(log_file.resolve())]

        get_logger('test').warning("written to file")
        _flush()
        assert "written to file" in log_file.read_text()

        disable_file_logging()
        assert get_log_files() == []

    def test_two_different_files(self, temp_dir):
        first = temp_dir / "first.log"
        second = temp_dir / "second.log"

        enable_file_logging(str(first))
        enable_file_logging(str(second))
        assert sorted(get_log_files()) == sorted([str(first.resolve()), str(second.resolve())])

        get_logger('test').warning("to both files")
        _flush()
        assert "to both files" in first.read_text()
        assert "to both files" in second.read_text()

    def test_foreign_file_handler_does_not_block(self, temp_dir):
        root = logging.getLogger(ROOT_LOGGER_NAME)
        foreign = logging.FileHandler(os.devnull)
        root.addHandler(foreign)
        try:
            log_file = temp_dir / "mine.log"
            enable_file_logging(str(log_file))
            assert log_file.exists()

            disable_file_logging()
            assert foreign in root.handlers
        finally:
            root.removeHandler(foreign)
            foreign.close()


class TestApplyConfig:
    """Test applying the logging config section."""

    def test_level_and_file_from_config(self, temp_dir):
        log_file = temp_dir / "configured.log"
        set_config('logging', 'level', 'WARNING')
        set_config('logging', 'file_logging', True)
        set_config('logging', 'log_file', str(log_file))

        apply_logging_config()

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING
        assert get_log_files() == [str(log_file.resolve())]

    def test_invalid_level_in_config(self):
        set_config('logging', 'level', 'LOUD')
        with pytest.raises(ValueError):
            apply_logging_config()
