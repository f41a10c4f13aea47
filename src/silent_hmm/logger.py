"""
Logging infrastructure for silent-hmm.

Provides centralized logging configuration with file and console output.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .config import get_config

ROOT_LOGGER_NAME = 'silent_hmm'


class SilentHMMLogger:
    """
    Centralized logger for the silent_hmm package.

    Owns a console handler on stderr and any number of file handlers, one per
    log file path. Level changes and file logging only touch handlers this
    manager added.
    """

    def __init__(self):
        self._loggers = {}
        self._file_handlers: Dict[str, logging.FileHandler] = {}
        self._formatter = logging.Formatter(get_config('logging', 'format'))
        self._console_handler = logging.StreamHandler(sys.stderr)
        self._setup_root_logger()

    def _setup_root_logger(self):
        """Attach the console handler and apply settings from config."""
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()

        self._console_handler.setFormatter(self._formatter)
        root_logger.addHandler(self._console_handler)

        # Prevent propagation to avoid duplicate messages
        root_logger.propagate = False

        try:
            self.apply_config()
        except ValueError as e:
            self.set_level('INFO')
            root_logger.warning(f"{e}; using INFO")

    def _own_handlers(self) -> List[logging.Handler]:
        return [self._console_handler, *self._file_handlers.values()]

    def apply_config(self):
        """
        Apply the ``logging`` config section: format, level and file logging.

        Raises:
            ValueError: If the configured level is not a logging level name
        """
        log_format = get_config('logging', 'format')
        if log_format:
            self._formatter = logging.Formatter(log_format)
            for handler in self._own_handlers():
                handler.setFormatter(self._formatter)

        self.set_level(get_config('logging', 'level') or 'INFO')

        if get_config('logging', 'file_logging'):
            self.enable_file_logging(get_config('logging', 'log_file'))

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger with the specified name."""
        if name.startswith(ROOT_LOGGER_NAME):
            full_name = name
        else:
            full_name = f'{ROOT_LOGGER_NAME}.{name}'

        if full_name not in self._loggers:
            self._loggers[full_name] = logging.getLogger(full_name)

        return self._loggers[full_name]

    def set_level(self, level: str):
        """
        Set logging level for the package logger and its handlers.

        Raises:
            ValueError: If ``level`` is not a logging level name
        """
        log_level = logging.getLevelName(str(level).upper())
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown log level: {level!r}")

        logging.getLogger(ROOT_LOGGER_NAME).setLevel(log_level)
        for handler in self._own_handlers():
            handler.setLevel(log_level)

    def enable_file_logging(self, log_file: Optional[str] = None):
        """Also write log records to ``log_file``; a path already enabled is kept as is."""
        if log_file is None:
            log_file = get_config('logging', 'log_file') or 'silent_hmm.log'

        log_path = Path(log_file).resolve()
        if str(log_path) in self._file_handlers:
            return

        log_path.parent.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(root_logger.level)
        file_handler.setFormatter(self._formatter)
        root_logger.addHandler(file_handler)

        self._file_handlers[str(log_path)] = file_handler

    def disable_file_logging(self):
        """Remove and close every file handler added by this manager."""
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)

        for handler in self._file_handlers.values():
            root_logger.removeHandler(handler)
            handler.close()
        self._file_handlers.clear()

    @property
    def log_files(self) -> List[str]:
        """Absolute paths of the files currently receiving log records."""
        return list(self._file_handlers)


# Global logger manager instance
_logger_manager = SilentHMMLogger()


def get_logger(name: str = 'main') -> logging.Logger:
    """Get a logger instance for the specified module/component."""
    return _logger_manager.get_logger(name)


def set_log_level(level: str):
    """Set global logging level."""
    _logger_manager.set_level(level)


def enable_file_logging(log_file: Optional[str] = None):
    """Enable file logging globally."""
    _logger_manager.enable_file_logging(log_file)


def disable_file_logging():
    """Disable file logging globally."""
    _logger_manager.disable_file_logging()


def get_forward_logger() -> logging.Logger:
    """Get logger for the forward algorithm and its column observers."""
    return get_logger('forward')


def apply_logging_config():
    """Re-apply the ``logging`` config section, e.g. after loading a config file."""
    _logger_manager.apply_config()


def get_log_files() -> List[str]:
    """Absolute paths of the active log files."""
    return _logger_manager.log_files
