"""Centralized logging configuration for the initial workflow module."""
from __future__ import annotations

import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_LOG_FILENAME = "initial_workflow.log"
DEFAULT_LOG_DIRNAME = "logs"
PACKAGE_LOGGER_NAME = "initial_workflow"


class _ComponentSafeFormatter(logging.Formatter):
    """Ensures log records always include a component field for formatting."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting is hard to unit test reliably
        if not hasattr(record, "component"):
            record.component = record.name
        return super().format(record)


@dataclass
class LoggingOptions:
    """Runtime options for configuring the logging subsystem."""

    log_directory: Optional[os.PathLike] = None
    level: int = logging.INFO
    enable_console: bool = True
    developer_diagnostics: bool = False
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5


class LoggingConfigurator:
    """Attaches rotating file and console handlers to the package logger.

    Only the ``initial_workflow`` logger hierarchy is touched so the host's
    own logging setup stays intact.
    """

    def __init__(self, options: Optional[LoggingOptions] = None) -> None:
        self.options = options or LoggingOptions()
        self.logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    def configure(self) -> Path:
        """Initialise logging handlers and return the log file path."""
        level = logging.DEBUG if self.options.developer_diagnostics else self.options.level
        self.logger.setLevel(level)
        self._clear_existing_handlers()

        log_path = self._determine_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=self.options.max_bytes,
            backupCount=self.options.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(self._build_formatter(verbose=self.options.developer_diagnostics))
        file_handler.setLevel(level)
        self.logger.addHandler(file_handler)

        if self.options.enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(self._build_formatter(verbose=self.options.developer_diagnostics))
            console_handler.setLevel(level)
            self.logger.addHandler(console_handler)

        self.logger.debug("Logging configured", extra={"component": "LoggingConfigurator"})
        return log_path

    def shutdown(self) -> None:
        """Detach and close the handlers installed by :meth:`configure`."""

        self._clear_existing_handlers()

    def _determine_log_path(self) -> Path:
        base_dir = (
            Path(self.options.log_directory)
            if self.options.log_directory is not None
            else Path.home() / DEFAULT_LOG_DIRNAME
        )
        return base_dir / DEFAULT_LOG_FILENAME

    def _clear_existing_handlers(self) -> None:
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

    @staticmethod
    def _build_formatter(verbose: bool) -> logging.Formatter:
        if verbose:
            format_string = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
        else:
            format_string = "%(asctime)s | %(levelname)s | %(component)s | %(message)s"

        return _ComponentSafeFormatter(format_string)
