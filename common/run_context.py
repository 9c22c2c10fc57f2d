# common/run_context.py
# -*- coding: utf-8 -*-
"""
Per-run state for one provisioning session.

A RunContext owns the session log, the error log and the cumulative
failure counter. Every component reports student-visible status through
``record``/``record_error`` so that the persisted logs and the final
report always agree on what went wrong.
"""

import datetime
import itertools
import logging
import sys
import time
from pathlib import Path
from typing import Dict, Optional

from common.core_utils import (
    CONSOLE_STATUS_FORMAT,
    LOG_DATE_FORMAT,
    SymbolFormatter,
    build_file_format,
)
from provisioner import config as static_config
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)

PROVISIONING_CATEGORY = "provisioning"
VALIDATION_CATEGORY = "validation"

ERROR_LOG_FORMAT = "[%(asctime)s] %(message)s"

_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_context_ids = itertools.count(1)


def _open_file_handler(path: Path, formatter: logging.Formatter) -> Optional[logging.Handler]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        print(f"Warning: Could not open log file {path}: {e}", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    return handler


class RunContext:
    """Process-wide state for one provisioning session."""

    def __init__(
        self,
        app_settings: AppSettings,
        log_file: Path,
        error_log: Path,
        temp_dir: Path,
        console: bool = True,
        start_time: Optional[float] = None,
    ):
        self.app_settings = app_settings
        self.symbols = app_settings.symbols
        self.log_file = Path(log_file)
        self.error_log = Path(error_log)
        self.temp_dir = Path(temp_dir)
        self.start_time = start_time if start_time is not None else time.time()
        self.lock = None
        self.interrupted = False
        self.fatal_error: Optional[str] = None

        self._failures = 0
        self._failures_by_category: Dict[str, int] = {}
        self._console_handler: Optional[logging.Handler] = None

        run_id = next(_context_ids)
        self.logger = logging.getLogger(f"academy.run.{run_id}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self._error_logger = logging.getLogger(f"academy.errors.{run_id}")
        self._error_logger.setLevel(logging.ERROR)
        self._error_logger.propagate = False

        session_handler = _open_file_handler(
            self.log_file,
            SymbolFormatter(
                fmt=build_file_format(app_settings.log_prefix),
                datefmt=LOG_DATE_FORMAT,
                symbols=self.symbols,
            ),
        )
        if session_handler is not None:
            self.logger.addHandler(session_handler)

        error_handler = _open_file_handler(
            self.error_log,
            logging.Formatter(ERROR_LOG_FORMAT, datefmt=LOG_DATE_FORMAT),
        )
        if error_handler is not None:
            self._error_logger.addHandler(error_handler)

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(
                SymbolFormatter(
                    fmt=CONSOLE_STATUS_FORMAT,
                    symbols=self.symbols,
                    use_color=app_settings.use_color and sys.stdout.isatty(),
                )
            )
            self.logger.addHandler(console_handler)
            self._console_handler = console_handler

    @classmethod
    def create(
        cls,
        app_settings: AppSettings,
        console: bool = True,
        now: Optional[datetime.datetime] = None,
    ) -> "RunContext":
        """Build a context with timestamped log files under the log directory."""
        paths = app_settings.paths
        stamp = (now or datetime.datetime.now()).strftime(
            static_config.LOG_STAMP_FORMAT
        )
        return cls(
            app_settings,
            log_file=paths.log_dir
            / static_config.LOG_FILE_PATTERN.format(stamp=stamp),
            error_log=paths.log_dir
            / static_config.ERROR_LOG_FILE_PATTERN.format(stamp=stamp),
            temp_dir=paths.temp_dir,
            console=console,
        )

    def set_console_level(self, level: int) -> None:
        if self._console_handler is not None:
            self._console_handler.setLevel(level)

    @property
    def failure_counter(self) -> int:
        """Number of recorded failures. Never decreases within a run."""
        return self._failures

    def failures_in(self, category: str) -> int:
        return self._failures_by_category.get(category, 0)

    def record(self, level: str, message: str) -> None:
        """
        Append a timestamped status line to the session log (and console).

        Write errors are handled by the logging module and never propagate.
        """
        extra = {"status": level}
        if level == "success":
            extra["status_symbol"] = self.symbols.get("success", "✅")
        self.logger.log(_LEVELS.get(level, logging.INFO), message, extra=extra)

    def success(self, message: str) -> None:
        self.record("success", message)

    def info(self, message: str) -> None:
        self.record("info", message)

    def warning(self, message: str) -> None:
        self.record("warning", message)

    def record_error(
        self, message: str, category: str = PROVISIONING_CATEGORY
    ) -> None:
        """Log an error, append it to the error log and count it as a failure."""
        self._failures += 1
        self._failures_by_category[category] = (
            self._failures_by_category.get(category, 0) + 1
        )
        self.record("error", message)
        self._error_logger.error(message)

    def elapsed_seconds(self, now: Optional[float] = None) -> float:
        return max(0.0, (now if now is not None else time.time()) - self.start_time)

    def close(self) -> None:
        """Detach and close this context's handlers."""
        for logger in (self.logger, self._error_logger):
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
