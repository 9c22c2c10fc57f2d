#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core logging utilities for the provisioner.

This module provides:
- SymbolFormatter, which decorates records with a per-level status symbol
  and, for terminals, an ANSI colour.
- setup_logging, which configures the root logger for a run.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from provisioner.config_models import SYMBOLS_DEFAULT

module_logger = logging.getLogger(__name__)

SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER = "{log_prefix}%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(message)s"
SIMPLE_LOG_FORMAT_NO_PREFIX = (
    "%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(message)s"
)
CONSOLE_STATUS_FORMAT = "%(symbol)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ANSI_RESET = "\033[0m"
LEVEL_COLORS: Dict[int, str] = {
    logging.DEBUG: "\033[0;36m",
    logging.INFO: "\033[0;34m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;35m",
}


class SymbolFormatter(logging.Formatter):
    """
    A custom formatter that adds symbols to log messages based on the log level.

    Records may carry their own ``symbol`` attribute (passed through
    ``extra``), which takes precedence over the level default. With
    ``use_color`` the whole line is wrapped in the level's ANSI colour.
    """

    def __init__(
        self,
        fmt=None,
        datefmt=None,
        style="%",
        validate=True,
        symbols=None,
        use_color=False,
    ):
        super().__init__(fmt, datefmt, style, validate)
        self.symbols = symbols or SYMBOLS_DEFAULT
        self.use_color = use_color

    def _level_symbol(self, levelno: int) -> str:
        if levelno == logging.DEBUG:
            return self.symbols.get("debug", "🐛")
        if levelno == logging.INFO:
            return self.symbols.get("info", "ℹ️")
        if levelno == logging.WARNING:
            return self.symbols.get("warning", "⚠️")
        if levelno == logging.ERROR:
            return self.symbols.get("error", "❌")
        if levelno == logging.CRITICAL:
            return self.symbols.get("critical", "🔥")
        return ""

    def format(self, record):
        explicit = getattr(record, "status_symbol", None)
        record.symbol = (
            explicit if explicit is not None else self._level_symbol(record.levelno)
        )
        formatted = super().format(record)
        if self.use_color:
            color = LEVEL_COLORS.get(record.levelno)
            if getattr(record, "status", None) == "success":
                color = "\033[0;32m"
            if color:
                return f"{color}{formatted}{ANSI_RESET}"
        return formatted


def build_file_format(log_prefix: Optional[str] = None) -> str:
    """Return the on-disk log line format, with an optional prefix."""
    actual_prefix = (
        (log_prefix.strip() + " ") if log_prefix and log_prefix.strip() else ""
    )
    if actual_prefix:
        return SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER.format(
            log_prefix=actual_prefix
        )
    return SIMPLE_LOG_FORMAT_NO_PREFIX


def setup_logging(
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    console_level: int = logging.WARNING,
    log_prefix: Optional[str] = None,
    symbols: Optional[Dict[str, str]] = None,
    use_color: bool = False,
) -> None:
    """
    Configures the root logger for a provisioning run.

    Module loggers (command execution, backends, collaborators) write to
    the session log file at ``log_level``. The console only receives
    records at ``console_level`` and above; student-facing status lines
    are emitted by the RunContext's own console handler.

    Parameters:
    log_level: int
        Level for the root logger and the file handler.
    log_file: Optional[str]
        Session log file. Created (with parents) and appended to.
    log_to_console: bool
        Whether to attach a stdout handler.
    console_level: int
        Minimum level shown on the console.
    log_prefix: Optional[str]
        Optional prefix for file log lines.
    symbols: Optional[Dict[str, str]]
        Status symbols; defaults to SYMBOLS_DEFAULT.
    use_color: bool
        Colour console output.

    Failure to open the log file is reported on stderr and is not fatal.
    """
    handlers: List[logging.Handler] = []
    file_format = build_file_format(log_prefix)

    if log_file:
        try:
            log_file_path = Path(log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(
                SymbolFormatter(fmt=file_format, datefmt=LOG_DATE_FORMAT, symbols=symbols)
            )
            handlers.append(file_handler)
        except Exception as e:
            print(
                f"Warning: Could not create file handler for log file {log_file}: {e}",
                file=sys.stderr,
            )

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(
            SymbolFormatter(
                fmt=CONSOLE_STATUS_FORMAT,
                symbols=symbols,
                use_color=use_color,
            )
        )
        handlers.append(console_handler)

    if not handlers:  # pragma: no cover
        handlers.append(logging.StreamHandler(sys.stdout))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    module_logger.debug(
        f"Logging configured. Level: {logging.getLevelName(log_level)}. Format: '{file_format}'"
    )
