# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing shell commands and logging their output.
"""

import logging
import os
import shutil
import subprocess
from typing import Dict, List, Optional, Union

from provisioner.config_models import SYMBOLS_DEFAULT, AppSettings

module_logger = logging.getLogger(__name__)


def get_symbols(app_settings: Optional[AppSettings]) -> Dict[str, str]:
    """Return the status symbols of `app_settings`, or the defaults."""
    if app_settings is not None and getattr(app_settings, "symbols", None):
        return app_settings.symbols
    return SYMBOLS_DEFAULT


def log_status(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    app_settings: Optional[AppSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Logs a status message at a named level.

    Args:
        message (str): The log message to be recorded.
        level (str): One of "debug", "info", "success", "warning", "error"
            or "critical". "success" and unknown levels are logged at INFO.
        current_logger (Optional[logging.Logger]): Logger to use. Defaults to
            the module-level logger.
        app_settings (Optional[AppSettings]): Accepted for call-site symmetry
            with the other helpers.
        exc_info (bool): Include exception details in the log.
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def get_elevated_command_prefix() -> List[str]:
    """
    Returns ["sudo"] unless the process already runs as root.
    """
    return [] if os.geteuid() == 0 else ["sudo"]


def run_command(
    command: Union[List[str], str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    shell: bool = False,
    capture_output: bool = False,
    text: bool = True,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """
    Executes a system command and logs the process details and results.

    Args:
        command: The command to execute, as a list or (with shell=True) a string.
        app_settings: Application settings, used for logging symbols.
        check: Raise CalledProcessError on a non-zero exit code.
        shell: Run through the shell.
        capture_output: Capture stdout and stderr.
        text: Decode output streams as text.
        cmd_input: Data passed to the command's standard input.
        current_logger: Logger used for command logging.
        cwd: Working directory for the command.
        env: Extra environment variables, merged over the current environment.
        timeout: Seconds before the command is killed.

    Returns:
        subprocess.CompletedProcess: The completed process.

    Raises:
        subprocess.CalledProcessError: If check is True and the command fails.
        subprocess.TimeoutExpired: If the command exceeds `timeout`.
        FileNotFoundError: If the executable does not exist.
    """
    effective_logger = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    if shell:
        command_to_run: Union[List[str], str] = (
            " ".join(command) if isinstance(command, list) else command
        )
        command_to_log_str = str(command_to_run)
    else:
        if isinstance(command, str):
            log_status(
                f"{symbols.get('warning', '!')} Running string command '{command}' without shell=True. Consider list format.",
                "warning",
                effective_logger,
                app_settings,
            )
            command_to_run = command.split()
            command_to_log_str = command
        else:
            command_to_run = command
            command_to_log_str = subprocess.list2cmdline(command)

    log_status(
        f"{symbols.get('gear', '⚙️')} Executing: {command_to_log_str} {f'(in {cwd})' if cwd else ''}",
        "debug",
        effective_logger,
        app_settings,
    )
    merged_env = dict(os.environ, **env) if env else None
    try:
        result = subprocess.run(
            command_to_run,
            check=check,
            shell=shell,
            capture_output=capture_output,
            text=text,
            input=cmd_input,
            cwd=cwd,
            env=merged_env,
            timeout=timeout,
        )
        if capture_output:
            if result.stdout and result.stdout.strip():
                log_status(
                    f"   stdout: {result.stdout.strip()}",
                    "debug",
                    effective_logger,
                    app_settings,
                )
            if result.stderr and result.stderr.strip():
                log_status(
                    f"   stderr: {result.stderr.strip()}",
                    "debug",
                    effective_logger,
                    app_settings,
                )
        return result
    except subprocess.CalledProcessError as e:
        log_status(
            f"{symbols.get('error', '❌')} Command `{command_to_log_str}` failed (rc {e.returncode}).",
            "error",
            effective_logger,
            app_settings,
        )
        if e.stderr and hasattr(e.stderr, "strip") and e.stderr.strip():
            log_status(
                f"   stderr: {e.stderr.strip()}",
                "error",
                effective_logger,
                app_settings,
            )
        raise
    except FileNotFoundError as e:
        log_status(
            f"{symbols.get('error', '❌')} Command not found: {e.filename}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
            app_settings,
        )
        raise


def run_elevated_command(
    command: List[str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    capture_output: bool = False,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Executes a command with elevated permissions (sudo unless already root).
    See run_command for the arguments.
    """
    elevated_command_list = get_elevated_command_prefix() + list(command)
    return run_command(
        elevated_command_list,
        app_settings,
        check=check,
        shell=False,
        capture_output=capture_output,
        text=True,
        cmd_input=cmd_input,
        current_logger=current_logger,
        cwd=cwd,
        env=env,
    )


def command_succeeds(
    command: List[str],
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> bool:
    """
    Runs `command` and reports whether it exited with status 0.

    A missing or unrunnable executable, or one that times out, counts as
    failure. The command's own exit status is not reinterpreted.
    """
    try:
        result = run_command(
            command,
            app_settings,
            check=False,
            capture_output=True,
            current_logger=current_logger,
            env=env,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def command_exists(command_name: str) -> bool:
    """
    Check if a command exists in the system's PATH.
    """
    return shutil.which(command_name) is not None
