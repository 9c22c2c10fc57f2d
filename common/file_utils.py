# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: idempotent profile edits, generated files,
ownership repair and directory cleanup.
"""

import getpass
import logging
import shutil
import stat
import subprocess
from pathlib import Path
from typing import Optional

from provisioner.config_models import AppSettings

from .command_utils import get_symbols, log_status, run_elevated_command

module_logger = logging.getLogger(__name__)


def append_block_if_missing(
    file_path: Path,
    marker: str,
    block: str,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Append `block` to `file_path` unless `marker` already occurs in the file.

    The file is created if it does not exist. Running this twice leaves the
    file unchanged the second time.

    Parameters:
        file_path (Path): Profile or config file to edit.
        marker (str): Substring whose presence means the block is installed.
        block (str): Text to append. A trailing newline is added if missing.
        app_settings (Optional[AppSettings]): Settings for logging symbols.
        current_logger (Optional[logging.Logger]): Logger to use.

    Returns:
        bool: True if the file was modified, False if the marker was present.

    Raises:
        OSError: If the file cannot be read or written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    file_path = Path(file_path)

    existing = ""
    if file_path.exists():
        existing = file_path.read_text(encoding="utf-8", errors="replace")
    if marker in existing:
        log_status(
            f"'{marker}' already present in {file_path}; leaving it unchanged.",
            "debug",
            logger_to_use,
            app_settings,
        )
        return False

    file_path.parent.mkdir(parents=True, exist_ok=True)
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    suffix = "" if block.endswith("\n") else "\n"
    with open(file_path, "a", encoding="utf-8") as f:
        f.write(f"{prefix}{block}{suffix}")
    log_status(
        f"Appended '{marker}' block to {file_path}",
        "debug",
        logger_to_use,
        app_settings,
    )
    return True


def write_text_file(
    file_path: Path,
    content: str,
    executable: bool = False,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Write `content` to `file_path`, creating parent directories.

    With `executable`, the owner/group/other execute bits are added, matching
    ``chmod +x``.

    Raises:
        OSError: If the file cannot be written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    if executable:
        mode = file_path.stat().st_mode
        file_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    log_status(f"Wrote {file_path}", "debug", logger_to_use, app_settings)
    return file_path


def ensure_owned_by_current_user(
    path: Path,
    app_settings: AppSettings,
    group: Optional[str] = None,
    mode: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Recursively hand `path` to the current user (``sudo chown -R``), and
    optionally apply ``chmod -R mode``.

    Missing paths are skipped. Failures are logged as warnings: permission
    repair is best-effort.

    Returns:
        bool: True if the path was missing or repaired, False on failure.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    path = Path(path)
    if not path.exists():
        return True

    owner = getpass.getuser()
    if group:
        owner = f"{owner}:{group}"
    try:
        run_elevated_command(
            ["chown", "-R", owner, str(path)],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
        if mode:
            run_elevated_command(
                ["chmod", "-R", mode, str(path)],
                app_settings,
                capture_output=True,
                current_logger=logger_to_use,
            )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        log_status(
            f"{symbols.get('warning', '!')} Could not repair ownership of {path}: {e}",
            "warning",
            logger_to_use,
            app_settings,
        )
        return False


def cleanup_directory(
    directory_path: Path,
    app_settings: Optional[AppSettings],
    ensure_dir_exists_after: bool = False,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Removes `directory_path` and its contents, optionally recreating it empty.

    Parameters:
        directory_path (Path): Directory to remove.
        app_settings (Optional[AppSettings]): Settings for logging symbols.
        ensure_dir_exists_after (bool): Recreate the directory afterwards.
        current_logger (Optional[logging.Logger]): Logger to use.

    Returns:
        bool: False if removal or recreation failed, True otherwise.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    directory_path = Path(directory_path)
    ok = True

    if directory_path.exists():
        if directory_path.is_dir():
            try:
                shutil.rmtree(directory_path)
                log_status(
                    f"{symbols.get('success', '✅')} Removed directory and its contents: {directory_path}",
                    "debug",
                    logger_to_use,
                    app_settings,
                )
            except OSError as e:
                log_status(
                    f"{symbols.get('error', '❌')} Error removing directory {directory_path}: {e}",
                    "error",
                    logger_to_use,
                    app_settings,
                )
                ok = False
        else:
            log_status(
                f"{symbols.get('warning', '!')} Path {directory_path} exists but is not a directory.",
                "warning",
                logger_to_use,
                app_settings,
            )
            ok = False
    else:
        log_status(
            f"Directory {directory_path} does not exist. No cleanup needed.",
            "debug",
            logger_to_use,
            app_settings,
        )

    if ensure_dir_exists_after:
        try:
            directory_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log_status(
                f"{symbols.get('error', '❌')} Error creating directory {directory_path} after cleanup: {e}",
                "error",
                logger_to_use,
                app_settings,
            )
            ok = False
    return ok
