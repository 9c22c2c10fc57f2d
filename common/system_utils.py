# common/system_utils.py
# -*- coding: utf-8 -*-
"""
Host inspection helpers: operating system, architecture, free disk space,
and whether a pending software update needs a restart.
"""

import logging
import platform
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from common.command_utils import get_symbols, log_status, run_command
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)

BYTES_PER_GB = 1000 ** 3


def get_machine_architecture() -> str:
    """Return the hardware name as reported by ``uname -m`` (e.g. arm64, x86_64)."""
    return platform.machine()


def is_apple_silicon() -> bool:
    return platform.system() == "Darwin" and get_machine_architecture() == "arm64"


def get_macos_version(
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> Optional[str]:
    """
    Return the macOS product version (``sw_vers -productVersion``), or the
    platform release string on other systems.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if platform.system() != "Darwin":
        return platform.release() or None
    try:
        result = run_command(
            ["sw_vers", "-productVersion"],
            app_settings,
            check=True,
            capture_output=True,
            current_logger=logger_to_use,
        )
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        symbols = get_symbols(app_settings)
        log_status(
            f"{symbols.get('warning', '!')} Could not determine macOS version: {e}",
            "warning",
            logger_to_use,
            app_settings,
        )
        return None
    return result.stdout.strip() or None


def get_free_disk_gb(path: Path = Path("/")) -> float:
    """Free space on the filesystem holding `path`, in decimal gigabytes."""
    return shutil.disk_usage(str(path)).free / BYTES_PER_GB


def restart_required(
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    True when ``softwareupdate -l`` lists an update that needs a restart.

    Always False off macOS or when the tool is unavailable.
    """
    if platform.system() != "Darwin":
        return False
    try:
        result = run_command(
            ["softwareupdate", "-l"],
            app_settings,
            check=False,
            capture_output=True,
            current_logger=current_logger,
            timeout=120,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False
    output = f"{result.stdout or ''}{result.stderr or ''}"
    return "restart" in output.lower()
