# configure/system_prep.py
# -*- coding: utf-8 -*-
"""
Host preparation before any package is installed: ownership repair,
system requirement checks, Rosetta 2, the Xcode Command Line Tools and
Homebrew itself.
"""

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional

from common.command_utils import (
    command_exists,
    command_succeeds,
    run_command,
    run_elevated_command,
)
from common.file_utils import cleanup_directory, ensure_owned_by_current_user
from common.run_context import RunContext
from common.system_utils import (
    get_free_disk_gb,
    get_machine_architecture,
    get_macos_version,
    is_apple_silicon,
)
from configure.shell_profile import add_brew_shellenv
from installer.backends import HomebrewBackend
from installer.catalogs import HOMEBREW_TAPS
from provisioner import config as static_config
from provisioner.batch_runner import FatalStageError

module_logger = logging.getLogger(__name__)

XCODE_IN_PROGRESS_MARKER = Path(
    "/tmp/.com.apple.dt.CommandLineTools.installondemand.in-progress"
)


def _user_python_dirs(context: RunContext) -> List[Path]:
    home = Path(context.app_settings.home_dir).expanduser()
    version = context.app_settings.python_version
    return [
        home / "Library" / "Python" / version / "lib" / "python" / "site-packages",
        home / ".local" / "bin",
        home / ".local" / "lib" / f"python{version}" / "site-packages",
        home / ".cache" / "pip",
        home / "Library" / "Caches" / "pip",
    ]


def fix_permissions(context: RunContext) -> bool:
    """
    Hand Homebrew prefixes and per-user Python/npm directories back to the
    current user.

    Best-effort: individual failures are logged as warnings and the stage
    always completes.
    """
    app_settings = context.app_settings
    home = Path(app_settings.home_dir).expanduser()
    context.info("Fixing permissions...")

    for prefix in static_config.HOMEBREW_PREFIXES:
        if (prefix / "bin" / "brew").exists():
            ensure_owned_by_current_user(
                prefix, app_settings, group="admin", mode="755", current_logger=context.logger
            )

    for directory in _user_python_dirs(context):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            context.logger.debug(f"Could not create {directory}: {e}")

    for path in (
        home / "Library" / "Python",
        home / ".local",
        home / ".cache",
        home / ".npm",
        Path("/usr/local/lib/node_modules"),
    ):
        ensure_owned_by_current_user(path, app_settings, current_logger=context.logger)

    context.success("Permissions fixed")
    return True


def check_system_requirements(
    context: RunContext, free_space_gb: Optional[float] = None
) -> bool:
    """
    Log OS version, architecture and free disk space. Below
    LOW_DISK_SPACE_GB the user and Homebrew caches are emptied.
    """
    app_settings = context.app_settings
    home = Path(app_settings.home_dir).expanduser()
    context.info("Checking system requirements...")

    context.record("debug", f"macOS version: {get_macos_version(app_settings, context.logger)}")
    context.record("debug", f"Architecture: {get_machine_architecture()}")

    if free_space_gb is None:
        free_space_gb = get_free_disk_gb(home)
    context.record("debug", f"Available disk space: {free_space_gb:.1f}GB")

    if free_space_gb < static_config.LOW_DISK_SPACE_GB:
        context.warning("Low disk space. Attempting cleanup...")
        for cache_dir in (home / "Library" / "Caches", home / ".cache"):
            if cache_dir.is_dir():
                cleanup_directory(
                    cache_dir,
                    app_settings,
                    ensure_dir_exists_after=True,
                    current_logger=context.logger,
                )
        if command_exists("brew"):
            HomebrewBackend(app_settings, logger=context.logger).purge_cache()

    context.success("System requirements checked")
    return True


def ensure_rosetta(context: RunContext) -> bool:
    """Install Rosetta 2 on Apple Silicon. Nothing to do elsewhere."""
    if not is_apple_silicon():
        return True

    app_settings = context.app_settings
    context.info("Apple Silicon detected, ensuring Rosetta 2...")
    if not command_succeeds(
        ["pkgutil", "--pkg-info", "com.apple.pkg.RosettaUpdateAuto"],
        app_settings,
        current_logger=context.logger,
    ):
        try:
            run_elevated_command(
                ["softwareupdate", "--install-rosetta", "--agree-to-license"],
                app_settings,
                capture_output=True,
                current_logger=context.logger,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            context.warning(f"Rosetta 2 installation failed: {e}")
            return False
    context.success("Rosetta 2 ready")
    return True


def _xcode_installed(context: RunContext) -> bool:
    return command_succeeds(
        ["xcode-select", "-p"], context.app_settings, current_logger=context.logger
    )


def _accept_xcode_license(context: RunContext) -> None:
    try:
        run_elevated_command(
            ["xcodebuild", "-license", "accept"],
            context.app_settings,
            check=False,
            capture_output=True,
            current_logger=context.logger,
        )
    except FileNotFoundError:
        pass


def command_line_tools_label(softwareupdate_output: str) -> Optional[str]:
    """
    Pick the newest "Command Line Tools" product label from
    ``softwareupdate -l`` output.
    """
    label = None
    for line in softwareupdate_output.splitlines():
        if "*" in line and "Command Line" in line:
            label = line[line.index("Command Line"):].strip()
    return label


def install_xcode_cli(
    context: RunContext,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """
    Install the Xcode Command Line Tools.

    ``softwareupdate`` is tried first; when it lists no matching product the
    interactive ``xcode-select --install`` is started and polled for up to
    XCODE_INSTALL_WAIT_SECONDS.
    """
    app_settings = context.app_settings
    context.info("Installing Xcode Command Line Tools...")

    if _xcode_installed(context):
        context.success("Xcode CLI tools already installed")
        _accept_xcode_license(context)
        return True

    label = None
    try:
        XCODE_IN_PROGRESS_MARKER.touch()
        listing = run_command(
            ["softwareupdate", "-l"],
            app_settings,
            check=False,
            capture_output=True,
            current_logger=context.logger,
        )
        label = command_line_tools_label(listing.stdout or "")
    except (OSError, subprocess.SubprocessError) as e:
        context.logger.debug(f"softwareupdate listing unavailable: {e}")

    if label:
        try:
            run_elevated_command(
                ["softwareupdate", "-i", label, "--verbose", "--agree-to-license"],
                app_settings,
                check=False,
                capture_output=True,
                current_logger=context.logger,
            )
        finally:
            XCODE_IN_PROGRESS_MARKER.unlink(missing_ok=True)
    else:
        XCODE_IN_PROGRESS_MARKER.unlink(missing_ok=True)
        command_succeeds(
            ["xcode-select", "--install"], app_settings, current_logger=context.logger
        )
        started = clock()
        while (
            not _xcode_installed(context)
            and clock() - started < static_config.XCODE_INSTALL_WAIT_SECONDS
        ):
            sleep(static_config.XCODE_INSTALL_POLL_SECONDS)

    if _xcode_installed(context):
        _accept_xcode_license(context)
        context.success("Xcode CLI tools installed")
        return True
    context.warning("Xcode CLI tools installation incomplete")
    return False


def find_brew_prefix() -> Optional[Path]:
    """First Homebrew prefix holding a brew executable."""
    for prefix in static_config.HOMEBREW_PREFIXES:
        if (prefix / "bin" / "brew").exists():
            return prefix
    return None


def _prepend_to_path(directory: Path) -> None:
    current = os.environ.get("PATH", "")
    if str(directory) not in current.split(os.pathsep):
        os.environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else str(directory)


def _download_and_run_brew_installer(context: RunContext) -> None:
    app_settings = context.app_settings
    script_path = context.temp_dir / "brew-install.sh"
    script_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        run_command(
            [
                "curl",
                "-fsSL",
                static_config.HOMEBREW_INSTALL_SCRIPT_URL,
                "-o",
                str(script_path),
            ],
            app_settings,
            capture_output=True,
            current_logger=context.logger,
        )
        run_command(
            ["/bin/bash", str(script_path)],
            app_settings,
            capture_output=True,
            current_logger=context.logger,
            env={"NONINTERACTIVE": "1"},
        )
    finally:
        script_path.unlink(missing_ok=True)


def install_homebrew(context: RunContext) -> bool:
    """
    Install or update Homebrew, put it on PATH for this process and the
    user's login shells, and add the academy taps.

    Raises:
        FatalStageError: Homebrew is still unusable afterwards.
    """
    app_settings = context.app_settings
    home = Path(app_settings.home_dir).expanduser()
    context.info("Installing/Updating Homebrew...")

    for variable in ("GIT_ASKPASS", "SSH_ASKPASS"):
        os.environ.pop(variable, None)
    os.environ.update(static_config.HOMEBREW_ENVIRONMENT)

    if command_exists("brew"):
        context.success("Homebrew already installed")
        command_succeeds(
            ["brew", "update", "--force", "--quiet"], app_settings, current_logger=context.logger
        )
        command_succeeds(["brew", "doctor"], app_settings, current_logger=context.logger)
    else:
        context.info("Installing Homebrew...")
        try:
            _download_and_run_brew_installer(context)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise FatalStageError(f"Homebrew installation failed: {e}") from e

    prefix = find_brew_prefix()
    if prefix is not None:
        _prepend_to_path(prefix / "bin")
        add_brew_shellenv(home, prefix, app_settings, context.logger)

    if not command_succeeds(["brew", "--version"], app_settings, current_logger=context.logger):
        raise FatalStageError("Homebrew is not usable")

    backend = HomebrewBackend(app_settings, logger=context.logger)
    for tap_name in HOMEBREW_TAPS:
        if not backend.tap(tap_name):
            context.warning(f"Could not tap {tap_name}")

    context.success("Homebrew ready")
    return True
