# configure/shell_profile.py
# -*- coding: utf-8 -*-
"""
User-level configuration: git defaults, shell aliases and PYTHONPATH,
Jupyter notebook config, the desktop launcher and the `brew shellenv`
lines in login profiles.

Every profile edit is guarded by a marker string so re-running the
provisioner never duplicates a block.
"""

import logging
from pathlib import Path
from typing import List, Optional

from common.command_utils import command_exists, command_succeeds, get_symbols, log_status
from common.file_utils import append_block_if_missing, write_text_file
from common.run_context import RunContext
from configure.templates import academy_variables, render
from provisioner import config as static_config
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)

GIT_GLOBAL_SETTINGS = (
    ("init.defaultBranch", "main"),
    ("core.autocrlf", "input"),
    ("pull.rebase", "false"),
)

DESKTOP_LAUNCHER_NAME = "Start AI Academy.command"


def shell_rc_path(home_dir: Path) -> Path:
    """~/.zshrc when it exists, otherwise ~/.bash_profile."""
    zshrc = Path(home_dir) / ".zshrc"
    return zshrc if zshrc.is_file() else Path(home_dir) / ".bash_profile"


def add_brew_shellenv(
    home_dir: Path,
    brew_prefix: Path,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> List[Path]:
    """
    Append the `brew shellenv` line to each login profile lacking one.

    Returns:
        The profiles that were modified.
    """
    logger_to_use = current_logger if current_logger else module_logger
    line = render("brew_shellenv", {"brew_prefix": brew_prefix})
    changed = []
    for profile_name in static_config.LOGIN_PROFILES:
        profile = Path(home_dir) / profile_name
        try:
            if append_block_if_missing(
                profile,
                static_config.BREW_SHELLENV_MARKER,
                line,
                app_settings,
                logger_to_use,
            ):
                changed.append(profile)
        except OSError as e:
            symbols = get_symbols(app_settings)
            log_status(
                f"{symbols.get('warning', '!')} Could not update {profile}: {e}",
                "warning",
                logger_to_use,
                app_settings,
            )
    return changed


def configure_git(context: RunContext) -> bool:
    """Set the academy's global git defaults. Missing git is only a warning."""
    if not command_exists("git"):
        context.warning("git not found; skipping git configuration")
        return True
    for key, value in GIT_GLOBAL_SETTINGS:
        if not command_succeeds(
            ["git", "config", "--global", key, value],
            context.app_settings,
            current_logger=context.logger,
        ):
            context.warning(f"Could not set git {key}")
    return True


def configure_shell(context: RunContext) -> bool:
    """Academy aliases and the scripts PYTHONPATH entry in the shell rc file."""
    app_settings = context.app_settings
    paths = app_settings.paths
    variables = academy_variables(app_settings)
    rc_file = shell_rc_path(Path(app_settings.home_dir).expanduser())

    append_block_if_missing(
        rc_file,
        static_config.ALIAS_MARKER,
        "\n" + render("shell_aliases", variables),
        app_settings,
        context.logger,
    )
    append_block_if_missing(
        rc_file,
        str(paths.academy_dir / "scripts"),
        render("pythonpath_export", variables),
        app_settings,
        context.logger,
    )
    return True


def write_jupyter_config(context: RunContext) -> Path:
    app_settings = context.app_settings
    config_path = (
        Path(app_settings.home_dir).expanduser() / ".jupyter" / "jupyter_notebook_config.py"
    )
    return write_text_file(
        config_path,
        render("jupyter_config", academy_variables(app_settings)),
        app_settings=app_settings,
        current_logger=context.logger,
    )


def configure_system(context: RunContext) -> bool:
    """Git, shell profile and Jupyter configuration."""
    context.info("Configuring system settings...")
    configure_git(context)
    configure_shell(context)
    write_jupyter_config(context)
    context.success("System configured")
    return True


def create_desktop_shortcut(context: RunContext) -> bool:
    """Executable ``Start AI Academy.command`` on the Desktop, if there is one."""
    app_settings = context.app_settings
    desktop = Path(app_settings.home_dir).expanduser() / "Desktop"
    if not desktop.is_dir():
        context.record("debug", f"No Desktop directory at {desktop}; skipping shortcut")
        return True
    context.info("Creating desktop shortcuts...")
    write_text_file(
        desktop / DESKTOP_LAUNCHER_NAME,
        render("desktop_launcher", academy_variables(app_settings)),
        executable=True,
        app_settings=app_settings,
        current_logger=context.logger,
    )
    context.success("Desktop shortcut created")
    return True
