# configure/python_environment.py
# -*- coding: utf-8 -*-
"""
The academy's Python toolchain: system python3 and pip, the virtual
environment, Jupyter extensions and kernel, and the activation helper.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional

from common.command_utils import command_exists, command_succeeds, run_command
from common.file_utils import cleanup_directory, write_text_file
from common.run_context import RunContext
from configure.templates import academy_variables, render
from installer.backends import HomebrewBackend, PipBackend
from installer.catalogs import JUPYTER_NBEXTENSIONS
from installer.models import InstallOptions, ItemKind
from provisioner import config as static_config
from provisioner.batch_runner import FatalStageError
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def venv_bin(app_settings: AppSettings, executable: str) -> Path:
    return app_settings.paths.venv_dir / "bin" / executable


def venv_python(app_settings: AppSettings) -> Path:
    return venv_bin(app_settings, "python")


def jupyter_locations(app_settings: AppSettings) -> List[Path]:
    """Places a jupyter executable is commonly found, in search order."""
    home = Path(app_settings.home_dir).expanduser()
    return [
        venv_bin(app_settings, "jupyter"),
        home / ".local" / "bin" / "jupyter",
        Path("/usr/local/bin/jupyter"),
        Path("/opt/homebrew/bin/jupyter"),
    ]


def _ensure_python3(context: RunContext) -> str:
    app_settings = context.app_settings
    python3 = shutil.which("python3")
    if python3:
        return python3

    context.warning("Python3 not found. Installing via Homebrew...")
    if command_exists("brew"):
        HomebrewBackend(app_settings, logger=context.logger).install(
            f"python@{app_settings.python_version}",
            ItemKind.COMMAND_PACKAGE,
            InstallOptions(),
        )
    python3 = shutil.which("python3")
    if not python3:
        raise FatalStageError("No usable python3 interpreter")
    return python3


def venv_is_healthy(context: RunContext) -> bool:
    """True if the academy venv's interpreter exists and starts."""
    python = venv_python(context.app_settings)
    return python.exists() and command_succeeds(
        [str(python), "-c", "import sys"],
        context.app_settings,
        current_logger=context.logger,
    )


def setup_python_environment(context: RunContext) -> bool:
    """
    Ensure python3 and pip, then make sure the academy virtual environment
    exists with current packaging tools.

    A working venv is kept so packages installed by an earlier run stay
    present; a missing or broken one is (re)created.

    Raises:
        FatalStageError: No interpreter, or the virtualenv could not be built.
            Every later Python stage depends on it.
    """
    app_settings = context.app_settings
    venv_dir = app_settings.paths.venv_dir
    context.info("Setting up Python AI/ML environment...")

    python3 = _ensure_python3(context)
    context.record("debug", f"Using Python: {python3}")

    context.info("Ensuring pip is properly installed...")
    command_succeeds(
        [python3, "-m", "ensurepip", "--default-pip"], app_settings, current_logger=context.logger
    )
    if not command_succeeds(
        [python3, "-m", "pip", "--version"], app_settings, current_logger=context.logger
    ):
        context.warning("pip is unavailable for the system python3")
    else:
        command_succeeds(
            [python3, "-m", "pip", "install", "--upgrade", "--user", "pip", "setuptools", "wheel"],
            app_settings,
            current_logger=context.logger,
        )

    if venv_is_healthy(context):
        context.info(f"Reusing virtual environment at {venv_dir}")
    else:
        context.info(f"Creating virtual environment at {venv_dir}...")
        if venv_dir.exists():
            context.warning("Virtual environment is broken, recreating...")
            if not cleanup_directory(venv_dir, app_settings, current_logger=context.logger):
                raise FatalStageError(f"Could not remove old virtual environment {venv_dir}")

        if not command_succeeds(
            [python3, "-m", "venv", str(venv_dir)], app_settings, current_logger=context.logger
        ):
            raise FatalStageError(f"Could not create virtual environment {venv_dir}")

    if not PipBackend(app_settings, venv_python(app_settings), logger=context.logger).upgrade_tooling():
        context.warning("Could not upgrade pip/setuptools/wheel in the virtual environment")

    context.success("Python virtual environment ready")
    return True


def configure_jupyter(context: RunContext) -> bool:
    """
    Enable the classic notebook extensions and register the academy kernel.

    Extension problems are warnings; a missing kernel is a failure.
    """
    app_settings = context.app_settings
    jupyter = str(venv_bin(app_settings, "jupyter"))
    context.info("Setting up Jupyter extensions...")

    if not command_succeeds(
        [jupyter, "contrib", "nbextension", "install", "--user"],
        app_settings,
        current_logger=context.logger,
    ):
        context.warning("Could not install Jupyter contrib extensions")
    for extension in JUPYTER_NBEXTENSIONS:
        if not command_succeeds(
            [jupyter, "nbextension", "enable", extension],
            app_settings,
            current_logger=context.logger,
        ):
            context.warning(f"Could not enable nbextension {extension}")

    if not command_succeeds(
        [
            str(venv_python(app_settings)),
            "-m",
            "ipykernel",
            "install",
            "--user",
            "--name",
            static_config.KERNEL_NAME,
            "--display-name",
            static_config.KERNEL_DISPLAY_NAME,
        ],
        app_settings,
        current_logger=context.logger,
    ):
        context.warning("Jupyter kernel registration failed")
        return False

    context.success("Jupyter kernel registered")
    return True


def write_activation_script(context: RunContext) -> bool:
    """~/activate-academy.sh: activates the venv and extends PYTHONPATH."""
    app_settings = context.app_settings
    write_text_file(
        app_settings.paths.activate_script,
        render("activate_script", academy_variables(app_settings)),
        executable=True,
        app_settings=app_settings,
        current_logger=context.logger,
    )
    context.success("Python environment configured")
    return True


def find_jupyter(app_settings: AppSettings) -> Optional[Path]:
    for location in jupyter_locations(app_settings):
        if location.is_file():
            return location
    return None


def ensure_jupyter_works(context: RunContext) -> bool:
    """
    Make ``jupyter`` resolvable for the rest of this run, prepending the
    directory of the first known install to PATH when needed.
    """
    app_settings = context.app_settings
    context.info("Ensuring Jupyter is properly installed...")

    if not command_exists("jupyter"):
        context.warning("Jupyter not in PATH, fixing...")
        location = find_jupyter(app_settings)
        if location is not None:
            context.info(f"Found Jupyter at: {location}")
            os.environ["PATH"] = f"{location.parent}{os.pathsep}{os.environ.get('PATH', '')}"

    if command_exists("jupyter"):
        result = run_command(
            ["jupyter", "--version"],
            app_settings,
            check=False,
            capture_output=True,
            current_logger=context.logger,
        )
        if result.stdout:
            context.record("debug", result.stdout.strip())
        context.success("Jupyter is working")
    else:
        context.warning("Jupyter needs manual configuration")
    return True
