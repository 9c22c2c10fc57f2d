# provisioner/stages.py
# -*- coding: utf-8 -*-
"""
The academy's ordered stage list.

Order matters: permissions and toolchains first, Homebrew packages before
the Python environment that uses them, the virtualenv before anything
installed into it, and the workspace before the shell profile that points
at it.
"""

import logging
from typing import Dict, List, Optional

from common.command_utils import command_exists
from common.run_context import RunContext
from common.system_utils import get_machine_architecture
from configure import python_environment, shell_profile, system_prep, workspace
from installer import catalogs
from installer.backends import (
    BaseInstallerBackend,
    HomebrewBackend,
    PipBackend,
    VSCodeExtensionBackend,
)
from installer.models import ItemKind
from installer.package_installer import PackageInstaller
from provisioner.batch_runner import ActionStage, PackageStage, Stage

module_logger = logging.getLogger(__name__)


def default_backends(context: RunContext) -> Dict[ItemKind, BaseInstallerBackend]:
    """One backend per item kind, all logging to the run's session log."""
    app_settings = context.app_settings
    homebrew = HomebrewBackend(app_settings, logger=context.logger)
    return {
        ItemKind.COMMAND_PACKAGE: homebrew,
        ItemKind.GUI_APPLICATION: homebrew,
        ItemKind.LANGUAGE_PACKAGE: PipBackend(
            app_settings,
            python_environment.venv_python(app_settings),
            logger=context.logger,
        ),
        ItemKind.EDITOR_EXTENSION: VSCodeExtensionBackend(
            app_settings, logger=context.logger
        ),
    }


def build_stages(
    context: RunContext,
    installer: Optional[PackageInstaller] = None,
    architecture: Optional[str] = None,
) -> List[Stage]:
    """
    Assemble the full provisioning sequence.

    Args:
        context: The run context every stage reports to.
        installer: Package installer to use; built from default_backends()
            when omitted.
        architecture: Machine architecture for package filtering; detected
            when omitted.
    """
    app_settings = context.app_settings
    if installer is None:
        installer = PackageInstaller(default_backends(context), context)
    if architecture is None:
        architecture = get_machine_architecture()

    return [
        ActionStage("Permission repair", action=system_prep.fix_permissions),
        ActionStage("System requirements", action=system_prep.check_system_requirements),
        ActionStage("Rosetta 2", action=system_prep.ensure_rosetta),
        ActionStage("Xcode Command Line Tools", action=system_prep.install_xcode_cli),
        ActionStage("Homebrew", action=system_prep.install_homebrew, fatal=True),
        ActionStage("Permission repair (post-toolchain)", action=system_prep.fix_permissions),
        PackageStage(
            "Homebrew packages",
            items=catalogs.command_packages(app_settings),
            installer=installer,
        ),
        PackageStage(
            "GUI applications",
            items=catalogs.gui_applications(),
            installer=installer,
        ),
        ActionStage(
            "Python environment",
            action=python_environment.setup_python_environment,
            fatal=True,
        ),
        PackageStage(
            "Python packages",
            items=catalogs.language_packages(architecture),
            installer=installer,
        ),
        PackageStage(
            "Jupyter extensions",
            items=catalogs.jupyter_packages(),
            installer=installer,
        ),
        ActionStage("Jupyter configuration", action=python_environment.configure_jupyter),
        ActionStage("Activation script", action=python_environment.write_activation_script),
        ActionStage("Jupyter PATH check", action=python_environment.ensure_jupyter_works),
        ActionStage("Academy workspace", action=workspace.create_workspace),
        PackageStage(
            "VS Code extensions",
            items=catalogs.editor_extensions(),
            installer=installer,
            precondition=lambda: command_exists("code"),
            skip_message="VS Code CLI not found, skipping extensions",
        ),
        ActionStage("System configuration", action=shell_profile.configure_system),
        ActionStage("Desktop shortcut", action=shell_profile.create_desktop_shortcut),
    ]
