# installer/backends.py
# -*- coding: utf-8 -*-
"""
External installer backends.

Each backend wraps one package manager behind the same two calls,
``exists(name, kind)`` and ``install(name, kind, options)``, both of which
answer with the package manager's own exit status. The package installer
depends on nothing else, so any backend can be swapped for another
package manager.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from common.command_utils import command_succeeds, run_command
from installer.models import InstallOptions, ItemKind
from provisioner import config as static_config
from provisioner.config_models import AppSettings


class BaseInstallerBackend(ABC):
    """
    Base class for package manager backends.

    Subclasses declare the item kinds they serve in ``kinds``.
    """

    kinds: FrozenSet[ItemKind] = frozenset()

    def __init__(
        self,
        app_settings: AppSettings,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def _check_kind(self, kind: ItemKind) -> None:
        if kind not in self.kinds:
            raise ValueError(
                f"{self.__class__.__name__} does not handle {kind.value} items"
            )

    def _succeeds(self, command: List[str], env: Optional[Dict[str, str]] = None) -> bool:
        return command_succeeds(
            command, self.app_settings, current_logger=self.logger, env=env
        )

    @abstractmethod
    def exists(self, name: str, kind: ItemKind) -> bool:
        """Return True if `name` is already installed."""

    @abstractmethod
    def install(self, name: str, kind: ItemKind, options: InstallOptions) -> bool:
        """Install `name`; return True if the package manager reported success."""

    def between_attempts(self, name: str, kind: ItemKind) -> None:
        """Tidy up after a failed install before it is retried."""

    def purge_cache(self) -> bool:
        """Drop downloaded archives. Returns True on success."""
        return True


class HomebrewBackend(BaseInstallerBackend):
    """Homebrew formulae (command-line packages) and casks (GUI applications)."""

    kinds = frozenset({ItemKind.COMMAND_PACKAGE, ItemKind.GUI_APPLICATION})

    def __init__(
        self,
        app_settings: AppSettings,
        brew_executable: str = "brew",
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(app_settings, logger)
        self.brew = brew_executable
        self.env = dict(static_config.HOMEBREW_ENVIRONMENT)

    def exists(self, name: str, kind: ItemKind) -> bool:
        self._check_kind(kind)
        if kind is ItemKind.GUI_APPLICATION:
            return self._succeeds([self.brew, "list", "--cask", name], self.env)
        return self._succeeds([self.brew, "list", name], self.env)

    def install(self, name: str, kind: ItemKind, options: InstallOptions) -> bool:
        self._check_kind(kind)
        if kind is ItemKind.GUI_APPLICATION:
            if options.force:
                command = [self.brew, "reinstall", "--cask", name, "--force"]
            else:
                command = [self.brew, "install", "--cask", name, "--no-quarantine"]
        else:
            command = [self.brew, "install", name, "--quiet"]
            if options.force:
                command.append("--force")
        command.extend(options.extra_args)
        return self._succeeds(command, self.env)

    def between_attempts(self, name: str, kind: ItemKind) -> None:
        if kind is ItemKind.COMMAND_PACKAGE:
            # A half-installed keg blocks the next attempt.
            self._succeeds([self.brew, "unlink", name], self.env)
            self._succeeds([self.brew, "cleanup", name], self.env)

    def tap(self, tap_name: str) -> bool:
        return self._succeeds([self.brew, "tap", tap_name], self.env)

    def purge_cache(self) -> bool:
        return self._succeeds([self.brew, "cleanup", "--prune=all"], self.env)


class PipBackend(BaseInstallerBackend):
    """
    Python packages installed with the pip of a specific interpreter.

    ``exists`` probes importability, so ``name`` is the module name there
    and the distribution name in ``install``.
    """

    kinds = frozenset({ItemKind.LANGUAGE_PACKAGE})

    def __init__(
        self,
        app_settings: AppSettings,
        python_executable: Path,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(app_settings, logger)
        self.python = str(python_executable)

    def exists(self, name: str, kind: ItemKind) -> bool:
        self._check_kind(kind)
        return self._succeeds([self.python, "-c", f"import {name}"])

    def install(self, name: str, kind: ItemKind, options: InstallOptions) -> bool:
        self._check_kind(kind)
        command = [self.python, "-m", "pip", "install", name]
        if options.no_cache:
            command.append("--no-cache-dir")
        if options.no_deps:
            command.append("--no-deps")
        if options.force:
            command.append("--force-reinstall")
        command.extend(options.extra_args)
        return self._succeeds(command)

    def upgrade_tooling(self) -> bool:
        """Upgrade pip, setuptools and wheel in the target interpreter."""
        return self._succeeds(
            [self.python, "-m", "pip", "install", "--upgrade", "pip", "setuptools", "wheel"]
        )

    def purge_cache(self) -> bool:
        return self._succeeds([self.python, "-m", "pip", "cache", "purge"])


class VSCodeExtensionBackend(BaseInstallerBackend):
    """Visual Studio Code extensions via the ``code`` CLI."""

    kinds = frozenset({ItemKind.EDITOR_EXTENSION})

    def __init__(
        self,
        app_settings: AppSettings,
        code_executable: str = "code",
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(app_settings, logger)
        self.code = code_executable

    def installed_extensions(self) -> FrozenSet[str]:
        try:
            result = run_command(
                [self.code, "--list-extensions"],
                self.app_settings,
                check=False,
                capture_output=True,
                current_logger=self.logger,
            )
        except (OSError, subprocess.TimeoutExpired):
            return frozenset()
        if result.returncode != 0 or not result.stdout:
            return frozenset()
        return frozenset(
            line.strip().lower() for line in result.stdout.splitlines() if line.strip()
        )

    def exists(self, name: str, kind: ItemKind) -> bool:
        self._check_kind(kind)
        return name.lower() in self.installed_extensions()

    def install(self, name: str, kind: ItemKind, options: InstallOptions) -> bool:
        self._check_kind(kind)
        command = [self.code, "--install-extension", name]
        if options.force:
            command.append("--force")
        command.extend(options.extra_args)
        return self._succeeds(command)
