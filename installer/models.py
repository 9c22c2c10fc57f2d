# installer/models.py
# -*- coding: utf-8 -*-
"""
Data types shared by the package installer, its backends and the batch runner.
"""

import enum
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple


class ItemKind(str, enum.Enum):
    """What sort of thing an InstallItem is, which selects its backend."""

    COMMAND_PACKAGE = "command_package"
    GUI_APPLICATION = "gui_application"
    LANGUAGE_PACKAGE = "language_package"
    EDITOR_EXTENSION = "editor_extension"


class StepResult(str, enum.Enum):
    """Outcome of attempting one InstallItem."""

    ALREADY_PRESENT = "already_present"
    INSTALLED = "installed"
    FAILED_NONFATAL = "failed_nonfatal"

    @property
    def succeeded(self) -> bool:
        return self is not StepResult.FAILED_NONFATAL


@dataclass(frozen=True)
class InstallOptions:
    """
    Backend flags for one install call.

    no_cache: skip the package manager's download cache (pip --no-cache-dir).
    no_deps: do not resolve transitive dependencies (pip --no-deps).
    force: overwrite an existing or broken install (brew reinstall --force).
    """

    no_cache: bool = False
    no_deps: bool = False
    force: bool = False
    extra_args: Tuple[str, ...] = ()

    def relaxed(self) -> "InstallOptions":
        return replace(self, no_deps=True)

    def forced(self) -> "InstallOptions":
        return replace(self, force=True)


@dataclass(frozen=True)
class InstallItem:
    """One named thing to install, tagged by kind."""

    kind: ItemKind
    name: str
    options: InstallOptions = field(default_factory=InstallOptions)
    # Module probed for language packages when it differs from the distribution name.
    import_name: Optional[str] = None
    description: str = ""

    @property
    def probe_name(self) -> str:
        if self.import_name:
            return self.import_name
        if self.kind is ItemKind.LANGUAGE_PACKAGE:
            return self.name.replace("-", "_").lower()
        return self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class InstallOutcome:
    """A StepResult together with the item it belongs to."""

    item: InstallItem
    result: StepResult
    degraded: bool = False
