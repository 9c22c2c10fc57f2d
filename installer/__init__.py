"""
Package installation framework.

This package provides the installer backends (Homebrew, pip, VS Code),
the idempotent package installer and the static package catalogs used to
provision an AI Academy workstation.
"""

from installer.models import InstallItem, ItemKind, StepResult
from installer.package_installer import PackageInstaller

__all__ = ["InstallItem", "ItemKind", "PackageInstaller", "StepResult"]
