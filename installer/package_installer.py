# installer/package_installer.py
# -*- coding: utf-8 -*-
"""
Idempotent single-item installation.

ensure_installed() checks whether an item is already present, installs it
through the retry executor otherwise, and applies a kind-specific fallback
when every attempt fails:

- language packages get one more try without dependency resolution,
- GUI applications get one more try as a forced reinstall,
- other kinds have no fallback.

Nonfatal failures stop here: they become a FAILED_NONFATAL result plus an
error record on the run context, never an exception.
"""

import logging
from typing import Dict, Mapping, Optional

from common.retry import RetryPolicy, run_with_retry
from common.run_context import RunContext
from installer.backends import BaseInstallerBackend
from installer.models import (
    InstallItem,
    InstallOptions,
    InstallOutcome,
    ItemKind,
    StepResult,
)

module_logger = logging.getLogger(__name__)

_KIND_LABELS: Dict[ItemKind, str] = {
    ItemKind.COMMAND_PACKAGE: "package",
    ItemKind.GUI_APPLICATION: "application",
    ItemKind.LANGUAGE_PACKAGE: "Python package",
    ItemKind.EDITOR_EXTENSION: "extension",
}


class PackageInstaller:
    """Ensures InstallItems are present using one backend per item kind."""

    def __init__(
        self,
        backends: Mapping[ItemKind, BaseInstallerBackend],
        context: RunContext,
        policy: Optional[RetryPolicy] = None,
        sleep=None,
    ):
        self.backends = dict(backends)
        self.context = context
        self.policy = policy or RetryPolicy.from_settings(
            context.app_settings.retry
        )
        self._sleep_kwargs = {"sleep": sleep} if sleep is not None else {}

    def _backend_for(self, item: InstallItem) -> BaseInstallerBackend:
        try:
            return self.backends[item.kind]
        except KeyError:
            raise KeyError(f"No installer backend registered for {item.kind.value}")

    def _attempt(
        self,
        backend: BaseInstallerBackend,
        item: InstallItem,
        options: InstallOptions,
        policy: RetryPolicy,
        description: str,
    ) -> bool:
        return run_with_retry(
            lambda: backend.install(item.name, item.kind, options),
            policy,
            self.context,
            description,
            between_attempts=lambda: backend.between_attempts(item.name, item.kind),
            report_exhaustion=False,
            **self._sleep_kwargs,
        )

    def _degraded_options(self, item: InstallItem) -> Optional[InstallOptions]:
        if item.kind is ItemKind.LANGUAGE_PACKAGE and not item.options.no_deps:
            return item.options.relaxed()
        if item.kind is ItemKind.GUI_APPLICATION and not item.options.force:
            return item.options.forced()
        return None

    def install_outcome(self, item: InstallItem) -> InstallOutcome:
        """Like ensure_installed, but also reports whether a fallback was needed."""
        backend = self._backend_for(item)
        label = _KIND_LABELS.get(item.kind, item.kind.value)

        if backend.exists(item.probe_name, item.kind):
            self.context.record("debug", f"{item.name} already installed")
            return InstallOutcome(item, StepResult.ALREADY_PRESENT)

        self.context.record("debug", f"Installing {label} {item.name}...")
        if self._attempt(
            backend, item, item.options, self.policy, f"Install {item.name}"
        ):
            self.context.success(f"{item.name} installed")
            return InstallOutcome(item, StepResult.INSTALLED)

        degraded = self._degraded_options(item)
        if degraded is not None:
            variant = "without dependencies" if degraded.no_deps else "with forced reinstall"
            self.context.warning(f"Failed: {item.name}, trying {variant}...")
            if self._attempt(
                backend,
                item,
                degraded,
                self.policy.single(),
                f"Install {item.name} {variant}",
            ):
                self.context.success(f"{item.name} installed ({variant})")
                return InstallOutcome(item, StepResult.INSTALLED, degraded=True)

        self.context.record_error(f"Failed to install {label} {item.name} (non-critical)")
        return InstallOutcome(item, StepResult.FAILED_NONFATAL)

    def ensure_installed(self, item: InstallItem) -> StepResult:
        """Make sure `item` is installed; never raises for install failures."""
        return self.install_outcome(item).result
