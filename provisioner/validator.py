# provisioner/validator.py
# -*- coding: utf-8 -*-
"""
Post-run health check.

The validation targets are a strict subset of the install targets: only
what the rest of the curriculum depends on is enforced, while best-effort
extras (most GUI applications, the long tail of Python packages) are not.
"""

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from common.command_utils import command_exists, command_succeeds
from common.run_context import VALIDATION_CATEGORY, RunContext
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


class CheckKind(str, enum.Enum):
    COMMAND = "command"
    DIRECTORY = "directory"
    IMPORTABLE = "importable"


@dataclass
class ValidationCheck:
    """A named, side-effect-free probe."""

    name: str
    kind: CheckKind
    probe: Callable[[], bool]
    passed: Optional[bool] = None


@dataclass
class ValidationResult:
    passed: int = 0
    total: int = 0
    checks: List[ValidationCheck] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total

    @property
    def failed(self) -> int:
        return self.total - self.passed

    def __iter__(self):
        # Allows `passed, total = validator.validate()`.
        yield self.passed
        yield self.total


def command_check(command: str) -> ValidationCheck:
    return ValidationCheck(command, CheckKind.COMMAND, lambda: command_exists(command))


def directory_check(label: str, path: Path) -> ValidationCheck:
    return ValidationCheck(label, CheckKind.DIRECTORY, lambda: Path(path).is_dir())


def import_check(
    module: str, python_executable: Path, app_settings: Optional[AppSettings] = None
) -> ValidationCheck:
    return ValidationCheck(
        module,
        CheckKind.IMPORTABLE,
        lambda: Path(python_executable).exists()
        and command_succeeds(
            [str(python_executable), "-c", f"import {module}"], app_settings
        ),
    )


def default_checks(app_settings: AppSettings) -> List[ValidationCheck]:
    """Commands, workspace directories and critical packages for the academy."""
    paths = app_settings.paths
    venv_python = paths.venv_dir / "bin" / "python"
    checks = [command_check(command) for command in app_settings.validation_commands]
    checks.append(directory_check("Virtual environment", paths.venv_dir))
    checks.append(directory_check("Academy resources", paths.academy_dir))
    checks.extend(
        import_check(module, venv_python, app_settings)
        for module in app_settings.critical_packages
    )
    return checks


class Validator:
    """Runs independent checks and tallies how many pass."""

    def __init__(self, context: RunContext, checks: Optional[List[ValidationCheck]] = None):
        self.context = context
        self.checks = (
            checks if checks is not None else default_checks(context.app_settings)
        )

    def _run_check(self, check: ValidationCheck) -> bool:
        try:
            return bool(check.probe())
        except Exception as e:
            module_logger.debug(f"Check '{check.name}' raised: {e}", exc_info=True)
            return False

    def validate(self) -> ValidationResult:
        self.context.info("Validating installation...")
        result = ValidationResult()
        for check in self.checks:
            result.total += 1
            check.passed = self._run_check(check)
            result.checks.append(check)
            if check.passed:
                result.passed += 1
                self.context.success(f"{check.name} ✓")
            else:
                self.context.record_error(f"{check.name} ✗", category=VALIDATION_CATEGORY)

        self.context.info(f"Validation: {result.passed}/{result.total} passed")
        if result.all_passed:
            self.context.success("All validations passed!")
        else:
            self.context.warning("Some validations failed. Check logs for details.")
        return result
