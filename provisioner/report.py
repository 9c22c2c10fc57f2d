# provisioner/report.py
# -*- coding: utf-8 -*-
"""
Completion report and exit status.

Partial failure is an accepted outcome: any failure count below the major
threshold still exits 0, so that a missing optional tool never blocks a
student from starting the course.
"""

import enum
from typing import List, Optional, Tuple

from common.run_context import PROVISIONING_CATEGORY, VALIDATION_CATEGORY, RunContext
from provisioner.validator import ValidationResult

BOX_WIDTH = 58


class Severity(str, enum.Enum):
    SUCCESS = "success"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


def classify(failures: int, minor_threshold: int = 5, major_threshold: int = 10) -> Severity:
    if failures == 0:
        return Severity.SUCCESS
    if failures < minor_threshold:
        return Severity.SUCCESS_WITH_WARNINGS
    if failures < major_threshold:
        return Severity.COMPLETED_WITH_ERRORS
    return Severity.FAILED


def exit_code_for(failures: int, major_threshold: int = 10) -> int:
    return 0 if failures < major_threshold else 1


def format_duration(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 60}m {total % 60}s"


def _boxed(title: str) -> List[str]:
    return [
        "╔" + "═" * BOX_WIDTH + "╗",
        "║" + title.center(BOX_WIDTH) + "║",
        "╚" + "═" * BOX_WIDTH + "╝",
    ]


def _severity_lines(severity: Severity, context: RunContext) -> List[str]:
    symbols = context.symbols
    if severity is Severity.SUCCESS:
        return [f"{symbols.get('success', '✅')} Perfect installation - all components installed!"]
    if severity is Severity.SUCCESS_WITH_WARNINGS:
        return [f"{symbols.get('success', '✅')} Installation successful with minor warnings"]
    if severity is Severity.COMPLETED_WITH_ERRORS:
        return [
            f"{symbols.get('warning', '⚠️')}  Installation completed with some errors",
            "   Non-critical packages may need manual installation",
        ]
    return [
        f"{symbols.get('warning', '⚠️')}  Installation completed with multiple errors",
        f"   Review: {context.error_log}",
    ]


def summarize(
    context: RunContext,
    validation_result: Optional[ValidationResult],
    restart_needed: bool = False,
    now: Optional[float] = None,
) -> Tuple[str, int]:
    """
    Build the human-readable completion summary and the process exit status.

    Args:
        context: The finished run's context.
        validation_result: Outcome of the validator, or None if it did not run.
        restart_needed: Append the restart notice.
        now: Override the end time (tests).

    Returns:
        (report text, exit code)
    """
    settings = context.app_settings
    thresholds = settings.report
    paths = settings.paths
    failures = context.failure_counter
    severity = classify(failures, thresholds.minor_threshold, thresholds.major_threshold)

    if validation_result is not None:
        validation_line = f"{validation_result.passed}/{validation_result.total} passed"
    else:
        validation_line = "not run"

    lines: List[str] = [""]
    lines += _boxed(f"{settings.academy_name.upper()} - INSTALLATION COMPLETE")
    lines += [
        "",
        "📊 Installation Summary",
        f"├─ Version: {settings.script_version}",
        f"├─ Duration: {format_duration(context.elapsed_seconds(now))}",
        f"├─ Warnings/Errors: {failures}",
        f"│  ├─ Install failures: {context.failures_in(PROVISIONING_CATEGORY)}",
        f"│  └─ Validation failures: {context.failures_in(VALIDATION_CATEGORY)}",
        f"├─ Validation: {validation_line}",
        f"├─ Log location: {context.log_file}",
        f"└─ Error log: {context.error_log}",
        "",
        "📂 Resources",
        f"├─ Academy files: {paths.academy_dir}",
        f"├─ Virtual environment: {paths.venv_dir}",
        f"└─ Activation script: {paths.activate_script}",
        "",
        "🚀 Getting Started",
        "├─ 1. Close and reopen Terminal",
        f"├─ 2. Run: source {paths.activate_script}",
        "├─ 3. Run: jupyter lab",
        "└─ 4. Open: notebooks/00-welcome.ipynb",
        "",
    ]
    if context.fatal_error:
        lines.append(
            f"{context.symbols.get('critical', '🔥')} Provisioning stopped early: {context.fatal_error}"
        )
    if context.interrupted:
        lines.append(
            f"{context.symbols.get('warning', '⚠️')}  Provisioning was interrupted before all stages ran"
        )
    lines += _severity_lines(severity, context)
    lines.append("")
    lines += _boxed(f"Welcome to {settings.academy_name}! 🎓")
    if restart_needed:
        lines += [
            "",
            f"{context.symbols.get('warning', '⚠️')}  RESTART REQUIRED to complete installation",
            "Please restart your Mac when convenient.",
        ]
    lines.append("")

    return "\n".join(lines), exit_code_for(failures, thresholds.major_threshold)
