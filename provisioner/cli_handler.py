# provisioner/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles Command Line Interface (CLI) interactions before a run starts:
the banner and the single confirmation prompt.
"""

import logging
from typing import Callable, Optional

from common.command_utils import log_status
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)

BANNER_WIDTH = 58

DECLINE_ANSWERS = frozenset({"n", "no", "q", "quit"})


def build_banner(app_settings: AppSettings) -> str:
    border = "═" * BANNER_WIDTH
    lines = [
        f"╔{border}╗",
        f"║{(app_settings.academy_name.upper() + ' - MAC SETUP SCRIPT').center(BANNER_WIDTH)}║",
        f"║{('Version ' + app_settings.script_version).center(BANNER_WIDTH)}║",
        f"╚{border}╝",
        "",
        "This script will install:",
        "• Development tools and compilers",
        f"• Python {app_settings.python_version} with AI/ML libraries",
        "• Docker, databases, and cloud tools",
        "• IDEs and productivity applications",
        "",
        "Installation will take 30-60 minutes depending on internet speed.",
        "",
    ]
    return "\n".join(lines)


def cli_confirm_start(
    app_settings: AppSettings,
    current_logger_instance: Optional[logging.Logger] = None,
    input_func: Callable[[str], str] = input,
) -> bool:
    """
    Show the banner and ask the student to confirm the run.

    Enter (or "y") starts the installation, "n" cancels. With
    ``assume_yes`` set the prompt is skipped entirely. End-of-file on
    stdin is treated as a refusal so an unattended run never starts
    without ``--yes``; Ctrl-C at the prompt is a refusal too.

    Returns:
        bool: True to proceed.
    """
    logger_to_use = (
        current_logger_instance if current_logger_instance else module_logger
    )
    symbols = app_settings.symbols
    print(build_banner(app_settings))

    if app_settings.assume_yes:
        log_status(
            f"{symbols.get('info', 'ℹ️')} Confirmation skipped (--yes).",
            "debug",
            logger_to_use,
            app_settings,
        )
        return True

    try:
        answer = (
            input_func("Press Enter to start installation (n to cancel)... ")
            .strip()
            .lower()
        )
    except (EOFError, KeyboardInterrupt) as e:
        reason = "EOF" if isinstance(e, EOFError) else "interrupted"
        print()
        log_status(
            f"{symbols.get('warning', '!')} No user input ({reason}), not starting installation.",
            "warning",
            logger_to_use,
            app_settings,
        )
        return False
    return answer not in DECLINE_ANSWERS
