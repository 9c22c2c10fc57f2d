# provisioner/main_installer.py
# -*- coding: utf-8 -*-
"""
Main entry point for the AI Academy workstation provisioner.

One run: load settings, confirm, take the single-instance lock, keep sudo
alive, execute the stage list, validate, clean up and print the report.
Cleanup runs on every exit path, including interrupts and fatal stages.
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional, Sequence

from pydantic import ValidationError

from common.command_utils import command_exists
from common.core_utils import setup_logging
from common.file_utils import cleanup_directory
from common.lock_manager import LockManager
from common.privilege import PrivilegeKeepAlive
from common.run_context import RunContext
from common.system_utils import restart_required
from configure.python_environment import venv_python
from installer.backends import HomebrewBackend, PipBackend
from provisioner.batch_runner import BatchRunner, Stage
from provisioner.cli_handler import cli_confirm_start
from provisioner.config_loader import load_app_settings
from provisioner.report import summarize
from provisioner.stages import build_stages
from provisioner.validator import ValidationResult, Validator

module_logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Provision a macOS workstation for the AI Academy curriculum.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML file overriding the default settings (default: ./academy.yaml if present).",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Start without the confirmation prompt (unattended runs).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug output from external commands on the console.",
    )
    parser.add_argument(
        "--no-color",
        dest="no_color",
        action="store_true",
        help="Disable coloured console status lines.",
    )
    parser.add_argument(
        "--home",
        default=None,
        help="Home directory of the account to provision (default: current user's).",
    )
    return parser.parse_args(argv)


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt(f"Received signal {signum}")


def purge_caches(context: RunContext) -> None:
    """Drop Homebrew and pip download caches. Best-effort."""
    app_settings = context.app_settings
    if command_exists("brew"):
        HomebrewBackend(app_settings, logger=context.logger).purge_cache()
    python = venv_python(app_settings)
    if python.exists():
        PipBackend(app_settings, python, logger=context.logger).purge_cache()


def cleanup(context: RunContext, lock: Optional[LockManager]) -> None:
    """
    Release the lock, purge caches after a clean run, remove the temp dir.

    A run interrupted before it held the lock leaves both the marker and the
    temp dir alone; they belong to the run that does hold it.
    """
    context.record("debug", "Performing cleanup...")
    if lock is None or not lock.held:
        context.record("debug", "Deployment lock not held; leaving temp dir in place.")
        return
    lock.release()
    if context.failure_counter < context.app_settings.report.minor_threshold:
        purge_caches(context)
    cleanup_directory(
        context.temp_dir, context.app_settings, current_logger=context.logger
    )
    context.success("Cleanup complete")


def run_provisioning(
    context: RunContext,
    stages: Optional[Sequence[Stage]] = None,
    validator: Optional[Validator] = None,
) -> Optional[ValidationResult]:
    """
    Lock, run every stage and validate, always cleaning up afterwards.

    An interrupt (SIGINT, or SIGTERM translated into one) stops the batch,
    is recorded as a failure, and skips validation.

    Returns:
        The validation result, or None if validation did not run.
    """
    app_settings = context.app_settings
    lock = LockManager(
        app_settings.paths.lock_file,
        timeout=app_settings.lock.timeout,
        poll_interval=app_settings.lock.poll_interval,
        logger=context.logger,
    )
    keepalive = PrivilegeKeepAlive(app_settings, logger=context.logger)
    validation_result: Optional[ValidationResult] = None

    previous_sigterm = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        outcome = lock.acquire()
        context.lock = lock
        context.record("debug", f"Deployment lock {outcome.value}: {lock.lock_path}")
        keepalive.start()

        stage_list = stages if stages is not None else build_stages(context)
        BatchRunner(context).run(stage_list)
        validation_result = (validator or Validator(context)).validate()
    except KeyboardInterrupt:
        context.interrupted = True
        context.record_error("Provisioning interrupted; cleaning up.")
    finally:
        keepalive.stop()
        cleanup(context, lock)
        signal.signal(signal.SIGTERM, previous_sigterm)
    return validation_result


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        app_settings = load_app_settings(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    if not cli_confirm_start(app_settings):
        print("Installation cancelled.")
        return 1

    context = RunContext.create(app_settings)
    if args.verbose:
        context.set_console_level(logging.DEBUG)
    setup_logging(
        log_level=logging.DEBUG,
        log_file=str(context.log_file),
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
        use_color=app_settings.use_color and sys.stdout.isatty(),
    )

    with context:
        context.info(
            f"Starting {app_settings.academy_name} deployment v{app_settings.script_version}"
        )
        validation_result = run_provisioning(context)
        report, exit_code = summarize(
            context,
            validation_result,
            restart_needed=restart_required(app_settings, context.logger),
        )
        print(report)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
