# common/privilege.py
# -*- coding: utf-8 -*-
"""
Keeps cached sudo credentials fresh for the duration of a run.

Several stages (Homebrew permission repair, Xcode tools, Rosetta) need sudo.
The student is asked for their password once; a background thread then
refreshes the credential timestamp until the run scope ends.
"""

import logging
import os
import threading
from typing import Optional

from common.command_utils import command_exists, command_succeeds, run_command
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


class PrivilegeKeepAlive:
    """
    Periodic ``sudo -n true`` on a daemon thread, stopped via an Event.

    Use as a context manager so that the refresher always stops with the run.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        interval: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.interval = interval if interval is not None else app_settings.keepalive_interval
        self.logger = logger or module_logger
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _needed(self) -> bool:
        return os.geteuid() != 0 and command_exists("sudo")

    def start(self) -> bool:
        """
        Prompt for the password once and start refreshing.

        Returns False (without starting a thread) when sudo is unnecessary,
        missing, or the password prompt fails.
        """
        if self.running:
            return True
        if not self._needed():
            self.logger.debug("Privilege keep-alive not needed.")
            return False

        print("This script requires administrator privileges.")
        print("Please enter your password once to continue:")
        try:
            result = run_command(
                ["sudo", "-v"], self.app_settings, check=False, current_logger=self.logger
            )
        except FileNotFoundError:
            return False
        if result.returncode != 0:
            self.logger.warning("sudo validation failed; elevated steps may prompt again or fail.")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._refresh_loop, name="sudo-keepalive", daemon=True
        )
        self._thread.start()
        return True

    def _refresh_loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            if not command_succeeds(
                ["sudo", "-n", "true"], self.app_settings, current_logger=self.logger
            ):
                self.logger.debug("sudo refresh failed; credential may have expired.")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None

    def __enter__(self) -> "PrivilegeKeepAlive":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
