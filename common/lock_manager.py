# common/lock_manager.py
# -*- coding: utf-8 -*-
"""
Single-instance lock for provisioning runs.

The lock is a marker file at a well-known path. A second run waits for the
marker to disappear, polling at a fixed interval; once the timeout has
elapsed the marker is treated as stale (left behind by a crashed run) and
reclaimed. Availability wins over strict exclusion.
"""

import enum
import logging
import os
import time
from pathlib import Path
from typing import Callable, Optional

module_logger = logging.getLogger(__name__)


class LockOutcome(str, enum.Enum):
    """How a lock was obtained."""

    ACQUIRED = "acquired"
    ACQUIRED_AFTER_WAIT = "acquired_after_wait"
    STOLEN = "stolen"


class LockManager:
    """
    Advisory mutual exclusion through a marker file.

    Usable as a context manager: entering acquires with the configured
    timeout, leaving always releases.
    """

    def __init__(
        self,
        lock_path: Path,
        timeout: float = 60.0,
        poll_interval: float = 5.0,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.lock_path = Path(lock_path)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.logger = logger or module_logger
        self._clock = clock
        self._sleep = sleep
        self.held = False
        self.outcome: Optional[LockOutcome] = None

    def _try_create(self) -> bool:
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(
                str(self.lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644
            )
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as marker:
            marker.write(f"pid={os.getpid()}\ncreated={time.time():.0f}\n")
        return True

    def acquire(self, timeout: Optional[float] = None) -> LockOutcome:
        """
        Take the lock, waiting up to `timeout` seconds for a current holder.

        Returns:
            LockOutcome.ACQUIRED if no marker existed,
            LockOutcome.ACQUIRED_AFTER_WAIT if the holder released in time,
            LockOutcome.STOLEN if the marker was reclaimed after the timeout.
        """
        wait_limit = self.timeout if timeout is None else timeout

        if self._try_create():
            self.held = True
            self.outcome = LockOutcome.ACQUIRED
            self.logger.debug(f"Lock acquired: {self.lock_path}")
            return self.outcome

        self.logger.info(
            f"Another deployment is running (lock {self.lock_path}). Waiting up to {wait_limit:g}s..."
        )
        started = self._clock()
        while self._clock() - started < wait_limit:
            self._sleep(self.poll_interval)
            if not self.lock_path.exists() and self._try_create():
                self.held = True
                self.outcome = LockOutcome.ACQUIRED_AFTER_WAIT
                self.logger.info("Previous deployment finished; lock acquired.")
                return self.outcome

        self.logger.warning(
            f"Lock {self.lock_path} still present after {wait_limit:g}s; reclaiming stale lock."
        )
        self.lock_path.unlink(missing_ok=True)
        if not self._try_create():
            # Lost a race with another waiter; take it over regardless.
            self.lock_path.unlink(missing_ok=True)
            self._try_create()
        self.held = True
        self.outcome = LockOutcome.STOLEN
        return self.outcome

    def release(self) -> None:
        """Remove the marker unconditionally."""
        try:
            self.lock_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Could not remove lock {self.lock_path}: {e}")
        self.held = False
        self.logger.debug(f"Lock released: {self.lock_path}")

    def __enter__(self) -> "LockManager":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
