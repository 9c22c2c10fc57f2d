# common/retry.py
# -*- coding: utf-8 -*-
"""
Bounded retry with a fixed backoff for external actions.
"""

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from provisioner.config_models import RetrySettings

if TYPE_CHECKING:
    from common.run_context import RunContext

module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Maximum attempt count and inter-attempt delay in seconds."""

    max_attempts: int = 3
    delay: float = 5.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryPolicy":
        return cls(max_attempts=settings.max_attempts, delay=settings.delay)

    def single(self) -> "RetryPolicy":
        """The same policy limited to one attempt."""
        return RetryPolicy(max_attempts=1, delay=self.delay)


def run_with_retry(
    action: Callable[[], bool],
    policy: RetryPolicy,
    context: "RunContext",
    description: str,
    between_attempts: Optional[Callable[[], None]] = None,
    report_exhaustion: bool = True,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Invoke `action` until it reports success, at most `policy.max_attempts` times.

    Args:
        action: The external operation. Its return value is taken as-is as
            the success of the attempt.
        policy: Attempt bound and delay.
        context: Run context used for status and error recording.
        description: Human-readable name of the action for log lines.
        between_attempts: Optional cleanup run after a failed attempt that
            will be retried, before the backoff sleep.
        report_exhaustion: Record a failure on the context when all attempts
            fail. Callers with a further fallback pass False and record the
            outcome themselves.
        sleep: Sleep function, replaceable in tests.

    Returns:
        True on the first successful attempt, False once attempts are exhausted.
    """
    for attempt in range(1, policy.max_attempts + 1):
        context.record(
            "debug", f"Attempt {attempt} of {policy.max_attempts}: {description}"
        )
        if action():
            return True

        context.record(
            "debug",
            f"{description} failed, attempt {attempt} of {policy.max_attempts}",
        )
        if attempt < policy.max_attempts:
            if between_attempts is not None:
                between_attempts()
            context.record("debug", f"Retrying in {policy.delay:g} seconds...")
            sleep(policy.delay)

    if report_exhaustion:
        context.record_error(
            f"{description} failed after {policy.max_attempts} attempts"
        )
    return False
