from unittest.mock import MagicMock

import pytest

from common.retry import RetryPolicy, run_with_retry
from provisioner.config_models import RetrySettings


class TestRetryPolicy:
    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            RetryPolicy(delay=-1)

    def test_from_settings(self):
        policy = RetryPolicy.from_settings(RetrySettings(max_attempts=4, delay=2))
        assert policy == RetryPolicy(max_attempts=4, delay=2)

    def test_single(self):
        assert RetryPolicy(max_attempts=3, delay=5).single() == RetryPolicy(1, 5)


@pytest.mark.parametrize("max_attempts", [1, 2, 3, 5])
def test_always_failing_action_is_bounded(run_context, max_attempts):
    """N attempts and N-1 sleeps, then a single recorded failure."""
    action = MagicMock(return_value=False)
    sleep = MagicMock()
    policy = RetryPolicy(max_attempts=max_attempts, delay=5)

    assert run_with_retry(action, policy, run_context, "Install wget", sleep=sleep) is False

    assert action.call_count == max_attempts
    assert sleep.call_count == max_attempts - 1
    assert all(call.args == (5,) for call in sleep.call_args_list)
    assert run_context.failure_counter == 1


def test_first_success_stops_retrying(run_context):
    action = MagicMock(side_effect=[False, True, True])
    sleep = MagicMock()

    assert run_with_retry(action, RetryPolicy(3, 5), run_context, "Install git", sleep=sleep) is True
    assert action.call_count == 2
    sleep.assert_called_once_with(5)
    assert run_context.failure_counter == 0


def test_between_attempts_runs_only_before_a_retry(run_context):
    action = MagicMock(return_value=False)
    hook = MagicMock()

    run_with_retry(
        action,
        RetryPolicy(3, 0),
        run_context,
        "Install gcc",
        between_attempts=hook,
        sleep=MagicMock(),
    )

    assert hook.call_count == 2


def test_exhaustion_can_be_left_to_the_caller(run_context):
    run_with_retry(
        MagicMock(return_value=False),
        RetryPolicy(2, 0),
        run_context,
        "Install torch",
        report_exhaustion=False,
        sleep=MagicMock(),
    )
    assert run_context.failure_counter == 0
