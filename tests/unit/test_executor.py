r"""Unit tests for the synchronous retry executor."""

from __future__ import annotations

import threading
import time
from unittest.mock import Mock, call

import pytest

from agentretry import (
    CallbackConfig,
    ConfigurationError,
    RetryCancelledError,
    RetryExecutor,
    RetryPolicy,
    TerminalError,
)
from agentretry.callbacks import AttemptInfo, AttemptOutcome
from agentretry.classify import always_retry, never_retry, retry_on

###################################
#     Tests for RetryExecutor     #
###################################


def test_retry_executor_default_policy() -> None:
    executor = RetryExecutor()
    assert executor.policy == RetryPolicy()
    assert executor.callbacks.callbacks == CallbackConfig()


def test_retry_executor_repr() -> None:
    assert repr(RetryExecutor()).startswith("RetryExecutor(policy=RetryPolicy(")


def test_retry_executor_invalid_default_policy() -> None:
    with pytest.raises(ConfigurationError, match=r"policy must be a RetryPolicy"):
        RetryExecutor(policy={"max_attempts": 3})


def test_retry_executor_invalid_call_policy() -> None:
    operation = Mock(return_value="ok")
    with pytest.raises(ConfigurationError, match=r"policy must be a RetryPolicy"):
        RetryExecutor().execute(operation, "op", policy=3)
    operation.assert_not_called()


def test_retry_executor_success_first_attempt(mock_sleep: Mock, policy: RetryPolicy) -> None:
    """Test that a successful operation is invoked exactly once."""
    operation = Mock(return_value={"pick_id": "p-1"})
    assert RetryExecutor(policy).execute(operation, "fetch pick") == {"pick_id": "p-1"}
    operation.assert_called_once_with()
    mock_sleep.assert_not_called()


@pytest.mark.parametrize("max_attempts", [1, 2, 3, 5])
def test_retry_executor_exhausts_attempts(mock_sleep: Mock, max_attempts: int) -> None:
    """Test that an always-failing operation is invoked max_attempts
    times."""
    error = ConnectionError("reset")
    operation = Mock(side_effect=error)
    policy = RetryPolicy(max_attempts=max_attempts, should_retry=always_retry)

    with pytest.raises(TerminalError) as exc_info:
        RetryExecutor(policy).execute(operation, "fetch odds")

    assert operation.call_count == max_attempts
    assert exc_info.value.attempts == max_attempts
    assert exc_info.value.max_attempts == max_attempts
    assert exc_info.value.label == "fetch odds"
    assert exc_info.value.last_error is error
    assert exc_info.value.__cause__ is error
    assert mock_sleep.call_count == max_attempts - 1


def test_retry_executor_long_run_exhausts_with_terminal_error(mock_sleep: Mock) -> None:
    """Test that backoffs past 2**1024 stay clamped over a long run."""
    error = ConnectionError("x")
    operation = Mock(side_effect=error)
    policy = RetryPolicy(
        max_attempts=1100, initial_backoff=0.0, max_backoff=0.001, should_retry=always_retry
    )

    with pytest.raises(TerminalError) as exc_info:
        RetryExecutor(policy).execute(operation, "settle backlog")

    assert operation.call_count == 1100
    assert exc_info.value.attempts == 1100
    assert exc_info.value.last_error is error
    assert mock_sleep.call_count == 1099
    assert all(args == call(0.0) for args in mock_sleep.call_args_list)


def test_retry_executor_long_run_backoff_stays_at_max(mock_sleep: Mock) -> None:
    policy = RetryPolicy(
        max_attempts=1030, initial_backoff=0.5, max_backoff=4.0, should_retry=always_retry
    )

    with pytest.raises(TerminalError):
        RetryExecutor(policy).execute(Mock(side_effect=OSError("down")), "settle backlog")

    delays = [args[0] for args, _ in mock_sleep.call_args_list]
    assert delays[:4] == [0.5, 1.0, 2.0, 4.0]
    assert delays[-1] == 4.0
    assert len(delays) == 1029


def test_retry_executor_non_retryable_error_is_raised_unchanged(mock_sleep: Mock) -> None:
    error = KeyError("pick_id")
    operation = Mock(side_effect=error)
    policy = RetryPolicy(max_attempts=5, should_retry=retry_on(ConnectionError))

    with pytest.raises(KeyError) as exc_info:
        RetryExecutor(policy).execute(operation, "grade pick")

    assert exc_info.value is error
    operation.assert_called_once_with()
    mock_sleep.assert_not_called()


def test_retry_executor_non_retryable_after_retryable(mock_sleep: Mock) -> None:
    error = ValueError("bad row")
    operation = Mock(side_effect=[ConnectionError("reset"), error])
    policy = RetryPolicy(max_attempts=5, should_retry=retry_on(ConnectionError))

    with pytest.raises(ValueError, match=r"bad row"):
        RetryExecutor(policy).execute(operation, "grade pick")

    assert operation.call_count == 2
    mock_sleep.assert_called_once_with(1.0)


def test_retry_executor_backoff_sequence(mock_sleep: Mock) -> None:
    """Test that backoffs grow exponentially and are clamped."""
    operation = Mock(side_effect=OSError("down"))
    policy = RetryPolicy(
        max_attempts=6, initial_backoff=0.1, max_backoff=0.8, should_retry=always_retry
    )

    with pytest.raises(TerminalError):
        RetryExecutor(policy).execute(operation, "ingest feed")

    assert mock_sleep.call_args_list == [call(0.1), call(0.2), call(0.4), call(0.8), call(0.8)]


def test_retry_executor_recovers_mid_retry(mock_sleep: Mock, policy: RetryPolicy) -> None:
    operation = Mock(side_effect=[OSError("a"), OSError("b"), "ok", "unused"])
    assert RetryExecutor(policy).execute(operation, "audit") == "ok"
    assert operation.call_count == 3
    assert mock_sleep.call_args_list == [call(0.1), call(0.2)]


@pytest.mark.parametrize("should_retry", [always_retry, never_retry])
def test_retry_executor_single_attempt_wraps_any_failure(
    mock_sleep: Mock, should_retry: object
) -> None:
    error = RuntimeError("boom")
    operation = Mock(side_effect=error)
    policy = RetryPolicy(max_attempts=1, should_retry=should_retry)

    with pytest.raises(TerminalError) as exc_info:
        RetryExecutor(policy).execute(operation, "onboard user")

    assert exc_info.value.attempts == 1
    assert exc_info.value.max_attempts == 1
    assert exc_info.value.last_error is error
    operation.assert_called_once_with()
    mock_sleep.assert_not_called()


def test_retry_executor_classifies_each_failure_once(mock_sleep: Mock) -> None:
    errors = [OSError("a"), OSError("b"), OSError("c")]
    should_retry = Mock(return_value=True)
    policy = RetryPolicy(max_attempts=3, should_retry=should_retry)

    with pytest.raises(TerminalError):
        RetryExecutor(policy).execute(Mock(side_effect=errors), "op")

    assert should_retry.call_args_list == [call(errors[0]), call(errors[1]), call(errors[2])]


def test_retry_executor_call_policy_overrides_default(mock_sleep: Mock) -> None:
    executor = RetryExecutor(RetryPolicy(max_attempts=5, should_retry=always_retry))
    operation = Mock(side_effect=OSError("down"))

    with pytest.raises(TerminalError) as exc_info:
        executor.execute(operation, "op", RetryPolicy(max_attempts=2, should_retry=always_retry))

    assert exc_info.value.max_attempts == 2
    assert operation.call_count == 2


def test_retry_executor_base_exception_is_not_classified(mock_sleep: Mock) -> None:
    should_retry = Mock(return_value=True)
    operation = Mock(side_effect=KeyboardInterrupt)

    with pytest.raises(KeyboardInterrupt):
        RetryExecutor(RetryPolicy(should_retry=should_retry)).execute(operation, "op")

    should_retry.assert_not_called()
    operation.assert_called_once_with()


def test_retry_executor_predicate_error_propagates(mock_sleep: Mock) -> None:
    def should_retry(error: Exception) -> bool:
        msg = "predicate failed"
        raise RuntimeError(msg)

    with pytest.raises(RuntimeError, match=r"predicate failed"):
        RetryExecutor(RetryPolicy(should_retry=should_retry)).execute(
            Mock(side_effect=OSError("down")), "op"
        )


##########################################
#     Tests for callbacks integration    #
##########################################


def test_retry_executor_callbacks_on_success(mock_sleep: Mock, policy: RetryPolicy) -> None:
    on_attempt, on_retry, on_success, on_failure = Mock(), Mock(), Mock(), Mock()
    executor = RetryExecutor(
        policy,
        CallbackConfig(
            on_attempt=on_attempt, on_retry=on_retry, on_success=on_success, on_failure=on_failure
        ),
    )
    error = OSError("a")

    assert executor.execute(Mock(side_effect=[error, 7]), "score picks") == 7

    assert on_attempt.call_args_list == [
        call(AttemptInfo(label="score picks", attempt=1, max_attempts=3)),
        call(AttemptInfo(label="score picks", attempt=2, max_attempts=3)),
    ]
    on_retry.assert_called_once_with(
        AttemptOutcome(label="score picks", attempt=1, max_attempts=3, error=error, backoff=0.1)
    )
    on_success.assert_called_once()
    success = on_success.call_args.args[0]
    assert success.attempt == 2
    assert success.result == 7
    assert success.total_time >= 0
    on_failure.assert_not_called()


def test_retry_executor_callbacks_on_exhaustion(mock_sleep: Mock, policy: RetryPolicy) -> None:
    on_retry, on_failure = Mock(), Mock()
    executor = RetryExecutor(policy, CallbackConfig(on_retry=on_retry, on_failure=on_failure))

    with pytest.raises(TerminalError) as exc_info:
        executor.execute(Mock(side_effect=OSError("down")), "op")

    assert [c.args[0].backoff for c in on_retry.call_args_list] == [0.1, 0.2]
    on_failure.assert_called_once()
    failure = on_failure.call_args.args[0]
    assert failure.error is exc_info.value
    assert failure.attempt == 3
    assert failure.retryable


def test_retry_executor_callbacks_on_non_retryable(mock_sleep: Mock, mock_callback: Mock) -> None:
    executor = RetryExecutor(
        RetryPolicy(should_retry=never_retry), CallbackConfig(on_failure=mock_callback)
    )
    error = ValueError("invalid odds")

    with pytest.raises(ValueError, match=r"invalid odds"):
        executor.execute(Mock(side_effect=error), "op")

    failure = mock_callback.call_args.args[0]
    assert failure.error is error
    assert not failure.retryable


####################################
#     Tests for cancellation       #
####################################


def test_retry_executor_cancel_event_already_set(policy: RetryPolicy) -> None:
    cancel_event = threading.Event()
    cancel_event.set()
    error = OSError("down")
    operation = Mock(side_effect=error)

    with pytest.raises(RetryCancelledError) as exc_info:
        RetryExecutor(policy).execute(operation, "fetch odds", cancel_event=cancel_event)

    assert not isinstance(exc_info.value, TerminalError)
    assert exc_info.value.attempts == 1
    assert exc_info.value.last_error is error
    operation.assert_called_once_with()


def test_retry_executor_cancel_event_set_during_backoff() -> None:
    cancel_event = threading.Event()
    policy = RetryPolicy(
        max_attempts=3, initial_backoff=10.0, max_backoff=10.0, should_retry=always_retry
    )
    operation = Mock(side_effect=OSError("down"))
    timer = threading.Timer(0.05, cancel_event.set)
    timer.start()
    start = time.monotonic()
    try:
        with pytest.raises(RetryCancelledError):
            RetryExecutor(policy).execute(operation, "op", cancel_event=cancel_event)
    finally:
        timer.cancel()
    assert time.monotonic() - start < 5.0
    operation.assert_called_once_with()


def test_retry_executor_cancel_event_never_set() -> None:
    cancel_event = threading.Event()
    policy = RetryPolicy(
        max_attempts=2, initial_backoff=0.01, max_backoff=0.01, should_retry=always_retry
    )
    operation = Mock(side_effect=[OSError("down"), "ok"])
    assert RetryExecutor(policy).execute(operation, "op", cancel_event=cancel_event) == "ok"


############################
#     Timing scenario      #
############################


def test_retry_executor_real_backoff_timing() -> None:
    """Test three failures with 10ms/100ms backoff bounds take >= 30ms."""
    policy = RetryPolicy(
        max_attempts=3, initial_backoff=0.01, max_backoff=0.1, should_retry=always_retry
    )
    operation = Mock(side_effect=Exception("x"))
    start = time.monotonic()

    with pytest.raises(TerminalError) as exc_info:
        RetryExecutor(policy).execute(operation, "scenario")

    elapsed = time.monotonic() - start
    assert exc_info.value.attempts == 3
    assert exc_info.value.max_attempts == 3
    assert exc_info.value.original_message == "x"
    assert 0.03 <= elapsed < 2.0
