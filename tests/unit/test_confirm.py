from concurrent.futures import Future
from typing import List, Optional

import pytest

from kafka_harness.confirm import CONFIRM_ATTEMPT_TIMEOUT_S, CONFIRM_ATTEMPTS, TopicCreationConfirmer
from kafka_harness.errors import TopicCreationError


class ScriptedHandle:
    """Fails every poll until ``succeed_on``; each failure is a distinct error."""

    def __init__(self, succeed_on: Optional[int] = None) -> None:
        self.succeed_on = succeed_on
        self.timeouts: List[float] = []
        self.errors: List[Exception] = []

    def result(self, timeout=None):
        self.timeouts.append(timeout)
        if len(self.timeouts) == self.succeed_on:
            return None
        error = TimeoutError(f"poll {len(self.timeouts)}")
        self.errors.append(error)
        raise error


def test_policy_constants():
    assert CONFIRM_ATTEMPTS == 10
    assert CONFIRM_ATTEMPT_TIMEOUT_S == 1.0


def test_succeeds_on_seventh_poll():
    handle = ScriptedHandle(succeed_on=7)

    TopicCreationConfirmer().confirm(handle, "t1")

    assert len(handle.timeouts) == 7
    assert set(handle.timeouts) == {CONFIRM_ATTEMPT_TIMEOUT_S}


def test_first_poll_success_short_circuits():
    handle = ScriptedHandle(succeed_on=1)

    TopicCreationConfirmer().confirm(handle, "t1")

    assert len(handle.timeouts) == 1


def test_never_succeeds_raises_last_error():
    handle = ScriptedHandle()

    with pytest.raises(TopicCreationError) as exc_info:
        TopicCreationConfirmer().confirm(handle, "t1")

    assert len(handle.timeouts) == 10
    assert exc_info.value.__cause__ is handle.errors[-1]
    assert exc_info.value.__cause__ is not handle.errors[0]
    assert "t1" in str(exc_info.value)


def test_failed_future_is_not_retried_into_success():
    future: Future = Future()
    conflict = RuntimeError("TopicAlreadyExistsError")
    future.set_exception(conflict)

    with pytest.raises(TopicCreationError) as exc_info:
        TopicCreationConfirmer(attempts=3, attempt_timeout_s=0.01).confirm(future, "dup")

    assert exc_info.value.__cause__ is conflict


def test_completed_future_confirms():
    future: Future = Future()
    future.set_result({"t1": None})

    TopicCreationConfirmer(attempt_timeout_s=0.01).confirm(future, "t1")


@pytest.mark.parametrize("attempts, timeout", [(0, 1.0), (3, 0), (3, -1.0)])
def test_rejects_invalid_policy(attempts, timeout):
    with pytest.raises(ValueError):
        TopicCreationConfirmer(attempts=attempts, attempt_timeout_s=timeout)
