"""Bounded polling of asynchronous topic creation."""

from __future__ import annotations

from typing import Any, Optional, Protocol
import logging

from kafka_harness.errors import TopicCreationError

logger = logging.getLogger(__name__)

CONFIRM_ATTEMPTS = 10
CONFIRM_ATTEMPT_TIMEOUT_S = 1.0


class ResultHandle(Protocol):
    """Future-like handle returned by an asynchronous create call."""

    def result(self, timeout: Optional[float] = None) -> Any:
        ...


class TopicCreationConfirmer:
    """
    Turns an asynchronous topic-creation handle into a synchronous result.

    Topic metadata takes a moment to propagate after creation, so the handle
    is polled with a short timeout a bounded number of times. Only the last
    failure is reported; earlier ones are discarded.
    """

    def __init__(
        self,
        attempts: int = CONFIRM_ATTEMPTS,
        attempt_timeout_s: float = CONFIRM_ATTEMPT_TIMEOUT_S,
    ) -> None:
        """Initialize with retry budget and per-attempt timeout."""
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        if attempt_timeout_s <= 0:
            raise ValueError("attempt_timeout_s must be positive")
        self._attempts = attempts
        self._attempt_timeout_s = attempt_timeout_s

    def confirm(self, handle: ResultHandle, topic: str = "") -> None:
        """Block until ``handle`` succeeds or the attempts run out."""
        last_error: Optional[BaseException] = None
        for attempt in range(1, self._attempts + 1):
            try:
                handle.result(timeout=self._attempt_timeout_s)
                return
            except Exception as exc:
                last_error = exc
                logger.debug("topic %s not confirmed (attempt %d/%d): %r", topic, attempt, self._attempts, exc)

        raise TopicCreationError(
            f"Error getting topic info for {topic!r} after {self._attempts} attempts"
        ) from last_error
