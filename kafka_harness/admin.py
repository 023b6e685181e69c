"""Lazily created admin session for topic management."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Optional, Union
import logging
import threading

from kafka.admin import KafkaAdminClient, NewTopic

from kafka_harness.confirm import TopicCreationConfirmer

logger = logging.getLogger(__name__)

ADMIN_CLIENT_ID = "group_1"
REPLICATION_FACTOR = 1


class AdminClient:
    """
    Topic administration against the broker's plaintext listener.

    The underlying ``KafkaAdminClient`` is created on first use and cached.
    Admin requests run on one worker thread, so each call returns a future
    and requests reach the broker in call order.
    """

    def __init__(self, bootstrap_address: str, confirmer: Optional[TopicCreationConfirmer] = None) -> None:
        """Initialize with bootstrap address; no connection is made yet."""
        self._bootstrap = bootstrap_address
        self._confirmer = confirmer or TopicCreationConfirmer()
        self._client: Optional[KafkaAdminClient] = None
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kafka-harness-admin")

    def create_topic(self, name: str, partitions: int) -> None:
        """Create a topic and wait for the broker to confirm it."""
        topic = NewTopic(name=name, num_partitions=partitions, replication_factor=REPLICATION_FACTOR)
        # Session setup happens on the worker so its errors reach the confirmer.
        handle = self._executor.submit(lambda: self._admin_client().create_topics([topic]))
        self._confirmer.confirm(handle, name)
        logger.info("created topic %s with %d partitions", name, partitions)

    def delete_topics(self, names: Union[str, Iterable[str]]) -> Future:
        """Request deletion of ``names`` without waiting for the outcome.

        A single topic name may be passed as a plain string.
        """
        topics = [names] if isinstance(names, str) else list(names)
        handle = self._executor.submit(lambda: self._admin_client().delete_topics(topics))
        handle.add_done_callback(lambda done: self._log_delete_outcome(topics, done))
        return handle

    def close(self) -> None:
        """Drain pending requests and close the admin session."""
        self._executor.shutdown(wait=True)
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()

    def _admin_client(self) -> KafkaAdminClient:
        with self._lock:
            if self._client is None:
                self._client = KafkaAdminClient(
                    bootstrap_servers=self._bootstrap,
                    client_id=ADMIN_CLIENT_ID,
                )
            return self._client

    @staticmethod
    def _log_delete_outcome(topics: list, done: Future) -> None:
        exc = done.exception()
        if exc is not None:
            logger.warning("delete of topics %s failed: %s", topics, exc)
