"""Synchronous producer bound to the broker's plaintext listener."""

from __future__ import annotations

from typing import Optional, Union
import logging
import time

from kafka import KafkaProducer
from kafka.errors import KafkaError, NoBrokersAvailable

from kafka_harness.errors import HarnessStartupError, SendError

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
DEFAULT_SEND_TIMEOUT_S = 30.0
DEFAULT_CONNECT_TIMEOUT_S = 30.0
CONNECT_RETRY_INTERVAL_S = 0.5


def _encode(value: Optional[Union[str, bytes]]) -> Optional[bytes]:
    if value is None or isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode(ENCODING)
    raise TypeError(f"expected str or bytes, got {type(value).__name__}")


class ProducerClient:
    """
    Sends records and waits for the partition leader's acknowledgement.

    Keys are strings, values are bytes; string values are encoded as UTF-8.
    """

    def __init__(
        self,
        bootstrap_address: str,
        send_timeout_s: float = DEFAULT_SEND_TIMEOUT_S,
        connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    ) -> None:
        """Connect a producer to ``bootstrap_address``.

        A freshly started broker may accept connections before it serves
        requests, so ``NoBrokersAvailable`` is retried until
        ``connect_timeout_s`` elapses.
        """
        self._send_timeout_s = send_timeout_s
        self._producer = self._connect(bootstrap_address, connect_timeout_s)

    @staticmethod
    def _connect(bootstrap_address: str, connect_timeout_s: float) -> KafkaProducer:
        deadline = time.time() + connect_timeout_s
        while True:
            try:
                return KafkaProducer(
                    bootstrap_servers=bootstrap_address,
                    acks=1,
                    key_serializer=_encode,
                )
            except NoBrokersAvailable as exc:
                if time.time() >= deadline:
                    raise HarnessStartupError(
                        f"Unable to connect producer to {bootstrap_address}: {exc}"
                    ) from exc
                logger.debug("broker at %s not serving yet, retrying", bootstrap_address)
                time.sleep(CONNECT_RETRY_INTERVAL_S)
            except KafkaError as exc:
                raise HarnessStartupError(f"Unable to connect producer to {bootstrap_address}: {exc}") from exc

    def send(
        self,
        topic: str,
        key: Optional[str],
        value: Union[str, bytes],
        partition: Optional[int] = None,
    ) -> None:
        """Send one record and block until it is acknowledged.

        Without ``partition`` the record is placed by key hash. A value that
        is neither ``str`` nor ``bytes`` raises ``TypeError``; a partition
        the topic does not have raises ``SendError``.
        """
        payload = _encode(value)
        try:
            if partition is not None:
                known = self._producer.partitions_for(topic) or set()
                if partition not in known:
                    raise SendError(f"Topic {topic} has no partition {partition}")
            future = self._producer.send(topic, key=key, value=payload, partition=partition)
            future.get(timeout=self._send_timeout_s)
        except KafkaError as exc:
            raise SendError(f"Failed to send record to {topic}: {exc}") from exc

    def close(self) -> None:
        """Flush and close the producer."""
        self._producer.close()
