"""Broker process for the embedded single-node Kafka."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping
import logging

from kafka_harness.errors import HarnessStartupError
from kafka_harness.health import ComponentState
from kafka_harness.network import BrokerIdentity, can_connect, wait_for_port
from kafka_harness.properties import write_properties
from kafka_harness.runners import stop_quietly

logger = logging.getLogger(__name__)


class BrokerProcess:
    """
    Manages the Kafka broker lifecycle.

    - Start the broker from a rendered config map
    - Block until the plaintext listener accepts connections
    - Shut the broker down
    """

    def __init__(
        self,
        identity: BrokerIdentity,
        runner,
        work_dir: Path,
        startup_timeout_s: float = 60.0,
    ) -> None:
        """Initialize with broker identity, runner and scratch directory."""
        self._identity = identity
        self._runner = runner
        self._work_dir = Path(work_dir)
        self._startup_timeout_s = startup_timeout_s
        self._handle = None

    def start(self, config: Mapping[str, str]) -> None:
        """Start the broker and wait for its plaintext listener."""
        properties = write_properties(self._work_dir / "server.properties", config)
        try:
            self._handle = self._runner.launch("kafka", "kafka-server-start", properties)
        except HarnessStartupError:
            raise
        except Exception as exc:
            raise HarnessStartupError(f"Kafka broker failed to launch: {exc}") from exc

        host, port = self._identity.host, self._identity.ports.plaintext
        if not wait_for_port(host, port, self._startup_timeout_s, alive=self._handle.alive):
            output = self._handle.tail()
            stop_quietly(self._handle)
            self._handle = None
            raise HarnessStartupError(f"Kafka not reachable at {self._identity.bootstrap_address}\n{output}")

        logger.info("kafka broker ready at %s", self._identity.bootstrap_address)

    def shutdown(self) -> None:
        """Stop the broker."""
        if self._handle is None:
            return None
        handle, self._handle = self._handle, None
        handle.stop()
        logger.info("kafka broker stopped")

    def health(self) -> Dict[str, object]:
        """Return broker health status."""
        bootstrap = self._identity.bootstrap_address
        if self._handle is None:
            return {"status": ComponentState.STOPPED.value, "bootstrap": bootstrap, "reachable": False}

        reachable = can_connect(self._identity.host, self._identity.ports.plaintext)
        return {
            "status": ComponentState.HEALTHY.value if reachable else ComponentState.FAILED.value,
            "bootstrap": bootstrap,
            "reachable": reachable,
        }
