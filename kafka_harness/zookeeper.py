"""ZooKeeper coordination service used by the embedded broker."""

from __future__ import annotations

from pathlib import Path
from typing import Dict
import logging

from kafka_harness.errors import HarnessStartupError
from kafka_harness.health import ComponentState
from kafka_harness.network import LOOPBACK_IP, BrokerIdentity, can_connect, wait_for_port
from kafka_harness.properties import write_properties
from kafka_harness.runners import stop_quietly

logger = logging.getLogger(__name__)


class CoordinationService:
    """
    Single-node ZooKeeper bound to an allocated client port.

    Started before the broker and stopped after it.
    """

    def __init__(self, identity: BrokerIdentity, runner, work_dir: Path, startup_timeout_s: float = 60.0) -> None:
        """Initialize with the harness identity, runner and scratch directory."""
        self._identity = identity
        self._port = identity.ports.coordination
        self._runner = runner
        self._work_dir = Path(work_dir)
        self._startup_timeout_s = startup_timeout_s
        self._handle = None

    @property
    def connect_string(self) -> str:
        return self._identity.coordination_address

    def start(self) -> None:
        """Start ZooKeeper and block until the client port accepts connections."""
        data_dir = self._work_dir / "zookeeper"
        data_dir.mkdir(parents=True, exist_ok=True)
        properties = write_properties(
            self._work_dir / "zookeeper.properties",
            {
                "dataDir": str(data_dir),
                "clientPort": str(self._port),
                "maxClientCnxns": "0",
                "admin.enableServer": "false",
            },
        )

        self._handle = self._runner.launch("zookeeper", "zookeeper-server-start", properties)
        if not wait_for_port(LOOPBACK_IP, self._port, self._startup_timeout_s, alive=self._handle.alive):
            output = self._handle.tail()
            stop_quietly(self._handle)
            self._handle = None
            raise HarnessStartupError(f"ZooKeeper not reachable at {self.connect_string}\n{output}")

        logger.info("zookeeper ready at %s", self.connect_string)

    def stop(self) -> None:
        """Stop ZooKeeper."""
        if self._handle is None:
            return None
        handle, self._handle = self._handle, None
        handle.stop()
        logger.info("zookeeper stopped")

    def health(self) -> Dict[str, object]:
        """Return ZooKeeper health status."""
        if self._handle is None:
            return {"status": ComponentState.STOPPED.value, "connect": self.connect_string, "reachable": False}

        reachable = can_connect(LOOPBACK_IP, self._port)
        return {
            "status": ComponentState.HEALTHY.value if reachable else ComponentState.FAILED.value,
            "connect": self.connect_string,
            "reachable": reachable,
        }
