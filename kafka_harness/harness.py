"""Embedded single-node Kafka facade for integration tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union
import logging
import tempfile

from kafka_harness.admin import AdminClient
from kafka_harness.broker import BrokerProcess
from kafka_harness.broker_config import BrokerConfigBuilder
from kafka_harness.config import HarnessConfig, load_config
from kafka_harness.errors import ConfigError, HarnessStartupError, HarnessStoppedError
from kafka_harness.health import ComponentState
from kafka_harness.network import HOST, BrokerIdentity, allocate_port_triple
from kafka_harness.producer import ProducerClient
from kafka_harness.runner_factory import RunnerFactory
from kafka_harness.zookeeper import CoordinationService

logger = logging.getLogger(__name__)


class EmbeddedKafka:
    """
    One ZooKeeper and one Kafka broker owned by a test.

    Responsibilities:
    - Allocate ports and start ZooKeeper, then the broker, then a producer
    - Produce records and manage topics against the running broker
    - Stop everything in reverse order

    Construction blocks until the broker accepts connections. Use it as a
    context manager, or call ``stop()`` exactly once when done.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, object]] = None,
        config: Optional[HarnessConfig] = None,
        runner=None,
    ) -> None:
        """Start the harness; raises ``HarnessStartupError`` on failure."""
        try:
            self._config = (config or load_config()).with_overrides(overrides)
            self._runner = runner or RunnerFactory().create(self._config)
        except ConfigError as exc:
            raise HarnessStartupError(f"Embedded Kafka is misconfigured: {exc}") from exc
        self._identity = BrokerIdentity(host=HOST, ports=allocate_port_triple())
        self._work_dir = self._make_work_dir(self._config.log_root)
        self._zookeeper = CoordinationService(
            self._identity, self._runner, self._work_dir, self._config.startup_timeout_s
        )
        self._broker = BrokerProcess(self._identity, self._runner, self._work_dir, self._config.startup_timeout_s)
        self._producer: Optional[ProducerClient] = None
        self._admin: Optional[AdminClient] = None
        self._broker_config: Dict[str, str] = {}
        self._stopped = False

        self._start()

    def _start(self) -> None:
        """Start all components in dependency order."""
        logger.info("embedded_kafka starting (work dir %s)", self._work_dir)
        try:
            self._zookeeper.start()
            builder = BrokerConfigBuilder(self._config.tls, self._config.log_root)
            self._broker_config = builder.build(
                self._zookeeper.connect_string,
                self._identity,
                self._config.overrides,
            )
            self._broker.start(self._broker_config)
            self._producer = ProducerClient(
                self._identity.bootstrap_address,
                connect_timeout_s=self._config.startup_timeout_s,
            )
        except Exception as exc:
            self._abort_startup()
            if isinstance(exc, HarnessStartupError):
                raise
            raise HarnessStartupError(f"Embedded Kafka failed to start: {exc}") from exc

        logger.info("embedded_kafka ready at %s", self._identity.bootstrap_address)

    @staticmethod
    def _make_work_dir(log_root: str) -> Path:
        """Create the scratch dir for properties files and ZooKeeper data."""
        try:
            Path(log_root).mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix="kafka_harness-", dir=log_root))
        except OSError as exc:
            raise HarnessStartupError(f"Unable to create work dir under {log_root}: {exc}") from exc

    def _abort_startup(self) -> None:
        logger.error("embedded_kafka startup failed, tearing down")
        self._stopped = True
        for step in (self._broker.shutdown, self._zookeeper.stop):
            try:
                step()
            except Exception as exc:
                logger.warning("teardown step failed: %s", exc)

    def stop(self) -> None:
        """Stop producer, admin session, broker and ZooKeeper, in that order.

        A second call is a no-op.
        """
        if self._stopped:
            logger.debug("embedded_kafka already stopped")
            return
        self._stopped = True
        logger.info("embedded_kafka stopping")

        steps = []
        if self._producer is not None:
            steps.append(self._producer.close)
        if self._admin is not None:
            steps.append(self._admin.close)
        steps.extend([self._broker.shutdown, self._zookeeper.stop])

        first_error: Optional[Exception] = None
        for step in steps:
            try:
                step()
            except Exception as exc:
                logger.warning("teardown step failed: %s", exc)
                if first_error is None:
                    first_error = exc

        self._producer = None
        self._admin = None
        logger.info("embedded_kafka stopped")
        if first_error is not None:
            raise first_error

    def __enter__(self) -> EmbeddedKafka:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def identity(self) -> BrokerIdentity:
        return self._identity

    @property
    def broker_config(self) -> Dict[str, str]:
        return dict(self._broker_config)

    @property
    def log_dir(self) -> str:
        return self._broker_config["log.dir"]

    def coordination_connect_string(self) -> str:
        return self._zookeeper.connect_string

    def bootstrap_address(self) -> str:
        return self._identity.bootstrap_address

    def bootstrap_tls_address(self) -> str:
        return self._identity.bootstrap_tls_address

    def bootstrap_tls_loopback_address(self) -> str:
        return self._identity.bootstrap_tls_loopback_address

    def produce(
        self,
        topic: str,
        key: Optional[str],
        value: Union[str, bytes],
        partition: Optional[int] = None,
    ) -> None:
        """Send one record and wait for the acknowledgement."""
        self._ensure_running()
        self._producer.send(topic, key, value, partition)

    def create_topic(self, name: str, partitions: int) -> None:
        """Create a topic with replication factor 1 and confirm it."""
        self._admin_client().create_topic(name, partitions)

    def delete_topics(self, names: Iterable[str]) -> None:
        """Request topic deletion; the outcome is not awaited."""
        self._admin_client().delete_topics(names)

    def health(self) -> Dict[str, object]:
        """Return aggregated health for ZooKeeper and the broker."""
        coordination = self._zookeeper.health()
        broker = self._broker.health()
        if self._stopped:
            status = ComponentState.STOPPED.value
        elif coordination["status"] == broker["status"] == ComponentState.HEALTHY.value:
            status = ComponentState.HEALTHY.value
        else:
            status = ComponentState.FAILED.value

        return {
            "status": status,
            "coordination": coordination,
            "broker": broker,
        }

    def _admin_client(self) -> AdminClient:
        self._ensure_running()
        if self._admin is None:
            self._admin = AdminClient(self._identity.bootstrap_address)
        return self._admin

    def _ensure_running(self) -> None:
        if self._stopped:
            raise HarnessStoppedError("Embedded Kafka has been stopped")
