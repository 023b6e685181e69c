"""Embedded single-node Kafka harness for integration tests."""

__all__ = [
    "EmbeddedKafka",
    "AdminClient",
    "ProducerClient",
    "BrokerProcess",
    "CoordinationService",
    "BrokerConfigBuilder",
    "TopicCreationConfirmer",
    "RunnerFactory",
    "ConfigRepository",
    "HarnessConfig",
    "TlsMaterial",
    "BrokerIdentity",
    "PortTriple",
    "ComponentState",
    "HarnessError",
    "ConfigError",
    "PortProbeError",
    "HarnessStartupError",
    "HarnessStoppedError",
    "SendError",
    "TopicCreationError",
]

from kafka_harness.harness import EmbeddedKafka
from kafka_harness.admin import AdminClient
from kafka_harness.producer import ProducerClient
from kafka_harness.broker import BrokerProcess
from kafka_harness.zookeeper import CoordinationService
from kafka_harness.broker_config import BrokerConfigBuilder
from kafka_harness.confirm import TopicCreationConfirmer
from kafka_harness.runner_factory import RunnerFactory
from kafka_harness.config import ConfigRepository, HarnessConfig, TlsMaterial
from kafka_harness.network import BrokerIdentity, PortTriple
from kafka_harness.health import ComponentState
from kafka_harness.errors import (
    ConfigError,
    HarnessError,
    HarnessStartupError,
    HarnessStoppedError,
    PortProbeError,
    SendError,
    TopicCreationError,
)
