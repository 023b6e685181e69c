"""
Fixtures for tests against a real broker.

Skipped unless KAFKA_HOME points at a Kafka distribution or a docker daemon
is reachable. The SSL listener is only enabled when the default keystore
exists in the working directory.
"""

import os
from pathlib import Path

import pytest

from kafka_harness import EmbeddedKafka, HarnessConfig, TlsMaterial
from kafka_harness.config import RUNTIME_DOCKER, RUNTIME_PROCESS


def _docker_available() -> bool:
    try:
        import docker
    except ModuleNotFoundError:
        return False
    try:
        docker.from_env().ping()
    except Exception:
        return False
    return True


@pytest.fixture(scope="session")
def harness_config(tmp_path_factory) -> HarnessConfig:
    kafka_home = os.getenv("KAFKA_HOME")
    if kafka_home:
        runtime = RUNTIME_PROCESS
    elif _docker_available():
        runtime = RUNTIME_DOCKER
    else:
        pytest.skip("needs KAFKA_HOME or a docker daemon")

    tls = TlsMaterial()
    tls_enabled = Path(tls.keystore_location).exists() and Path(tls.truststore_location).exists()
    return HarnessConfig(
        runtime=runtime,
        kafka_home=kafka_home,
        tls=TlsMaterial(enabled=tls_enabled),
        log_root=str(tmp_path_factory.mktemp("kafka")),
        startup_timeout_s=120,
    )


@pytest.fixture(scope="module")
def kafka(harness_config):
    with EmbeddedKafka({"delete.topic.enable": "true"}, config=harness_config) as harness:
        yield harness
