"""Factory for creating runners from harness config."""

from kafka_harness.config import RUNTIME_DOCKER, RUNTIME_PROCESS, HarnessConfig
from kafka_harness.errors import ConfigError
from kafka_harness.runners import ContainerRunner, ProcessRunner


class RunnerFactory:
    """
    Factory for creating runners from config.

    Supports a local Kafka distribution and the docker runtime.
    """

    def create(self, config: HarnessConfig):
        """Create runner instance from config."""
        if config.runtime == RUNTIME_PROCESS:
            if not config.kafka_home:
                raise ConfigError("kafka_home (or KAFKA_HOME) is required for the process runtime")
            return ProcessRunner(config.kafka_home)

        if config.runtime == RUNTIME_DOCKER:
            return ContainerRunner(config.image, mounts=[config.log_root])

        raise ConfigError(f"Unsupported runtime: {config.runtime}")
