"""Custom exceptions for the Kafka test harness."""


class HarnessError(Exception):
    """Base class for harness failures."""


class ConfigError(HarnessError):
    """Raised when harness config is invalid or missing."""


class PortProbeError(HarnessError):
    """Raised when the OS cannot supply a free port."""


class HarnessStartupError(HarnessError):
    """Raised when ZooKeeper, the broker or the producer fails to start."""


class HarnessStoppedError(HarnessError):
    """Raised when an operation is attempted on a stopped harness."""


class SendError(HarnessError):
    """Raised when a produce call is not acknowledged by the broker."""


class TopicCreationError(HarnessError):
    """Raised when topic creation cannot be confirmed."""
