"""Health states reported by harness components."""

from enum import Enum


class ComponentState(str, Enum):
    """Health state for the broker and ZooKeeper."""

    HEALTHY = "healthy"
    FAILED = "failed"
    STOPPED = "stopped"
