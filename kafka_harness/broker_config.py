"""Synthesis of the broker's ``server.properties``."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional
import logging
import shutil
import uuid

from kafka_harness.config import TlsMaterial, merge_overrides
from kafka_harness.network import BrokerIdentity

logger = logging.getLogger(__name__)

BROKER_ID = "1"
LOG_DIR_PREFIX = "broker_log-"


class BrokerConfigBuilder:
    """
    Builds the broker config from allocated ports and caller overrides.

    Every build picks a fresh, uniquely named log directory under
    ``log_root``.
    """

    def __init__(self, tls: TlsMaterial, log_root: str) -> None:
        """Initialize with TLS material and the parent of log directories."""
        self._tls = tls
        self._log_root = Path(log_root)

    def build(
        self,
        connect_string: str,
        identity: BrokerIdentity,
        overrides: Optional[Mapping[str, object]] = None,
    ) -> Dict[str, str]:
        """Return the broker config; ``overrides`` win on key collision."""
        log_dir = self._log_root / f"{LOG_DIR_PREFIX}{uuid.uuid4().hex}"

        props: Dict[str, str] = {
            "zookeeper.connect": connect_string,
            "broker.id": BROKER_ID,
            "host.name": "localhost",
            "listeners": self._listeners(identity),
            "log.dir": str(log_dir.resolve()),
            "offsets.topic.replication.factor": "1",
            "auto.create.topics.enable": "false",
        }
        if self._tls.enabled:
            props.update(self._tls.as_broker_properties())

        props = merge_overrides(props, overrides)
        delete_stale_log_dir(Path(props["log.dir"]))
        return props

    def _listeners(self, identity: BrokerIdentity) -> str:
        listeners = f"PLAINTEXT://{identity.bootstrap_address}"
        if self._tls.enabled:
            listeners += f",SSL://{identity.bootstrap_tls_address}"
        return listeners


def delete_stale_log_dir(path: Path) -> None:
    """Remove a leftover log directory; failures are logged, not raised."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
        logger.info("removed stale broker log dir %s", path)
    except OSError as exc:
        logger.warning("unable to remove stale broker log dir %s: %s", path, exc)
