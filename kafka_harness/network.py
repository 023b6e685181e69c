"""Port allocation and listener probing for the harness."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
import socket
import time

from kafka_harness.errors import PortProbeError

LOOPBACK_IP = "127.0.0.1"


def _loopback_host_name() -> str:
    """Resolve the canonical host name of the loopback address."""
    try:
        return socket.gethostbyaddr(LOOPBACK_IP)[0]
    except OSError:
        return "localhost"


HOST = _loopback_host_name()


@dataclass(frozen=True)
class PortTriple:
    """Ports for ZooKeeper and the two broker listeners."""

    coordination: int
    plaintext: int
    tls: int


@dataclass(frozen=True)
class BrokerIdentity:
    """Host name and ports a harness instance is bound to."""

    host: str
    ports: PortTriple

    @property
    def bootstrap_address(self) -> str:
        return f"{self.host}:{self.ports.plaintext}"

    @property
    def bootstrap_tls_address(self) -> str:
        return f"{self.host}:{self.ports.tls}"

    @property
    def bootstrap_tls_loopback_address(self) -> str:
        return f"{LOOPBACK_IP}:{self.ports.tls}"

    @property
    def coordination_address(self) -> str:
        return f"{LOOPBACK_IP}:{self.ports.coordination}"


def allocate_free_port(timeout_s: float = 1.0) -> int:
    """
    Return a port that is free at the instant of probing.

    Binds a transient socket to port 0 and releases it immediately. Another
    process may grab the port before the dependent service binds it.
    """
    end_time = time.time() + timeout_s
    while True:
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.bind((LOOPBACK_IP, 0))
                return sock.getsockname()[1]
        except OSError as exc:
            if time.time() >= end_time:
                raise PortProbeError("Can not find free port") from exc
            time.sleep(0.05)


def allocate_port_triple() -> PortTriple:
    """Probe three ports, one after another."""
    return PortTriple(
        coordination=allocate_free_port(),
        plaintext=allocate_free_port(),
        tls=allocate_free_port(),
    )


def can_connect(host: str, port: int) -> bool:
    """Attempt a TCP connection to host:port."""
    try:
        with socket.create_connection((host, port), timeout=1):
            return True
    except OSError:
        return False


def wait_for_port(
    host: str,
    port: int,
    timeout_s: float,
    alive: Optional[Callable[[], bool]] = None,
) -> bool:
    """Check if host:port becomes reachable within timeout.

    Gives up early when ``alive`` reports that the listening workload exited.
    """
    end_time = time.time() + timeout_s
    while time.time() < end_time:
        if can_connect(host, port):
            return True
        if alive is not None and not alive():
            return False
        time.sleep(0.2)
    return False
