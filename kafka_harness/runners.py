"""Runners that launch Kafka start scripts as subprocesses or containers."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional
import logging
import os
import subprocess
import tempfile
import uuid

from kafka_harness.errors import HarnessStartupError

logger = logging.getLogger(__name__)

STOP_TIMEOUT_S = 10


class ProcessHandle:
    """A start script running as a child process."""

    def __init__(self, name: str, process: subprocess.Popen, output_path: Path) -> None:
        self.name = name
        self._process = process
        self._output_path = output_path

    def alive(self) -> bool:
        return self._process.poll() is None

    def stop(self, timeout_s: float = STOP_TIMEOUT_S) -> None:
        """Terminate the process, killing it if it does not exit in time."""
        if not self.alive():
            return
        self._process.terminate()
        try:
            self._process.wait(timeout=timeout_s)
        except subprocess.TimeoutExpired:
            logger.warning("%s did not stop within %ss, killing it", self.name, timeout_s)
            self._process.kill()
            self._process.wait()

    def tail(self, lines: int = 40) -> str:
        """Return the last lines the process wrote."""
        try:
            text = self._output_path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return ""
        return "\n".join(text.splitlines()[-lines:])


class ProcessRunner:
    """
    Runs scripts from a local Kafka distribution.

    ``kafka_home`` must contain ``bin/kafka-server-start.sh`` and
    ``bin/zookeeper-server-start.sh``.
    """

    def __init__(self, kafka_home: str) -> None:
        """Initialize with the Kafka installation directory."""
        self._kafka_home = Path(kafka_home)

    def launch(self, name: str, script: str, properties_path: Path) -> ProcessHandle:
        """Start ``script`` against a properties file."""
        script_path = self._kafka_home / "bin" / f"{script}.sh"
        if not script_path.exists():
            raise HarnessStartupError(f"Kafka script not found: {script_path}")

        output_path = properties_path.parent / f"{name}.out"
        with open(output_path, "wb") as output:
            try:
                process = subprocess.Popen(
                    [str(script_path), str(properties_path)],
                    stdout=output,
                    stderr=subprocess.STDOUT,
                    stdin=subprocess.DEVNULL,
                )
            except OSError as exc:
                raise HarnessStartupError(f"Unable to launch {script_path}: {exc}") from exc

        logger.info("runner started %s as pid %s", name, process.pid)
        return ProcessHandle(name, process, output_path)


class ContainerHandle:
    """A start script running inside a docker container."""

    def __init__(self, name: str, container) -> None:
        self.name = name
        self._container = container

    def alive(self) -> bool:
        try:
            self._container.reload()
        except Exception:
            return False
        return self._container.status in ("created", "running")

    def stop(self, timeout_s: float = STOP_TIMEOUT_S) -> None:
        """Stop and remove the container."""
        try:
            self._container.stop(timeout=int(timeout_s))
            self._container.remove()
        except Exception as exc:
            logger.warning("failed to remove container %s: %s", self.name, exc)

    def tail(self, lines: int = 40) -> str:
        try:
            return self._container.logs(tail=lines).decode("utf-8", errors="replace")
        except Exception:
            return ""


class ContainerRunner:
    """
    Runs Kafka start scripts inside a Confluent Platform image.

    Containers use host networking so the ports allocated on the host are
    the ports the services bind. The working directory and the temp root are
    mounted at their host paths so relative and temp paths in the rendered
    properties resolve the same way inside the container.
    """

    def __init__(self, image: str, client=None, mounts: Iterable[str] = ()) -> None:
        """Initialize with image name, optional docker client and extra host dirs to mount."""
        self._image = image
        self._client = client
        self._mounts = list(mounts)
        self._token = uuid.uuid4().hex[:8]

    def launch(self, name: str, script: str, properties_path: Path) -> ContainerHandle:
        """Start ``script`` in a detached container."""
        client = self._docker_client()
        container_name = self._container_name(name)
        labels = {
            "app": "kafka_harness",
            "component": name,
        }

        try:
            container = client.containers.run(
                image=self._image,
                name=container_name,
                command=[script, str(properties_path)],
                detach=True,
                network_mode="host",
                user=f"{os.getuid()}:{os.getgid()}",
                working_dir=os.getcwd(),
                volumes=self._volumes(properties_path),
                labels=labels,
            )
        except Exception as exc:
            raise HarnessStartupError(f"Unable to start container {container_name}: {exc}") from exc

        logger.info("runner started %s as container %s", name, container_name)
        return ContainerHandle(name, container)

    def _docker_client(self):
        if self._client is None:
            try:
                import docker  # type: ignore
            except ModuleNotFoundError as exc:
                raise HarnessStartupError("docker SDK is required for the docker runtime") from exc

            try:
                self._client = docker.from_env()
            except docker.errors.DockerException as exc:
                raise HarnessStartupError(f"docker daemon is not reachable: {exc}") from exc
        return self._client

    def _container_name(self, name: str) -> str:
        return f"kafka-harness-{name}-{self._token}"

    def _volumes(self, properties_path: Path) -> Dict[str, Dict[str, str]]:
        mounts: List[str] = [os.getcwd(), tempfile.gettempdir(), str(properties_path.parent), *self._mounts]
        volumes: Dict[str, Dict[str, str]] = {}
        for path in mounts:
            volumes.setdefault(path, {"bind": path, "mode": "rw"})
        return volumes


def stop_quietly(handle: Optional[object], timeout_s: float = STOP_TIMEOUT_S) -> None:
    """Stop a handle during error cleanup, logging instead of raising."""
    if handle is None:
        return
    try:
        handle.stop(timeout_s)
    except Exception as exc:
        logger.warning("cleanup of %s failed: %s", getattr(handle, "name", handle), exc)
