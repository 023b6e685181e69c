from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple
from unittest.mock import MagicMock

import pytest

from kafka_harness.config import HarnessConfig, TlsMaterial


class FakeRunner:
    """Records launches and hands back mock handles."""

    def __init__(self) -> None:
        self.launched: List[Tuple[str, str, Path]] = []
        self.handles: Dict[str, MagicMock] = {}
        self.fail_on: Dict[str, Exception] = {}

    def launch(self, name: str, script: str, properties_path: Path) -> MagicMock:
        if name in self.fail_on:
            raise self.fail_on[name]
        handle = MagicMock()
        handle.name = name
        handle.alive.return_value = True
        handle.tail.return_value = f"{name} output"
        self.launched.append((name, script, properties_path))
        self.handles[name] = handle
        return handle


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def harness_config(tmp_path) -> HarnessConfig:
    return HarnessConfig(
        tls=TlsMaterial(keystore_location="ks.jks", truststore_location="ts.jks"),
        log_root=str(tmp_path / "logs"),
        startup_timeout_s=1.0,
    )
