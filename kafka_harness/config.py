"""Harness configuration models and repository."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional
import json
import os
import tempfile

import jsonschema

from kafka_harness.errors import ConfigError

RUNTIME_PROCESS = "process"
RUNTIME_DOCKER = "docker"
DEFAULT_IMAGE = "confluentinc/cp-kafka:7.6.1"
DEFAULT_STARTUP_TIMEOUT_S = 60.0


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def merge_overrides(base: Mapping[str, object], extra: Optional[Mapping[str, object]]) -> Dict[str, str]:
    """Merge two override maps; keys in ``extra`` win."""
    merged = {key: _stringify(value) for key, value in base.items()}
    if extra:
        merged.update({key: _stringify(value) for key, value in extra.items()})
    return merged


@dataclass(frozen=True)
class TlsMaterial:
    """Keystore and truststore used by the broker's SSL listener."""

    enabled: bool = True
    keystore_location: str = "src/test/resources/keystorefile.jks"
    keystore_password: str = "password"
    truststore_location: str = "src/test/resources/truststorefile.jks"
    truststore_password: str = "password"

    def as_broker_properties(self) -> Dict[str, str]:
        """Return the ``ssl.*`` broker settings."""
        return {
            "ssl.truststore.location": self.truststore_location,
            "ssl.truststore.password": self.truststore_password,
            "ssl.keystore.location": self.keystore_location,
            "ssl.keystore.password": self.keystore_password,
        }


@dataclass(frozen=True)
class HarnessConfig:
    """Top-level configuration for an embedded Kafka harness."""

    overrides: Mapping[str, str] = field(default_factory=dict)
    tls: TlsMaterial = field(default_factory=TlsMaterial)
    runtime: str = RUNTIME_PROCESS
    kafka_home: Optional[str] = None
    image: str = DEFAULT_IMAGE
    startup_timeout_s: float = DEFAULT_STARTUP_TIMEOUT_S
    log_root: str = field(default_factory=tempfile.gettempdir)

    def __post_init__(self) -> None:
        if self.runtime not in (RUNTIME_PROCESS, RUNTIME_DOCKER):
            raise ConfigError(f"Unsupported runtime: {self.runtime}")
        object.__setattr__(self, "overrides", MappingProxyType(merge_overrides(self.overrides, None)))

    def with_overrides(self, overrides: Optional[Mapping[str, object]]) -> HarnessConfig:
        """Return a copy with ``overrides`` merged on top (last write wins)."""
        return replace(self, overrides=merge_overrides(self.overrides, overrides))


class ConfigRepository:
    """
    Repository for loading harness configuration.

    Loads a JSON file and validates it against the bundled JSON Schema.
    """

    def __init__(self, path: str, schema_path: str | None = None) -> None:
        """Initialize with config file path and optional schema path."""
        self._path = Path(path)
        if schema_path is None:
            self._schema_path = Path(__file__).resolve().parent / "schemas" / "harness_config.schema.json"
        else:
            self._schema_path = Path(schema_path)

    def load(self) -> HarnessConfig:
        """Load and validate harness configuration."""
        if not self._path.exists():
            raise ConfigError(f"Config file not found: {self._path}")

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file: {exc}") from exc

        self._validate(raw)

        kwargs: Dict[str, object] = {
            key: raw[key]
            for key in ("runtime", "kafka_home", "image", "startup_timeout_s", "log_root")
            if key in raw
        }
        if "tls" in raw:
            kwargs["tls"] = TlsMaterial(**raw["tls"])

        return HarnessConfig(overrides=raw.get("overrides", {}), **kwargs)

    def _validate(self, raw: dict) -> None:
        """Validate config against the JSON Schema."""
        try:
            schema = json.loads(self._schema_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Unable to read config schema {self._schema_path}: {exc}") from exc

        try:
            jsonschema.validate(instance=raw, schema=schema)
        except jsonschema.ValidationError as exc:
            raise ConfigError(f"Config schema validation failed: {exc.message}") from exc


def load_config() -> HarnessConfig:
    """Build the default config from the environment.

    ``KAFKA_HARNESS_CONFIG`` points at a JSON file; otherwise ``KAFKA_HOME``
    and ``KAFKA_HARNESS_RUNTIME`` fill in the defaults.
    """
    config_path = os.getenv("KAFKA_HARNESS_CONFIG")
    if config_path:
        return ConfigRepository(config_path).load()

    return HarnessConfig(
        kafka_home=os.getenv("KAFKA_HOME"),
        runtime=os.getenv("KAFKA_HARNESS_RUNTIME", RUNTIME_PROCESS),
    )
