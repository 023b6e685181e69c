"""Rendering of Java ``.properties`` files for ZooKeeper and Kafka."""

from pathlib import Path
from typing import Mapping


def _escape(text: str, is_key: bool) -> str:
    text = text.replace("\\", "\\\\").replace("\n", "\\n")
    if is_key:
        for char in (" ", ":", "="):
            text = text.replace(char, "\\" + char)
    return text


def render_properties(config: Mapping[str, str]) -> str:
    """Serialize a config map, one ``key=value`` line per entry."""
    lines = [f"{_escape(key, True)}={_escape(str(value), False)}" for key, value in config.items()]
    return "\n".join(lines) + "\n"


def write_properties(path: Path, config: Mapping[str, str]) -> Path:
    """Write a config map to ``path`` and return it."""
    path.write_text(render_properties(config), encoding="utf-8")
    return path
