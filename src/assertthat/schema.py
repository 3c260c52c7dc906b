"""Generate JSON Schema for the assertthat YAML config."""

from __future__ import annotations

import json
from pathlib import Path

from assertthat.config import AssertThatConfig


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def generate_json_schema() -> dict:
    schema = AssertThatConfig.model_json_schema()
    schema["title"] = "assertthat config"
    return schema


def render_json_schema() -> str:
    return json.dumps(generate_json_schema(), indent=2) + "\n"


def write_json_schema(path: Path) -> None:
    _ensure_parent(path)
    path.write_text(render_json_schema())
