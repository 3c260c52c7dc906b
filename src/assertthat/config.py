from __future__ import annotations

from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssertThatConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    max_repr_length: int = Field(200, ge=10)
    capture_source: bool = True
    scan: bool = True
    log_file: str | None = None
    verbose: bool = False

    @field_validator("log_file")
    @classmethod
    def expand_log_file(cls, v: str | None) -> str | None:
        """Expand ${VAR} references, rejecting unset variables without a default."""
        if v is None:
            return v
        try:
            return expandvars(v, nounset=True)
        except Exception:
            raise ValueError(f"log_file has missing environment variables: {v}")


_active = AssertThatConfig()


def active_config() -> AssertThatConfig:
    return _active


def set_active_config(config: AssertThatConfig) -> AssertThatConfig:
    """Install *config* for subsequent assertions and return the previous one."""
    global _active
    previous, _active = _active, config
    return previous


def load_config(path: Path) -> AssertThatConfig:
    """Load and validate an assertthat config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")

    config = AssertThatConfig(**raw)

    # Resolve a relative log file against the config file location
    if config.log_file is not None:
        log_path = Path(config.log_file)
        if not log_path.is_absolute():
            config.log_file = str((config_dir / log_path).resolve())

    return config
