"""Tests for config loading and validation."""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from assertthat.config import (
    AssertThatConfig,
    active_config,
    load_config,
    set_active_config,
)


@pytest.fixture()
def tmp_yaml(tmp_path):
    """Helper that writes YAML content to a temp file and returns its path."""

    def _write(content: str) -> Path:
        p = tmp_path / "assertthat.yaml"
        p.write_text(textwrap.dedent(content))
        return p

    return _write


def test_load_minimal_config(tmp_yaml):
    path = tmp_yaml("""\
        max_repr_length: 80
        capture_source: false
    """)
    cfg = load_config(path)
    assert cfg.max_repr_length == 80
    assert cfg.capture_source is False
    assert cfg.scan is True
    assert cfg.log_file is None
    assert cfg.verbose is False


def test_empty_file_gives_defaults(tmp_yaml):
    cfg = load_config(tmp_yaml(""))
    assert cfg == AssertThatConfig()


def test_relative_log_file_resolves_against_config_dir(tmp_yaml, tmp_path):
    cfg = load_config(tmp_yaml("log_file: logs/debug.log\n"))
    assert cfg.log_file == str((tmp_path / "logs" / "debug.log").resolve())


def test_absolute_log_file_is_kept(tmp_yaml, tmp_path):
    target = tmp_path / "elsewhere" / "debug.log"
    cfg = load_config(tmp_yaml(f"log_file: {target}\n"))
    assert cfg.log_file == str(target)


def test_log_file_expands_environment(tmp_yaml, tmp_path, monkeypatch):
    monkeypatch.setenv("ASSERTTHAT_LOG_DIR", str(tmp_path / "env"))
    cfg = load_config(tmp_yaml("log_file: ${ASSERTTHAT_LOG_DIR}/debug.log\n"))
    assert cfg.log_file == str(tmp_path / "env" / "debug.log")


def test_log_file_default_value(monkeypatch):
    monkeypatch.delenv("ASSERTTHAT_UNSET_DIR", raising=False)
    cfg = AssertThatConfig(log_file="${ASSERTTHAT_UNSET_DIR:-/tmp/at}/debug.log")
    assert cfg.log_file == "/tmp/at/debug.log"


def test_log_file_missing_variable_is_rejected(monkeypatch):
    monkeypatch.delenv("ASSERTTHAT_UNSET_DIR", raising=False)
    with pytest.raises(ValidationError, match="missing environment variables"):
        AssertThatConfig(log_file="${ASSERTTHAT_UNSET_DIR}/debug.log")


def test_unknown_key_is_rejected(tmp_yaml):
    with pytest.raises(ValidationError):
        load_config(tmp_yaml("max_repr: 10\n"))


def test_max_repr_length_lower_bound():
    with pytest.raises(ValidationError):
        AssertThatConfig(max_repr_length=5)


def test_non_mapping_is_rejected(tmp_yaml):
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config(tmp_yaml("- a\n- b\n"))


def test_yaml_syntax_error_is_a_value_error(tmp_yaml):
    path = tmp_yaml("max_repr_length: [1,\n")
    with pytest.raises(ValueError, match=str(path.name)):
        load_config(path)


def test_set_active_config_returns_previous():
    custom = AssertThatConfig(max_repr_length=50)
    previous = set_active_config(custom)
    try:
        assert active_config() is custom
    finally:
        set_active_config(previous)
    assert active_config() is previous
