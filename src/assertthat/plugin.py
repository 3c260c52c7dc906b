"""pytest plugin: load assertthat settings and reject malformed phrases at collection."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from assertthat.config import AssertThatConfig, load_config, set_active_config
from assertthat.scanner import PhraseProblem, scan_file
from assertthat.verbose import setup_logger, teardown_logger

logger = logging.getLogger(__name__)

settings_key = pytest.StashKey[AssertThatConfig]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("assertthat", "assertion phrase checks")
    group.addoption(
        "--assertthat-config",
        dest="assertthat_config",
        default=None,
        help="Path to an assertthat YAML config",
    )
    group.addoption(
        "--no-assertthat-scan",
        dest="assertthat_no_scan",
        action="store_true",
        default=False,
        help="Do not check assertion phrases during collection",
    )
    parser.addini(
        "assertthat_config", help="Path to an assertthat YAML config", default=""
    )
    parser.addini(
        "assertthat_scan",
        type="bool",
        default=True,
        help="Check assertion phrases during collection",
    )


def _config_path(config: pytest.Config) -> Path | None:
    option = config.getoption("assertthat_config")
    if option:
        return Path(option)
    ini = config.getini("assertthat_config")
    if ini:
        path = Path(ini)
        return path if path.is_absolute() else config.rootpath / path
    return None


def pytest_configure(config: pytest.Config) -> None:
    path = _config_path(config)
    if path is not None:
        try:
            settings = load_config(path)
        except (OSError, ValueError) as e:
            raise pytest.UsageError(f"assertthat: cannot load config {path}: {e}")
    else:
        settings = AssertThatConfig()

    if config.getoption("assertthat_no_scan") or not config.getini("assertthat_scan"):
        settings = settings.model_copy(update={"scan": False})

    config.stash[settings_key] = settings
    previous = set_active_config(settings)
    config.add_cleanup(lambda: set_active_config(previous))

    if settings.log_file:
        debug_logger = setup_logger(Path(settings.log_file), verbose=settings.verbose)
        config.add_cleanup(lambda: teardown_logger(debug_logger))
        debug_logger.debug(f"assertthat settings: {settings.model_dump()}")


class PhraseLintFile(pytest.File):
    """Collector that fails collection for a file with malformed phrases."""

    def __init__(self, *, problems: list[PhraseProblem], **kwargs) -> None:
        super().__init__(**kwargs)
        self.problems = problems

    def collect(self):
        details = "\n".join(p.format() for p in self.problems)
        raise self.CollectError(
            f"{len(self.problems)} malformed assertion phrase(s):\n{details}"
        )


def pytest_collect_file(file_path: Path, parent: pytest.Collector):
    settings = parent.config.stash.get(settings_key, None)
    if settings is None or not settings.scan or file_path.suffix != ".py":
        return None

    try:
        problems = scan_file(file_path)
    except (OSError, UnicodeDecodeError) as e:
        # The module collector reports unreadable files itself
        logger.debug(f"Not scanning {file_path}: {e}")
        return None

    if not problems:
        return None
    return PhraseLintFile.from_parent(parent, path=file_path, problems=problems)
