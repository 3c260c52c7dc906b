"""Pytest configuration and fixtures."""

import logging

import pytest

from assertthat.config import AssertThatConfig, set_active_config

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Detach handlers from assertthat loggers after each test so names can be reused."""
    yield

    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("assertthat"):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def default_config():
    """Run each test against the default settings."""
    previous = set_active_config(AssertThatConfig())
    yield
    set_active_config(previous)
