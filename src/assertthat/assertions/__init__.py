"""Assertion system for checking values against natural-language phrases."""

from assertthat.assertions.base import AssertionFailed, CheckResult, MalformedPhrase
from assertthat.assertions.deterministic import (
    assert_that,
    check_that,
    evaluate_phrase,
)

__all__ = [
    "AssertionFailed",
    "CheckResult",
    "MalformedPhrase",
    "assert_that",
    "check_that",
    "evaluate_phrase",
]
