"""Readable assertions: ``assert_that(v, "has len == 2")``."""

from assertthat.assertions import (
    AssertionFailed,
    CheckResult,
    MalformedPhrase,
    assert_that,
    check_that,
    evaluate_phrase,
)
from assertthat.phrase import (
    CapacityCompare,
    Contains,
    DirectCompare,
    IsPredicate,
    LenCompare,
    Operator,
    Phrase,
    parse_phrase,
)

__all__ = [
    "AssertionFailed",
    "CapacityCompare",
    "CheckResult",
    "Contains",
    "DirectCompare",
    "IsPredicate",
    "LenCompare",
    "MalformedPhrase",
    "Operator",
    "Phrase",
    "assert_that",
    "check_that",
    "evaluate_phrase",
    "parse_phrase",
]
