"""Deterministic checks (len, capacity, membership, comparison, predicates)."""

from __future__ import annotations

import collections
import logging
import struct
import sys
from typing import Any, Callable

from assertthat.assertions.base import AssertionFailed, CheckResult, MalformedPhrase
from assertthat.config import active_config
from assertthat.phrase import (
    CapacityCompare,
    Contains,
    DirectCompare,
    IsPredicate,
    LenCompare,
    Phrase,
    parse_phrase,
)
from assertthat.source import caller_expression

_PHRASE_TYPES = (LenCompare, CapacityCompare, Contains, DirectCompare, IsPredicate)

_POINTER_SIZE = struct.calcsize("P")
_EMPTY_LIST_SIZE = [].__sizeof__()


def _list_capacity(subject: list) -> int:
    # CPython reports the allocated slot count through list.__sizeof__
    return (subject.__sizeof__() - _EMPTY_LIST_SIZE) // _POINTER_SIZE


def capacity_reader(subject: Any) -> Callable[[], Any] | None:
    """Return a reader for the subject's capacity, or None if it has none.

    Capacity comes from, in order: the object's own ``capacity`` (method or
    attribute), the ``maxlen`` of a bounded deque, or the allocated slots of
    a plain list on CPython.
    """
    own = getattr(subject, "capacity", None)
    if own is not None:
        return own if callable(own) else (lambda: own)
    if isinstance(subject, collections.deque):
        if subject.maxlen is None:
            return None
        return lambda: subject.maxlen
    if type(subject) is list and sys.implementation.name == "cpython":
        return lambda: _list_capacity(subject)
    return None


def predicate_reader(subject: Any, name: str) -> Callable[[], Any] | None:
    """Return the ``is_<name>``/``is<name>`` check for the subject.

    Both zero-argument methods and boolean attributes (including properties)
    are accepted.
    """
    for attr in (f"is_{name}", f"is{name}"):
        own = getattr(subject, attr, None)
        if callable(own):
            return own
        if isinstance(own, bool):
            return lambda: own
    if name == "empty" and hasattr(subject, "__len__"):
        return lambda: len(subject) == 0
    return None


def _resolve(subject: Any, phrase: Phrase) -> Callable[[], Any]:
    """Validate the phrase against the subject's type and return its value reader.

    Raises MalformedPhrase when the subject has no such property, before
    anything is evaluated.
    """
    type_name = type(subject).__name__
    described = phrase.describe()

    if isinstance(phrase, LenCompare):
        if not hasattr(subject, "__len__"):
            raise MalformedPhrase(described, f"{type_name} has no len")
        return lambda: len(subject)

    if isinstance(phrase, CapacityCompare):
        reader = capacity_reader(subject)
        if reader is None:
            raise MalformedPhrase(described, f"{type_name} has no capacity")
        return reader

    if isinstance(phrase, Contains):
        if not any(
            hasattr(subject, attr) for attr in ("__contains__", "__iter__", "__getitem__")
        ):
            raise MalformedPhrase(described, f"{type_name} does not support membership")
        if hasattr(subject, "__iter__") and iter(subject) is subject:
            # One-shot iterators are read once so every value is tested against all items
            return lambda: list(subject)
        return lambda: subject

    if isinstance(phrase, IsPredicate):
        reader = predicate_reader(subject, phrase.name)
        if reader is None:
            raise MalformedPhrase(
                described, f"{type_name} has no is_{phrase.name}() or is{phrase.name}()"
            )
        return reader

    if isinstance(phrase, DirectCompare):
        return lambda: subject

    raise MalformedPhrase(repr(phrase), f"unknown phrase type {type(phrase).__name__}")


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def failure_message(expression: str, phrase: Phrase, actual: Any) -> str:
    limit = active_config().max_repr_length
    return (
        f"assertion failed: {expression} {phrase.describe()} "
        f"(actual: {_truncate(repr(actual), limit)})"
    )


def evaluate_phrase(
    subject: Any,
    phrase: Phrase,
    *,
    expression: str | None = None,
    logger: logging.Logger | None = None,
) -> CheckResult:
    """Evaluate a parsed phrase against a subject.

    The property is read exactly once and the check itself has no side
    effects, so evaluating an unchanged subject again gives the same result.

    Raises MalformedPhrase if the subject's type cannot support the phrase.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    reader = _resolve(subject, phrase)
    expression = expression or "value"
    described = phrase.describe()
    logger.debug(f"Checking {expression} {described}")

    value = reader()
    try:
        if isinstance(phrase, (LenCompare, CapacityCompare)):
            actual = value
            passed = phrase.op.apply(value, phrase.value)
        elif isinstance(phrase, Contains):
            actual = value
            passed = all(item in value for item in phrase.values)
        elif isinstance(phrase, DirectCompare):
            actual = subject
            passed = phrase.op.apply(subject, phrase.value)
        else:
            actual = subject
            passed = bool(value)
    except TypeError as e:
        raise MalformedPhrase(
            described, f"cannot compare {type(value).__name__}: {e}"
        ) from e

    logger.debug(f"{phrase.kind} check: actual={actual!r}, passed={passed}")

    return CheckResult(
        name=f"{phrase.kind}:{described}",
        passed=passed,
        message=(
            f"{expression} {described}"
            if passed
            else failure_message(expression, phrase, actual)
        ),
        actual=actual,
    )


def _coerce(phrase: str | Phrase, values: tuple[Any, ...]) -> Phrase:
    if isinstance(phrase, _PHRASE_TYPES):
        if values:
            raise MalformedPhrase(
                phrase.describe(), "values cannot be added to a parsed phrase"
            )
        return phrase
    return parse_phrase(phrase, values)


def _run(
    subject: Any,
    phrase: str | Phrase,
    values: tuple[Any, ...],
    description: str | None,
) -> CheckResult:
    __tracebackhide__ = True
    parsed = _coerce(phrase, values)
    result = evaluate_phrase(subject, parsed, expression=description)

    if not result.passed and description is None and active_config().capture_source:
        # _run -> assert_that/check_that -> the test's frame
        expression = caller_expression(depth=2)
        if expression is not None:
            result.message = failure_message(expression, parsed, result.actual)
    return result


def check_that(
    subject: Any,
    phrase: str | Phrase,
    *values: Any,
    description: str | None = None,
) -> CheckResult:
    """Evaluate a phrase and return the result instead of raising on failure.

    Malformed phrases still raise MalformedPhrase.
    """
    __tracebackhide__ = True
    return _run(subject, phrase, values, description)


def assert_that(
    subject: Any,
    phrase: str | Phrase,
    *values: Any,
    description: str | None = None,
) -> None:
    """Assert that a natural-language phrase holds for a subject.

    Examples:
        assert_that(v, "has len == 2")
        assert_that(v, "has capacity >=", expected)
        assert_that(v, "contains 2")
        assert_that(total, "<= 100")
        assert_that(v, "is empty")

    Args:
        subject: The value under test.
        phrase: The check to perform, or an already parsed phrase.
        values: Right-hand values, when they are not written in the phrase.
        description: Text used for the subject in failure messages. Defaults
            to the source text of the first argument.

    Raises:
        MalformedPhrase: The phrase is invalid, or does not apply to the
            subject's type. Raised before anything is compared.
        AssertionFailed: The check is false.
    """
    __tracebackhide__ = True
    result = _run(subject, phrase, values, description)
    if not result.passed:
        raise AssertionFailed(result)
