"""Base data structures for the assertion system."""

from dataclasses import dataclass
from typing import Any


class MalformedPhrase(ValueError):
    """A phrase that does not match the grammar or cannot apply to its subject.

    Raised instead of a pass or fail result, so it surfaces as an error in
    the test run rather than as a test failure.
    """

    def __init__(self, phrase: str, reason: str) -> None:
        self.phrase = phrase
        self.reason = reason
        super().__init__(f"malformed phrase {phrase!r}: {reason}")


@dataclass
class CheckResult:
    """Result of evaluating a single phrase against a subject.

    Attributes:
        name: Identifier for the check (e.g. "len:== 2").
        passed: Whether the check held.
        message: Human-readable detail about the result. On failure this is
            the full ``assertion failed: ...`` message.
        actual: The evaluated value the comparison was made against (the
            property value for ``has`` phrases, the subject otherwise).
    """

    name: str
    passed: bool
    message: str
    actual: Any = None


class AssertionFailed(AssertionError):
    """A check that evaluated to false."""

    def __init__(self, result: CheckResult) -> None:
        self.result = result
        super().__init__(result.message)
