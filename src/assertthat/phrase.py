"""Phrase grammar: parse assertion phrases into a closed set of check variants.

Supported formats:
    "has len == 2"          -> LenCompare
    "has capacity >= 4"     -> CapacityCompare
    "contains 2"            -> Contains (several values: "contains 2, 3")
    ">= 3"                  -> DirectCompare
    "is empty", "is_empty"  -> IsPredicate

Right-hand values are either Python literals written in the phrase or
passed separately as arguments (``parse_phrase("has len ==", (n,))``).
"""

from __future__ import annotations

import ast
import functools
import operator
import re
from enum import Enum
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict

from assertthat.assertions.base import MalformedPhrase


class Operator(str, Enum):
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    def apply(self, left: Any, right: Any) -> bool:
        return bool(_COMPARATORS[self](left, right))


_COMPARATORS: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.LT: operator.lt,
    Operator.LE: operator.le,
    Operator.GT: operator.gt,
    Operator.GE: operator.ge,
}


class LenCompare(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    kind: Literal["len"] = "len"
    op: Operator
    value: Any

    def describe(self) -> str:
        return f"has len {self.op.value} {self.value!r}"


class CapacityCompare(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    kind: Literal["capacity"] = "capacity"
    op: Operator
    value: Any

    def describe(self) -> str:
        return f"has capacity {self.op.value} {self.value!r}"


class Contains(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    kind: Literal["contains"] = "contains"
    values: tuple[Any, ...]

    def describe(self) -> str:
        return "contains " + ", ".join(repr(v) for v in self.values)


class DirectCompare(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    kind: Literal["compare"] = "compare"
    op: Operator
    value: Any

    def describe(self) -> str:
        return f"{self.op.value} {self.value!r}"


class IsPredicate(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    kind: Literal["predicate"] = "predicate"
    name: str

    def describe(self) -> str:
        return f"is {self.name}"


Phrase = LenCompare | CapacityCompare | Contains | DirectCompare | IsPredicate

_PROPERTIES: dict[str, type[LenCompare] | type[CapacityCompare]] = {
    "len": LenCompare,
    "capacity": CapacityCompare,
}

_OPERATOR_CHARS = "=!<>~"
_HAS_RE = re.compile(
    r"has\s+(?P<prop>[A-Za-z_]\w*)\s*(?P<op>[=!<>~]+)\s*(?P<rhs>.*)", re.DOTALL
)
_CONTAINS_RE = re.compile(r"contains(?:\s+(?P<rhs>.*))?", re.DOTALL)
_COMPARE_RE = re.compile(r"(?P<op>[=!<>~]+)\s*(?P<rhs>.*)", re.DOTALL)
_PREDICATE_RE = re.compile(r"is(?:_|\s+)(?P<name>[A-Za-z_]\w*)")


def _operator(text: str, token: str) -> Operator:
    try:
        return Operator(token)
    except ValueError:
        expected = ", ".join(op.value for op in Operator)
        raise MalformedPhrase(
            text, f"unsupported operator {token!r}, expected one of: {expected}"
        ) from None


def _literals(text: str, rhs: str) -> tuple[Any, ...]:
    """Read a comma-separated list of Python literals."""
    try:
        call = ast.parse(f"_({rhs})", mode="eval").body
    except SyntaxError:
        raise MalformedPhrase(text, f"cannot read {rhs!r} as a value") from None

    if (
        not isinstance(call, ast.Call)
        or not isinstance(call.func, ast.Name)
        or call.func.id != "_"
        or call.keywords
    ):
        raise MalformedPhrase(text, f"cannot read {rhs!r} as a value")

    values = []
    for arg in call.args:
        try:
            values.append(ast.literal_eval(arg))
        except (ValueError, TypeError, SyntaxError):
            segment = ast.get_source_segment(f"_({rhs})", arg) or rhs
            raise MalformedPhrase(
                text,
                f"{segment!r} is not a literal; pass it as an extra argument instead",
            ) from None
    return tuple(values)


def _values(text: str, rhs: str | None, explicit: tuple[Any, ...]) -> tuple[Any, ...]:
    rhs = (rhs or "").strip()
    if rhs and explicit:
        raise MalformedPhrase(
            text, "value given both in the phrase and as an argument"
        )
    if explicit:
        return explicit
    if not rhs:
        return ()
    return _literals(text, rhs)


def _single(text: str, op: Operator, values: tuple[Any, ...]) -> Any:
    if len(values) != 1:
        raise MalformedPhrase(
            text, f"'{op.value}' takes exactly one value, got {len(values)}"
        )
    return values[0]


def _build(text: str, explicit: tuple[Any, ...]) -> Phrase:
    stripped = text.strip()
    if not stripped:
        raise MalformedPhrase(text, "empty phrase")

    keyword = stripped.split(None, 1)[0]

    if keyword == "has":
        match = _HAS_RE.fullmatch(stripped)
        if match is None:
            raise MalformedPhrase(text, "expected 'has <property> <operator> [value]'")
        prop = match["prop"]
        if prop not in _PROPERTIES:
            expected = ", ".join(_PROPERTIES)
            raise MalformedPhrase(
                text, f"unknown property {prop!r}, expected one of: {expected}"
            )
        op = _operator(text, match["op"])
        value = _single(text, op, _values(text, match["rhs"], explicit))
        return _PROPERTIES[prop](op=op, value=value)

    if keyword == "contains":
        match = _CONTAINS_RE.fullmatch(stripped)
        if match is None:
            raise MalformedPhrase(text, "expected 'contains <value>[, <value>...]'")
        values = _values(text, match["rhs"], explicit)
        if not values:
            raise MalformedPhrase(text, "'contains' needs at least one value")
        return Contains(values=values)

    if keyword == "is" or keyword.startswith("is_"):
        match = _PREDICATE_RE.fullmatch(stripped)
        if match is None:
            raise MalformedPhrase(text, "expected 'is <name>'")
        if explicit:
            raise MalformedPhrase(text, f"'is {match['name']}' takes no value")
        return IsPredicate(name=match["name"])

    if stripped[0] in _OPERATOR_CHARS:
        match = _COMPARE_RE.fullmatch(stripped)
        op = _operator(text, match["op"])
        value = _single(text, op, _values(text, match["rhs"], explicit))
        return DirectCompare(op=op, value=value)

    raise MalformedPhrase(
        text,
        f"unknown keyword {keyword!r}, expected 'has', 'contains', 'is' or an operator",
    )


@functools.lru_cache(maxsize=1024)
def _parse_text(text: str) -> Phrase:
    return _build(text, ())


def parse_phrase(text: str, values: tuple[Any, ...] = ()) -> Phrase:
    """Translate a phrase into its check variant.

    Args:
        text: The phrase, e.g. ``"has len == 2"`` or ``"contains"``.
        values: Right-hand values supplied outside the phrase text. When
            empty, values are read as literals from the phrase itself.

    Raises:
        MalformedPhrase: The phrase does not match the grammar.
    """
    if not isinstance(text, str):
        raise TypeError(f"phrase must be a string, got {type(text).__name__}")
    if values:
        return _build(text, tuple(values))
    return _parse_text(text)
