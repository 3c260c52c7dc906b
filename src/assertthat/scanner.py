"""Static phrase check: report malformed phrases before any test runs.

Only phrases written as string literals can be checked. The number of
extra positional arguments is taken into account, so
``assert_that(v, "has len ==", n)`` is valid while
``assert_that(v, "has len == 2", n)`` is not.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from assertthat.assertions.base import MalformedPhrase
from assertthat.phrase import parse_phrase
from assertthat.source import ASSERTION_FUNCTIONS

SKIP_MARKER = "assertthat: skip"

# Stands in for runtime values, which are unknown statically
_PLACEHOLDER = object()


@dataclass
class PhraseProblem:
    """A malformed phrase found in source code."""

    path: str
    lineno: int
    col: int
    phrase: str
    message: str

    def format(self) -> str:
        return f"{self.path}:{self.lineno}:{self.col + 1}: {self.message}"


PACKAGE = "assertthat"


def _from_package(module: str | None) -> bool:
    return module is not None and (module == PACKAGE or module.startswith(f"{PACKAGE}."))


class ImportVisitor(ast.NodeVisitor):
    """AST visitor that records how assertthat's functions are bound in a module."""

    def __init__(self):
        self.functions: set[str] = set()  # local names of assert_that/check_that
        self.modules: set[str] = set()  # dotted names referring to assertthat modules

    def visit_Import(self, node: ast.Import):
        for alias in node.names:
            if not _from_package(alias.name):
                continue
            if alias.asname:
                self.modules.add(alias.asname)
            else:
                # "import assertthat.assertions" binds every prefix of the path
                parts = alias.name.split(".")
                for i in range(1, len(parts) + 1):
                    self.modules.add(".".join(parts[:i]))
        self.generic_visit(node)

    def visit_ImportFrom(self, node: ast.ImportFrom):
        if node.level == 0 and _from_package(node.module):
            for alias in node.names:
                if alias.name == "*":
                    self.functions |= ASSERTION_FUNCTIONS
                elif alias.name in ASSERTION_FUNCTIONS:
                    self.functions.add(alias.asname or alias.name)
                else:
                    self.modules.add(alias.asname or alias.name)
        self.generic_visit(node)


def _dotted_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted_name(node.value)
        return None if base is None else f"{base}.{node.attr}"
    return None


class AssertionCallVisitor(ast.NodeVisitor):
    """AST visitor that collects assertion calls with a literal phrase.

    Only calls that resolve to assertthat's own functions are collected, so
    unrelated helpers that share the name are left alone.
    """

    def __init__(self, imports: ImportVisitor):
        self.imports = imports
        self.calls: list[tuple[ast.Call, str]] = []

    def _is_assertion(self, node: ast.Call) -> bool:
        func = node.func
        if isinstance(func, ast.Name):
            return func.id in self.imports.functions
        if isinstance(func, ast.Attribute) and func.attr in ASSERTION_FUNCTIONS:
            return _dotted_name(func.value) in self.imports.modules
        return False

    def visit_Call(self, node: ast.Call):
        if self._is_assertion(node) and len(node.args) >= 2:
            phrase = node.args[1]
            has_starred = any(isinstance(arg, ast.Starred) for arg in node.args)
            if (
                isinstance(phrase, ast.Constant)
                and isinstance(phrase.value, str)
                and not has_starred
            ):
                self.calls.append((node, phrase.value))
        self.generic_visit(node)


def _skipped(lines: list[str], node: ast.Call) -> bool:
    end = node.end_lineno or node.lineno
    return any(SKIP_MARKER in line for line in lines[node.lineno - 1 : end])


def scan_source(
    source: str, filename: str = "<string>", logger: logging.Logger | None = None
) -> list[PhraseProblem]:
    """Check every literal phrase in a module's source.

    Returns problems in source order. Sources that do not parse yield no
    problems; the interpreter reports those itself.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        logger.debug(f"Skipping {filename}: {e}")
        return []

    imports = ImportVisitor()
    imports.visit(tree)
    visitor = AssertionCallVisitor(imports)
    visitor.visit(tree)
    lines = source.splitlines()

    problems = []
    for node, phrase in visitor.calls:
        if _skipped(lines, node):
            logger.debug(f"{filename}:{node.lineno}: skipped by marker")
            continue
        extra = tuple(_PLACEHOLDER for _ in node.args[2:])
        try:
            parse_phrase(phrase, extra)
        except MalformedPhrase as e:
            problems.append(
                PhraseProblem(
                    path=filename,
                    lineno=node.lineno,
                    col=node.col_offset,
                    phrase=phrase,
                    message=str(e),
                )
            )

    logger.debug(
        f"Scanned {filename}: {len(visitor.calls)} phrase(s), {len(problems)} problem(s)"
    )
    problems.sort(key=lambda p: (p.lineno, p.col))
    return problems


def scan_file(path: Path, logger: logging.Logger | None = None) -> list[PhraseProblem]:
    source = path.read_text(encoding="utf-8")
    return scan_source(source, filename=str(path), logger=logger)


def iter_python_files(paths: Iterable[Path]) -> list[Path]:
    """Expand directories into the Python files beneath them."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob("*.py") if p.is_file()))
        else:
            files.append(path)
    return files


def scan_paths(
    paths: Iterable[Path], logger: logging.Logger | None = None
) -> list[PhraseProblem]:
    problems: list[PhraseProblem] = []
    for path in iter_python_files(paths):
        problems.extend(scan_file(path, logger=logger))
    return problems
