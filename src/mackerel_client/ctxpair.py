"""
Pairing linter for the client surface.

Every public operation method reachable from ``class Client`` must exist both
as ``name`` and as ``name_context``. The check is static: sources are parsed
with ``ast`` and never imported.

Usage:
    mackerel-ctxpair [paths...]
"""

from __future__ import annotations

import argparse
import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from mackerel_client.logging import bind_context, configure_logging

CLIENT_CLASS = "Client"
CONTEXT_SUFFIX = "_context"

_SKIPPED_DECORATORS = {"staticmethod", "classmethod", "property"}


@dataclass(frozen=True)
class Diagnostic:
    path: str
    line: int
    col: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.col}: {self.message}"


@dataclass(frozen=True)
class _Method:
    path: str
    node: ast.FunctionDef | ast.AsyncFunctionDef


def iter_sources(paths: Iterable[Path]) -> Iterator[Path]:
    for path in paths:
        if path.is_dir():
            yield from sorted(path.rglob("*.py"))
        elif path.suffix == ".py":
            yield path


def _base_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _decorator_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Attribute):
        # @name.setter and friends
        return "property" if node.attr in {"setter", "getter", "deleter"} else node.attr
    if isinstance(node, ast.Name):
        return node.id
    return None


def _is_exported(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    if node.name.startswith("_"):
        return False
    return not any(_decorator_name(d) in _SKIPPED_DECORATORS for d in node.decorator_list)


def _collect_classes(sources: Iterable[Path]) -> dict[str, list[tuple[str, ast.ClassDef]]]:
    classes: dict[str, list[tuple[str, ast.ClassDef]]] = {}
    for source in sources:
        tree = ast.parse(source.read_text(encoding="utf-8"), filename=str(source))
        for node in ast.walk(tree):
            if isinstance(node, ast.ClassDef):
                classes.setdefault(node.name, []).append((str(source), node))
    return classes


def _client_methods(classes: dict[str, list[tuple[str, ast.ClassDef]]]) -> dict[str, _Method]:
    methods: dict[str, _Method] = {}
    seen: set[int] = set()
    pending = list(classes.get(CLIENT_CLASS, []))
    while pending:
        path, cls = pending.pop(0)
        if id(cls) in seen:
            continue
        seen.add(id(cls))
        for item in cls.body:
            if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)) and _is_exported(item):
                methods.setdefault(item.name, _Method(path, item))
        for base in cls.bases:
            name = _base_name(base)
            if name is not None:
                pending.extend(classes.get(name, []))
    return methods


def _stem(name: str) -> str:
    return name[: -len(CONTEXT_SUFFIX)] if name.endswith(CONTEXT_SUFFIX) else name


def check(paths: Sequence[Path]) -> list[Diagnostic]:
    """Report every operation missing its plain or context twin."""
    methods = _client_methods(_collect_classes(iter_sources(paths)))
    diagnostics = []
    for stem in sorted({_stem(name) for name in methods}):
        plain = methods.get(stem)
        with_context = methods.get(stem + CONTEXT_SUFFIX)
        if plain is not None and with_context is not None:
            continue
        found = plain or with_context
        diagnostics.append(
            Diagnostic(
                path=found.path,
                line=found.node.lineno,
                col=found.node.col_offset + 1,
                message=f"exported method {stem} must have both ({stem} and {stem}{CONTEXT_SUFFIX})",
            )
        )
    return diagnostics


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mackerel-ctxpair",
        description="Check that every client operation has a *_context twin",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Files or directories to check (default: the installed package)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress as JSON to stderr")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        configure_logging(logging.DEBUG)
    paths = args.paths or [Path(__file__).resolve().parent]
    log = bind_context(tool="mackerel-ctxpair")

    diagnostics = check(paths)
    for diagnostic in diagnostics:
        print(diagnostic)
    log.debug("ctxpair_checked", paths=[str(p) for p in paths], diagnostics=len(diagnostics))
    return 1 if diagnostics else 0


if __name__ == "__main__":
    raise SystemExit(main())
