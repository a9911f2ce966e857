"""Exported symbol extraction.

Only one language adapter exists: Python, parsed with the ``ast`` module.
"""

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog

from .scanner import FileInfo

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SymbolInfo:
    """A top-level declaration found in a source file."""

    name: str
    kind: str  # class, function or variable
    file_path: str
    relative_path: str
    line: int
    column: int
    is_exported: bool
    is_default_export: bool = False


class LanguageAdapter(Protocol):
    """Extracts top-level symbols for one source language."""

    extensions: tuple[str, ...]

    def extract(self, file: FileInfo, source: str) -> list[SymbolInfo]:
        ...


def _declared_all(tree: ast.Module) -> set[str] | None:
    for node in tree.body:
        if not isinstance(node, ast.Assign):
            continue
        for target in node.targets:
            if isinstance(target, ast.Name) and target.id == "__all__":
                if isinstance(node.value, (ast.List, ast.Tuple)):
                    return {
                        elt.value
                        for elt in node.value.elts
                        if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
                    }
    return None


class PythonAdapter:
    """Top-level classes, functions and assignments of a Python module."""

    extensions = (".py",)

    def extract(self, file: FileInfo, source: str) -> list[SymbolInfo]:
        tree = ast.parse(source, filename=file.relative_path)
        exported_names = _declared_all(tree)

        found: list[tuple[str, str, ast.AST]] = []
        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                found.append((node.name, "class", node))
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                found.append((node.name, "function", node))
            elif isinstance(node, ast.Assign):
                for target in node.targets:
                    if isinstance(target, ast.Name):
                        found.append((target.id, "variable", node))
            elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                found.append((node.target.id, "variable", node))

        symbols = []
        for name, kind, node in found:
            if name.startswith("__") and name.endswith("__"):
                continue
            if exported_names is not None:
                exported = name in exported_names
            else:
                exported = not name.startswith("_")
            symbols.append(
                SymbolInfo(
                    name=name,
                    kind=kind,
                    file_path=str(file.path),
                    relative_path=file.relative_path,
                    line=node.lineno,
                    column=node.col_offset,
                    is_exported=exported,
                )
            )
        return symbols


ADAPTERS: list[LanguageAdapter] = [PythonAdapter()]


def _adapter_for(path: Path) -> LanguageAdapter | None:
    for adapter in ADAPTERS:
        if path.suffix.lower() in adapter.extensions:
            return adapter
    return None


def extract_symbols(files: list[FileInfo]) -> list[SymbolInfo]:
    """Extract symbols from every file a language adapter understands.

    Files that fail to read or parse are logged and skipped.
    """
    symbols: list[SymbolInfo] = []
    for file in files:
        adapter = _adapter_for(file.path)
        if adapter is None:
            continue
        try:
            source = file.path.read_text(encoding="utf-8", errors="ignore")
            symbols.extend(adapter.extract(file, source))
        except (OSError, SyntaxError, ValueError) as e:
            logger.warning("symbol_extraction_failed", file=file.relative_path, error=str(e))

    logger.info("symbols_extracted", files=len(files), symbols=len(symbols))
    return symbols


def format_symbols(symbols: list[SymbolInfo], exported_only: bool = True) -> str:
    """Render symbols as ``- [kind] name (in path:line)`` lines."""
    lines = [
        f"- [{s.kind}] {s.name} (in {s.relative_path}:{s.line})"
        for s in symbols
        if s.is_exported or not exported_only
    ]
    return "\n".join(lines)
