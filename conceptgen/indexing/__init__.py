"""Source indexing: file scanning, symbol extraction and snippets."""

from .scanner import FileInfo, ScanError, scan_repo
from .snippets import FileSnippet, extract_snippets, format_snippets, resolve_references
from .symbols import SymbolInfo, extract_symbols, format_symbols

__all__ = [
    "FileInfo",
    "ScanError",
    "scan_repo",
    "FileSnippet",
    "extract_snippets",
    "format_snippets",
    "resolve_references",
    "SymbolInfo",
    "extract_symbols",
    "format_symbols",
]
