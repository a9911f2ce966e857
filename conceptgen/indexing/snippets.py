"""Bounded-size code snippets for oracle prompts."""

from dataclasses import dataclass

import structlog

from .scanner import FileInfo

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FileSnippet:
    relative_path: str
    content: str
    truncated: bool


def resolve_references(files: list[FileInfo], referenced_paths: list[str]) -> list[FileInfo]:
    """Return indexed files whose relative path matches a referenced path."""
    wanted = {path.strip().replace("\\", "/").removeprefix("./") for path in referenced_paths if path}
    return [f for f in files if f.relative_path in wanted]


def extract_snippets(
    files: list[FileInfo],
    max_files: int = 30,
    max_chars: int = 2000,
) -> list[FileSnippet]:
    """Read the smallest files first, truncating each to ``max_chars``.

    Args:
        files: Candidate files.
        max_files: Maximum number of files to include.
        max_chars: Maximum characters kept per file.

    Returns:
        Snippets in ascending size order.
    """
    snippets = []
    for file in sorted(files, key=lambda f: f.size)[:max_files]:
        try:
            content = file.path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.warning("snippet_read_failed", file=file.relative_path, error=str(e))
            continue
        truncated = len(content) > max_chars
        snippets.append(FileSnippet(file.relative_path, content[:max_chars], truncated))
    return snippets


def format_snippets(snippets: list[FileSnippet]) -> str:
    parts = []
    for snippet in snippets:
        suffix = "\n# ... (truncated)" if snippet.truncated else ""
        parts.append(f"File: {snippet.relative_path}\n```\n{snippet.content}{suffix}\n```")
    return "\n\n".join(parts)
