"""Repository file discovery respecting .gitignore."""

import os
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

ALWAYS_IGNORED = {".git", "__pycache__"}


class ScanError(Exception):
    """Error during repository scanning."""

    pass


@dataclass(frozen=True)
class FileInfo:
    """A source file selected for analysis."""

    path: Path
    relative_path: str  # POSIX-style, relative to the repository root
    size: int


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False


def parse_gitignore(text: str) -> list[IgnoreRule]:
    """Parse .gitignore content into ordered rules."""
    rules = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        negated = line.startswith("!")
        if negated:
            line = line[1:]
        directory_only = line.endswith("/")
        line = line.rstrip("/")
        anchored = "/" in line
        line = line.lstrip("/")
        if line:
            rules.append(IgnoreRule(line, negated, directory_only, anchored))
    return rules


def _rule_matches(rule: IgnoreRule, rel_path: str, is_dir: bool) -> bool:
    if rule.directory_only and not is_dir:
        return False
    if rule.anchored:
        return fnmatch(rel_path, rule.pattern)
    return fnmatch(rel_path.rsplit("/", 1)[-1], rule.pattern)


def is_ignored(rules: list[IgnoreRule], rel_path: str, is_dir: bool) -> bool:
    """Apply rules in order; the last matching rule decides."""
    ignored = False
    for rule in rules:
        if _rule_matches(rule, rel_path, is_dir):
            ignored = not rule.negated
    return ignored


def load_gitignore(root: Path) -> list[IgnoreRule]:
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return []
    return parse_gitignore(gitignore.read_text(encoding="utf-8", errors="ignore"))


def scan_repo(
    root: str | Path,
    extensions: list[str],
    src_dir: str | None = "src",
) -> list[FileInfo]:
    """List candidate source files under a repository.

    Walks ``root/src_dir`` when that directory exists, otherwise the whole
    root. Anything matched by the root .gitignore is skipped, as are
    ``.git`` and ``__pycache__``.

    Args:
        root: Repository root.
        extensions: File suffixes to keep (e.g. [".py"]).
        src_dir: Preferred source subdirectory.

    Returns:
        Files sorted by relative path.

    Raises:
        ScanError: If the root is not a directory.
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise ScanError(f"Repository root is not a directory: {root}")

    rules = load_gitignore(root)
    start = root / src_dir if src_dir and (root / src_dir).is_dir() else root
    suffixes = {ext.lower() for ext in extensions}

    files: list[FileInfo] = []
    for dirpath, dirnames, filenames in os.walk(start):
        current = Path(dirpath)

        kept_dirs = []
        for name in sorted(dirnames):
            rel = (current / name).relative_to(root).as_posix()
            if name in ALWAYS_IGNORED or is_ignored(rules, rel, is_dir=True):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in filenames:
            path = current / name
            if path.suffix.lower() not in suffixes:
                continue
            rel = path.relative_to(root).as_posix()
            if is_ignored(rules, rel, is_dir=False):
                continue
            files.append(FileInfo(path=path, relative_path=rel, size=path.stat().st_size))

    files.sort(key=lambda f: f.relative_path)
    logger.info("repo_scanned", root=str(root), start=str(start), files=len(files))
    return files
