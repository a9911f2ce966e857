"""Unit tests for source indexing."""

from pathlib import Path

import pytest

from conceptgen.indexing import (
    FileInfo,
    ScanError,
    extract_snippets,
    extract_symbols,
    format_snippets,
    format_symbols,
    resolve_references,
    scan_repo,
)
from conceptgen.indexing.scanner import is_ignored, parse_gitignore


class TestGitignore:
    """Tests for .gitignore rule handling."""

    def test_comments_and_blanks_skipped(self):
        rules = parse_gitignore("# comment\n\n*.log\n")
        assert [r.pattern for r in rules] == ["*.log"]

    def test_basename_pattern(self):
        rules = parse_gitignore("*.log")
        assert is_ignored(rules, "src/deep/debug.log", is_dir=False)

    def test_directory_only_pattern(self):
        rules = parse_gitignore("build/")
        assert is_ignored(rules, "src/build", is_dir=True)
        assert not is_ignored(rules, "src/build", is_dir=False)

    def test_anchored_pattern(self):
        rules = parse_gitignore("/src/generated")
        assert is_ignored(rules, "src/generated", is_dir=True)
        assert not is_ignored(rules, "lib/src/generated", is_dir=True)

    def test_negation_last_match_wins(self):
        rules = parse_gitignore("*.py\n!keep.py")
        assert is_ignored(rules, "src/drop.py", is_dir=False)
        assert not is_ignored(rules, "src/keep.py", is_dir=False)


class TestScanRepo:
    """Tests for scan_repo."""

    def test_prefers_source_dir(self, sample_repo):
        files = scan_repo(sample_repo, [".py"], "src")

        assert [f.relative_path for f in files] == [
            "src/broken.py",
            "src/shop/orders.py",
            "src/shop/payments.py",
        ]

    def test_ignored_directory_skipped(self, sample_repo):
        files = scan_repo(sample_repo, [".py"], "src")
        assert not any("build" in f.relative_path for f in files)

    def test_falls_back_to_root(self, tmp_path):
        (tmp_path / "app.py").write_text("x = 1\n", encoding="utf-8")
        (tmp_path / "__pycache__").mkdir()
        (tmp_path / "__pycache__" / "app.py").write_text("", encoding="utf-8")

        files = scan_repo(tmp_path, [".py"], "src")

        assert [f.relative_path for f in files] == ["app.py"]

    def test_extension_filter(self, sample_repo):
        files = scan_repo(sample_repo, [".md"], None)
        assert [f.relative_path for f in files] == ["README.md"]

    def test_file_sizes_recorded(self, sample_repo):
        files = scan_repo(sample_repo, [".py"], "src")
        for file in files:
            assert file.size == file.path.stat().st_size

    def test_missing_root(self, tmp_path):
        with pytest.raises(ScanError):
            scan_repo(tmp_path / "nope", [".py"])


class TestExtractSymbols:
    """Tests for Python symbol extraction."""

    @pytest.fixture
    def symbols(self, sample_repo):
        return extract_symbols(scan_repo(sample_repo, [".py"], "src"))

    def test_broken_file_skipped(self, symbols):
        assert not any(s.relative_path == "src/broken.py" for s in symbols)

    def test_top_level_declarations(self, symbols):
        orders = {s.name: s for s in symbols if s.relative_path == "src/shop/orders.py"}

        assert set(orders) == {"_CACHE", "Order", "OrderLine", "place_order"}
        assert orders["Order"].kind == "class"
        assert orders["place_order"].kind == "function"
        assert orders["_CACHE"].kind == "variable"
        assert orders["Order"].line == 6

    def test_underscore_names_not_exported(self, symbols):
        orders = {s.name: s for s in symbols if s.relative_path == "src/shop/orders.py"}
        assert orders["Order"].is_exported
        assert not orders["_CACHE"].is_exported

    def test_dunder_all_decides_exports(self, symbols):
        payments = {s.name: s for s in symbols if s.relative_path == "src/shop/payments.py"}

        assert "__all__" not in payments
        assert "amount" not in payments
        assert payments["Payment"].is_exported
        assert not payments["PaymentGateway"].is_exported

    def test_format_exported_only(self, symbols):
        text = format_symbols(symbols)

        assert "- [class] Order (in src/shop/orders.py:6)" in text
        assert "PaymentGateway" not in text
        assert "_CACHE" not in text

    def test_format_all_symbols(self, symbols):
        assert "PaymentGateway" in format_symbols(symbols, exported_only=False)


class TestSnippets:
    """Tests for snippet selection."""

    @pytest.fixture
    def files(self, tmp_path) -> list[FileInfo]:
        result = []
        for name, size in (("big.py", 50), ("small.py", 5), ("medium.py", 20)):
            path = tmp_path / name
            path.write_text("x" * size, encoding="utf-8")
            result.append(FileInfo(path=path, relative_path=f"src/{name}", size=size))
        return result

    def test_resolve_references_normalizes_paths(self, files):
        resolved = resolve_references(files, ["./src/small.py", "src\\big.py", "src/missing.py", ""])
        assert [f.relative_path for f in resolved] == ["src/big.py", "src/small.py"]

    def test_smallest_first(self, files):
        snippets = extract_snippets(files, max_files=30, max_chars=100)
        assert [s.relative_path for s in snippets] == ["src/small.py", "src/medium.py", "src/big.py"]

    def test_max_files(self, files):
        snippets = extract_snippets(files, max_files=2, max_chars=100)
        assert [s.relative_path for s in snippets] == ["src/small.py", "src/medium.py"]

    def test_truncation(self, files):
        snippets = extract_snippets(files, max_files=30, max_chars=10)
        by_path = {s.relative_path: s for s in snippets}

        assert by_path["src/big.py"].content == "x" * 10
        assert by_path["src/big.py"].truncated
        assert not by_path["src/small.py"].truncated

    def test_unreadable_file_skipped(self, files, tmp_path):
        missing = FileInfo(path=tmp_path / "gone.py", relative_path="src/gone.py", size=1)
        snippets = extract_snippets(files + [missing])
        assert "src/gone.py" not in [s.relative_path for s in snippets]

    def test_format_snippets(self, files):
        text = format_snippets(extract_snippets(files, max_chars=10))

        assert "File: src/small.py\n```\nxxxxx\n```" in text
        assert "# ... (truncated)" in text

    def test_format_no_snippets(self):
        assert format_snippets([]) == ""


def test_file_info_is_hashable(tmp_path):
    info = FileInfo(path=Path(tmp_path), relative_path="a.py", size=0)
    assert info in {info}
