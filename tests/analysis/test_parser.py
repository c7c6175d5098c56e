"""Tests for the tree-sitter parser cache."""

from __future__ import annotations

from pathlib import Path

import pytest

from sourcetruth.analysis.parser import GRAMMAR_BY_EXTENSION, SourceParser, grammar_for_path
from sourcetruth.core.errors import AnalysisError, ErrorCode, InternalError, ParseError


class TestGrammarSelection:
    """Extension to grammar mapping."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("a.ts", "typescript"),
            ("a.mts", "typescript"),
            ("a.cts", "typescript"),
            ("a.tsx", "tsx"),
            ("a.js", "javascript"),
            ("a.jsx", "javascript"),
            ("a.mjs", "javascript"),
            ("a.cjs", "javascript"),
            ("snippet", "tsx"),
            ("notes.txt", "tsx"),
        ],
    )
    def test_grammar_for_path(self, path: str, expected: str) -> None:
        assert grammar_for_path(path) == expected

    def test_extension_match_is_case_insensitive(self) -> None:
        assert grammar_for_path("Component.TSX") == "tsx"


class TestParse:
    """Parsing and caching behavior."""

    def test_parses_typescript(self, parser: SourceParser) -> None:
        tree = parser.parse("const x: number = 1;", "a.ts")

        assert tree.language == "typescript"
        assert tree.root.type == "program"
        assert tree.file_path == "a.ts"

    def test_parses_jsx_in_javascript(self, parser: SourceParser) -> None:
        tree = parser.parse("const el = <div>hi</div>;", "a.jsx")

        assert tree.root.type == "program"

    def test_returns_cached_tree_for_same_path(self, parser: SourceParser) -> None:
        first = parser.parse("const a = 1;", "a.ts")
        second = parser.parse("const b = 2;", "a.ts")

        assert second is first
        assert parser.cache_size == 1

    def test_clear_cache_forces_reparse(self, parser: SourceParser) -> None:
        first = parser.parse("const a = 1;", "a.ts")
        parser.clear_cache()
        second = parser.parse("const b = 2;", "a.ts")

        assert second is not first
        assert b"const b" in second.source

    def test_uncached_parse_leaves_cache_untouched(self, parser: SourceParser) -> None:
        parser.parse("const a = 1;", "a.ts", cache=False)

        assert parser.cache_size == 0

    def test_syntax_error_raises_parse_error(self, parser: SourceParser) -> None:
        with pytest.raises(ParseError) as exc_info:
            parser.parse("function broken( {\n", "broken.ts")

        error = exc_info.value
        assert error.code == ErrorCode.PARSE_ERROR
        assert error.file_path == "broken.ts"
        assert error.line is not None and error.line >= 1

    def test_failed_parse_is_not_cached(self, parser: SourceParser) -> None:
        with pytest.raises(ParseError):
            parser.parse("class {", "broken.ts")

        assert parser.cache_size == 0

    def test_unloadable_grammar_raises_internal_error(
        self, parser: SourceParser, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setitem(GRAMMAR_BY_EXTENSION, ".ts", "cobol")

        with pytest.raises(InternalError) as exc_info:
            parser.parse("const a = 1;", "a.ts")

        assert exc_info.value.code == ErrorCode.INTERNAL_ERROR
        assert exc_info.value.details == {"language": "cobol"}
        assert parser.cache_size == 0


class TestParsePath:
    """Reading files from disk."""

    def test_reads_and_parses_file(self, parser: SourceParser, tmp_path: Path) -> None:
        path = tmp_path / "mod.js"
        path.write_text("module.exports = {};\n")

        tree = parser.parse_path(path)

        assert tree.language == "javascript"
        assert tree.file_path == str(path)

    def test_stale_content_masked_until_cleared(
        self, parser: SourceParser, tmp_path: Path
    ) -> None:
        path = tmp_path / "mod.ts"
        path.write_text("export const a = 1;\n")
        parser.parse_path(path)

        path.write_text("export const b = 2;\n")
        assert b"const a" in parser.parse_path(path).source

        parser.clear_cache()
        assert b"const b" in parser.parse_path(path).source

    def test_missing_file_raises_analysis_error(
        self, parser: SourceParser, tmp_path: Path
    ) -> None:
        with pytest.raises(AnalysisError) as exc_info:
            parser.parse_path(tmp_path / "missing.ts")

        assert exc_info.value.code == ErrorCode.FILE_READ_ERROR
        assert not isinstance(exc_info.value, ParseError)
