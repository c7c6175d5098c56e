"""Tree-sitter parsing with a per-path tree cache.

Trees are cached by file path, not by content hash: once a path is parsed,
later calls return the same tree even if the file changed on disk, until
``clear_cache()`` is called. Callers that need fresh content must clear.

Tree-sitter never refuses input; it recovers and marks the damage with
ERROR and MISSING nodes. A tree carrying such nodes is reported as a
ParseError so that a broken file is never mistaken for a file that declares
nothing.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from sourcetruth.core.errors import AnalysisError, InternalError, ParseError

log = structlog.get_logger(__name__)

# Extension -> grammar name. Anything else (inline snippets) uses tsx,
# which accepts both type annotations and JSX.
GRAMMAR_BY_EXTENSION: dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}
DEFAULT_GRAMMAR = "tsx"


def _load_grammar(name: str) -> tree_sitter.Language:
    if name == "typescript":
        return tree_sitter.Language(tree_sitter_typescript.language_typescript())
    if name == "tsx":
        return tree_sitter.Language(tree_sitter_typescript.language_tsx())
    if name == "javascript":
        return tree_sitter.Language(tree_sitter_javascript.language())
    raise ValueError(f"Language not available: {name}")


def grammar_for_path(file_path: str | Path) -> str:
    """Pick the grammar for a path from its extension."""
    ext = os.path.splitext(os.fspath(file_path))[1].lower()
    return GRAMMAR_BY_EXTENSION.get(ext, DEFAULT_GRAMMAR)


@dataclass(frozen=True)
class SyntaxTree:
    """Parsed representation of one file. Never mutated after creation."""

    file_path: str
    language: str
    tree: Any = field(repr=False, compare=False)  # tree_sitter.Tree
    source: bytes = field(repr=False, compare=False)

    @property
    def root(self) -> Any:
        return self.tree.root_node


def _first_error(node: Any) -> Any | None:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


@dataclass
class SourceParser:
    """
    Parser cache for JavaScript and TypeScript sources.

    Usage::

        parser = SourceParser()

        tree = parser.parse_path("src/app.ts")
        same = parser.parse_path("src/app.ts")   # cached
        assert same is tree

        parser.clear_cache()
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)
    _cache: dict[str, SyntaxTree] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()

    def _get_language(self, name: str) -> Any:
        if name not in self._languages:
            try:
                self._languages[name] = _load_grammar(name)
            except ValueError as e:
                # Unknown name, or a grammar built for another tree-sitter ABI
                raise InternalError.unexpected(
                    f"grammar '{name}' could not be loaded: {e}", language=name
                ) from e
        return self._languages[name]

    def parse(
        self, source: str | bytes, file_path: str | Path, *, cache: bool = True
    ) -> SyntaxTree:
        """
        Parse source text, or return the tree already cached for file_path.

        Args:
            source: Source text. Ignored when file_path is already cached.
            file_path: Cache key; its extension selects the grammar.
            cache: When False, neither read nor populate the cache (snippets).

        Returns:
            SyntaxTree for file_path.

        Raises:
            ParseError: The source contains syntax errors.
            InternalError: The grammar for the path cannot be loaded.
        """
        key = os.fspath(file_path)
        cached = self._cache.get(key) if cache else None
        if cached is not None:
            log.debug("parse.cache_hit", path=key)
            return cached

        content = source.encode("utf-8") if isinstance(source, str) else source
        language = grammar_for_path(key)

        started = time.perf_counter()
        self._parser.language = self._get_language(language)
        tree = self._parser.parse(content)

        if tree.root_node.has_error:
            bad = _first_error(tree.root_node)
            line, column = bad.start_point[0] + 1, bad.start_point[1]
            reason = f"missing '{bad.type}'" if bad.is_missing else "unexpected syntax"
            log.debug("parse.failed", path=key, line=line, column=column)
            raise ParseError.syntax(key, line, column, reason)

        result = SyntaxTree(file_path=key, language=language, tree=tree, source=content)
        if cache:
            self._cache[key] = result
        log.debug(
            "parse.done",
            path=key,
            language=language,
            ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result

    def parse_path(self, file_path: str | Path) -> SyntaxTree:
        """
        Read and parse a file from disk (cached by path).

        Raises:
            AnalysisError: The file cannot be read.
            ParseError: The file contains syntax errors.
        """
        key = os.fspath(file_path)
        cached = self._cache.get(key)
        if cached is not None:
            log.debug("parse.cache_hit", path=key)
            return cached
        try:
            content = Path(key).read_bytes()
        except OSError as e:
            raise AnalysisError.read_failed(key, str(e)) from e
        return self.parse(content, key)

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)
