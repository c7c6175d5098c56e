"""Analysis engine: one session over one workspace.

The engine owns every cache and opens a logging session: events logged
while it is in use carry its ``session_id``. All components share a single
SourceParser, so a file is parsed at most once per session no matter how
many queries touch it. ``clear_cache()`` drops everything; use it after files change on
disk or start a new engine.

Not thread-safe. Use one engine per logical session.
"""

from __future__ import annotations

import difflib
import os
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog

from sourcetruth.analysis.graph import DependencyGraph, DependencyGraphBuilder
from sourcetruth.analysis.models import (
    APIValidationResult,
    ExportRecord,
    FunctionSignature,
    ImportRecord,
    ResolutionResult,
    SignatureMatchResult,
    Symbol,
    SymbolKind,
    SymbolLookup,
    SymbolReference,
)
from sourcetruth.analysis.modules import ModuleExtractor
from sourcetruth.analysis.parser import SourceParser
from sourcetruth.analysis.resolver import ModuleResolver
from sourcetruth.analysis.signatures import SignatureValidator
from sourcetruth.analysis.symbols import SymbolExtractor
from sourcetruth.analysis.workspace import Workspace
from sourcetruth.config.loader import load_config
from sourcetruth.config.models import SourceTruthConfig
from sourcetruth.core.errors import AnalysisError
from sourcetruth.core.logging import set_session_id

log = structlog.get_logger(__name__)


class AnalysisEngine:
    """
    Facade over parsing, extraction, resolution, graphs and validation.

    Relative file paths are taken from the workspace root.

    Usage::

        engine = AnalysisEngine.load("/repo")

        symbols = engine.extract_symbols("src/math.ts")
        result = engine.resolve("./utils", "src/app.ts")
        lookup = engine.verify_symbol("add")
        engine.clear_cache()
    """

    def __init__(
        self,
        workspace_root: str | Path | None = None,
        config: SourceTruthConfig | None = None,
    ) -> None:
        self.config = config or SourceTruthConfig()
        self.workspace = Workspace(workspace_root or os.getcwd(), self.config.workspace)

        self.parser = SourceParser()
        self.symbols = SymbolExtractor()
        self.modules = ModuleExtractor(
            self.parser, star_export_origin=self.config.analysis.star_export_origin
        )
        self.resolver = ModuleResolver(self.config.resolver)
        self.graph = DependencyGraphBuilder(self.modules, self.resolver)
        self.signatures = SignatureValidator(self.parser, self.symbols)

        self._symbol_index: dict[str, list[Symbol]] | None = None

        self.session_id = set_session_id()
        log.debug("engine.created", root=self.workspace.root)

    @classmethod
    def load(cls, workspace_root: str | Path | None = None, **kwargs: Any) -> AnalysisEngine:
        """Create an engine with configuration loaded for workspace_root."""
        root = Path(workspace_root or os.getcwd())
        return cls(root, load_config(root, **kwargs))

    @property
    def root(self) -> str:
        return self.workspace.root

    def _path(self, file_path: str | Path) -> str:
        return self.workspace.resolve(file_path)

    def _paths(self, file_paths: Iterable[str | Path] | None) -> list[str]:
        if file_paths is None:
            return self.source_files()
        return [self._path(p) for p in file_paths]

    # -------------------------------------------------------------------------
    # Symbols
    # -------------------------------------------------------------------------

    def extract_symbols(self, file_path: str | Path) -> list[Symbol]:
        return self.symbols.extract_symbols(self.parser.parse_path(self._path(file_path)))

    def extract_signatures(self, file_path: str | Path) -> list[FunctionSignature]:
        return self.signatures.get_signatures(self._path(file_path))

    def find_references(self, file_path: str | Path, symbol_name: str) -> list[SymbolReference]:
        tree = self.parser.parse_path(self._path(file_path))
        return self.symbols.find_references(tree, symbol_name)

    # -------------------------------------------------------------------------
    # Imports, exports, resolution
    # -------------------------------------------------------------------------

    def extract_imports(self, file_path: str | Path) -> list[ImportRecord]:
        return self.modules.extract_imports(self._path(file_path))

    def extract_exports(self, file_path: str | Path) -> list[ExportRecord]:
        return self.modules.extract_exports(self._path(file_path))

    def resolve(self, specifier: str, from_file: str | Path) -> ResolutionResult:
        return self.resolver.resolve(specifier, self._path(from_file))

    # -------------------------------------------------------------------------
    # Graph
    # -------------------------------------------------------------------------

    def build_graph(self, file_paths: Iterable[str | Path] | None = None) -> DependencyGraph:
        """Dependency graph over file_paths (default: every workspace source)."""
        return self.graph.build_graph(self._paths(file_paths))

    def find_importers(
        self, file_path: str | Path, all_files: Iterable[str | Path] | None = None
    ) -> list[str]:
        return self.graph.find_importers(self._path(file_path), self._paths(all_files))

    def find_exporting_file(
        self, symbol_name: str, search_paths: Iterable[str | Path] | None = None
    ) -> str | None:
        return self.graph.find_exporting_file(symbol_name, self._paths(search_paths))

    def export_exists(self, file_path: str | Path, export_name: str) -> bool:
        return self.graph.export_exists(self._path(file_path), export_name)

    def get_all_exports(
        self, file_paths: Iterable[str | Path] | None = None
    ) -> dict[str, list[ExportRecord]]:
        return self.graph.get_all_exports(self._paths(file_paths))

    def get_all_imports(
        self, file_paths: Iterable[str | Path] | None = None
    ) -> dict[str, list[ImportRecord]]:
        return self.graph.get_all_imports(self._paths(file_paths))

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_call(
        self, function_name: str, args: Sequence[str], file_path: str | Path | None = None
    ) -> SignatureMatchResult:
        path = self._path(file_path) if file_path else None
        return self.signatures.validate_call(function_name, args, path)

    def validate_api_usage(
        self, library: str, api: str, parameters: Mapping[str, Any]
    ) -> APIValidationResult:
        return self.signatures.validate_api_usage(library, api, parameters)

    def validate_code_signatures(
        self, code: str, file_path: str | Path | None = None
    ) -> list[SignatureMatchResult]:
        path = self._path(file_path) if file_path else None
        return self.signatures.validate_code_signatures(code, path)

    def find_signature(self, file_path: str | Path, name: str) -> FunctionSignature | None:
        return self.signatures.find_signature(self._path(file_path), name)

    # -------------------------------------------------------------------------
    # Workspace symbol index
    # -------------------------------------------------------------------------

    def source_files(self) -> list[str]:
        return self.workspace.source_files()

    def build_symbol_index(self) -> dict[str, list[Symbol]]:
        """
        Symbols of every workspace source, keyed by absolute path.

        Files that cannot be read or parsed are skipped with a warning, and
        files declaring nothing are omitted. Built once per session.
        """
        if self._symbol_index is not None:
            return self._symbol_index

        index: dict[str, list[Symbol]] = {}
        skipped = 0
        for path in self.source_files():
            try:
                symbols = self.symbols.extract_symbols(self.parser.parse_path(path))
            except AnalysisError as e:
                skipped += 1
                log.warning("index.skipped", path=path, error=e.message)
                continue
            if symbols:
                index[path] = symbols
        log.info("index.built", files=len(index), skipped=skipped)
        self._symbol_index = index
        return index

    def verify_symbol(
        self,
        symbol_name: str,
        file_path: str | Path | None = None,
        kind: SymbolKind | None = None,
    ) -> SymbolLookup:
        """
        Check whether a symbol is declared anywhere in the workspace.

        Args:
            symbol_name: Name to look for.
            file_path: Restrict the search to one file.
            kind: Restrict the search to one symbol kind.

        Returns:
            SymbolLookup. On a hit, best_match prefers exported declarations;
            on a miss, suggestions lists similarly named symbols.
        """
        candidates = self._indexed_symbols(file_path, kind)
        matches = [s for s in candidates if s.name == symbol_name]
        if matches:
            # sorted() is stable: source order is kept among equals
            ranked = sorted(matches, key=lambda s: not s.exported)
            return SymbolLookup(
                symbol=symbol_name,
                exists=True,
                best_match=ranked[0],
                other_matches=len(ranked) - 1,
            )
        return SymbolLookup(
            symbol=symbol_name,
            exists=False,
            suggestions=self._similar_symbols(symbol_name, candidates),
        )

    def _indexed_symbols(
        self, file_path: str | Path | None, kind: SymbolKind | None
    ) -> list[Symbol]:
        index = self.build_symbol_index()
        if file_path is not None:
            symbols = list(index.get(self._path(file_path), ()))
        else:
            symbols = [s for file_symbols in index.values() for s in file_symbols]
        if kind is not None:
            symbols = [s for s in symbols if s.kind == kind]
        return symbols

    def _similar_symbols(self, symbol_name: str, candidates: list[Symbol]) -> list[str]:
        cfg = self.config.analysis
        scored: list[tuple[float, str]] = []
        seen: set[str] = set()
        for symbol in candidates:
            score = difflib.SequenceMatcher(None, symbol_name, symbol.name).ratio()
            if score < cfg.similarity_threshold:
                continue
            label = (
                f"{symbol.name} ({symbol.kind} in {self.workspace.relative(symbol.file_path)})"
            )
            if label in seen:
                continue
            seen.add(label)
            scored.append((score, label))
        scored.sort(key=lambda item: -item[0])
        return [label for _score, label in scored[: cfg.suggestion_limit]]

    def clear_cache(self) -> None:
        """Drop every parsed tree, extraction result and the symbol index."""
        self.modules.clear_cache()
        self.signatures.clear_cache()
        self.parser.clear_cache()
        self._symbol_index = None
        log.debug("engine.cache_cleared")
