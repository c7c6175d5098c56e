"""File-level dependency graph and import/export queries.

Graph nodes are file paths; an edge A -> B means A imports a relative
specifier that resolves to B on disk. External packages, built-ins and
unresolved imports contribute no edges.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from sourcetruth.analysis.models import ExportRecord, ImportRecord
from sourcetruth.analysis.modules import ModuleExtractor
from sourcetruth.analysis.resolver import ModuleResolver
from sourcetruth.core.errors import AnalysisError

log = structlog.get_logger(__name__)

DependencyGraph = dict[str, set[str]]


def _normalize(path: str | Path) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


class DependencyGraphBuilder:
    """
    Builds dependency graphs on top of import extraction and resolution.

    Usage::

        builder = DependencyGraphBuilder(ModuleExtractor(), ModuleResolver())
        graph = builder.build_graph(["src/a.ts", "src/b.ts"])
        importers = builder.find_importers("src/b.ts", ["src/a.ts", "src/b.ts"])
    """

    def __init__(
        self,
        modules: ModuleExtractor | None = None,
        resolver: ModuleResolver | None = None,
    ) -> None:
        self._modules = modules or ModuleExtractor()
        self._resolver = resolver or ModuleResolver()

    def _resolved_dependencies(self, file_path: str) -> Iterable[str]:
        for record in self._modules.extract_imports(file_path):
            if not record.is_relative:
                continue
            result = self._resolver.resolve(record.specifier, file_path)
            if result.exists and result.resolved_path:
                yield _normalize(result.resolved_path)

    def build_graph(self, file_paths: Iterable[str | Path]) -> DependencyGraph:
        """
        Map every file to the set of files it imports.

        Every input file gets a node, even with no dependencies.

        Raises:
            AnalysisError: A file cannot be read or parsed.
        """
        graph: DependencyGraph = {}
        for file_path in file_paths:
            key = os.fspath(file_path)
            graph[key] = set(self._resolved_dependencies(key))
        log.debug(
            "graph.built",
            files=len(graph),
            edges=sum(len(deps) for deps in graph.values()),
        )
        return graph

    def find_importers(
        self, file_path: str | Path, all_files: Iterable[str | Path]
    ) -> list[str]:
        """
        Files among all_files with a relative import resolving to file_path.

        Raises:
            AnalysisError: A candidate file cannot be read or parsed.
        """
        target = _normalize(file_path)
        importers: list[str] = []
        for candidate in all_files:
            key = os.fspath(candidate)
            if any(dep == target for dep in self._resolved_dependencies(key)):
                importers.append(key)
        return importers

    def find_exporting_file(
        self, symbol_name: str, search_paths: Iterable[str | Path]
    ) -> str | None:
        """First file, in the given order, that exports symbol_name."""
        for file_path in search_paths:
            key = os.fspath(file_path)
            if self.export_exists(key, symbol_name):
                return key
        return None

    def export_exists(self, file_path: str | Path, export_name: str) -> bool:
        return any(e.name == export_name for e in self._modules.extract_exports(file_path))

    def get_all_exports(self, file_paths: Iterable[str | Path]) -> dict[str, list[ExportRecord]]:
        """Exports per file. Files without exports or that fail to parse are omitted."""
        result: dict[str, list[ExportRecord]] = {}
        for file_path in file_paths:
            key = os.fspath(file_path)
            try:
                exports = self._modules.extract_exports(key)
            except AnalysisError as e:
                log.warning("exports.skipped", path=key, error=e.message)
                continue
            if exports:
                result[key] = exports
        return result

    def get_all_imports(self, file_paths: Iterable[str | Path]) -> dict[str, list[ImportRecord]]:
        """Imports per file. Files without imports or that fail to parse are omitted."""
        result: dict[str, list[ImportRecord]] = {}
        for file_path in file_paths:
            key = os.fspath(file_path)
            try:
                imports = self._modules.extract_imports(key)
            except AnalysisError as e:
                log.warning("imports.skipped", path=key, error=e.message)
                continue
            if imports:
                result[key] = imports
        return result
