"""Tests for the dependency graph builder."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from sourcetruth.analysis.graph import DependencyGraphBuilder
from sourcetruth.analysis.modules import ModuleExtractor
from sourcetruth.analysis.parser import SourceParser
from sourcetruth.analysis.resolver import ModuleResolver
from sourcetruth.core.errors import ParseError

WriteSource = Callable[[str, str], Path]


@pytest.fixture
def builder(parser: SourceParser) -> DependencyGraphBuilder:
    return DependencyGraphBuilder(ModuleExtractor(parser), ModuleResolver())


def _src(root: Path, *parts: str) -> str:
    return str(root.joinpath("src", *parts))


class TestBuildGraph:
    """Graph construction."""

    def test_relative_edges_only(self, builder: DependencyGraphBuilder, sample_project: Path) -> None:
        app = _src(sample_project, "app.ts")
        math = _src(sample_project, "math.ts")
        utils = _src(sample_project, "utils", "index.ts")

        graph = builder.build_graph([app, math, utils])

        assert graph == {
            app: {math, utils},
            math: set(),
            utils: {math},
        }

    def test_unresolved_imports_contribute_no_edges(
        self, builder: DependencyGraphBuilder, write_source: WriteSource
    ) -> None:
        app = write_source("app.ts", 'import { x } from "./missing";\n')

        assert builder.build_graph([app]) == {str(app): set()}

    def test_parse_failure_propagates(
        self, builder: DependencyGraphBuilder, write_source: WriteSource
    ) -> None:
        good = write_source("good.ts", "export const a = 1;\n")
        bad = write_source("bad.ts", "import {\n")

        with pytest.raises(ParseError):
            builder.build_graph([good, bad])


class TestFindImporters:
    """Reverse lookups."""

    def test_graph_and_importers_agree(
        self, builder: DependencyGraphBuilder, sample_project: Path
    ) -> None:
        files = [
            _src(sample_project, "app.ts"),
            _src(sample_project, "math.ts"),
            _src(sample_project, "utils", "index.ts"),
        ]
        graph = builder.build_graph(files)

        for target in files:
            expected = [f for f in files if target in graph[f]]
            assert builder.find_importers(target, files) == expected

    def test_importers_of_math(self, builder: DependencyGraphBuilder, sample_project: Path) -> None:
        files = [
            _src(sample_project, "app.ts"),
            _src(sample_project, "math.ts"),
            _src(sample_project, "utils", "index.ts"),
        ]

        importers = builder.find_importers(_src(sample_project, "math.ts"), files)

        assert importers == [files[0], files[2]]

    def test_no_importers(self, builder: DependencyGraphBuilder, sample_project: Path) -> None:
        app = _src(sample_project, "app.ts")

        assert builder.find_importers(app, [app]) == []


class TestExportQueries:
    """Export lookups across files."""

    def test_find_exporting_file_respects_order(
        self, builder: DependencyGraphBuilder, write_source: WriteSource
    ) -> None:
        first = write_source("a.ts", "export function shared() {}\n")
        second = write_source("b.ts", "export const shared = 1;\n")
        other = write_source("c.ts", "export const other = 1;\n")

        assert builder.find_exporting_file("shared", [other, second, first]) == str(second)
        assert builder.find_exporting_file("shared", [first, second]) == str(first)
        assert builder.find_exporting_file("absent", [first, second, other]) is None

    def test_export_exists(self, builder: DependencyGraphBuilder, write_source: WriteSource) -> None:
        path = write_source("a.ts", "export default class {}\nexport const x = 1;\n")

        assert builder.export_exists(path, "default")
        assert builder.export_exists(path, "x")
        assert not builder.export_exists(path, "y")

    def test_get_all_exports_skips_empty_and_broken(
        self, builder: DependencyGraphBuilder, write_source: WriteSource
    ) -> None:
        lib = write_source("lib.ts", "export const a = 1;\n")
        empty = write_source("empty.ts", "const b = 2;\n")
        broken = write_source("broken.ts", "export const = ;\n")

        with capture_logs() as logs:
            result = builder.get_all_exports([lib, empty, broken])

        assert list(result) == [str(lib)]
        assert [e.name for e in result[str(lib)]] == ["a"]
        assert any(
            entry["event"] == "exports.skipped" and entry["path"] == str(broken) for entry in logs
        )

    def test_get_all_imports_skips_empty_and_broken(
        self, builder: DependencyGraphBuilder, write_source: WriteSource
    ) -> None:
        app = write_source("app.ts", 'import x from "./x";\n')
        empty = write_source("empty.ts", "const b = 2;\n")
        broken = write_source("broken.ts", "import {\n")

        result = builder.get_all_imports([app, empty, broken])

        assert list(result) == [str(app)]
        assert result[str(app)][0].specifier == "./x"
