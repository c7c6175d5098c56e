"""Tests for symbol, signature and reference extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from sourcetruth.analysis.models import Symbol
from sourcetruth.analysis.parser import SourceParser
from sourcetruth.analysis.symbols import SymbolExtractor


@pytest.fixture
def extractor() -> SymbolExtractor:
    return SymbolExtractor()


def _symbols(parser: SourceParser, code: str, path: str = "mod.ts") -> list[Symbol]:
    return SymbolExtractor().extract_symbols(parser.parse(code, path))


def _by_name(symbols: list[Symbol], name: str) -> list[Symbol]:
    return [s for s in symbols if s.name == name]


class TestDeclarations:
    """Declaration pass coverage."""

    def test_exported_function_with_signature(self, parser: SourceParser) -> None:
        """Given an exported typed function, one exported Symbol carries its signature."""
        symbols = _symbols(parser, "export function add(a: number, b: number) {}\n")

        assert len(symbols) == 1
        symbol = symbols[0]
        assert symbol.name == "add"
        assert symbol.kind == "function"
        assert symbol.exported is True
        assert symbol.signature == "add(a: number, b: number)"
        assert symbol.line == 1

    def test_all_declaration_kinds(self, parser: SourceParser) -> None:
        code = (
            "function f() {}\n"
            "class C {}\n"
            "const v = 1, w = 2;\n"
            "interface I { x: number }\n"
            "type T = string;\n"
        )
        symbols = _symbols(parser, code)

        assert [(s.name, s.kind) for s in symbols] == [
            ("f", "function"),
            ("C", "class"),
            ("v", "variable"),
            ("w", "variable"),
            ("I", "interface"),
            ("T", "type"),
        ]
        assert not any(s.exported for s in symbols)

    def test_destructuring_declarators_are_skipped(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "const { a, b } = obj;\nconst [c] = arr;\nconst d = 1;\n")

        assert [s.name for s in symbols] == ["d"]

    def test_class_methods_become_function_symbols(self, parser: SourceParser) -> None:
        code = (
            "export class Greeter {\n"
            "  greet(name: string): string { return name; }\n"
            "  async load() {}\n"
            "}\n"
        )
        symbols = _symbols(parser, code)

        greet = _by_name(symbols, "greet")[0]
        load = _by_name(symbols, "load")[0]
        assert greet.kind == "function"
        assert greet.signature == "greet(name: string): string"
        assert greet.exported is False
        assert load.signature == "async load()"
        assert _by_name(symbols, "Greeter")[0].exported is True

    def test_abstract_and_overload_signatures_are_not_symbols(self, parser: SourceParser) -> None:
        code = (
            "abstract class Shape {\n"
            "  abstract area(): number;\n"
            "  describe() { return 'shape'; }\n"
            "}\n"
        )
        symbols = _symbols(parser, code)

        assert _by_name(symbols, "area") == []
        assert len(_by_name(symbols, "describe")) == 1

    def test_nested_declarations_are_collected(self, parser: SourceParser) -> None:
        code = "function outer() {\n  function inner() {}\n  const local = 1;\n}\n"
        symbols = _symbols(parser, code)

        assert [s.name for s in symbols] == ["outer", "inner", "local"]

    def test_duplicates_are_preserved(self, parser: SourceParser) -> None:
        code = "function f() { const x = 1; }\nfunction g() { const x = 2; }\n"
        symbols = _symbols(parser, code)

        assert len(_by_name(symbols, "x")) == 2

    def test_symbols_in_source_order_with_positions(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "const a = 1;\n\n  function b() {}\n")

        assert [(s.name, s.line) for s in symbols] == [("a", 1), ("b", 3)]
        assert symbols[1].column == 2

    def test_file_path_override(self, parser: SourceParser) -> None:
        tree = parser.parse("const a = 1;", "inline.ts")
        symbols = SymbolExtractor().extract_symbols(tree, "/repo/a.ts")

        assert symbols[0].file_path == "/repo/a.ts"


class TestExportPromotion:
    """Second pass flipping exported flags."""

    def test_export_clause_promotes_local_names(self, parser: SourceParser) -> None:
        code = "function a() {}\nconst b = 1;\nfunction c() {}\nexport { a, b as renamed };\n"
        symbols = _symbols(parser, code)

        assert _by_name(symbols, "a")[0].exported is True
        assert _by_name(symbols, "b")[0].exported is True
        assert _by_name(symbols, "c")[0].exported is False

    def test_export_before_declaration_still_promotes(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "export { late };\nfunction late() {}\n")

        assert _by_name(symbols, "late")[0].exported is True

    def test_reexport_from_other_module_does_not_promote(self, parser: SourceParser) -> None:
        code = 'function a() {}\nexport { a } from "./other";\n'
        symbols = _symbols(parser, code)

        assert _by_name(symbols, "a")[0].exported is False

    def test_default_function_promotes_declared_name(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "export default function main() {}\n")

        main = _by_name(symbols, "main")
        assert len(main) == 1
        assert main[0].exported is True
        assert _by_name(symbols, "default") == []

    def test_default_class_promotes_declared_name(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "export default class Widget {}\n")

        widget = _by_name(symbols, "Widget")
        assert len(widget) == 1
        assert widget[0].kind == "class"
        assert widget[0].exported is True

    def test_default_identifier_promotes_module_scope_symbol(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "const config = {};\nexport default config;\n")

        assert _by_name(symbols, "config")[0].exported is True

    def test_nested_local_with_exported_name_is_not_promoted(
        self, parser: SourceParser
    ) -> None:
        code = "function outer() {\n  const shared = 1;\n}\nconst shared = 2;\nexport { shared };\n"
        shared = _by_name(_symbols(parser, code), "shared")

        assert [s.exported for s in shared] == [False, True]

    def test_methods_are_never_promoted(self, parser: SourceParser) -> None:
        code = "class K {\n  run() {}\n}\nfunction run() {}\nexport { run };\n"
        run = _by_name(_symbols(parser, code), "run")

        assert [s.exported for s in run] == [False, True]

    def test_exported_interface_and_type(self, parser: SourceParser) -> None:
        symbols = _symbols(parser, "export interface Shape {}\nexport type Id = string;\n")

        assert all(s.exported for s in symbols)


class TestIdempotence:
    """Re-extraction after clearing the parser cache."""

    def test_same_symbols_after_clear_cache(
        self, parser: SourceParser, extractor: SymbolExtractor, tmp_path: Path
    ) -> None:
        """Given an unchanged file, a fresh parse yields an identical symbol sequence."""
        path = tmp_path / "shapes.ts"
        path.write_text(
            "export interface Shape { area(): number }\n"
            "export class Square {\n"
            "  constructor(private side: number) {}\n"
            "  area(): number { return this.side ** 2; }\n"
            "}\n"
            "const unit = new Square(1);\n"
            "export default function scale(s: Square, by = 2): Square { return s; }\n"
        )
        first_tree = parser.parse_path(path)
        first = [s.to_dict() for s in extractor.extract_symbols(first_tree)]

        parser.clear_cache()
        second_tree = parser.parse_path(path)
        second = [s.to_dict() for s in extractor.extract_symbols(second_tree)]

        assert second_tree is not first_tree
        assert second == first
        assert {"Shape", "Square", "area", "unit", "scale"} <= {s["name"] for s in first}


class TestSignatureStrings:
    """Rendering of Symbol.signature."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("function f(a, b) {}", "f(a, b)"),
            ("function f(a?: string) {}", "f(a?: string)"),
            ("function f(a = 1) {}", "f(a?)"),
            ("function f(...rest: number[]) {}", "f(...rest: number[])"),
            ("function f({ a, b }) {}", "f((...))"),
            ("async function f(): Promise<void> {}", "async f(): Promise"),
            ("function* gen() {}", "function* gen()"),
            ("function f(x: string | number): boolean {}", "f(x: string | number): boolean"),
            ("function f(x: { a: number }) {}", "f(x: unknown)"),
            ("function f(x: (string)[]) {}", "f(x: string[])"),
        ],
    )
    def test_rendering(self, parser: SourceParser, code: str, expected: str) -> None:
        symbols = _symbols(parser, code)

        assert symbols[0].signature == expected


class TestExtractSignatures:
    """FunctionSignature extraction."""

    def test_parameters_and_flags(self, parser: SourceParser, extractor: SymbolExtractor) -> None:
        code = "export async function load(url: string, retries = 3, ...rest) {}\n"
        signatures = extractor.extract_signatures(parser.parse(code, "net.ts"))

        assert len(signatures) == 1
        sig = signatures[0]
        assert sig.name == "load"
        assert sig.is_async is True
        assert sig.is_generator is False
        assert [(p.name, p.optional, p.rest) for p in sig.parameters] == [
            ("url", False, False),
            ("retries", True, False),
            ("rest", True, True),
        ]
        assert sig.parameters[0].type == "string"
        assert sig.min_args == 1
        assert sig.max_args is None

    def test_destructured_parameter_is_unknown(
        self, parser: SourceParser, extractor: SymbolExtractor
    ) -> None:
        signatures = extractor.extract_signatures(parser.parse("function f({ a }) {}", "a.js"))

        assert signatures[0].parameters[0].name == "unknown"
        assert signatures[0].max_args == 1

    def test_includes_methods_and_generators(
        self, parser: SourceParser, extractor: SymbolExtractor
    ) -> None:
        code = "function* gen() {}\nclass A {\n  step(n: number): void {}\n}\n"
        signatures = extractor.extract_signatures(parser.parse(code, "a.ts"))

        assert [s.name for s in signatures] == ["gen", "step"]
        assert signatures[0].is_generator is True
        assert signatures[1].return_type == "void"

    def test_private_methods_are_excluded(
        self, parser: SourceParser, extractor: SymbolExtractor
    ) -> None:
        code = "class A {\n  #secret() {}\n  open() {}\n}\n"
        signatures = extractor.extract_signatures(parser.parse(code, "a.js"))

        assert [s.name for s in signatures] == ["open"]

    def test_to_dict_lists_parameters(
        self, parser: SourceParser, extractor: SymbolExtractor
    ) -> None:
        signatures = extractor.extract_signatures(parser.parse("function f(a) {}", "a.js"))

        data = signatures[0].to_dict()
        assert data["parameters"] == [{"name": "a", "type": None, "optional": False, "rest": False}]


class TestFindReferences:
    """Identifier occurrences other than declarations."""

    def test_finds_usages_not_declaration(
        self, parser: SourceParser, extractor: SymbolExtractor
    ) -> None:
        code = "function add(a, b) { return a + b; }\nadd(1, 2);\nconst x = add;\n"
        refs = extractor.find_references(parser.parse(code, "a.js"), "add")

        assert [r.line for r in refs] == [2, 3]
        assert refs[0].context == "Line 2"
        assert refs[0].column == 0

    def test_no_references(self, parser: SourceParser, extractor: SymbolExtractor) -> None:
        refs = extractor.find_references(parser.parse("const a = 1;", "a.js"), "missing")

        assert refs == []
