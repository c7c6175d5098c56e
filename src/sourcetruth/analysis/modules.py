"""Import and export extraction with per-file caches.

Three import shapes are recognized: static ``import`` statements, dynamic
``import("m")`` calls and ``require("m")`` calls. Dynamic and require
specifiers are only tracked when the argument is a string literal; computed
specifiers are invisible to static analysis.

Both caches live until ``clear_cache()``, which also clears the shared
parser cache.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import structlog
import tree_sitter

from sourcetruth.analysis import nodes
from sourcetruth.analysis.models import ExportRecord, ImportRecord, SymbolKind
from sourcetruth.analysis.parser import SourceParser, SyntaxTree
from sourcetruth.core.errors import AnalysisError

log = structlog.get_logger(__name__)

StarExportOrigin = Literal["specifier", "file"]


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


def _import_bindings(statement: Any) -> list[str]:
    bindings: list[str] = []
    for child in statement.named_children:
        if child.type == "import_require_clause":
            names = [c for c in child.named_children if c.type == "identifier"]
            if names:
                bindings.append(nodes.text(names[0]))
        if child.type != "import_clause":
            continue
        for clause_child in child.named_children:
            if clause_child.type == "identifier":
                bindings.append(nodes.text(clause_child))
            elif clause_child.type == "namespace_import":
                local = [c for c in clause_child.named_children if c.type == "identifier"]
                if local:
                    bindings.append(f"* as {nodes.text(local[0])}")
            elif clause_child.type == "named_imports":
                for spec in clause_child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    imported = nodes.text(spec.child_by_field_name("name"))
                    alias_node = spec.child_by_field_name("alias")
                    local = nodes.text(alias_node) if alias_node is not None else imported
                    if not imported:
                        continue
                    bindings.append(imported if imported == local else f"{imported} as {local}")
    return bindings


def _import_source(statement: Any) -> str | None:
    source = nodes.string_value(statement.child_by_field_name("source"))
    if source is not None:
        return source
    # `import x = require("m")` keeps its string inside the require clause
    for child in statement.named_children:
        if child.type == "import_require_clause":
            source_node = child.child_by_field_name("source")
            if source_node is None:
                strings = [c for c in child.named_children if c.type == "string"]
                source_node = strings[0] if strings else None
            return nodes.string_value(source_node)
    return None


# import("m") and require("m") share one shape; _call_import tells them apart
_IMPORT_QUERY = """
(import_statement) @import

(call_expression
  function: (import)) @call

(call_expression
  function: (identifier) @callee
  (#eq? @callee "require")) @call
"""

_import_queries: dict[str, tree_sitter.Query] = {}


def _import_query(tree: SyntaxTree) -> tree_sitter.Query:
    """Compile the import query once per grammar."""
    query = _import_queries.get(tree.language)
    if query is None:
        query = tree_sitter.Query(tree.tree.language, _IMPORT_QUERY)
        _import_queries[tree.language] = query
    return query


def _call_import(call: Any) -> ImportRecord | None:
    """An ImportRecord for import("m") / require("m"), else None."""
    function = call.child_by_field_name("function")
    if function is None:
        return None
    marker = "dynamic" if function.type == "import" else "require"

    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return None
    args = [a for a in arguments.named_children if a.type != "comment"]
    if not args:
        return None
    specifier = nodes.string_value(args[0])
    if specifier is None:
        return None
    return ImportRecord(specifier=specifier, specifiers=(marker,), line=nodes.line_of(call))


def collect_imports(tree: SyntaxTree) -> list[ImportRecord]:
    """Import records of one parsed file, in source order."""
    found: list[tuple[int, ImportRecord]] = []
    cursor = tree_sitter.QueryCursor(_import_query(tree))
    for _pattern_idx, captures in cursor.matches(tree.root):
        if "import" in captures:
            statement = captures["import"][0]
            source = _import_source(statement)
            if source is None:
                continue
            record = ImportRecord(
                specifier=source,
                specifiers=tuple(_import_bindings(statement)),
                is_type_only=nodes.has_token(statement, "type"),
                line=nodes.line_of(statement),
            )
            found.append((statement.start_byte, record))
        elif "call" in captures:
            call = captures["call"][0]
            call_record = _call_import(call)
            if call_record is not None:
                found.append((call.start_byte, call_record))
    found.sort(key=lambda item: item[0])
    return [record for _start, record in found]


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

_DECLARATION_KINDS: dict[str, SymbolKind] = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "function_signature": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
}


def _declaration_exports(declaration: Any, file_path: str) -> list[ExportRecord]:
    kind = declaration.type
    if kind in nodes.VARIABLE_DECLARATIONS:
        records = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            records.append(
                ExportRecord(
                    name=nodes.text(name_node),
                    kind="variable",
                    file_path=file_path,
                    line=nodes.line_of(declarator),
                )
            )
        return records
    if kind == "ambient_declaration":
        records = []
        for child in declaration.named_children:
            records.extend(_declaration_exports(child, file_path))
        return records

    symbol_kind = _DECLARATION_KINDS.get(kind)
    name = nodes.declared_name(declaration)
    if symbol_kind is None or not name:
        return []
    signature = None
    if symbol_kind == "function":
        signature = nodes.render_declaration_signature(declaration, name)
    return [
        ExportRecord(
            name=name,
            kind=symbol_kind,
            file_path=file_path,
            line=nodes.line_of(declaration),
            signature=signature,
        )
    ]


def _default_export(statement: Any, file_path: str) -> ExportRecord:
    target = statement.child_by_field_name("declaration")
    if target is None:
        target = statement.child_by_field_name("value")
    kind: SymbolKind = "variable"
    signature = None
    line = nodes.line_of(statement)
    if target is not None:
        line = nodes.line_of(target)
        if target.type in nodes.FUNCTION_DECLARATIONS or target.type in nodes.FUNCTION_EXPRESSIONS:
            kind = "function"
            name = nodes.declared_name(target)
            if name:
                signature = nodes.render_declaration_signature(target, name)
        elif target.type in nodes.CLASS_DECLARATIONS or target.type == "class":
            kind = "class"
        else:
            line = nodes.line_of(statement)
    return ExportRecord(
        name="default", kind=kind, file_path=file_path, line=line, signature=signature
    )


def collect_exports(
    tree: SyntaxTree, star_export_origin: StarExportOrigin = "specifier"
) -> list[ExportRecord]:
    """Export records of one parsed file, in source order.

    ``export * from "m"`` is recorded as name ``"*"``; its file_path is the
    specifier ``"m"`` when star_export_origin is "specifier" (the default),
    or the declaring file when it is "file".
    """
    file_path = tree.file_path
    exports: list[ExportRecord] = []
    for statement in nodes.walk(tree.root):
        if statement.type != "export_statement":
            continue
        source = nodes.string_value(statement.child_by_field_name("source"))

        if nodes.has_token(statement, "default"):
            exports.append(_default_export(statement, file_path))
        else:
            declaration = statement.child_by_field_name("declaration")
            if declaration is not None:
                exports.extend(_declaration_exports(declaration, file_path))

        for child in statement.named_children:
            if child.type == "export_clause":
                for spec in child.named_children:
                    if spec.type != "export_specifier":
                        continue
                    exported_node = spec.child_by_field_name("alias")
                    if exported_node is None:
                        exported_node = spec.child_by_field_name("name")
                    exported = nodes.text(exported_node)
                    if not exported:
                        continue
                    exports.append(
                        ExportRecord(
                            name=exported.strip("'\""),
                            kind="variable",
                            file_path=file_path,
                            line=nodes.line_of(spec),
                            source=source,
                        )
                    )
            elif child.type == "namespace_export":
                names = [c for c in child.named_children if c.type in ("identifier", "string")]
                if names:
                    exports.append(
                        ExportRecord(
                            name=nodes.text(names[0]).strip("'\""),
                            kind="variable",
                            file_path=file_path,
                            line=nodes.line_of(statement),
                            source=source,
                        )
                    )

        if source is not None and nodes.has_token(statement, "*"):
            exports.append(
                ExportRecord(
                    name="*",
                    kind="variable",
                    file_path=source if star_export_origin == "specifier" else file_path,
                    line=nodes.line_of(statement),
                    source=source,
                )
            )
    return exports


class ModuleExtractor:
    """
    Cached import/export extraction over files on disk.

    Usage::

        extractor = ModuleExtractor(SourceParser())
        imports = extractor.extract_imports("src/app.ts")
        exports = extractor.extract_exports("src/lib.ts")
    """

    def __init__(
        self,
        parser: SourceParser | None = None,
        *,
        star_export_origin: StarExportOrigin = "specifier",
    ) -> None:
        self._parser = parser or SourceParser()
        self._star_export_origin = star_export_origin
        self._imports: dict[str, list[ImportRecord]] = {}
        self._exports: dict[str, list[ExportRecord]] = {}

    @property
    def parser(self) -> SourceParser:
        return self._parser

    def extract_imports(self, file_path: str | Path) -> list[ImportRecord]:
        """
        Import records of a file (cached).

        Raises:
            AnalysisError: The file cannot be read, parsed or walked.
        """
        key = os.fspath(file_path)
        cached = self._imports.get(key)
        if cached is not None:
            return cached
        try:
            imports = collect_imports(self._parser.parse_path(key))
        except AnalysisError:
            raise
        except Exception as e:
            raise AnalysisError.extraction_failed(key, "imports", str(e)) from e
        self._imports[key] = imports
        log.debug("imports.extracted", path=key, count=len(imports))
        return imports

    def extract_exports(self, file_path: str | Path) -> list[ExportRecord]:
        """
        Export records of a file (cached).

        Raises:
            AnalysisError: The file cannot be read, parsed or walked.
        """
        key = os.fspath(file_path)
        cached = self._exports.get(key)
        if cached is not None:
            return cached
        try:
            exports = collect_exports(self._parser.parse_path(key), self._star_export_origin)
        except AnalysisError:
            raise
        except Exception as e:
            raise AnalysisError.extraction_failed(key, "exports", str(e)) from e
        self._exports[key] = exports
        log.debug("exports.extracted", path=key, count=len(exports))
        return exports

    def clear_cache(self) -> None:
        self._imports.clear()
        self._exports.clear()
        self._parser.clear_cache()
