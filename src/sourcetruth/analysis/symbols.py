"""Symbol and signature extraction from parsed JavaScript/TypeScript trees.

Extraction is pure given a tree. Symbols come out in source order and are
never merged: two declarations of the same name are two Symbols.

Export promotion runs in two phases. The declaration pass collects every
Symbol and indexes module-scope declarations by name; only after it has
visited the whole file does the export pass flip ``exported`` through that
index. Methods and nested locals are never in the index, so an export can
only ever promote a module-level declaration.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any

from sourcetruth.analysis import nodes
from sourcetruth.analysis.models import FunctionSignature, Symbol, SymbolKind, SymbolReference
from sourcetruth.analysis.parser import SyntaxTree

_DECLARING_PARENTS = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "class_declaration",
        "abstract_class_declaration",
        "variable_declarator",
    }
)
_REFERENCE_NODES = frozenset(
    {
        "identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
        "type_identifier",
    }
)


class _DeclarationPass:
    """Visitor over declaration node kinds; one handler per kind."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        self.symbols: list[Symbol] = []
        self.module_scope: dict[str, list[Symbol]] = defaultdict(list)
        self.export_statements: list[Any] = []
        self._handlers: dict[str, Callable[[Any], None]] = {
            "function_declaration": self._function,
            "generator_function_declaration": self._function,
            "function_expression": self._default_function,
            "function": self._default_function,
            "generator_function": self._default_function,
            "lexical_declaration": self._variables,
            "variable_declaration": self._variables,
            "class_declaration": self._class,
            "abstract_class_declaration": self._class,
            "class": self._default_class,
            "interface_declaration": self._interface,
            "type_alias_declaration": self._type_alias,
            "export_statement": self.export_statements.append,
        }

    def run(self, root: Any) -> None:
        for node in nodes.walk(root):
            handler = self._handlers.get(node.type)
            if handler is not None:
                handler(node)

    def _add(
        self,
        node: Any,
        name: str,
        kind: SymbolKind,
        *,
        signature: str | None = None,
        module_scope_node: Any | None = None,
    ) -> None:
        symbol = Symbol(
            name=name,
            kind=kind,
            file_path=self.file_path,
            line=nodes.line_of(node),
            column=nodes.column_of(node),
            signature=signature,
        )
        self.symbols.append(symbol)
        if module_scope_node is not None and nodes.is_module_scope(module_scope_node):
            self.module_scope[name].append(symbol)

    def _function(self, node: Any) -> None:
        name = nodes.declared_name(node)
        if name:
            signature = nodes.render_declaration_signature(node, name)
            self._add(node, name, "function", signature=signature, module_scope_node=node)

    def _default_function(self, node: Any) -> None:
        # `export default function foo() {}` may surface as a named expression
        if nodes.is_default_export(node):
            self._function(node)

    def _variables(self, node: Any) -> None:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            self._add(declarator, nodes.text(name_node), "variable", module_scope_node=node)

    def _class(self, node: Any) -> None:
        name = nodes.declared_name(node)
        if name:
            self._add(node, name, "class", module_scope_node=node)
        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            if not nodes.is_class_method(member):
                continue
            method_name = nodes.declared_name(member)
            if method_name:
                signature = nodes.render_declaration_signature(member, method_name)
                self._add(member, method_name, "function", signature=signature)

    def _default_class(self, node: Any) -> None:
        if nodes.is_default_export(node) and nodes.declared_name(node):
            self._class(node)

    def _interface(self, node: Any) -> None:
        name = nodes.declared_name(node)
        if name:
            self._add(node, name, "interface", module_scope_node=node)

    def _type_alias(self, node: Any) -> None:
        name = nodes.declared_name(node)
        if name:
            self._add(node, name, "type", module_scope_node=node)


def _exported_declaration_names(declaration: Any) -> list[str]:
    kind = declaration.type
    if kind in nodes.VARIABLE_DECLARATIONS:
        names = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                names.append(nodes.text(name_node))
        return names
    if kind == "ambient_declaration":
        names = []
        for child in declaration.named_children:
            names.extend(_exported_declaration_names(child))
        return names
    name = nodes.declared_name(declaration)
    return [name] if name else []


def _promoted_names(statement: Any) -> list[str]:
    """Local names an export statement makes visible to importers."""
    names: list[str] = []

    declaration = statement.child_by_field_name("declaration")
    if declaration is not None:
        names.extend(_exported_declaration_names(declaration))

    value = statement.child_by_field_name("value")
    if value is not None and nodes.has_token(statement, "default"):
        if value.type == "identifier":
            names.append(nodes.text(value))
        else:
            names.append(nodes.declared_name(value) or "")

    # Specifiers re-exported from another module name nothing local
    if statement.child_by_field_name("source") is None:
        for child in statement.named_children:
            if child.type != "export_clause":
                continue
            for spec in child.named_children:
                if spec.type == "export_specifier":
                    local = spec.child_by_field_name("name")
                    if local is not None:
                        names.append(nodes.text(local))
    return [n for n in names if n]


class SymbolExtractor:
    """
    Extracts declared symbols, call signatures and identifier references.

    Usage::

        tree = SourceParser().parse_path("src/math.ts")
        extractor = SymbolExtractor()

        symbols = extractor.extract_symbols(tree)
        signatures = extractor.extract_signatures(tree)
        refs = extractor.find_references(tree, "add")
    """

    def extract_symbols(self, tree: SyntaxTree, file_path: str | None = None) -> list[Symbol]:
        """
        Extract functions, classes (and their methods), variables,
        interfaces and type aliases, with export flags.

        Args:
            tree: Parsed file.
            file_path: Path recorded on each Symbol (defaults to tree.file_path).

        Returns:
            Symbols in source order.
        """
        declarations = _DeclarationPass(file_path or tree.file_path)
        declarations.run(tree.root)

        for statement in declarations.export_statements:
            for name in _promoted_names(statement):
                for symbol in declarations.module_scope.get(name, ()):
                    symbol.exported = True

        return declarations.symbols

    def extract_signatures(
        self, tree: SyntaxTree, file_path: str | None = None
    ) -> list[FunctionSignature]:
        """Extract call signatures of function declarations and class methods."""
        path = file_path or tree.file_path
        signatures: list[FunctionSignature] = []
        for node in nodes.walk(tree.root):
            kind = node.type
            if kind in nodes.FUNCTION_DECLARATIONS:
                include = True
            elif kind in ("function_expression", "function", "generator_function"):
                include = nodes.is_default_export(node)
            else:
                include = nodes.is_class_method(node)
            if not include:
                continue

            name = nodes.declared_name(node)
            if not name:
                continue
            signatures.append(
                FunctionSignature(
                    name=name,
                    parameters=nodes.parameters(node),
                    file_path=path,
                    return_type=nodes.return_type(node),
                    is_async=nodes.has_token(node, "async"),
                    is_generator=kind == "generator_function_declaration"
                    or kind == "generator_function"
                    or (kind == "method_definition" and nodes.has_token(node, "*")),
                    line=nodes.line_of(node),
                )
            )
        return signatures

    def find_references(self, tree: SyntaxTree, symbol_name: str) -> list[SymbolReference]:
        """Find identifier occurrences of symbol_name other than its declarations."""
        references: list[SymbolReference] = []
        for node in nodes.walk(tree.root):
            if node.type not in _REFERENCE_NODES or nodes.text(node) != symbol_name:
                continue
            parent = node.parent
            if (
                parent is not None
                and parent.type in _DECLARING_PARENTS
                and parent.child_by_field_name("name") == node
            ):
                continue
            line = nodes.line_of(node)
            references.append(
                SymbolReference(line=line, column=nodes.column_of(node), context=f"Line {line}")
            )
        return references
