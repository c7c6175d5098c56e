"""Helpers over tree-sitter nodes of the JavaScript/TypeScript grammars.

Type rendering uses a small vocabulary: primitive keywords,
simple type names, arrays and unions. Everything else becomes ``unknown``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from sourcetruth.analysis.models import Parameter

FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
CLASS_DECLARATIONS = frozenset({"class_declaration", "abstract_class_declaration"})
VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})
FUNCTION_EXPRESSIONS = frozenset(
    {"function_expression", "function", "generator_function", "arrow_function"}
)

_KEYWORD_TYPES = frozenset({"string", "number", "boolean", "void", "any", "unknown"})


def text(node: Any | None) -> str:
    if node is None or node.text is None:
        return ""
    return str(node.text.decode("utf-8"))


def line_of(node: Any) -> int:
    return int(node.start_point[0]) + 1


def column_of(node: Any) -> int:
    return int(node.start_point[1])


def walk(node: Any) -> Iterator[Any]:
    """Pre-order traversal of named nodes, in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def has_token(node: Any, token: str) -> bool:
    """True if an anonymous child token (e.g. 'async', '*', 'default') is present."""
    return any(not c.is_named and c.type == token for c in node.children)


def string_value(node: Any | None) -> str | None:
    """Value of a plain string literal node, or None for anything else."""
    if node is None or node.type != "string":
        return None
    raw = text(node)
    return raw[1:-1] if len(raw) >= 2 else ""


def declared_name(node: Any) -> str | None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    return text(name_node) or None


def is_module_scope(node: Any) -> bool:
    """True if a declaration sits at module level (or a namespace body)."""
    parent = node.parent
    while parent is not None and parent.type in ("export_statement", "ambient_declaration"):
        parent = parent.parent
    if parent is None:
        return False
    if parent.type == "program":
        return True
    return (
        parent.type == "statement_block"
        and parent.parent is not None
        and parent.parent.type in ("module", "internal_module")
    )


def is_default_export(node: Any) -> bool:
    parent = node.parent
    return parent is not None and parent.type == "export_statement" and has_token(parent, "default")


def is_class_method(node: Any) -> bool:
    """A method_definition in a class body with a plain name and a body."""
    if node.type != "method_definition":
        return False
    if node.parent is None or node.parent.type != "class_body":
        return False
    name_node = node.child_by_field_name("name")
    if name_node is None or name_node.type != "property_identifier":
        return False
    return node.child_by_field_name("body") is not None


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def render_type(node: Any | None) -> str:
    """Render a type node in the canonical short form."""
    if node is None:
        return "unknown"
    kind = node.type
    if kind == "type_annotation":
        inner = node.named_children
        return render_type(inner[0]) if inner else "unknown"
    if kind == "predefined_type":
        value = text(node)
        return value if value in _KEYWORD_TYPES else "unknown"
    if kind == "type_identifier":
        return text(node)
    if kind == "generic_type":
        name_node = node.child_by_field_name("name")
        if name_node is not None and name_node.type == "type_identifier":
            return text(name_node)
        return "unknown"
    if kind == "array_type":
        inner = node.named_children
        return f"{render_type(inner[0])}[]" if inner else "unknown"
    if kind == "union_type":
        return " | ".join(render_type(c) for c in node.named_children)
    if kind == "parenthesized_type":
        inner = node.named_children
        return render_type(inner[0]) if inner else "unknown"
    return "unknown"


def annotation(node: Any, field_name: str = "type") -> str | None:
    """Rendered type annotation held in field_name, or None if unannotated."""
    type_node = node.child_by_field_name(field_name)
    if type_node is None:
        return None
    return render_type(type_node)


def return_type(node: Any) -> str | None:
    type_node = node.child_by_field_name("return_type")
    if type_node is None:
        return None
    if type_node.type != "type_annotation":
        # asserts / type predicate annotations
        return "unknown"
    return render_type(type_node)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


def _pattern_parameter(pattern: Any, type_: str | None, optional: bool) -> Parameter | None:
    kind = pattern.type
    if kind == "this":
        return None
    if kind == "identifier":
        return Parameter(name=text(pattern), type=type_, optional=optional)
    if kind == "rest_pattern":
        inner = [c for c in pattern.named_children if c.type == "identifier"]
        name = text(inner[0]) if inner else "unknown"
        return Parameter(name=name, type=type_, optional=True, rest=True)
    if kind == "assignment_pattern":
        left = pattern.child_by_field_name("left")
        name = text(left) if left is not None and left.type == "identifier" else "unknown"
        return Parameter(name=name, type=type_, optional=True)
    return Parameter(name="unknown", type=type_, optional=optional)


def parameters(function_node: Any) -> tuple[Parameter, ...]:
    """Declared parameters of a function or method node, in order."""
    params_node = function_node.child_by_field_name("parameters")
    if params_node is None:
        # `async x => x` has a bare identifier parameter
        single = function_node.child_by_field_name("parameter")
        if single is None:
            return ()
        param = _pattern_parameter(single, None, False)
        return (param,) if param is not None else ()

    result: list[Parameter] = []
    for child in params_node.named_children:
        kind = child.type
        if kind in ("required_parameter", "optional_parameter"):
            pattern = child.child_by_field_name("pattern")
            if pattern is None:
                continue
            optional = kind == "optional_parameter" or child.child_by_field_name("value") is not None
            param = _pattern_parameter(pattern, annotation(child), optional)
        elif kind == "comment":
            continue
        else:
            param = _pattern_parameter(child, None, False)
        if param is not None:
            result.append(param)
    return tuple(result)


def render_parameter(param: Parameter) -> str:
    name = f"...{param.name}" if param.rest else param.name
    if param.optional and not param.rest:
        name = f"{name}?"
    return f"{name}: {param.type}" if param.type else name


def render_declaration_signature(node: Any, name: str) -> str:
    """Signature string for a function declaration or class method.

    Destructured parameters render as ``(...)``; generators carry
    ``function* `` (functions) or ``*`` (methods).
    """
    rendered: list[str] = []
    for param in parameters(node):
        if param.name == "unknown" and not param.rest:
            rendered.append("(...)")
        else:
            rendered.append(render_parameter(param))

    signature = f"{name}({', '.join(rendered)})"
    if node.type == "method_definition":
        if has_token(node, "*"):
            signature = f"*{signature}"
    elif node.type in ("generator_function_declaration", "generator_function"):
        signature = f"function* {signature}"
    if has_token(node, "async"):
        signature = f"async {signature}"

    ret = return_type(node)
    if ret:
        signature += f": {ret}"
    return signature
