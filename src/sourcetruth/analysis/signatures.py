"""Call-site arity checks and a small knowledge base of well-known APIs.

Only argument counts are checked. Argument types are never inferred: a call
``f("x")`` against ``f(a: number)`` is valid here.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog

from sourcetruth.analysis import nodes
from sourcetruth.analysis.models import (
    APIValidationResult,
    FunctionSignature,
    SignatureMatchResult,
)
from sourcetruth.analysis.parser import SourceParser
from sourcetruth.analysis.symbols import SymbolExtractor
from sourcetruth.core.errors import AnalysisError

log = structlog.get_logger(__name__)

SNIPPET_PATH = "<snippet>"

# library -> api -> parameter -> required
KNOWN_APIS: dict[str, dict[str, dict[str, bool]]] = {
    "fs": {
        "readFile": {"path": True, "options": False, "callback": True},
        "writeFile": {"path": True, "data": True, "options": False, "callback": True},
        "readFileSync": {"path": True, "options": False},
        "writeFileSync": {"path": True, "data": True, "options": False},
    },
    "path": {
        "join": {"paths": True},
        "resolve": {"paths": True},
        "dirname": {"path": True},
    },
    "JSON": {
        "parse": {"text": True, "reviver": False},
        "stringify": {"value": True, "replacer": False, "space": False},
    },
    "fetch": {
        "fetch": {"url": True, "options": False},
    },
}


def format_signature(signature: FunctionSignature) -> str:
    """Render a signature as ``[async ]name(a, b?: T, ...rest)[: R]``."""
    params = [nodes.render_parameter(param) for param in signature.parameters]
    rendered = f"{signature.name}({', '.join(params)})"
    if signature.is_async:
        rendered = f"async {rendered}"
    if signature.return_type:
        rendered += f": {signature.return_type}"
    return rendered


def _call_name(call: Any) -> str | None:
    """Callee name of ``foo()`` or ``obj.foo()``; None for anything else."""
    callee = call.child_by_field_name("function")
    if callee is None:
        return None
    if callee.type == "identifier":
        return nodes.text(callee)
    if callee.type == "member_expression":
        prop = callee.child_by_field_name("property")
        if prop is not None and prop.type == "property_identifier":
            return nodes.text(prop)
    return None


def _argument_count(call: Any) -> int:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        # tagged templates
        return 0
    return sum(1 for a in arguments.named_children if a.type != "comment")


class SignatureValidator:
    """
    Validates calls against declared signatures and known APIs.

    Signatures are cached per file until ``clear_cache()``.

    Usage::

        validator = SignatureValidator()
        result = validator.validate_call("add", ["1", "2"], "src/math.ts")
        if not result.valid:
            print(result.error)
    """

    def __init__(
        self,
        parser: SourceParser | None = None,
        symbols: SymbolExtractor | None = None,
    ) -> None:
        self._parser = parser or SourceParser()
        self._symbols = symbols or SymbolExtractor()
        self._signatures: dict[str, list[FunctionSignature]] = {}

    def get_signatures(self, file_path: str | Path) -> list[FunctionSignature]:
        """
        Every function and method signature declared in a file (cached).

        Raises:
            AnalysisError: The file cannot be read or parsed.
        """
        key = os.fspath(file_path)
        cached = self._signatures.get(key)
        if cached is not None:
            return cached
        signatures = self._symbols.extract_signatures(self._parser.parse_path(key))
        self._signatures[key] = signatures
        return signatures

    def find_signature(self, file_path: str | Path, name: str) -> FunctionSignature | None:
        """First signature named name in the file, or None."""
        for signature in self.get_signatures(file_path):
            if signature.name == name:
                return signature
        return None

    def validate_call(
        self,
        function_name: str,
        args: Sequence[str],
        file_path: str | Path | None = None,
    ) -> SignatureMatchResult:
        """
        Check the argument count of a call against the callee's declaration.

        Args:
            function_name: Name of the called function or method.
            args: Argument expressions as text; only their number matters.
            file_path: File declaring the callee.

        Returns:
            SignatureMatchResult. confidence is 0.0 when the callee could not
            be looked up (no path, unknown name, unparseable file).
        """
        actual = f"{function_name}({', '.join(args)})"
        if not file_path:
            return SignatureMatchResult(
                valid=False,
                actual_signature=actual,
                confidence=0.0,
                error="No file path provided for signature lookup",
            )

        key = os.fspath(file_path)
        try:
            signature = self.find_signature(key, function_name)
        except AnalysisError as e:
            log.debug("signature.lookup_failed", path=key, error=e.message)
            return SignatureMatchResult(
                valid=False,
                actual_signature=actual,
                confidence=0.0,
                error=f"Failed to validate: {e.message}",
            )

        if signature is None:
            return SignatureMatchResult(
                valid=False,
                actual_signature=actual,
                confidence=0.0,
                error=f"Function '{function_name}' not found in {key}",
            )

        expected = format_signature(signature)
        count = len(args)
        min_args, max_args = signature.min_args, signature.max_args
        error = None
        if count < min_args:
            error = f"Expected at least {min_args} arguments, got {count}"
        elif max_args is not None and count > max_args:
            error = f"Expected at most {max_args} arguments, got {count}"

        return SignatureMatchResult(
            valid=error is None,
            actual_signature=actual,
            confidence=1.0,
            expected_signature=expected,
            error=error,
        )

    def validate_api_usage(
        self, library: str, api: str, parameters: Mapping[str, Any]
    ) -> APIValidationResult:
        """
        Check named parameters of a well-known API call.

        Unknown libraries and APIs cannot be checked; they come back valid
        with a warning.
        """
        library_apis = KNOWN_APIS.get(library)
        if library_apis is None:
            return APIValidationResult(
                valid=True, warnings=[f"No API definitions available for library '{library}'"]
            )
        definition = library_apis.get(api)
        if definition is None:
            return APIValidationResult(
                valid=True, warnings=[f"No definition available for '{library}.{api}'"]
            )

        errors = [
            f"Missing required parameter '{name}' for {library}.{api}"
            for name, required in definition.items()
            if required and name not in parameters
        ]
        warnings = [
            f"Unknown parameter '{name}' for {library}.{api}"
            for name in parameters
            if name not in definition
        ]
        return APIValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def validate_code_signatures(
        self, code: str, file_path: str | Path | None = None
    ) -> list[SignatureMatchResult]:
        """
        Check every call in a code snippet against signatures in file_path.

        Only definite mismatches are returned. A snippet that does not parse
        yields no results.
        """
        try:
            tree = self._parser.parse(code, SNIPPET_PATH, cache=False)
        except AnalysisError as e:
            log.debug("snippet.parse_failed", error=e.message)
            return []

        results: list[SignatureMatchResult] = []
        for node in nodes.walk(tree.root):
            if node.type != "call_expression":
                continue
            name = _call_name(node)
            if name is None:
                continue
            args = ["unknown"] * _argument_count(node)
            result = self.validate_call(name, args, file_path)
            if not result.valid and result.confidence > 0:
                results.append(result)
        return results

    def clear_cache(self) -> None:
        self._signatures.clear()
        self._parser.clear_cache()
