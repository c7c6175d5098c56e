"""Result types produced by the analysis engine.

Every result is a plain dataclass with a ``to_dict()`` that yields
JSON-serializable values, so tool layers can hand them out directly.
Records are grouped per source file and never deduplicated across files:
the same name in two files is two distinct facts, told apart by file_path.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

SymbolKind = Literal["function", "class", "variable", "type", "interface"]


@dataclass
class Symbol:
    """A named, statically declared entity found in one file.

    Mutable only through export promotion (``exported``), which the
    extractor performs after the declaration pass completes.
    """

    name: str
    kind: SymbolKind
    file_path: str
    line: int | None = None
    column: int | None = None
    signature: str | None = None
    exported: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Parameter:
    """One declared parameter of a function or method."""

    name: str
    type: str | None = None
    optional: bool = False
    rest: bool = False


@dataclass(frozen=True)
class FunctionSignature:
    """Call shape of a function declaration or class method."""

    name: str
    parameters: tuple[Parameter, ...]
    file_path: str
    return_type: str | None = None
    is_async: bool = False
    is_generator: bool = False
    line: int | None = None

    @property
    def min_args(self) -> int:
        return sum(1 for p in self.parameters if not p.optional)

    @property
    def max_args(self) -> int | None:
        """Upper arity bound; None when a rest parameter accepts any number."""
        if any(p.rest for p in self.parameters):
            return None
        return len(self.parameters)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["parameters"] = [asdict(p) for p in self.parameters]
        return data


@dataclass(frozen=True)
class ImportRecord:
    """One import statement, dynamic import() or require() call."""

    specifier: str
    specifiers: tuple[str, ...] = ()
    is_type_only: bool = False
    line: int | None = None

    @property
    def is_relative(self) -> bool:
        return self.specifier.startswith((".", "/"))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["specifiers"] = list(self.specifiers)
        return data


@dataclass(frozen=True)
class ExportRecord:
    """One exported name.

    For ``export * from "m"`` the name is ``"*"`` and file_path holds the
    module specifier ``"m"`` unless configured otherwise; ``source`` always
    holds the specifier of a re-export.
    """

    name: str
    kind: SymbolKind
    file_path: str
    line: int | None = None
    signature: str | None = None
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one specifier from one file.

    A failed resolution is a normal value (exists=False), never an exception.
    """

    resolved_path: str | None
    exists: bool
    alternatives: tuple[str, ...] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"resolved_path": self.resolved_path, "exists": self.exists}
        if self.alternatives is not None:
            data["alternatives"] = list(self.alternatives)
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class SymbolReference:
    """An identifier occurrence that is not the declaring name."""

    line: int
    column: int
    context: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SignatureMatchResult:
    """Outcome of checking a call against a declared signature.

    confidence is 1.0 when a definite determination was possible and 0.0
    when the lookup context was insufficient.
    """

    valid: bool
    actual_signature: str
    confidence: float
    expected_signature: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class APIValidationResult:
    """Outcome of checking a call against the known-API knowledge base."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SymbolLookup:
    """Outcome of a workspace-wide symbol existence check."""

    symbol: str
    exists: bool
    best_match: Symbol | None = None
    other_matches: int = 0
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "exists": self.exists,
            "best_match": self.best_match.to_dict() if self.best_match else None,
            "other_matches": self.other_matches,
            "suggestions": list(self.suggestions),
        }
