"""Analysis module - static source analysis for JavaScript/TypeScript.

This module provides:
- Parsing: tree-sitter syntax trees with a per-path cache
- Extraction: symbols, call signatures, imports and exports
- Resolution: import specifiers to files on disk
- Graphs: file-level dependencies and importer queries
- Validation: call arity and well-known API usage

Public entry point is `sourcetruth.analysis.engine.AnalysisEngine`; the
components can also be composed directly.
"""

from sourcetruth.analysis.engine import AnalysisEngine
from sourcetruth.analysis.graph import DependencyGraph, DependencyGraphBuilder
from sourcetruth.analysis.models import (
    APIValidationResult,
    ExportRecord,
    FunctionSignature,
    ImportRecord,
    Parameter,
    ResolutionResult,
    SignatureMatchResult,
    Symbol,
    SymbolKind,
    SymbolLookup,
    SymbolReference,
)
from sourcetruth.analysis.modules import ModuleExtractor
from sourcetruth.analysis.parser import SourceParser, SyntaxTree
from sourcetruth.analysis.resolver import ModuleResolver
from sourcetruth.analysis.signatures import KNOWN_APIS, SignatureValidator, format_signature
from sourcetruth.analysis.symbols import SymbolExtractor
from sourcetruth.analysis.workspace import Workspace

__all__ = [
    # Engine
    "AnalysisEngine",
    # Components
    "DependencyGraphBuilder",
    "ModuleExtractor",
    "ModuleResolver",
    "SignatureValidator",
    "SourceParser",
    "SymbolExtractor",
    "Workspace",
    "KNOWN_APIS",
    "format_signature",
    # Models
    "APIValidationResult",
    "DependencyGraph",
    "ExportRecord",
    "FunctionSignature",
    "ImportRecord",
    "Parameter",
    "ResolutionResult",
    "SignatureMatchResult",
    "Symbol",
    "SymbolKind",
    "SymbolLookup",
    "SymbolReference",
    "SyntaxTree",
]
