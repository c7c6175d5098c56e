"""sourcetruth error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Analysis (read, parse, extraction)
- 9xxx: Internal

Resolution failures and signature mismatches are NOT errors. They are
returned as result values (ResolutionResult, SignatureMatchResult) because
"this import does not resolve" is a finding, not a failure of the analysis.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Analysis (3xxx)
    FILE_READ_ERROR = 3001
    PARSE_ERROR = 3002
    EXTRACTION_ERROR = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class SourceTruthError(Exception):
    """Base error with structured context for tool responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SourceTruthError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class AnalysisError(SourceTruthError):
    """The analysis itself could not run for a file."""

    @property
    def file_path(self) -> str | None:
        return self.details.get("file_path")

    @property
    def line(self) -> int | None:
        return self.details.get("line")

    @classmethod
    def read_failed(cls, file_path: str, reason: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.FILE_READ_ERROR,
            message=f"Failed to read file: {reason}",
            details={"file_path": file_path, "reason": reason},
        )

    @classmethod
    def extraction_failed(cls, file_path: str, what: str, reason: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.EXTRACTION_ERROR,
            message=f"Failed to extract {what}: {reason}",
            details={"file_path": file_path, "reason": reason},
        )


class ParseError(AnalysisError):
    """Malformed source text."""

    @classmethod
    def syntax(cls, file_path: str, line: int, column: int, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_ERROR,
            message=f"Failed to parse file: {reason} ({line}:{column})",
            details={"file_path": file_path, "line": line, "column": column, "reason": reason},
        )


class InternalError(SourceTruthError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
