"""Core module exports."""

from sourcetruth.core.errors import (
    AnalysisError,
    ConfigError,
    ErrorCode,
    InternalError,
    ParseError,
    SourceTruthError,
)
from sourcetruth.core.logging import (
    clear_session_id,
    configure_logging,
    get_logger,
    get_session_id,
    set_session_id,
)

__all__ = [
    # Errors
    "AnalysisError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "ParseError",
    "SourceTruthError",
    # Logging
    "clear_session_id",
    "configure_logging",
    "get_logger",
    "get_session_id",
    "set_session_id",
]
