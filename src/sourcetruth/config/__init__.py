"""Config module exports."""

from sourcetruth.config.loader import load_config
from sourcetruth.config.models import (
    AnalysisConfig,
    LoggingConfig,
    ResolverConfig,
    SourceTruthConfig,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "LoggingConfig",
    "ResolverConfig",
    "SourceTruthConfig",
    "WorkspaceConfig",
]
