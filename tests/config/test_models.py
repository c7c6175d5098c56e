"""Tests for config/models.py validation and defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sourcetruth.config.models import (
    AnalysisConfig,
    LogOutputConfig,
    ResolverConfig,
    SourceTruthConfig,
    WorkspaceConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig."""

    @pytest.mark.parametrize("destination", ["stderr", "stdout"])
    def test_stream_destinations_accepted(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_home_relative_path_is_expanded(self) -> None:
        """A ~ path expands to an absolute one."""
        output = LogOutputConfig(destination="~/sourcetruth.log")

        assert output.destination.endswith("sourcetruth.log")
        assert not output.destination.startswith("~")

    def test_invalid_format_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(format="xml")  # type: ignore[arg-type]


class TestWorkspaceConfig:
    """Tests for WorkspaceConfig."""

    def test_defaults_exclude_node_modules(self) -> None:
        assert "node_modules" in WorkspaceConfig().exclude_dirs

    def test_extension_without_dot_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must start with"):
            WorkspaceConfig(include_extensions=[".ts", "js"])


class TestResolverConfig:
    """Tests for ResolverConfig."""

    def test_defaults(self) -> None:
        config = ResolverConfig()

        assert config.index_name == "index"
        assert config.manifest_name == "package.json"
        assert config.builtin_prefix == "node:"
        assert "fs" in config.builtin_modules
        assert config.remap_js_extensions is True

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range_rejected(self, threshold: float) -> None:
        with pytest.raises(ValidationError):
            ResolverConfig(similarity_threshold=threshold)

    def test_default_lists_are_independent(self) -> None:
        """Mutating one instance's list does not leak into another."""
        first = ResolverConfig()
        first.extensions.append(".vue")

        assert ".vue" not in ResolverConfig().extensions


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""

    def test_star_export_origin_choices(self) -> None:
        assert AnalysisConfig(star_export_origin="file").star_export_origin == "file"
        with pytest.raises(ValidationError):
            AnalysisConfig(star_export_origin="module")  # type: ignore[arg-type]

    def test_negative_suggestion_limit_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AnalysisConfig(suggestion_limit=-1)


class TestSourceTruthConfig:
    """Tests for the root model."""

    def test_nested_dicts_are_coerced(self) -> None:
        config = SourceTruthConfig.model_validate(
            {"resolver": {"alternatives_limit": 3}, "logging": {"level": "DEBUG"}}
        )

        assert config.resolver.alternatives_limit == 3
        assert config.logging.level == "DEBUG"
        assert config.analysis.suggestion_limit == 5
