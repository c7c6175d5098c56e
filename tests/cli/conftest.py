"""Shared fixtures for CLI tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the user's global config out, and undo the CLI's logging setup."""
    monkeypatch.setattr(
        "sourcetruth.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml"
    )
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Workspace with two TypeScript files, one importing the other."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "math.ts").write_text(
        "export function add(a: number, b: number): number {\n"
        "  return a + b;\n"
        "}\n"
        "function hidden() {}\n"
    )
    (root / "src" / "app.ts").write_text(
        'import { add } from "./math";\n'
        'import { gone } from "./gone";\n'
        "\n"
        "export const total = add(1, 2);\n"
    )
    return root
