"""Shared fixtures for analysis tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from sourcetruth.analysis.parser import SourceParser

WriteSource = Callable[[str, str], Path]


@pytest.fixture
def parser() -> SourceParser:
    return SourceParser()


@pytest.fixture
def write_source(tmp_path: Path) -> WriteSource:
    """Write a source file relative to tmp_path, creating parent dirs."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def sample_project(write_source: WriteSource, tmp_path: Path) -> Path:
    """Small TypeScript project with relative imports between files.

    src/app.ts -> src/math.ts, src/utils/index.ts
    src/utils/index.ts -> src/math.ts
    """
    write_source(
        "src/math.ts",
        "export function add(a: number, b: number): number {\n"
        "  return a + b;\n"
        "}\n"
        "\n"
        "export function calculateTotal(items: number[], tax?: number): number {\n"
        "  return items.reduce((s, x) => add(s, x), 0) * (1 + (tax ?? 0));\n"
        "}\n"
        "\n"
        "function internalHelper(x: number) {\n"
        "  return x;\n"
        "}\n",
    )
    write_source(
        "src/utils/index.ts",
        'import { add } from "../math";\n'
        "\n"
        "export const double = (x: number) => add(x, x);\n",
    )
    write_source(
        "src/app.ts",
        'import fs from "fs";\n'
        'import React from "react";\n'
        'import { add, calculateTotal } from "./math";\n'
        'import { double } from "./utils";\n'
        "\n"
        "export class App {\n"
        "  run(): number {\n"
        "    return calculateTotal([add(1, 2), double(3)]);\n"
        "  }\n"
        "}\n",
    )
    return tmp_path
