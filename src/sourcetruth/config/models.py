"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SOURCETRUTH__SECTION__KEY)
3. Workspace YAML (.sourcetruth.yaml)
4. Global YAML (~/.config/sourcetruth/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    SOURCETRUTH__<SECTION>__<KEY>=<VALUE>

Examples:
    SOURCETRUTH__LOGGING__LEVEL=DEBUG
    SOURCETRUTH__RESOLVER__ALTERNATIVES_LIMIT=10
    SOURCETRUTH__ANALYSIS__STAR_EXPORT_ORIGIN=file
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

SOURCE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mts", ".mjs", ".cjs")

BUILTIN_MODULES: tuple[str, ...] = (
    "fs",
    "path",
    "http",
    "https",
    "url",
    "querystring",
    "util",
    "events",
    "stream",
    "buffer",
    "crypto",
    "os",
    "cluster",
    "child_process",
    "net",
    "dgram",
    "dns",
    "tls",
    "zlib",
    "readline",
    "vm",
    "process",
    "assert",
    "timers",
    "async_hooks",
    "worker_threads",
    "console",
)


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SOURCETRUTH__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO reports index builds, DEBUG every cache hit and parse.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WorkspaceConfig(BaseModel):
    """Source file enumeration.

    Env vars:
        SOURCETRUTH__WORKSPACE__MAX_FILE_SIZE_KB: Skip files larger than this
    """

    include_extensions: list[str] = Field(
        default_factory=lambda: list(SOURCE_EXTENSIONS),
        description="File extensions treated as source files.",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", "dist", "build", ".git"],
        description="Directory names never descended into.",
    )
    max_file_size_kb: int = Field(
        default=1024,
        description="Skip files larger than this (KB).",
    )

    @field_validator("include_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.': {ext}")
        return v


class ResolverConfig(BaseModel):
    """Module resolution.

    Env vars:
        SOURCETRUTH__RESOLVER__REMAP_JS_EXTENSIONS: Resolve './a.js' to './a.ts'
        SOURCETRUTH__RESOLVER__ALTERNATIVES_LIMIT: Max suggested alternatives
        SOURCETRUTH__RESOLVER__SIMILARITY_THRESHOLD: Min similarity for suggestions
    """

    builtin_modules: list[str] = Field(default_factory=lambda: list(BUILTIN_MODULES))
    builtin_prefix: str = "node:"
    extensions: list[str] = Field(
        default_factory=lambda: list(SOURCE_EXTENSIONS),
        description="Probe order for extensionless specifiers and index files.",
    )
    index_name: str = "index"
    manifest_name: str = Field(
        default="package.json",
        description="Presence of this file makes a directory resolvable. "
        "Its export map is never inspected.",
    )
    remap_js_extensions: bool = Field(
        default=True,
        description="Resolve a '.js' specifier to a '.ts' sibling (TypeScript ESM convention).",
    )
    alternatives_limit: int = Field(default=5, ge=0)
    similarity_threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class AnalysisConfig(BaseModel):
    """Extraction behavior.

    Env vars:
        SOURCETRUTH__ANALYSIS__STAR_EXPORT_ORIGIN: "specifier" or "file"
    """

    star_export_origin: Literal["specifier", "file"] = Field(
        default="specifier",
        description="What 'export * from \"m\"' stores as file_path: the module "
        "specifier ('m') or the declaring file.",
    )
    suggestion_limit: int = Field(default=5, ge=0)
    similarity_threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class SourceTruthConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
