"""Module resolution for JavaScript/TypeScript import specifiers.

Resolution order, first match wins:

1. Built-in modules ('fs', 'node:fs', ...) resolve to themselves.
2. Bare specifiers ('react', '@scope/pkg') resolve to themselves. External
   packages are never verified on disk.
3. Relative and absolute specifiers are joined onto the importer's
   directory and probed on disk:
   a. the literal path, when it is a regular file
   b. the path plus each source extension
   c. ``index`` plus each extension inside the path as a directory
   d. a package manifest inside the path as a directory (presence is
      enough; its export map is not read)
   e. extension remapping: './foo.js' -> './foo.ts' (TypeScript ESM)
4. Otherwise the result reports exists=False, an error naming the
   specifier and importer, and similarly named sibling files.

Nothing is cached: a result reflects the filesystem at call time.
"""

from __future__ import annotations

import difflib
import os
from pathlib import Path

import structlog

from sourcetruth.analysis.models import ResolutionResult
from sourcetruth.config.models import ResolverConfig

log = structlog.get_logger(__name__)

# JS extension -> TypeScript siblings to try
_TS_REMAP: dict[str, tuple[str, ...]] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith((".", "/"))


class ModuleResolver:
    """
    Resolves import specifiers to files.

    Usage::

        resolver = ModuleResolver()
        result = resolver.resolve("./utils", "/repo/src/app.ts")
        if result.exists:
            print(result.resolved_path)   # /repo/src/utils.ts
        else:
            print(result.error, result.alternatives)
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self._config = config or ResolverConfig()
        self._builtins = frozenset(self._config.builtin_modules)

    def is_builtin(self, specifier: str) -> bool:
        return specifier in self._builtins or specifier.startswith(self._config.builtin_prefix)

    def resolve(self, specifier: str, from_file: str | Path) -> ResolutionResult:
        """
        Resolve specifier as imported from from_file.

        Args:
            specifier: Module specifier as written in the import.
            from_file: Path of the importing file.

        Returns:
            ResolutionResult; exists=False results carry an error message
            and a (possibly empty) list of alternatives.
        """
        if self.is_builtin(specifier):
            return ResolutionResult(resolved_path=specifier, exists=True)

        if not is_relative_specifier(specifier):
            return ResolutionResult(resolved_path=specifier, exists=True)

        importer = os.fspath(from_file)
        base_dir = os.path.dirname(os.path.abspath(importer))
        target = os.path.normpath(os.path.join(base_dir, specifier))

        found = self._probe(target)
        if found is not None:
            return ResolutionResult(resolved_path=found, exists=True)

        alternatives = self.find_alternatives(target)
        log.debug("resolve.unresolved", specifier=specifier, from_file=importer)
        return ResolutionResult(
            resolved_path=None,
            exists=False,
            alternatives=tuple(alternatives),
            error=f"Import path '{specifier}' could not be resolved from {importer}",
        )

    def _probe(self, target: str) -> str | None:
        cfg = self._config

        if os.path.isfile(target):
            return target

        for ext in cfg.extensions:
            candidate = target + ext
            if os.path.isfile(candidate):
                return candidate

        found = self._probe_directory(target)
        if found is not None:
            return found

        if cfg.remap_js_extensions:
            stem, ext = os.path.splitext(target)
            for ts_ext in _TS_REMAP.get(ext, ()):
                candidate = stem + ts_ext
                if os.path.isfile(candidate):
                    return candidate

        return None

    def _probe_directory(self, target: str) -> str | None:
        """Index file or manifest-bearing directory for target, if any."""
        cfg = self._config
        if not os.path.isdir(target):
            return None
        for ext in cfg.extensions:
            candidate = os.path.join(target, cfg.index_name + ext)
            if os.path.isfile(candidate):
                return candidate
        if os.path.isfile(os.path.join(target, cfg.manifest_name)):
            return target
        return None

    def find_alternatives(self, target: str) -> list[str]:
        """Resolvable siblings of target whose names resemble it, best first.

        Candidates are source files and directories that hold an index file
        or a manifest. target itself is never offered.
        """
        cfg = self._config
        if cfg.alternatives_limit == 0:
            return []
        parent = os.path.dirname(target)
        wanted = os.path.splitext(os.path.basename(target))[0].lower()
        if not wanted or not os.path.isdir(parent):
            return []

        scored: list[tuple[float, str]] = []
        try:
            entries = sorted(os.listdir(parent))
        except OSError:
            return []
        for entry in entries:
            candidate = os.path.join(parent, entry)
            if candidate == target:
                continue
            stem, ext = os.path.splitext(entry)
            if os.path.isdir(candidate):
                if self._probe_directory(candidate) is None:
                    continue
                stem, ext = entry, ""
            elif ext not in cfg.extensions:
                continue
            stem = stem.lower()
            score = difflib.SequenceMatcher(None, wanted, stem).ratio()
            if wanted in stem or stem in wanted:
                score = max(score, cfg.similarity_threshold)
            if score >= cfg.similarity_threshold:
                scored.append((score, candidate))

        scored.sort(key=lambda item: (-item[0], item[1]))
        return [path for _score, path in scored[: cfg.alternatives_limit]]
