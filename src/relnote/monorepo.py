# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Infer an entry scope from the files a change touches.

In a multi-package repository a change that touches exactly one
workspace package gets that package's name as its scope::

    changed files                         packages
    ─────────────                         ────────
    packages/web/src/app.ts     ──┐       packages/web  (name: web)
    packages/web/README.md      ──┴──→    packages/api  (name: @acme/api)
    README.md                   (no package, ignored)

    → scope "web"

Workspace globs come from, in order: ``monorepo.packages`` in the
config, ``workspaces`` in the root ``package.json``, ``packages`` in
``pnpm-workspace.yaml``, ``[tool.uv.workspace].members`` in the root
``pyproject.toml``.  A package is any directory matching a glob that
holds a ``package.json`` or ``pyproject.toml``.

Everything here is best-effort: remote failures are logged and yield
no scope.
"""

from __future__ import annotations

import asyncio
import json
import re
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

import httpx
import yaml

from relnote.config import RelnoteConfig
from relnote.errors import RemoteError
from relnote.logging import get_logger

log = get_logger('relnote.monorepo')

MANIFEST_NAMES: tuple[str, ...] = ('package.json', 'pyproject.toml')

# Maximum concurrent manifest reads.
DEFAULT_CONCURRENCY = 8


class RepositoryReader(Protocol):
    """Read-only view of a repository at some ref."""

    async def read_text(self, path: str, ref: str) -> str | None:
        """Return file text, or ``None`` if the file does not exist."""
        ...

    async def list_tree_paths(self, ref: str) -> list[str]:
        """Return every file path in the repository."""
        ...


@dataclass(frozen=True)
class WorkspacePackage:
    """A workspace package.

    Attributes:
        dir: Repository-relative directory (no trailing slash).
        name: Package name from its manifest; empty if unknown.
    """

    dir: str
    name: str = ''

    @property
    def scope(self) -> str:
        """The manifest name, else the directory's basename."""
        return self.name or PurePosixPath(self.dir).name


def glob_to_regex(glob: str) -> re.Pattern[str]:
    """Compile a workspace glob.

    ``**/`` matches zero or more directories, ``**`` anything, ``*`` and
    ``?`` stay within one path segment. A path also matches when one of
    its ancestor directories matches.

    >>> bool(glob_to_regex('packages/*').match('packages/web/src/app.ts'))
    True
    >>> bool(glob_to_regex('packages/*').match('tools/web'))
    False
    >>> bool(glob_to_regex('**/*.lock').match('yarn.lock'))
    True
    """
    pattern = glob.strip().removeprefix('./').rstrip('/')
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith('**/', i):
            parts.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i):
            parts.append('.*')
            i += 2
        elif pattern[i] == '*':
            parts.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            parts.append('[^/]')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile('^' + ''.join(parts) + '(?:/.*)?$')


def normalize_globs(globs: Iterable[object] | None) -> list[str]:
    """Trim, drop ``./`` and negations, de-duplicate (order kept)."""
    seen: dict[str, None] = {}
    for glob in globs or []:
        if not isinstance(glob, str):
            continue
        cleaned = glob.strip().removeprefix('./')
        if cleaned and not cleaned.startswith('!'):
            seen.setdefault(cleaned, None)
    return list(seen)


def _globs_from_package_json(text: str) -> list[str]:
    try:
        data = json.loads(text)
    except ValueError:
        return []
    workspaces = data.get('workspaces') if isinstance(data, dict) else None
    if isinstance(workspaces, dict):
        workspaces = workspaces.get('packages')
    return normalize_globs(workspaces) if isinstance(workspaces, list) else []


def _globs_from_pnpm(text: str) -> list[str]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        return []
    packages = data.get('packages') if isinstance(data, dict) else None
    return normalize_globs(packages) if isinstance(packages, list) else []


def _load_toml(text: str) -> dict[str, Any]:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return {}


def _globs_from_pyproject(text: str) -> list[str]:
    workspace = _load_toml(text).get('tool', {}).get('uv', {}).get('workspace', {})
    members = workspace.get('members') if isinstance(workspace, dict) else None
    return normalize_globs(members) if isinstance(members, list) else []


_GLOB_SOURCES = (
    ('package.json', _globs_from_package_json),
    ('pnpm-workspace.yaml', _globs_from_pnpm),
    ('pyproject.toml', _globs_from_pyproject),
)


def _manifest_name(filename: str, text: str) -> str:
    if filename == 'package.json':
        try:
            data = json.loads(text)
        except ValueError:
            return ''
        name = data.get('name') if isinstance(data, dict) else None
    else:
        project = _load_toml(text).get('project', {})
        name = project.get('name') if isinstance(project, dict) else None
    return name.strip() if isinstance(name, str) else ''


def is_excluded(path: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    """Whether *path* matches any compiled exclude pattern."""
    return any(p.match(path) for p in patterns)


def infer_scope_from_paths(
    changed_paths: Iterable[str],
    packages: Iterable[WorkspacePackage],
    *,
    exclude_paths: Iterable[str] = (),
) -> str:
    """Return the scope of the single package touched, else ``''``.

    Each path maps to the most specific (longest directory) package
    containing it; paths outside every package are ignored, as are
    paths matching *exclude_paths*.
    """
    pkgs = list(packages)
    excludes = [glob_to_regex(g) for g in normalize_globs(exclude_paths)]
    touched: dict[str, WorkspacePackage] = {}
    for path in changed_paths:
        if is_excluded(path, excludes):
            continue
        hits = [pkg for pkg in pkgs if path == pkg.dir or path.startswith(f'{pkg.dir}/')]
        if hits:
            best = max(hits, key=lambda pkg: len(pkg.dir))
            touched.setdefault(best.dir, best)
    if len(touched) == 1:
        return next(iter(touched.values())).scope
    return ''


class ScopeResolver:
    """Resolve a scope for a set of changed paths.

    Args:
        reader: Where manifests and the file tree are read from.
        config: Provides ``monorepo`` and ``exclude_paths``.
        ref: Branch or ref whose layout is inspected.
        concurrency: Maximum concurrent manifest reads.
    """

    def __init__(
        self,
        reader: RepositoryReader,
        config: RelnoteConfig,
        ref: str,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """Initialize with a reader, config and ref."""
        self._reader = reader
        self._config = config
        self._ref = ref
        self._concurrency = concurrency

    async def detect_globs(self) -> list[str]:
        """Workspace globs from config, else from root manifests."""
        configured = normalize_globs(self._config.monorepo.packages)
        if configured:
            return configured
        if not self._config.monorepo.detect:
            return []
        for filename, extract in _GLOB_SOURCES:
            text = await self._reader.read_text(filename, self._ref)
            globs = extract(text) if text else []
            if globs:
                log.debug('workspace_globs_detected', source=filename, globs=globs)
                return globs
        return []

    async def list_packages(self, globs: list[str]) -> list[WorkspacePackage]:
        """Packages whose directory matches one of *globs*."""
        if not globs:
            return []
        regexes = [glob_to_regex(g) for g in globs]
        manifests: dict[str, str] = {}
        for path in await self._reader.list_tree_paths(self._ref):
            pure = PurePosixPath(path)
            directory = str(pure.parent)
            if pure.name not in MANIFEST_NAMES or directory == '.':
                continue
            if any(r.match(directory) for r in regexes):
                manifests.setdefault(directory, path)

        sem = asyncio.Semaphore(self._concurrency)

        async def _load(directory: str, manifest: str) -> WorkspacePackage:
            async with sem:
                text = await self._reader.read_text(manifest, self._ref)
            name = _manifest_name(PurePosixPath(manifest).name, text) if text else ''
            return WorkspacePackage(dir=directory, name=name)

        packages = await asyncio.gather(*[_load(d, m) for d, m in sorted(manifests.items())])
        return list(packages)

    async def resolve(self, changed_paths: Iterable[str]) -> str:
        """Scope for *changed_paths*, or ``''`` when not exactly one package.

        Never raises for remote failures; they are logged and give
        ``''``.
        """
        paths = list(changed_paths)
        if not paths:
            return ''
        try:
            globs = await self.detect_globs()
            packages = await self.list_packages(globs)
        except (RemoteError, httpx.HTTPError) as exc:
            log.warning('scope_detection_failed', ref=self._ref, error=str(exc))
            return ''
        scope = infer_scope_from_paths(paths, packages, exclude_paths=self._config.exclude_paths)
        log.info('scope_inferred' if scope else 'scope_not_inferred', scope=scope, packages=len(packages))
        return scope


class LocalRepository:
    """:class:`RepositoryReader` over a local checkout; *ref* is ignored.

    Args:
        root: Checkout root.
    """

    _SKIP_DIRS = frozenset({'.git', 'node_modules', '.venv', '__pycache__'})

    def __init__(self, root: Path) -> None:
        """Initialize with the checkout root."""
        self._root = root

    async def read_text(self, path: str, ref: str = '') -> str | None:
        """Read a file relative to the root."""
        target = self._root / path
        return target.read_text(encoding='utf-8') if target.is_file() else None

    async def list_tree_paths(self, ref: str = '') -> list[str]:
        """Every file below the root, as POSIX relative paths."""
        paths: list[str] = []
        for path in sorted(self._root.rglob('*')):
            rel = path.relative_to(self._root)
            if path.is_file() and not self._SKIP_DIRS.intersection(rel.parts):
                paths.append(rel.as_posix())
        return paths


__all__ = [
    'LocalRepository',
    'MANIFEST_NAMES',
    'RepositoryReader',
    'ScopeResolver',
    'WorkspacePackage',
    'glob_to_regex',
    'infer_scope_from_paths',
    'normalize_globs',
]
