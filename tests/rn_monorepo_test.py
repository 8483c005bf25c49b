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

"""Tests for relnote.monorepo."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from relnote.config import MonorepoConfig, RelnoteConfig
from relnote.errors import RemoteError
from relnote.monorepo import (
    LocalRepository,
    ScopeResolver,
    WorkspacePackage,
    glob_to_regex,
    infer_scope_from_paths,
    normalize_globs,
)


class FakeRepository:
    """In-memory RepositoryReader."""

    def __init__(self, files: dict[str, str], *, fail: bool = False) -> None:
        """Initialize with path-to-text contents."""
        self.files = files
        self.fail = fail
        self.reads: list[str] = []

    async def read_text(self, path: str, ref: str) -> str | None:
        """Return the file text, or None."""
        self.reads.append(path)
        return self.files.get(path)

    async def list_tree_paths(self, ref: str) -> list[str]:
        """Return every path, or fail on demand."""
        if self.fail:
            raise RemoteError('tree unavailable', status_code=500)
        return sorted(self.files)


def _monorepo(**kwargs: object) -> RelnoteConfig:
    return RelnoteConfig(monorepo=MonorepoConfig(enabled=True, **kwargs))  # type: ignore[arg-type]


class TestGlobToRegex:
    """Tests for glob_to_regex()."""

    @pytest.mark.parametrize(
        ('glob', 'path', 'expected'),
        [
            ('packages/*', 'packages/web', True),
            ('packages/*', 'packages/web/src/app.ts', True),
            ('packages/*', 'packages', False),
            ('packages/*', 'tools/web', False),
            ('packages/**', 'packages/a/b', True),
            ('./apps/*/', 'apps/site', True),
            ('**/*.lock', 'yarn.lock', True),
            ('**/*.lock', 'deep/dir/poetry.lock', True),
            ('**/*.lock', 'lockfile.txt', False),
            ('libs/core?', 'libs/core2', True),
            ('libs/core?', 'libs/core/x', False),
            ('docs', 'docs/index.md', True),
            ('docs', 'docsite/index.md', False),
        ],
    )
    def test_matching(self, glob: str, path: str, expected: bool) -> None:
        """Segment-aware wildcard matching with ancestor prefixes."""
        assert bool(glob_to_regex(glob).match(path)) is expected


class TestNormalizeGlobs:
    """Tests for normalize_globs()."""

    def test_cleans_and_dedupes(self) -> None:
        """Whitespace, ./ and duplicates are removed, order kept."""
        assert normalize_globs([' ./packages/* ', 'apps/*', 'packages/*', '', 3]) == ['packages/*', 'apps/*']

    def test_drops_negations(self) -> None:
        """Negated pnpm globs are skipped."""
        assert normalize_globs(['packages/*', '!**/test/**']) == ['packages/*']

    def test_none(self) -> None:
        """None means no globs."""
        assert normalize_globs(None) == []


class TestInferScopeFromPaths:
    """Tests for infer_scope_from_paths()."""

    PACKAGES = [
        WorkspacePackage('packages/web', 'web'),
        WorkspacePackage('packages/api', '@acme/api'),
        WorkspacePackage('packages/web/plugins/charts'),
    ]

    def test_single_package(self) -> None:
        """Touching one package yields its name."""
        paths = ['packages/web/src/app.ts', 'packages/web/README.md', 'README.md']
        assert infer_scope_from_paths(paths, self.PACKAGES) == 'web'

    def test_multiple_packages(self) -> None:
        """Touching two packages yields no scope."""
        paths = ['packages/web/src/app.ts', 'packages/api/index.ts']
        assert infer_scope_from_paths(paths, self.PACKAGES) == ''

    def test_most_specific_package(self) -> None:
        """Nested packages win over their parent; basename is the fallback name."""
        assert infer_scope_from_paths(['packages/web/plugins/charts/x.ts'], self.PACKAGES) == 'charts'

    def test_no_package(self) -> None:
        """Paths outside every package yield no scope."""
        assert infer_scope_from_paths(['README.md'], self.PACKAGES) == ''

    def test_prefix_is_not_containment(self) -> None:
        """packages/webapp is not inside packages/web."""
        assert infer_scope_from_paths(['packages/webapp/x.ts'], self.PACKAGES) == ''

    def test_excluded_paths_ignored(self) -> None:
        """Excluded paths do not count as touching a package."""
        paths = ['packages/web/src/app.ts', 'packages/api/yarn.lock']
        assert infer_scope_from_paths(paths, self.PACKAGES, exclude_paths=['**/*.lock']) == 'web'


class TestScopeResolver:
    """Tests for ScopeResolver."""

    @pytest.mark.asyncio
    async def test_package_json_workspaces(self) -> None:
        """Workspaces from package.json are used."""
        repo = FakeRepository({
            'package.json': json.dumps({'workspaces': ['packages/*']}),
            'packages/web/package.json': json.dumps({'name': '@acme/web'}),
            'packages/api/package.json': json.dumps({'name': 'api'}),
        })
        resolver = ScopeResolver(repo, _monorepo(), 'main')
        assert await resolver.resolve(['packages/web/src/index.ts']) == '@acme/web'

    @pytest.mark.asyncio
    async def test_yarn_workspaces_object(self) -> None:
        """The {packages: [...]} form of workspaces is accepted."""
        repo = FakeRepository({
            'package.json': json.dumps({'workspaces': {'packages': ['libs/*']}}),
            'libs/core/package.json': '{}',
        })
        resolver = ScopeResolver(repo, _monorepo(), 'main')
        assert await resolver.resolve(['libs/core/a.js']) == 'core'

    @pytest.mark.asyncio
    async def test_pnpm_workspace(self) -> None:
        """pnpm-workspace.yaml is read when package.json has no workspaces."""
        repo = FakeRepository({
            'package.json': json.dumps({'name': 'root'}),
            'pnpm-workspace.yaml': "packages:\n  - 'apps/*'\n  - '!**/test/**'\n",
            'apps/site/package.json': json.dumps({'name': 'site'}),
        })
        resolver = ScopeResolver(repo, _monorepo(), 'main')
        assert await resolver.detect_globs() == ['apps/*']
        assert await resolver.resolve(['apps/site/page.tsx']) == 'site'

    @pytest.mark.asyncio
    async def test_uv_workspace(self) -> None:
        """uv workspace members in pyproject.toml are read."""
        repo = FakeRepository({
            'pyproject.toml': '[tool.uv.workspace]\nmembers = ["py/packages/*"]\n',
            'py/packages/core/pyproject.toml': '[project]\nname = "acme-core"\n',
        })
        resolver = ScopeResolver(repo, _monorepo(), 'main')
        assert await resolver.resolve(['py/packages/core/src/acme/x.py']) == 'acme-core'

    @pytest.mark.asyncio
    async def test_configured_globs_win(self) -> None:
        """Configured packages skip detection."""
        repo = FakeRepository({
            'package.json': json.dumps({'workspaces': ['packages/*']}),
            'tools/cli/package.json': json.dumps({'name': 'cli'}),
        })
        resolver = ScopeResolver(repo, _monorepo(packages=['tools/*']), 'main')
        assert await resolver.detect_globs() == ['tools/*']
        assert 'package.json' not in repo.reads

    @pytest.mark.asyncio
    async def test_detection_disabled(self) -> None:
        """detect=False without packages means no globs."""
        repo = FakeRepository({'package.json': json.dumps({'workspaces': ['packages/*']})})
        resolver = ScopeResolver(repo, _monorepo(detect=False), 'main')
        assert await resolver.detect_globs() == []
        assert await resolver.resolve(['packages/web/x']) == ''

    @pytest.mark.asyncio
    async def test_malformed_manifests_tolerated(self) -> None:
        """Unparseable manifests fall through to the next source and to basenames."""
        repo = FakeRepository({
            'package.json': '{not json',
            'pnpm-workspace.yaml': 'packages: [apps/*]\n',
            'apps/site/package.json': '{broken',
        })
        resolver = ScopeResolver(repo, _monorepo(), 'main')
        assert await resolver.resolve(['apps/site/x']) == 'site'

    @pytest.mark.asyncio
    async def test_remote_failure_yields_no_scope(self) -> None:
        """Remote errors are swallowed into an empty scope."""
        repo = FakeRepository({'package.json': json.dumps({'workspaces': ['packages/*']})}, fail=True)
        resolver = ScopeResolver(repo, _monorepo(), 'main')
        assert await resolver.resolve(['packages/web/x']) == ''

    @pytest.mark.asyncio
    async def test_no_paths(self) -> None:
        """No changed paths means no remote calls."""
        repo = FakeRepository({})
        assert await ScopeResolver(repo, _monorepo(), 'main').resolve([]) == ''
        assert repo.reads == []

    @pytest.mark.asyncio
    async def test_root_manifest_is_not_a_package(self) -> None:
        """The root manifest never counts as a workspace package."""
        repo = FakeRepository({
            'package.json': json.dumps({'name': 'root', 'workspaces': ['**']}),
            'packages/web/package.json': json.dumps({'name': 'web'}),
        })
        packages = await ScopeResolver(repo, _monorepo(), 'main').list_packages(['**'])
        assert packages == [WorkspacePackage('packages/web', 'web')]


class TestLocalRepository:
    """Tests for LocalRepository."""

    @pytest.mark.asyncio
    async def test_reads_checkout(self, tmp_path: Path) -> None:
        """Files are listed and read from disk; VCS dirs are skipped."""
        (tmp_path / 'packages' / 'web').mkdir(parents=True)
        (tmp_path / 'packages' / 'web' / 'package.json').write_text('{"name": "web"}', encoding='utf-8')
        (tmp_path / '.git').mkdir()
        (tmp_path / '.git' / 'HEAD').write_text('ref', encoding='utf-8')
        repo = LocalRepository(tmp_path)
        assert await repo.list_tree_paths() == ['packages/web/package.json']
        assert await repo.read_text('packages/web/package.json') == '{"name": "web"}'
        assert await repo.read_text('missing.txt') is None

    @pytest.mark.asyncio
    async def test_resolver_over_checkout(self, tmp_path: Path) -> None:
        """ScopeResolver works against a local checkout."""
        (tmp_path / 'apps' / 'site').mkdir(parents=True)
        (tmp_path / 'apps' / 'site' / 'package.json').write_text('{"name": "site"}', encoding='utf-8')
        resolver = ScopeResolver(LocalRepository(tmp_path), _monorepo(packages=['apps/*']), '')
        assert await resolver.resolve(['apps/site/index.ts']) == 'site'
