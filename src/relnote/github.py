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

"""GitHub REST client for relnote.

Implements :class:`~relnote.store.DocumentStore` on top of the
repository contents API and adds the read-only lookups the pipeline
needs (default branch, changed files of a pull request, repository
tree) plus the release-notes sink.

Key Concepts::

    ┌─────────────────────────┬────────────────────────────────────────────┐
    │ Concept                 │ Explanation                                │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Blob SHA token          │ The contents API returns the file's blob   │
    │                         │ SHA. Sending it back on PUT makes GitHub   │
    │                         │ reject the write if the file moved on.     │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ 409 / 422 on PUT        │ Stale or missing SHA. Surfaced as          │
    │                         │ ConflictError, never retried.              │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ 404 on GET              │ File does not exist yet. Not an error.     │
    └─────────────────────────┴────────────────────────────────────────────┘

Usage::

    async with github_client('octo/quiz', token) as gh:
        branch = await gh.default_branch()
        current = await gh.read('CHANGELOG.md', branch)
"""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Final
from urllib.parse import quote

import httpx

from relnote.errors import ConflictError, RemoteError
from relnote.logging import get_logger, register_secret
from relnote.net import http_client, request_with_retry
from relnote.store import RemoteFile

log = get_logger('relnote.github')

DEFAULT_API_URL: Final[str] = 'https://api.github.com'
API_VERSION: Final[str] = '2022-11-28'
PAGE_SIZE: Final[int] = 100


def _encode(content: str) -> str:
    return base64.b64encode(content.encode('utf-8')).decode('ascii')


def _decode(content: str) -> str:
    return base64.b64decode(content).decode('utf-8')


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get('message', ''))
    return ''


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    raise RemoteError(
        f'{action} failed with HTTP {response.status_code}: {_error_message(response)}',
        status_code=response.status_code,
    )


def split_repository(repository: str) -> tuple[str, str]:
    """Split ``owner/name``.

    Raises:
        ValueError: If *repository* is not of the form ``owner/name``.
    """
    owner, _, name = repository.strip().partition('/')
    if not owner or not name or '/' in name:
        msg = f'repository must look like owner/name, got {repository!r}'
        raise ValueError(msg)
    return owner, name


class GitHubClient:
    """Thin async wrapper over the endpoints relnote uses.

    Args:
        client: An :class:`httpx.AsyncClient` whose ``base_url`` is the
            API root and whose headers carry the token.
        repository: ``owner/name``.
    """

    def __init__(self, client: httpx.AsyncClient, repository: str) -> None:
        """Initialize with an HTTP client and the target repository."""
        self._client = client
        self._owner, self._repo = split_repository(repository)
        self._default_branch: str | None = None

    @property
    def repository(self) -> str:
        """``owner/name`` of the target repository."""
        return f'{self._owner}/{self._repo}'

    def _url(self, suffix: str) -> str:
        return f'/repos/{self._owner}/{self._repo}{suffix}'

    async def _get(self, suffix: str, **kwargs: Any) -> httpx.Response:  # noqa: ANN401
        return await request_with_retry(self._client, 'GET', self._url(suffix), **kwargs)

    async def default_branch(self) -> str:
        """The repository's default branch (cached per client)."""
        if self._default_branch is None:
            response = await self._get('')
            _raise_for_status(response, 'get repository')
            self._default_branch = str(response.json()['default_branch'])
        return self._default_branch

    async def read(self, path: str, ref: str) -> RemoteFile | None:
        """Read a file; ``None`` on 404 or when *path* is not a file."""
        response = await self._get(f'/contents/{quote(path)}', params={'ref': ref})
        if response.status_code == 404:
            return None
        _raise_for_status(response, f'read {path}')
        data = response.json()
        if not isinstance(data, dict) or data.get('type') != 'file':
            return None
        sha = str(data['sha'])
        if data.get('encoding') == 'base64':
            return RemoteFile(content=_decode(data.get('content') or ''), token=sha)
        # Files above the contents API size limit come back without
        # inline content; the blob endpoint still serves them.
        return RemoteFile(content=await self._read_blob(sha), token=sha)

    async def _read_blob(self, sha: str) -> str:
        response = await self._get(f'/git/blobs/{sha}')
        _raise_for_status(response, f'read blob {sha}')
        return _decode(response.json().get('content') or '')

    async def read_text(self, path: str, ref: str) -> str | None:
        """Read a file's text only; ``None`` if it does not exist."""
        remote = await self.read(path, ref)
        return remote.content if remote else None

    async def write(
        self,
        path: str,
        ref: str,
        content: str,
        message: str,
        token: str | None = None,
    ) -> None:
        """Create or update a file on branch *ref*.

        Raises:
            ConflictError: If *token* no longer matches the file's SHA
                (HTTP 409), or the file exists and no token was sent
                (HTTP 422 about ``sha``).
            RemoteError: On any other failure.
        """
        payload: dict[str, str] = {
            'message': message,
            'content': _encode(content),
            'branch': ref,
        }
        if token:
            payload['sha'] = token
        response = await self._client.put(self._url(f'/contents/{quote(path)}'), json=payload)
        if response.status_code == 409:
            raise ConflictError(path, ref=ref, detail=_error_message(response))
        if response.status_code == 422 and 'sha' in _error_message(response).lower():
            raise ConflictError(path, ref=ref, detail=_error_message(response))
        _raise_for_status(response, f'write {path}')
        log.info('file_written', repository=self.repository, path=path, ref=ref, message=message)

    async def list_pull_request_files(self, number: int) -> list[str]:
        """Paths changed by pull request *number*."""
        paths: list[str] = []
        page = 1
        while True:
            response = await self._get(
                f'/pulls/{number}/files',
                params={'per_page': PAGE_SIZE, 'page': page},
            )
            _raise_for_status(response, f'list files of #{number}')
            batch = response.json()
            paths.extend(str(item['filename']) for item in batch)
            if len(batch) < PAGE_SIZE:
                return paths
            page += 1

    async def list_tree_paths(self, ref: str) -> list[str]:
        """Every file path in the repository tree at branch or ref *ref*."""
        git_ref = ref.removeprefix('refs/') if ref.startswith('refs/') else f'heads/{ref}'
        response = await self._get(f'/git/ref/{git_ref}')
        _raise_for_status(response, f'resolve {ref}')
        commit_sha = response.json()['object']['sha']

        response = await self._get(f'/git/trees/{commit_sha}', params={'recursive': '1'})
        _raise_for_status(response, f'list tree of {ref}')
        data = response.json()
        if data.get('truncated'):
            log.warning('tree_truncated', repository=self.repository, ref=ref)
        return [str(item['path']) for item in data.get('tree', []) if item.get('type') == 'blob']

    async def update_release(self, release_id: int, body: str) -> None:
        """Replace the body text of release *release_id*."""
        response = await self._client.patch(self._url(f'/releases/{release_id}'), json={'body': body})
        _raise_for_status(response, f'update release {release_id}')
        log.info('release_body_updated', repository=self.repository, release_id=release_id)


def api_headers(token: str) -> dict[str, str]:
    """Default headers for authenticated API calls."""
    return {
        'Accept': 'application/vnd.github+json',
        'Authorization': f'Bearer {token}',
        'X-GitHub-Api-Version': API_VERSION,
        'User-Agent': 'relnote',
    }


@asynccontextmanager
async def github_client(
    repository: str,
    token: str,
    *,
    api_url: str = DEFAULT_API_URL,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[GitHubClient]:
    """Open a :class:`GitHubClient` for *repository*."""
    register_secret(token)
    async with http_client(base_url=api_url, headers=api_headers(token), transport=transport) as client:
        yield GitHubClient(client, repository)


__all__ = [
    'DEFAULT_API_URL',
    'GitHubClient',
    'api_headers',
    'github_client',
    'split_repository',
]
