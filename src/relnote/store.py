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

"""Whole-file document storage with optimistic concurrency.

A :class:`DocumentStore` reads a file together with an opaque token
describing the version it read, and refuses a write whose token no
longer matches what is stored. Nothing retries a refused write.

Implementations:

- :class:`~relnote.github.GitHubClient`: repository contents API; the
  token is the blob SHA and ``ref`` is a branch.
- :class:`LocalFileStore`: a directory on disk; the token is the
  SHA-256 of the file content and ``ref`` is ignored.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from relnote.errors import ConflictError
from relnote.logging import get_logger

log = get_logger('relnote.store')


@dataclass(frozen=True)
class RemoteFile:
    """File content plus the token that proves which version was read.

    Attributes:
        content: Decoded UTF-8 text.
        token: Opaque optimistic-concurrency token.
    """

    content: str
    token: str


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for whole-file read/write with a concurrency token."""

    async def read(self, path: str, ref: str) -> RemoteFile | None:
        """Read *path* at *ref*.

        Returns:
            The file, or ``None`` when it does not exist.
        """
        ...

    async def write(
        self,
        path: str,
        ref: str,
        content: str,
        message: str,
        token: str | None = None,
    ) -> None:
        """Create or replace *path* on *ref*.

        Args:
            path: Repository-relative path.
            ref: Branch to write to.
            content: New full file content.
            message: Commit message (if the store records history).
            token: Token from the read this write is based on; ``None``
                when creating a file that did not exist.

        Raises:
            ConflictError: If *token* is stale.
        """
        ...


def content_token(content: str) -> str:
    """SHA-256 hex digest of UTF-8 *content*."""
    return hashlib.sha256(content.encode('utf-8')).hexdigest()


class LocalFileStore:
    """:class:`DocumentStore` backed by a local directory.

    Args:
        root: Directory that relative paths are resolved against.
    """

    def __init__(self, root: Path) -> None:
        """Initialize with the root directory."""
        self._root = root

    def _path(self, path: str) -> Path:
        return self._root / path

    async def read(self, path: str, ref: str = '') -> RemoteFile | None:
        """Read a file; ``None`` if it does not exist."""
        target = self._path(path)
        if not target.is_file():
            return None
        content = target.read_text(encoding='utf-8')
        return RemoteFile(content=content, token=content_token(content))

    async def write(
        self,
        path: str,
        ref: str,
        content: str,
        message: str,
        token: str | None = None,
    ) -> None:
        """Write a file after checking *token* against the current content."""
        target = self._path(path)
        if target.is_file():
            current = content_token(target.read_text(encoding='utf-8'))
            if token != current:
                raise ConflictError(path, detail='local file was modified' if token else 'file already exists')
        elif token is not None:
            raise ConflictError(path, detail='file was deleted')
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding='utf-8')
        log.debug('local_write', path=str(target), message=message)


__all__ = [
    'DocumentStore',
    'LocalFileStore',
    'RemoteFile',
    'content_token',
]
