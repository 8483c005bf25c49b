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

"""Event handlers: classify, edit, persist.

Each handler runs one event to completion, strictly in sequence::

    ChangeMergedEvent ──► categorize ──► insert_entry ──► store.write ──► bump
    ReleasePublishedEvent ──► cut_release ──► store.write ──► sink.update_release

Writes carry the token from the preceding read. A stale token surfaces
as :class:`~relnote.errors.ConflictError` and is never retried here.
"""

from __future__ import annotations

import datetime as dt
from typing import Protocol

import httpx

from relnote.bump import suggest_bump
from relnote.changelog import (
    cut_release,
    insert_entry,
    make_entry,
    minimal_document,
    parse_document,
    version_from_tag,
)
from relnote.classify import categorize, resolve_scope
from relnote.commit_parsing import BumpType
from relnote.config import RelnoteConfig
from relnote.errors import RemoteError
from relnote.events import ChangeMergedEvent, ReleasePublishedEvent
from relnote.logging import get_logger
from relnote.monorepo import RepositoryReader, ScopeResolver
from relnote.store import DocumentStore

log = get_logger('relnote.pipeline')

ADD_COMMIT_MESSAGE = 'chore(relnote): add PR #{number} to Unreleased'
RELEASE_COMMIT_MESSAGE = 'chore(relnote): release {version}'


class ReleaseNotesSink(Protocol):
    """Receives the extracted notes of a release."""

    async def update_release(self, release_id: int, body: str) -> None:
        """Replace the body of release *release_id*."""
        ...


class ChangeSource(RepositoryReader, Protocol):
    """Repository reader that can also list a change's files."""

    async def list_pull_request_files(self, number: int) -> list[str]:
        """Paths touched by pull request *number*."""
        ...


class BranchSource(Protocol):
    """Knows the repository's default branch."""

    async def default_branch(self) -> str:
        """Name of the default branch."""
        ...


def utc_today() -> dt.date:
    """Today's date in UTC."""
    return dt.datetime.now(tz=dt.timezone.utc).date()


async def resolve_branch(event: ChangeMergedEvent | ReleasePublishedEvent, source: BranchSource) -> str:
    """Branch an event's changelog edit is written to.

    A merge goes to the PR's base branch and a release to its target
    branch; either falls back to the default branch.
    """
    branch = event.base_branch if isinstance(event, ChangeMergedEvent) else event.target_branch
    return branch or await source.default_branch()


async def infer_change_scope(
    event: ChangeMergedEvent,
    source: ChangeSource,
    config: RelnoteConfig,
    ref: str,
) -> str:
    """Scope inferred from the files a merged change touched.

    Returns ``''`` when monorepo support is disabled or when any remote
    call fails.
    """
    if not config.monorepo.enabled:
        return ''
    try:
        paths = await source.list_pull_request_files(event.reference_id)
    except (RemoteError, httpx.HTTPError) as exc:
        log.warning('changed_files_unavailable', reference_id=event.reference_id, error=str(exc))
        return ''
    return await ScopeResolver(source, config, ref).resolve(paths)


async def handle_change_merged(
    event: ChangeMergedEvent,
    *,
    store: DocumentStore,
    config: RelnoteConfig,
    ref: str,
    inferred_scope: str = '',
) -> BumpType:
    """Record a merged change in the staging section.

    Args:
        event: The merged change.
        store: Where the changelog lives.
        config: Category and path settings.
        ref: Branch to read from and write to.
        inferred_scope: Scope from changed files; the title's own scope
            wins over it.

    Returns:
        The suggested bump for this change.

    Raises:
        ConflictError: If the changelog changed since it was read.
    """
    classification = resolve_scope(categorize(event.title, event.labels, config), inferred_scope)
    bump = suggest_bump(classification)
    log.info(
        'change_classified',
        reference_id=event.reference_id,
        category=classification.category,
        breaking=classification.breaking,
        scope=classification.scope,
        bump=bump.value,
    )

    path = config.changelog_path
    existing = await store.read(path, ref)
    document = parse_document(existing.content) if existing else minimal_document()
    entry = make_entry(event.title, event.reference_id, classification.scope)
    rendered = insert_entry(document, classification.category, entry).render()

    if existing is not None and rendered == existing.content:
        log.info('changelog_unchanged', path=path, ref=ref, reference_id=event.reference_id)
        return bump

    await store.write(
        path,
        ref,
        rendered,
        ADD_COMMIT_MESSAGE.format(number=event.reference_id),
        token=existing.token if existing else None,
    )
    log.info('changelog_updated', path=path, ref=ref, reference_id=event.reference_id, created=existing is None)
    return bump


async def handle_release_published(
    event: ReleasePublishedEvent,
    *,
    store: DocumentStore,
    config: RelnoteConfig,
    ref: str,
    sink: ReleaseNotesSink | None = None,
    today: dt.date | None = None,
) -> str | None:
    """Cut the staging section over into a version section.

    Args:
        event: The published release.
        store: Where the changelog lives.
        config: Provides the changelog path.
        ref: Branch to read from and write to.
        sink: Receives the extracted notes; skipped when ``None``.
        today: Release date; defaults to today in UTC.

    Returns:
        The extracted notes, or ``None`` when there was nothing to
        release (missing file or empty staging section).

    Raises:
        ConflictError: If the changelog changed since it was read.
    """
    path = config.changelog_path
    existing = await store.read(path, ref)
    if existing is None:
        log.info('release_skipped', reason='changelog_missing', path=path, ref=ref)
        return None

    version = version_from_tag(event.version_tag)
    document, notes = cut_release(parse_document(existing.content), version, today or utc_today())
    if notes is None:
        return None

    await store.write(
        path,
        ref,
        document.render(),
        RELEASE_COMMIT_MESSAGE.format(version=version),
        token=existing.token,
    )
    if sink is not None:
        await sink.update_release(event.release_id, f'{notes}\n')
    return notes


__all__ = [
    'ADD_COMMIT_MESSAGE',
    'BranchSource',
    'ChangeSource',
    'RELEASE_COMMIT_MESSAGE',
    'ReleaseNotesSink',
    'handle_change_merged',
    'handle_release_published',
    'infer_change_scope',
    'resolve_branch',
    'utc_today',
]
