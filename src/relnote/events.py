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

"""Validated events that drive the changelog pipeline.

GitHub webhook payloads are loosely shaped: fields may be missing, and
labels arrive as ``{"name": ...}`` records.  :func:`parse_event` turns a
payload into one of two frozen pydantic models, discriminated by
``kind``, exactly once at the boundary:

- :class:`ChangeMergedEvent` from ``pull_request`` or
  ``pull_request_target`` with ``action: closed`` and ``merged: true``.
- :class:`ReleasePublishedEvent` from ``release`` with
  ``action: published``.

Everything else (unmerged PRs, draft or edited releases, other event
names) is ignored and yields ``None``.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from relnote.errors import ErrorCode, RelnoteError

PULL_REQUEST_EVENTS: frozenset[str] = frozenset({'pull_request', 'pull_request_target'})
RELEASE_EVENT = 'release'

_SHA_RE = re.compile(r'^[0-9a-f]{40}$')


class ChangeMergedEvent(BaseModel):
    """A change request merged into a branch.

    Attributes:
        reference_id: Pull request number.
        title: Pull request title.
        labels: Label names.
        base_branch: Branch the change was merged into; empty if unknown.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal['change_merged'] = 'change_merged'
    reference_id: int = Field(gt=0)
    title: str
    labels: list[str] = Field(default_factory=list)
    base_branch: str = ''

    @field_validator('labels', mode='before')
    @classmethod
    def _label_names(cls, value: Any) -> list[str]:  # noqa: ANN401
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError('labels must be a list')
        names: list[str] = []
        for label in value:
            name = label.get('name') if isinstance(label, dict) else label
            if not isinstance(name, str):
                raise ValueError(f'label must be a string or {{name: ...}}, got {type(label).__name__}')
            if name.strip():
                names.append(name.strip())
        return names


class ReleasePublishedEvent(BaseModel):
    """A version published as a release.

    Attributes:
        version_tag: Release tag (e.g. ``v1.2.0``).
        target_branch: Branch the release was cut from; empty if unknown
            or if the release targets a commit SHA.
        release_id: Id of the release whose notes are updated.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal['release_published'] = 'release_published'
    version_tag: str = Field(min_length=1)
    target_branch: str = ''
    release_id: int

    @field_validator('target_branch', mode='before')
    @classmethod
    def _branch_only(cls, value: Any) -> str:  # noqa: ANN401
        if value is None:
            return ''
        if isinstance(value, str) and _SHA_RE.match(value.strip()):
            return ''
        return value


Event = Annotated[ChangeMergedEvent | ReleasePublishedEvent, Field(discriminator='kind')]

_EVENT_ADAPTER: TypeAdapter[ChangeMergedEvent | ReleasePublishedEvent] = TypeAdapter(Event)


def _invalid(event_name: str, message: str) -> RelnoteError:
    return RelnoteError(
        ErrorCode.EVENT_INVALID,
        f'Invalid {event_name} payload: {message}',
        hint='relnote expects a GitHub webhook payload for this event.',
    )


def _section(payload: dict[str, Any], key: str, event_name: str) -> dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise _invalid(event_name, f'missing {key!r} object')
    return value


def _change_merged_data(payload: dict[str, Any], event_name: str) -> dict[str, Any] | None:
    if payload.get('action') != 'closed':
        return None
    pr = _section(payload, 'pull_request', event_name)
    if pr.get('merged') is not True:
        return None
    base = pr.get('base')
    return {
        'kind': 'change_merged',
        'reference_id': pr.get('number'),
        'title': pr.get('title'),
        'labels': pr.get('labels'),
        'base_branch': (base.get('ref') or '') if isinstance(base, dict) else '',
    }


def _release_data(payload: dict[str, Any], event_name: str) -> dict[str, Any] | None:
    if payload.get('action') != 'published':
        return None
    release = _section(payload, 'release', event_name)
    return {
        'kind': 'release_published',
        'version_tag': release.get('tag_name'),
        'target_branch': release.get('target_commitish'),
        'release_id': release.get('id'),
    }


def parse_event(event_name: str, payload: object) -> ChangeMergedEvent | ReleasePublishedEvent | None:
    """Build an event from a webhook payload.

    Args:
        event_name: Webhook event name (``GITHUB_EVENT_NAME``).
        payload: Decoded JSON payload.

    Returns:
        The event, or ``None`` when relnote does nothing for it.

    Raises:
        RelnoteError: With code ``RN_EVENT_INVALID`` when a relevant
            payload is missing fields or has the wrong types.
    """
    if event_name in PULL_REQUEST_EVENTS:
        extract = _change_merged_data
    elif event_name == RELEASE_EVENT:
        extract = _release_data
    else:
        return None
    if not isinstance(payload, dict):
        raise _invalid(event_name, f'expected an object, got {type(payload).__name__}')
    data = extract(payload, event_name)
    if data is None:
        return None
    try:
        return _EVENT_ADAPTER.validate_python(data)
    except ValidationError as exc:
        problems = '; '.join(f'{".".join(str(p) for p in err["loc"])}: {err["msg"]}' for err in exc.errors())
        raise _invalid(event_name, problems) from exc


__all__ = [
    'ChangeMergedEvent',
    'Event',
    'PULL_REQUEST_EVENTS',
    'RELEASE_EVENT',
    'ReleasePublishedEvent',
    'parse_event',
]
