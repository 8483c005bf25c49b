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

"""Move the staging section into a dated version section.

Before::

    ## [Unreleased]

    ### Fixes
    - Clamp invalid question number (#55)

    ## [0.0.9] – 2023-12-01

After ``cut_release(doc, 'v0.1.0', '2024-01-01')``::

    ## [Unreleased]

    ## [0.1.0] – 2024-01-01
    ### Fixes
    - Clamp invalid question number (#55)

    ## [0.0.9] – 2023-12-01

The staging heading stays where it was, so new versions stack up in
reverse-chronological order right below it.
"""

from __future__ import annotations

import datetime as dt

from relnote.changelog._document import Document, Section, normalize_document
from relnote.logging import get_logger

log = get_logger('relnote.changelog.release')

DEFAULT_VERSION = '0.0.0'

# En dash, as written by keep-a-changelog tooling.
VERSION_DATE_SEPARATOR = '–'


def version_from_tag(tag: str) -> str:
    """Strip a leading ``v`` from a release tag.

    >>> version_from_tag('v0.1.0')
    '0.1.0'
    >>> version_from_tag('')
    '0.0.0'
    """
    version = tag.strip()
    if version[:1] in ('v', 'V'):
        version = version[1:]
    return version or DEFAULT_VERSION


def version_heading(version: str, release_date: dt.date | str) -> str:
    """Return ``## [<version>] – <YYYY-MM-DD>``.

    >>> version_heading('v1.2.0', dt.date(2024, 1, 1))
    '## [1.2.0] – 2024-01-01'
    """
    date_str = release_date.isoformat() if isinstance(release_date, dt.date) else release_date.strip()
    return f'## [{version_from_tag(version)}] {VERSION_DATE_SEPARATOR} {date_str}'


def cut_release(
    document: Document,
    version: str,
    release_date: dt.date | str,
) -> tuple[Document, str | None]:
    """Turn the staging content into a new version section.

    Args:
        document: The parsed changelog.
        version: Version label or tag (a leading ``v`` is dropped).
        release_date: Release date, as a date or ``YYYY-MM-DD``.

    Returns:
        ``(document, extracted)``. When the staging section is missing
        or holds only whitespace, the input document is returned as is
        and ``extracted`` is ``None``; callers must skip any downstream
        step (such as updating release notes) in that case. Otherwise
        ``extracted`` is the trimmed staging content as it was before
        the cut.
    """
    normalized = normalize_document(document)
    idx = normalized.staging_index
    staging = normalized.sections[idx]
    content = staging.content_lines
    extracted = '\n'.join(content).strip()
    if not extracted:
        log.info('release_skipped', reason='staging_empty', version=version)
        return document, None

    after = normalized.sections[idx + 1 :]
    released = Section(
        title=version_heading(version, release_date),
        lines=(*content, '') if after else content,
    )
    sections = (
        *normalized.sections[:idx],
        Section(title=staging.title),
        released,
        *after,
    )
    log.info(
        'release_cut',
        version=version_from_tag(version),
        entries=sum(1 for line in content if line.startswith('-')),
    )
    return normalize_document(Document(header=normalized.header, sections=sections)), extracted


__all__ = [
    'DEFAULT_VERSION',
    'VERSION_DATE_SEPARATOR',
    'cut_release',
    'version_from_tag',
    'version_heading',
]
