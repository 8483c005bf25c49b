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

"""Insert entries into the staging section.

New entries go directly under their category heading, ahead of the
existing ones, so each category reads most-recent-first. A category
that does not exist yet is appended after the last block. Nothing
outside the target block moves or changes.
"""

from __future__ import annotations

import re
from dataclasses import replace

from relnote._types import Entry
from relnote.changelog._document import (
    CategoryBlock,
    Document,
    Section,
    StagingBody,
    normalize_document,
)
from relnote.commit_parsing import display_title
from relnote.errors import MalformedClassificationError
from relnote.logging import get_logger

log = get_logger('relnote.changelog.editor')

_REFERENCE_RE = re.compile(r'\(#(?P<ref>\d+)\)\s*$')


def category_heading(category: object) -> str:
    """Return the ``### Name`` heading for a category.

    Raises:
        MalformedClassificationError: If *category* is not a non-empty
            string. Writing a bogus heading would corrupt the record.
    """
    if not isinstance(category, str) or not category.strip():
        raise MalformedClassificationError(category)
    return f'### {category.strip()}'


def make_entry(title: str, reference_id: int, scope: str = '') -> Entry:
    """Build an :class:`Entry` from a raw change title."""
    return Entry(text=display_title(title), reference_id=reference_id, scope=scope.strip())


def format_entry(title: str, reference_id: int, scope: str = '') -> str:
    """Format ``- [scope] Subject (#id)`` from a raw change title.

    >>> format_entry('fix(api): clamp page size', 56, 'api')
    '- [api] Clamp page size (#56)'
    >>> format_entry('Bump lodash', 57)
    '- Bump lodash (#57)'
    """
    return make_entry(title, reference_id, scope).render()


def _reference_of(line: str) -> str:
    match = _REFERENCE_RE.search(line)
    return match.group('ref') if match else ''


def has_reference(section: Section, reference_id: int | str) -> bool:
    """Whether any line of *section* ends with ``(#reference_id)``."""
    ref = str(reference_id)
    return any(_reference_of(line) == ref for line in section.lines)


def _insert_into_block(block: CategoryBlock, line: str) -> CategoryBlock:
    at = 0
    while at < len(block.lines) and not block.lines[at].strip():
        at += 1
    return replace(block, lines=(*block.lines[:at], line, *block.lines[at:]))


def _append_block(body: StagingBody, heading: str, line: str) -> StagingBody:
    new_block = CategoryBlock(heading=heading, lines=(line,))
    if body.blocks:
        *rest, last = body.blocks
        separated = replace(last, lines=(*_strip_trailing_blank(last.lines), ''))
        return replace(body, blocks=(*rest, separated, new_block))
    preamble = _strip_trailing_blank(body.preamble)
    if preamble:
        preamble = (*preamble, '')
    return replace(body, preamble=preamble, blocks=(new_block,))


def _strip_trailing_blank(lines: tuple[str, ...]) -> tuple[str, ...]:
    end = len(lines)
    while end and not lines[end - 1].strip():
        end -= 1
    return lines[:end]


def insert_entry(document: Document, category: str, entry: Entry | str) -> Document:
    """Insert an entry under *category* in the staging section.

    The document is normalized first, so a missing header or staging
    section is created on the way. Re-inserting a reference id that
    the staging section already lists is a no-op.

    Args:
        document: The parsed changelog.
        category: Target category name (matched case-insensitively).
        entry: An :class:`Entry`, or an already formatted bullet line.

    Returns:
        The updated, normalized document.

    Raises:
        MalformedClassificationError: If *category* is not a usable
            string.
    """
    heading = category_heading(category)
    line = entry.render() if isinstance(entry, Entry) else entry.strip()

    doc = normalize_document(document)
    idx = doc.staging_index
    staging = doc.sections[idx]

    ref = _reference_of(line)
    if ref and has_reference(staging, ref):
        log.info('entry_duplicate_skipped', reference_id=ref, category=category)
        return doc

    body = StagingBody.parse(staging.content_lines)
    pos = body.find(category)
    if pos >= 0:
        blocks = list(body.blocks)
        blocks[pos] = _insert_into_block(blocks[pos], line)
        body = replace(body, blocks=tuple(blocks))
    else:
        body = _append_block(body, heading, line)

    log.debug('entry_inserted', category=category, created_block=pos < 0, reference_id=ref)
    updated = doc.with_section(idx, Section(title=staging.title, lines=body.render_lines()))
    return normalize_document(updated)


__all__ = [
    'category_heading',
    'format_entry',
    'has_reference',
    'insert_entry',
    'make_entry',
]
