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

r"""Changelog document engine.

Three operations over a :class:`Document`:

- :func:`normalize_document` / :func:`normalize`: canonical header and
  exactly one staging section (idempotent).
- :func:`insert_entry`: add a bullet under a category of the staging
  section, most-recent-first.
- :func:`cut_release`: move the staging content into a dated version
  section and hand back the moved text.

Usage::

    from relnote.changelog import cut_release, insert_entry, make_entry, parse_document

    doc = parse_document(text)
    doc = insert_entry(doc, 'Fixes', make_entry('fix: clamp value', 55))
    doc, notes = cut_release(doc, 'v0.1.0', '2024-01-01')
    text = doc.render()
"""

from relnote.changelog._document import (
    DEFAULT_INTRO,
    DEFAULT_TITLE,
    STAGING_TITLE,
    CategoryBlock,
    Document,
    Section,
    StagingBody,
    is_section_heading,
    is_staging_heading,
    minimal_document,
    normalize,
    normalize_document,
    parse_document,
)
from relnote.changelog._editor import (
    category_heading,
    format_entry,
    has_reference,
    insert_entry,
    make_entry,
)
from relnote.changelog._release import (
    DEFAULT_VERSION,
    cut_release,
    version_from_tag,
    version_heading,
)

__all__ = [
    'CategoryBlock',
    'DEFAULT_INTRO',
    'DEFAULT_TITLE',
    'DEFAULT_VERSION',
    'Document',
    'STAGING_TITLE',
    'Section',
    'StagingBody',
    'category_heading',
    'cut_release',
    'format_entry',
    'has_reference',
    'insert_entry',
    'is_section_heading',
    'is_staging_heading',
    'make_entry',
    'minimal_document',
    'normalize',
    'normalize_document',
    'parse_document',
    'version_from_tag',
    'version_heading',
]
