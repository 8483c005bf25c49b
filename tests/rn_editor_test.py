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

"""Tests for inserting entries into the staging section."""

from __future__ import annotations

import pytest
from relnote._types import Entry
from relnote.changelog import (
    category_heading,
    format_entry,
    has_reference,
    insert_entry,
    make_entry,
    minimal_document,
    parse_document,
)
from relnote.errors import ErrorCode, MalformedClassificationError

HEADER = '# Changelog\nAll notable changes to this project will be documented in this file.\n\n'


class TestFormatEntry:
    """Tests for entry formatting."""

    def test_plain(self) -> None:
        """Prefix stripped, reference appended."""
        assert format_entry('fix: clamp invalid question number', 55) == '- Clamp invalid question number (#55)'

    def test_scope(self) -> None:
        """A scope renders as a bracketed prefix."""
        assert format_entry('fix(api): clamp page size', 56, 'api') == '- [api] Clamp page size (#56)'

    def test_free_form_title(self) -> None:
        """Free-form titles are used verbatim."""
        assert format_entry('Bump lodash', 57) == '- Bump lodash (#57)'

    def test_make_entry_trims_scope(self) -> None:
        """Scope whitespace is dropped."""
        assert make_entry('fix: x', 1, ' web ') == Entry(text='X', reference_id=1, scope='web')


class TestCategoryHeading:
    """Tests for category_heading()."""

    def test_heading(self) -> None:
        """Category names become ### headings."""
        assert category_heading(' Fixes ') == '### Fixes'

    @pytest.mark.parametrize('value', ['', '   ', None, 3])
    def test_malformed(self, value: object) -> None:
        """Empty or non-string categories are rejected."""
        with pytest.raises(MalformedClassificationError) as exc_info:
            category_heading(value)
        assert exc_info.value.code == ErrorCode.MALFORMED_CLASSIFICATION


class TestInsertEntry:
    """Tests for insert_entry()."""

    def test_into_minimal_document(self) -> None:
        """The first entry creates its category block."""
        doc = insert_entry(minimal_document(), 'Fixes', make_entry('fix: clamp invalid question number', 55))
        assert doc.render() == f'{HEADER}## [Unreleased]\n\n### Fixes\n- Clamp invalid question number (#55)\n'

    def test_into_empty_document(self) -> None:
        """An empty document is normalized on the way."""
        doc = insert_entry(parse_document(''), 'Fixes', make_entry('fix: clamp invalid question number', 55))
        assert doc.staging is not None
        assert doc.staging.content == '### Fixes\n- Clamp invalid question number (#55)\n'

    def test_newest_first(self) -> None:
        """A second entry in the same category goes on top."""
        doc = insert_entry(minimal_document(), 'Fixes', make_entry('fix: clamp invalid question number', 55))
        doc = insert_entry(doc, 'Fixes', make_entry('fix(api): clamp page size', 56, 'api'))
        assert doc.staging is not None
        assert doc.staging.content == (
            '### Fixes\n- [api] Clamp page size (#56)\n- Clamp invalid question number (#55)\n'
        )

    def test_new_category_appended(self) -> None:
        """A category without a block gets one after the existing blocks."""
        doc = insert_entry(minimal_document(), 'Fixes', make_entry('fix: a', 1))
        doc = insert_entry(doc, 'Features', make_entry('feat: b', 2))
        assert doc.staging is not None
        assert doc.staging.content == '### Fixes\n- A (#1)\n\n### Features\n- B (#2)\n'

    def test_category_match_is_case_insensitive(self) -> None:
        """An existing block is reused regardless of case."""
        text = f'{HEADER}## [Unreleased]\n\n### bug fixes\n- A (#1)\n'
        doc = insert_entry(parse_document(text), 'Bug Fixes', make_entry('fix: b', 2))
        assert doc.staging is not None
        assert doc.staging.content == '### bug fixes\n- B (#2)\n- A (#1)\n'

    def test_other_blocks_preserved(self) -> None:
        """Blocks and lines other than the target are untouched."""
        text = (
            f'{HEADER}## [Unreleased]\n\n'
            'Intro paragraph.\n\n'
            '### Features\n- F (#1)\n  continued line\n\n'
            '### Fixes\n- X (#2)\n\n'
            '## [0.1.0] – 2024-01-01\n- Old (#0)\n'
        )
        doc = insert_entry(parse_document(text), 'Fixes', make_entry('fix: y', 3))
        assert doc.render() == (
            f'{HEADER}## [Unreleased]\n\n'
            'Intro paragraph.\n\n'
            '### Features\n- F (#1)\n  continued line\n\n'
            '### Fixes\n- Y (#3)\n- X (#2)\n\n'
            '## [0.1.0] – 2024-01-01\n- Old (#0)\n'
        )

    def test_version_sections_untouched(self) -> None:
        """Entries never land in a version section."""
        text = f'{HEADER}## [Unreleased]\n\n## [0.1.0] – 2024-01-01\n### Fixes\n- Old (#1)\n'
        doc = insert_entry(parse_document(text), 'Fixes', make_entry('fix: new', 2))
        assert doc.sections[1].lines == ('### Fixes', '- Old (#1)')
        assert doc.staging is not None
        assert doc.staging.content == '### Fixes\n- New (#2)\n'

    def test_preformatted_line(self) -> None:
        """An already formatted bullet is inserted as is."""
        doc = insert_entry(minimal_document(), 'Docs', '  - Custom text (#9)  ')
        assert doc.staging is not None
        assert doc.staging.content == '### Docs\n- Custom text (#9)\n'

    def test_duplicate_reference_skipped(self) -> None:
        """Re-inserting a reference already in staging changes nothing."""
        doc = insert_entry(minimal_document(), 'Fixes', make_entry('fix: a', 55))
        again = insert_entry(doc, 'Features', make_entry('feat: a again', 55))
        assert again.render() == doc.render()

    def test_same_reference_in_released_section_is_not_a_duplicate(self) -> None:
        """Only the staging section is checked for duplicates."""
        text = f'{HEADER}## [Unreleased]\n\n## [0.1.0]\n- Old (#5)\n'
        doc = insert_entry(parse_document(text), 'Fixes', make_entry('fix: again', 5))
        assert doc.staging is not None
        assert has_reference(doc.staging, 5)

    def test_malformed_category(self) -> None:
        """A bad category raises before anything changes."""
        with pytest.raises(MalformedClassificationError):
            insert_entry(minimal_document(), '', make_entry('fix: a', 1))

    def test_insert_is_normalized(self) -> None:
        """The result is already canonical."""
        doc = insert_entry(parse_document('## [0.1.0]\n- Old (#1)\n'), 'Fixes', make_entry('fix: a', 2))
        text = doc.render()
        assert text == (
            f'{HEADER}## [Unreleased]\n\n### Fixes\n- A (#2)\n\n## [0.1.0]\n- Old (#1)\n'
        )
