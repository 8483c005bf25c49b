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

"""Tests for relnote.classify."""

from __future__ import annotations

import itertools

import pytest
from relnote._types import Classification
from relnote.classify import (
    DEFAULT_CATEGORY,
    categorize,
    is_breaking,
    normalize_label,
    resolve_scope,
)
from relnote.config import RelnoteConfig


@pytest.fixture
def config() -> RelnoteConfig:
    """Default configuration."""
    return RelnoteConfig()


class TestNormalizeLabel:
    """Tests for normalize_label()."""

    def test_trims_and_lowercases(self) -> None:
        """Whitespace and case are ignored."""
        assert normalize_label('  Documentation ') == 'docs'

    def test_strips_type_prefix(self) -> None:
        """type: and kind: prefixes are dropped."""
        assert normalize_label('type: bug') == 'fix'
        assert normalize_label('kind: feature') == 'feat'

    def test_unknown_label_passes_through(self) -> None:
        """Unknown labels stay normalised but unmapped."""
        assert normalize_label('Needs-Review') == 'needs-review'


class TestCategorize:
    """Tests for categorize()."""

    def test_title_type(self, config: RelnoteConfig) -> None:
        """The grammar type picks the category when no label matches."""
        assert categorize('fix: clamp invalid question number', [], config).category == 'Fixes'
        assert categorize('feat: add export', [], config).category == 'Features'
        assert categorize('docs: fix typo', None, config).category == 'Docs'

    def test_label_beats_title(self, config: RelnoteConfig) -> None:
        """A matching label wins over the title type."""
        result = categorize('feat: add export', ['bug'], config)
        assert result.category == 'Fixes'

    def test_label_alias_table(self, config: RelnoteConfig) -> None:
        """Common label spellings are mapped before matching."""
        assert categorize('Update things', ['enhancement'], config).category == 'Features'
        assert categorize('Update things', ['Type: Hotfix'], config).category == 'Fixes'

    def test_first_configured_category_wins(self) -> None:
        """When labels match several categories, configured order decides."""
        config = RelnoteConfig(categories={'Docs': ['docs'], 'Fixes': ['fix']})
        result = categorize('Update', ['fix', 'docs'], config)
        assert result.category == 'Docs'

    def test_unknown_labels_fall_through_to_title(self, config: RelnoteConfig) -> None:
        """Labels that match nothing do not block the title step."""
        assert categorize('perf: faster parse', ['needs-review'], config).category == 'Performance'

    def test_title_type_via_canonical_token(self) -> None:
        """A title type matches a category through its canonical token."""
        config = RelnoteConfig(categories={'Bugs': ['bug'], 'Other': []})
        assert categorize('fix: x', [], config).category == 'Bugs'

    def test_fallback_prefers_features(self, config: RelnoteConfig) -> None:
        """Unclassifiable changes land in the first preferred fallback."""
        assert categorize('Update README', [], config).category == 'Features'

    def test_fallback_first_configured(self) -> None:
        """Without preferred names the first configured category is used."""
        config = RelnoteConfig(categories={'Added': ['feat'], 'Other': []})
        assert categorize('Update README', [], config).category == 'Added'

    def test_fallback_misc(self) -> None:
        """Misc is a preferred fallback name."""
        config = RelnoteConfig(categories={'Added': ['feat'], 'Misc': []})
        assert categorize('Update README', [], config).category == 'Misc'

    def test_fallback_default_when_no_categories(self) -> None:
        """An empty category map yields the default category."""
        config = RelnoteConfig(categories={})
        assert categorize('fix: x', ['bug'], config).category == DEFAULT_CATEGORY

    def test_category_keeps_display_casing(self) -> None:
        """The configured spelling is returned."""
        config = RelnoteConfig(categories={'Bug Fixes': ['fix']})
        assert categorize('FIX: x', [], config).category == 'Bug Fixes'

    def test_category_name_is_an_alias(self) -> None:
        """A category's own name matches as a label."""
        config = RelnoteConfig(categories={'Security': [], 'Misc': []})
        assert categorize('Patch CVE', ['security'], config).category == 'Security'

    def test_scope_from_title(self, config: RelnoteConfig) -> None:
        """The grammar scope is carried through."""
        assert categorize('fix(api): clamp page size', [], config).scope == 'api'

    def test_blank_labels_ignored(self, config: RelnoteConfig) -> None:
        """Blank label strings are skipped."""
        assert categorize('fix: x', ['', '  '], config).category == 'Fixes'


class TestBreaking:
    """Tests for breaking detection."""

    @pytest.mark.parametrize(
        ('title', 'labels', 'expected'),
        [
            ('feat!: drop v1 API', [], True),
            ('feat(api)!: drop v1 API', [], True),
            ('fix: typo', ['breaking'], True),
            ('fix: typo', ['Breaking-Change'], True),
            ('fix: typo', ['major'], True),
            ('Breaking change: remove flag', [], True),
            ('Remove flag (BREAKING)', [], True),
            ('fix: typo', ['bug'], False),
            ('Update README', [], False),
        ],
    )
    def test_signals(self, config: RelnoteConfig, title: str, labels: list[str], expected: bool) -> None:
        """Bang, breaking labels and breaking phrases each set the flag."""
        assert categorize(title, labels, config).breaking is expected

    @pytest.mark.parametrize(('bang', 'label', 'phrase'), list(itertools.product([False, True], repeat=3)))
    def test_signal_combinations(self, config: RelnoteConfig, bang: bool, label: bool, phrase: bool) -> None:
        """Any combination of signals is breaking iff at least one is present."""
        title = f'feat(api){"!" if bang else ""}: {"breaking change, " if phrase else ""}drop v1 API'
        labels = ['enhancement', 'breaking'] if label else ['enhancement']
        result = categorize(title, labels, config)
        assert result.breaking is (bang or label or phrase)
        assert result.category == 'Features'
        assert result.scope == 'api'

    def test_breaking_does_not_change_category(self, config: RelnoteConfig) -> None:
        """A breaking fix is still a fix."""
        result = categorize('fix: x', ['breaking'], config)
        assert result == Classification(category='Fixes', breaking=True, scope='')

    def test_custom_breaking_labels(self) -> None:
        """Configured breaking labels replace the defaults."""
        config = RelnoteConfig(breaking_labels=['api-change'])
        assert is_breaking('fix: x', ['api-change'], config) is True
        assert is_breaking('fix: x', ['major'], config) is False

    def test_bang_argument(self, config: RelnoteConfig) -> None:
        """The bang flag alone is enough."""
        assert is_breaking('anything', [], config, bang=True) is True


class TestResolveScope:
    """Tests for resolve_scope()."""

    def test_title_scope_wins(self) -> None:
        """An explicit grammar scope is never replaced."""
        result = resolve_scope(Classification('Fixes', scope='api'), 'web')
        assert result.scope == 'api'

    def test_inferred_scope_fills_gap(self) -> None:
        """An inferred scope is used when the title has none."""
        result = resolve_scope(Classification('Fixes', breaking=True), 'web')
        assert result == Classification('Fixes', breaking=True, scope='web')

    def test_no_inferred_scope(self) -> None:
        """No scope anywhere leaves the classification as is."""
        original = Classification('Fixes')
        assert resolve_scope(original) is original
