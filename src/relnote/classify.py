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

"""Classify a change from its title and labels.

:func:`categorize` resolves a :class:`~relnote._types.Classification`
in three steps, first match wins:

1. **Labels.** Each label is normalised (trimmed, lower-cased,
   ``type:``/``kind:`` prefixes dropped, then mapped through
   :data:`COMMON_LABEL_ALIASES`) and compared against every configured
   category's own name and alias list, in configured order.
2. **Title grammar.** The ``type`` token of ``type(scope)!: subject``
   is looked up (directly, then through :data:`COMMON_LABEL_ALIASES`)
   among the configured names and aliases.
3. **Fallback.** The first of :data:`FALLBACK_CATEGORIES` that is
   configured, else the first configured category, else
   :data:`DEFAULT_CATEGORY`.

The breaking flag is computed independently of the category: the
grammar ``!``, a configured breaking label, or a breaking phrase in the
title each set it.

The scope comes only from the title grammar here. Scope inferred from
changed files is a weaker signal applied by the caller (see
:func:`resolve_scope`).
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from relnote._types import Classification
from relnote.commit_parsing import parse_title
from relnote.config import RelnoteConfig

# Common label and type spellings collapsed onto one canonical token.
COMMON_LABEL_ALIASES: dict[str, str] = {
    'type: feat': 'feat',
    'type: feature': 'feat',
    'enhancement': 'feat',
    'feature': 'feat',
    'feat': 'feat',
    'type: fix': 'fix',
    'bug': 'fix',
    'bugfix': 'fix',
    'hotfix': 'fix',
    'fix': 'fix',
    'docs': 'docs',
    'documentation': 'docs',
    'perf': 'perf',
    'performance': 'perf',
    'refactor': 'refactor',
    'refactoring': 'refactor',
    'test': 'test',
    'tests': 'test',
    'chore': 'chore',
    'maintenance': 'chore',
}

# Lower-cased phrases that mark a title as breaking.
BREAKING_PHRASES: tuple[str, ...] = ('breaking change', 'breaking changes', 'breaking')

# Preferred fallback categories, in priority order.
FALLBACK_CATEGORIES: tuple[str, ...] = ('Features', 'Fixes', 'Chores', 'Misc')

DEFAULT_CATEGORY = 'Changes'

_LABEL_PREFIX_RE = re.compile(r'^(?:type|kind):\s*')


def _norm(value: str) -> str:
    return value.strip().lower()


def normalize_label(label: str) -> str:
    """Normalise a label to its canonical token.

    >>> normalize_label('  Type: Enhancement ')
    'feat'
    >>> normalize_label('kind: hotfix')
    'fix'
    >>> normalize_label('needs-review')
    'needs-review'
    """
    lowered = _norm(label)
    stripped = _LABEL_PREFIX_RE.sub('', lowered)
    return COMMON_LABEL_ALIASES.get(stripped) or COMMON_LABEL_ALIASES.get(lowered) or stripped


def _alias_keys(aliases: Iterable[str]) -> set[str]:
    """Every spelling under which a configured alias may match."""
    keys: set[str] = set()
    for alias in aliases:
        if alias.strip():
            keys.add(_norm(alias))
            keys.add(normalize_label(alias))
    return keys


def _alias_to_category(config: RelnoteConfig) -> dict[str, str]:
    """Map names and aliases to category; earlier categories win."""
    mapping: dict[str, str] = {}
    for category, aliases in config.categories.items():
        for key in _alias_keys([category, *aliases]):
            mapping.setdefault(key, category)
    return mapping


def _match_labels(labels: list[str], config: RelnoteConfig) -> str | None:
    normed = {normalize_label(label) for label in labels}
    if not normed:
        return None
    for category, aliases in config.categories.items():
        if normed & _alias_keys([category, *aliases]):
            return category
    return None


def _fallback(config: RelnoteConfig) -> str:
    for name in FALLBACK_CATEGORIES:
        if name in config.categories:
            return name
    return next(iter(config.categories), DEFAULT_CATEGORY)


def is_breaking(title: str, labels: list[str], config: RelnoteConfig, *, bang: bool = False) -> bool:
    """Whether a change is breaking.

    Args:
        title: The change title.
        labels: Normalised or raw labels.
        config: Provides the breaking-label aliases.
        bang: Whether the title grammar carried ``!``.
    """
    if bang:
        return True
    breaking_labels = _alias_keys(config.breaking_labels)
    if any(normalize_label(label) in breaking_labels for label in labels):
        return True
    lowered = _norm(title)
    return any(phrase in lowered for phrase in BREAKING_PHRASES)


def categorize(title: str, labels: Iterable[str] | None, config: RelnoteConfig) -> Classification:
    """Classify a change.

    Args:
        title: The change request title.
        labels: Label names attached to the change.
        config: Category and breaking-label configuration.

    Returns:
        The resolved :class:`Classification`.
    """
    label_list = [label for label in (labels or []) if label.strip()]
    parsed = parse_title(title)
    scope = parsed.scope if parsed else ''
    breaking = is_breaking(title, label_list, config, bang=bool(parsed and parsed.breaking))

    category = _match_labels(label_list, config)
    if category is None and parsed is not None:
        aliases = _alias_to_category(config)
        category = aliases.get(parsed.type) or aliases.get(COMMON_LABEL_ALIASES.get(parsed.type, ''))
    if category is None:
        category = _fallback(config)

    return Classification(category=category, breaking=breaking, scope=scope)


def resolve_scope(classification: Classification, inferred_scope: str = '') -> Classification:
    """Fill in an inferred scope when the title grammar carried none.

    >>> resolve_scope(Classification('Fixes', scope='api'), 'web').scope
    'api'
    >>> resolve_scope(Classification('Fixes'), 'web').scope
    'web'
    """
    if classification.scope or not inferred_scope:
        return classification
    return Classification(
        category=classification.category,
        breaking=classification.breaking,
        scope=inferred_scope,
    )


__all__ = [
    'BREAKING_PHRASES',
    'COMMON_LABEL_ALIASES',
    'DEFAULT_CATEGORY',
    'FALLBACK_CATEGORIES',
    'categorize',
    'is_breaking',
    'normalize_label',
    'resolve_scope',
]
