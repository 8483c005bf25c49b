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

"""Suggest a semantic-version bump from a classification.

A breaking change is always :attr:`~BumpType.MAJOR`. Otherwise the
category name decides: an exact match against :data:`MINOR_CATEGORIES`
or :data:`PATCH_CATEGORIES` first, then a substring match against
:data:`MINOR_HINTS` / :data:`PATCH_HINTS`. Anything else is
:attr:`~BumpType.NONE`.

Several suggestions combine to the strongest one
(``major > minor > patch > none``)::

    combine_bumps([BumpType.PATCH, BumpType.MINOR])  # BumpType.MINOR
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import reduce

from relnote._types import Classification
from relnote.commit_parsing import BumpType, max_bump

MINOR_CATEGORIES: frozenset[str] = frozenset({'features', 'feature', 'enhancements', 'adds', 'new'})

PATCH_CATEGORIES: frozenset[str] = frozenset({
    'fixes',
    'fix',
    'bug',
    'bugs',
    'docs',
    'documentation',
    'refactor',
    'tests',
    'test',
    'performance',
    'perf',
    'chore',
    'chores',
    'misc',
})

MINOR_HINTS: tuple[str, ...] = ('feature',)

PATCH_HINTS: tuple[str, ...] = ('fix', 'bug', 'docs', 'refactor', 'perf', 'test', 'chore', 'misc')


def suggest_bump(classification: Classification | str) -> BumpType:
    """Suggest a bump for one change.

    Args:
        classification: A :class:`Classification`, or a bare category
            name (treated as non-breaking).

    Returns:
        The suggested :class:`BumpType`.

    >>> suggest_bump(Classification('Fixes', breaking=True))
    <BumpType.MAJOR: 'major'>
    >>> suggest_bump('Bug Fixes')
    <BumpType.PATCH: 'patch'>
    >>> suggest_bump('Security')
    <BumpType.NONE: 'none'>
    """
    if isinstance(classification, str):
        classification = Classification(category=classification)
    if classification.breaking:
        return BumpType.MAJOR

    key = classification.category.strip().lower()
    if key in MINOR_CATEGORIES:
        return BumpType.MINOR
    if key in PATCH_CATEGORIES:
        return BumpType.PATCH

    if any(hint in key for hint in MINOR_HINTS):
        return BumpType.MINOR
    if any(hint in key for hint in PATCH_HINTS):
        return BumpType.PATCH
    return BumpType.NONE


def combine_bumps(bumps: Iterable[BumpType]) -> BumpType:
    """Reduce several bumps to the highest-severity one.

    An empty input yields :attr:`BumpType.NONE`.
    """
    return reduce(max_bump, bumps, BumpType.NONE)


__all__ = [
    'MINOR_CATEGORIES',
    'MINOR_HINTS',
    'PATCH_CATEGORIES',
    'PATCH_HINTS',
    'combine_bumps',
    'suggest_bump',
]
