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

"""Pure types for change-title parsing and version bumps.

This module has **zero** runtime dependencies beyond the standard library.
Everything here is a frozen dataclass or enum: no I/O, no logging, no
side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BumpType(Enum):
    """Semver bump levels, ordered by precedence (highest first).

    The "strongest" bump wins when several changes are combined. For
    example, a ``feat`` and a ``fix`` together yield ``MINOR``.
    """

    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'
    NONE = 'none'


# Bump precedence: lower index = higher precedence.
BUMP_PRECEDENCE: list[BumpType] = [
    BumpType.MAJOR,
    BumpType.MINOR,
    BumpType.PATCH,
    BumpType.NONE,
]


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the higher-precedence bump type.

    >>> max_bump(BumpType.MINOR, BumpType.PATCH)
    <BumpType.MINOR: 'minor'>
    >>> max_bump(BumpType.NONE, BumpType.MAJOR)
    <BumpType.MAJOR: 'major'>
    """
    a_idx = BUMP_PRECEDENCE.index(a)
    b_idx = BUMP_PRECEDENCE.index(b)
    return BUMP_PRECEDENCE[min(a_idx, b_idx)]


@dataclass(frozen=True)
class ParsedTitle:
    """A change title that matched ``type(scope)!: subject``.

    Attributes:
        type: The type token, lower-cased (e.g. ``"feat"``, ``"fix"``).
        subject: Everything after the ``: `` separator, trimmed.
        scope: The parenthesised scope, trimmed. Empty if absent.
        breaking: Whether the ``!`` marker was present.
    """

    type: str
    subject: str
    scope: str = ''
    breaking: bool = False
