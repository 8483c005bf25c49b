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

"""Shared leaf-level types used across relnote.

This module must have **zero** imports from other ``relnote``
subpackages to avoid circular-import chains.  It is safe to import
from any module in the project.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    'Classification',
    'Entry',
]


@dataclass(frozen=True)
class Classification:
    """The resolved ``(category, breaking, scope)`` triple for one change.

    Attributes:
        category: Configured category name (display casing), or a
            deterministic fallback when nothing matched.
        breaking: Whether the change is breaking.
        scope: Optional scope tag. Empty string when absent.
    """

    category: str
    breaking: bool = False
    scope: str = ''


@dataclass(frozen=True)
class Entry:
    """A single changelog bullet.

    Attributes:
        text: Human-readable description (title with any conventional
            prefix already stripped).
        reference_id: Numeric id of the originating change request.
        scope: Optional scope tag rendered as a ``[scope]`` prefix.
    """

    text: str
    reference_id: int
    scope: str = ''

    def render(self) -> str:
        """Render as ``- [scope] text (#id)``.

        >>> Entry('Add OAuth2', 12, 'auth').render()
        '- [auth] Add OAuth2 (#12)'
        >>> Entry('Add OAuth2', 12).render()
        '- Add OAuth2 (#12)'
        """
        prefix = f'[{self.scope}] ' if self.scope else ''
        return f'- {prefix}{self.text} (#{self.reference_id})'
