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

r"""Lightweight parser for the conventional change-title grammar.

Pull request titles follow (loosely) the Conventional Commits subject
line::

    type(scope)!: subject

- ``type`` is a word token; matching is case-insensitive and the token
  is normalised to lowercase.
- ``(scope)`` is optional. Empty parentheses mean "no scope".
- ``!`` is optional and marks a breaking change.
- ``:`` is required; whitespace after it is optional.

Only the first line of the title is considered. A title that does not
match is not an error: :func:`parse_title` returns ``None`` and callers
treat the whole title as display text.

Pure implementation: depends only on ``re`` and :mod:`._types`.
"""

from __future__ import annotations

import re

from relnote.commit_parsing._types import ParsedTitle

TITLE_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<type>\w+)'  # type (e.g. feat, fix, chore)
    r'(?:\((?P<scope>[^)]*)\))?'  # optional scope in parens
    r'(?P<breaking>!)?'  # optional breaking change indicator
    r':\s*'  # colon + optional space
    r'(?P<subject>.+)$',  # subject
)


def parse_title(title: str) -> ParsedTitle | None:
    """Parse a change title against ``type(scope)!: subject``.

    Args:
        title: The change request title.

    Returns:
        A :class:`ParsedTitle`, or ``None`` if the title does not follow
        the grammar.

    >>> parse_title('feat(auth)!: drop v1 tokens')
    ParsedTitle(type='feat', subject='drop v1 tokens', scope='auth', breaking=True)
    >>> parse_title('Update README') is None
    True
    """
    lines = title.strip().splitlines()
    if not lines:
        return None
    match = TITLE_PATTERN.match(lines[0].strip())
    if not match:
        return None
    subject = match.group('subject').strip()
    if not subject:
        return None
    return ParsedTitle(
        type=match.group('type').lower(),
        subject=subject,
        scope=(match.group('scope') or '').strip(),
        breaking=bool(match.group('breaking')),
    )


def display_title(title: str) -> str:
    """Return the human-facing text for a changelog entry.

    The grammar is re-parsed here rather than reused from
    classification: a title with a ``type(scope)!:`` prefix has the
    prefix removed and its first letter capitalised, anything else is
    used verbatim (trimmed).

    >>> display_title('fix: clamp invalid question number')
    'Clamp invalid question number'
    >>> display_title('Bump lodash to 4.17.21')
    'Bump lodash to 4.17.21'
    """
    parsed = parse_title(title)
    if parsed is None:
        return title.strip()
    return parsed.subject[:1].upper() + parsed.subject[1:]
