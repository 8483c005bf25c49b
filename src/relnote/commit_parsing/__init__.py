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

r"""Change-title parsing and bump types.

Usage::

    from relnote.commit_parsing import BumpType, parse_title, display_title

    parsed = parse_title('feat(auth)!: add OAuth2')
    assert parsed.type == 'feat'
    assert parsed.scope == 'auth'
    assert parsed.breaking is True

    assert display_title('fix: clamp value') == 'Clamp value'
"""

from relnote.commit_parsing._conventional import (
    TITLE_PATTERN,
    display_title,
    parse_title,
)
from relnote.commit_parsing._types import (
    BUMP_PRECEDENCE,
    BumpType,
    ParsedTitle,
    max_bump,
)

__all__ = [
    'BUMP_PRECEDENCE',
    'BumpType',
    'ParsedTitle',
    'TITLE_PATTERN',
    'display_title',
    'max_bump',
    'parse_title',
]
