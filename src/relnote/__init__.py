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

"""relnote: changelog automation for pull requests and releases.

Typical library use::

    from relnote import RelnoteConfig, categorize, insert_entry, make_entry, parse_document, suggest_bump

    title = 'fix(api): clamp page size'
    result = categorize(title, ['bug'], RelnoteConfig())
    doc = insert_entry(parse_document(text), result.category, make_entry(title, 56, result.scope))
    suggest_bump(result)  # BumpType.PATCH
"""

from relnote._types import Classification, Entry
from relnote.bump import combine_bumps, suggest_bump
from relnote.changelog import (
    Document,
    cut_release,
    insert_entry,
    make_entry,
    minimal_document,
    normalize,
    normalize_document,
    parse_document,
)
from relnote.classify import categorize
from relnote.commit_parsing import BumpType
from relnote.config import RelnoteConfig, load_config
from relnote.errors import ErrorCode, RelnoteError
from relnote.events import ChangeMergedEvent, ReleasePublishedEvent, parse_event

__version__ = '0.1.0'

__all__ = [
    'BumpType',
    'ChangeMergedEvent',
    'Classification',
    'Document',
    'Entry',
    'ErrorCode',
    'RelnoteConfig',
    'RelnoteError',
    'ReleasePublishedEvent',
    '__version__',
    'categorize',
    'combine_bumps',
    'cut_release',
    'insert_entry',
    'load_config',
    'make_entry',
    'minimal_document',
    'normalize',
    'normalize_document',
    'parse_document',
    'parse_event',
    'suggest_bump',
]
