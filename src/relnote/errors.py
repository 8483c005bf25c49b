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

"""Error taxonomy for relnote.

Every failure relnote raises on purpose is a :class:`RelnoteError`
carrying a stable :class:`ErrorCode`, a human-readable message and an
optional remediation hint.  Callers that only care about "did relnote
refuse" catch the base class; callers that react to a specific failure
(a stale write, a missing token) catch the subclass.

Propagation::

    ┌───────────────────────────────┬──────────────────────────────────┐
    │ Code                          │ Handling                         │
    ├───────────────────────────────┼──────────────────────────────────┤
    │ RN_CONFIG_INVALID             │ Caught by load_config(); full    │
    │                               │ defaults are used instead.       │
    ├───────────────────────────────┼──────────────────────────────────┤
    │ RN_AUTH_MISSING               │ Fatal before any remote I/O.     │
    ├───────────────────────────────┼──────────────────────────────────┤
    │ RN_CONFLICT                   │ Fatal; stale optimistic token.   │
    │                               │ Never retried.                   │
    ├───────────────────────────────┼──────────────────────────────────┤
    │ RN_MALFORMED_CLASSIFICATION   │ Fatal; nothing is written.       │
    ├───────────────────────────────┼──────────────────────────────────┤
    │ RN_EVENT_INVALID              │ Fatal; payload failed validation.│
    ├───────────────────────────────┼──────────────────────────────────┤
    │ RN_REMOTE                     │ Fatal; unexpected API response.  │
    └───────────────────────────────┴──────────────────────────────────┘
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    'AuthMissingError',
    'ConflictError',
    'ErrorCode',
    'MalformedClassificationError',
    'RelnoteError',
    'RemoteError',
]


class ErrorCode(Enum):
    """Stable identifiers for relnote failures."""

    CONFIG_INVALID = 'RN_CONFIG_INVALID'
    AUTH_MISSING = 'RN_AUTH_MISSING'
    CONFLICT = 'RN_CONFLICT'
    MALFORMED_CLASSIFICATION = 'RN_MALFORMED_CLASSIFICATION'
    EVENT_INVALID = 'RN_EVENT_INVALID'
    REMOTE = 'RN_REMOTE'


class RelnoteError(Exception):
    """Base class for all deliberate relnote failures.

    Args:
        code: The :class:`ErrorCode` identifying the failure.
        message: Human-readable description.
        hint: Optional suggestion for fixing the problem.
    """

    def __init__(self, code: ErrorCode, message: str, *, hint: str = '') -> None:
        """Initialize with an error code, message and optional hint."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        """Render as ``[RN_CODE] message``."""
        return f'[{self.code.value}] {self.message}'


class AuthMissingError(RelnoteError):
    """No credential is available to reach the remote store."""

    def __init__(self, message: str = 'No GitHub token found', *, hint: str = '') -> None:
        """Initialize with an optional message override."""
        super().__init__(
            ErrorCode.AUTH_MISSING,
            message,
            hint=hint or 'Set GITHUB_TOKEN (or GH_TOKEN) in the workflow environment.',
        )


class ConflictError(RelnoteError):
    """The optimistic-concurrency token was stale at write time."""

    def __init__(self, path: str, *, ref: str = '', detail: str = '') -> None:
        """Initialize with the conflicting path and optional ref/detail."""
        where = f'{path}@{ref}' if ref else path
        message = f'{where} changed since it was read'
        if detail:
            message = f'{message}: {detail}'
        super().__init__(
            ErrorCode.CONFLICT,
            message,
            hint='Another writer updated the file concurrently. Re-run the job to apply this change.',
        )
        self.path = path
        self.ref = ref


class MalformedClassificationError(RelnoteError):
    """A resolved category is not a usable string."""

    def __init__(self, value: object) -> None:
        """Initialize with the offending category value."""
        super().__init__(
            ErrorCode.MALFORMED_CLASSIFICATION,
            f'category must be a non-empty string; got {type(value).__name__} {value!r}',
        )
        self.value = value


class RemoteError(RelnoteError):
    """The remote API answered with something relnote cannot handle."""

    def __init__(self, message: str, *, status_code: int = 0) -> None:
        """Initialize with a message and the HTTP status code, if any."""
        super().__init__(ErrorCode.REMOTE, message)
        self.status_code = status_code
