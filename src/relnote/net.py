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

"""HTTP plumbing shared by the remote clients.

Usage::

    from relnote.net import http_client, request_with_retry

    async with http_client(base_url='https://api.github.com') as client:
        resp = await request_with_retry(client, 'GET', '/repos/o/r')

Only idempotent reads should go through :func:`request_with_retry`.
Writes are sent once: replaying a write that may already have landed
would turn a transient error into a spurious conflict.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Final

import httpx

from relnote.logging import get_logger

log = get_logger('relnote.net')

DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_TIMEOUT: Final[float] = 30.0
MAX_RETRIES: Final[int] = 3

# Seconds before the first retry; doubles after each attempt.
RETRY_BACKOFF: Final[float] = 0.5

_RETRYABLE_STATUS: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


@asynccontextmanager
async def http_client(
    *,
    base_url: str = '',
    headers: dict[str, str] | None = None,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a configured :class:`httpx.AsyncClient`.

    Args:
        base_url: Prefix for relative request URLs.
        headers: Default headers for every request.
        pool_size: Maximum concurrent connections.
        timeout: Per-request timeout in seconds.
        transport: Optional transport override (tests pass
            :class:`httpx.MockTransport`).
    """
    limits = httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size)
    async with httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        limits=limits,
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    ) as client:
        yield client


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int = MAX_RETRIES,
    backoff: float = RETRY_BACKOFF,
    **kwargs: Any,  # noqa: ANN401
) -> httpx.Response:
    """Send a request, retrying transport errors, 429 and 5xx.

    Args:
        client: The client to send with.
        method: HTTP method.
        url: Absolute or base-relative URL.
        max_retries: Retries after the first attempt.
        backoff: Initial delay in seconds, doubled per retry.
        **kwargs: Passed through to :meth:`httpx.AsyncClient.request`.

    Returns:
        The last response received. Non-retryable error statuses are
        returned, not raised.

    Raises:
        httpx.TransportError: If every attempt failed at transport level.
    """
    delay = backoff
    for attempt in range(max_retries + 1):
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            if attempt >= max_retries:
                raise
            log.debug('http_retry', method=method, url=url, attempt=attempt + 1, error=str(exc))
        else:
            if response.status_code not in _RETRYABLE_STATUS or attempt >= max_retries:
                return response
            log.debug('http_retry', method=method, url=url, attempt=attempt + 1, status=response.status_code)
        await asyncio.sleep(delay)
        delay *= 2
    raise AssertionError('unreachable')  # pragma: no cover


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'MAX_RETRIES',
    'http_client',
    'request_with_retry',
]
