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

"""Tests for relnote.net."""

from __future__ import annotations

import httpx
import pytest
from relnote.net import http_client, request_with_retry


def _sequence_transport(responses: list[httpx.Response | Exception]) -> tuple[httpx.MockTransport, list[str]]:
    """Transport that replays *responses* in order and records URLs."""
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        item = responses[len(seen) - 1]
        if isinstance(item, Exception):
            raise item
        return item

    return httpx.MockTransport(handler), seen


class TestHttpClient:
    """Tests for http_client()."""

    @pytest.mark.asyncio
    async def test_base_url_and_headers(self) -> None:
        """Base URL and default headers are applied."""
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={})

        async with http_client(
            base_url='https://api.example.com',
            headers={'X-Test': '1'},
            transport=httpx.MockTransport(handler),
        ) as client:
            await client.get('/ping')
        assert str(captured[0].url) == 'https://api.example.com/ping'
        assert captured[0].headers['X-Test'] == '1'


class TestRequestWithRetry:
    """Tests for request_with_retry()."""

    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        """A 200 is returned immediately."""
        transport, seen = _sequence_transport([httpx.Response(200, json={'ok': True})])
        async with http_client(base_url='https://x.test', transport=transport) as client:
            response = await request_with_retry(client, 'GET', '/a', backoff=0)
        assert response.status_code == 200
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_retries_5xx_then_succeeds(self) -> None:
        """Transient server errors are retried."""
        transport, seen = _sequence_transport([httpx.Response(502), httpx.Response(503), httpx.Response(200)])
        async with http_client(base_url='https://x.test', transport=transport) as client:
            response = await request_with_retry(client, 'GET', '/a', backoff=0)
        assert response.status_code == 200
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self) -> None:
        """Connection errors are retried."""
        transport, seen = _sequence_transport([httpx.ConnectError('boom'), httpx.Response(200)])
        async with http_client(base_url='https://x.test', transport=transport) as client:
            response = await request_with_retry(client, 'GET', '/a', backoff=0)
        assert response.status_code == 200
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_gives_up_returning_last_response(self) -> None:
        """After max_retries the last response is returned."""
        transport, seen = _sequence_transport([httpx.Response(429)] * 3)
        async with http_client(base_url='https://x.test', transport=transport) as client:
            response = await request_with_retry(client, 'GET', '/a', max_retries=2, backoff=0)
        assert response.status_code == 429
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_gives_up_raising_transport_error(self) -> None:
        """Persistent transport errors propagate."""
        transport, _ = _sequence_transport([httpx.ConnectError('down')] * 2)
        async with http_client(base_url='https://x.test', transport=transport) as client:
            with pytest.raises(httpx.ConnectError):
                await request_with_retry(client, 'GET', '/a', max_retries=1, backoff=0)

    @pytest.mark.asyncio
    async def test_client_errors_not_retried(self) -> None:
        """4xx other than 429 is returned as is."""
        transport, seen = _sequence_transport([httpx.Response(404)])
        async with http_client(base_url='https://x.test', transport=transport) as client:
            response = await request_with_retry(client, 'GET', '/a', backoff=0)
        assert response.status_code == 404
        assert len(seen) == 1
