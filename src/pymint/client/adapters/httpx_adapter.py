# Copyright 2026 Firefly Software Solutions Inc.
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
"""httpx-based transport adapter."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import httpx
import structlog

from pymint.client.request import RequestDescriptor, TransportResponse
from pymint.kernel.exceptions import TransportException

logger = structlog.get_logger(__name__)


class HttpxTransport:
    """Transport backed by httpx.AsyncClient.

    Connection-level failures surface as TransportException; any HTTP status,
    including error statuses, is returned for classification.
    """

    def __init__(
        self,
        user_agent: str = "Mint-Android/1.10.2",
        timeout: timedelta = timedelta(seconds=30),
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        default_headers = {"User-Agent": user_agent, **(headers or {})}
        self._client = client or httpx.AsyncClient(
            timeout=timeout.total_seconds(),
            headers=default_headers,
        )

    async def send(self, request: RequestDescriptor) -> TransportResponse:
        kwargs: dict[str, Any] = {
            "headers": dict(request.headers),
            "params": {k: v for k, v in request.params.items() if v is not None},
        }
        if request.form is not None:
            kwargs["data"] = dict(request.form)
        elif request.json is not None:
            kwargs["json"] = request.json

        logger.debug("mint.request", method=request.method, url=request.url)
        try:
            response = await self._client.request(request.method, request.url, **kwargs)
        except httpx.TransportError as exc:
            raise TransportException(
                f"{type(exc).__name__}: {exc}",
                context={"method": request.method, "url": request.url},
            ) from exc

        logger.debug("mint.response", url=request.url, status_code=response.status_code)
        return TransportResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            body=response.content,
        )

    async def close(self) -> None:
        await self._client.aclose()
