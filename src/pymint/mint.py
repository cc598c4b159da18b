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
"""Mint API operations: authorize, discovery, profiles, sync, messaging and favorites."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

import structlog

from pymint.client.executor import RequestExecutor
from pymint.client.request import RequestDescriptor
from pymint.config.properties import ClientProperties
from pymint.core.config import Config
from pymint.kernel.exceptions import (
    InvalidArgumentException,
    NotAuthorizedException,
    ResponseParseException,
)
from pymint.logging.port import LoggingPort
from pymint.session import Credentials, SessionState

logger = structlog.get_logger(__name__)

BASE_URL = "https://api.mint.me"

# Unknown how the app derives it; every send reuses this value.
DEFAULT_PACKET_ID = 4716671047113889394

_FORM_CONTENT_TYPE = {"Content-Type": "application/x-www-form-urlencoded"}

_NEARBY_PICTURE_PARAMS = {"picture_width": 640, "picture_height": 510, "avatar_size": 288, "scale": 1}
_PROFILE_PICTURE_PARAMS = {"picture_width": 640, "picture_height": 558, "avatar_size": 288, "scale": 1}
_ACCOUNT_PICTURE_PARAMS = {
    **_PROFILE_PICTURE_PARAMS,
    "interest_avatar_size": 170,
    "spotify_avatar_size": 170,
}


def merge_by_key(
    first: Iterable[Mapping[str, Any]],
    second: Iterable[Mapping[str, Any]],
    key: str = "id",
) -> list[Mapping[str, Any]]:
    """Concatenate two lists, keeping only the first item seen for each key.

    >>> merge_by_key([{"id": 1}, {"id": 2}], [{"id": 2}, {"id": 3}])
    [{'id': 1}, {'id': 2}, {'id': 3}]
    """
    seen: set[Any] = set()
    merged: list[Mapping[str, Any]] = []
    for item in (*first, *second):
        value = item.get(key)
        if value in seen:
            continue
        seen.add(value)
        merged.append(item)
    return merged


def _data_list(payload: Any, path: str) -> list[Mapping[str, Any]]:
    if payload is None:
        return []
    if not isinstance(payload, Mapping):
        raise ResponseParseException(f"{path} response is not an object")
    return list(payload.get("data") or [])


class MintClient:
    """Async client for the Mint API.

    Every operation other than :meth:`authorize` checks its arguments and
    the session before touching the network, then calls the executor's
    ``read`` or ``write``. Nothing here retries or re-authenticates on its
    own: a NotAuthorizedException means the caller should authorize again.

        async with MintClient.from_config(Config.from_file("pymint.yaml")) as mint:
            await mint.authorize(facebook_token)
            people = await mint.get_recommendations(38.72, -9.14)
    """

    def __init__(
        self,
        executor: RequestExecutor | None = None,
        session: SessionState | None = None,
        base_url: str = BASE_URL,
        packet_id_factory: Callable[[], int] = lambda: DEFAULT_PACKET_ID,
    ) -> None:
        self._executor = executor or RequestExecutor.from_properties(ClientProperties())
        self._session = session or SessionState()
        self._base_url = base_url.rstrip("/")
        self._packet_id_factory = packet_id_factory

    @classmethod
    def from_config(cls, config: Config, logging_port: LoggingPort | None = None, **kwargs: Any) -> MintClient:
        """Build a client and its executor from ``pymint.client.*``, configuring logging when a port is given."""
        if logging_port is not None:
            logging_port.configure(config)
        properties = config.bind(ClientProperties)
        executor = RequestExecutor.from_properties(properties, transport=kwargs.pop("transport", None))
        return cls(executor=executor, base_url=properties.base_url, **kwargs)

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    async def __aenter__(self) -> MintClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._executor.close()

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    async def authorize(self, facebook_access_token: str) -> dict[str, Any]:
        """Exchange a Facebook token for a Mint session.

        On success both the access token and the user id are stored on the
        session at once and the raw payload is returned.
        """
        if not facebook_access_token:
            raise InvalidArgumentException()

        data = await self._executor.write(
            RequestDescriptor(
                "POST",
                self._url("/v1/oauth"),
                headers=_FORM_CONTENT_TYPE,
                form={"oauth_provider": "fb", "oauth_token": facebook_access_token},
            )
        )

        if not isinstance(data, Mapping) or not data.get("access_token") or data.get("user_id") is None:
            raise ResponseParseException("authorization response is missing access_token or user_id")

        self._session.update(data["access_token"], data["user_id"])
        logger.info("mint.authorized", user_id=data["user_id"])
        return dict(data)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_recommendations(self, latitude: float, longitude: float) -> list[Mapping[str, Any]]:
        """Nearby and recently active people around a position, without duplicates.

        Both lists are fetched concurrently; if either request fails the
        whole call fails. People in the nearby list take precedence.
        """
        if latitude is None or longitude is None:
            raise InvalidArgumentException()
        credentials = self._require_session()

        params = {"lat": latitude, "lng": longitude, **_NEARBY_PICTURE_PARAMS}

        async def fetch(path: str) -> list[Mapping[str, Any]]:
            payload = await self._executor.read(self._read_request(credentials, path, params))
            return _data_list(payload, path)

        # A failed list cancels the other one before the error reaches the caller.
        try:
            async with asyncio.TaskGroup() as tg:
                nearby = tg.create_task(fetch("/v3/me/nearby"))
                active = tg.create_task(fetch("/v3/me/nearby?active"))
        except ExceptionGroup as group:
            raise group.exceptions[0] from None
        return merge_by_key(nearby.result(), active.result(), "id")

    async def get_account(self) -> Any:
        credentials = self._require_session()
        return await self._executor.read(self._read_request(credentials, "/v5/me", _ACCOUNT_PICTURE_PARAMS))

    async def get_user(self, user_id: str) -> Mapping[str, Any] | None:
        """Profile of one user, or None when the backend returns no match."""
        if not user_id:
            raise InvalidArgumentException()
        credentials = self._require_session()

        payload = await self._executor.read(
            self._read_request(credentials, "/v3/profiles", {"ids": user_id, **_PROFILE_PICTURE_PARAMS})
        )
        data = _data_list(payload, "/v3/profiles")
        return data[0] if data else None

    async def get_updates(self, last_activity_date: datetime | None = None) -> Any:
        """Everything that changed since ``last_activity_date`` (or since ever)."""
        if last_activity_date is not None and not isinstance(last_activity_date, datetime):
            raise InvalidArgumentException()
        credentials = self._require_session()

        since = int(last_activity_date.timestamp() * 1000) if last_activity_date is not None else None
        return await self._executor.read(
            self._read_request(credentials, "/v5/me/sync", {"t": since, **_ACCOUNT_PICTURE_PARAMS})
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def send_message(self, user_id: str | None, chat_id: str | None, message: str) -> Any:
        """Send a text message, opening a chat with ``user_id`` first when no ``chat_id`` is given."""
        if not (user_id or chat_id) or not message:
            raise InvalidArgumentException()
        credentials = self._require_session()

        if not chat_id:
            chat = await self._executor.write(
                RequestDescriptor(
                    "POST",
                    self._url("/v4/me/chats"),
                    headers=self._write_headers(credentials),
                    form={"id": user_id},
                )
            )
            chat_id = (chat or {}).get("id")
            if not chat_id:
                raise ResponseParseException("create chat response is missing id")

        return await self._executor.write(
            RequestDescriptor(
                "POST",
                self._url(f"/v2/me/chats/{chat_id}/messages/text"),
                headers={"Authorization": self._oauth(credentials)},
                json={"packet_id": self._packet_id_factory(), "message": message},
            )
        )

    async def like(self, user_id: str) -> Any:
        if not user_id:
            raise InvalidArgumentException()
        credentials = self._require_session()

        return await self._executor.write(
            RequestDescriptor(
                "POST",
                self._url("/v5/me/favorites"),
                headers=self._write_headers(credentials),
                form={"id": user_id},
            )
        )

    async def pass_(self) -> None:
        """Reserved: the backend has no pass endpoint yet."""
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_session(self) -> Credentials:
        credentials = self._session.credentials
        if credentials is None:
            raise NotAuthorizedException("no session, call authorize first")
        return credentials

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _read_request(self, credentials: Credentials, path: str, params: Mapping[str, Any]) -> RequestDescriptor:
        return RequestDescriptor(
            "GET",
            self._url(path),
            headers={"X-Access-Token": credentials.access_token},
            params=params,
        )

    @staticmethod
    def _oauth(credentials: Credentials) -> str:
        return f'OAuth="{credentials.access_token}"'

    def _write_headers(self, credentials: Credentials) -> dict[str, str]:
        return {"Authorization": self._oauth(credentials), **_FORM_CONTENT_TYPE}
