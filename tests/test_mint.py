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
"""Tests for the Mint API operations."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from pymint.client.circuit_breaker import CircuitBreaker
from pymint.client.executor import RequestExecutor
from pymint.client.retry import RetryPolicy
from pymint.core.config import Config
from pymint.kernel.exceptions import (
    InvalidArgumentException,
    NotAuthorizedException,
    ResponseParseException,
    TransientFailureException,
)
from pymint.mint import DEFAULT_PACKET_ID, MintClient, merge_by_key
from pymint.testing import StubTransport

BASE = "https://api.mint.me"
OAUTH_BODY = {"access_token": "mint-token", "user_id": "user-1", "error_code": 0}


@pytest.fixture
def transport():
    return StubTransport()


@pytest.fixture
def mint(transport):
    executor = RequestExecutor(
        transport=transport,
        breaker=CircuitBreaker(),
        retry_policy=RetryPolicy(max_attempts=2, interval=timedelta(0)),
    )
    return MintClient(executor=executor)


@pytest.fixture
def authorized(mint):
    mint.session.update("my-access-token", "user-1")
    return mint


class TestMergeByKey:
    def test_first_occurrence_wins(self):
        first = [{"id": 1}, {"id": 2, "source": "nearby"}]
        second = [{"id": 2, "source": "active"}, {"id": 3}]
        assert merge_by_key(first, second) == [{"id": 1}, {"id": 2, "source": "nearby"}, {"id": 3}]

    def test_keeps_concatenated_order(self):
        assert merge_by_key([{"id": "b"}, {"id": "a"}], [{"id": "c"}, {"id": "a"}, {"id": "d"}]) == [
            {"id": "b"},
            {"id": "a"},
            {"id": "c"},
            {"id": "d"},
        ]

    def test_empty_lists(self):
        assert merge_by_key([], []) == []
        assert merge_by_key([], [{"id": 1}]) == [{"id": 1}]

    def test_custom_key(self):
        assert merge_by_key([{"uid": 1}], [{"uid": 1}, {"uid": 2}], key="uid") == [{"uid": 1}, {"uid": 2}]


class TestAuthorize:
    @pytest.mark.asyncio
    async def test_posts_facebook_token(self, mint, transport):
        transport.respond("POST", f"{BASE}/v1/oauth", 200, OAUTH_BODY)
        await mint.authorize("my-facebook-access-token")

        request = transport.calls_to("POST", f"{BASE}/v1/oauth")[0]
        assert request.form == {"oauth_provider": "fb", "oauth_token": "my-facebook-access-token"}
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_sets_session(self, mint, transport):
        transport.respond("POST", f"{BASE}/v1/oauth", 200, OAUTH_BODY)
        data = await mint.authorize("my-facebook-access-token")

        assert data["access_token"] == "mint-token"
        assert mint.session.access_token == "mint-token"
        assert mint.session.user_id == "user-1"

    @pytest.mark.asyncio
    async def test_twice_yields_same_session(self, mint, transport):
        transport.respond("POST", f"{BASE}/v1/oauth", 200, OAUTH_BODY)
        await mint.authorize("fb-token")
        first = mint.session.credentials
        await mint.authorize("fb-token")
        assert mint.session.credentials == first

    @pytest.mark.asyncio
    async def test_missing_token_is_invalid(self, mint, transport):
        with pytest.raises(InvalidArgumentException, match="invalid arguments"):
            await mint.authorize(None)
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_rejection_keeps_previous_session(self, authorized, transport):
        transport.respond("POST", f"{BASE}/v1/oauth", 401, reason="Unauthorized")
        with pytest.raises(NotAuthorizedException):
            await authorized.authorize("expired-fb-token")
        assert transport.call_count == 1
        assert authorized.session.access_token == "my-access-token"

    @pytest.mark.asyncio
    async def test_incomplete_payload(self, mint, transport):
        transport.respond("POST", f"{BASE}/v1/oauth", 200, {"access_token": "mint-token"})
        with pytest.raises(ResponseParseException):
            await mint.authorize("fb-token")
        assert not mint.session.is_authenticated


class TestGetRecommendations:
    @pytest.mark.asyncio
    async def test_merges_nearby_and_active(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/me/nearby", 200, {"data": [{"id": 1}, {"id": 2, "from": "nearby"}]})
        transport.respond("GET", f"{BASE}/v3/me/nearby?active", 200, {"data": [{"id": 2, "from": "active"}, {"id": 3}]})

        people = await authorized.get_recommendations(38.72, -9.14)

        assert people == [{"id": 1}, {"id": 2, "from": "nearby"}, {"id": 3}]
        request = transport.calls_to("GET", f"{BASE}/v3/me/nearby")[0]
        assert request.headers["X-Access-Token"] == "my-access-token"
        assert request.params["lat"] == 38.72
        assert request.params["lng"] == -9.14

    @pytest.mark.asyncio
    async def test_zero_coordinates_are_valid(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/me/nearby", 200, {"data": []})
        transport.respond("GET", f"{BASE}/v3/me/nearby?active", 200, {"data": []})
        assert await authorized.get_recommendations(0, 0) == []

    @pytest.mark.asyncio
    async def test_fails_when_either_list_fails(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/me/nearby", 200, {"data": [{"id": 1}]})
        transport.respond("GET", f"{BASE}/v3/me/nearby?active", 500, reason="Internal Server Error")
        with pytest.raises(TransientFailureException):
            await authorized.get_recommendations(38.72, -9.14)

    @pytest.mark.asyncio
    async def test_failure_stops_the_other_list(self, transport):
        executor = RequestExecutor(
            transport=transport,
            breaker=CircuitBreaker(),
            retry_policy=RetryPolicy(max_attempts=3, interval=timedelta(seconds=0.2)),
        )
        mint = MintClient(executor=executor)
        mint.session.update("my-access-token", "user-1")
        transport.respond("GET", f"{BASE}/v3/me/nearby", 401)
        transport.respond("GET", f"{BASE}/v3/me/nearby?active", 500, reason="Internal Server Error")

        with pytest.raises(NotAuthorizedException):
            await mint.get_recommendations(38.72, -9.14)
        calls = transport.call_count
        await asyncio.sleep(0.5)

        assert transport.call_count == calls
        assert executor.circuit_breaker.stats.failures == 0

    @pytest.mark.asyncio
    async def test_non_object_payload(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/me/nearby", 200, [{"id": 1}])
        transport.respond("GET", f"{BASE}/v3/me/nearby?active", 200, {"data": []})
        with pytest.raises(ResponseParseException):
            await authorized.get_recommendations(38.72, -9.14)

    @pytest.mark.asyncio
    async def test_missing_coordinates(self, authorized, transport):
        with pytest.raises(InvalidArgumentException):
            await authorized.get_recommendations(None, -9.14)
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_requires_session(self, mint, transport):
        with pytest.raises(NotAuthorizedException):
            await mint.get_recommendations(38.72, -9.14)
        assert transport.call_count == 0


class TestGetAccount:
    @pytest.mark.asyncio
    async def test_returns_account(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v5/me", 200, {"id": "user-1", "name": "Ana"})
        assert await authorized.get_account() == {"id": "user-1", "name": "Ana"}

    @pytest.mark.asyncio
    async def test_without_session_never_calls_transport(self, mint, transport):
        with pytest.raises(NotAuthorizedException):
            await mint.get_account()
        assert transport.call_count == 0


class TestGetUser:
    @pytest.mark.asyncio
    async def test_returns_first_profile(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/profiles", 200, {"data": [{"id": "u2"}]})
        assert await authorized.get_user("u2") == {"id": "u2"}
        assert transport.requests[0].params["ids"] == "u2"

    @pytest.mark.asyncio
    async def test_returns_none_when_empty(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/profiles", 200, {"data": []})
        assert await authorized.get_user("u2") is None

    @pytest.mark.asyncio
    async def test_non_object_payload(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v3/profiles", 200, [{"id": "u2"}])
        with pytest.raises(ResponseParseException):
            await authorized.get_user("u2")

    @pytest.mark.asyncio
    async def test_missing_user_id(self, authorized, transport):
        with pytest.raises(InvalidArgumentException):
            await authorized.get_user("")
        assert transport.call_count == 0


class TestGetUpdates:
    @pytest.mark.asyncio
    async def test_sends_epoch_millis(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v5/me/sync", 200, {"matches": []})
        since = datetime(2017, 1, 1, tzinfo=timezone.utc)
        await authorized.get_updates(since)
        assert transport.requests[0].params["t"] == 1483228800000

    @pytest.mark.asyncio
    async def test_without_date(self, authorized, transport):
        transport.respond("GET", f"{BASE}/v5/me/sync", 200, {"matches": []})
        assert await authorized.get_updates() == {"matches": []}
        assert transport.requests[0].params["t"] is None

    @pytest.mark.asyncio
    async def test_non_date_is_invalid(self, authorized, transport):
        with pytest.raises(InvalidArgumentException):
            await authorized.get_updates("yesterday")
        assert transport.call_count == 0


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_creates_chat_then_sends(self, authorized, transport):
        transport.respond("POST", f"{BASE}/v4/me/chats", 200, {"id": "chat-9"})
        transport.respond("POST", f"{BASE}/v2/me/chats/chat-9/messages/text", 200, {"delivered": True})

        result = await authorized.send_message("user-2", None, "hi")

        assert result == {"delivered": True}
        assert [r.url for r in transport.requests] == [
            f"{BASE}/v4/me/chats",
            f"{BASE}/v2/me/chats/chat-9/messages/text",
        ]
        create, send = transport.requests
        assert create.form == {"id": "user-2"}
        assert create.headers["Authorization"] == 'OAuth="my-access-token"'
        assert send.json == {"packet_id": DEFAULT_PACKET_ID, "message": "hi"}

    @pytest.mark.asyncio
    async def test_existing_chat_skips_creation(self, authorized, transport):
        transport.respond("POST", f"{BASE}/v2/me/chats/chat-1/messages/text", 200, {"delivered": True})
        await authorized.send_message(None, "chat-1", "hello")
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_uses_packet_id_factory(self, transport):
        executor = RequestExecutor(transport=transport, retry_policy=RetryPolicy(interval=timedelta(0)))
        mint = MintClient(executor=executor, packet_id_factory=lambda: 7)
        mint.session.update("token", "user-1")
        transport.respond("POST", f"{BASE}/v2/me/chats/chat-1/messages/text", 200, {})
        await mint.send_message(None, "chat-1", "hello")
        assert transport.requests[0].json["packet_id"] == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user_id, chat_id, message",
        [(None, None, "hi"), ("user-2", None, ""), ("user-2", "chat-1", None)],
    )
    async def test_invalid_arguments(self, authorized, transport, user_id, chat_id, message):
        with pytest.raises(InvalidArgumentException):
            await authorized.send_message(user_id, chat_id, message)
        assert transport.call_count == 0


class TestLikeAndPass:
    @pytest.mark.asyncio
    async def test_like_posts_favorite(self, authorized, transport):
        transport.respond("POST", f"{BASE}/v5/me/favorites", 200, {"match": False})
        assert await authorized.like("user-2") == {"match": False}
        request = transport.requests[0]
        assert request.form == {"id": "user-2"}
        assert request.headers["Authorization"] == 'OAuth="my-access-token"'

    @pytest.mark.asyncio
    async def test_like_requires_session(self, mint, transport):
        with pytest.raises(NotAuthorizedException):
            await mint.like("user-2")
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_pass_is_a_no_op(self, mint, transport):
        assert await mint.pass_() is None
        assert transport.call_count == 0


class TestSessionConsistency:
    @pytest.mark.asyncio
    async def test_in_flight_call_keeps_its_token(self, authorized, transport):
        gate = asyncio.Event()
        original_send = transport.send

        async def slow_send(request):
            await gate.wait()
            return await original_send(request)

        transport.send = slow_send
        transport.respond("GET", f"{BASE}/v5/me", 200, {"id": "user-1"})
        transport.respond("POST", f"{BASE}/v1/oauth", 200, OAUTH_BODY)

        account = asyncio.create_task(authorized.get_account())
        await asyncio.sleep(0)
        authorize = asyncio.create_task(authorized.authorize("fb-token"))
        gate.set()
        await asyncio.gather(account, authorize)

        account_request = transport.calls_to("GET", f"{BASE}/v5/me")[0]
        assert account_request.headers["X-Access-Token"] == "my-access-token"
        assert authorized.session.access_token == "mint-token"


class TestFromConfig:
    @pytest.mark.asyncio
    async def test_builds_from_config(self, transport):
        config = Config(
            {"pymint": {"client": {"base-url": "https://staging.mint.me", "retry": {"max-attempts": 1}}}}
        )
        async with MintClient.from_config(config, transport=transport) as mint:
            mint.session.update("token", "user-1")
            transport.respond("GET", "https://staging.mint.me/v5/me", 500)
            with pytest.raises(TransientFailureException):
                await mint.get_account()
            assert transport.call_count == 1
        assert transport.closed

    def test_configures_logging_port(self, transport):
        configured: list[Config] = []

        class RecordingLoggingPort:
            def configure(self, config):
                configured.append(config)

            def get_logger(self, name):
                return None

            def set_level(self, name, level):
                pass

        config = Config({})
        MintClient.from_config(config, logging_port=RecordingLoggingPort(), transport=transport)
        assert configured == [config]
