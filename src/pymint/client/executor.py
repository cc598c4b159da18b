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
"""Request executor: circuit breaker around retry around transport + classifier."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from pymint.client.adapters.httpx_adapter import HttpxTransport
from pymint.client.circuit_breaker import CircuitBreaker
from pymint.client.classifier import classify
from pymint.client.ports.outbound import TransportPort
from pymint.client.request import RequestDescriptor
from pymint.client.retry import RetryPolicy
from pymint.config.properties import ClientProperties
from pymint.kernel.exceptions import InvalidArgumentException


class RequestExecutor:
    """Single call path for every network-bound Mint operation.

    Each call goes through the circuit breaker, which wraps the retry
    policy, which wraps one transport send followed by classification. The
    payload or exception of the last attempt is returned unchanged.

        executor = (RequestExecutor.builder()
            .user_agent("Mint-Android/1.10.2")
            .retry(max_attempts=2, interval=timedelta(seconds=3))
            .circuit_breaker(failure_threshold=80)
            .build())

        account = await executor.read(RequestDescriptor("GET", url, headers=headers))
    """

    def __init__(
        self,
        transport: TransportPort,
        breaker: CircuitBreaker | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._transport = transport
        self._breaker = breaker or CircuitBreaker()
        self._retry = retry_policy or RetryPolicy()

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def read(self, request: RequestDescriptor) -> Any:
        """Send the request as a GET. Bodies are not allowed."""
        if request.has_body:
            raise InvalidArgumentException("read requests cannot carry a body")
        return await self._execute(request.with_method("GET"))

    async def write(self, request: RequestDescriptor) -> Any:
        """Send the request as a POST with its body."""
        return await self._execute(request.with_method("POST"))

    async def _execute(self, request: RequestDescriptor) -> Any:
        async def attempt() -> Any:
            response = await self._transport.send(request)
            return classify(response)

        async def with_retry() -> Any:
            return await self._retry.execute(attempt)

        return await self._breaker.call(with_retry)

    async def close(self) -> None:
        await self._transport.close()

    @staticmethod
    def builder() -> RequestExecutorBuilder:
        return RequestExecutorBuilder()

    @classmethod
    def from_properties(
        cls,
        properties: ClientProperties,
        transport: TransportPort | None = None,
    ) -> RequestExecutor:
        """Build an executor whose retry, breaker and transport follow the given properties."""
        retry = properties.retry
        breaker = properties.circuit_breaker
        return (
            cls.builder()
            .user_agent(properties.user_agent)
            .timeout(timedelta(seconds=properties.timeout))
            .retry(
                max_attempts=retry.max_attempts,
                interval=retry.interval_delta,
                timeout=retry.timeout_delta,
            )
            .circuit_breaker(
                failure_threshold=breaker.failure_threshold,
                window=timedelta(seconds=breaker.window),
                minimum_calls=breaker.minimum_calls,
                circuit_duration=timedelta(seconds=breaker.circuit_duration),
                call_timeout=timedelta(seconds=breaker.call_timeout),
                count_authorization_failures=breaker.count_authorization_failures,
            )
            .transport(transport)
            .build()
        )


class RequestExecutorBuilder:
    """Fluent builder for RequestExecutor."""

    def __init__(self) -> None:
        self._user_agent = "Mint-Android/1.10.2"
        self._timeout = timedelta(seconds=30)
        self._headers: dict[str, str] = {}
        self._breaker: CircuitBreaker | None = None
        self._retry: RetryPolicy | None = None
        self._transport: TransportPort | None = None

    def user_agent(self, user_agent: str) -> RequestExecutorBuilder:
        self._user_agent = user_agent
        return self

    def timeout(self, timeout: timedelta) -> RequestExecutorBuilder:
        """Set the per-request transport timeout."""
        self._timeout = timeout
        return self

    def header(self, name: str, value: str) -> RequestExecutorBuilder:
        """Add a header sent with every request."""
        self._headers[name] = value
        return self

    def circuit_breaker(self, **kwargs: Any) -> RequestExecutorBuilder:
        """Configure the circuit breaker; keyword arguments go to CircuitBreaker."""
        self._breaker = CircuitBreaker(**kwargs)
        return self

    def retry(self, **kwargs: Any) -> RequestExecutorBuilder:
        """Configure the retry policy; keyword arguments go to RetryPolicy."""
        self._retry = RetryPolicy(**kwargs)
        return self

    def transport(self, transport: TransportPort | None) -> RequestExecutorBuilder:
        """Use a ready-made transport instead of the default httpx one."""
        self._transport = transport
        return self

    def build(self) -> RequestExecutor:
        transport = self._transport
        if transport is None:
            transport = HttpxTransport(
                user_agent=self._user_agent,
                timeout=self._timeout,
                headers=self._headers,
            )
        return RequestExecutor(transport=transport, breaker=self._breaker, retry_policy=self._retry)
