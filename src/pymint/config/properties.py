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
"""Client configuration properties (pymint.client.*)."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field

from pymint.core.config import config_properties


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class _Properties(BaseModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, frozen=True)


@config_properties(prefix="pymint.client.retry")
class RetryProperties(_Properties):
    """Retry policy settings. Durations are in seconds."""

    max_attempts: int = Field(default=2, ge=1)
    interval: float = Field(default=3.0, ge=0)
    timeout: float = Field(default=24.0, gt=0)

    @property
    def interval_delta(self) -> timedelta:
        return timedelta(seconds=self.interval)

    @property
    def timeout_delta(self) -> timedelta:
        return timedelta(seconds=self.timeout)


@config_properties(prefix="pymint.client.circuit-breaker")
class CircuitBreakerProperties(_Properties):
    """Circuit breaker settings. Durations are in seconds."""

    failure_threshold: float = Field(default=80.0, gt=0, le=100)
    window: float = Field(default=60.0, gt=0)
    minimum_calls: int = Field(default=10, ge=1)
    circuit_duration: float = Field(default=3 * 60 * 60.0, gt=0)
    call_timeout: float = Field(default=64.0, gt=0)
    count_authorization_failures: bool = False


@config_properties(prefix="pymint.client")
class ClientProperties(_Properties):
    """Configuration for the Mint API client (pymint.client.*)."""

    base_url: str = "https://api.mint.me"
    user_agent: str = "Mint-Android/1.10.2"
    timeout: float = Field(default=30.0, gt=0)
    retry: RetryProperties = Field(default_factory=RetryProperties)
    circuit_breaker: CircuitBreakerProperties = Field(default_factory=CircuitBreakerProperties)
