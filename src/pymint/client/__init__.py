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
"""pymint client: resilient request execution with circuit breaker and retry."""

from pymint.client.adapters.httpx_adapter import HttpxTransport
from pymint.client.circuit_breaker import CircuitBreaker, CircuitState, CircuitStats
from pymint.client.classifier import classify, classify_response
from pymint.client.executor import RequestExecutor, RequestExecutorBuilder
from pymint.client.ports.outbound import TransportPort
from pymint.client.request import RequestDescriptor, TransportResponse
from pymint.client.retry import RetryPolicy, is_retryable

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "CircuitStats",
    "HttpxTransport",
    "RequestDescriptor",
    "RequestExecutor",
    "RequestExecutorBuilder",
    "RetryPolicy",
    "TransportPort",
    "TransportResponse",
    "classify",
    "classify_response",
    "is_retryable",
]
