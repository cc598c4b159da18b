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
"""Unified exception hierarchy for pymint.

Every failure a Mint API call can end in is one of these types, so callers
can catch MintException for everything or a subclass for targeted handling.

Categories:
- BusinessException: caller mistakes and unreadable payloads
- SecurityException: credentials rejected or missing
- InfrastructureException: backend, transport and breaker failures
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Base Exception
# =============================================================================


class MintException(Exception):
    """Base exception for all pymint errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (HTTP status or backend error code).
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: Any = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(MintException):
    """Errors caused by the request or the payload rather than the backend's health."""


class InvalidArgumentException(BusinessException):
    """A caller-supplied argument is missing or malformed.

    Raised before any network call is made.
    """

    def __init__(self, message: str = "invalid arguments", context: dict | None = None) -> None:
        super().__init__(message, code="INVALID_ARGUMENT", context=context)


class ResponseParseException(BusinessException):
    """A response body could not be decoded into the expected structure."""


# =============================================================================
# Security Exceptions
# =============================================================================


class SecurityException(MintException):
    """Authentication and authorization errors."""


class NotAuthorizedException(SecurityException):
    """Credentials were rejected by the backend or no session exists.

    Never retried: re-sending rejected credentials cannot succeed. Run the
    authorize flow again instead.
    """

    def __init__(self, message: str = "not authorized", code: Any = None) -> None:
        super().__init__(message, code=code)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(MintException):
    """Backend, network and resilience-layer failures."""


class TransientFailureException(InfrastructureException):
    """The backend answered with an error that may clear up on retry.

    Carries either the HTTP status and reason phrase, or the application
    error code and message from the backend's error envelope.
    """

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message or ""
        super().__init__(f"{status_code} {self.message}".rstrip(), code=status_code)


class TransportException(InfrastructureException):
    """The request never produced an HTTP response (connect, read, TLS errors)."""


class CircuitOpenException(InfrastructureException):
    """Circuit breaker is open, call rejected without reaching the transport."""


class OperationTimeoutException(InfrastructureException):
    """Operation exceeded its allowed time limit."""
