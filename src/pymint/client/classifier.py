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
"""Turns a completed HTTP exchange into a payload or a typed failure."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pymint.client.request import TransportResponse
from pymint.kernel.exceptions import (
    NotAuthorizedException,
    ResponseParseException,
    TransientFailureException,
)

AUTHORIZATION_STATUSES = frozenset({401, 410})


def parse_body(body: Any) -> Any:
    """Decode a raw body into JSON data.

    Text and bytes are decoded; an empty body yields ``None``. Anything else
    is assumed to be decoded already.
    """
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResponseParseException(f"response body is not valid UTF-8: {exc}") from exc
    if isinstance(body, str):
        if not body.strip():
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise ResponseParseException(f"response body is not valid JSON: {exc}") from exc
    return body


def classify_response(status_code: int, reason: str, body: Any) -> Any:
    """Classify one response.

    Returns the parsed payload on success. Raises NotAuthorizedException for
    401/410, and TransientFailureException for any other non-2xx status or
    for a 2xx body whose ``error_code`` is non-zero.
    """
    if status_code in AUTHORIZATION_STATUSES:
        raise NotAuthorizedException(code=status_code)

    if not 200 <= status_code < 300:
        raise TransientFailureException(status_code, reason)

    payload = parse_body(body)
    if isinstance(payload, Mapping):
        error_code = payload.get("error_code")
        if error_code:
            raise TransientFailureException(error_code, payload.get("error_message"))

    return payload


def classify(response: TransportResponse) -> Any:
    return classify_response(response.status_code, response.reason, response.body)
