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
"""Immutable request descriptors and the raw transport response."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

HttpMethod = Literal["GET", "POST"]


def _freeze(value: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if value is None:
        return None
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the transport needs to send one request.

    ``form`` is sent url-encoded, ``json`` as a JSON document; at most one
    of them may be set. Query parameters whose value is ``None`` are dropped
    by the transport.
    """

    method: HttpMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    form: Mapping[str, Any] | None = None
    json: Any = None

    def __post_init__(self) -> None:
        if self.form is not None and self.json is not None:
            raise ValueError("RequestDescriptor accepts either form or json, not both")
        object.__setattr__(self, "headers", _freeze(self.headers))
        object.__setattr__(self, "params", _freeze(self.params))
        object.__setattr__(self, "form", _freeze(self.form))

    @property
    def has_body(self) -> bool:
        return self.form is not None or self.json is not None

    def with_method(self, method: HttpMethod) -> RequestDescriptor:
        return dataclasses.replace(self, method=method)


@dataclass(frozen=True)
class TransportResponse:
    """A completed HTTP exchange as seen by the response classifier."""

    status_code: int
    reason: str = ""
    body: str | bytes | Any = b""
