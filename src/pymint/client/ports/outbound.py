"""Outbound port: the transport the request executor sends through."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pymint.client.request import RequestDescriptor, TransportResponse


@runtime_checkable
class TransportPort(Protocol):
    """Sends a request and returns the raw response.

    Implementations raise TransportException when no HTTP response was
    received. HTTP error statuses are returned, not raised.
    """

    async def send(self, request: RequestDescriptor) -> TransportResponse: ...

    async def close(self) -> None: ...
