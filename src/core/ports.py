"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the backend and chat reply adapters so
that the core can be reused with different transports.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from core.models import InboundMessage


class GatewayError(RuntimeError):
    """A backend call failed (network, HTTP status or response body)."""


class BackendPort(Protocol):
    """Blocking request/response calls to the backend of record."""

    def post(self, path: str, payload: Mapping[str, Any]) -> Any:
        ...

    def get(self, path: str) -> Any:
        ...


class ReplyPort(Protocol):
    """Outbound chat messages. Delivery failures are not surfaced."""

    async def reply(self, message: InboundMessage, text: str, markdown: bool = False) -> None:
        ...

    async def send_direct(self, user_id: int, text: str) -> None:
        ...
