"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class RelayConfig:
    """Read-only settings shared by the gateway and the command dispatcher."""

    bot_token: str
    root_url: str
    backend_token: str
    dashboard_url: Optional[str] = None
    start_secret: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
