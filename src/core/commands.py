"""Slash-command parsing (core domain)."""

from __future__ import annotations

import re
from typing import Optional

from core.models import ParsedCommand

_COMMAND_RE = re.compile(r"/([a-z_]+)(?: (.*))?", re.IGNORECASE | re.DOTALL)


def parse_command(text: str) -> Optional[ParsedCommand]:
    """Return the command carried by ``text``, if any.

    The whole text must look like ``/<name>`` or ``/<name> <arguments>``.
    Names are letters and underscores and come back lowercased; arguments are
    everything after the first space, untouched.
    """

    match = _COMMAND_RE.fullmatch(text or "")
    if match is None:
        return None
    return ParsedCommand(name=match.group(1).lower(), arguments=match.group(2) or "")
