"""Sanitization of diagnostic messages before they are shown to a caller."""

from __future__ import annotations

import re

MAX_MESSAGE_LENGTH = 500
TRUNCATION_MARKER = "..."
PATH_TOKEN = "[path]"

_WINDOWS_PATH = re.compile(r"[A-Za-z]:[\\/][^\s:]+")
_UNIX_PATH = re.compile(r"/[^\s:]+/[^\s:]+")


def sanitize(message: str) -> str:
    """Replace filesystem paths with ``[path]`` and bound the message length."""
    sanitized = _WINDOWS_PATH.sub(PATH_TOKEN, message)
    sanitized = _UNIX_PATH.sub(PATH_TOKEN, sanitized)

    if len(sanitized) > MAX_MESSAGE_LENGTH:
        keep = MAX_MESSAGE_LENGTH - len(TRUNCATION_MARKER)
        sanitized = sanitized[:keep] + TRUNCATION_MARKER
    return sanitized
