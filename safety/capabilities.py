"""Detection of host-only (browser) APIs in a fragment."""

from __future__ import annotations

import re

HOST_API_PATTERNS: dict[str, re.Pattern[str]] = {
    "fetch": re.compile(r"(?<![\w$.])fetch\s*\("),
    "window": re.compile(r"(?<![\w$.])window\s*[.\[]"),
    "document": re.compile(r"(?<![\w$.])document\s*[.\[]"),
    "localStorage": re.compile(r"(?<![\w$.])localStorage\s*[.\[]"),
    "sessionStorage": re.compile(r"(?<![\w$.])sessionStorage\s*[.\[]"),
    "navigator": re.compile(r"(?<![\w$.])navigator\s*[.\[]"),
    "location": re.compile(r"(?<![\w$.])location\s*[.\[]"),
}


def host_api_references(source_text: str) -> list[str]:
    """Return the sorted names of host-only APIs referenced by the fragment."""
    text = source_text or ""
    return sorted(name for name, pattern in HOST_API_PATTERNS.items() if pattern.search(text))


def references_host_apis(source_text: str) -> bool:
    text = source_text or ""
    return any(pattern.search(text) for pattern in HOST_API_PATTERNS.values())
