"""Small HTTP-related constants shared across gemini-search.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

DEFAULT_HOST = "https://generativelanguage.googleapis.com"
API_VERSION = "v1beta"
MODEL_NAME_PREFIX = "models/"
GENERATE_CONTENT_METHOD = "generateContent"

# Redirect resolution limits for grounding source URLs.
REDIRECT_MAX_HOPS = 10
REDIRECT_TIMEOUT_S = 5.0
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Status codes a host-level retry could reasonably repeat.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})
