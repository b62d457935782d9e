"""Response post-processing: text, URL context metadata and source URLs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypedDict

from gemini_search.errors import RedirectResolutionError
from gemini_search.redirect import resolve_redirect

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from gemini_search.options import ResponseOptions

logger = logging.getLogger(__name__)


class ResponseOutput(TypedDict, total=False):
    """Processed output of one generation call."""

    response: str  # Always present; "" when the model returned no text.
    url_context_metadata: Any
    full_response: dict[str, Any]
    restricted_urls: str
    #: Present when source extraction was requested; "" when none was found.
    source_url: str
    redirected_source_url: str
    #: Set only when redirect resolution failed.
    redirect_error: str


def _first_candidate(response: Any) -> dict[str, Any]:
    if not isinstance(response, dict):
        return {}
    candidates = response.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        return candidates[0]
    return {}


def extract_text(response: Any) -> str:
    """Return the first candidate's first text part, or ``""``."""
    try:
        parts = _first_candidate(response).get("content", {}).get("parts", [])
        if parts:
            text = parts[0].get("text", "")
            return text if isinstance(text, str) else ""
    except (AttributeError, IndexError, TypeError):
        pass
    return ""


def extract_source_url(response: Any) -> str:
    """Return the first grounding chunk's web URI if it is an http(s) URL."""
    try:
        chunks = _first_candidate(response).get("groundingMetadata", {}).get(
            "groundingChunks", []
        )
        uri = chunks[0].get("web", {}).get("uri") if chunks else None
    except (AttributeError, IndexError, TypeError):
        return ""
    if isinstance(uri, str) and uri.startswith(("http://", "https://")):
        return uri
    return ""


async def process_response(
    response: dict[str, Any],
    options: ResponseOptions,
    *,
    resolver: Callable[[str], Awaitable[str]] = resolve_redirect,
) -> ResponseOutput:
    """Build a ResponseOutput from a parsed generateContent response.

    Redirect failures are recorded on the output, never raised: the original
    source URL stands in as the redirected value.
    """
    output = ResponseOutput(response=extract_text(response))

    candidate = _first_candidate(response)
    metadata = candidate.get("url_context_metadata")
    if metadata is None:
        metadata = candidate.get("urlContextMetadata")
    if metadata:
        output["url_context_metadata"] = metadata

    if (
        options.include_restricted_urls
        and options.operation == "webSearch"
        and options.restrict_urls
    ):
        output["restricted_urls"] = options.restrict_urls

    if options.extract_source_url:
        source_url = extract_source_url(response)
        output["source_url"] = source_url
        if source_url:
            try:
                output["redirected_source_url"] = await resolver(source_url)
            except RedirectResolutionError as e:
                logger.debug("Keeping unresolved source URL %s: %s", source_url, e)
                output["redirected_source_url"] = source_url
                output["redirect_error"] = str(e)

    if options.include_full_response:
        output["full_response"] = response

    return output
