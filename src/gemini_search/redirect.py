"""Redirect resolution for grounding source URLs.

Grounding chunks point at provider redirect links rather than the page that
was consulted. A HEAD request with redirect following reveals the final
destination without downloading the body.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from gemini_search._http import BROWSER_USER_AGENT, REDIRECT_MAX_HOPS, REDIRECT_TIMEOUT_S
from gemini_search.errors import RedirectResolutionError

logger = logging.getLogger(__name__)


async def resolve_redirect(url: str, *, client: httpx.AsyncClient | None = None) -> str:
    """Return the final destination of *url* after following redirects.

    Any HTTP status counts as a completed response. Only transport failures
    (timeout, DNS, refused connection, too many hops) raise
    ``RedirectResolutionError``.

    Args:
        url: The URL to resolve. Empty input returns ``""`` without a request.
        client: Optional shared client. Its own ``max_redirects`` applies.
    """
    if not url:
        return ""

    try:
        if client is None:
            async with httpx.AsyncClient(max_redirects=REDIRECT_MAX_HOPS) as owned:
                response = await _head(owned, url)
        else:
            response = await _head(client, url)
    except asyncio.CancelledError:
        raise
    except (asyncio.TimeoutError, TimeoutError) as e:
        message = f"Timed out after {REDIRECT_TIMEOUT_S:g}s resolving {url}"
        logger.warning("Error fetching redirected URL %s: %s", url, message)
        raise RedirectResolutionError(url, message) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        message = str(e) or type(e).__name__
        logger.warning("Error fetching redirected URL %s: %s", url, message)
        raise RedirectResolutionError(url, message) from e

    return _final_url(response, url)


async def _head(client: httpx.AsyncClient, url: str) -> httpx.Response:
    return await asyncio.wait_for(
        client.head(
            url,
            follow_redirects=True,
            timeout=REDIRECT_TIMEOUT_S,
            headers={"User-Agent": BROWSER_USER_AGENT},
        ),
        timeout=REDIRECT_TIMEOUT_S,
    )


def _final_url(response: httpx.Response, original: str) -> str:
    """Pick the final URL: followed destination, then Location, then *original*."""
    if response.history:
        return str(response.url)
    location = response.headers.get("location")
    if location:
        return str(response.url.join(location))
    return original
