"""Shared transport-side error helpers.

Transports map raw httpx failures into the APIError family so callers can
branch on type without brittle substring matching.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from gemini_search._http import RETRYABLE_STATUS_CODES
from gemini_search.errors import (
    APIError,
    AuthenticationError,
    BadRequestError,
    NetworkError,
    RateLimitError,
    ServerError,
    _walk_exception_chain,
)

PROVIDER = "gemini"


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def extract_error_message(exc: BaseException) -> str:
    """Prefer the provider's ``error.message`` field over the raw exception text.

    httpx exception text embeds the request URL, which carries the API key as
    a query parameter, so it is never used verbatim.
    """
    for e in _walk_exception_chain(exc):
        response = getattr(e, "response", None)
        if not isinstance(response, httpx.Response):
            continue
        payload: Any = None
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
        reason = response.reason_phrase
        if reason:
            return reason
    if isinstance(exc, httpx.RequestError):
        return type(exc).__name__
    return str(exc)


def _classify(status_code: int | None, cause_message: str) -> type[APIError]:
    cause_lower = cause_message.lower()
    if status_code in {401, 403} or (
        status_code == 400 and ("api key" in cause_lower or "api_key" in cause_lower)
    ):
        return AuthenticationError
    if status_code == 429:
        return RateLimitError
    if isinstance(status_code, int) and 400 <= status_code < 500:
        return BadRequestError
    if isinstance(status_code, int) and status_code >= 500:
        return ServerError
    return APIError


def wrap_transport_error(
    exc: BaseException,
    *,
    phase: str,
    message: str | None = None,
) -> APIError:
    """Map an httpx failure into the APIError family."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped: fill in missing context only.
    if isinstance(exc, APIError):
        if exc.provider is None:
            exc.provider = PROVIDER
        if exc.phase is None:
            exc.phase = phase
        return exc

    msg = message or f"{PROVIDER} {phase} failed"

    for e in _walk_exception_chain(exc):
        if isinstance(e, httpx.RequestError):
            return NetworkError(
                f"{msg}: {type(e).__name__}",
                hint="Check network connectivity and the credential's host.",
                retryable=True,
                provider=PROVIDER,
                phase=phase,
            )

    status_code = extract_status_code(exc)
    cause = extract_error_message(exc)
    err_cls = _classify(status_code, cause)

    hint = None
    if err_cls is AuthenticationError:
        hint = "Check the API key on the geminiSearchApi credential (or GEMINI_API_KEY)."

    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    return err_cls(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=hint,
        retryable=isinstance(status_code, int) and status_code in RETRYABLE_STATUS_CODES,
        status_code=status_code,
        provider=PROVIDER,
        phase=phase,
    )
