"""Exception hierarchy for gemini-search."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class GeminiSearchError(Exception):
    """Base exception for all gemini-search errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(GeminiSearchError):
    """Configuration validation or resolution failed."""


class CredentialsMissingError(ConfigurationError):
    """No credentials were available for the node."""


class ParameterError(GeminiSearchError):
    """Reading or validating a node parameter failed for one item."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        parameter: str | None = None,
        item_index: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.parameter = parameter
        self.item_index = item_index


class APIError(GeminiSearchError):
    """Generation or model-listing call failed.

    Transports classify failures into the subclasses below so callers can
    branch on type instead of parsing messages.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        provider: str | None = None,
        phase: str | None = None,
        item_index: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.provider = provider
        self.phase = phase
        self.item_index = item_index


class AuthenticationError(APIError):
    """The API key was rejected (HTTP 401/403, or 400 naming the key)."""


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class BadRequestError(APIError):
    """The provider rejected the request body (other HTTP 4xx)."""


class ServerError(APIError):
    """The provider failed to handle the request (HTTP 5xx)."""


class NetworkError(APIError):
    """Transport-level failure: timeout, DNS, refused connection."""


class RedirectResolutionError(GeminiSearchError):
    """Following a source URL's redirects failed at the network level.

    Never escalated past response processing: the caller keeps the original
    URL and records the message.
    """

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
