"""Transport protocol: minimal interface for the generation API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gemini_search.config import Credentials
    from gemini_search.request import RequestBody


@runtime_checkable
class HttpTransport(Protocol):
    """Minimal transport protocol: generate and list_models."""

    async def generate(
        self, model: str, body: RequestBody, credentials: Credentials
    ) -> dict[str, Any]:
        """POST *body* to the model's generateContent endpoint."""
        ...

    async def list_models(self, credentials: Credentials) -> list[str]:
        """Return ids of models that support content generation."""
        ...
