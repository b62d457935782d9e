"""Mock transport for testing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gemini_search.config import Credentials
    from gemini_search.request import RequestBody


class MockTransport:
    """Mock transport for running nodes without API calls.

    Echoes the prompt back in the provider's response shape. Search requests
    also carry a grounding chunk pointing at ``source_url`` when one is set.
    """

    def __init__(
        self,
        *,
        source_url: str | None = None,
        models: tuple[str, ...] = ("gemini-2.5-flash", "gemini-2.5-pro"),
    ) -> None:
        self.source_url = source_url
        self.models = models
        self.requests: list[tuple[str, RequestBody]] = []

    async def generate(
        self, model: str, body: RequestBody, credentials: Credentials
    ) -> dict[str, Any]:
        """Return a deterministic mock response."""
        del credentials
        self.requests.append((model, body))
        contents = body.get("contents") or [{}]
        parts = contents[0].get("parts") or [{}]
        prompt = str(parts[0].get("text", ""))

        candidate: dict[str, Any] = {
            "content": {"role": "model", "parts": [{"text": f"echo: {prompt[:100]}"}]},
            "finishReason": "STOP",
        }
        is_search = any("googleSearch" in tool for tool in body.get("tools", []))
        if is_search and self.source_url:
            candidate["groundingMetadata"] = {
                "groundingChunks": [{"web": {"uri": self.source_url, "title": "mock"}}]
            }
        return {"candidates": [candidate], "modelVersion": model}

    async def list_models(self, credentials: Credentials) -> list[str]:
        """Return the configured model ids."""
        del credentials
        return list(self.models)
