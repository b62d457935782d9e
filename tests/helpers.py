"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off transport doubles as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from gemini_search.config import Credentials

GEMINI_MODEL = "gemini-2.5-flash"
TEST_API_KEY = "test-key-123"


def gemini_response(
    text: str = "ok",
    *,
    source_url: str | None = None,
    url_context_metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a generateContent response in the provider's JSON shape."""
    candidate: dict[str, Any] = {
        "content": {"role": "model", "parts": [{"text": text}]},
        "finishReason": "STOP",
    }
    if source_url is not None:
        candidate["groundingMetadata"] = {
            "groundingChunks": [{"web": {"uri": source_url, "title": "example"}}]
        }
    if url_context_metadata is not None:
        candidate["url_context_metadata"] = url_context_metadata
    return {"candidates": [candidate]}


@dataclass
class FakeTransport:
    """HttpTransport double for pipeline behavior verification.

    Captures generate() calls and answers from ``script`` in call order,
    raising any exception found there. With an empty script it echoes the
    prompt back.
    """

    script: list[dict[str, Any] | BaseException] = field(default_factory=list)
    models: list[str] = field(default_factory=lambda: [GEMINI_MODEL])
    delay_s: float = 0.0
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    list_calls: int = 0

    async def generate(
        self, model: str, body: dict[str, Any], credentials: Credentials
    ) -> dict[str, Any]:
        del credentials
        self.calls.append((model, body))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if not self.script:
            prompt = body["contents"][0]["parts"][0]["text"]
            return gemini_response(f"ok:{prompt}")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def list_models(self, credentials: Credentials) -> list[str]:
        del credentials
        self.list_calls += 1
        return list(self.models)


@dataclass
class RecordingResolver:
    """Redirect resolver double that maps URLs through a dict."""

    targets: dict[str, str] = field(default_factory=dict)
    error: BaseException | None = None
    calls: list[str] = field(default_factory=list)

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.targets.get(url, url)

