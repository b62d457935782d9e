"""Gemini REST transport over httpx."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gemini_search._http import (
    API_VERSION,
    GENERATE_CONTENT_METHOD,
    MODEL_NAME_PREFIX,
)
from gemini_search.errors import APIError
from gemini_search.providers._errors import PROVIDER, wrap_transport_error

if TYPE_CHECKING:
    from gemini_search.config import Credentials
    from gemini_search.request import RequestBody

logger = logging.getLogger(__name__)

_MAX_MODEL_PAGES = 20


class _ModelEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    supported_generation_methods: list[str] = Field(
        default_factory=list, alias="supportedGenerationMethods"
    )


class _ModelPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    models: list[_ModelEntry] | None = None
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class GeminiTransport:
    """Google Gemini generateContent / models transport."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_s: float | None = 120.0,
    ) -> None:
        """Create a transport; an injected *client* is not closed by ``aclose``."""
        self._client = client
        self._owns_client = client is None
        self._timeout_s = timeout_s

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy-initialize the shared async client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._client

    async def aclose(self) -> None:
        """Close the client if this transport created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def generate(
        self, model: str, body: RequestBody, credentials: Credentials
    ) -> dict[str, Any]:
        """POST one generateContent request and return the parsed JSON."""
        client = self._get_client()
        url = f"{credentials.host}/{API_VERSION}/models/{model}:generateContent"
        logger.debug("POST %s model=%s", credentials.host, model)

        try:
            response = await client.post(
                url,
                params={"key": credentials.api_key},
                headers={"Content-Type": "application/json"},
                json=body,
            )
            response.raise_for_status()
            payload = response.json()
        except asyncio.CancelledError:
            raise
        except ValueError as e:
            raise APIError(
                "Gemini returned a response that is not JSON",
                provider=PROVIDER,
                phase="generate",
            ) from e
        except Exception as e:
            raise wrap_transport_error(
                e, phase="generate", message="Gemini generate failed"
            ) from e

        if not payload or not isinstance(payload, dict):
            raise APIError(
                "No response from API request",
                provider=PROVIDER,
                phase="generate",
            )
        return payload

    async def list_models(self, credentials: Credentials) -> list[str]:
        """List model ids that support generateContent, without the ``models/`` prefix."""
        client = self._get_client()
        url = f"{credentials.host}/{API_VERSION}/models"
        entries: list[_ModelEntry] = []
        page_token: str | None = None

        for _ in range(_MAX_MODEL_PAGES):
            params = {"key": credentials.api_key}
            if page_token:
                params["pageToken"] = page_token
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
                page = _ModelPage.model_validate(response.json())
            except asyncio.CancelledError:
                raise
            except (ValueError, ValidationError) as e:
                raise APIError(
                    "Gemini returned an unreadable model listing",
                    provider=PROVIDER,
                    phase="list_models",
                ) from e
            except Exception as e:
                raise wrap_transport_error(
                    e, phase="list_models", message="Gemini model listing failed"
                ) from e

            if page.models is None and not entries:
                raise APIError(
                    "No models in API response",
                    provider=PROVIDER,
                    phase="list_models",
                )
            entries.extend(page.models or [])
            page_token = page.next_page_token
            if not page_token:
                break

        return [
            _strip_prefix(entry.name)
            for entry in entries
            if GENERATE_CONTENT_METHOD in entry.supported_generation_methods
        ]


def _strip_prefix(name: str) -> str:
    if name.startswith(MODEL_NAME_PREFIX):
        return name[len(MODEL_NAME_PREFIX) :]
    return name
