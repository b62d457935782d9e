"""Shared node execution: credentials, batching and item pairing."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from gemini_search.config import (
    CREDENTIAL_TYPE,
    CredentialsProvider,
    EnvCredentialsProvider,
    require_credentials,
)
from gemini_search.errors import ParameterError
from gemini_search.execute import execute_request, run_batch
from gemini_search.host import _MISSING
from gemini_search.options import BatchSettings, NodeOptions
from gemini_search.providers.gemini import GeminiTransport
from gemini_search.redirect import resolve_redirect

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from gemini_search.host import NodeItem, ParameterReader
    from gemini_search.nodes.properties import NodeDescription
    from gemini_search.options import RequestOptions, ResponseOptions
    from gemini_search.providers.base import HttpTransport
    from gemini_search.response import ResponseOutput

logger = logging.getLogger(__name__)

# Output keys copied only when the processed value is non-empty.
_OPTIONAL_KEYS = (
    "url_context_metadata",
    "restricted_urls",
    "source_url",
    "redirected_source_url",
    "redirect_error",
)


@dataclass(frozen=True)
class ItemPlan:
    """Everything one item's pipeline needs, read up front."""

    request: RequestOptions
    response: ResponseOptions
    #: Extra fields echoed into the node's output record.
    echo: dict[str, Any] = field(default_factory=dict)


class GeminiNode:
    """Base for node types backed by the Gemini generateContent pipeline."""

    description: ClassVar[NodeDescription]

    def __init__(
        self,
        *,
        transport: HttpTransport | None = None,
        credentials: CredentialsProvider | None = None,
        resolver: Callable[[str], Awaitable[str]] = resolve_redirect,
    ) -> None:
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else GeminiTransport()
        self.credentials = credentials or EnvCredentialsProvider()
        self.resolver = resolver

    async def aclose(self) -> None:
        """Close the transport if this node created it.

        An owned transport reopens lazily on its next call.
        """
        aclose = getattr(self.transport, "aclose", None)
        if self._owns_transport and callable(aclose):
            try:
                await aclose()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("Transport cleanup failed: %s", exc)

    async def load_models(self) -> list[dict[str, str]]:
        """Options for the model selector, one per generateContent model."""
        creds = await require_credentials(self.credentials, CREDENTIAL_TYPE)
        try:
            models = await self.transport.list_models(creds)
        finally:
            await self.aclose()
        return [{"name": model, "value": model} for model in models]

    async def execute(
        self,
        items: Sequence[Any],
        params: ParameterReader,
        *,
        continue_on_fail: bool = False,
    ) -> list[NodeItem]:
        """Process every input item and return one output item per input.

        With *continue_on_fail*, a failing item yields ``{"error": message}``
        at its index; otherwise the lowest-index failure is raised.
        """
        count = len(items)
        try:
            records = await run_batch(
                count,
                lambda i: self.read_item(params, i),
                self._run_item,
                batching=self._batch_settings(params, count),
                continue_on_fail=continue_on_fail,
            )
        finally:
            # Owned clients are bound to the running loop.
            await self.aclose()
        return [{"json": record, "paired_item": i} for i, record in enumerate(records)]

    async def _run_item(self, index: int, plan: ItemPlan) -> dict[str, Any]:
        creds = await require_credentials(self.credentials, CREDENTIAL_TYPE)
        logger.debug(
            "Item %d: %s model=%s", index, plan.request.operation, plan.request.model
        )
        output = await execute_request(
            plan.request,
            plan.response,
            transport=self.transport,
            credentials=creds,
            resolver=self.resolver,
        )
        return self.shape_output(plan, output)

    def _batch_settings(self, params: ParameterReader, count: int) -> BatchSettings:
        if count == 0:
            return BatchSettings()
        try:
            raw = params.get_node_parameter("options", 0, {})
            return NodeOptions.parse(raw, item_index=0).batch_settings()
        except Exception as e:
            # Item 0's own read reports this failure.
            logger.debug("Batching options unreadable, not throttling: %s", e)
            return BatchSettings()

    def read_item(self, params: ParameterReader, index: int) -> ItemPlan:
        """Read and validate item *index*'s parameters."""
        raise NotImplementedError

    def shape_output(self, plan: ItemPlan, output: ResponseOutput) -> dict[str, Any]:
        """Map the processed response onto this node's output record."""
        raise NotImplementedError


def copy_optional(output: ResponseOutput, record: dict[str, Any]) -> dict[str, Any]:
    """Copy the non-empty optional response fields onto *record*."""
    for key in _OPTIONAL_KEYS:
        value = output.get(key)
        if value:
            record[key] = value
    return record


def read_text(
    params: ParameterReader, name: str, index: int, default: Any = _MISSING
) -> str:
    """Read a string parameter; ``None`` reads as ``""``.

    Without *default*, a missing parameter raises ``ParameterError``.
    """
    value = (
        params.get_node_parameter(name, index)
        if default is _MISSING
        else params.get_node_parameter(name, index, default)
    )
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParameterError(
            f'Parameter "{name}" must be a string, got {type(value).__name__}',
            parameter=name,
            item_index=index,
        )
    return value


def read_flag(params: ParameterReader, name: str, index: int) -> bool:
    return bool(params.get_node_parameter(name, index, False))
