"""Typed option records for request building, response shaping and batching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gemini_search.errors import ConfigurationError, ParameterError

Operation = Literal["webSearch", "generateContent"]
#: Where URL restriction text goes: appended to the user query, or to the
#: system instruction. Each node type fixes one strategy.
UrlStrategy = Literal["query", "instruction"]

OPERATIONS: tuple[Operation, ...] = ("webSearch", "generateContent")
DEFAULT_MAX_OUTPUT_TOKENS = 8192
DEFAULT_TEMPERATURE = 0.6


@dataclass(frozen=True)
class RequestOptions:
    """Flat inputs for one generation request."""

    model: str
    prompt: str
    operation: Operation = "webSearch"
    system_instruction: str | None = None
    organization: str | None = None
    #: Comma-separated list; blank entries are ignored.
    restrict_urls: str | None = None
    enable_url_context: bool = False
    #: Explicit ``0`` is kept; only ``None`` falls back to the default.
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    url_strategy: UrlStrategy = "query"

    def __post_init__(self) -> None:
        """Reject unknown operation and strategy tags early."""
        if self.operation not in OPERATIONS:
            raise ConfigurationError(
                f"Unknown operation: {self.operation!r}",
                hint="Supported operations: 'webSearch', 'generateContent'",
            )
        if self.url_strategy not in ("query", "instruction"):
            raise ConfigurationError(
                f"Unknown url_strategy: {self.url_strategy!r}",
                hint="Use url_strategy='query' or url_strategy='instruction'.",
            )


@dataclass(frozen=True)
class ResponseOptions:
    """Post-processing switches for one response."""

    extract_source_url: bool = False
    include_full_response: bool = False
    include_restricted_urls: bool = False
    restrict_urls: str | None = None
    operation: Operation | None = None


@dataclass(frozen=True)
class BatchSettings:
    """Burst throttling for a batch of items.

    Items launch in bursts of ``batch_size`` separated by ``batch_interval_ms``.
    A size of ``0`` behaves as ``1``; ``-1`` disables throttling; an interval
    of ``0`` disables it too.
    """

    batch_size: int = 1
    batch_interval_ms: float = 0

    def __post_init__(self) -> None:
        """Validate ranges the host UI normally enforces."""
        if self.batch_size < -1:
            raise ConfigurationError(
                f"batch_size must be ≥ -1, got {self.batch_size}",
                hint="Use -1 to disable batching, 0 or 1 for one item per batch.",
            )
        if self.batch_interval_ms < 0:
            raise ConfigurationError(
                f"batch_interval_ms must be ≥ 0, got {self.batch_interval_ms}",
                hint="Use 0 to disable the pause between batches.",
            )

    @property
    def effective_batch_size(self) -> int:
        return self.batch_size if self.batch_size > 0 else 1

    @property
    def throttled(self) -> bool:
        return self.batch_size != -1 and self.batch_interval_ms > 0

    def delay_before(self, index: int) -> float:
        """Seconds to wait before launching item *index*."""
        if index <= 0 or not self.throttled:
            return 0.0
        if index % self.effective_batch_size != 0:
            return 0.0
        return self.batch_interval_ms / 1000.0


# =============================================================================
# Host options collection (boundary validation)
# =============================================================================


class _HostModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class BatchValues(_HostModel):
    batch_size: int | None = Field(default=None, alias="batchSize", ge=-1)
    batch_interval: float | None = Field(default=None, alias="batchInterval", ge=0)


class Batching(_HostModel):
    batch: BatchValues = Field(default_factory=BatchValues)


class NodeOptions(_HostModel):
    """The host's ``options`` collection, keyed the way the host stores it."""

    temperature: float | None = Field(default=None, ge=0, le=1)
    max_output_tokens: int | None = Field(default=None, alias="maxOutputTokens", gt=0)
    top_p: float | None = Field(default=None, alias="topP", ge=0, le=1)
    top_k: int | None = Field(default=None, alias="topK", ge=1)
    extract_source_url: bool = Field(default=False, alias="extractSourceUrl")
    return_full_response: bool = Field(default=False, alias="returnFullResponse")
    system_instruction: str | None = Field(default=None, alias="systemInstruction")
    batching: Batching | None = None

    @classmethod
    def parse(cls, raw: Any, *, item_index: int | None = None) -> NodeOptions:
        """Validate a raw options mapping, mapping failures to ParameterError."""
        if raw is None:
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ParameterError(
                f"Invalid options: {_summarize(e)}",
                hint="Check the node's Options values against their allowed ranges.",
                parameter="options",
                item_index=item_index,
            ) from e

    def batch_settings(self) -> BatchSettings:
        """Translate host batching values into BatchSettings."""
        if self.batching is None:
            return BatchSettings()
        values = self.batching.batch
        # An unset or zero size means one item per batch.
        size = values.batch_size or 1
        return BatchSettings(
            batch_size=size,
            batch_interval_ms=values.batch_interval or 0,
        )


def _summarize(err: ValidationError) -> str:
    parts = []
    for item in err.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
