"""Declared node parameters shared by both node types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from gemini_search.options import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_TEMPERATURE

DEFAULT_MODEL = "gemini-2.5-flash"

ParameterType = Literal["options", "string", "boolean", "number", "collection"]


@dataclass(frozen=True)
class NodeParameter:
    """One declared input parameter of a node."""

    name: str
    display_name: str
    type: ParameterType
    default: Any = None
    required: bool = False
    description: str = ""
    #: Operations the parameter applies to; None means all.
    operations: tuple[str, ...] | None = None
    #: Sub-parameters of a ``collection``.
    options: tuple[NodeParameter, ...] = ()
    #: Name of the dynamic option loader, e.g. ``"load_models"``.
    load_options_method: str | None = None


@dataclass(frozen=True)
class NodeDescription:
    """Host-facing description of a node type."""

    name: str
    display_name: str
    description: str
    credential: str
    parameters: tuple[NodeParameter, ...]
    usable_as_tool: bool = False

    def parameter(self, name: str) -> NodeParameter:
        for param in self.parameters:
            if param.name == name:
                return param
        raise KeyError(name)


MODEL = NodeParameter(
    "model",
    "Model",
    "options",
    default=DEFAULT_MODEL,
    description="The Gemini model to use",
    load_options_method="load_models",
)

BATCHING = NodeParameter(
    "batching",
    "Batching",
    "collection",
    description="Input will be split in batches to throttle requests.",
    options=(
        NodeParameter(
            "batchSize",
            "Items per Batch",
            "number",
            default=15,
            description="-1 for disabled. 0 will be treated as 1.",
        ),
        NodeParameter(
            "batchInterval",
            "Batch Interval (ms)",
            "number",
            default=1000,
            description="Time between each batch of requests. 0 for disabled.",
        ),
    ),
)

MODEL_OPTIONS: tuple[NodeParameter, ...] = (
    NodeParameter(
        "temperature",
        "Temperature",
        "number",
        default=DEFAULT_TEMPERATURE,
        description="Controls randomness in the response (0-1)",
    ),
    NodeParameter(
        "maxOutputTokens",
        "Max Output Tokens",
        "number",
        default=DEFAULT_MAX_OUTPUT_TOKENS,
        description="Maximum number of tokens to generate",
    ),
    NodeParameter(
        "topP",
        "Top P",
        "number",
        default=1,
        description="Nucleus sampling parameter (0-1). Only sent if set.",
    ),
    NodeParameter(
        "topK",
        "Top K",
        "number",
        default=1,
        description="Top K sampling parameter. Only sent if set.",
    ),
)

EXTRACT_SOURCE_URL = NodeParameter(
    "extractSourceUrl",
    "Extract Source URL",
    "boolean",
    default=False,
    description="Whether to extract the source URL from the response",
)

RETURN_FULL_RESPONSE = NodeParameter(
    "returnFullResponse",
    "Return Full Response",
    "boolean",
    default=False,
    description="Whether to include the raw API response in the output",
)


def url_context_parameters(
    operations: tuple[str, ...] | None = None,
) -> tuple[NodeParameter, ...]:
    return (
        NodeParameter(
            "enableUrlContext",
            "Enable URL Context Tool",
            "boolean",
            default=False,
            description="Allow the model to use specific URLs as context.",
            operations=operations,
        ),
        NodeParameter(
            "restrictUrls",
            "Restrict Search to URLs",
            "string",
            default="",
            description="Comma-separated list of URLs. Only used with URL context.",
            operations=operations,
        ),
    )


def organization_parameters(
    operations: tuple[str, ...] | None = None,
) -> tuple[NodeParameter, ...]:
    return (
        NodeParameter(
            "enableOrganizationContext",
            "Enable Organization Context",
            "boolean",
            default=False,
            description="Restrict answers to a specific organization's domain.",
            operations=operations,
        ),
        NodeParameter(
            "organization",
            "Organization Context",
            "string",
            default="",
            description="Organization name used as context for the search.",
            operations=operations,
        ),
    )


def system_instruction_parameter(
    operations: tuple[str, ...] | None = None, *, display_name: str = "System Instruction"
) -> NodeParameter:
    return NodeParameter(
        "systemInstruction",
        display_name,
        "string",
        default="",
        description="Optional system instruction to guide the model behavior",
        operations=operations,
    )
