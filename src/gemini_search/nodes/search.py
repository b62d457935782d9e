"""The ``geminiSearch`` node: web search or plain content generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from gemini_search.config import CREDENTIAL_TYPE
from gemini_search.errors import ParameterError
from gemini_search.nodes import properties as props
from gemini_search.nodes.base import (
    GeminiNode,
    ItemPlan,
    copy_optional,
    read_flag,
    read_text,
)
from gemini_search.options import (
    OPERATIONS,
    NodeOptions,
    RequestOptions,
    ResponseOptions,
)

if TYPE_CHECKING:
    from gemini_search.host import ParameterReader
    from gemini_search.response import ResponseOutput

_SEARCH_ONLY = ("webSearch",)

DESCRIPTION = props.NodeDescription(
    name="geminiSearch",
    display_name="Gemini Search",
    description="Perform searches and generate content using Google Gemini API",
    credential=CREDENTIAL_TYPE,
    parameters=(
        props.NodeParameter(
            "operation",
            "Operation",
            "options",
            default="webSearch",
            description="Web Search grounds answers with Google Search; "
            "Generate Content calls the model alone.",
        ),
        props.MODEL,
        props.NodeParameter(
            "prompt",
            "Prompt",
            "string",
            default="",
            required=True,
            description="The prompt to send to Gemini",
        ),
        *props.url_context_parameters(_SEARCH_ONLY),
        *props.organization_parameters(_SEARCH_ONLY),
        props.system_instruction_parameter(),
        props.NodeParameter(
            "options",
            "Options",
            "collection",
            default={},
            options=(props.BATCHING, *props.MODEL_OPTIONS, props.EXTRACT_SOURCE_URL),
        ),
    ),
)


class GeminiSearchNode(GeminiNode):
    """Gemini Search node.

    URL restrictions are appended to the user prompt so the URL context tool
    fetches them. The full API response is always part of the output.
    """

    description = DESCRIPTION

    def read_item(self, params: ParameterReader, index: int) -> ItemPlan:
        operation = params.get_node_parameter("operation", index, "webSearch")
        if operation not in OPERATIONS:
            raise ParameterError(
                f"Unknown operation: {operation!r}",
                hint="Supported operations: 'webSearch', 'generateContent'",
                parameter="operation",
                item_index=index,
            )
        model = read_text(params, "model", index, props.DEFAULT_MODEL)
        prompt = read_text(params, "prompt", index)
        options = NodeOptions.parse(
            params.get_node_parameter("options", index, {}), item_index=index
        )
        system_instruction = read_text(params, "systemInstruction", index, "")

        organization = ""
        restrict_urls = ""
        enable_url_context = False
        if operation == "webSearch":
            if read_flag(params, "enableOrganizationContext", index):
                organization = read_text(params, "organization", index, "")
            restrict_urls = read_text(params, "restrictUrls", index, "")
            enable_url_context = read_flag(params, "enableUrlContext", index)

        return ItemPlan(
            request=RequestOptions(
                model=model,
                prompt=prompt,
                operation=operation,
                system_instruction=system_instruction,
                organization=organization,
                restrict_urls=restrict_urls,
                enable_url_context=enable_url_context,
                temperature=options.temperature,
                max_output_tokens=options.max_output_tokens,
                top_p=options.top_p,
                top_k=options.top_k,
                url_strategy="query",
            ),
            response=ResponseOptions(
                extract_source_url=options.extract_source_url,
                include_full_response=True,
                include_restricted_urls=True,
                restrict_urls=restrict_urls,
                operation=operation,
            ),
        )

    def shape_output(self, plan: ItemPlan, output: ResponseOutput) -> dict[str, Any]:
        record: dict[str, Any] = {
            "response": output.get("response", ""),
            "full_response": output.get("full_response"),
        }
        return copy_optional(output, record)
