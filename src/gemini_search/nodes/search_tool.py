"""The ``geminiSearchTool`` node: Gemini web search usable as an agent tool."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from gemini_search.config import CREDENTIAL_TYPE
from gemini_search.nodes import properties as props
from gemini_search.nodes.base import (
    GeminiNode,
    ItemPlan,
    copy_optional,
    read_flag,
    read_text,
)
from gemini_search.options import NodeOptions, RequestOptions, ResponseOptions

if TYPE_CHECKING:
    from gemini_search.host import ParameterReader
    from gemini_search.response import ResponseOutput

DESCRIPTION = props.NodeDescription(
    name="geminiSearchTool",
    display_name="Gemini Search Tool",
    description="Use Google Gemini as a search tool",
    credential=CREDENTIAL_TYPE,
    usable_as_tool=True,
    parameters=(
        props.NodeParameter(
            "query",
            "Query",
            "string",
            default="",
            required=True,
            description="The search query to execute with Gemini",
        ),
        props.MODEL,
        *props.url_context_parameters(),
        *props.organization_parameters(),
        props.NodeParameter(
            "options",
            "Options",
            "collection",
            default={},
            options=(
                props.BATCHING,
                *props.MODEL_OPTIONS,
                props.system_instruction_parameter(
                    display_name="Custom System Instruction"
                ),
                props.RETURN_FULL_RESPONSE,
                props.EXTRACT_SOURCE_URL,
            ),
        ),
    ),
)


class GeminiSearchToolNode(GeminiNode):
    """Gemini Search Tool node.

    Always a web search. URL restrictions go into the system instruction, so
    the query an agent sends reaches the model unchanged.
    """

    description = DESCRIPTION

    def read_item(self, params: ParameterReader, index: int) -> ItemPlan:
        query = read_text(params, "query", index)
        model = read_text(params, "model", index, props.DEFAULT_MODEL)
        options = NodeOptions.parse(
            params.get_node_parameter("options", index, {}), item_index=index
        )
        enable_url_context = read_flag(params, "enableUrlContext", index)
        restrict_urls = read_text(params, "restrictUrls", index, "")
        organization = ""
        if read_flag(params, "enableOrganizationContext", index):
            organization = read_text(params, "organization", index, "")

        return ItemPlan(
            request=RequestOptions(
                model=model,
                prompt=query,
                operation="webSearch",
                system_instruction=options.system_instruction,
                organization=organization,
                restrict_urls=restrict_urls,
                enable_url_context=enable_url_context,
                temperature=options.temperature,
                max_output_tokens=options.max_output_tokens,
                top_p=options.top_p,
                top_k=options.top_k,
                url_strategy="instruction",
            ),
            response=ResponseOptions(
                extract_source_url=options.extract_source_url,
                include_full_response=options.return_full_response,
                include_restricted_urls=True,
                restrict_urls=restrict_urls,
                operation="webSearch",
            ),
            echo={"query": query, "organization": organization},
        )

    def shape_output(self, plan: ItemPlan, output: ResponseOutput) -> dict[str, Any]:
        record: dict[str, Any] = {"result": output.get("response", ""), **plan.echo}
        copy_optional(output, record)
        if output.get("full_response"):
            record["full_response"] = output["full_response"]
        return record
