"""Request body assembly for the generateContent endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypedDict

from gemini_search.instructions import (
    build_system_instruction,
    build_user_query_with_url_context,
    parse_url_list,
)
from gemini_search.options import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_TEMPERATURE

if TYPE_CHECKING:
    from gemini_search.options import RequestOptions

RESPONSE_MIME_TYPE = "text/plain"
SEARCH_TOOL = "googleSearch"
URL_CONTEXT_TOOL = "urlContext"


class RequestBody(TypedDict, total=False):
    """Provider payload. ``tools`` and ``systemInstruction`` are optional."""

    contents: list[dict[str, Any]]
    generationConfig: dict[str, Any]
    #: Omitted rather than sent empty.
    tools: list[dict[str, Any]]
    systemInstruction: dict[str, Any]


def url_context_active(options: RequestOptions) -> bool:
    """URL context applies only when enabled and at least one URL is listed."""
    return bool(options.enable_url_context) and bool(
        parse_url_list(options.restrict_urls)
    )


def build_request_body(options: RequestOptions) -> RequestBody:
    """Build the nested request payload from flat options.

    Never fails: numeric ranges are validated where options enter the system.
    """
    use_url_context = url_context_active(options)
    is_search = options.operation == "webSearch"

    prompt = options.prompt
    instruction_urls: str | None = None
    if use_url_context:
        if options.url_strategy == "instruction":
            instruction_urls = options.restrict_urls
        elif is_search:
            prompt = build_user_query_with_url_context(prompt, options.restrict_urls)

    instruction = build_system_instruction(
        options.system_instruction,
        options.organization,
        instruction_urls,
    )

    generation_config: dict[str, Any] = {
        "maxOutputTokens": options.max_output_tokens or DEFAULT_MAX_OUTPUT_TOKENS,
        "temperature": (
            options.temperature
            if options.temperature is not None
            else DEFAULT_TEMPERATURE
        ),
        "responseMimeType": RESPONSE_MIME_TYPE,
    }
    if options.top_p is not None:
        generation_config["topP"] = options.top_p
    if options.top_k is not None:
        generation_config["topK"] = options.top_k

    body = RequestBody(
        contents=[{"role": "user", "parts": [{"text": prompt}]}],
        generationConfig=generation_config,
    )

    tools: list[dict[str, Any]] = []
    if is_search:
        tools.append({SEARCH_TOOL: {}})
    if use_url_context:
        tools.append({URL_CONTEXT_TOOL: {}})
    if tools:
        body["tools"] = tools

    if instruction:
        body["systemInstruction"] = {"parts": [{"text": instruction}]}

    return body
