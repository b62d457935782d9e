"""System instruction and user query text builders.

Pure string functions: no I/O, deterministic, empty input gives empty output.
"""

from __future__ import annotations

_ORGANIZATION_TEMPLATE = (
    "You are an expert in retrieving and providing information strictly within "
    "the domain of {org} and topics directly related to this organization. "
    "When answering queries, provide only the most relevant and natural response "
    "without unnecessary related information. Do not list multiple similar names, "
    "be strict on names or unrelated details. If a query falls outside this scope, "
    "politely inform the user that you are limited to {org}-related topics. "
    "Your response should answer the question directly without referring to "
    "the search itself."
)

_URL_RESTRICTION = (
    "Limit your search to information found on these specific websites: {urls}."
)
_URL_ONLY_SUFFIX = (
    " Provide a direct, concise answer based on information from these sources only."
)
_URL_CONTEXT_QUERY_SUFFIX = "\n\nPlease use {urls} as the URL(s) for your research."


def parse_url_list(restrict_urls: str | None) -> list[str]:
    """Split a comma-separated URL list, dropping blank entries."""
    if not restrict_urls:
        return []
    return [url.strip() for url in restrict_urls.split(",") if url.strip()]


def build_system_instruction(
    custom: str | None = None,
    organization: str | None = None,
    restrict_urls: str | None = None,
) -> str:
    """Build the system instruction for one request.

    A custom instruction is used verbatim and wins over the organization
    template. A non-empty URL list appends a site restriction, or forms the
    whole instruction when there is no base text.
    """
    if custom:
        instruction = custom
    elif organization:
        instruction = _ORGANIZATION_TEMPLATE.format(org=organization)
    else:
        instruction = ""

    urls = parse_url_list(restrict_urls)
    if urls:
        restriction = _URL_RESTRICTION.format(urls=", ".join(urls))
        if instruction:
            instruction = f"{instruction} {restriction}"
        else:
            instruction = restriction + _URL_ONLY_SUFFIX

    return instruction


def build_user_query_with_url_context(
    query: str, restrict_urls: str | None = None
) -> str:
    """Append the URL list to *query* so the URL context tool fetches them."""
    urls = parse_url_list(restrict_urls)
    if not urls:
        return query
    return query + _URL_CONTEXT_QUERY_SUFFIX.format(urls=", ".join(urls))
