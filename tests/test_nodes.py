"""Node-level behavior with a fake transport and static host parameters."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

from gemini_search.config import Credentials, StaticCredentialsProvider
from gemini_search.errors import CredentialsMissingError, ParameterError
from gemini_search.host import StaticParameters
from gemini_search.nodes import NODE_TYPES, GeminiSearchNode, GeminiSearchToolNode
from gemini_search.nodes.base import read_text
from gemini_search.providers import MockTransport
from gemini_search.providers import gemini as gemini_provider
from tests.helpers import (
    GEMINI_MODEL,
    TEST_API_KEY,
    FakeTransport,
    RecordingResolver,
    gemini_response,
)

pytestmark = pytest.mark.integration

SOURCE = "https://vertexaisearch.cloud.google.com/grounding-api-redirect/xyz"


def _search_node(transport: Any, **kwargs: Any) -> GeminiSearchNode:
    kwargs.setdefault(
        "credentials", StaticCredentialsProvider(Credentials(api_key=TEST_API_KEY))
    )
    return GeminiSearchNode(transport=transport, **kwargs)


def _tool_node(transport: Any, **kwargs: Any) -> GeminiSearchToolNode:
    kwargs.setdefault(
        "credentials", StaticCredentialsProvider(Credentials(api_key=TEST_API_KEY))
    )
    return GeminiSearchToolNode(transport=transport, **kwargs)


def _prompt(body: dict[str, Any]) -> str:
    return body["contents"][0]["parts"][0]["text"]


# =============================================================================
# GeminiSearchNode
# =============================================================================


@pytest.mark.asyncio
async def test_search_node_returns_one_paired_item_per_input() -> None:
    transport = FakeTransport()
    node = _search_node(transport)
    params = StaticParameters(
        {"operation": "webSearch", "model": GEMINI_MODEL, "prompt": "first"},
        per_item=[{}, {"prompt": "second"}],
    )

    items = await node.execute([{}, {}], params)

    assert [item["paired_item"] for item in items] == [0, 1]
    assert items[0]["json"]["response"] == "ok:first"
    assert items[1]["json"]["response"] == "ok:second"
    assert items[0]["json"]["full_response"]["candidates"]
    assert [_prompt(body) for _, body in transport.calls] == ["first", "second"]


@pytest.mark.asyncio
async def test_search_node_applies_url_context_to_prompt() -> None:
    transport = FakeTransport()
    params = StaticParameters(
        {
            "prompt": "latest release?",
            "enableUrlContext": True,
            "restrictUrls": "docs.example.com",
            "enableOrganizationContext": True,
            "organization": "Acme",
        }
    )

    items = await _search_node(transport).execute([{}], params)

    _, body = transport.calls[0]
    assert _prompt(body).startswith("latest release?")
    assert "docs.example.com" in _prompt(body)
    assert body["tools"] == [{"googleSearch": {}}, {"urlContext": {}}]
    assert "Acme" in body["systemInstruction"]["parts"][0]["text"]
    assert items[0]["json"]["restricted_urls"] == "docs.example.com"


@pytest.mark.asyncio
async def test_generate_content_ignores_search_only_parameters() -> None:
    transport = FakeTransport()
    params = StaticParameters(
        {
            "operation": "generateContent",
            "prompt": "write a haiku",
            "enableUrlContext": True,
            "restrictUrls": "a.com",
            "enableOrganizationContext": True,
            "organization": "Acme",
        }
    )

    items = await _search_node(transport).execute([{}], params)

    _, body = transport.calls[0]
    assert _prompt(body) == "write a haiku"
    assert "tools" not in body
    assert "systemInstruction" not in body
    assert "restricted_urls" not in items[0]["json"]


@pytest.mark.asyncio
async def test_search_node_maps_options_into_generation_config() -> None:
    transport = FakeTransport()
    params = StaticParameters(
        {
            "prompt": "q",
            "systemInstruction": "Answer in French.",
            "options": {"temperature": 0, "maxOutputTokens": 128, "topK": 5},
        }
    )

    await _search_node(transport).execute([{}], params)

    _, body = transport.calls[0]
    assert body["generationConfig"]["temperature"] == 0
    assert body["generationConfig"]["maxOutputTokens"] == 128
    assert body["generationConfig"]["topK"] == 5
    assert "topP" not in body["generationConfig"]
    assert body["systemInstruction"]["parts"][0]["text"] == "Answer in French."


@pytest.mark.asyncio
async def test_search_node_extracts_and_resolves_source_url() -> None:
    transport = FakeTransport(script=[gemini_response("a", source_url=SOURCE)])
    resolver = RecordingResolver(targets={SOURCE: "https://example.com/a"})
    params = StaticParameters({"prompt": "q", "options": {"extractSourceUrl": True}})

    items = await _search_node(transport, resolver=resolver).execute([{}], params)

    record = items[0]["json"]
    assert record["source_url"] == SOURCE
    assert record["redirected_source_url"] == "https://example.com/a"
    assert "redirect_error" not in record


@pytest.mark.asyncio
async def test_unknown_operation_is_a_parameter_error() -> None:
    params = StaticParameters({"operation": "translate", "prompt": "q"})

    with pytest.raises(ParameterError, match="Unknown operation") as excinfo:
        await _search_node(FakeTransport()).execute([{}], params)

    assert excinfo.value.parameter == "operation"


@pytest.mark.asyncio
async def test_missing_prompt_is_reported_per_item() -> None:
    params = StaticParameters(per_item=[{"prompt": "ok"}, {}])

    items = await _search_node(FakeTransport()).execute(
        [{}, {}], params, continue_on_fail=True
    )

    assert items[0]["json"]["response"] == "ok:ok"
    assert items[1]["json"] == {"error": 'Could not get parameter "prompt"'}


@pytest.mark.asyncio
async def test_invalid_options_become_error_record() -> None:
    params = StaticParameters(
        {"prompt": "q"}, per_item=[{}, {"options": {"temperature": 5}}]
    )

    items = await _search_node(FakeTransport()).execute(
        [{}, {}], params, continue_on_fail=True
    )

    assert items[0]["json"]["response"] == "ok:q"
    assert items[1]["json"]["error"].startswith("Invalid options")


@pytest.mark.asyncio
async def test_missing_credentials_fail_every_item() -> None:
    transport = FakeTransport()
    node = _search_node(transport, credentials=StaticCredentialsProvider(None))

    items = await node.execute(
        [{}, {}], StaticParameters({"prompt": "q"}), continue_on_fail=True
    )

    assert [item["json"] for item in items] == [
        {"error": "No credentials provided"},
        {"error": "No credentials provided"},
    ]
    assert transport.calls == []


@pytest.mark.asyncio
async def test_missing_credentials_raise_without_continue() -> None:
    node = _search_node(FakeTransport(), credentials=StaticCredentialsProvider(None))

    with pytest.raises(CredentialsMissingError):
        await node.execute([{}], StaticParameters({"prompt": "q"}))


@pytest.mark.asyncio
async def test_batching_options_from_first_item_throttle_the_run() -> None:
    params = StaticParameters(
        {
            "prompt": "q",
            "options": {"batching": {"batch": {"batchSize": 1, "batchInterval": 50}}},
        }
    )

    start = time.perf_counter()
    items = await _search_node(FakeTransport()).execute([{}, {}, {}], params)

    assert len(items) == 3
    assert time.perf_counter() - start >= 0.1


@pytest.mark.asyncio
async def test_search_node_with_mock_transport_end_to_end() -> None:
    resolver = RecordingResolver()
    node = _search_node(MockTransport(source_url=SOURCE), resolver=resolver)
    params = StaticParameters({"prompt": "hello", "options": {"extractSourceUrl": True}})

    items = await node.execute([{}], params)

    record = items[0]["json"]
    assert record["response"] == "echo: hello"
    assert record["source_url"] == SOURCE
    assert record["redirected_source_url"] == SOURCE


# =============================================================================
# GeminiSearchToolNode
# =============================================================================


@pytest.mark.asyncio
async def test_tool_node_keeps_query_and_restricts_via_instruction() -> None:
    transport = FakeTransport()
    params = StaticParameters(
        {
            "query": "pricing?",
            "enableUrlContext": True,
            "restrictUrls": "a.com, b.com",
            "enableOrganizationContext": True,
            "organization": "Acme",
        }
    )

    items = await _tool_node(transport).execute([{}], params)

    _, body = transport.calls[0]
    assert _prompt(body) == "pricing?"
    assert body["tools"] == [{"googleSearch": {}}, {"urlContext": {}}]
    instruction = body["systemInstruction"]["parts"][0]["text"]
    assert "Acme" in instruction
    assert "a.com, b.com" in instruction

    assert items[0]["json"] == {
        "result": "ok:pricing?",
        "query": "pricing?",
        "organization": "Acme",
        "restricted_urls": "a.com, b.com",
    }


@pytest.mark.asyncio
async def test_tool_node_organization_requires_flag() -> None:
    transport = FakeTransport()
    params = StaticParameters({"query": "q", "organization": "Acme"})

    items = await _tool_node(transport).execute([{}], params)

    _, body = transport.calls[0]
    assert "systemInstruction" not in body
    assert items[0]["json"]["organization"] == ""


@pytest.mark.asyncio
async def test_tool_node_full_response_and_custom_instruction_options() -> None:
    transport = FakeTransport()
    params = StaticParameters(
        {
            "query": "q",
            "organization": "Acme",
            "enableOrganizationContext": True,
            "options": {"returnFullResponse": True, "systemInstruction": "Be terse."},
        }
    )

    items = await _tool_node(transport).execute([{}], params)

    _, body = transport.calls[0]
    assert body["systemInstruction"]["parts"][0]["text"] == "Be terse."
    assert items[0]["json"]["full_response"]["candidates"]


@pytest.mark.asyncio
async def test_tool_node_omits_full_response_by_default() -> None:
    items = await _tool_node(FakeTransport()).execute(
        [{}], StaticParameters({"query": "q"})
    )

    assert "full_response" not in items[0]["json"]


# =============================================================================
# Model listing and descriptions
# =============================================================================


@pytest.mark.asyncio
async def test_load_models_returns_selector_options() -> None:
    transport = FakeTransport(models=["gemini-2.5-flash", "gemini-2.5-pro"])

    options = await _search_node(transport).load_models()

    assert options == [
        {"name": "gemini-2.5-flash", "value": "gemini-2.5-flash"},
        {"name": "gemini-2.5-pro", "value": "gemini-2.5-pro"},
    ]
    assert transport.list_calls == 1


@pytest.mark.asyncio
async def test_load_models_without_credentials_fails() -> None:
    node = GeminiSearchNode(transport=FakeTransport())

    with pytest.raises(CredentialsMissingError):
        await node.load_models()


def test_node_types_registry() -> None:
    assert NODE_TYPES == {
        "geminiSearch": GeminiSearchNode,
        "geminiSearchTool": GeminiSearchToolNode,
    }


def test_descriptions_declare_credential_and_tool_usage() -> None:
    search = GeminiSearchNode.description
    tool = GeminiSearchToolNode.description

    assert search.credential == tool.credential == "geminiSearchApi"
    assert tool.usable_as_tool is True
    assert search.usable_as_tool is False
    assert search.parameter("organization").operations == ("webSearch",)
    assert search.parameter("model").load_options_method == "load_models"
    assert tool.parameter("query").required is True
    with pytest.raises(KeyError):
        tool.parameter("operation")


# =============================================================================
# Transport lifecycle and parameter helpers
# =============================================================================


def test_owned_transport_is_closed_after_each_run(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A node reused across event loops opens and closes a client per run."""
    real_client = httpx.AsyncClient
    clients: list[httpx.AsyncClient] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=gemini_response("hi"))

    def make_client(**kwargs: Any) -> httpx.AsyncClient:
        client = real_client(transport=httpx.MockTransport(handler), **kwargs)
        clients.append(client)
        return client

    monkeypatch.setattr(gemini_provider.httpx, "AsyncClient", make_client)
    node = GeminiSearchNode(
        credentials=StaticCredentialsProvider(Credentials(api_key=TEST_API_KEY))
    )
    params = StaticParameters({"prompt": "q"})

    first = asyncio.run(node.execute([{}], params, continue_on_fail=True))
    second = asyncio.run(node.execute([{}], params, continue_on_fail=True))
    client_count = len(clients)

    assert first[0]["json"]["response"] == "hi"
    assert second[0]["json"]["response"] == "hi"
    assert client_count == 2
    assert all(client.is_closed for client in clients)


def test_injected_transport_is_left_open() -> None:
    closed: list[bool] = []

    class _ClosableTransport(FakeTransport):
        async def aclose(self) -> None:
            closed.append(True)

    node = _search_node(_ClosableTransport())
    asyncio.run(node.execute([{}], StaticParameters({"prompt": "q"})))

    assert closed == []


def test_read_text_accepts_none_as_explicit_default() -> None:
    params = StaticParameters({"name": "Acme"})

    assert read_text(params, "name", 0) == "Acme"
    assert read_text(params, "missing", 0, None) == ""
    with pytest.raises(ParameterError, match='"missing"'):
        read_text(params, "missing", 0)
