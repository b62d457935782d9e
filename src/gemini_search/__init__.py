"""gemini-search: Gemini search and generation nodes for workflow hosts.

Public API:
    - GeminiSearchNode / GeminiSearchToolNode: the two node types
    - Credentials: the ``geminiSearchApi`` credential record
    - build_request_body(), process_response(), run_batch(): the pipeline
"""

from __future__ import annotations

import logging

from gemini_search.config import (
    CREDENTIAL_TYPE,
    Credentials,
    CredentialsProvider,
    EnvCredentialsProvider,
    StaticCredentialsProvider,
)
from gemini_search.errors import (
    APIError,
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    CredentialsMissingError,
    GeminiSearchError,
    NetworkError,
    ParameterError,
    RateLimitError,
    RedirectResolutionError,
    ServerError,
)
from gemini_search.execute import execute_request, run_batch
from gemini_search.host import ParameterReader, StaticParameters
from gemini_search.instructions import (
    build_system_instruction,
    build_user_query_with_url_context,
)
from gemini_search.nodes import NODE_TYPES, GeminiSearchNode, GeminiSearchToolNode
from gemini_search.options import (
    BatchSettings,
    NodeOptions,
    RequestOptions,
    ResponseOptions,
)
from gemini_search.redirect import resolve_redirect
from gemini_search.request import RequestBody, build_request_body
from gemini_search.response import ResponseOutput, process_response

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("gemini-search")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("gemini_search").addHandler(logging.NullHandler())

__all__ = [
    "CREDENTIAL_TYPE",
    "NODE_TYPES",
    "APIError",
    "AuthenticationError",
    "BadRequestError",
    "BatchSettings",
    "ConfigurationError",
    "Credentials",
    "CredentialsMissingError",
    "CredentialsProvider",
    "EnvCredentialsProvider",
    "GeminiSearchError",
    "GeminiSearchNode",
    "GeminiSearchToolNode",
    "NetworkError",
    "NodeOptions",
    "ParameterError",
    "ParameterReader",
    "RateLimitError",
    "RedirectResolutionError",
    "RequestBody",
    "RequestOptions",
    "ResponseOptions",
    "ResponseOutput",
    "ServerError",
    "StaticCredentialsProvider",
    "StaticParameters",
    "build_request_body",
    "build_system_instruction",
    "build_user_query_with_url_context",
    "execute_request",
    "process_response",
    "resolve_redirect",
    "run_batch",
]
