"""Transport implementations."""

from .base import HttpTransport
from .gemini import GeminiTransport
from .mock import MockTransport

__all__ = [
    "GeminiTransport",
    "HttpTransport",
    "MockTransport",
]
