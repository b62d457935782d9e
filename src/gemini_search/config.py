"""Credentials: the ``geminiSearchApi`` credential type and its providers."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Protocol, runtime_checkable

from dotenv import load_dotenv

from gemini_search._http import DEFAULT_HOST
from gemini_search.errors import ConfigurationError, CredentialsMissingError

CREDENTIAL_TYPE = "geminiSearchApi"

_API_KEY_ENV_VAR = "GEMINI_API_KEY"
_HOST_ENV_VAR = "GEMINI_API_HOST"


@dataclass(frozen=True)
class Credentials:
    """Immutable credential record for the Gemini API.

    Example:
        creds = Credentials(api_key="...")
        creds.host  # https://generativelanguage.googleapis.com
    """

    api_key: str
    #: Falls back to the production endpoint when empty.
    host: str = DEFAULT_HOST

    def __post_init__(self) -> None:
        """Validate the key and normalize the host."""
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError(
                "api_key must be a non-empty string",
                hint=f"Set {_API_KEY_ENV_VAR} or pass Credentials(api_key=...).",
            )
        host = (self.host or "").strip() or DEFAULT_HOST
        object.__setattr__(self, "host", host.rstrip("/"))

    @classmethod
    def from_env(cls) -> Credentials:
        """Resolve credentials from ``GEMINI_API_KEY`` / ``GEMINI_API_HOST``."""
        load_dotenv()
        api_key = os.environ.get(_API_KEY_ENV_VAR)
        if not api_key or not api_key.strip():
            raise CredentialsMissingError(
                "No credentials provided",
                hint=f"Set {_API_KEY_ENV_VAR} environment variable or pass api_key=...",
            )
        return cls(
            api_key=api_key.strip(),
            host=os.environ.get(_HOST_ENV_VAR, DEFAULT_HOST),
        )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return f"Credentials(host={self.host!r}, api_key='[REDACTED]')"

    __repr__ = __str__


@runtime_checkable
class CredentialsProvider(Protocol):
    """Host capability that hands out stored credentials by type name."""

    async def get_credentials(self, name: str) -> Credentials | None:
        """Return credentials for *name*, or None when none are stored."""
        ...


class StaticCredentialsProvider:
    """Serve one fixed credential record."""

    def __init__(self, credentials: Credentials | None) -> None:
        self._credentials = credentials

    async def get_credentials(self, name: str) -> Credentials | None:
        del name
        return self._credentials


class EnvCredentialsProvider:
    """Resolve credentials from the environment on every request."""

    async def get_credentials(self, name: str) -> Credentials | None:
        del name
        return Credentials.from_env()


async def require_credentials(
    provider: CredentialsProvider, name: str = CREDENTIAL_TYPE
) -> Credentials:
    """Fetch credentials or fail with ``CredentialsMissingError``."""
    credentials = await provider.get_credentials(name)
    if credentials is None:
        raise CredentialsMissingError(
            "No credentials provided",
            hint=f"Attach a {name!r} credential to the node.",
        )
    return credentials
