"""Protocol definitions for dependency injection and interface contracts."""

from typing import Any, Protocol, runtime_checkable

import httpx


class TokenProvider(Protocol):
    """Protocol for authentication token providers."""

    async def get_valid_token(self) -> str:
        """Get a valid access token.

        Returns:
            Valid bearer token string.

        Raises:
            ConfigError: If client credentials are not configured.
            AuthenticationError: If the token endpoint refuses the request.
        """
        ...


class AuthHeaderProvider(Protocol):
    """Static auth source returning the full ``Authorization`` header value."""

    def __call__(self) -> str: ...


class Fetcher(Protocol):
    """Custom transport used instead of the default httpx client."""

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        content: bytes | str | None = None,
    ) -> httpx.Response: ...


class Deserializer(Protocol):
    """Turns a JSON:API document into plain resource objects."""

    def deserialize(self, document: dict[str, Any], **options: Any) -> Any: ...


@runtime_checkable
class QueryParamsProvider(Protocol):
    """Parameter object that flattens itself into a query mapping."""

    def get_query_object(self) -> dict[str, Any]: ...
