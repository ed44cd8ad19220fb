"""Drupal client: low-level JSON:API calls."""

import logging
from functools import cache
from typing import Any

import httpx

from .auth import AuthManager
from .config import Config, get_config
from .consts import JSON_MEDIA_TYPE, JSONAPI_MEDIA_TYPE, USER_AGENT
from .deserializer import JsonApiDeserializer
from .exceptions import ConfigError, RequestError
from .protocols import AuthHeaderProvider, Deserializer, Fetcher, TokenProvider
from .url import QueryParams
from .url import build_url as _build_url

logger = logging.getLogger("drupal-jsonapi.client")


def format_jsonapi_errors(errors: list[dict[str, Any]]) -> str:
    """Format the first JSON:API error object as ``"{status} {title}\\n{detail}"``."""
    error = errors[0]
    message = f"{error.get('status')} {error.get('title')}"
    if error.get("detail"):
        message += f"\n{error['detail']}"
    return message


def format_error_response(response: httpx.Response) -> str:
    """Derive an error message from a non-success response.

    Args:
        response: The failed (and already read) response.

    Returns:
        The body ``message`` for plain JSON, the first JSON:API error for
        ``application/vnd.api+json``, otherwise the HTTP reason phrase.
    """
    media_type = response.headers.get("content-type", "").split(";")[0].strip()

    if media_type == JSON_MEDIA_TYPE:
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return response.reason_phrase

    if media_type == JSONAPI_MEDIA_TYPE:
        try:
            body = response.json()
        except ValueError:
            body = None
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            return format_jsonapi_errors(errors)

    return response.reason_phrase


class DrupalClient:
    """Drupal JSON:API client with authentication.

    Responsibilities:
    - Compose URLs against the configured base URL
    - Send requests with default headers and optional auth
    - Turn non-success responses into RequestError
    - Deserialize JSON:API documents

    Shared by every service (resolver, fetcher, menus, static paths).
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        auth: AuthHeaderProvider | None = None,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        fetcher: Fetcher | None = None,
        deserializer: Deserializer | None = None,
    ):
        """Initialize DrupalClient.

        Args:
            config: Config instance. If None, uses get_config().
            auth: Callable returning a full Authorization header value. Takes
                precedence over the client-credentials token provider.
            token_provider: Token provider. If None, creates AuthManager.
            http_client: HTTP client. If None, creates a new one.
            fetcher: Custom transport used instead of ``http_client``.
            deserializer: JSON:API deserializer. If None, JsonApiDeserializer.

        Raises:
            ConfigError: If the base URL is missing, or client credentials are
                only partially configured.
        """
        self.config = config or get_config()

        if not self.config.base_url:
            raise ConfigError(
                "The 'base_url' param is required",
                suggestions=["Set DRUPAL_BASE_URL to the Drupal site URL"],
            )

        credentials = self.config.client_credentials
        if credentials is not None and (
            not credentials.client_id or not credentials.client_secret
        ):
            raise ConfigError(
                "'client_id' and 'client_secret' are required for auth",
                suggestions=["Set both DRUPAL_CLIENT_ID and DRUPAL_CLIENT_SECRET"],
            )

        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
        )
        self.auth = auth
        self.fetcher = fetcher
        self.deserializer = deserializer or JsonApiDeserializer()
        self.token_provider = token_provider or AuthManager(
            self.config, self.http_client
        )

        logger.info(f"Drupal client created for {self.config.base_url}")

    async def __aenter__(self) -> "DrupalClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http_client.aclose()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def api_prefix(self) -> str:
        return self.config.api_prefix

    @property
    def front_page(self) -> str:
        return self.config.front_page

    def resolve_with_auth(self, with_auth: bool | None) -> bool:
        """Per-call auth flag, falling back to the configured default."""
        return self.config.with_auth if with_auth is None else with_auth

    def build_url(self, path: str, params: QueryParams = None) -> httpx.URL:
        """Build an absolute URL; ``path`` starting with ``/`` is site-relative."""
        return _build_url(self.config.base_url, path, params)

    async def fetch(
        self,
        url: str | httpx.URL,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        content: bytes | str | None = None,
        with_auth: bool = False,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Args:
            url: Complete URL.
            method: HTTP method.
            headers: Per-call headers, merged over the configured defaults.
            content: Request body.
            with_auth: Attach an Authorization header.

        Returns:
            The response, only when its status is a success.

        Raises:
            ConfigError: From auth if there is a config issue.
            AuthenticationError: From auth if the token request fails.
            RequestError: For HTTP 4xx/5xx responses.
            httpx.RequestError: For network errors, timeouts, DNS failures.
        """
        merged = {**self.config.headers, **(headers or {})}

        if with_auth:
            logger.debug("Using authenticated request")
            if self.auth is not None:
                logger.debug("Using custom auth")
                merged["Authorization"] = self.auth()
            else:
                logger.debug("Using default auth (client_credentials)")
                token = await self.token_provider.get_valid_token()
                merged["Authorization"] = f"Bearer {token}"

        logger.debug(f"{method} {url}")
        if self.fetcher is not None:
            logger.debug("Using custom fetcher")
            response = await self.fetcher(
                str(url), method=method, headers=merged, content=content
            )
        else:
            response = await self.http_client.request(
                method, url, headers=merged, content=content
            )

        if response.is_success:
            logger.debug(f"{method} {url} successful")
            return response

        await response.aread()
        message = format_error_response(response)
        logger.debug(f"{method} {url} failed with {response.status_code}: {message}")
        raise RequestError(
            message,
            context={"status_code": response.status_code, "url": str(url)},
        )

    async def fetch_json(self, url: str | httpx.URL, **kwargs) -> Any:
        """Fetch and parse a JSON body. Accepts the same arguments as fetch()."""
        response = await self.fetch(url, **kwargs)
        return response.json()

    def deserialize(self, body: dict[str, Any] | None, **options: Any) -> Any:
        """Deserialize a JSON:API document; empty bodies give None."""
        if not body:
            return None
        return self.deserializer.deserialize(body, **options)


@cache
def get_client() -> DrupalClient:
    """Get a cached DrupalClient instance with default configuration.

    Raises:
        ConfigError: If the environment does not provide DRUPAL_BASE_URL.
    """
    return DrupalClient()
