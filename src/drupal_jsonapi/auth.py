"""OAuth client-credentials token management."""

import base64
import logging

import httpx

from .config import Config
from .exceptions import AuthenticationError, ConfigError
from .models import AccessToken

logger = logging.getLogger("drupal-jsonapi.auth")


class AuthManager:
    """Access token manager for the ``client_credentials`` grant.

    Responsibilities:
    - Cache the current token and reuse it until it expires
    - Request a new token from the configured token endpoint

    The cached token is the only mutable state shared by in-flight requests.
    Two requests that find it expired at the same time both fetch a token and
    the last one to finish is kept; both tokens are valid, so no lock is taken.
    """

    def __init__(self, config: Config, http_client: httpx.AsyncClient):
        """Initialize AuthManager.

        Args:
            config: Config instance with auth settings.
            http_client: HTTP client (for token requests only)
        """
        self.config = config
        self.http_client = http_client
        self._token: AccessToken | None = None

    @property
    def token(self) -> AccessToken | None:
        return self._token

    async def get_access_token(self) -> AccessToken:
        """Get a valid access token, fetching a new one when needed.

        Returns:
            The cached AccessToken while valid, otherwise a fresh one.

        Raises:
            ConfigError: If client credentials are not configured.
            AuthenticationError: If the token endpoint returns a non-success status.
            httpx.RequestError: For network errors, timeouts, DNS failures.
        """
        credentials = self.config.client_credentials
        if credentials is None:
            raise ConfigError(
                "auth is not configured",
                suggestions=[
                    "Set DRUPAL_CLIENT_ID and DRUPAL_CLIENT_SECRET",
                    "Or pass a custom auth callable to DrupalClient",
                ],
            )

        if not credentials.client_id or not credentials.client_secret:
            raise ConfigError(
                "'client_id' and 'client_secret' are required for auth",
                context={"client_id_set": bool(credentials.client_id)},
            )

        if self._token is not None and self._token.is_valid():
            logger.debug("Using existing access token")
            return self._token

        logger.debug("Fetching new access token")

        basic = base64.b64encode(
            f"{credentials.client_id}:{credentials.client_secret}".encode()
        ).decode()

        response = await self.http_client.post(
            credentials.url,
            headers={
                "Authorization": f"Basic {basic}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            content="grant_type=client_credentials",
        )

        if not response.is_success:
            logger.error(f"Token request failed with status {response.status_code}")
            raise AuthenticationError(
                response.reason_phrase,
                suggestions=["Check the OAuth consumer id, secret and scopes"],
                context={
                    "token_url": credentials.url,
                    "status_code": response.status_code,
                },
            )

        token = AccessToken.model_validate(response.json())
        self._token = token
        logger.info(f"Access token obtained, expires in {token.expires_in}s")
        return token

    async def get_valid_token(self) -> str:
        """Get a valid bearer token string.

        Raises:
            ConfigError: If client credentials are not configured.
            AuthenticationError: If the token endpoint refuses the request.
        """
        token = await self.get_access_token()
        return token.access_token

    def clear(self) -> None:
        """Forget the cached token."""
        self._token = None
