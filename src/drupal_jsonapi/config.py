"""Configuration management."""

import logging
from functools import cache

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic_settings import BaseSettings

from .consts import (
    DEFAULT_API_PREFIX,
    DEFAULT_AUTH_URL_PATH,
    DEFAULT_FRONT_PAGE,
    DEFAULT_HEADERS,
)


class ClientCredentials(BaseModel):
    """OAuth2 client-credentials descriptor."""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., description="OAuth consumer id")
    client_secret: str = Field(..., description="OAuth consumer secret")
    url: str = Field(
        default=DEFAULT_AUTH_URL_PATH, description="Token endpoint URL"
    )


class Config(BaseSettings):
    """Client configuration with computed API endpoints.

    Immutable once created; the only mutable client state (the access token)
    lives on the AuthManager.
    """

    model_config = ConfigDict(
        env_prefix="DRUPAL_", case_sensitive=False, extra="ignore", frozen=True
    )

    base_url: str = Field(
        default="",
        description="Base URL of the Drupal site, without the JSON:API prefix",
    )
    api_prefix: str = Field(
        default=DEFAULT_API_PREFIX, description="Path prefix of the JSON:API"
    )
    front_page: str = Field(
        default=DEFAULT_FRONT_PAGE, description="Path alias of the site front page"
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HEADERS),
        description="Headers sent with every request",
    )
    client_id: str | None = Field(default=None, description="OAuth client id")
    client_secret: str | None = Field(
        default=None, description="OAuth client secret"
    )
    auth_url: str = Field(
        default=DEFAULT_AUTH_URL_PATH, description="OAuth token endpoint path"
    )
    use_default_resource_type_entry: bool = Field(
        default=False,
        description="Build collection URLs from the resource type instead of the index",
    )
    with_auth: bool = Field(
        default=False, description="Authenticate requests unless told otherwise"
    )
    preview_secret: str | None = Field(
        default=None, description="Shared secret for the preview endpoint"
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    timeout_seconds: int = Field(
        default=30, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    @field_validator("api_prefix")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @computed_field
    @property
    def api_url(self) -> str:
        """URL of the JSON:API index."""
        return f"{self.base_url}{self.api_prefix}"

    @computed_field
    @property
    def token_url(self) -> str:
        """URL for fetching access tokens."""
        if self.auth_url.startswith("/"):
            return f"{self.base_url}{self.auth_url}"
        return self.auth_url

    @property
    def client_credentials(self) -> ClientCredentials | None:
        """Client-credentials descriptor, or None when auth is not configured."""
        if self.client_id is None and self.client_secret is None:
            return None
        return ClientCredentials(
            client_id=self.client_id or "",
            client_secret=self.client_secret or "",
            url=self.token_url,
        )


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application"""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    return logging.getLogger("drupal-jsonapi")


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()
