from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .exceptions import DrupalJsonApiError, RequestError

# =============================================================================
# UNIFIED RESPONSE MODEL
# =============================================================================
# Single response type for the MCP tools


class Response(BaseModel):
    """Unified response type for MCP tools."""

    status: Literal["success", "error"] = Field(
        ..., description="Response status indicating outcome"
    )
    message: str = Field(..., description="Human-readable summary of the response")
    data: Any | None = Field(
        None,
        description="Response payload - can be dict, list, pydantic model, or any serializable type",
    )
    errors: list[str] = Field(
        default_factory=list, description="List of error messages"
    )
    suggestions: list[str] = Field(
        default_factory=list, description="Actionable suggestions for the user"
    )
    metadata: dict[str, Any] | None = Field(
        None, description="Additional context and domain-specific information"
    )

    @classmethod
    def from_error(cls, error: Exception) -> "Response":
        """Create Response from any Exception, with potentially helpful info for recovery.

        Args:
            error: Any Exception instance

        Returns:
            Response object with error details
        """
        if isinstance(error, RequestError):
            status_code = error.status_code
            suggestions = list(error.suggestions)
            if status_code in (401, 403):
                suggestions.append("Check the OAuth client credentials and scopes")
            elif status_code == 404:
                suggestions.append("Check the path or resource id exists on the site")
            return cls(
                status="error",
                message=error.message,
                errors=error.errors or [error.message],
                suggestions=suggestions,
                metadata={**error.context, "exception_type": type(error).__name__},
            )
        elif isinstance(error, DrupalJsonApiError):
            return cls(
                status="error",
                message=error.message,
                errors=error.errors,
                suggestions=error.suggestions,
                metadata={**error.context, "exception_type": type(error).__name__},
            )
        elif isinstance(error, httpx.RequestError):
            metadata = {"exception_type": type(error).__name__}
            try:
                metadata["url"] = str(error.request.url)
            except RuntimeError:
                pass

            return cls(
                status="error",
                message=f"Network error: {str(error)}",
                errors=[str(error)],
                suggestions=[
                    "Check your internet connection",
                    "Verify the Drupal base URL is correct",
                ],
                metadata=metadata,
            )
        else:
            return cls(
                status="error",
                message=f"Unexpected error: {str(error)}",
                errors=[str(error)],
                suggestions=["Check server logs for detailed information"],
                metadata={"exception_type": type(error).__name__},
            )


# =============================================================================
# AUTH MODELS
# =============================================================================


class AccessToken(BaseModel):
    """OAuth access token as returned by the token endpoint."""

    access_token: str = Field(..., description="Bearer token value")
    token_type: str = Field("Bearer", description="Token type")
    expires_in: int = Field(..., description="Time to live in seconds")
    issued_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the token was received",
    )

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + timedelta(seconds=self.expires_in)

    def is_valid(self, now: datetime | None = None) -> bool:
        """True while ``now`` is strictly before the expiry time."""
        return (now or datetime.now(UTC)) < self.expires_at


# =============================================================================
# REQUEST / ROUTING MODELS
# =============================================================================


class RequestContext(BaseModel):
    """Per-call routing context supplied by the front end.

    ``params`` holds the raw route parameters (``slug`` as a string or list of
    segments). Never stored on the client.
    """

    params: dict[str, Any] = Field(default_factory=dict)
    locale: str | None = None
    default_locale: str | None = None
    locales: list[str] = Field(default_factory=list)
    preview: bool = False
    preview_data: dict[str, Any] = Field(default_factory=dict)


class TranslatedEntity(BaseModel):
    model_config = ConfigDict(extra="allow")

    canonical: str | None = None
    type: str | None = None
    bundle: str | None = None
    id: str | None = None
    uuid: str | None = None
    langcode: str | None = None


class TranslatedJsonApi(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    individual: str | None = None
    resource_name: str | None = Field(None, alias="resourceName")
    path_prefix: str | None = Field(None, alias="pathPrefix")
    base_path: str | None = Field(None, alias="basePath")
    entry_point: str | None = Field(None, alias="entryPoint")


class TranslatedPath(BaseModel):
    """Result of the backend's path-to-route translation."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    resolved: str | None = None
    is_home_path: bool = Field(False, alias="isHomePath")
    entity: TranslatedEntity | None = None
    label: str | None = None
    jsonapi: TranslatedJsonApi | None = None
    redirect: list[dict[str, Any]] | None = None

    @computed_field
    @property
    def resource_type(self) -> str | None:
        """``{entity_kind}--{bundle}`` of the resolved entity."""
        if self.jsonapi and self.jsonapi.resource_name:
            return self.jsonapi.resource_name
        if self.entity and self.entity.type and self.entity.bundle:
            return f"{self.entity.type}--{self.entity.bundle}"
        return None


class StaticPathEntry(BaseModel):
    """A buildable page: slug segments plus an optional locale."""

    params: dict[str, list[str]] = Field(..., description="Route params with 'slug'")
    locale: str | None = Field(None, description="Locale when i18n is in use")

    @property
    def slug(self) -> list[str]:
        return self.params["slug"]
