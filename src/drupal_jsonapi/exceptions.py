"""Drupal JSON:API custom exceptions.

Exception Design Principles:
1. Every failure surfaces to the immediate caller; nothing is logged and dropped
2. Path resolution misses are not errors - they return None
3. Split on domain of actionable information:
   - Recoverable by reconfiguration outside the process (ConfigError)
   - Caused by the backend refusing or failing a call (AuthenticationError,
     RequestError, JsonApiError)
   - Caused by content the caller asked for (ResourceTypeNotFoundError,
     MissingAttributeError, MenuTreeError)
"""


class DrupalJsonApiError(Exception):
    """Base exception for all Drupal JSON:API errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize DrupalJsonApiError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(DrupalJsonApiError):
    """Client configuration errors - recoverable by user reconfiguration.

    - Missing base URL
    - Client-credentials auth missing its id or secret
    - An operation requiring auth when none is configured
    """

    pass


class AuthenticationError(DrupalJsonApiError):
    """The OAuth token endpoint refused to issue an access token."""

    pass


class RequestError(DrupalJsonApiError):
    """A non-success HTTP response from the backend.

    The message is derived from the response body (plain JSON ``message``,
    JSON:API ``errors``) or falls back to the HTTP reason phrase. The status
    code and URL are kept in ``context``.
    """

    @property
    def status_code(self) -> int | None:
        return self.context.get("status_code")


class JsonApiError(DrupalJsonApiError):
    """A response body carrying a JSON:API ``errors`` array."""

    pass


class ResourceTypeNotFoundError(DrupalJsonApiError):
    """The JSON:API index has no entry for the requested resource type."""

    pass


class MissingAttributeError(DrupalJsonApiError):
    """An entity lacks an attribute it is expected to carry (e.g. ``path``)."""

    pass


class MenuTreeError(DrupalJsonApiError):
    """Menu links whose parent chain loops back on itself."""

    pass
