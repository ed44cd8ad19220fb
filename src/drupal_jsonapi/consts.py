"""High-value constants for the Drupal JSON:API package."""

# Package metadata
PACKAGE_VERSION = "0.3.0"
SERVER_NAME = "drupal-jsonapi"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
DEFAULT_API_PREFIX = "/jsonapi"
DEFAULT_FRONT_PAGE = "/home"
DEFAULT_AUTH_URL_PATH = "/oauth/token"  # simple_oauth
TRANSLATE_PATH_URL_PATH = "/router/translate-path"
SUBREQUESTS_URL_PATH = "/subrequests"

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"
JSON_MEDIA_TYPE = "application/json"

# See https://jsonapi.org/format/#content-negotiation
DEFAULT_HEADERS = {
    "Content-Type": JSONAPI_MEDIA_TYPE,
    "Accept": JSONAPI_MEDIA_TYPE,
}

# Business logic consts
LATEST_RESOURCE_VERSION = "rel:latest-version"
VERSIONABLE_TYPE_PREFIX = "node--"
ROUTER_REQUEST_ID = "router"
RESOLVED_RESOURCE_REQUEST_ID = "resolvedResource"
PREVIEW_COOKIE_NAME = "preview_data"
