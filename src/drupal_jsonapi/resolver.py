"""Path to resource resolution over subrequests."""

import json
import logging
from functools import cache
from typing import Any
from urllib.parse import quote

from .client import DrupalClient, format_jsonapi_errors
from .consts import (
    JSONAPI_MEDIA_TYPE,
    LATEST_RESOURCE_VERSION,
    RESOLVED_RESOURCE_REQUEST_ID,
    ROUTER_REQUEST_ID,
    SUBREQUESTS_URL_PATH,
    TRANSLATE_PATH_URL_PATH,
    VERSIONABLE_TYPE_PREFIX,
)
from .exceptions import JsonApiError, MissingAttributeError, RequestError
from .models import RequestContext, TranslatedPath
from .paths import get_path_from_context
from .url import QueryParams, stringify, to_query_object

logger = logging.getLogger("drupal-jsonapi.resolver")


class ResourceResolver:
    """Resolves public site paths to JSON:API resources.

    Translating the path and fetching the resource go out as one subrequests
    batch, so every page resolution costs a single round trip.
    """

    def __init__(self, client: DrupalClient):
        """Initialize ResourceResolver.

        Args:
            client: DrupalClient instance for API calls.
        """
        self.client = client
        self.config = client.config

    def build_subrequests_payload(
        self, path: str, resource_params: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Batch translating ``path`` and fetching whatever it points at."""
        query = stringify(resource_params)
        return [
            {
                "requestId": ROUTER_REQUEST_ID,
                "action": "view",
                "uri": f"{TRANSLATE_PATH_URL_PATH}?path={quote(path, safe='/')}&_format=json",
                "headers": {"Accept": JSONAPI_MEDIA_TYPE},
            },
            {
                "requestId": RESOLVED_RESOURCE_REQUEST_ID,
                "action": "view",
                "uri": f"{{{{{ROUTER_REQUEST_ID}.body@$.jsonapi.individual}}}}?{query}",
                "waitFor": [ROUTER_REQUEST_ID],
            },
        ]

    async def get_resource_by_path(
        self,
        path: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        params: QueryParams = None,
        is_versionable: bool = False,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        """Resolve ``path`` to the resource it points at.

        Args:
            path: Site path, e.g. ``/about`` or ``/es/about``.
            locale: Requested locale.
            default_locale: Site default locale.
            params: Query parameters for the resource request.
            is_versionable: Request ``resourceVersion`` (latest by default).
            with_auth: Authenticate the batch. Defaults to config.
            deserialize: Return a plain resource dict instead of the document.

        Returns:
            The resource, or None when the path does not resolve to an entity.

        Raises:
            RequestError: For a non-success batch response, when the router
                reports an error message, or when the resolved body is not JSON.
            JsonApiError: When the resolved resource body carries ``errors``.
        """
        if not path:
            return None

        if locale and default_locale and path.strip("/").split("/", 1)[0] != locale:
            slug = [] if path == "/" else [path.lstrip("/")]
            path = get_path_from_context(
                RequestContext(
                    params={"slug": slug},
                    locale=locale,
                    default_locale=default_locale,
                ),
                self.config.front_page,
            )

        resource_params = to_query_object(params)
        resource_version = resource_params.pop("resourceVersion", None)
        if resource_version:
            is_versionable = True
        if is_versionable:
            resource_params["resourceVersion"] = resource_version or LATEST_RESOURCE_VERSION

        payload = self.build_subrequests_payload(path, resource_params)

        subrequests_path = SUBREQUESTS_URL_PATH
        if locale and default_locale and locale != default_locale:
            subrequests_path = f"/{locale}{SUBREQUESTS_URL_PATH}"

        url = self.client.build_url(subrequests_path, {"_format": "json"})

        logger.info(f"Resolving path {path}")
        batch = await self.client.fetch_json(
            url,
            method="POST",
            content=json.dumps(payload),
            with_auth=self.client.resolve_with_auth(with_auth),
        )

        resolved = (batch or {}).get(f"{RESOLVED_RESOURCE_REQUEST_ID}#uri{{0}}") or {}
        if not resolved.get("body"):
            router = (batch or {}).get(ROUTER_REQUEST_ID) or {}
            if router.get("body"):
                try:
                    error = json.loads(router["body"])
                except ValueError:
                    error = None
                if isinstance(error, dict) and error.get("message"):
                    raise RequestError(
                        error["message"],
                        context={"path": path, "status_code": _status(router)},
                    )
            logger.info(f"Path {path} did not resolve to a resource")
            return None

        try:
            data = json.loads(resolved["body"])
        except ValueError as e:
            raise RequestError(
                "The resolved resource response is not valid JSON",
                context={"path": path, "status_code": _status(resolved)},
            ) from e
        if data.get("errors"):
            raise JsonApiError(
                format_jsonapi_errors(data["errors"]),
                errors=[e.get("detail") or e.get("title", "") for e in data["errors"]],
                context={"path": path, "status_code": _status(resolved)},
            )

        return self.client.deserialize(data) if deserialize else data

    async def get_resource_from_context(
        self,
        resource_type: str,
        context: RequestContext,
        *,
        prefix: str = "/",
        params: QueryParams = None,
        is_versionable: bool | None = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        """Resolve the resource a route context points at.

        Node types are versionable by default. A ``resourceVersion`` stored
        in ``context.preview_data`` is sent unless ``params`` overrides it,
        and preview requests are always authenticated.
        """
        if is_versionable is None:
            is_versionable = resource_type.startswith(VERSIONABLE_TYPE_PREFIX)

        path = get_path_from_context(context, self.config.front_page, prefix=prefix)

        return await self.get_resource_by_path(
            path,
            locale=context.locale,
            default_locale=context.default_locale,
            params={
                "resourceVersion": context.preview_data.get("resourceVersion"),
                **to_query_object(params),
            },
            is_versionable=is_versionable,
            with_auth=context.preview or self.client.resolve_with_auth(with_auth),
            deserialize=deserialize,
        )

    async def translate_path(
        self, path: str, *, with_auth: bool | None = None
    ) -> TranslatedPath | None:
        """Translate ``path`` to its route metadata; None when it does not exist."""
        url = self.client.build_url(TRANSLATE_PATH_URL_PATH, {"path": path})

        try:
            data = await self.client.fetch_json(
                url, with_auth=self.client.resolve_with_auth(with_auth)
            )
        except RequestError as e:
            if e.status_code == 404:
                logger.info(f"Path {path} not found")
                return None
            raise

        return TranslatedPath.model_validate(data)

    async def translate_path_from_context(
        self,
        context: RequestContext,
        *,
        prefix: str = "/",
        with_auth: bool | None = None,
    ) -> TranslatedPath | None:
        path = get_path_from_context(context, self.config.front_page, prefix=prefix)
        return await self.translate_path(
            path, with_auth=context.preview or self.client.resolve_with_auth(with_auth)
        )

    async def get_resource_preview_url(
        self,
        slug: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        is_versionable: bool = False,
    ) -> str | None:
        """Front-end URL to preview the entity at ``slug``.

        Returns:
            The path alias, prefixed with the entity langcode when the entity
            is a translation; None when the slug does not resolve.

        Raises:
            MissingAttributeError: If the entity has no ``path`` attribute.
        """
        entity = await self.get_resource_by_path(
            slug,
            locale=locale,
            default_locale=default_locale,
            is_versionable=is_versionable,
            with_auth=True,
        )

        if not entity:
            return None

        path = entity.get("path")
        if not path:
            raise MissingAttributeError(
                f"The path attribute is missing for entity type {entity.get('type')}",
                suggestions=["Enable the path field for this entity type"],
                context={"type": entity.get("type"), "id": entity.get("id")},
            )

        if entity.get("default_langcode"):
            return path["alias"]
        return f"/{path['langcode']}{path['alias']}"


def _status(subresponse: dict[str, Any]) -> int | None:
    status = (subresponse.get("headers") or {}).get("status")
    if isinstance(status, list) and status:
        status = status[0]
    try:
        return int(status)
    except (TypeError, ValueError):
        return None


@cache
def get_resolver() -> ResourceResolver:
    """Get a cached ResourceResolver using the default client."""
    from .client import get_client

    return ResourceResolver(get_client())
