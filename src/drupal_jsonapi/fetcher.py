"""Resource and collection fetching."""

import logging
from functools import cache
from typing import Any

from .client import DrupalClient
from .exceptions import RequestError, ResourceTypeNotFoundError
from .models import RequestContext
from .url import QueryParams
from .utils import suggest_similar_strings

logger = logging.getLogger("drupal-jsonapi.fetcher")


def locale_for_request(locale: str | None, default_locale: str | None) -> str | None:
    """The locale to put in URLs: only a non-default one."""
    return locale if locale != default_locale else None


class ResourceFetcher:
    """Fetches single resources, collections, views and search indexes."""

    def __init__(self, client: DrupalClient):
        """Initialize ResourceFetcher.

        Args:
            client: DrupalClient instance for API calls.
        """
        self.client = client
        self.config = client.config

    async def get_index(self, locale: str | None = None) -> dict[str, Any]:
        """Fetch the JSON:API index document.

        The index is public, so it is always fetched without auth.

        Raises:
            RequestError: If the index cannot be fetched.
        """
        path = f"/{locale}{self.config.api_prefix}" if locale else self.config.api_prefix
        url = self.client.build_url(path)

        try:
            return await self.client.fetch_json(url, with_auth=False)
        except RequestError as e:
            raise RequestError(
                f"Failed to fetch JSON:API index at {url} - {e.message}",
                suggestions=["Check the base URL and that the JSON:API module is enabled"],
                context=e.context,
            ) from e

    async def get_entry_for_resource_type(
        self, resource_type: str, locale: str | None = None
    ) -> str:
        """Resolve the collection URL for ``resource_type``.

        Args:
            resource_type: ``{entity_kind}--{bundle}``, e.g. ``node--article``.
            locale: Non-default locale, if any.

        Returns:
            Absolute collection URL.

        Raises:
            RequestError: If the index cannot be fetched.
            ResourceTypeNotFoundError: If the index has no link for the type.
        """
        if self.config.use_default_resource_type_entry:
            entity_kind, _, bundle = resource_type.partition("--")
            entry = f"{locale}/{entity_kind}/{bundle}" if locale else f"{entity_kind}/{bundle}"
            return f"{self.config.api_url}/{entry}"

        index = await self.get_index(locale)
        links = index.get("links") or {}
        link = links.get(resource_type)

        if not link:
            suggestions = suggest_similar_strings(
                resource_type,
                [name for name in links if name != "self"],
                threshold=0.5,
                max_results=3,
            )
            logger.warning(f"Resource type '{resource_type}' not found in index")
            raise ResourceTypeNotFoundError(
                f"Resource of type '{resource_type}' not found.",
                suggestions=[f"Try '{suggestion}' instead" for suggestion in suggestions],
                context={"resource_type": resource_type, "locale": locale},
            )

        return link["href"] if isinstance(link, dict) else link

    async def get_resource(
        self,
        resource_type: str,
        uuid: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        """Fetch a single resource by type and id.

        Returns:
            Deserialized resource dict, or the raw document when
            ``deserialize`` is False.

        Raises:
            RequestError: For non-success responses.
            ResourceTypeNotFoundError: If the type is not in the index.
        """
        api_path = await self.get_entry_for_resource_type(
            resource_type, locale_for_request(locale, default_locale)
        )
        url = self.client.build_url(f"{api_path}/{uuid}", params)

        logger.info(f"Fetching {resource_type} {uuid}")
        document = await self.client.fetch_json(
            url, with_auth=self.client.resolve_with_auth(with_auth)
        )
        return self.client.deserialize(document) if deserialize else document

    async def get_resource_collection(
        self,
        resource_type: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        """Fetch a (filtered, paged) collection of ``resource_type``.

        Returns:
            List of deserialized resources, or the raw document when
            ``deserialize`` is False.
        """
        api_path = await self.get_entry_for_resource_type(
            resource_type, locale_for_request(locale, default_locale)
        )
        url = self.client.build_url(api_path, params)

        logger.info(f"Fetching collection {resource_type}")
        document = await self.client.fetch_json(
            url, with_auth=self.client.resolve_with_auth(with_auth)
        )
        return self.client.deserialize(document) if deserialize else document

    async def get_resource_collection_from_context(
        self,
        resource_type: str,
        context: RequestContext,
        *,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        """get_resource_collection() with locale and preview auth from ``context``."""
        return await self.get_resource_collection(
            resource_type,
            locale=context.locale,
            default_locale=context.default_locale,
            params=params,
            with_auth=context.preview or self.client.resolve_with_auth(with_auth),
            deserialize=deserialize,
        )

    async def get_view(
        self,
        name: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> dict[str, Any]:
        """Fetch a JSON:API view display.

        Args:
            name: ``{view_id}--{display_id}``.

        Returns:
            Dict with ``results``, ``meta`` and ``links``.
        """
        view_id, _, display_id = name.partition("--")
        url = self.client.build_url(
            f"{self._locale_prefix(locale, default_locale)}{self.config.api_prefix}"
            f"/views/{view_id}/{display_id}",
            params,
        )

        logger.info(f"Fetching view {name}")
        document = await self.client.fetch_json(
            url, with_auth=self.client.resolve_with_auth(with_auth)
        )
        return {
            "results": self.client.deserialize(document) if deserialize else document,
            "meta": document.get("meta"),
            "links": document.get("links"),
        }

    async def get_search_index(
        self,
        name: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        """Fetch results from a Search API index exposed over JSON:API."""
        url = self.client.build_url(
            f"{self._locale_prefix(locale, default_locale)}{self.config.api_prefix}"
            f"/index/{name}",
            params,
        )

        logger.info(f"Fetching search index {name}")
        document = await self.client.fetch_json(
            url, with_auth=self.client.resolve_with_auth(with_auth)
        )
        return self.client.deserialize(document) if deserialize else document

    async def get_search_index_from_context(
        self,
        name: str,
        context: RequestContext,
        *,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> Any:
        return await self.get_search_index(
            name,
            locale=context.locale,
            default_locale=context.default_locale,
            params=params,
            with_auth=with_auth,
            deserialize=deserialize,
        )

    @staticmethod
    def _locale_prefix(locale: str | None, default_locale: str | None) -> str:
        return f"/{locale}" if locale and locale != default_locale else ""


@cache
def get_fetcher() -> ResourceFetcher:
    """Get a cached ResourceFetcher using the default client."""
    from .client import get_client

    return ResourceFetcher(get_client())
