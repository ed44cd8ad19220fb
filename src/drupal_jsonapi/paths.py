"""Site path helpers and static path generation."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from functools import cache
from typing import Any

from .fetcher import ResourceFetcher
from .models import RequestContext, StaticPathEntry
from .url import QueryParams, to_query_object

logger = logging.getLogger("drupal-jsonapi.paths")


def get_path_from_context(
    context: RequestContext, front_page: str, prefix: str = "/"
) -> str:
    """Build the site path a route context points at.

    Args:
        context: Route context; ``params["slug"]`` may be a string or segments.
        front_page: Path alias used when the slug is empty.
        prefix: Path prefix the route is mounted under.

    Returns:
        Path such as ``/blog/post-1`` or ``/es/blog/post-1`` for a
        non-default locale.
    """
    prefix = prefix if prefix.startswith("/") else f"/{prefix}"

    if context.locale and context.locale != context.default_locale:
        prefix = f"/{context.locale}{prefix}"

    slug = context.params.get("slug")
    if isinstance(slug, list | tuple):
        slug = "/".join(slug)

    if not slug:
        slug = front_page
        prefix = prefix.rstrip("/")

    if not prefix.endswith("/") and not slug.startswith("/"):
        slug = f"/{slug}"

    return f"{prefix}{slug}"


def build_static_paths_params_from_paths(
    paths: Iterable[str], prefix: str | None = None, locale: str | None = None
) -> list[StaticPathEntry]:
    """Split paths into slug segments.

    Leading and trailing slashes are removed, then a leading ``prefix``
    segment, and the rest is split on ``/``.

    >>> build_static_paths_params_from_paths(["blog/post-1"], prefix="/blog")[0].slug
    ['post-1']
    """
    prefix_segment = (prefix or "").strip("/")
    entries = []
    for path in paths:
        path = path.strip("/")
        if prefix_segment and path.startswith(f"{prefix_segment}/"):
            path = path[len(prefix_segment) + 1 :]
        entries.append(StaticPathEntry(params={"slug": path.split("/")}, locale=locale))
    return entries


def build_static_paths_from_resources(
    resources: Iterable[Mapping[str, Any]] | None,
    front_page: str,
    prefix: str | None = None,
    locale: str | None = None,
) -> list[StaticPathEntry]:
    """Map resources carrying a ``path`` attribute to static path entries.

    The front page alias maps to ``/``; resources without an alias are skipped.
    """
    paths = []
    for resource in resources or []:
        alias = (resource.get("path") or {}).get("alias")
        if alias == front_page:
            paths.append("/")
        elif alias:
            paths.append(alias)

    if not paths:
        return []
    return build_static_paths_params_from_paths(paths, prefix=prefix, locale=locale)


class StaticPathBuilder:
    """Enumerates every public path of a set of resource types, per locale."""

    def __init__(self, fetcher: ResourceFetcher):
        """Initialize StaticPathBuilder.

        Args:
            fetcher: ResourceFetcher used for the collection requests.
        """
        self.fetcher = fetcher
        self.client = fetcher.client

    async def get_static_paths_from_context(
        self,
        types: str | list[str],
        context: RequestContext,
        *,
        params: QueryParams = None,
        prefix: str = "/",
        with_auth: bool | None = None,
    ) -> list[StaticPathEntry]:
        """Collect static path entries for ``types``.

        One collection request is issued per type and per locale in
        ``context.locales`` (or one per type without locales), all
        concurrently. A sparse fieldset limits each response to ``path``.

        Args:
            types: Resource type or list of types, e.g. ``node--article``.
            context: Static paths context carrying ``locales`` and ``default_locale``.
            params: Extra query parameters merged over the sparse fieldset.
            prefix: Path prefix stripped from each alias.
            with_auth: Authenticate the requests. Defaults to config.

        Returns:
            Entries in issue order: types first, then locales.

        Raises:
            Any error from a single request fails the whole call and cancels
            the requests still in flight.
        """
        if isinstance(types, str):
            types = [types]

        with_auth = self.client.resolve_with_auth(with_auth)
        locales = context.locales or [None]

        jobs = [
            self._paths_for(
                resource_type,
                locale=locale,
                default_locale=context.default_locale,
                params={
                    f"fields[{resource_type}]": "path",
                    **to_query_object(params),
                },
                prefix=prefix,
                with_auth=with_auth,
            )
            for resource_type in types
            for locale in locales
        ]
        logger.info(f"Fetching static paths for {len(types)} type(s), {len(jobs)} request(s)")

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(job) for job in jobs]
        except ExceptionGroup as failed:
            # first failure; the remaining requests were cancelled
            raise failed.exceptions[0] from None
        entries = [entry for task in tasks for entry in task.result()]
        logger.info(f"Collected {len(entries)} static path(s)")
        return entries

    # Shorter alias
    get_paths_from_context = get_static_paths_from_context

    async def _paths_for(
        self,
        resource_type: str,
        *,
        locale: str | None,
        default_locale: str | None,
        params: dict[str, Any],
        prefix: str,
        with_auth: bool,
    ) -> list[StaticPathEntry]:
        resources = await self.fetcher.get_resource_collection(
            resource_type,
            locale=locale,
            default_locale=default_locale,
            params=params,
            with_auth=with_auth,
        )
        return build_static_paths_from_resources(
            resources, self.client.front_page, prefix=prefix, locale=locale
        )


@cache
def get_static_path_builder() -> StaticPathBuilder:
    """Get a cached StaticPathBuilder sharing the default fetcher."""
    from .fetcher import get_fetcher

    return StaticPathBuilder(get_fetcher())
