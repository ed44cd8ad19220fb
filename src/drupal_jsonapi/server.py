"""Drupal JSON:API MCP server implementation."""

import logging

from mcp.server.fastmcp import FastMCP

from .config import get_config, setup_logging
from .consts import SERVER_NAME
from .fetcher import get_fetcher
from .menu import get_menu_service
from .models import RequestContext, Response
from .paths import get_static_path_builder
from .resolver import get_resolver
from .resources import register_resources

logger = logging.getLogger("drupal-jsonapi.server")

mcp = FastMCP(
    name=SERVER_NAME,
    instructions="""
    Drupal JSON:API MCP server.

    This MCP server allows you to:
    1. Resolve a public site path to the content it displays.
    2. Fetch content resources, collections and menus from a headless Drupal site.
    3. List every page of a content type, per language.
    """,
    log_level=get_config().log_level,
)

register_resources(mcp, get_config())


@mcp.tool()
async def resolve_path(
    path: str,
    locale: str | None = None,
    default_locale: str | None = None,
    resource_version: str | None = None,
) -> Response:
    """Resolve a site path (e.g. '/about') to the content entity it shows.

    Path translation and the resource fetch go out as one batched request.

    Args:
        path: Site path, starting with '/'
        locale: Requested language, e.g. 'es'
        default_locale: Site default language, e.g. 'en'
        resource_version: Revision to load, e.g. 'rel:latest-version'

    Returns:
        The deserialized resource, or a success response with no data when
        the path does not point at any entity.
    """
    logger.info(f"Resolving path: {path}")

    try:
        resource = await get_resolver().get_resource_by_path(
            path,
            locale=locale,
            default_locale=default_locale,
            params={"resourceVersion": resource_version},
        )

        if resource is None:
            return Response(
                status="success",
                message=f"Path '{path}' does not resolve to any content",
                suggestions=["Check the path alias, or use translate_path"],
                metadata={"path": path, "found": False},
            )

        return Response(
            status="success",
            message=f"Path '{path}' resolved to {resource.get('type')} {resource.get('id')}",
            data=resource,
            metadata={"path": path, "found": True, "type": resource.get("type")},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def translate_path(path: str) -> Response:
    """Look up the route metadata for a site path without loading the content.

    Args:
        path: Site path, starting with '/'

    Returns:
        Entity type, bundle, uuid and the JSON:API URL of the resource.
    """
    logger.info(f"Translating path: {path}")

    try:
        translated = await get_resolver().translate_path(path)
        if translated is None:
            return Response(
                status="success",
                message=f"Path '{path}' not found",
                metadata={"path": path, "found": False},
            )
        return Response(
            status="success",
            message=f"Path '{path}' is {translated.resource_type}",
            data=translated.model_dump(by_alias=True),
            suggestions=["Use get_resource with the uuid to load the entity"],
            metadata={"path": path, "found": True},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def get_resource(
    resource_type: str,
    uuid: str,
    locale: str | None = None,
    default_locale: str | None = None,
    include: str | None = None,
) -> Response:
    """Fetch one content resource by type and id.

    Args:
        resource_type: JSON:API type, e.g. 'node--article'
        uuid: Entity uuid
        locale: Requested language
        default_locale: Site default language
        include: Comma separated relationships to embed, e.g. 'field_image,uid'
    """
    logger.info(f"Fetching {resource_type} {uuid}")

    try:
        resource = await get_fetcher().get_resource(
            resource_type,
            uuid,
            locale=locale,
            default_locale=default_locale,
            params={"include": include},
        )
        return Response(
            status="success",
            message=f"Fetched {resource_type} {uuid}",
            data=resource,
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def get_resource_collection(
    resource_type: str,
    locale: str | None = None,
    default_locale: str | None = None,
    filters: dict[str, str] | None = None,
    sort: str | None = None,
    limit: int | None = None,
) -> Response:
    """Fetch a filtered, paged collection of content resources.

    Args:
        resource_type: JSON:API type, e.g. 'node--article'
        locale: Requested language
        default_locale: Site default language
        filters: Field to value equality filters, e.g. {'status': '1'}
        sort: Sort expression, e.g. '-created'
        limit: Page size
    """
    logger.info(f"Fetching collection {resource_type}")

    try:
        resources = await get_fetcher().get_resource_collection(
            resource_type,
            locale=locale,
            default_locale=default_locale,
            params={"filter": filters, "sort": sort, "page": {"limit": limit}},
        )
        return Response(
            status="success",
            message=f"Fetched {len(resources or [])} {resource_type} resource(s)",
            data=resources,
            metadata={"count": len(resources or [])},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def get_menu(
    name: str, locale: str | None = None, default_locale: str | None = None
) -> Response:
    """Fetch a menu as a flat list and as a nested tree.

    Args:
        name: Menu machine name, e.g. 'main' or 'footer'
        locale: Requested language
        default_locale: Site default language
    """
    logger.info(f"Fetching menu {name}")

    try:
        menu = await get_menu_service().get_menu(
            name, locale=locale, default_locale=default_locale
        )
        return Response(
            status="success",
            message=f"Menu '{name}' has {len(menu['items'] or [])} link(s)",
            data=menu,
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def get_static_paths(
    resource_types: list[str],
    locales: list[str] | None = None,
    default_locale: str | None = None,
    prefix: str = "/",
) -> Response:
    """List every page path of the given content types, per language.

    Args:
        resource_types: JSON:API types, e.g. ['node--page', 'node--article']
        locales: Site languages; omit for a monolingual site
        default_locale: Site default language
        prefix: Path prefix to strip from each alias
    """
    logger.info(f"Collecting static paths for {resource_types}")

    try:
        entries = await get_static_path_builder().get_static_paths_from_context(
            resource_types,
            RequestContext(locales=locales or [], default_locale=default_locale),
            prefix=prefix,
        )
        return Response(
            status="success",
            message=f"Collected {len(entries)} path(s)",
            data=[entry.model_dump(exclude_none=True) for entry in entries],
            metadata={"count": len(entries)},
        )
    except Exception as e:
        return Response.from_error(e)


def main() -> None:
    """Run the MCP server."""
    config = get_config()
    setup_logging(config.log_level)
    logger.info(f"Starting {SERVER_NAME} server for {config.base_url}")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
