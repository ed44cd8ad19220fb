"""Menu fetching and tree building."""

import logging
from collections.abc import Mapping, Sequence
from functools import cache
from typing import Any

from .client import DrupalClient
from .exceptions import MenuTreeError
from .url import QueryParams

logger = logging.getLogger("drupal-jsonapi.menu")

MenuItem = dict[str, Any]


def build_menu_tree(
    links: Sequence[Mapping[str, Any]] | None,
    parent: str = "",
    _ancestors: frozenset[str] = frozenset(),
) -> list[MenuItem]:
    """Nest a flat, ordered list of menu links by their ``parent`` reference.

    Each returned node is a copy of the link with an ``items`` list holding
    its own subtree. Order within a level follows the input order.

    Args:
        links: Menu links with ``id`` and ``parent`` (``""`` for root links).
        parent: Id whose children to collect.

    Returns:
        The forest under ``parent``; empty for empty input.

    Raises:
        MenuTreeError: If a link's parent chain loops back to itself. Acyclic
            parent references are a precondition on backend data.
    """
    if not links:
        return []

    tree = []
    for link in links:
        if link.get("parent", "") != parent:
            continue

        link_id = link["id"]
        if link_id in _ancestors:
            raise MenuTreeError(
                f"Menu link '{link_id}' is its own ancestor",
                context={"link_id": link_id, "parent": parent},
            )

        tree.append(
            {
                **link,
                "items": build_menu_tree(links, link_id, _ancestors | {link_id}),
            }
        )
    return tree


class MenuService:
    """Fetches menus exposed by the jsonapi_menu_items module."""

    def __init__(self, client: DrupalClient):
        """Initialize MenuService.

        Args:
            client: DrupalClient instance for API calls.
        """
        self.client = client
        self.config = client.config

    async def get_menu(
        self,
        name: str,
        *,
        locale: str | None = None,
        default_locale: str | None = None,
        params: QueryParams = None,
        with_auth: bool | None = None,
        deserialize: bool = True,
    ) -> dict[str, list]:
        """Fetch a menu as both a flat list and a tree.

        Args:
            name: Machine name of the menu, e.g. ``main``.

        Returns:
            ``{"items": [...], "tree": [...]}``.

        Raises:
            RequestError: For non-success responses.
            MenuTreeError: If the links form a parent cycle.
        """
        locale_prefix = f"/{locale}" if locale and locale != default_locale else ""
        url = self.client.build_url(
            f"{locale_prefix}{self.config.api_prefix}/menu_items/{name}", params
        )

        logger.info(f"Fetching menu {name}")
        document = await self.client.fetch_json(
            url, with_auth=self.client.resolve_with_auth(with_auth)
        )
        items = self.client.deserialize(document) if deserialize else document

        tree = build_menu_tree(items if isinstance(items, list) else [])
        logger.debug(f"Menu {name}: {len(tree)} root item(s)")
        return {"items": items, "tree": tree}


@cache
def get_menu_service() -> MenuService:
    """Get a cached MenuService using the default client."""
    from .client import get_client

    return MenuService(get_client())
