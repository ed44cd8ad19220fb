"""URL composition with bracket-nested query encoding.

JSON:API filters, sparse fieldsets and includes are hierarchical, so query
parameters are flattened the way ``qs`` does it on the JavaScript side:

    {"filter": {"status": 1}}        -> filter%5Bstatus%5D=1
    {"include": ["uid", "image"]}    -> include%5B0%5D=uid&include%5B1%5D=image
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from .protocols import QueryParamsProvider

QueryParams = Mapping[str, Any] | QueryParamsProvider | str | None


def _flatten(prefix: str, value: Any) -> list[tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        pairs = []
        for key, item in value.items():
            pairs.extend(_flatten(f"{prefix}[{key}]", item))
        return pairs
    if isinstance(value, list | tuple):
        pairs = []
        for index, item in enumerate(value):
            pairs.extend(_flatten(f"{prefix}[{index}]", item))
        return pairs
    if isinstance(value, bool):
        return [(prefix, "true" if value else "false")]
    return [(prefix, str(value))]


def to_query_object(params: QueryParams) -> dict[str, Any]:
    """Return ``params`` as a plain mapping, flattening parameter objects."""
    if params is None:
        return {}
    if isinstance(params, QueryParamsProvider):
        return dict(params.get_query_object())
    if isinstance(params, str):
        return dict(httpx.QueryParams(params))
    return dict(params)


def stringify(params: QueryParams) -> str:
    """Encode ``params`` as a query string using bracket notation.

    Keys already containing brackets (``"filter[status]"``) are encoded as is.
    ``None`` values are dropped; booleans become ``true``/``false``.
    """
    if isinstance(params, str):
        return params.lstrip("?")

    pairs: list[tuple[str, str]] = []
    for key, value in to_query_object(params).items():
        pairs.extend(_flatten(str(key), value))
    return urlencode(pairs)


def build_url(base_url: str, path: str, params: QueryParams = None) -> httpx.URL:
    """Compose an absolute URL.

    Args:
        base_url: Site base URL, used when ``path`` starts with ``/``.
        path: Site-relative path or an absolute URL.
        params: Query parameters (mapping, parameter object or encoded string).

    Returns:
        httpx.URL with the encoded query attached.
    """
    url = f"{base_url}{path}" if path.startswith("/") else path

    query = stringify(params) if params else ""
    if query:
        url = f"{url}{'&' if '?' in url else '?'}{query}"

    return httpx.URL(url)
