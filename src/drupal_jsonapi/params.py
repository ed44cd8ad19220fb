"""JSON:API query parameter builder."""

from typing import Any

FILTER_OPERATORS = frozenset(
    {
        "=",
        "<>",
        ">",
        ">=",
        "<",
        "<=",
        "STARTS_WITH",
        "CONTAINS",
        "ENDS_WITH",
        "IN",
        "NOT IN",
        "BETWEEN",
        "NOT BETWEEN",
        "IS NULL",
        "IS NOT NULL",
    }
)


class JsonApiParams:
    """Builds filter, include, sparse fieldset, sort and paging parameters.

    Methods return ``self`` so calls can be chained::

        params = (
            JsonApiParams()
            .add_filter("status", "1")
            .add_include(["field_image", "uid"])
            .add_fields("node--article", ["title", "path"])
            .add_sort("created", "DESC")
        )

    Implements ``QueryParamsProvider`` so it can be handed to ``build_url``
    and every client operation taking ``params``.
    """

    def __init__(self):
        self._filters: dict[str, Any] = {}
        self._includes: list[str] = []
        self._fields: dict[str, list[str]] = {}
        self._sorts: list[str] = []
        self._page: dict[str, int] = {}
        self._custom: dict[str, Any] = {}
        self._condition_count = 0

    def add_filter(
        self,
        path: str,
        value: Any = None,
        operator: str = "=",
        member_of: str | None = None,
    ) -> "JsonApiParams":
        """Add a filter on ``path``.

        A plain equality filter without a group uses the shorthand
        ``filter[path]=value``; anything else becomes a named condition.

        Raises:
            ValueError: If ``operator`` is not a JSON:API filter operator.
        """
        if operator not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {operator}")

        if operator == "=" and member_of is None and path not in self._filters:
            self._filters[path] = value
            return self

        name = f"{path.replace('.', '_')}_{self._condition_count}"
        self._condition_count += 1

        condition: dict[str, Any] = {"path": path}
        if operator != "=":
            condition["operator"] = operator
        if value is not None:
            condition["value"] = value
        if member_of is not None:
            condition["memberOf"] = member_of

        self._filters[name] = {"condition": condition}
        return self

    def add_group(
        self, name: str, conjunction: str = "AND", member_of: str | None = None
    ) -> "JsonApiParams":
        group: dict[str, Any] = {"conjunction": conjunction}
        if member_of is not None:
            group["memberOf"] = member_of
        self._filters[name] = {"group": group}
        return self

    def add_include(self, fields: str | list[str]) -> "JsonApiParams":
        if isinstance(fields, str):
            fields = [fields]
        for field in fields:
            if field not in self._includes:
                self._includes.append(field)
        return self

    def add_fields(self, resource_type: str, fields: list[str]) -> "JsonApiParams":
        """Restrict ``resource_type`` to a sparse fieldset."""
        self._fields[resource_type] = list(fields)
        return self

    def add_sort(self, path: str, direction: str = "ASC") -> "JsonApiParams":
        self._sorts.append(f"-{path}" if direction.upper() == "DESC" else path)
        return self

    def add_page_limit(self, limit: int) -> "JsonApiParams":
        self._page["limit"] = limit
        return self

    def add_page_offset(self, offset: int) -> "JsonApiParams":
        self._page["offset"] = offset
        return self

    def add_custom_param(self, name: str, value: Any) -> "JsonApiParams":
        self._custom[name] = value
        return self

    def get_query_object(self) -> dict[str, Any]:
        """Nested mapping suitable for bracket query encoding."""
        query: dict[str, Any] = {}
        if self._filters:
            query["filter"] = dict(self._filters)
        if self._includes:
            query["include"] = ",".join(self._includes)
        if self._fields:
            query["fields"] = {
                resource_type: ",".join(fields)
                for resource_type, fields in self._fields.items()
            }
        if self._sorts:
            query["sort"] = ",".join(self._sorts)
        if self._page:
            query["page"] = dict(self._page)
        query.update(self._custom)
        return query

    def __repr__(self) -> str:
        return f"JsonApiParams({self.get_query_object()!r})"
