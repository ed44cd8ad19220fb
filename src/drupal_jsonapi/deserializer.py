"""Default JSON:API document deserializer."""

import logging
from typing import Any

logger = logging.getLogger("drupal-jsonapi.deserializer")

Resource = dict[str, Any]


class JsonApiDeserializer:
    """Flattens JSON:API compound documents into plain dicts.

    Each resource object becomes ``{"type", "id", **attributes, **relationships}``.
    Relationships are replaced by the matching objects from ``included`` (or
    from primary ``data``) when present, otherwise by bare ``{"type", "id"}``
    identifiers. The same ``(type, id)`` always maps to the same dict, so
    circular relationships produce a cyclic object graph rather than endless
    copies. ``relationshipNames`` lists the relationship keys of each object.

    Any object with a ``deserialize(document, **options)`` method can replace
    this one on the client.
    """

    def deserialize(self, document: dict[str, Any], **options: Any) -> Any:
        """Deserialize a JSON:API document.

        Args:
            document: Parsed JSON:API document with ``data`` and optional ``included``.

        Returns:
            A dict for a single resource, a list for a collection, or None
            when ``data`` is null.
        """
        data = document.get("data")
        if data is None:
            return None

        primary = data if isinstance(data, list) else [data]
        registry: dict[tuple[str, str], Resource] = {}
        raw: dict[tuple[str, str], dict[str, Any]] = {}

        for item in [*primary, *document.get("included", [])]:
            key = (item["type"], item.get("id"))
            raw.setdefault(key, item)
            registry.setdefault(key, self._build_shell(item))

        for key, item in raw.items():
            self._attach_relationships(registry[key], item, registry)

        resources = [registry[(item["type"], item.get("id"))] for item in primary]
        logger.debug(f"Deserialized {len(resources)} resource(s)")
        return resources if isinstance(data, list) else resources[0]

    def _build_shell(self, item: dict[str, Any]) -> Resource:
        resource: Resource = {"type": item["type"], "id": item.get("id")}
        resource.update(item.get("attributes") or {})
        if "links" in item:
            resource["links"] = item["links"]
        if "meta" in item:
            resource["meta"] = item["meta"]
        return resource

    def _attach_relationships(
        self,
        resource: Resource,
        item: dict[str, Any],
        registry: dict[tuple[str, str], Resource],
    ) -> None:
        relationships = item.get("relationships") or {}
        names = []
        for name, relationship in relationships.items():
            if "data" not in relationship:
                continue
            names.append(name)
            linkage = relationship["data"]
            if linkage is None:
                resource[name] = None
            elif isinstance(linkage, list):
                resource[name] = [self._resolve(ref, registry) for ref in linkage]
            else:
                resource[name] = self._resolve(linkage, registry)
        if names:
            resource["relationshipNames"] = names

    def _resolve(
        self, ref: dict[str, Any], registry: dict[tuple[str, str], Resource]
    ) -> Resource:
        found = registry.get((ref["type"], ref.get("id")))
        if found is not None:
            return found
        resource = {"type": ref["type"], "id": ref.get("id")}
        if "meta" in ref:
            resource["meta"] = ref["meta"]
        return resource
