"""Base-type chain walking."""

from __future__ import annotations

import logging

from fhirnav.models.errors import HierarchyCycleError, HierarchyDepthError
from fhirnav.models.provider import SchemaProvider
from fhirnav.models.schema import SchemaType

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


class TypeHierarchyBuilder:
    """
    Walks ``base_type`` links through the provider.

    The walk is bounded twice: a visited-name set turns a cyclic schema into
    HierarchyCycleError, and ``max_depth`` caps pathological but acyclic
    chains with HierarchyDepthError. Both errors carry the partial hierarchy.
    A provider failure mid-walk is not an error here; the partial hierarchy
    is returned instead.
    """

    def __init__(self, provider: SchemaProvider, max_depth: int = DEFAULT_MAX_DEPTH):
        self.provider = provider
        self.max_depth = max_depth

    async def build_hierarchy(self, schema_type: SchemaType) -> list[SchemaType]:
        hierarchy, _ = await self.walk(schema_type)
        return hierarchy

    async def walk(self, schema_type: SchemaType) -> tuple[list[SchemaType], bool]:
        """
        Like build_hierarchy, but also reports whether the walk finished.
        ``complete`` is False only when the provider raised mid-walk, so the
        result may differ once the provider recovers.
        """
        hierarchy = [schema_type]
        visited = {schema_type.name}
        current = schema_type

        while current.base_type:
            base_name = current.base_type
            if base_name in visited:
                raise HierarchyCycleError(schema_type.name, hierarchy)
            if len(hierarchy) >= self.max_depth:
                raise HierarchyDepthError(schema_type.name, self.max_depth, hierarchy)

            try:
                base = await self.provider.get_type(base_name)
            except Exception as exc:
                logger.warning(
                    "Stopping hierarchy for '%s' at '%s': provider failed: %s",
                    schema_type.name,
                    base_name,
                    exc,
                )
                return hierarchy, False
            if base is None:
                logger.debug("Base type '%s' of '%s' not found", base_name, current.name)
                break

            hierarchy.append(base)
            visited.add(base_name)
            current = base

        return hierarchy, True
