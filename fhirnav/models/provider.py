"""
Schema provider boundary.

The engine only ever talks to a provider through the five methods of
SchemaProvider. InMemorySchemaProvider is the bundled implementation: it
indexes a validated schema bundle (see fhirnav.schemas.fhir) and exposes
choice elements such as ``Observation.value[x]`` as a property ``value``
whose declared type is a synthetic choice type of the same name.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from fhirnav.models.errors import SchemaBundleError
from fhirnav.models.schema import (
    ChoiceDescriptor,
    LegacyChoiceNames,
    PropertyRef,
    SchemaType,
    UnionChoices,
)
from fhirnav.schemas.fhir import FHIR_CORE_BUNDLE, FHIR_PRIMITIVE_TYPES
from fhirnav.services.validation import validate_schema_bundle

logger = logging.getLogger(__name__)

_METADATA_KEYS = (
    "cardinality",
    "min",
    "required",
    "minLength",
    "maxLength",
    "fixed",
    "pattern",
    "binding",
)


@runtime_checkable
class SchemaProvider(Protocol):
    async def get_type(self, name: str) -> SchemaType | None: ...

    async def get_all_resource_types(self) -> list[str]: ...

    def get_element_names(self, schema_type: SchemaType) -> list[str]: ...

    def get_element_type(
        self, schema_type: SchemaType, element_name: str
    ) -> PropertyRef | None: ...

    def resolve_of_type(
        self, schema_type: SchemaType, target_type_name: str
    ) -> SchemaType | None: ...


async def resolve_element_type(
    provider: SchemaProvider, ref: PropertyRef
) -> SchemaType | None:
    """Look up the declared type of a property, synthesizing bare primitives."""
    target = await provider.get_type(ref.declared_type)
    if target is None and ref.declared_type in FHIR_PRIMITIVE_TYPES:
        return SchemaType(name=ref.declared_type, kind="primitive")
    return target


class InMemorySchemaProvider:
    """Serves types from a schema bundle held in memory."""

    def __init__(self, bundle: dict[str, Any] | None = None, *, validate: bool = True):
        bundle = FHIR_CORE_BUNDLE if bundle is None else bundle
        if validate:
            validate_schema_bundle(bundle)
        self._types: dict[str, SchemaType] = {}
        self._build(bundle["types"])
        logger.info("Schema provider loaded %d types", len(self._types))

    # -----------------------------------------------------------------------
    # Bundle indexing
    # -----------------------------------------------------------------------

    def _build(self, definitions: dict[str, dict[str, Any]]) -> None:
        pending_choices: list[tuple[str, dict[str, Any]]] = []

        for type_name, definition in definitions.items():
            properties: dict[str, PropertyRef] = {}
            for key, element in definition.get("elements", {}).items():
                binding = element.get("binding", {}).get("strength")
                if key.endswith("[x]"):
                    base = key[: -len("[x]")]
                    choice_type_name = f"{type_name}.{key}"
                    pending_choices.append((choice_type_name, element))
                    properties[base] = PropertyRef(
                        name=base,
                        declared_type=choice_type_name,
                        cardinality_hint=element.get("cardinality", "0..1"),
                        binding_strength=binding,
                    )
                    continue
                if "type" not in element:
                    raise SchemaBundleError(
                        [f"types/{type_name}/elements/{key}: element has no type"]
                    )
                properties[key] = PropertyRef(
                    name=key,
                    declared_type=element["type"],
                    cardinality_hint=element.get("cardinality"),
                    binding_strength=binding,
                )

            self._types[type_name] = SchemaType(
                name=type_name,
                properties=properties,
                base_type=definition.get("baseType"),
                kind=definition.get("kind", "complex"),
                abstract=definition.get("abstract", False),
                metadata={k: definition[k] for k in _METADATA_KEYS if k in definition},
            )

        # Union members need the named types above to exist first
        for choice_type_name, element in pending_choices:
            polymorphism: ChoiceDescriptor | None = None
            if "union" in element:
                polymorphism = UnionChoices(
                    tuple(self._types.get(n) or SchemaType(name=n) for n in element["union"])
                )
            elif "choices" in element:
                polymorphism = LegacyChoiceNames(tuple(element["choices"]))
            self._types[choice_type_name] = SchemaType(
                name=choice_type_name, kind="choice", polymorphism=polymorphism
            )

    def _chain(self, schema_type: SchemaType) -> list[SchemaType]:
        """The type followed by its registered bases, stopping on any repeat."""
        chain = [schema_type]
        seen = {schema_type.name}
        base_name = schema_type.base_type
        while base_name and base_name not in seen:
            base = self._types.get(base_name)
            if base is None:
                break
            chain.append(base)
            seen.add(base_name)
            base_name = base.base_type
        return chain

    # -----------------------------------------------------------------------
    # SchemaProvider
    # -----------------------------------------------------------------------

    async def get_type(self, name: str) -> SchemaType | None:
        return self._types.get(name)

    async def get_all_resource_types(self) -> list[str]:
        return [
            name
            for name, schema_type in self._types.items()
            if schema_type.kind == "resource" and not schema_type.abstract
        ]

    def get_element_names(self, schema_type: SchemaType) -> list[str]:
        names: list[str] = []
        for level in self._chain(schema_type):
            names.extend(name for name in level.properties if name not in names)
        return names

    def get_element_type(
        self, schema_type: SchemaType, element_name: str
    ) -> PropertyRef | None:
        for level in self._chain(schema_type):
            if element_name in level.properties:
                return level.properties[element_name]
        return None

    def resolve_of_type(
        self, schema_type: SchemaType, target_type_name: str
    ) -> SchemaType | None:
        descriptor = schema_type.polymorphism
        if isinstance(descriptor, UnionChoices):
            for member in descriptor.choices:
                if member.name == target_type_name:
                    return self._types.get(target_type_name, member)
            return None
        if isinstance(descriptor, LegacyChoiceNames):
            if target_type_name in descriptor.type_names:
                return self._types.get(target_type_name)
            return None
        if schema_type.name == target_type_name:
            return schema_type
        return None


def load_schema_bundle(path: str | Path) -> InMemorySchemaProvider:
    """Build a provider from a JSON schema bundle on disk."""
    with open(path, encoding="utf-8") as handle:
        bundle = json.load(handle)
    logger.info("Loading schema bundle from %s", path)
    return InMemorySchemaProvider(bundle)
