"""
FHIR choice (``value[x]``) detection and resolution.

A choice element is described by one of three representations, tried in
this order until one yields at least one concrete type:

1. UnionChoices      - explicit member SchemaTypes
2. LegacyChoiceNames - member type names looked up through the provider
3. naming pattern    - a type name ending in ``[x]``, matched against
                       COMMON_CHOICE_TYPES

Concrete data names the member by suffixing its capitalized type name to
the base element (``value`` + ``Quantity`` -> ``valueQuantity``).
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from fhirnav.models.errors import ErrorKind
from fhirnav.models.provider import SchemaProvider, resolve_element_type
from fhirnav.models.schema import (
    ChoiceContext,
    ChoiceValidationResult,
    LegacyChoiceNames,
    SchemaType,
    UnionChoices,
)
from fhirnav.schemas.fhir import FHIR_PRIMITIVE_TYPES
from fhirnav.services.similarity import DEFAULT_THRESHOLD, best_match

logger = logging.getLogger(__name__)

COMMON_CHOICE_TYPES: dict[str, tuple[str, ...]] = {
    "value": (
        "string",
        "integer",
        "decimal",
        "boolean",
        "date",
        "dateTime",
        "time",
        "Quantity",
        "CodeableConcept",
        "Coding",
        "Period",
        "Range",
        "Ratio",
        "SampledData",
        "Attachment",
    ),
    "deceased": ("boolean", "dateTime"),
    "multipleBirth": ("boolean", "integer"),
    "onset": ("dateTime", "Age", "Period", "Range", "string"),
    "abatement": ("dateTime", "Age", "Period", "Range", "string", "boolean"),
    "occurrence": ("dateTime", "Period", "Timing"),
    "performed": ("dateTime", "Period", "string", "Age", "Range"),
    "effective": ("dateTime", "Period", "Timing", "instant"),
    "bodySite": ("CodeableConcept", "Reference"),
}
DEFAULT_CHOICE_TYPES = ("string", "integer", "boolean", "dateTime", "Quantity", "CodeableConcept")

# Multi-word bases that the plain lowercase-prefix split would cut short
KNOWN_CHOICE_BASES = (
    "multipleBirth",
    "effective",
    "deceased",
    "onset",
    "abatement",
    "occurrence",
    "performed",
    "value",
    "bodySite",
)

_CHOICE_NAME_RE = re.compile(r"^([a-z]+)([A-Z]\w+)$")
_CHOICE_SUFFIX_RE = re.compile(r"^[A-Z]\w+$")
_CHOICE_EXPRESSION_RE = re.compile(r"^(\w+)\.(\w+)$")


def choice_base_name(type_name: str) -> str:
    """``Observation.value[x]`` -> ``value``."""
    element = type_name.rsplit(".", 1)[-1]
    return element[: -len("[x]")] if element.endswith("[x]") else element


def common_choice_types(type_name: str) -> tuple[str, ...]:
    if not type_name.endswith("[x]"):
        return ()
    return COMMON_CHOICE_TYPES.get(choice_base_name(type_name), DEFAULT_CHOICE_TYPES)


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


class ChoiceTypeResolver:
    def __init__(
        self,
        provider: SchemaProvider,
        similarity_threshold: float = DEFAULT_THRESHOLD,
    ):
        self.provider = provider
        self.similarity_threshold = similarity_threshold

    # -----------------------------------------------------------------------
    # Detection and resolution
    # -----------------------------------------------------------------------

    @staticmethod
    def is_choice_type(schema_type: SchemaType) -> bool:
        descriptor = schema_type.polymorphism
        if isinstance(descriptor, UnionChoices) and descriptor.choices:
            return True
        if isinstance(descriptor, LegacyChoiceNames) and descriptor.type_names:
            return True
        return schema_type.name.endswith("[x]")

    async def resolve_choice_types(
        self, schema_type: SchemaType, target_type_name: str | None = None
    ) -> list[SchemaType]:
        """
        Concrete member types of a choice type, optionally narrowed to the
        member named ``target_type_name``. A non-choice type resolves to
        itself. Provider failures yield an empty list.
        """
        try:
            return await self.resolve_members(schema_type, target_type_name)
        except Exception as exc:
            logger.warning("Failed to resolve choice types for '%s': %s", schema_type.name, exc)
            return []

    async def resolve_members(
        self, schema_type: SchemaType, target_type_name: str | None = None
    ) -> list[SchemaType]:
        """resolve_choice_types without the safety net: provider errors propagate."""
        if not self.is_choice_type(schema_type):
            return [schema_type]

        tiers = (self._from_union, self._from_legacy_names, self._from_naming_pattern)
        for tier in tiers:
            resolved = await tier(schema_type, target_type_name)
            if resolved:
                logger.debug(
                    "Resolved %s via %s: %s",
                    schema_type.name,
                    tier.__name__,
                    [t.name for t in resolved],
                )
                return resolved
        return []

    async def _from_union(
        self, schema_type: SchemaType, target: str | None
    ) -> list[SchemaType]:
        descriptor = schema_type.polymorphism
        if not isinstance(descriptor, UnionChoices):
            return []
        return [
            self.provider.resolve_of_type(schema_type, member.name) or member
            for member in descriptor.choices
            if target is None or member.name == target
        ]

    async def _from_legacy_names(
        self, schema_type: SchemaType, target: str | None
    ) -> list[SchemaType]:
        descriptor = schema_type.polymorphism
        if not isinstance(descriptor, LegacyChoiceNames):
            return []
        return await self._lookup(descriptor.type_names, target)

    async def _from_naming_pattern(
        self, schema_type: SchemaType, target: str | None
    ) -> list[SchemaType]:
        return await self._lookup(common_choice_types(schema_type.name), target)

    async def _lookup(self, names: Iterable[str], target: str | None) -> list[SchemaType]:
        resolved: list[SchemaType] = []
        seen: set[str] = set()
        for name in names:
            if name in seen or (target is not None and name != target):
                continue
            seen.add(name)
            member = await self.provider.get_type(name)
            if member is None and name in FHIR_PRIMITIVE_TYPES:
                member = SchemaType(name=name, kind="primitive")
            if member is None:
                logger.debug("Choice member type '%s' not known to provider", name)
                continue
            resolved.append(member)
        return resolved

    async def choice_element(self, schema_type: SchemaType, base: str) -> SchemaType | None:
        """The choice type behind element ``base`` of ``schema_type``, if it is one."""
        ref = self.provider.get_element_type(schema_type, base)
        if ref is None:
            return None
        element_type = await resolve_element_type(self.provider, ref)
        if element_type is None or not self.is_choice_type(element_type):
            return None
        return element_type

    # -----------------------------------------------------------------------
    # Choice property names
    # -----------------------------------------------------------------------

    @staticmethod
    def choice_property_names(base_property: str, choices: Iterable[SchemaType]) -> list[str]:
        return [base_property + _capitalize(choice.name or "") for choice in choices]

    @staticmethod
    def is_choice_property_name(name: str) -> bool:
        return _CHOICE_NAME_RE.match(name) is not None

    @staticmethod
    def extract_base_property(name: str) -> str:
        match = _CHOICE_NAME_RE.match(name)
        if match is None:
            return name
        for base in KNOWN_CHOICE_BASES:
            if name.startswith(base) and _CHOICE_SUFFIX_RE.match(name[len(base):]):
                return base
        return match.group(1)

    @classmethod
    def extract_choice_type_name(cls, name: str) -> str:
        base = cls.extract_base_property(name)
        if base == name:
            return ""
        return name[len(base):]

    # -----------------------------------------------------------------------
    # Validation and context detection
    # -----------------------------------------------------------------------

    async def validate_choice_property(
        self, resource_type: str, property_name: str
    ) -> ChoiceValidationResult:
        if not self.is_choice_property_name(property_name):
            return ChoiceValidationResult(is_valid=True)

        try:
            schema_type = await self.provider.get_type(resource_type)
            if schema_type is None:
                return ChoiceValidationResult(
                    is_valid=False,
                    error=f"Resource type '{resource_type}' not found",
                    error_kind=ErrorKind.TYPE_NOT_FOUND,
                )

            # birthDate, managingOrganization, ... are plain elements
            direct = self.provider.get_element_type(schema_type, property_name)
            if direct is not None:
                return ChoiceValidationResult(is_valid=True)

            base = self.extract_base_property(property_name)
            element_type = await self.choice_element(schema_type, base)
            if element_type is None:
                return ChoiceValidationResult(
                    is_valid=False,
                    error=f"{base} is not a choice type",
                    error_kind=ErrorKind.CHOICE_TYPE_INVALID,
                )

            choices = await self.resolve_choice_types(element_type)
            valid_choices = self.choice_property_names(base, choices)
            if property_name in valid_choices:
                return ChoiceValidationResult(is_valid=True, valid_choices=valid_choices)

            suffix = self.extract_choice_type_name(property_name)
            return ChoiceValidationResult(
                is_valid=False,
                error=f"'{suffix}' is not a valid choice for '{base}'",
                valid_choices=valid_choices,
                suggested_property=best_match(
                    property_name, valid_choices, self.similarity_threshold
                ),
                error_kind=ErrorKind.CHOICE_TYPE_INVALID,
            )
        except Exception as exc:
            logger.warning(
                "Choice validation of %s.%s failed: %s", resource_type, property_name, exc
            )
            return ChoiceValidationResult(
                is_valid=False,
                error=f"Validation error: {exc}",
                error_kind=ErrorKind.PROVIDER_CALL_FAILED,
            )

    async def detect_choice_context(self, expression_prefix: str) -> ChoiceContext | None:
        match = _CHOICE_EXPRESSION_RE.match(expression_prefix.strip())
        if match is None:
            return None
        resource_type, base = match.groups()

        try:
            schema_type = await self.provider.get_type(resource_type)
            if schema_type is None:
                return None
            element_type = await self.choice_element(schema_type, base)
            if element_type is None:
                return None
            choice_types = await self.resolve_choice_types(element_type)
        except Exception as exc:
            logger.warning("Choice context detection for '%s' failed: %s", expression_prefix, exc)
            return None

        return ChoiceContext(
            base_property=base,
            resource_type=resource_type,
            choice_types=choice_types,
            available_choices=self.choice_property_names(base, choice_types),
        )
