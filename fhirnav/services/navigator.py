"""
Step-by-step navigation of a property path against a root type.

Walks ``Patient.name.given``-style paths one segment at a time, stops at
the first segment that does not resolve and reports what was reachable
up to that point, the properties visible there, and a fuzzy suggestion.
Provider exceptions never escape: they become an invalid result.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from fhirnav.models.errors import ErrorKind
from fhirnav.models.provider import SchemaProvider, resolve_element_type
from fhirnav.models.schema import NavigationResult, SchemaType
from fhirnav.services.choice import ChoiceTypeResolver, choice_base_name
from fhirnav.services.similarity import DEFAULT_THRESHOLD, best_match

logger = logging.getLogger(__name__)

_INDEX_SUFFIX_RE = re.compile(r"\[[^\]]*\]$")


def strip_index(segment: str) -> str:
    """``name[0]`` -> ``name``; indices carry no typing information here."""
    return _INDEX_SUFFIX_RE.sub("", segment.strip())


class PropertyPathNavigator:
    def __init__(
        self,
        provider: SchemaProvider,
        choices: ChoiceTypeResolver,
        similarity_threshold: float = DEFAULT_THRESHOLD,
    ):
        self.provider = provider
        self.choices = choices
        self.similarity_threshold = similarity_threshold

    async def navigate(self, root_type_name: str, path: Sequence[str]) -> NavigationResult:
        result = NavigationResult()

        try:
            root = await self.provider.get_type(root_type_name)
        except Exception as exc:
            logger.warning("Provider failed resolving root type '%s': %s", root_type_name, exc)
            result.errors.append(f"Error resolving root type '{root_type_name}': {exc}")
            result.error_kind = ErrorKind.PROVIDER_CALL_FAILED
            return result
        if root is None:
            result.errors.append(f"Root type '{root_type_name}' not found")
            result.error_kind = ErrorKind.TYPE_NOT_FOUND
            return result

        result.navigation_path.append(root)
        current = root

        for segment in path:
            name = strip_index(segment)
            try:
                target, error = await self._step(current, name)
            except Exception as exc:
                logger.warning(
                    "Provider failed navigating '%s' on '%s': %s", name, current.name, exc
                )
                result.errors.append(
                    f"Error navigating property '{name}' on type '{current.name}': {exc}"
                )
                result.error_kind = ErrorKind.PROVIDER_CALL_FAILED
                result.available_properties = await self.available_properties(current)
                return result

            if target is None:
                result.available_properties = await self.available_properties(current)
                if error is not None:
                    result.errors.append(error)
                    result.error_kind = ErrorKind.TYPE_NOT_FOUND
                else:
                    result.errors.append(
                        await self._not_found_message(current, name, result.available_properties)
                    )
                    result.error_kind = ErrorKind.PROPERTY_NOT_FOUND
                return result

            result.navigation_path.append(target)
            current = target

        result.is_valid = True
        result.final_type = current
        result.available_properties = await self.available_properties(current)
        logger.debug(
            "Navigated %s.%s -> %s", root_type_name, ".".join(path), current.name
        )
        return result

    async def _step(
        self, current: SchemaType, name: str
    ) -> tuple[SchemaType | None, str | None]:
        """Resolve one segment. Returns (target, None) or (None, error-or-None)."""
        if self.choices.is_choice_type(current):
            base = choice_base_name(current.name)
            members = await self.choices.resolve_choice_types(current)
            member_names = self.choices.choice_property_names(base, members)
            for member, choice_name in zip(members, member_names):
                if name in (choice_name, member.name):
                    return member, None

        ref = self.provider.get_element_type(current, name)
        if ref is not None:
            target = await resolve_element_type(self.provider, ref)
            if target is None:
                return None, (
                    f"Target type '{ref.declared_type}' for property '{name}' not found"
                )
            return target, None

        # valueQuantity on Observation: a concrete member of the value[x] element
        if self.choices.is_choice_property_name(name):
            base = self.choices.extract_base_property(name)
            element_type = await self.choices.choice_element(current, base)
            if element_type is not None:
                suffix = self.choices.extract_choice_type_name(name)
                for member in await self.choices.resolve_choice_types(element_type):
                    if member.name[:1].upper() + member.name[1:] == suffix:
                        return member, None

        return None, None

    async def _not_found_message(
        self, current: SchemaType, name: str, available: list[str]
    ) -> str:
        candidates = list(available)
        if self.choices.is_choice_property_name(name):
            base = self.choices.extract_base_property(name)
            try:
                element_type = await self.choices.choice_element(current, base)
                if element_type is not None:
                    members = await self.choices.resolve_choice_types(element_type)
                    candidates.extend(self.choices.choice_property_names(base, members))
            except Exception as exc:
                logger.debug("No choice candidates for '%s': %s", name, exc)

        message = f"Property '{name}' not found"
        suggestion = best_match(name, candidates, self.similarity_threshold)
        if suggestion is not None:
            message += f". Did you mean '{suggestion}'?"
        return message

    async def available_properties(self, schema_type: SchemaType) -> list[str]:
        """Element names of a type; concrete choice names for a choice type."""
        try:
            if self.choices.is_choice_type(schema_type):
                members = await self.choices.resolve_choice_types(schema_type)
                return self.choices.choice_property_names(
                    choice_base_name(schema_type.name), members
                )
            return list(self.provider.get_element_names(schema_type))
        except Exception as exc:
            logger.warning("Could not list properties of '%s': %s", schema_type.name, exc)
            return []
