"""
TypeNavigationService - the façade consumed by diagnostics, hover,
semantic-token and refactoring components.

Lifecycle:
    UNINITIALIZED -> INITIALIZING -> READY
    UNINITIALIZED -> FAILED          (provider missing or sentinel probe failed)

Once READY the service stays READY; individual call failures are reported
in their results and never change state. Every public operation raises
ServiceNotInitializedError before READY.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Sequence

from fhirnav.config import settings
from fhirnav.models.errors import (
    ErrorKind,
    HierarchyError,
    InitializationProbeFailedError,
    ProviderUnavailableError,
    ServiceNotInitializedError,
)
from fhirnav.models.provider import SchemaProvider
from fhirnav.models.schema import (
    ChoiceContext,
    ChoiceValidationResult,
    EnhancedTypeInfo,
    HealthStatus,
    NavigationResult,
    SchemaType,
    TypeClassification,
)
from fhirnav.schemas.fhir import FHIR_PRIMITIVE_TYPES
from fhirnav.services.cache import EnhancedTypeCache
from fhirnav.services.choice import ChoiceTypeResolver
from fhirnav.services.constraints import extract_constraints, extract_terminology
from fhirnav.services.hierarchy import TypeHierarchyBuilder
from fhirnav.services.navigator import PropertyPathNavigator

logger = logging.getLogger(__name__)


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class TypeNavigationService:
    """Type hierarchy, path navigation and choice resolution over one provider."""

    def __init__(
        self,
        provider: SchemaProvider | None,
        *,
        sentinel_type: str | None = None,
        cache_max_size: int | None = None,
        cache_ttl_seconds: float | None = None,
        max_hierarchy_depth: int | None = None,
        similarity_threshold: float | None = None,
    ):
        self.provider = provider
        self.sentinel_type = sentinel_type or settings.SENTINEL_TYPE
        self.cache_max_size = cache_max_size or settings.TYPE_CACHE_MAX_SIZE
        self.cache_ttl_seconds = (
            settings.TYPE_CACHE_TTL_SECONDS if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self.max_hierarchy_depth = max_hierarchy_depth or settings.MAX_HIERARCHY_DEPTH
        self.similarity_threshold = (
            settings.SIMILARITY_THRESHOLD if similarity_threshold is None else similarity_threshold
        )

        self.state = ServiceState.UNINITIALIZED
        self.last_error: str | None = None
        self.last_error_kind: ErrorKind | None = None
        self._cache: EnhancedTypeCache | None = None
        self._hierarchy: TypeHierarchyBuilder | None = None
        self._choices: ChoiceTypeResolver | None = None
        self._navigator: PropertyPathNavigator | None = None

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self.state == ServiceState.READY

    async def initialize(self) -> None:
        if self.state == ServiceState.READY:
            logger.warning("TypeNavigationService already initialized")
            return

        if self.provider is None:
            raise self._failed(ProviderUnavailableError())

        self.state = ServiceState.INITIALIZING
        logger.info("Initializing TypeNavigationService (sentinel '%s')", self.sentinel_type)
        try:
            probe = await self.provider.get_type(self.sentinel_type)
        except Exception as exc:
            raise self._failed(InitializationProbeFailedError(str(exc))) from exc
        if probe is None:
            raise self._failed(
                InitializationProbeFailedError(
                    f"sentinel type '{self.sentinel_type}' could not be resolved"
                )
            )

        self._hierarchy = TypeHierarchyBuilder(self.provider, self.max_hierarchy_depth)
        self._choices = ChoiceTypeResolver(self.provider, self.similarity_threshold)
        self._navigator = PropertyPathNavigator(
            self.provider, self._choices, self.similarity_threshold
        )
        self._cache = EnhancedTypeCache(self.cache_max_size, self.cache_ttl_seconds)
        self.last_error = None
        self.last_error_kind = None
        self.state = ServiceState.READY
        logger.info("TypeNavigationService ready")

    def _failed(self, error: Exception) -> Exception:
        self.state = ServiceState.FAILED
        self.last_error = str(error)
        self.last_error_kind = getattr(error, "kind", None)
        logger.error("TypeNavigationService initialization failed: %s", error)
        return error

    def _require_ready(self, operation: str) -> None:
        if self.state != ServiceState.READY:
            raise ServiceNotInitializedError(operation)

    # -----------------------------------------------------------------------
    # Enhanced type info
    # -----------------------------------------------------------------------

    async def get_enhanced_type_info(
        self, type_name: str, context_key: str | None = None
    ) -> EnhancedTypeInfo | None:
        self._require_ready("get_enhanced_type_info")

        cached = self._cache.get(type_name, context_key)
        if cached is not None:
            logger.debug("Enhanced type info for '%s' served from cache", type_name)
            return cached

        try:
            schema_type = await self.provider.get_type(type_name)
        except Exception as exc:
            logger.warning("Provider failed resolving '%s': %s", type_name, exc)
            return None
        if schema_type is None:
            logger.debug("Type '%s' not found", type_name)
            return None

        # Cycles and depth overflow are properties of the schema and may be
        # cached; results cut short by a provider failure may not.
        hierarchy_error = None
        try:
            hierarchy, complete = await self._hierarchy.walk(schema_type)
        except HierarchyError as exc:
            logger.warning("%s", exc)
            hierarchy, complete = exc.partial, True
            hierarchy_error = str(exc)

        choice_types: list[SchemaType] = []
        if self._choices.is_choice_type(schema_type):
            try:
                choice_types = await self._choices.resolve_members(schema_type)
            except Exception as exc:
                logger.warning("Failed to resolve choice types for '%s': %s", type_name, exc)
                complete = False

        enhanced = EnhancedTypeInfo(
            type=schema_type,
            hierarchy=hierarchy,
            constraints=extract_constraints(schema_type),
            terminology=extract_terminology(schema_type),
            choice_types=choice_types,
            hierarchy_error=hierarchy_error,
        )
        if complete:
            self._cache.put(type_name, enhanced, context_key)
        else:
            logger.debug("Not caching incomplete type info for '%s'", type_name)
        logger.debug(
            "Enhanced type info for '%s': %d ancestors, %d choice types",
            type_name,
            len(hierarchy) - 1,
            len(choice_types),
        )
        return enhanced

    def clear_cache(self) -> None:
        self._require_ready("clear_cache")
        self._cache.clear()
        logger.info("Enhanced type cache cleared")

    def cache_stats(self) -> dict:
        self._require_ready("cache_stats")
        return self._cache.stats()

    # -----------------------------------------------------------------------
    # Navigation and choice types
    # -----------------------------------------------------------------------

    async def navigate_property_path(
        self, root_type: str, path: Sequence[str]
    ) -> NavigationResult:
        self._require_ready("navigate_property_path")
        return await self._navigator.navigate(root_type, path)

    async def resolve_choice_types(
        self, schema_type: SchemaType, target_type_name: str | None = None
    ) -> list[SchemaType]:
        self._require_ready("resolve_choice_types")
        return await self._choices.resolve_choice_types(schema_type, target_type_name)

    async def validate_choice_property(
        self, resource_type: str, property_name: str
    ) -> ChoiceValidationResult:
        self._require_ready("validate_choice_property")
        return await self._choices.validate_choice_property(resource_type, property_name)

    async def detect_choice_context(self, expression_prefix: str) -> ChoiceContext | None:
        self._require_ready("detect_choice_context")
        return await self._choices.detect_choice_context(expression_prefix)

    def get_choice_property_names(
        self, base_property: str, choice_types: Iterable[SchemaType]
    ) -> list[str]:
        self._require_ready("get_choice_property_names")
        return self._choices.choice_property_names(base_property, choice_types)

    def is_choice_property(self, property_name: str) -> bool:
        self._require_ready("is_choice_property")
        return self._choices.is_choice_property_name(property_name)

    def extract_base_property(self, property_name: str) -> str:
        self._require_ready("extract_base_property")
        return self._choices.extract_base_property(property_name)

    def extract_choice_type(self, property_name: str) -> str:
        self._require_ready("extract_choice_type")
        return self._choices.extract_choice_type_name(property_name)

    # -----------------------------------------------------------------------
    # Classification and health
    # -----------------------------------------------------------------------

    async def get_type_classification(self, type_name: str) -> TypeClassification:
        self._require_ready("get_type_classification")

        is_primitive = type_name in FHIR_PRIMITIVE_TYPES
        is_resource = False
        if not is_primitive and not type_name.endswith("[x]"):
            try:
                is_resource = type_name in set(await self.provider.get_all_resource_types())
            except Exception as exc:
                logger.warning("Could not list resource types: %s", exc)

        if is_primitive:
            category = "primitive"
        elif is_resource:
            category = "resource"
        else:
            category = "complex"
        return TypeClassification(
            is_primitive=is_primitive,
            is_resource=is_resource,
            is_complex=category == "complex",
            category=category,
        )

    async def get_health_status(self) -> HealthStatus:
        self._require_ready("get_health_status")

        details = {
            "initialized": self.is_initialized,
            "provider_available": self.provider is not None,
            "sample_resolution_ok": False,
        }
        try:
            probe = await self.provider.get_type(self.sentinel_type)
            details["sample_resolution_ok"] = probe is not None
        except Exception as exc:
            details["error"] = str(exc)
        return HealthStatus(healthy=details["sample_resolution_ok"], details=details)
