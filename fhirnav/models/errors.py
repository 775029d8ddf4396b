"""
Error taxonomy for the type navigation engine.

Only the two initialization errors are fatal. Everything else is reported
through ``error_kind`` on a result object so one broken schema entry never
destabilizes later calls.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fhirnav.models.schema import SchemaType


class ErrorKind(str, Enum):
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    INITIALIZATION_PROBE_FAILED = "initialization_probe_failed"
    TYPE_NOT_FOUND = "type_not_found"
    PROPERTY_NOT_FOUND = "property_not_found"
    CHOICE_TYPE_INVALID = "choice_type_invalid"
    PROVIDER_CALL_FAILED = "provider_call_failed"


class NavigationServiceError(Exception):
    """Base class for every error raised by fhirnav."""


class ServiceNotInitializedError(NavigationServiceError):
    def __init__(self, operation: str):
        super().__init__(
            f"TypeNavigationService not initialized (called {operation}). "
            "Call initialize() first."
        )
        self.operation = operation


class ProviderUnavailableError(NavigationServiceError):
    kind = ErrorKind.PROVIDER_UNAVAILABLE

    def __init__(self) -> None:
        super().__init__("provider is null or undefined")


class InitializationProbeFailedError(NavigationServiceError):
    kind = ErrorKind.INITIALIZATION_PROBE_FAILED

    def __init__(self, cause: str):
        super().__init__(f"provider validation failed: {cause}")
        self.cause = cause


class HierarchyError(ValueError, NavigationServiceError):
    """The base-type walk could not finish. ``partial`` holds what was built."""

    def __init__(self, message: str, type_name: str, partial: list[SchemaType]):
        super().__init__(message)
        self.type_name = type_name
        self.partial = partial


class HierarchyCycleError(HierarchyError):
    def __init__(self, type_name: str, partial: list[SchemaType]):
        super().__init__(
            f"cycle detected in type hierarchy for '{type_name}'", type_name, partial
        )


class HierarchyDepthError(HierarchyError):
    def __init__(self, type_name: str, max_depth: int, partial: list[SchemaType]):
        super().__init__(
            f"type hierarchy for '{type_name}' exceeds maximum depth {max_depth}",
            type_name,
            partial,
        )
        self.max_depth = max_depth


class SchemaBundleError(ValueError, NavigationServiceError):
    """A schema bundle failed JSON Schema validation."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid schema bundle: " + "; ".join(errors))
        self.errors = errors
