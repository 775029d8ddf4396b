"""
Data model shared by the provider boundary and the navigation engine.

SchemaType instances belong to the provider and are treated as immutable
snapshots. Everything else here is derived per call (results) or cached
per type name (EnhancedTypeInfo).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

from fhirnav.models.errors import ErrorKind

BindingStrength = Literal["required", "extensible", "preferred", "example"]
TypeCategory = Literal["primitive", "complex", "resource"]


# ---------------------------------------------------------------------------
# Provider-owned schema types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropertyRef:
    name: str
    declared_type: str
    cardinality_hint: str | None = None
    binding_strength: str | None = None


@dataclass(frozen=True)
class UnionChoices:
    """Explicit list of candidate member types (the ``isUnion`` form)."""

    choices: tuple[SchemaType, ...] = ()


@dataclass(frozen=True)
class LegacyChoiceNames:
    """Older providers only list the member type names."""

    type_names: tuple[str, ...] = ()


ChoiceDescriptor = Union[UnionChoices, LegacyChoiceNames]


@dataclass(frozen=True)
class SchemaType:
    """A named type as seen by the schema provider."""

    name: str
    properties: Mapping[str, PropertyRef] = field(default_factory=dict)
    base_type: str | None = None
    polymorphism: ChoiceDescriptor | None = None
    kind: str = "complex"
    abstract: bool = False
    # Raw constraint hints (cardinality, min, minLength, binding, ...)
    metadata: Mapping[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@dataclass
class Constraints:
    cardinality: str = "0..*"
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    fixed: Any = None
    pattern: Any = None


@dataclass
class TerminologyBinding:
    strength: BindingStrength = "example"
    value_set: str | None = None
    description: str | None = None


@dataclass
class EnhancedTypeInfo:
    type: SchemaType
    hierarchy: list[SchemaType]
    constraints: Constraints
    terminology: TerminologyBinding
    choice_types: list[SchemaType]
    hierarchy_error: str | None = None


@dataclass
class NavigationResult:
    is_valid: bool = False
    navigation_path: list[SchemaType] = field(default_factory=list)
    final_type: SchemaType | None = None
    available_properties: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    error_kind: ErrorKind | None = None


@dataclass
class ChoiceValidationResult:
    is_valid: bool
    error: str | None = None
    valid_choices: list[str] | None = None
    suggested_property: str | None = None
    error_kind: ErrorKind | None = None


@dataclass
class ChoiceContext:
    base_property: str
    resource_type: str
    choice_types: list[SchemaType]
    available_choices: list[str]


@dataclass
class TypeClassification:
    is_primitive: bool
    is_resource: bool
    is_complex: bool
    category: TypeCategory


@dataclass
class HealthStatus:
    healthy: bool
    details: dict[str, Any] = field(default_factory=dict)
