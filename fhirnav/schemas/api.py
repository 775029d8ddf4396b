"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from fhirnav.models.schema import (
    ChoiceContext,
    ChoiceValidationResult,
    EnhancedTypeInfo,
    NavigationResult,
)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

MAX_PATH_SEGMENTS = 64


class NavigationRequest(BaseModel):
    """Either ``root_type`` + ``path`` or a dotted ``expression``."""
    root_type: str | None = None
    path: list[str] = Field(default_factory=list, max_length=MAX_PATH_SEGMENTS)
    expression: str | None = Field(None, examples=["Patient.name.given"])

    @model_validator(mode="after")
    def _split_expression(self) -> NavigationRequest:
        parts = [part for part in (self.expression or "").split(".") if part]
        if len(parts) - 1 > MAX_PATH_SEGMENTS:
            raise ValueError(f"expression path may have at most {MAX_PATH_SEGMENTS} segments")
        if parts:
            self.root_type, self.path = parts[0], parts[1:]
        if not self.root_type:
            raise ValueError("root_type or expression is required")
        return self


class NavigationResponse(BaseModel):
    is_valid: bool
    navigation_path: list[str]
    final_type: str | None = None
    available_properties: list[str] = []
    errors: list[str] = []
    error_kind: str | None = None

    @classmethod
    def from_result(cls, result: NavigationResult) -> NavigationResponse:
        return cls(
            is_valid=result.is_valid,
            navigation_path=[t.name for t in result.navigation_path],
            final_type=result.final_type.name if result.final_type else None,
            available_properties=result.available_properties,
            errors=result.errors,
            error_kind=result.error_kind.value if result.error_kind else None,
        )


# ---------------------------------------------------------------------------
# Type info
# ---------------------------------------------------------------------------

class ConstraintsResponse(BaseModel):
    cardinality: str
    required: bool
    min_length: int | None = None
    max_length: int | None = None
    fixed: Any = None
    pattern: Any = None


class TerminologyResponse(BaseModel):
    strength: str
    value_set: str | None = None
    description: str | None = None


class EnhancedTypeResponse(BaseModel):
    name: str
    kind: str
    base_type: str | None = None
    properties: list[str]
    hierarchy: list[str]
    constraints: ConstraintsResponse
    terminology: TerminologyResponse
    choice_types: list[str] = []
    hierarchy_error: str | None = None

    @classmethod
    def from_info(cls, info: EnhancedTypeInfo, properties: list[str]) -> EnhancedTypeResponse:
        return cls(
            name=info.type.name,
            kind=info.type.kind,
            base_type=info.type.base_type,
            properties=properties,
            hierarchy=[t.name for t in info.hierarchy],
            constraints=ConstraintsResponse(**vars(info.constraints)),
            terminology=TerminologyResponse(**vars(info.terminology)),
            choice_types=[t.name for t in info.choice_types],
            hierarchy_error=info.hierarchy_error,
        )


class ClassificationResponse(BaseModel):
    type_name: str
    is_primitive: bool
    is_resource: bool
    is_complex: bool
    category: str


# ---------------------------------------------------------------------------
# Choice types
# ---------------------------------------------------------------------------

class ChoiceValidationRequest(BaseModel):
    resource_type: str = Field(..., min_length=1)
    property_name: str = Field(..., min_length=1)


class ChoiceValidationResponse(BaseModel):
    is_valid: bool
    error: str | None = None
    valid_choices: list[str] | None = None
    suggested_property: str | None = None
    error_kind: str | None = None

    @classmethod
    def from_result(cls, result: ChoiceValidationResult) -> ChoiceValidationResponse:
        return cls(
            is_valid=result.is_valid,
            error=result.error,
            valid_choices=result.valid_choices,
            suggested_property=result.suggested_property,
            error_kind=result.error_kind.value if result.error_kind else None,
        )


class ChoiceContextResponse(BaseModel):
    resource_type: str
    base_property: str
    choice_types: list[str]
    available_choices: list[str]

    @classmethod
    def from_context(cls, context: ChoiceContext) -> ChoiceContextResponse:
        return cls(
            resource_type=context.resource_type,
            base_property=context.base_property,
            choice_types=[t.name for t in context.choice_types],
            available_choices=context.available_choices,
        )


class ChoicePropertyParts(BaseModel):
    property_name: str
    is_choice_property: bool
    base_property: str
    choice_type: str


# ---------------------------------------------------------------------------
# Cache and health
# ---------------------------------------------------------------------------

class CacheStatsResponse(BaseModel):
    size: int
    max_size: int
    hits: int = 0
    misses: int = 0


class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    state: str
    details: dict[str, Any] = {}
