"""
FastAPI routes exposing the type navigation service.

Thin adapters only: every route delegates to TypeNavigationService and
converts its dataclass results into the Pydantic response models.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from fhirnav.api.dependencies import get_navigation_service
from fhirnav.config import settings
from fhirnav.models.errors import ServiceNotInitializedError
from fhirnav.schemas.api import (
    CacheStatsResponse,
    ChoiceContextResponse,
    ChoicePropertyParts,
    ChoiceValidationRequest,
    ChoiceValidationResponse,
    ClassificationResponse,
    EnhancedTypeResponse,
    HealthResponse,
    NavigationRequest,
    NavigationResponse,
)
from fhirnav.services.type_navigation import TypeNavigationService

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
async def health_check(service: TypeNavigationService = Depends(get_navigation_service)):
    """Re-probes the sentinel type; 503 when the service is not usable."""
    try:
        health = await service.get_health_status()
    except ServiceNotInitializedError:
        body = HealthResponse(
            status="unavailable",
            environment=settings.ENVIRONMENT,
            state=service.state.value,
            details={
                "initialized": False,
                "error": service.last_error,
                "error_kind": service.last_error_kind.value if service.last_error_kind else None,
            },
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    body = HealthResponse(
        status="healthy" if health.healthy else "degraded",
        environment=settings.ENVIRONMENT,
        state=service.state.value,
        details=health.details,
    )
    if not health.healthy:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@router.get("/types/{type_name}", response_model=EnhancedTypeResponse)
async def get_type_info(
    type_name: str, service: TypeNavigationService = Depends(get_navigation_service)
):
    info = await service.get_enhanced_type_info(type_name)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Type '{type_name}' not found")
    listing = await service.navigate_property_path(type_name, [])
    return EnhancedTypeResponse.from_info(info, listing.available_properties)


@router.get("/types/{type_name}/classification", response_model=ClassificationResponse)
async def classify_type(
    type_name: str, service: TypeNavigationService = Depends(get_navigation_service)
):
    classification = await service.get_type_classification(type_name)
    return ClassificationResponse(type_name=type_name, **vars(classification))


@router.post("/navigate", response_model=NavigationResponse)
async def navigate(
    request: NavigationRequest,
    service: TypeNavigationService = Depends(get_navigation_service),
):
    """Invalid paths are a normal 200 response with ``is_valid`` false."""
    result = await service.navigate_property_path(request.root_type, request.path)
    return NavigationResponse.from_result(result)


# ---------------------------------------------------------------------------
# Choice types
# ---------------------------------------------------------------------------

@router.post("/choices/validate", response_model=ChoiceValidationResponse)
async def validate_choice(
    request: ChoiceValidationRequest,
    service: TypeNavigationService = Depends(get_navigation_service),
):
    result = await service.validate_choice_property(request.resource_type, request.property_name)
    return ChoiceValidationResponse.from_result(result)


@router.get("/choices/context", response_model=ChoiceContextResponse)
async def choice_context(
    expression: str = Query(..., examples=["Observation.value"]),
    service: TypeNavigationService = Depends(get_navigation_service),
):
    context = await service.detect_choice_context(expression)
    if context is None:
        raise HTTPException(
            status_code=404, detail=f"'{expression}' does not name a choice element"
        )
    return ChoiceContextResponse.from_context(context)


@router.get("/choices/parse/{property_name}", response_model=ChoicePropertyParts)
def parse_choice_property(
    property_name: str, service: TypeNavigationService = Depends(get_navigation_service)
):
    return ChoicePropertyParts(
        property_name=property_name,
        is_choice_property=service.is_choice_property(property_name),
        base_property=service.extract_base_property(property_name),
        choice_type=service.extract_choice_type(property_name),
    )


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@router.get("/cache/stats", response_model=CacheStatsResponse)
def cache_stats(service: TypeNavigationService = Depends(get_navigation_service)):
    return CacheStatsResponse(**service.cache_stats())


@router.delete("/cache", response_model=CacheStatsResponse)
def clear_cache(service: TypeNavigationService = Depends(get_navigation_service)):
    service.clear_cache()
    logger.info("Cache cleared via API")
    return CacheStatsResponse(**service.cache_stats())
