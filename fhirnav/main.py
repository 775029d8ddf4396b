"""
FastAPI application entrypoint.

Run locally:  uvicorn fhirnav.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fhirnav.api.dependencies import build_navigation_service
from fhirnav.api.routes import router
from fhirnav.config import settings
from fhirnav.models.errors import NavigationServiceError, ServiceNotInitializedError
from fhirnav.services.type_navigation import TypeNavigationService

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="FHIR Type Navigation API",
    description=(
        "Type hierarchies, constraint metadata, property-path navigation and "
        "choice-type (value[x]) resolution for FHIRPath editor tooling."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")


@app.exception_handler(ServiceNotInitializedError)
async def not_initialized_handler(request: Request, exc: ServiceNotInitializedError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.on_event("startup")
async def on_startup():
    try:
        service = build_navigation_service()
    except (OSError, ValueError) as exc:
        logger.error("Could not load schema bundle: %s", exc)
        service = TypeNavigationService(None)
    app.state.navigation = service
    try:
        await service.initialize()
    except NavigationServiceError as exc:
        # Stay up so /health can report the failure
        logger.error("Type navigation unavailable: %s", exc)
