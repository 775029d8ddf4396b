from fastapi import Request

from fhirnav.config import settings
from fhirnav.models.provider import InMemorySchemaProvider, load_schema_bundle
from fhirnav.services.type_navigation import TypeNavigationService


def build_navigation_service() -> TypeNavigationService:
    """Provider from SCHEMA_BUNDLE_PATH (or the packaged bundle), wrapped in a fresh service."""
    if settings.SCHEMA_BUNDLE_PATH:
        provider = load_schema_bundle(settings.SCHEMA_BUNDLE_PATH)
    else:
        provider = InMemorySchemaProvider()
    return TypeNavigationService(provider)


def get_navigation_service(request: Request) -> TypeNavigationService:
    """FastAPI dependency that returns the app's service instance."""
    return request.app.state.navigation
