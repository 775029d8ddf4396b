"""Shared fixtures: the packaged FHIR provider plus a few instrumented wrappers."""

from collections import Counter

import pytest
import pytest_asyncio

from fhirnav.models.provider import InMemorySchemaProvider
from fhirnav.services.choice import ChoiceTypeResolver
from fhirnav.services.navigator import PropertyPathNavigator
from fhirnav.services.type_navigation import TypeNavigationService

CYCLIC_BUNDLE = {
    "types": {
        "Patient": {"kind": "resource", "baseType": "Alpha"},
        "Alpha": {"kind": "complex", "baseType": "Beta"},
        "Beta": {"kind": "complex", "baseType": "Alpha"},
    }
}


class CountingProvider:
    """Delegates to another provider and counts get_type calls per name."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = Counter()

    async def get_type(self, name):
        self.calls[name] += 1
        return await self.inner.get_type(name)

    async def get_all_resource_types(self):
        return await self.inner.get_all_resource_types()

    def get_element_names(self, schema_type):
        return self.inner.get_element_names(schema_type)

    def get_element_type(self, schema_type, element_name):
        return self.inner.get_element_type(schema_type, element_name)

    def resolve_of_type(self, schema_type, target_type_name):
        return self.inner.resolve_of_type(schema_type, target_type_name)


class FailingProvider(CountingProvider):
    """Raises from get_type for any name in ``fail_on`` (mutable at runtime)."""

    def __init__(self, inner, fail_on=()):
        super().__init__(inner)
        self.fail_on = set(fail_on)

    async def get_type(self, name):
        if name in self.fail_on:
            raise RuntimeError(f"backend unavailable for {name}")
        return await super().get_type(name)


@pytest.fixture
def provider():
    return InMemorySchemaProvider()


@pytest.fixture
def choices(provider):
    return ChoiceTypeResolver(provider)


@pytest.fixture
def navigator(provider, choices):
    return PropertyPathNavigator(provider, choices)


@pytest_asyncio.fixture
async def service(provider):
    svc = TypeNavigationService(provider, cache_ttl_seconds=0)
    await svc.initialize()
    return svc


@pytest.fixture
def cyclic_provider():
    return InMemorySchemaProvider(CYCLIC_BUNDLE)


@pytest.fixture
def counting_provider(provider):
    return CountingProvider(provider)


@pytest.fixture
def failing_provider(provider):
    """Factory: ``failing_provider("HumanName")`` fails lookups of HumanName."""

    def make(*names):
        return FailingProvider(provider, fail_on=names)

    return make
