"""Tests for base-type chain walking, including the cycle and depth guards."""

import pytest

from fhirnav.models.errors import HierarchyCycleError, HierarchyDepthError
from fhirnav.models.provider import InMemorySchemaProvider
from fhirnav.models.schema import SchemaType
from fhirnav.services.hierarchy import TypeHierarchyBuilder


def _names(types):
    return [t.name for t in types]


@pytest.mark.asyncio
async def test_resource_hierarchy(provider):
    patient = await provider.get_type("Patient")
    hierarchy = await TypeHierarchyBuilder(provider).build_hierarchy(patient)
    assert _names(hierarchy) == ["Patient", "DomainResource", "Resource"]
    assert hierarchy[0] is patient


@pytest.mark.asyncio
async def test_data_type_hierarchy(provider):
    age = await provider.get_type("Age")
    hierarchy = await TypeHierarchyBuilder(provider).build_hierarchy(age)
    assert _names(hierarchy) == ["Age", "Quantity", "Element"]


@pytest.mark.asyncio
async def test_primitive_has_no_bases(provider):
    string = await provider.get_type("string")
    assert _names(await TypeHierarchyBuilder(provider).build_hierarchy(string)) == ["string"]


@pytest.mark.asyncio
async def test_missing_base_type_terminates(provider):
    orphan = SchemaType(name="Orphan", base_type="DoesNotExist")
    assert _names(await TypeHierarchyBuilder(provider).build_hierarchy(orphan)) == ["Orphan"]


@pytest.mark.asyncio
async def test_cycle_is_detected(cyclic_provider):
    patient = await cyclic_provider.get_type("Patient")
    builder = TypeHierarchyBuilder(cyclic_provider)

    with pytest.raises(HierarchyCycleError, match="cycle detected in type hierarchy for 'Patient'") as info:
        await builder.build_hierarchy(patient)
    assert _names(info.value.partial) == ["Patient", "Alpha", "Beta"]


@pytest.mark.asyncio
async def test_self_reference_is_a_cycle(provider):
    looped = SchemaType(name="Loop", base_type="Loop")
    with pytest.raises(HierarchyCycleError) as info:
        await TypeHierarchyBuilder(provider).build_hierarchy(looped)
    assert _names(info.value.partial) == ["Loop"]


@pytest.mark.asyncio
async def test_depth_cap():
    chain = {
        "types": {f"T{i}": {"kind": "complex", "baseType": f"T{i + 1}"} for i in range(10)}
    }
    provider = InMemorySchemaProvider(chain)
    root = await provider.get_type("T0")

    with pytest.raises(HierarchyDepthError, match="exceeds maximum depth 3") as info:
        await TypeHierarchyBuilder(provider, max_depth=3).build_hierarchy(root)
    assert _names(info.value.partial) == ["T0", "T1", "T2"]


@pytest.mark.asyncio
async def test_provider_failure_returns_partial_hierarchy(provider, failing_provider):
    failing = failing_provider("Resource")
    patient = await provider.get_type("Patient")
    hierarchy = await TypeHierarchyBuilder(failing).build_hierarchy(patient)
    assert _names(hierarchy) == ["Patient", "DomainResource"]


@pytest.mark.asyncio
async def test_walk_reports_whether_it_finished(provider, failing_provider):
    patient = await provider.get_type("Patient")

    hierarchy, complete = await TypeHierarchyBuilder(provider).walk(patient)
    assert complete is True
    assert _names(hierarchy) == ["Patient", "DomainResource", "Resource"]

    hierarchy, complete = await TypeHierarchyBuilder(failing_provider("Resource")).walk(patient)
    assert complete is False
    assert _names(hierarchy) == ["Patient", "DomainResource"]

    orphan = SchemaType(name="Orphan", base_type="DoesNotExist")
    assert (await TypeHierarchyBuilder(provider).walk(orphan))[1] is True
