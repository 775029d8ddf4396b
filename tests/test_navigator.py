"""Tests for property path navigation."""

import pytest

from fhirnav.models.errors import ErrorKind
from fhirnav.models.provider import InMemorySchemaProvider
from fhirnav.services.choice import ChoiceTypeResolver
from fhirnav.services.navigator import PropertyPathNavigator, strip_index


def _names(types):
    return [t.name for t in types]


@pytest.mark.parametrize(
    "segment, expected",
    [("name", "name"), ("name[0]", "name"), ("given[ 2 ]", "given"), (" telecom ", "telecom")],
)
def test_strip_index(segment, expected):
    assert strip_index(segment) == expected


@pytest.mark.asyncio
async def test_valid_path(navigator):
    result = await navigator.navigate("Patient", ["name", "given"])
    assert result.is_valid is True
    assert _names(result.navigation_path) == ["Patient", "HumanName", "string"]
    assert result.final_type.name == "string"
    assert result.errors == []
    assert result.error_kind is None


@pytest.mark.asyncio
async def test_empty_path_lands_on_root(navigator):
    result = await navigator.navigate("Patient", [])
    assert result.is_valid is True
    assert result.final_type.name == "Patient"
    assert "birthDate" in result.available_properties
    # inherited from Resource
    assert "meta" in result.available_properties


@pytest.mark.asyncio
async def test_indexed_segments(navigator):
    result = await navigator.navigate("Patient", ["name[0]", "given[1]"])
    assert result.is_valid is True
    assert result.final_type.name == "string"


@pytest.mark.asyncio
async def test_unknown_property(navigator):
    result = await navigator.navigate("Patient", ["invalidProperty"])
    assert result.is_valid is False
    assert result.final_type is None
    assert result.error_kind is ErrorKind.PROPERTY_NOT_FOUND
    assert result.errors[0].startswith("Property 'invalidProperty' not found")
    assert "name" in result.available_properties
    assert _names(result.navigation_path) == ["Patient"]


@pytest.mark.asyncio
async def test_misspelled_property_gets_suggestion(navigator):
    result = await navigator.navigate("Patient", ["nam"])
    assert result.errors == ["Property 'nam' not found. Did you mean 'name'?"]


@pytest.mark.asyncio
async def test_failure_partway_keeps_reachable_prefix(navigator):
    result = await navigator.navigate("Patient", ["name", "famly", "x"])
    assert result.is_valid is False
    assert _names(result.navigation_path) == ["Patient", "HumanName"]
    assert "family" in result.available_properties
    assert result.errors == ["Property 'famly' not found. Did you mean 'family'?"]


@pytest.mark.asyncio
async def test_unknown_root(navigator):
    result = await navigator.navigate("Nope", ["name"])
    assert result.is_valid is False
    assert result.errors == ["Root type 'Nope' not found"]
    assert result.error_kind is ErrorKind.TYPE_NOT_FOUND
    assert result.navigation_path == []


@pytest.mark.asyncio
async def test_missing_target_type():
    provider = InMemorySchemaProvider(
        {"types": {"Thing": {"kind": "complex", "elements": {"ghost": {"type": "Ghost"}}}}}
    )
    navigator = PropertyPathNavigator(provider, ChoiceTypeResolver(provider))
    result = await navigator.navigate("Thing", ["ghost"])
    assert result.is_valid is False
    assert result.errors == ["Target type 'Ghost' for property 'ghost' not found"]
    assert result.error_kind is ErrorKind.TYPE_NOT_FOUND


# ---------------------------------------------------------------------------
# Choice elements
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_choice_element_lists_concrete_names(navigator):
    result = await navigator.navigate("Observation", ["value"])
    assert result.is_valid is True
    assert result.final_type.name == "Observation.value[x]"
    assert "valueQuantity" in result.available_properties
    assert "valueString" in result.available_properties


@pytest.mark.asyncio
@pytest.mark.parametrize("member", ["valueQuantity", "Quantity"])
async def test_step_into_choice_member(navigator, member):
    result = await navigator.navigate("Observation", ["value", member, "unit"])
    assert result.is_valid is True
    assert _names(result.navigation_path) == [
        "Observation",
        "Observation.value[x]",
        "Quantity",
        "string",
    ]


@pytest.mark.asyncio
async def test_concrete_choice_name_on_resource(navigator):
    result = await navigator.navigate("Observation", ["valueQuantity", "unit"])
    assert result.is_valid is True
    assert _names(result.navigation_path) == ["Observation", "Quantity", "string"]


@pytest.mark.asyncio
async def test_pattern_choice_member(navigator):
    result = await navigator.navigate("Patient", ["multipleBirthBoolean"])
    assert result.is_valid is True
    assert result.final_type.name == "boolean"


@pytest.mark.asyncio
async def test_misspelled_choice_name_gets_suggestion(navigator):
    result = await navigator.navigate("Observation", ["valueQuantiy"])
    assert result.is_valid is False
    assert result.errors == ["Property 'valueQuantiy' not found. Did you mean 'valueQuantity'?"]


@pytest.mark.asyncio
async def test_invalid_choice_member(navigator):
    result = await navigator.navigate("Patient", ["deceasedPeriod"])
    assert result.is_valid is False
    assert result.error_kind is ErrorKind.PROPERTY_NOT_FOUND


# ---------------------------------------------------------------------------
# Provider failures
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_provider_failure_on_root(failing_provider):
    provider = failing_provider("Patient")
    navigator = PropertyPathNavigator(provider, ChoiceTypeResolver(provider))
    result = await navigator.navigate("Patient", ["name"])
    assert result.is_valid is False
    assert result.error_kind is ErrorKind.PROVIDER_CALL_FAILED
    assert "backend unavailable for Patient" in result.errors[0]


@pytest.mark.asyncio
async def test_provider_failure_mid_path(failing_provider):
    provider = failing_provider("HumanName")
    navigator = PropertyPathNavigator(provider, ChoiceTypeResolver(provider))
    result = await navigator.navigate("Patient", ["name", "given"])
    assert result.is_valid is False
    assert result.error_kind is ErrorKind.PROVIDER_CALL_FAILED
    assert result.errors[0].startswith("Error navigating property 'name' on type 'Patient'")
    assert _names(result.navigation_path) == ["Patient"]
    assert "name" in result.available_properties
