"""Tests for schema bundle validation and the in-memory provider."""

import json

import pytest

from fhirnav.models.errors import SchemaBundleError
from fhirnav.models.provider import (
    InMemorySchemaProvider,
    SchemaProvider,
    load_schema_bundle,
    resolve_element_type,
)
from fhirnav.models.schema import LegacyChoiceNames, PropertyRef, UnionChoices
from fhirnav.schemas.fhir import FHIR_CORE_BUNDLE, SCHEMA_BUNDLE_SCHEMA
from fhirnav.services.validation import validate_against_schema


# ---------------------------------------------------------------------------
# Bundle validation
# ---------------------------------------------------------------------------


def test_packaged_bundle_is_valid():
    assert validate_against_schema(FHIR_CORE_BUNDLE, SCHEMA_BUNDLE_SCHEMA) == []


def test_missing_types_key():
    errors = validate_against_schema({}, SCHEMA_BUNDLE_SCHEMA)
    assert any("types" in e for e in errors)


def test_errors_are_prefixed_with_path():
    bundle = {
        "types": {
            "Thing": {
                "kind": "widget",
                "elements": {"size": {"type": "integer", "cardinality": "lots"}},
            }
        }
    }
    errors = validate_against_schema(bundle, SCHEMA_BUNDLE_SCHEMA)
    assert any(e.startswith("types/Thing/kind:") for e in errors)
    assert any(e.startswith("types/Thing/elements/size/cardinality:") for e in errors)


def test_invalid_bundle_is_rejected():
    with pytest.raises(SchemaBundleError, match="Invalid schema bundle"):
        InMemorySchemaProvider({"types": {"Thing": {"unknownKey": True}}})


def test_element_without_type_is_rejected():
    with pytest.raises(SchemaBundleError, match="element has no type"):
        InMemorySchemaProvider({"types": {"Thing": {"elements": {"size": {}}}}})


def test_load_schema_bundle(tmp_path):
    path = tmp_path / "bundle.json"
    path.write_text(
        json.dumps({"types": {"Widget": {"kind": "resource", "elements": {"id": {"type": "id"}}}}})
    )
    provider = load_schema_bundle(path)
    assert isinstance(provider, SchemaProvider)


# ---------------------------------------------------------------------------
# Provider behaviour
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_type(provider):
    patient = await provider.get_type("Patient")
    assert patient.kind == "resource"
    assert patient.base_type == "DomainResource"
    assert await provider.get_type("Nope") is None


@pytest.mark.asyncio
async def test_resource_types_exclude_abstract(provider):
    resources = await provider.get_all_resource_types()
    assert {"Patient", "Observation", "Condition", "Procedure", "Organization"} <= set(resources)
    assert "DomainResource" not in resources
    assert "Resource" not in resources


@pytest.mark.asyncio
async def test_element_names_include_inherited(provider):
    patient = await provider.get_type("Patient")
    names = provider.get_element_names(patient)
    assert names[0] == "identifier"
    assert "deceased" in names
    assert names[-4:] == ["id", "meta", "implicitRules", "language"]


@pytest.mark.asyncio
async def test_choice_elements_become_choice_types(provider):
    observation = await provider.get_type("Observation")
    ref = provider.get_element_type(observation, "value")
    assert ref.declared_type == "Observation.value[x]"

    value = await provider.get_type("Observation.value[x]")
    assert value.kind == "choice"
    assert isinstance(value.polymorphism, LegacyChoiceNames)
    onset = await provider.get_type("Condition.onset[x]")
    assert isinstance(onset.polymorphism, UnionChoices)


@pytest.mark.asyncio
async def test_inherited_element_type(provider):
    patient = await provider.get_type("Patient")
    assert provider.get_element_type(patient, "meta").declared_type == "Meta"
    assert provider.get_element_type(patient, "nope") is None


@pytest.mark.asyncio
async def test_resolve_of_type(provider):
    deceased = await provider.get_type("Patient.deceased[x]")
    assert provider.resolve_of_type(deceased, "boolean").name == "boolean"
    assert provider.resolve_of_type(deceased, "Period") is None

    value = await provider.get_type("Observation.value[x]")
    assert provider.resolve_of_type(value, "Quantity").name == "Quantity"

    patient = await provider.get_type("Patient")
    assert provider.resolve_of_type(patient, "Patient") is patient
    assert provider.resolve_of_type(patient, "Observation") is None


@pytest.mark.asyncio
async def test_resolve_element_type_synthesizes_primitives():
    provider = InMemorySchemaProvider({"types": {}})
    resolved = await resolve_element_type(provider, PropertyRef(name="flag", declared_type="boolean"))
    assert resolved.name == "boolean"
    assert resolved.kind == "primitive"
    assert await resolve_element_type(provider, PropertyRef(name="x", declared_type="Ghost")) is None
