"""
FHIR type definitions consumed by the in-memory schema provider.

- SCHEMA_BUNDLE_SCHEMA is the JSON Schema every bundle must satisfy before
  the provider will index it.
- FHIR_CORE_BUNDLE is a pragmatic R4 subset: the base resource chain, the
  common data types and a handful of clinical resources. Real FHIR
  StructureDefinitions are enormous; this captures what editors touch most.

Choice elements are keyed with the ``[x]`` suffix. They carry either a
``union`` list (explicit member types), a legacy ``choices`` list, or
nothing, in which case the naming-pattern fallback applies.
"""

_CARDINALITY_PATTERN = "^[0-9]+\\.\\.([0-9]+|\\*)$"

# Primitive type names recognised even when a provider has no definition
# for them (navigation synthesizes a bare SchemaType in that case).
FHIR_PRIMITIVE_TYPES: frozenset = frozenset(
    {
        "boolean",
        "integer",
        "integer64",
        "string",
        "decimal",
        "uri",
        "url",
        "canonical",
        "base64Binary",
        "instant",
        "date",
        "dateTime",
        "time",
        "code",
        "oid",
        "id",
        "markdown",
        "unsignedInt",
        "positiveInt",
        "uuid",
        "xhtml",
    }
)

_BINDING_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "strength": {"type": "string"},
        "valueSet": {"type": "string"},
        "description": {"type": "string"},
    },
    "additionalProperties": False,
}

SCHEMA_BUNDLE_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "FHIR schema bundle",
    "description": "Named FHIR types with their elements and constraint hints.",
    "type": "object",
    "required": ["types"],
    "properties": {
        "types": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "kind": {"type": "string", "enum": ["primitive", "complex", "resource"]},
                    "abstract": {"type": "boolean"},
                    "baseType": {"type": "string", "minLength": 1},
                    "cardinality": {"type": "string"},
                    "min": {"type": "integer", "minimum": 0},
                    "required": {"type": "boolean"},
                    "minLength": {"type": "integer", "minimum": 0},
                    "maxLength": {"type": "integer", "minimum": 0},
                    "fixed": {},
                    "pattern": {},
                    "binding": _BINDING_SCHEMA,
                    "elements": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "object",
                            "properties": {
                                "type": {"type": "string", "minLength": 1},
                                "cardinality": {
                                    "type": "string",
                                    "pattern": _CARDINALITY_PATTERN,
                                },
                                "choices": {"type": "array", "items": {"type": "string"}},
                                "union": {"type": "array", "items": {"type": "string"}},
                                "binding": _BINDING_SCHEMA,
                            },
                            "additionalProperties": False,
                        },
                    },
                },
                "additionalProperties": False,
            },
        }
    },
    "additionalProperties": False,
}


def _primitive(**extra) -> dict:
    return {"kind": "primitive", **extra}


_CODED = {"binding": {"strength": "required"}}

FHIR_CORE_BUNDLE: dict = {
    "types": {
        # -------------------------------------------------------------------
        # Primitives
        # -------------------------------------------------------------------
        "boolean": _primitive(),
        "integer": _primitive(),
        "decimal": _primitive(),
        "string": _primitive(maxLength=1048576),
        "uri": _primitive(),
        "url": _primitive(),
        "canonical": _primitive(),
        "code": _primitive(),
        "id": _primitive(minLength=1, maxLength=64),
        "markdown": _primitive(),
        "date": _primitive(),
        "dateTime": _primitive(),
        "time": _primitive(),
        "instant": _primitive(),
        "positiveInt": _primitive(),
        "unsignedInt": _primitive(),
        "base64Binary": _primitive(),
        # -------------------------------------------------------------------
        # Data types
        # -------------------------------------------------------------------
        "Element": {
            "kind": "complex",
            "abstract": True,
            "elements": {
                "id": {"type": "string", "cardinality": "0..1"},
                "extension": {"type": "Extension", "cardinality": "0..*"},
            },
        },
        "BackboneElement": {
            "kind": "complex",
            "abstract": True,
            "baseType": "Element",
            "elements": {
                "modifierExtension": {"type": "Extension", "cardinality": "0..*"},
            },
        },
        "Extension": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "url": {"type": "uri", "cardinality": "1..1"},
                "value[x]": {},
            },
        },
        "Coding": {
            "kind": "complex",
            "baseType": "Element",
            **_CODED,
            "elements": {
                "system": {"type": "uri", "cardinality": "0..1"},
                "version": {"type": "string", "cardinality": "0..1"},
                "code": {"type": "code", "cardinality": "0..1"},
                "display": {"type": "string", "cardinality": "0..1"},
                "userSelected": {"type": "boolean", "cardinality": "0..1"},
            },
        },
        "CodeableConcept": {
            "kind": "complex",
            "baseType": "Element",
            **_CODED,
            "elements": {
                "coding": {"type": "Coding", "cardinality": "0..*"},
                "text": {"type": "string", "cardinality": "0..1"},
            },
        },
        "Identifier": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "use": {"type": "code", "cardinality": "0..1", "binding": {"strength": "required"}},
                "type": {"type": "CodeableConcept", "cardinality": "0..1"},
                "system": {"type": "uri", "cardinality": "0..1"},
                "value": {"type": "string", "cardinality": "0..1"},
                "period": {"type": "Period", "cardinality": "0..1"},
            },
        },
        "HumanName": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "use": {"type": "code", "cardinality": "0..1", "binding": {"strength": "required"}},
                "text": {"type": "string", "cardinality": "0..1"},
                "family": {"type": "string", "cardinality": "0..1"},
                "given": {"type": "string", "cardinality": "0..*"},
                "prefix": {"type": "string", "cardinality": "0..*"},
                "suffix": {"type": "string", "cardinality": "0..*"},
                "period": {"type": "Period", "cardinality": "0..1"},
            },
        },
        "Address": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "use": {"type": "code", "cardinality": "0..1"},
                "line": {"type": "string", "cardinality": "0..*"},
                "city": {"type": "string", "cardinality": "0..1"},
                "state": {"type": "string", "cardinality": "0..1"},
                "postalCode": {"type": "string", "cardinality": "0..1"},
                "country": {"type": "string", "cardinality": "0..1"},
                "period": {"type": "Period", "cardinality": "0..1"},
            },
        },
        "ContactPoint": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "system": {"type": "code", "cardinality": "0..1"},
                "value": {"type": "string", "cardinality": "0..1"},
                "use": {"type": "code", "cardinality": "0..1"},
                "rank": {"type": "positiveInt", "cardinality": "0..1"},
                "period": {"type": "Period", "cardinality": "0..1"},
            },
        },
        "Period": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "start": {"type": "dateTime", "cardinality": "0..1"},
                "end": {"type": "dateTime", "cardinality": "0..1"},
            },
        },
        "Quantity": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "value": {"type": "decimal", "cardinality": "0..1"},
                "comparator": {"type": "code", "cardinality": "0..1"},
                "unit": {"type": "string", "cardinality": "0..1"},
                "system": {"type": "uri", "cardinality": "0..1"},
                "code": {"type": "code", "cardinality": "0..1"},
            },
        },
        "Age": {"kind": "complex", "baseType": "Quantity"},
        "Range": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "low": {"type": "Quantity", "cardinality": "0..1"},
                "high": {"type": "Quantity", "cardinality": "0..1"},
            },
        },
        "Ratio": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "numerator": {"type": "Quantity", "cardinality": "0..1"},
                "denominator": {"type": "Quantity", "cardinality": "0..1"},
            },
        },
        "SampledData": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "origin": {"type": "Quantity", "cardinality": "1..1"},
                "period": {"type": "decimal", "cardinality": "1..1"},
                "dimensions": {"type": "positiveInt", "cardinality": "1..1"},
                "data": {"type": "string", "cardinality": "0..1"},
            },
        },
        "Attachment": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "contentType": {"type": "code", "cardinality": "0..1"},
                "url": {"type": "url", "cardinality": "0..1"},
                "title": {"type": "string", "cardinality": "0..1"},
            },
        },
        "Timing": {
            "kind": "complex",
            "baseType": "BackboneElement",
            "elements": {
                "event": {"type": "dateTime", "cardinality": "0..*"},
                "code": {"type": "CodeableConcept", "cardinality": "0..1"},
            },
        },
        "Reference": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "reference": {"type": "string", "cardinality": "0..1"},
                "type": {"type": "uri", "cardinality": "0..1"},
                "identifier": {"type": "Identifier", "cardinality": "0..1"},
                "display": {"type": "string", "cardinality": "0..1"},
            },
        },
        "Annotation": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "author[x]": {"union": ["Reference", "string"]},
                "time": {"type": "dateTime", "cardinality": "0..1"},
                "text": {"type": "markdown", "cardinality": "1..1"},
            },
        },
        "Meta": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "versionId": {"type": "id", "cardinality": "0..1"},
                "lastUpdated": {"type": "instant", "cardinality": "0..1"},
                "profile": {"type": "canonical", "cardinality": "0..*"},
                "tag": {"type": "Coding", "cardinality": "0..*"},
            },
        },
        "Narrative": {
            "kind": "complex",
            "baseType": "Element",
            "elements": {
                "status": {"type": "code", "cardinality": "1..1", "binding": {"strength": "required"}},
                "div": {"type": "string", "cardinality": "1..1"},
            },
        },
        # -------------------------------------------------------------------
        # Resources
        # -------------------------------------------------------------------
        "Resource": {
            "kind": "resource",
            "abstract": True,
            "elements": {
                "id": {"type": "id", "cardinality": "0..1"},
                "meta": {"type": "Meta", "cardinality": "0..1"},
                "implicitRules": {"type": "uri", "cardinality": "0..1"},
                "language": {"type": "code", "cardinality": "0..1"},
            },
        },
        "DomainResource": {
            "kind": "resource",
            "abstract": True,
            "baseType": "Resource",
            "elements": {
                "text": {"type": "Narrative", "cardinality": "0..1"},
                "contained": {"type": "Resource", "cardinality": "0..*"},
                "extension": {"type": "Extension", "cardinality": "0..*"},
                "modifierExtension": {"type": "Extension", "cardinality": "0..*"},
            },
        },
        "Patient": {
            "kind": "resource",
            "baseType": "DomainResource",
            "elements": {
                "identifier": {"type": "Identifier", "cardinality": "0..*"},
                "active": {"type": "boolean", "cardinality": "0..1"},
                "name": {"type": "HumanName", "cardinality": "0..*"},
                "telecom": {"type": "ContactPoint", "cardinality": "0..*"},
                "gender": {
                    "type": "code",
                    "cardinality": "0..1",
                    "binding": {
                        "strength": "required",
                        "valueSet": "http://hl7.org/fhir/ValueSet/administrative-gender",
                    },
                },
                "birthDate": {"type": "date", "cardinality": "0..1"},
                "deceased[x]": {"union": ["boolean", "dateTime"]},
                "address": {"type": "Address", "cardinality": "0..*"},
                "maritalStatus": {"type": "CodeableConcept", "cardinality": "0..1"},
                "multipleBirth[x]": {},
                "generalPractitioner": {"type": "Reference", "cardinality": "0..*"},
                "managingOrganization": {"type": "Reference", "cardinality": "0..1"},
            },
        },
        "Observation": {
            "kind": "resource",
            "baseType": "DomainResource",
            "elements": {
                "identifier": {"type": "Identifier", "cardinality": "0..*"},
                "status": {
                    "type": "code",
                    "cardinality": "1..1",
                    "binding": {
                        "strength": "required",
                        "valueSet": "http://hl7.org/fhir/ValueSet/observation-status",
                    },
                },
                "category": {"type": "CodeableConcept", "cardinality": "0..*"},
                "code": {"type": "CodeableConcept", "cardinality": "1..1"},
                "subject": {"type": "Reference", "cardinality": "0..1"},
                "encounter": {"type": "Reference", "cardinality": "0..1"},
                "effective[x]": {"choices": ["dateTime", "Period", "Timing", "instant"]},
                "issued": {"type": "instant", "cardinality": "0..1"},
                "value[x]": {
                    "choices": [
                        "Quantity",
                        "CodeableConcept",
                        "string",
                        "boolean",
                        "integer",
                        "Range",
                        "Ratio",
                        "SampledData",
                        "time",
                        "dateTime",
                        "Period",
                    ]
                },
                "interpretation": {"type": "CodeableConcept", "cardinality": "0..*"},
                "note": {"type": "Annotation", "cardinality": "0..*"},
                "bodySite": {"type": "CodeableConcept", "cardinality": "0..1"},
            },
        },
        "Condition": {
            "kind": "resource",
            "baseType": "DomainResource",
            "elements": {
                "identifier": {"type": "Identifier", "cardinality": "0..*"},
                "clinicalStatus": {"type": "CodeableConcept", "cardinality": "0..1"},
                "verificationStatus": {"type": "CodeableConcept", "cardinality": "0..1"},
                "category": {"type": "CodeableConcept", "cardinality": "0..*"},
                "code": {"type": "CodeableConcept", "cardinality": "0..1"},
                "subject": {"type": "Reference", "cardinality": "1..1"},
                "onset[x]": {"union": ["dateTime", "Age", "Period", "Range", "string"]},
                "abatement[x]": {},
                "recordedDate": {"type": "dateTime", "cardinality": "0..1"},
                "note": {"type": "Annotation", "cardinality": "0..*"},
            },
        },
        "Procedure": {
            "kind": "resource",
            "baseType": "DomainResource",
            "elements": {
                "status": {"type": "code", "cardinality": "1..1", "binding": {"strength": "required"}},
                "code": {"type": "CodeableConcept", "cardinality": "0..1"},
                "subject": {"type": "Reference", "cardinality": "1..1"},
                "performed[x]": {},
                "note": {"type": "Annotation", "cardinality": "0..*"},
            },
        },
        "Organization": {
            "kind": "resource",
            "baseType": "DomainResource",
            "elements": {
                "identifier": {"type": "Identifier", "cardinality": "0..*"},
                "active": {"type": "boolean", "cardinality": "0..1"},
                "name": {"type": "string", "cardinality": "0..1"},
                "telecom": {"type": "ContactPoint", "cardinality": "0..*"},
                "address": {"type": "Address", "cardinality": "0..*"},
            },
        },
    }
}
