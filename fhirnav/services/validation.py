"""
JSON Schema validation for schema bundles.

Collects every violation rather than failing on the first one, so a
broken bundle can be fixed in a single pass.
"""

from typing import Any

import jsonschema

from fhirnav.models.errors import SchemaBundleError
from fhirnav.schemas.fhir import SCHEMA_BUNDLE_SCHEMA


def validate_against_schema(data: Any, schema: dict[str, Any]) -> list[str]:
    """
    Validate a document against a JSON schema.
    Returns a list of error messages prefixed with the failing path
    (empty list = valid).
    """
    validator = jsonschema.Draft7Validator(schema)
    messages = []
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]):
        location = "/".join(str(part) for part in error.absolute_path)
        messages.append(f"{location}: {error.message}" if location else error.message)
    return messages


def validate_schema_bundle(bundle: Any) -> None:
    """Raise SchemaBundleError if ``bundle`` is not a well-formed schema bundle."""
    errors = validate_against_schema(bundle, SCHEMA_BUNDLE_SCHEMA)
    if errors:
        raise SchemaBundleError(errors)
