"""
Constraint and terminology metadata for a schema type.

Reads whatever hints the provider put in ``SchemaType.metadata`` and falls
back to fixed defaults for anything missing or malformed. Never raises.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from fhirnav.models.schema import Constraints, SchemaType, TerminologyBinding

logger = logging.getLogger(__name__)

DEFAULT_CARDINALITY = "0..*"
DEFAULT_STRENGTH = "example"
BINDING_STRENGTHS = ("required", "extensible", "preferred", "example")

_CARDINALITY_RE = re.compile(r"^(\d+)\.\.(\d+|\*)$")

# Coded types are bound to a value set even when the provider says nothing
_CODED_TYPES = {"code", "coding", "codeableconcept"}


def _as_length(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def extract_constraints(schema_type: SchemaType) -> Constraints:
    constraints = Constraints()
    hints = schema_type.metadata or {}

    cardinality = hints.get("cardinality")
    match = _CARDINALITY_RE.match(cardinality) if isinstance(cardinality, str) else None
    if match:
        constraints.cardinality = cardinality
        lower = int(match.group(1))
        upper = match.group(2)
        if upper != "*" and int(upper) < lower:
            logger.debug("Inverted cardinality %r on %s", cardinality, schema_type.name)
            constraints.cardinality = DEFAULT_CARDINALITY
        elif lower > 0:
            constraints.required = True
    elif cardinality is not None:
        logger.debug("Ignoring malformed cardinality %r on %s", cardinality, schema_type.name)

    minimum = hints.get("min")
    if isinstance(minimum, int) and not isinstance(minimum, bool) and minimum > 0:
        constraints.required = True
    if hints.get("required") is True:
        constraints.required = True

    constraints.min_length = _as_length(hints.get("minLength"))
    constraints.max_length = _as_length(hints.get("maxLength"))
    if (
        constraints.min_length is not None
        and constraints.max_length is not None
        and constraints.min_length > constraints.max_length
    ):
        logger.debug("Dropping contradictory length bounds on %s", schema_type.name)
        constraints.min_length = constraints.max_length = None

    constraints.fixed = hints.get("fixed")
    constraints.pattern = hints.get("pattern")
    return constraints


def extract_terminology(schema_type: SchemaType) -> TerminologyBinding:
    binding = TerminologyBinding()
    raw = (schema_type.metadata or {}).get("binding")
    if not isinstance(raw, dict):
        raw = {}

    strength = raw.get("strength")
    if strength in BINDING_STRENGTHS:
        binding.strength = strength
    else:
        if strength is not None:
            logger.debug("Unknown binding strength %r on %s", strength, schema_type.name)
        if schema_type.name.lower() in _CODED_TYPES:
            binding.strength = "required"

    if isinstance(raw.get("valueSet"), str):
        binding.value_set = raw["valueSet"]
    if isinstance(raw.get("description"), str):
        binding.description = raw["description"]
    return binding
