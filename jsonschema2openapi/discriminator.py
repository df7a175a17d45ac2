"""
Discriminator extraction.

Replaces any occurrence of

    "oneOf": [
        {
            "if": {"properties": {"PROPERTY": {"enum": ["CASE1"]}}},
            "then": {"$ref": "REF1"},
            "else": {"properties": {"PROPERTY": {"enum": ["CASE1"]}}}
        },
        {
            "if": {"properties": {"PROPERTY": {"enum": ["CASE2"]}}},
            "then": {"$ref": "REF2"},
            "else": {"properties": {"PROPERTY": {"enum": ["CASE2"]}}}
        }
    ]

with

    "oneOf": [{"$ref": "REF1"}, {"$ref": "REF2"}],
    "discriminator": {
        "propertyName": "PROPERTY",
        "mapping": {"CASE1": "REF1", "CASE2": "REF2"}
    }

The else branch repeating the if branch makes the else always fail, so each
member only admits values tagged with its own case.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from jsonschema2openapi.common import (JsonValue, TranslationError, get_condition,
                                       get_constant, get_ref, json_equal)

logger = logging.getLogger(__name__)


class DiscriminatorMappingError(TranslationError):
    """Raised in strict mode when several oneOf members share a case value."""


@dataclass
class DiscriminatorCandidate:
    """Cases and references recognised in a tagged-union oneOf, in member order."""
    property_name: str
    cases: List[str] = field(default_factory=list)
    refs: List[str] = field(default_factory=list)

    def mapping(self) -> Dict[str, str]:
        """Pair cases to refs. A repeated case keeps the last ref."""
        return dict(zip(self.cases, self.refs))

    def duplicate_cases(self) -> List[str]:
        """List the case values that appear more than once, in first-repeat order."""
        seen = set()
        duplicates = []
        for case in self.cases:
            if case in seen and case not in duplicates:
                duplicates.append(case)
            seen.add(case)
        return duplicates


def get_case(json_data: JsonValue) -> Optional[Tuple[str, str, str]]:
    """
    Match a single tagged-union member and return (PROPERTY, CASE, REF).

    The member must be a conditional whose if is a singleton enum constant,
    whose else equals its if, and whose then is a bare $ref.
    """
    condition = get_condition(json_data)
    if condition is None:
        return None
    if_schema, then_schema, else_schema = condition
    constant = get_constant(if_schema)
    if constant is None:
        return None
    if not json_equal(if_schema, else_schema):
        return None
    ref = get_ref(then_schema)
    if ref is None:
        return None
    name, value = constant
    return name, value, ref


def get_cases(json_data: JsonValue) -> Optional[DiscriminatorCandidate]:
    """
    Check whether an object's oneOf is a tagged union over a single property.

    Returns:
        The candidate, or None if oneOf is missing, empty, or any member fails to match.
    """
    if not isinstance(json_data, dict):
        return None
    one_of = json_data.get('oneOf')
    if not isinstance(one_of, list) or not one_of:
        return None
    candidate: Optional[DiscriminatorCandidate] = None
    for member in one_of:
        case = get_case(member)
        if case is None:
            return None
        name, value, ref = case
        if candidate is None:
            candidate = DiscriminatorCandidate(name)
        elif candidate.property_name != name:
            # members discriminate by different properties
            return None
        candidate.cases.append(value)
        candidate.refs.append(ref)
    return candidate


def discriminate(json_data: JsonValue, strict: bool = False) -> JsonValue:
    """
    Recursively replace tagged-union oneOf arrays with OpenAPI discriminators.

    Args:
        json_data: The schema tree.
        strict: Raise DiscriminatorMappingError on repeated case values instead of
            letting the last member win the mapping entry.

    Returns:
        A new schema tree.
    """
    if isinstance(json_data, dict):
        candidate = get_cases(json_data)
        if candidate is None:
            return {k: discriminate(v, strict) for k, v in json_data.items()}
        duplicates = candidate.duplicate_cases()
        if duplicates:
            if strict:
                raise DiscriminatorMappingError(
                    f"Discriminator property '{candidate.property_name}' has repeated cases {duplicates}",
                    context=', '.join(candidate.refs))
            logger.warning("Discriminator property '%s' has repeated cases %s, the last reference wins",
                           candidate.property_name, duplicates)
        logger.debug("Extracted discriminator on '%s' with %d cases",
                     candidate.property_name, len(candidate.cases))
        res = dict(json_data)
        res['oneOf'] = [{'$ref': ref} for ref in candidate.refs]
        res['discriminator'] = {
            'propertyName': candidate.property_name,
            'mapping': candidate.mapping(),
        }
        return res
    if isinstance(json_data, list):
        return [discriminate(v, strict) for v in json_data]
    return json_data
