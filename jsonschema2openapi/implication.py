"""
Conditional expansion by material implication.

OpenAPI 3.0 has no if/then/else, so

    {"if": CONDITION, "then": SCHEMA1, "else": SCHEMA2}

becomes

    {
      "anyOf": [
        {"allOf": [CONDITION, SCHEMA1]},
        {"allOf": [{"not": CONDITION}, SCHEMA2]}
      ]
    }

See https://en.wikipedia.org/wiki/Material_implication_(rule_of_inference)
"""

import logging

from jsonschema2openapi.common import JsonValue, get_condition

logger = logging.getLogger(__name__)


def material_implication(json_data: JsonValue, expand_nested: bool = False) -> JsonValue:
    """
    Recursively rewrite conditional nodes into anyOf/allOf form.

    Args:
        json_data: The schema tree.
        expand_nested: Also expand conditionals inside the if/then/else branches
            and the siblings of a rewritten node. By default those are copied
            verbatim.

    Returns:
        A new schema tree.
    """
    if isinstance(json_data, dict):
        condition = get_condition(json_data)
        if condition is None:
            return {k: material_implication(v, expand_nested) for k, v in json_data.items()}
        if_schema, then_schema, else_schema = condition
        res = {k: v for k, v in json_data.items() if k not in ('if', 'then', 'else')}
        if expand_nested:
            res = {k: material_implication(v, expand_nested) for k, v in res.items()}
            if_schema = material_implication(if_schema, expand_nested)
            then_schema = material_implication(then_schema, expand_nested)
            else_schema = material_implication(else_schema, expand_nested)
        if 'anyOf' in res:
            logger.debug("Conditional expansion overwrites existing anyOf")
        res['anyOf'] = [
            {'allOf': [if_schema, then_schema]},
            {'allOf': [{'not': if_schema}, else_schema]},
        ]
        return res
    if isinstance(json_data, list):
        return [material_implication(v, expand_nested) for v in json_data]
    return json_data
