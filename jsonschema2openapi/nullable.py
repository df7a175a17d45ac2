"""Collapses two-branch nullable unions into OpenAPI 3.0 ``nullable`` types."""

import logging

from jsonschema2openapi.common import JsonValue, get_nullable_type

logger = logging.getLogger(__name__)


def replace_nullable(json_data: JsonValue) -> JsonValue:
    """
    Recursively replace ``"oneOf": [{"type": X}, {"type": "null"}]``
    with ``"type": X, "nullable": true``.

    A ``oneOf`` that does not have that exact shape is kept and its members
    are visited like any other value.
    """
    if isinstance(json_data, dict):
        res = {}
        nullable_type = get_nullable_type(json_data.get('oneOf'))
        for k, v in json_data.items():
            if k == 'oneOf' and nullable_type is not None:
                continue
            res[k] = replace_nullable(v)
        if nullable_type is not None:
            logger.debug("Collapsed nullable union of type %s", nullable_type)
            res['type'] = nullable_type
            res['nullable'] = True
        return res
    if isinstance(json_data, list):
        return [replace_nullable(v) for v in json_data]
    return json_data
