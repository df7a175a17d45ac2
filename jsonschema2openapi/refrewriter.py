"""Rewrites $ref paths from JSON Schema definitions to OpenAPI components."""

from jsonschema2openapi.common import JsonValue

DEFINITIONS_PREFIX = '#/definitions/'
COMPONENTS_PREFIX = '#/components/schemas/'


def replace_refs(json_data: JsonValue, old: str = DEFINITIONS_PREFIX, new: str = COMPONENTS_PREFIX) -> JsonValue:
    """
    Recursively replace the first occurrence of ``old`` with ``new`` in every $ref.

    An object holding a $ref is replaced by ``{"$ref": ...}`` alone; OpenAPI 3.0
    ignores siblings of $ref, so they are dropped without being visited.
    """
    if isinstance(json_data, dict):
        if '$ref' in json_data:
            ref = json_data['$ref']
            if isinstance(ref, str):
                ref = ref.replace(old, new, 1)
            return {'$ref': ref}
        return {k: replace_refs(v, old, new) for k, v in json_data.items()}
    if isinstance(json_data, list):
        return [replace_refs(v, old, new) for v in json_data]
    return json_data
