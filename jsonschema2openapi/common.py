"""
Common helpers for the JSON Schema to OpenAPI passes.

The passes operate on plain decoded JSON (dict, list, str, int, float, bool, None).
The matchers below are pure: they return the extracted parts of a recognised
shape, or None when the value does not have that shape. They never raise.
"""

# pylint: disable=line-too-long

from typing import Any, Dict, List, Optional, Tuple, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class TranslationError(Exception):
    """
    Exception raised when a JSON Schema cannot be put into an OpenAPI document.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred (input and path)
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


def json_equal(left: JsonValue, right: JsonValue) -> bool:
    """
    Deep structural equality over JSON values.

    Unlike Python's ``==``, booleans never compare equal to numbers, so
    ``{"enum": [true]}`` and ``{"enum": [1]}`` are different schemas. List order
    is significant, object key order is not.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict):
        if not isinstance(right, dict) or left.keys() != right.keys():
            return False
        return all(json_equal(v, right[k]) for k, v in left.items())
    if isinstance(left, list):
        if not isinstance(right, list) or len(left) != len(right):
            return False
        return all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (int, float)):
        return isinstance(right, (int, float)) and left == right
    return type(left) is type(right) and left == right


def get_ref(json_data: JsonValue) -> Optional[str]:
    """
    Match ``{"$ref": "REF"}`` with no other keys and return REF.

    Args:
        json_data: Any JSON value.

    Returns:
        The reference string, or None if the value is not a bare reference object.
    """
    if not isinstance(json_data, dict) or len(json_data) != 1:
        return None
    ref = json_data.get('$ref')
    if not isinstance(ref, str):
        return None
    return ref


def get_constant(json_data: JsonValue) -> Optional[Tuple[str, str]]:
    """
    Match ``{"properties": {"PROPERTY": {"enum": ["CASE"]}}}``.

    Exactly one property is allowed and its enum must hold exactly one string.

    Returns:
        A (PROPERTY, CASE) tuple, or None if the shape does not match.
    """
    if not isinstance(json_data, dict):
        return None
    properties = json_data.get('properties')
    if not isinstance(properties, dict) or len(properties) != 1:
        return None
    name, schema = next(iter(properties.items()))
    if not isinstance(schema, dict):
        return None
    cases = schema.get('enum')
    if not isinstance(cases, list) or len(cases) != 1:
        return None
    if not isinstance(cases[0], str):
        return None
    return name, cases[0]


def get_condition(json_data: JsonValue) -> Optional[Tuple[JsonValue, JsonValue, JsonValue]]:
    """Return (if, then, else) when the value is an object carrying all three keys."""
    if not isinstance(json_data, dict):
        return None
    if 'if' not in json_data or 'then' not in json_data or 'else' not in json_data:
        return None
    return json_data['if'], json_data['then'], json_data['else']


def get_nullable_type(json_data: JsonValue) -> Optional[str]:
    """
    Match ``[{"type": X}, {"type": "null"}]`` in either order and return X.

    Both members must be objects whose only key is ``type`` with a string value,
    and exactly one of them must be ``"null"``.
    """
    if not isinstance(json_data, list) or len(json_data) != 2:
        return None
    types = []
    for member in json_data:
        if not isinstance(member, dict) or len(member) != 1:
            return None
        type_name = member.get('type')
        if not isinstance(type_name, str):
            return None
        types.append(type_name)
    non_null = [t for t in types if t != 'null']
    if len(non_null) != 1:
        return None
    return non_null[0]
