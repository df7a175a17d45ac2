"""
JSON Schema to OpenAPI 3.0 converter.

This module translates the `definitions` of a JSON Schema document into OpenAPI 3.0
`components.schemas` and merges them into an OpenAPI template document.

Translation runs four passes over the definitions, in this order:

1. $ref paths are moved from `#/definitions/` to `#/components/schemas/`.
2. `oneOf` unions of a type and `null` become `type` + `nullable: true`.
3. `oneOf` tagged unions built from if/then/else become `oneOf` + `discriminator`.
4. Every remaining if/then/else is expanded by material implication.

The order matters: nullable unions must not be mistaken for discriminators, and
each member of a tagged union is itself a conditional that the last pass would
otherwise expand.
"""

# pylint: disable=line-too-long

import json
import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import jsonpointer
import requests
from jsonpointer import JsonPointerException

from jsonschema2openapi.common import TranslationError
from jsonschema2openapi.discriminator import DiscriminatorMappingError, discriminate
from jsonschema2openapi.implication import material_implication
from jsonschema2openapi.nullable import replace_nullable
from jsonschema2openapi.refrewriter import COMPONENTS_PREFIX, DEFINITIONS_PREFIX, replace_refs

__all__ = [
    'TranslationError',
    'SchemaParseError',
    'TemplateParseError',
    'SchemaStructureError',
    'TemplateStructureError',
    'DiscriminatorMappingError',
    'JsonSchemaToOpenApiConverter',
    'translate_definitions',
    'put_schema_into_openapi',
    'convert_jsons_to_openapi',
]

logger = logging.getLogger(__name__)

SCHEMAS_POINTER = '/components/schemas'
DEFINITIONS_POINTER = '/definitions'

# One space per level, sorted keys
DEFAULT_INDENT = 1

# Characters escaped inside JSON strings for byte-compatible output
HTML_SAFE_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _reject_constant(name: str) -> Any:
    """Reject the NaN and Infinity literals that Python accepts but JSON does not."""
    raise ValueError(f"Invalid JSON literal {name}")


def dump_openapi(document: Any, indent: int = DEFAULT_INDENT) -> str:
    """
    Serialize a document with sorted keys, escaping HTML-sensitive characters
    and line separators in strings as \\uXXXX.
    """
    content = json.dumps(document, indent=indent, sort_keys=True, ensure_ascii=False, allow_nan=False)
    for char, escaped in HTML_SAFE_ESCAPES.items():
        content = content.replace(char, escaped)
    return content


class SchemaParseError(TranslationError):
    """The JSON Schema text is not valid JSON."""


class TemplateParseError(TranslationError):
    """The OpenAPI template text is not valid JSON."""


class SchemaStructureError(TranslationError):
    """The JSON Schema document has no `definitions` object."""


class TemplateStructureError(TranslationError):
    """The OpenAPI template has no `components.schemas` object."""


def default_openapi_template() -> Dict[str, Any]:
    """Minimal OpenAPI 3.0 document with an empty schema container."""
    return {
        "openapi": "3.0.3",
        "info": {
            "title": "API",
            "version": "1.0.0"
        },
        "paths": {},
        "components": {
            "schemas": {}
        }
    }


class JsonSchemaToOpenApiConverter:
    """
    Converts JSON Schema definitions to OpenAPI 3.0 component schemas.

    Attributes:
        old_ref_prefix: $ref prefix of definitions in the JSON Schema.
        new_ref_prefix: $ref prefix of schemas in the OpenAPI document.
        indent: Indentation of the serialized OpenAPI document.
        strict_discriminators: Fail on tagged unions with repeated case values
            instead of keeping the last reference.
        expand_nested_conditionals: Expand conditionals nested inside the branches
            of an expanded conditional as well.
    """

    def __init__(self) -> None:
        self.old_ref_prefix = DEFINITIONS_PREFIX
        self.new_ref_prefix = COMPONENTS_PREFIX
        self.indent = DEFAULT_INDENT
        self.strict_discriminators = False
        self.expand_nested_conditionals = False
        self.content_cache: Dict[str, str] = {}

    def translate_definitions(self, definitions: Dict[str, Any]) -> Dict[str, Any]:
        """
        Translate a JSON Schema `definitions` object into OpenAPI `components.schemas`.

        Args:
            definitions: Mapping of definition names to schemas. Not modified.

        Returns:
            A new mapping of the same names to translated schemas.
        """
        schemas = replace_refs(definitions, self.old_ref_prefix, self.new_ref_prefix)
        schemas = replace_nullable(schemas)
        schemas = discriminate(schemas, self.strict_discriminators)
        return material_implication(schemas, self.expand_nested_conditionals)

    def put_schema_into_openapi(self, schema_json: str, template_json: str) -> str:
        """
        Translate the definitions of a JSON Schema and put them into an OpenAPI template.

        Args:
            schema_json: JSON Schema document text with a top-level `definitions` object.
            template_json: OpenAPI document text with a `components.schemas` object.

        Returns:
            The merged OpenAPI document, serialized with sorted keys.

        Raises:
            SchemaParseError: If the schema is not valid JSON.
            TemplateParseError: If the template is not valid JSON.
            TemplateStructureError: If the template has no `components.schemas` object.
            SchemaStructureError: If the schema has no `definitions` object.
        """
        try:
            schema = json.loads(schema_json, parse_constant=_reject_constant)
        except ValueError as e:
            raise SchemaParseError(f"Was not able to parse JSON schema: {e}", context='schema', cause=e) from e
        try:
            template = json.loads(template_json, parse_constant=_reject_constant)
        except ValueError as e:
            raise TemplateParseError(f"Not able to parse OpenAPI template: {e}", context='template', cause=e) from e

        schemas = self._resolve_object(template, SCHEMAS_POINTER, TemplateStructureError,
                                       "Bad JSON template, no components.schemas object", 'template')
        definitions = self._resolve_object(schema, DEFINITIONS_POINTER, SchemaStructureError,
                                           "Bad JSON schema, no definitions object", 'schema')

        for name, translated in self.translate_definitions(definitions).items():
            if name in schemas:
                logger.debug("Overwriting schema %s in template", name)
            else:
                logger.debug("Adding schema %s to template", name)
            schemas[name] = translated

        return dump_openapi(template, self.indent)

    def _resolve_object(self, document: Any, pointer: str, error_class, message: str, source: str) -> Dict[str, Any]:
        """Resolve a JSON pointer that must lead to an object."""
        if not isinstance(document, dict):
            raise error_class(message, context=f"{source} {pointer}")
        try:
            target = jsonpointer.resolve_pointer(document, pointer)
        except JsonPointerException as e:
            raise error_class(message, context=f"{source} {pointer}", cause=e) from e
        if not isinstance(target, dict):
            raise error_class(message, context=f"{source} {pointer}")
        return target

    def fetch_content(self, url: str) -> str:
        """
        Fetch content from a URL or file path.

        Args:
            url: The URL or file path to fetch content from.

        Returns:
            The content as a string.

        Raises:
            requests.RequestException: If there is an error fetching from HTTP/HTTPS.
            FileNotFoundError: If the file does not exist.
        """
        if url in self.content_cache:
            return self.content_cache[url]

        parsed_url = urlparse(url)

        if parsed_url.scheme in ['http', 'https']:
            response = requests.get(url, timeout=30)
            response.raise_for_status()
            content = response.text
        elif parsed_url.scheme == 'file' or not parsed_url.scheme or os.path.exists(url):
            # exists() catches Windows drive letters parsed as a scheme
            file_path = parsed_url.path if parsed_url.scheme == 'file' else url
            if os.name == 'nt' and parsed_url.scheme == 'file' and file_path.startswith('/'):
                file_path = file_path[1:]
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        else:
            raise ValueError(f"Unsupported URL scheme: {parsed_url.scheme}")
        self.content_cache[url] = content
        return content

    def convert_jsons_to_openapi_files(self, jsons_file_path: str, openapi_file_path: Optional[str] = None,
                                       template_file_path: Optional[str] = None) -> str:
        """
        Convert a JSON Schema file or URL into an OpenAPI document.

        Args:
            jsons_file_path: Path or URL of the JSON Schema.
            openapi_file_path: Optional path for the output OpenAPI document.
            template_file_path: Optional path or URL of the OpenAPI template. A minimal
                OpenAPI 3.0.3 document is used when omitted.

        Returns:
            The OpenAPI document as a string.
        """
        schema_json = self.fetch_content(jsons_file_path)
        if template_file_path:
            template_json = self.fetch_content(template_file_path)
        else:
            template_json = json.dumps(default_openapi_template())

        openapi_content = self.put_schema_into_openapi(schema_json, template_json)

        if openapi_file_path:
            os.makedirs(os.path.dirname(openapi_file_path) or '.', exist_ok=True)
            with open(openapi_file_path, 'w', encoding='utf-8') as f:
                f.write(openapi_content)
            logger.info("Wrote OpenAPI document to %s", openapi_file_path)

        return openapi_content


def _make_converter(indent: int = DEFAULT_INDENT, strict_discriminators: bool = False,
                    expand_nested_conditionals: bool = False) -> JsonSchemaToOpenApiConverter:
    converter = JsonSchemaToOpenApiConverter()
    converter.indent = indent
    converter.strict_discriminators = strict_discriminators
    converter.expand_nested_conditionals = expand_nested_conditionals
    return converter


def translate_definitions(definitions: Dict[str, Any], strict_discriminators: bool = False,
                          expand_nested_conditionals: bool = False) -> Dict[str, Any]:
    """
    Translate JSON Schema definitions into OpenAPI component schemas.

    Args:
        definitions: Mapping of definition names to JSON Schemas.
        strict_discriminators: Fail on tagged unions with repeated case values.
        expand_nested_conditionals: Expand conditionals at every depth.

    Returns:
        Mapping of the same names to OpenAPI schemas.
    """
    converter = _make_converter(strict_discriminators=strict_discriminators,
                                expand_nested_conditionals=expand_nested_conditionals)
    return converter.translate_definitions(definitions)


def put_schema_into_openapi(schema_json: str, template_json: str, indent: int = DEFAULT_INDENT,
                            strict_discriminators: bool = False, expand_nested_conditionals: bool = False) -> str:
    """
    Put the translated definitions of a JSON Schema into an OpenAPI template.

    Args:
        schema_json: JSON Schema document as a string.
        template_json: OpenAPI template document as a string.
        indent: Indentation of the output.
        strict_discriminators: Fail on tagged unions with repeated case values.
        expand_nested_conditionals: Expand conditionals at every depth.

    Returns:
        The merged OpenAPI document as a string.
    """
    converter = _make_converter(indent, strict_discriminators, expand_nested_conditionals)
    return converter.put_schema_into_openapi(schema_json, template_json)


def convert_jsons_to_openapi(jsons_file_path: str, openapi_file_path: Optional[str] = None,
                             template_file_path: Optional[str] = None, indent: int = DEFAULT_INDENT,
                             strict_discriminators: bool = False, expand_nested_conditionals: bool = False) -> str:
    """
    Convert a JSON Schema file to an OpenAPI document file.

    Args:
        jsons_file_path: Path or URL of the JSON Schema.
        openapi_file_path: Optional path for the output OpenAPI document.
        template_file_path: Optional path or URL of the OpenAPI template.
        indent: Indentation of the output.
        strict_discriminators: Fail on tagged unions with repeated case values.
        expand_nested_conditionals: Expand conditionals at every depth.

    Returns:
        The OpenAPI document as a string.
    """
    if not jsons_file_path:
        raise ValueError('JSON schema file path is required')
    converter = _make_converter(indent, strict_discriminators, expand_nested_conditionals)
    return converter.convert_jsons_to_openapi_files(jsons_file_path, openapi_file_path, template_file_path)
