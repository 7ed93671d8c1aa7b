"""Translate OpenAPI 3.x and Swagger 2.0 schemas into SchemaNode trees.

Handles:
- Object properties and required lists, recursively
- Array items
- Primitive constraints (format, pattern, enum, bounds, defaults)
- allOf merging, oneOf/anyOf first-match
- OpenAPI 3.1 type lists (["string", "null"])
- Swagger inline parameter schemas and ``type: file``
- Path and query parameters plus the JSON request body as ``body``

$refs are expected to be expanded by the loader before translation.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable

from .errors import ConversionError
from .schema import SchemaKind, SchemaNode

# Parameter locations that become tool properties
PARAM_LOCATIONS = ("path", "query")

BODY_PROPERTY = "body"

# source keyword -> SchemaNode field
_COPIED_KEYWORDS: dict[str, str] = {
    "description": "description",
    "format": "format",
    "pattern": "pattern",
    "enum": "enum",
    "minimum": "minimum",
    "maximum": "maximum",
    "exclusiveMinimum": "exclusive_minimum",
    "exclusiveMaximum": "exclusive_maximum",
    "minLength": "min_length",
    "maxLength": "max_length",
    "minItems": "min_items",
    "maxItems": "max_items",
    "default": "default",
    "const": "const",
}

# default and const may legitimately be null
_NULLABLE_KEYWORDS = {"default", "const"}

_KINDS: dict[str, SchemaKind] = {kind.value: kind for kind in SchemaKind}

Translator = Callable[[Any], SchemaNode]


def _constraints(schema: dict[str, Any]) -> dict[str, Any]:
    """Copy author-declared constraints verbatim."""
    kwargs: dict[str, Any] = {}
    for keyword, attr in _COPIED_KEYWORDS.items():
        if keyword not in schema:
            continue
        value = schema[keyword]
        if value is None and keyword not in _NULLABLE_KEYWORDS:
            continue
        kwargs[attr] = value
    return kwargs


def _merge_all_of(schema: dict[str, Any]) -> dict[str, Any]:
    """Fold allOf members into one schema; outer keywords take precedence."""
    merged: dict[str, Any] = {}
    properties: dict[str, Any] = {}
    required: list[str] = []

    for member in schema.get("allOf") or []:
        if not isinstance(member, dict):
            continue
        member = _merge_all_of(member) if "allOf" in member else member
        properties.update(member.get("properties") or {})
        required.extend(member.get("required") or [])
        for key, value in member.items():
            if key not in ("properties", "required"):
                merged.setdefault(key, value)

    for key, value in schema.items():
        if key == "allOf":
            continue
        if key == "properties":
            properties.update(value or {})
        elif key == "required":
            required.extend(value or [])
        else:
            merged[key] = value

    if properties:
        merged["properties"] = properties
    if required:
        merged["required"] = required
    return merged


def _pick_alternative(schema: dict[str, Any]) -> dict[str, Any]:
    """Replace oneOf/anyOf with their first non-empty member."""
    for key in ("oneOf", "anyOf"):
        members = [m for m in schema.get(key) or [] if isinstance(m, dict) and m]
        if not members:
            continue
        chosen = dict(members[0])
        for outer_key, value in schema.items():
            if outer_key not in ("oneOf", "anyOf"):
                chosen[outer_key] = value
        return chosen
    return schema


def _build(schema: dict[str, Any], kind: SchemaKind, recurse: Translator) -> SchemaNode:
    """Assemble a node once the dialect has settled on its kind."""
    kwargs = _constraints(schema)

    if kind is SchemaKind.ARRAY and "items" in schema:
        kwargs["items"] = recurse(schema["items"])

    if kind is SchemaKind.OBJECT:
        properties = schema.get("properties") or {}
        kwargs["properties"] = {name: recurse(sub) for name, sub in properties.items()}
        kwargs["required"] = tuple(schema.get("required") or ())

    return SchemaNode(kind=kind, **kwargs)


# ---------------------------------------------------------------------------
# OpenAPI 3.x
# ---------------------------------------------------------------------------

def _openapi_kind(schema: dict[str, Any]) -> SchemaKind:
    declared = schema.get("type")
    if isinstance(declared, list):
        declared = next((t for t in declared if t != "null"), None)
    return _KINDS.get(declared, SchemaKind.OBJECT)


def translate_openapi_schema(schema: Any) -> SchemaNode:
    """Convert an OpenAPI 3.x schema object to a SchemaNode."""
    if not isinstance(schema, dict) or not schema:
        return SchemaNode()
    if "allOf" in schema:
        schema = _merge_all_of(schema)
    if "type" not in schema and ("oneOf" in schema or "anyOf" in schema):
        return translate_openapi_schema(_pick_alternative(schema))
    return _build(schema, _openapi_kind(schema), translate_openapi_schema)


# ---------------------------------------------------------------------------
# Swagger 2.0
# ---------------------------------------------------------------------------

def translate_swagger_schema(schema: Any) -> SchemaNode:
    """Convert a Swagger 2.0 schema or items object to a SchemaNode."""
    if not isinstance(schema, dict) or not schema:
        return SchemaNode()
    if "allOf" in schema:
        schema = _merge_all_of(schema)

    declared = schema.get("type")
    if declared == "file":
        schema = {"format": "binary", **schema}
        return _build(schema, SchemaKind.STRING, translate_swagger_schema)
    return _build(schema, _KINDS.get(declared, SchemaKind.OBJECT), translate_swagger_schema)


def translate_swagger_parameter(param: dict[str, Any]) -> SchemaNode:
    """Convert a non-body Swagger parameter, whose schema is inline."""
    inline = {
        key: value for key, value in param.items()
        if key not in ("name", "in", "required", "collectionFormat", "allowEmptyValue")
    }
    return translate_swagger_schema(inline)


# ---------------------------------------------------------------------------
# Operation parameters
# ---------------------------------------------------------------------------

def merge_parameters(
    path_item: dict[str, Any],
    operation: dict[str, Any],
) -> list[dict[str, Any]]:
    """Combine path-level and operation-level parameters.

    Operation parameters override path-level ones with the same name and
    location.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for source in (path_item.get("parameters"), operation.get("parameters")):
        for param in source or []:
            if not isinstance(param, dict) or not param.get("name"):
                continue
            merged[(param["name"], param.get("in", ""))] = param
    return list(merged.values())


def _with_description(node: SchemaNode, description: str | None) -> SchemaNode:
    """A parameter's own description wins over its schema's."""
    if not description:
        return node
    return dataclasses.replace(node, description=description)


def _openapi_param_schema(param: dict[str, Any]) -> Any:
    if "schema" in param:
        return param["schema"]
    for media in (param.get("content") or {}).values():
        return (media or {}).get("schema")
    return None


def _json_media(content: dict[str, Any]) -> dict[str, Any] | None:
    """Find the application/json entry, tolerating media-type parameters."""
    for media_type, media in content.items():
        if media_type.split(";")[0].strip().lower() == "application/json":
            return media or {}
    return None


def parse_openapi_parameters(
    path_item: dict[str, Any],
    operation: dict[str, Any],
    method: str,
    path: str,
) -> tuple[dict[str, SchemaNode], list[str]]:
    """Collect the property bag and required names for an OpenAPI operation.

    Raises ConversionError when a request body declares no JSON content.
    """
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []

    for param in merge_parameters(path_item, operation):
        if param.get("in") not in PARAM_LOCATIONS:
            continue
        node = translate_openapi_schema(_openapi_param_schema(param))
        properties[param["name"]] = _with_description(node, param.get("description"))
        if param.get("required", False):
            required.append(param["name"])

    request_body = operation.get("requestBody")
    if request_body:
        media = _json_media(request_body.get("content") or {})
        if media is None:
            raise ConversionError(method, path, "request body has no application/json content")
        node = translate_openapi_schema(media.get("schema"))
        if node.description is None:
            node = _with_description(node, request_body.get("description"))
        properties[BODY_PROPERTY] = node
        if request_body.get("required", False):
            required.append(BODY_PROPERTY)

    return properties, required


def parse_swagger_parameters(
    path_item: dict[str, Any],
    operation: dict[str, Any],
) -> tuple[dict[str, SchemaNode], list[str]]:
    """Collect the property bag and required names for a Swagger operation."""
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []
    body: dict[str, Any] | None = None

    for param in merge_parameters(path_item, operation):
        location = param.get("in")
        if location == "body":
            body = param
            continue
        if location not in PARAM_LOCATIONS:
            continue
        properties[param["name"]] = translate_swagger_parameter(param)
        if param.get("required", False):
            required.append(param["name"])

    if body is not None:
        node = translate_swagger_schema(body.get("schema"))
        if node.description is None:
            node = _with_description(node, body.get("description"))
        properties[BODY_PROPERTY] = node
        if body.get("required", False):
            required.append(BODY_PROPERTY)

    return properties, required
