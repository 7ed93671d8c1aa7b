"""Compile a resolved spec into tool descriptors.

Every (path, verb) pair with an operationId becomes one ToolDescriptor whose
input schema carries the full endpoint URL and HTTP verb as constants next to
the translated parameters and request body.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from .errors import ConversionError
from .loader import get_paths
from .schema import SchemaKind, SchemaNode, ToolDescriptor
from .schema_parser import parse_openapi_parameters, parse_swagger_parameters

logger = logging.getLogger(__name__)

# Verbs compiled for each path, in this order
HTTP_METHODS = ("get", "post", "put", "delete", "patch")

# Properties fixed at compile time; never taken from call arguments
RESERVED_PROPERTIES = ("endpoint", "method")

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")

ParameterParser = Callable[
    [dict[str, Any], dict[str, Any], str, str],
    tuple[dict[str, SchemaNode], list[str]],
]


def openapi_base_url(spec: dict[str, Any]) -> str:
    """Return the first server URL with its variables set to their defaults."""
    servers = spec.get("servers") or []
    if not servers:
        return ""
    server = servers[0] or {}
    url = server.get("url", "")
    variables = server.get("variables") or {}

    def _default(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if not variable or "default" not in variable:
            return match.group(0)
        return str(variable["default"])

    return _SERVER_VARIABLE.sub(_default, url)


def swagger_base_url(spec: dict[str, Any]) -> str:
    """Return scheme://host+basePath, or basePath alone without a host."""
    base_path = spec.get("basePath", "")
    host = spec.get("host")
    if not host:
        return base_path
    schemes = spec.get("schemes") or []
    scheme = schemes[0] if schemes else "https"
    return f"{scheme}://{host}{base_path}"


def join_url(base_url: str, path: str) -> str:
    """Append a path template to a base URL."""
    return base_url.rstrip("/") + path


def _make_description(operation: dict[str, Any], method: str, full_path: str) -> str:
    """Summary, then description, then 'VERB url'."""
    return (
        operation.get("summary")
        or operation.get("description")
        or f"{method.upper()} {full_path}"
    )


def compile_operation(
    operation: dict[str, Any],
    method: str,
    full_path: str,
    properties: dict[str, SchemaNode],
    required: list[str],
) -> ToolDescriptor | None:
    """Build one descriptor; returns None when the operation has no id."""
    name = operation.get("operationId")
    if not name:
        logger.debug("Skipping %s %s: no operationId", method.upper(), full_path)
        return None

    bag: dict[str, SchemaNode] = {
        "endpoint": SchemaNode.constant(full_path),
        "method": SchemaNode.constant(method.upper()),
    }
    for prop_name, node in properties.items():
        if prop_name in RESERVED_PROPERTIES:
            logger.warning(
                "%s: parameter %r shadows a reserved property and is ignored",
                name, prop_name,
            )
            continue
        bag[prop_name] = node

    return ToolDescriptor(
        name=str(name),
        description=_make_description(operation, method, full_path),
        input_schema=SchemaNode(
            kind=SchemaKind.OBJECT,
            properties=bag,
            required=tuple(r for r in required if r not in RESERVED_PROPERTIES),
        ),
    )


def _compile_paths(
    spec: dict[str, Any],
    base_url: str,
    parse_parameters: ParameterParser,
) -> dict[str, ToolDescriptor]:
    tools: dict[str, ToolDescriptor] = {}

    for path, path_item in get_paths(spec).items():
        if not isinstance(path_item, dict):
            continue
        full_path = join_url(base_url, path)

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            if not operation.get("operationId"):
                logger.debug("Skipping %s %s: no operationId", method.upper(), full_path)
                continue

            try:
                properties, required = parse_parameters(path_item, operation, method, path)
            except ConversionError as e:
                logger.warning("Skipping operation: %s", e)
                continue

            tool = compile_operation(operation, method, full_path, properties, required)
            if tool is None:
                continue
            if tool.name in tools:
                logger.warning(
                    "Duplicate operationId %r at %s %s replaces the earlier tool",
                    tool.name, method.upper(), path,
                )
            tools[tool.name] = tool

    logger.info("Compiled %d tools", len(tools))
    return tools


def build_openapi_tools(spec: dict[str, Any]) -> dict[str, ToolDescriptor]:
    """Compile every operation of a resolved OpenAPI 3.x document."""
    return _compile_paths(spec, openapi_base_url(spec), parse_openapi_parameters)


def build_swagger_tools(spec: dict[str, Any]) -> dict[str, ToolDescriptor]:
    """Compile every operation of a resolved Swagger 2.0 document."""

    def _parse(
        path_item: dict[str, Any], operation: dict[str, Any], method: str, path: str,
    ) -> tuple[dict[str, SchemaNode], list[str]]:
        return parse_swagger_parameters(path_item, operation)

    return _compile_paths(spec, swagger_base_url(spec), _parse)
