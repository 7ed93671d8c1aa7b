"""Render a compiled tool set as a Markdown catalog.

Used by ``python -m axon`` to show what an API spec turns into.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import jinja2

from .compiler import RESERVED_PROPERTIES
from .schema import SchemaKind, SchemaNode, ToolDescriptor

TEMPLATE_DIR = Path(__file__).parent / "templates"


def type_label(node: SchemaNode) -> str:
    """Short type name, e.g. 'array[string]'."""
    if node.kind is SchemaKind.ARRAY and node.items is not None:
        return f"array[{type_label(node.items)}]"
    if node.format:
        return f"{node.kind.value} ({node.format})"
    return node.kind.value


def _tool_context(tool: ToolDescriptor) -> dict[str, Any]:
    schema = tool.input_schema
    params = [
        {
            "name": name,
            "type": type_label(node),
            "required": name in schema.required,
            "description": (node.description or "").replace("\n", " ").replace("|", "\\|"),
        }
        for name, node in schema.properties.items()
        if name not in RESERVED_PROPERTIES
    ]
    return {
        "name": tool.name,
        "method": tool.method,
        "endpoint": tool.endpoint,
        "description": tool.description,
        "params": params,
        "schema_json": json.dumps(tool.to_dict()["inputSchema"], indent=2),
    }


def render_catalog(tools: Iterable[ToolDescriptor], title: str = "API tools") -> str:
    """Render the catalog template for ``tools``."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template("catalog.md.j2")
    entries = [_tool_context(tool) for tool in tools]
    return template.render(title=title, tools=entries, tool_count=len(entries))
