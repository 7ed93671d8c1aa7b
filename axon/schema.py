"""Canonical schema nodes and tool descriptors.

Both spec dialects translate into these types. They are frozen once built and
rendered back to JSON-schema dicts only at the protocol boundary.
"""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


class SchemaKind(str, enum.Enum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


# SchemaNode attribute -> JSON-schema keyword, in rendering order
_CONSTRAINT_KEYS: tuple[tuple[str, str], ...] = (
    ("const", "const"),
    ("format", "format"),
    ("description", "description"),
    ("enum", "enum"),
    ("pattern", "pattern"),
    ("minimum", "minimum"),
    ("maximum", "maximum"),
    ("exclusive_minimum", "exclusiveMinimum"),
    ("exclusive_maximum", "exclusiveMaximum"),
    ("min_length", "minLength"),
    ("max_length", "maxLength"),
    ("min_items", "minItems"),
    ("max_items", "maxItems"),
    ("default", "default"),
)

_UNSET: Any = object()


def _detached(value: Any) -> Any:
    """Deep-copy container values so nodes share nothing with the source document."""
    return copy.deepcopy(value) if isinstance(value, (dict, list)) else value


@dataclass(frozen=True)
class SchemaNode:
    """One fragment of a canonical schema tree."""

    kind: SchemaKind = SchemaKind.OBJECT
    description: str | None = None
    format: str | None = None
    pattern: str | None = None
    enum: tuple[Any, ...] | None = None
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool | float | None = None
    exclusive_maximum: bool | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    default: Any = _UNSET
    const: Any = _UNSET
    properties: Mapping[str, SchemaNode] = field(default_factory=dict)
    items: SchemaNode | None = None
    required: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.properties, MappingProxyType):
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        if self.enum is not None:
            object.__setattr__(self, "enum", tuple(_detached(v) for v in self.enum))
        object.__setattr__(self, "default", _detached(self.default))
        object.__setattr__(self, "const", _detached(self.const))
        # dict.fromkeys keeps declaration order and drops repeats
        object.__setattr__(self, "required", tuple(dict.fromkeys(self.required)))

    @classmethod
    def constant(cls, value: str) -> SchemaNode:
        """Build a string leaf fixed to ``value``."""
        return cls(kind=SchemaKind.STRING, const=value)

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET

    @property
    def has_const(self) -> bool:
        return self.const is not _UNSET

    def to_dict(self) -> dict[str, Any]:
        """Render as a JSON-schema dict."""
        result: dict[str, Any] = {"type": self.kind.value}
        for attr, key in _CONSTRAINT_KEYS:
            value = getattr(self, attr)
            if value is _UNSET or (value is None and attr not in ("default", "const")):
                continue
            if attr == "enum":
                result[key] = [_detached(v) for v in value]
            else:
                result[key] = _detached(value)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.properties:
            result["properties"] = {
                name: node.to_dict() for name, node in self.properties.items()
            }
        if self.required:
            result["required"] = list(self.required)
        return result


@dataclass(frozen=True)
class ToolDescriptor:
    """A callable operation compiled from one (path, verb) pair."""

    name: str
    description: str
    input_schema: SchemaNode

    @property
    def endpoint(self) -> str | None:
        return self._constant("endpoint")

    @property
    def method(self) -> str | None:
        return self._constant("method")

    def _constant(self, key: str) -> str | None:
        node = self.input_schema.properties.get(key)
        if node is None or not node.has_const or not isinstance(node.const, str):
            return None
        return node.const or None

    def to_dict(self) -> dict[str, Any]:
        schema = self.input_schema.to_dict()
        # the protocol layer always expects both keys on the input schema
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": schema,
        }
