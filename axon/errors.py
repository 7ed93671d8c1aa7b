"""Exceptions raised while loading and compiling API specs."""

from __future__ import annotations


class AxonError(Exception):
    """Base class for all axon errors."""


class SpecLoadError(AxonError):
    """Raised when a spec cannot be read, parsed or validated."""

    def __init__(self, source: str, errors: list[str]) -> None:
        self.source = source
        self.errors = errors
        detail = "; ".join(errors) if errors else "unknown error"
        super().__init__(f"Failed to load spec {source}: {detail}")


class UnsupportedVersionError(AxonError):
    """Raised when a document is neither Swagger 2.x nor OpenAPI 3.x."""

    def __init__(self, version: str | None) -> None:
        self.version = version
        super().__init__(f"Unsupported specification version: {version}")


class ConversionError(AxonError):
    """Raised when a single operation cannot be turned into a tool."""

    def __init__(self, method: str, path: str, reason: str) -> None:
        self.method = method
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot convert {method.upper()} {path}: {reason}")
