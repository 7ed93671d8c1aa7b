"""Route a spec to the Swagger 2.0 or OpenAPI 3.x pipeline by version."""

from __future__ import annotations

from typing import Any, Callable

import httpx

from .compiler import build_openapi_tools, build_swagger_tools
from .config import DEFAULT_SPEC_TIMEOUT
from .errors import UnsupportedVersionError
from .loader import LoadedSpec, load_spec, resolve_spec
from .schema import ToolDescriptor

Pipeline = Callable[[dict[str, Any]], dict[str, ToolDescriptor]]


def select_pipeline(version: str) -> Pipeline:
    """Pick the tool builder for a declared spec version."""
    if version.startswith("2."):
        return build_swagger_tools
    if version.startswith("3."):
        return build_openapi_tools
    raise UnsupportedVersionError(version)


def compile_loaded(loaded: LoadedSpec) -> dict[str, ToolDescriptor]:
    """Validate an already-read spec and compile its tools."""
    pipeline = select_pipeline(loaded.version)
    spec = resolve_spec(loaded)
    return pipeline(spec)


def parse_spec(
    source: str,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_SPEC_TIMEOUT,
) -> dict[str, ToolDescriptor]:
    """Load, validate and compile the spec at ``source`` (path or URL)."""
    return compile_loaded(load_spec(source, client=client, timeout=timeout))
