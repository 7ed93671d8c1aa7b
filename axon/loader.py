"""Load an OpenAPI or Swagger spec from disk or over HTTP.

Reads the raw document, detects its dialect from the top-level
``swagger``/``openapi`` key, then validates it and expands $refs with prance.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
import prance
import yaml
from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)
from prance.util.formats import ParseError
from prance.util.url import ResolutionError

from .config import DEFAULT_SPEC_TIMEOUT
from .errors import SpecLoadError, UnsupportedVersionError

logger = logging.getLogger(__name__)

# Fallback for documents PyYAML rejects: look for the version line directly
_VERSION_MARKERS = (
    re.compile(r"""^swagger:\s*["']?(2\.[0-9.]*)""", re.MULTILINE),
    re.compile(r"""^openapi:\s*["']?(3\.[0-9.]*)""", re.MULTILINE),
)

VALIDATION_BACKEND = "openapi-spec-validator"


@dataclass(frozen=True)
class LoadedSpec:
    """Raw spec text plus its detected version string."""

    source: str
    text: str
    version: str


def is_url(source: str) -> bool:
    """Check if the source is an http(s) URL rather than a file path."""
    return source.startswith(("http://", "https://"))


def read_source(
    source: str,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_SPEC_TIMEOUT,
) -> str:
    """Read the spec text from a local file or a remote URI."""
    if not is_url(source):
        try:
            return Path(source).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SpecLoadError(source, [str(e)]) from e

    try:
        if client is not None:
            resp = client.get(source)
        else:
            resp = httpx.get(source, timeout=timeout, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise SpecLoadError(source, [str(e)]) from e
    return resp.text


def detect_version(text: str, source: str = "<string>") -> str:
    """Return the declared spec version (e.g. '2.0', '3.0.3')."""
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError:
        doc = None

    if isinstance(doc, dict):
        for key in ("swagger", "openapi"):
            if doc.get(key) is not None:
                return str(doc[key])
        raise UnsupportedVersionError(None)

    for marker in _VERSION_MARKERS:
        match = marker.search(text)
        if match:
            return match.group(1)
    raise SpecLoadError(source, ["no swagger/openapi version found"])


def load_spec(
    source: str,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_SPEC_TIMEOUT,
) -> LoadedSpec:
    """Read a spec and detect its version."""
    text = read_source(source, client=client, timeout=timeout)
    version = detect_version(text, source)
    logger.info("Loaded %s (version %s)", source, version)
    return LoadedSpec(source=source, text=text, version=version)


def _truncate_recursion(*_args: Any) -> dict[str, Any]:
    # cyclic $refs end in an untyped object instead of recursing forever
    return {"type": "object"}


def resolve_spec(loaded: LoadedSpec) -> dict[str, Any]:
    """Validate the spec and return it with all $refs expanded."""
    try:
        parser = prance.ResolvingParser(
            spec_string=loaded.text,
            backend=VALIDATION_BACKEND,
            strict=False,
            recursion_limit_handler=_truncate_recursion,
        )
    except prance.ValidationError as e:
        raise SpecLoadError(loaded.source, validation_errors(loaded) or [_first_line(e)]) from e
    except (ParseError, ResolutionError) as e:
        raise SpecLoadError(loaded.source, [str(e)]) from e
    return parser.specification


def _validator_for(version: str) -> type:
    if version.startswith("2."):
        return OpenAPIV2SpecValidator
    if version.startswith("3.1"):
        return OpenAPIV31SpecValidator
    return OpenAPIV30SpecValidator


def validation_errors(loaded: LoadedSpec) -> list[str]:
    """Run the structural validator and return one message per problem found.

    Each entry is ``<location>: <message>`` where location is the
    slash-separated path into the document, or ``<root>`` at the top level.
    """
    try:
        document = yaml.safe_load(loaded.text)
    except yaml.YAMLError:
        return []
    if not isinstance(document, dict):
        return []
    # JSON round-trip: integer response codes become strings, dates become text
    document = json.loads(json.dumps(document, default=str))

    validator = _validator_for(loaded.version)(document)
    errors = []
    for err in validator.iter_errors():
        location = "/".join(str(part) for part in err.path) or "<root>"
        errors.append(f"{location}: {err.message}")
    return errors


def _first_line(exc: Exception) -> str:
    lines = [line.strip() for line in str(exc).splitlines() if line.strip()]
    # the validator message can embed the whole document
    return lines[0][:200] if lines else type(exc).__name__


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}
