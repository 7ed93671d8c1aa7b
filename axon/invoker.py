"""Execute a compiled tool as a single HTTP request.

The URL and verb come only from the descriptor's constants. Caller arguments
fill ``{placeholders}`` in the endpoint template and ``body`` becomes the JSON
payload. Every failure is returned as an error ToolResult so the caller can
keep invoking other tools.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from .compiler import RESERVED_PROPERTIES
from .request_log import RequestLog
from .schema import ToolDescriptor
from .schema_parser import BODY_PROPERTY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one invocation, as handed back to the agent."""

    text: str
    is_error: bool = False
    status_code: int | None = None
    body: str | None = None

    @classmethod
    def error(cls, message: str, status_code: int | None = None, body: str | None = None) -> ToolResult:
        return cls(text=message, is_error=True, status_code=status_code, body=body)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


def format_argument(value: Any) -> str:
    """Textual form of an argument for path substitution."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def substitute_path(endpoint: str, arguments: Mapping[str, Any]) -> str:
    """Fill {name} placeholders; arguments without a placeholder are dropped."""
    for name, value in arguments.items():
        if name == BODY_PROPERTY or name in RESERVED_PROPERTIES:
            continue
        placeholder = f"{{{name}}}"
        if placeholder in endpoint:
            endpoint = endpoint.replace(placeholder, quote(format_argument(value), safe=""))
    return endpoint


def encode_body(arguments: Mapping[str, Any]) -> bytes | None:
    """Pretty-print the ``body`` argument as JSON, or None when absent.

    Raises TypeError/ValueError for values JSON cannot represent.
    """
    if BODY_PROPERTY not in arguments:
        return None
    return json.dumps(arguments[BODY_PROPERTY], indent=2, ensure_ascii=False).encode("utf-8")


def dump_request(request: httpx.Request) -> str:
    """Render a request the way it goes on the wire."""
    lines = [f"{request.method} {request.url} HTTP/1.1"]
    lines.extend(f"{key}: {value}" for key, value in request.headers.items())
    text = "\n".join(lines) + "\n\n"
    if request.content:
        text += request.content.decode("utf-8", errors="replace")
    return text


def dump_response(response: httpx.Response) -> str:
    """Render a response status line, headers and body."""
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    lines.extend(f"{key}: {value}" for key, value in response.headers.items())
    return "\n".join(lines) + "\n\n" + response.text


def render_success(response: httpx.Response) -> str:
    """Pretty JSON when the body parses, raw text otherwise."""
    try:
        parsed = json.loads(response.content)
    except ValueError:
        return response.text
    return json.dumps(parsed, indent=2, ensure_ascii=False)


class InvocationEngine:
    """Runs descriptors against live endpoints.

    Holds no per-call state: the request log is shared and each call opens its
    own client, so invocations may run concurrently.
    """

    def __init__(
        self,
        request_log: RequestLog,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._request_log = request_log
        self._transport = transport

    async def _log(self, label: str, text: str) -> None:
        # file I/O runs off the event loop; the log serializes records itself
        await asyncio.to_thread(self._request_log.write, label, text)

    async def invoke(
        self,
        descriptor: ToolDescriptor,
        arguments: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        """Perform exactly one request for ``descriptor``."""
        arguments = arguments or {}

        endpoint = descriptor.endpoint
        if endpoint is None:
            return ToolResult.error("Endpoint configuration not found in tool schema")
        method = descriptor.method
        if method is None:
            return ToolResult.error("Method configuration not found in tool schema")

        try:
            url = substitute_path(endpoint, arguments)
        except UnicodeEncodeError as e:
            return ToolResult.error(f"Failed to create request: {e}")
        try:
            payload = encode_body(arguments)
        except (TypeError, ValueError) as e:
            return ToolResult.error(f"Failed to marshal request body: {e}")
        headers = {"Content-Type": "application/json"} if payload is not None else None

        logger.debug("Invoking %s: %s %s", descriptor.name, method, url)

        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            try:
                request = client.build_request(method, url, content=payload, headers=headers)
            except (httpx.InvalidURL, ValueError) as e:
                return ToolResult.error(f"Failed to create request: {e}")

            await self._log("REQUEST", dump_request(request))

            try:
                response = await client.send(request)
            except httpx.RequestError as e:
                await self._log("REQUEST ERROR", str(e))
                return ToolResult.error(f"Request failed: {e}")

        await self._log("RESPONSE", dump_response(response))

        if response.status_code >= 400:
            return ToolResult.error(
                f"Request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return ToolResult(
            text=render_success(response),
            status_code=response.status_code,
            body=response.text,
        )
