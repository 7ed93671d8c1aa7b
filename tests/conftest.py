"""Shared fixtures: sample API documents, request log and fake HTTP transport."""

from __future__ import annotations

import copy
import json
from typing import Any, Callable

import httpx
import pytest
import yaml

from axon.invoker import InvocationEngine
from axon.request_log import RequestLog
from axon.schema import SchemaNode, ToolDescriptor


# ---------------------------------------------------------------------------
# Sample documents (valid for openapi-spec-validator)
# ---------------------------------------------------------------------------

OPENAPI_DOC: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "servers": [{"url": "https://api.example.com/v1"}],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List all pets",
                "parameters": [
                    {
                        "name": "limit",
                        "in": "query",
                        "description": "How many pets to return",
                        "schema": {"type": "integer", "minimum": 1, "maximum": 100, "default": 20},
                    },
                ],
                "responses": {"200": {"description": "OK"}},
            },
            "post": {
                "operationId": "createPet",
                "description": "Creates a pet.",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Pet"},
                        },
                    },
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {
                    "name": "petId",
                    "in": "path",
                    "required": True,
                    "description": "The pet id",
                    "schema": {"type": "string"},
                },
            ],
            "get": {
                "operationId": "getPet",
                "responses": {"200": {"description": "OK"}},
            },
            "put": {
                "operationId": "updatePet",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Pet"},
                        },
                    },
                },
                "responses": {"200": {"description": "OK"}},
            },
            "delete": {
                "summary": "No operationId, never becomes a tool",
                "responses": {"204": {"description": "Deleted"}},
            },
            "patch": {
                "operationId": "uploadPetPhoto",
                "requestBody": {
                    "content": {
                        "image/png": {"schema": {"type": "string", "format": "binary"}},
                    },
                },
                "responses": {"200": {"description": "OK"}},
            },
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string", "minLength": 1, "maxLength": 64, "pattern": "^[A-Za-z ]+$"},
                    "tag": {"type": "string", "enum": ["dog", "cat"]},
                    "age": {"type": "integer", "minimum": 0},
                    "vaccinations": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {"date": {"type": "string", "format": "date"}},
                        },
                    },
                },
            },
        },
    },
}

SWAGGER_DOC: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "Blog", "version": "1.0.0"},
    "host": "api.example.com",
    "basePath": "/v2",
    "paths": {
        "/users/{id}/posts/{postId}": {
            "get": {
                "operationId": "getPost",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "type": "string"},
                    {"name": "postId", "in": "path", "required": True, "type": "integer", "minimum": 1},
                ],
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/users": {
            "get": {
                "operationId": "listUsers",
                "parameters": [
                    {
                        "name": "tags",
                        "in": "query",
                        "type": "array",
                        "items": {"type": "string"},
                        "collectionFormat": "csv",
                    },
                ],
                "responses": {"200": {"description": "OK"}},
            },
            "post": {
                "operationId": "createUser",
                "summary": "Create a user",
                "parameters": [
                    {
                        "name": "payload",
                        "in": "body",
                        "required": True,
                        "schema": {"$ref": "#/definitions/User"},
                    },
                ],
                "responses": {"200": {"description": "OK"}},
            },
        },
    },
    "definitions": {
        "User": {
            "type": "object",
            "required": ["email"],
            "properties": {
                "email": {"type": "string", "format": "email"},
                "nickname": {"type": "string", "maxLength": 20},
            },
        },
    },
}


@pytest.fixture
def openapi_doc() -> dict[str, Any]:
    return copy.deepcopy(OPENAPI_DOC)


@pytest.fixture
def swagger_doc() -> dict[str, Any]:
    return copy.deepcopy(SWAGGER_DOC)


@pytest.fixture
def write_spec(tmp_path) -> Callable[..., str]:
    """Write a document to tmp_path as JSON or YAML and return its path."""
    def _write(doc: dict[str, Any], name: str = "spec.json") -> str:
        path = tmp_path / name
        if name.endswith((".yaml", ".yml")):
            path.write_text(yaml.safe_dump(doc, sort_keys=False))
        else:
            path.write_text(json.dumps(doc, indent=2))
        return str(path)
    return _write


# ---------------------------------------------------------------------------
# Invocation helpers
# ---------------------------------------------------------------------------

def make_tool(endpoint: str, method: str = "GET", name: str = "testTool") -> ToolDescriptor:
    """A descriptor carrying only the endpoint/method constants."""
    return ToolDescriptor(
        name=name,
        description=f"{method} {endpoint}",
        input_schema=SchemaNode(
            properties={
                "endpoint": SchemaNode.constant(endpoint),
                "method": SchemaNode.constant(method),
            },
        ),
    )


@pytest.fixture
def request_log(tmp_path):
    log = RequestLog(tmp_path / "logs")
    yield log
    log.close()


@pytest.fixture
def sent() -> list[httpx.Request]:
    """Requests seen by the fake transport, in order."""
    return []


@pytest.fixture
def engine_for(request_log, sent) -> Callable[..., InvocationEngine]:
    """Build an engine whose transport answers with ``respond(request)``.

    Usage::

        engine = engine_for(lambda req: httpx.Response(200, json={"ok": True}))
    """
    def _make(respond: Callable[[httpx.Request], httpx.Response]) -> InvocationEngine:
        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return respond(request)
        return InvocationEngine(request_log, transport=httpx.MockTransport(handler))
    return _make
