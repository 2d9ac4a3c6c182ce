# File: schemagen/openapi.py
"""
SchemaGen - OpenAPI Generator
==============================
Projects the canonical model into a complete OpenAPI 3.0 document:

- component schemas (one per entity) with a synthesized ``example``;
- shared ``NotFound`` / ``ValidationError`` responses;
- CRUD paths per entity (``/<table>`` and ``/<table>/{id}``);
- read-only relationship traversal paths (``/<from>/{id}/<to>``);
- a summary block and ready-to-paste client snippets (fetch, requests,
  curl) embedding the same example payload as the component schema.

Every JSON object in the output is freshly allocated, so the document can
be dumped to YAML without anchors and mutated by callers safely.
"""

from __future__ import annotations

import copy
import json
import logging
import pprint
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlsplit

from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.models import (
    NUMERIC_TYPES,
    CanonicalModel,
    EntityDefinition,
    FieldDefinition,
    FieldType,
    GenerationConfig,
)
from schemagen.normalizer import RawModel, normalize_model
from schemagen.type_maps import openapi_type
from schemagen.utils import capitalize_first, iso_timestamp, utc_now

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.openapi")

OPENAPI_VERSION: str = "3.0.3"
JSON_MEDIA_TYPE: str = "application/json"

_LENGTH_TYPES: frozenset = frozenset({FieldType.STRING, FieldType.TEXT})


# ---------------------------------------------------------------------------
# Small builders (each call returns a new object)
# ---------------------------------------------------------------------------


def _schema_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _response_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/responses/{name}"}


def _json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {JSON_MEDIA_TYPE: {"schema": schema}}


def _id_parameter(owner: str) -> Dict[str, Any]:
    return {
        "name": "id",
        "in": "path",
        "required": True,
        "description": f"{owner} ID",
        "schema": {"type": "integer"},
    }


def _shared_responses() -> Dict[str, Any]:
    return {
        "NotFound": {
            "description": "Resource not found",
            "content": _json_content(
                {
                    "type": "object",
                    "properties": {
                        "error": {"type": "string"},
                        "message": {"type": "string"},
                    },
                }
            ),
        },
        "ValidationError": {
            "description": "Validation error",
            "content": _json_content(
                {
                    "type": "object",
                    "properties": {
                        "error": {"type": "string"},
                        "details": {"type": "array", "items": {"type": "string"}},
                    },
                }
            ),
        },
    }


# ---------------------------------------------------------------------------
# Example synthesis
# ---------------------------------------------------------------------------


def example_value(field: FieldDefinition, timestamp: str) -> Any:
    """
    A representative value for *field*, always of the JSON type its
    schema declares.  The first ``enum`` option wins when one is given.
    """
    rules = field.rules
    if rules.enum:
        return rules.enum[0]

    kind: FieldType = field.field_type
    if kind in _LENGTH_TYPES:
        return "John Doe" if field.name == "name" else f"Sample {field.name}"
    if kind is FieldType.EMAIL:
        return "user@example.com"
    if kind is FieldType.URL:
        return "https://example.com"
    if kind in (FieldType.NUMBER, FieldType.INTEGER, FieldType.INT):
        return 1 if field.name == "id" else 100
    if kind in (FieldType.FLOAT, FieldType.DECIMAL, FieldType.DOUBLE):
        return 99.99
    if kind in (FieldType.BOOLEAN, FieldType.BOOL):
        return True
    if kind in (FieldType.DATE, FieldType.DATETIME, FieldType.TIMESTAMP):
        return timestamp
    if kind is FieldType.ARRAY:
        return ["sample"]
    if kind in (FieldType.JSON, FieldType.OBJECT):
        return {}
    return f"sample_{field.name}"


def synthesize_example(entity: EntityDefinition, timestamp: str) -> Dict[str, Any]:
    """One example value per field, in field order."""
    return {field.name: example_value(field, timestamp) for field in entity.fields}


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class OpenAPIGenerator:
    """
    Builds ``{openApiSpec, summary, codeExamples}`` for a canonical model.

    Args:
        config: Shared generation settings (info block, servers, page size,
            snippet base URL).
        clock: Returns the current time; used for date-like example values
            and ``summary.generatedAt``.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config: GenerationConfig = config or GenerationConfig()
        self._clock: Callable[[], datetime] = clock or utc_now

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, model: RawModel) -> Dict[str, Any]:
        """
        Raises:
            GenerationFailure: kind ``api`` on any internal fault, or kind
                ``normalization`` when a raw mapping is malformed.
        """
        try:
            canonical: CanonicalModel = (
                model if isinstance(model, CanonicalModel) else normalize_model(model)
            )
            timestamp: str = iso_timestamp(self._clock())
            spec: Dict[str, Any] = self._build_spec(canonical, timestamp)
            result: Dict[str, Any] = {
                "openApiSpec": spec,
                "summary": {
                    "totalEndpoints": len(spec["paths"]),
                    "totalSchemas": len(spec["components"]["schemas"]),
                    "entities": [e.name for e in canonical.entities],
                    "generatedAt": timestamp,
                },
                "codeExamples": self._code_examples(canonical, timestamp),
            }
        except GenerationFailure:
            raise
        except Exception as exc:
            logger.error("OpenAPI generation failed: %s", exc, exc_info=True)
            raise GenerationFailure(GeneratorKind.API, str(exc)) from exc

        logger.info(
            "OpenAPI generated: %d paths, %d schemas",
            result["summary"]["totalEndpoints"],
            result["summary"]["totalSchemas"],
        )
        return result

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def _build_spec(self, model: CanonicalModel, timestamp: str) -> Dict[str, Any]:
        cfg: GenerationConfig = self.config
        spec: Dict[str, Any] = {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": cfg.api_title,
                "description": cfg.api_description,
                "version": cfg.api_version,
                "contact": {"name": cfg.contact_name, "url": cfg.contact_url},
            },
            "servers": [
                {"url": s.url, "description": s.description} for s in cfg.servers
            ],
            "paths": {},
            "components": {"schemas": {}, "responses": _shared_responses()},
            "tags": [],
        }

        for entity in model.entities:
            spec["components"]["schemas"][entity.name] = self.component_schema(
                entity, timestamp
            )
            spec["tags"].append(
                {
                    "name": entity.name,
                    "description": f"{entity.description or entity.name} operations",
                }
            )
            spec["paths"].update(self._crud_paths(entity))

        self._add_relationship_paths(spec["paths"], model)
        return spec

    def component_schema(
        self, entity: EntityDefinition, timestamp: str
    ) -> Dict[str, Any]:
        properties: Dict[str, Any] = {
            field.name: self.property_schema(field) for field in entity.fields
        }
        required: List[str] = [f.name for f in entity.fields if f.required]

        schema: Dict[str, Any] = {"type": "object", "properties": properties}
        # OpenAPI 3.0 forbids an empty ``required`` array.
        if required:
            schema["required"] = required
        schema["example"] = synthesize_example(entity, timestamp)
        return schema

    def property_schema(self, field: FieldDefinition) -> Dict[str, Any]:
        kind: FieldType = field.field_type
        oa_type, fmt = openapi_type(kind)
        rules = field.rules

        schema: Dict[str, Any] = {
            "description": field.description or "",
            "type": oa_type,
        }
        if fmt is not None:
            schema["format"] = fmt

        if kind in _LENGTH_TYPES:
            if rules.max_length is not None:
                schema["maxLength"] = rules.max_length
            if rules.min_length is not None:
                schema["minLength"] = rules.min_length
            if rules.pattern is not None:
                schema["pattern"] = rules.pattern
        elif kind in NUMERIC_TYPES:
            if rules.minimum is not None:
                schema["minimum"] = rules.minimum
            if rules.maximum is not None:
                schema["maximum"] = rules.maximum
        elif kind is FieldType.ARRAY:
            schema["items"] = {"type": "string"}

        # 3.0 has no null type and needs at least one enum value.
        if rules.has_default and rules.default is not None:
            schema["default"] = copy.deepcopy(rules.default)
        if rules.enum:
            schema["enum"] = list(rules.enum)
        return schema

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _crud_paths(self, entity: EntityDefinition) -> Dict[str, Any]:
        name: str = entity.name
        plural: str = entity.table_name
        base_path: str = f"/{plural}"

        collection: Dict[str, Any] = {
            "get": {
                "tags": [name],
                "summary": f"Get all {plural}",
                "description": f"Retrieve a list of all {plural}",
                "parameters": [
                    {
                        "name": "page",
                        "in": "query",
                        "description": "Page number for pagination",
                        "required": False,
                        "schema": {"type": "integer", "default": 1},
                    },
                    {
                        "name": "limit",
                        "in": "query",
                        "description": "Number of items per page",
                        "required": False,
                        "schema": {
                            "type": "integer",
                            "default": self.config.default_page_size,
                        },
                    },
                    {
                        "name": "sort",
                        "in": "query",
                        "description": "Sort field",
                        "required": False,
                        "schema": {"type": "string"},
                    },
                ],
                "responses": {
                    "200": {
                        "description": f"List of {plural}",
                        "content": _json_content(
                            {
                                "type": "object",
                                "properties": {
                                    "data": {
                                        "type": "array",
                                        "items": _schema_ref(name),
                                    },
                                    "pagination": {
                                        "type": "object",
                                        "properties": {
                                            "page": {"type": "integer"},
                                            "limit": {"type": "integer"},
                                            "total": {"type": "integer"},
                                            "pages": {"type": "integer"},
                                        },
                                    },
                                },
                            }
                        ),
                    }
                },
            },
            "post": {
                "tags": [name],
                "summary": f"Create a new {name}",
                "description": f"Create a new {name} record",
                "requestBody": {
                    "required": True,
                    "content": _json_content(_schema_ref(name)),
                },
                "responses": {
                    "201": {
                        "description": f"{name} created successfully",
                        "content": _json_content(_schema_ref(name)),
                    },
                    "400": _response_ref("ValidationError"),
                },
            },
        }

        item: Dict[str, Any] = {
            "get": {
                "tags": [name],
                "summary": f"Get {name} by ID",
                "description": f"Retrieve a specific {name} by its ID",
                "parameters": [_id_parameter(name)],
                "responses": {
                    "200": {
                        "description": f"{name} details",
                        "content": _json_content(_schema_ref(name)),
                    },
                    "404": _response_ref("NotFound"),
                },
            },
            "put": {
                "tags": [name],
                "summary": f"Update {name}",
                "description": f"Update an existing {name}",
                "parameters": [_id_parameter(name)],
                "requestBody": {
                    "required": True,
                    "content": _json_content(_schema_ref(name)),
                },
                "responses": {
                    "200": {
                        "description": f"{name} updated successfully",
                        "content": _json_content(_schema_ref(name)),
                    },
                    "404": _response_ref("NotFound"),
                    "400": _response_ref("ValidationError"),
                },
            },
            "delete": {
                "tags": [name],
                "summary": f"Delete {name}",
                "description": f"Delete a {name} by ID",
                "parameters": [_id_parameter(name)],
                "responses": {
                    "204": {"description": f"{name} deleted successfully"},
                    "404": _response_ref("NotFound"),
                },
            },
        }

        return {base_path: collection, f"{base_path}/{{id}}": item}

    def _add_relationship_paths(
        self, paths: Dict[str, Any], model: CanonicalModel
    ) -> None:
        for rel in model.relationships:
            resolved = model.resolve(rel)
            if resolved is None:
                logger.debug("Skipping unresolved relationship %r", rel)
                continue
            source, target = resolved

            path: str = f"/{source.table_name}/{{id}}/{target.table_name}"
            if path in paths:
                logger.debug("Relationship path %s already present; keeping first", path)
                continue

            paths[path] = {
                "get": {
                    "tags": [rel.source],
                    "summary": f"Get {rel.target} related to {rel.source}",
                    "description": (
                        f"Retrieve {target.table_name} associated with "
                        f"a specific {rel.source}"
                    ),
                    "parameters": [_id_parameter(rel.source)],
                    "responses": {
                        "200": {
                            "description": f"Related {target.table_name}",
                            "content": _json_content(
                                {"type": "array", "items": _schema_ref(rel.target)}
                            ),
                        },
                        "404": _response_ref("NotFound"),
                    },
                }
            }

    # ------------------------------------------------------------------
    # Client snippets
    # ------------------------------------------------------------------

    def _code_examples(
        self, model: CanonicalModel, timestamp: str
    ) -> Dict[str, Dict[str, Dict[str, str]]]:
        examples: Dict[str, Dict[str, Dict[str, str]]] = {
            "javascript": {},
            "python": {},
            "curl": {},
        }
        base_url: str = self.config.code_example_base_url.rstrip("/")
        relative_base: str = urlsplit(base_url).path.rstrip("/")

        for entity in model.entities:
            payload: Dict[str, Any] = synthesize_example(entity, timestamp)
            examples["javascript"][entity.name] = _javascript_snippets(
                entity, relative_base, payload
            )
            examples["python"][entity.name] = _python_snippets(
                entity, base_url, payload
            )
            examples["curl"][entity.name] = _curl_snippets(entity, base_url, payload)

        return examples


def _javascript_snippets(
    entity: EntityDefinition, base: str, payload: Dict[str, Any]
) -> Dict[str, str]:
    name: str = entity.name
    plural: str = entity.table_name
    cap: str = capitalize_first(name)
    body: str = json.dumps(payload, indent=2, ensure_ascii=False)
    return {
        "getAll": (
            f"// Get all {plural}\n"
            f"const response = await fetch('{base}/{plural}');\n"
            "const data = await response.json();\n"
            "console.log(data);"
        ),
        "getById": (
            f"// Get {name} by ID\n"
            f"const response = await fetch('{base}/{plural}/1');\n"
            f"const {name} = await response.json();\n"
            f"console.log({name});"
        ),
        "create": (
            f"// Create new {name}\n"
            f"const new{cap} = {body};\n"
            "\n"
            f"const response = await fetch('{base}/{plural}', {{\n"
            "  method: 'POST',\n"
            "  headers: { 'Content-Type': 'application/json' },\n"
            f"  body: JSON.stringify(new{cap})\n"
            "});\n"
            f"const created{cap} = await response.json();"
        ),
        "update": (
            f"// Update {name}\n"
            "const updates = { name: 'Updated Name' };\n"
            "\n"
            f"const response = await fetch('{base}/{plural}/1', {{\n"
            "  method: 'PUT',\n"
            "  headers: { 'Content-Type': 'application/json' },\n"
            "  body: JSON.stringify(updates)\n"
            "});\n"
            f"const updated{cap} = await response.json();"
        ),
        "delete": (
            f"// Delete {name}\n"
            f"const response = await fetch('{base}/{plural}/1', {{\n"
            "  method: 'DELETE'\n"
            "});\n"
            f"console.log('{name} deleted:', response.ok);"
        ),
    }


def _python_snippets(
    entity: EntityDefinition, base_url: str, payload: Dict[str, Any]
) -> Dict[str, str]:
    name: str = entity.name
    plural: str = entity.table_name
    body: str = pprint.pformat(payload, sort_dicts=False)
    return {
        "getAll": (
            f"# Get all {plural}\n"
            "import requests\n"
            "\n"
            f"response = requests.get('{base_url}/{plural}')\n"
            "data = response.json()\n"
            "print(data)"
        ),
        "create": (
            f"# Create new {name}\n"
            "import requests\n"
            "\n"
            f"new_{name} = {body}\n"
            "\n"
            f"response = requests.post('{base_url}/{plural}', json=new_{name})\n"
            f"created_{name} = response.json()\n"
            f"print(created_{name})"
        ),
    }


def _shell_quote(text: str) -> str:
    return text.replace("'", "'\\''")


def _curl_snippets(
    entity: EntityDefinition, base_url: str, payload: Dict[str, Any]
) -> Dict[str, str]:
    name: str = entity.name
    plural: str = entity.table_name
    body: str = _shell_quote(
        json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    )
    return {
        "getAll": (
            f"# Get all {plural}\n"
            f'curl -X GET "{base_url}/{plural}"'
        ),
        "create": (
            f"# Create new {name}\n"
            f'curl -X POST "{base_url}/{plural}" \\\n'
            '  -H "Content-Type: application/json" \\\n'
            f"  -d '{body}'"
        ),
        "update": (
            f"# Update {name}\n"
            f'curl -X PUT "{base_url}/{plural}/1" \\\n'
            '  -H "Content-Type: application/json" \\\n'
            """  -d '{"name": "Updated Name"}'"""
        ),
        "delete": (
            f"# Delete {name}\n"
            f'curl -X DELETE "{base_url}/{plural}/1"'
        ),
    }


def generate_openapi(
    model: RawModel,
    config: Optional[GenerationConfig] = None,
) -> Dict[str, Any]:
    """Functional shortcut for ``OpenAPIGenerator(config).generate(model)``."""
    return OpenAPIGenerator(config).generate(model)


__all__: List[str] = [
    "OPENAPI_VERSION",
    "example_value",
    "synthesize_example",
    "OpenAPIGenerator",
    "generate_openapi",
]

logger.debug("schemagen.openapi loaded — %d public symbols.", len(__all__))
