# File: schemagen/json_schema.py
"""
SchemaGen - JSON Schema Generator
==================================
Projects the canonical model into a single JSON Schema (draft 2020-12)
document: one definition per entity, required-field lists, format and
constraint annotations, and ``metadata`` side-channels that let the
Schema Format Converter recover information the JSON Schema type
projection loses (``integer`` vs ``float``, primary / auto-increment
flags, the storage table name).

The standalone meta-validation operation lives in
``schemagen.validators.validate_json_schema``.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

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
from schemagen.type_maps import json_schema_type
from schemagen.utils import iso_timestamp, utc_now

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.json_schema")

JSON_SCHEMA_DRAFT: str = "https://json-schema.org/draft/2020-12/schema"

# Only plain text tokens carry length / pattern keywords.
_LENGTH_TYPES: frozenset = frozenset({FieldType.STRING, FieldType.TEXT})


class JsonSchemaGenerator:
    """
    Stateless JSON Schema projection.

    Args:
        config: Shared generation settings (``schema_id``, title, description).
        clock: Returns the current time; injected so tests can pin
            ``metadata.generatedAt``.
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
        Build the JSON Schema document for *model*.

        Raises:
            GenerationFailure: kind ``schema`` on any internal fault, or
                kind ``normalization`` when a raw mapping is malformed.
        """
        try:
            canonical: CanonicalModel = (
                model if isinstance(model, CanonicalModel) else normalize_model(model)
            )
            document: Dict[str, Any] = self._build_document(canonical)
        except GenerationFailure:
            raise
        except Exception as exc:
            logger.error("JSON Schema generation failed: %s", exc, exc_info=True)
            raise GenerationFailure(GeneratorKind.SCHEMA, str(exc)) from exc

        logger.info(
            "JSON Schema generated: %d definitions",
            len(document["definitions"]),
        )
        return document

    # ------------------------------------------------------------------
    # Document assembly
    # ------------------------------------------------------------------

    def _build_document(self, model: CanonicalModel) -> Dict[str, Any]:
        definitions: Dict[str, Any] = {}
        for entity in model.entities:
            definitions[entity.name] = self.build_entity_definition(entity)

        return {
            "$schema": JSON_SCHEMA_DRAFT,
            "$id": self.config.schema_id,
            "title": self.config.schema_title,
            "description": self.config.schema_description,
            "type": "object",
            "definitions": definitions,
            "relationships": [r.to_wire() for r in model.relationships],
            "metadata": {
                "generatedAt": iso_timestamp(self._clock()),
                "totalEntities": len(model.entities),
                "totalRelationships": len(model.relationships),
            },
        }

    def build_entity_definition(self, entity: EntityDefinition) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for field in entity.fields:
            properties[field.name] = self.build_property_schema(field)
            if field.required:
                required.append(field.name)

        return {
            "type": "object",
            "title": entity.description or entity.name,
            "description": f"Schema for {entity.name} entity",
            "properties": properties,
            "required": required,
            "additionalProperties": False,
            "metadata": {
                "tableName": entity.table_name,
                "entity": entity.name,
            },
        }

    def build_property_schema(self, field: FieldDefinition) -> Dict[str, Any]:
        kind: FieldType = field.field_type
        json_type, fmt = json_schema_type(kind)
        rules = field.rules

        schema: Dict[str, Any] = {
            "description": field.description or "",
            "type": json_type,
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
        elif kind is FieldType.ARRAY and rules.items is not None:
            schema["items"] = copy.deepcopy(rules.items)
        elif kind is FieldType.UNKNOWN:
            logger.debug(
                "Unknown type '%s' on field '%s'; using string", field.type, field.name
            )

        if rules.has_default:
            schema["default"] = copy.deepcopy(rules.default)
        if rules.enum is not None:
            schema["enum"] = list(rules.enum)

        schema["metadata"] = {
            "fieldName": field.name,
            "originalType": field.type,
            "constraints": copy.deepcopy(field.raw_constraints()),
        }
        return schema


def generate_json_schema(
    model: RawModel,
    config: Optional[GenerationConfig] = None,
) -> Dict[str, Any]:
    """Functional shortcut for ``JsonSchemaGenerator(config).generate(model)``."""
    return JsonSchemaGenerator(config).generate(model)


__all__: List[str] = [
    "JSON_SCHEMA_DRAFT",
    "JsonSchemaGenerator",
    "generate_json_schema",
]

logger.debug("schemagen.json_schema loaded — %d public symbols.", len(__all__))
