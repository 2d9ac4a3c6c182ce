# File: schemagen/type_maps.py
"""
SchemaGen - Type Mapping Tables
================================
Declarative lookup tables from the abstract field / relationship
vocabularies to each target format's native keywords.

Every table carries an explicit ``UNKNOWN`` entry so that each lookup is a
total function: an unrecognized token always resolves to the generic
string / varchar equivalent of that format and never raises.

The tables intentionally diverge in small ways (``json`` maps to
``object`` in JSON Schema but to ``json`` in the ER notation; diagrams do
not encode ``format``), so they are kept as separate dicts rather than
derived from one another.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from schemagen.models import FieldType, RelationshipType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.type_maps")

# Type + optional ``format`` keyword
TypeWithFormat = Tuple[str, Optional[str]]

# ---------------------------------------------------------------------------
# JSON Schema (draft 2020-12)
# ---------------------------------------------------------------------------

JSON_SCHEMA_TYPE_MAP: Dict[FieldType, TypeWithFormat] = {
    FieldType.STRING: ("string", None),
    FieldType.TEXT: ("string", None),
    FieldType.EMAIL: ("string", "email"),
    FieldType.URL: ("string", "uri"),
    FieldType.NUMBER: ("integer", None),
    FieldType.INTEGER: ("integer", None),
    FieldType.INT: ("integer", None),
    FieldType.FLOAT: ("number", None),
    FieldType.DECIMAL: ("number", None),
    FieldType.DOUBLE: ("number", None),
    FieldType.BOOLEAN: ("boolean", None),
    FieldType.BOOL: ("boolean", None),
    FieldType.DATE: ("string", "date-time"),
    FieldType.DATETIME: ("string", "date-time"),
    FieldType.TIMESTAMP: ("string", "date-time"),
    FieldType.ARRAY: ("array", None),
    FieldType.JSON: ("object", None),
    FieldType.OBJECT: ("object", None),
    FieldType.UNKNOWN: ("string", None),
}

# ---------------------------------------------------------------------------
# OpenAPI 3.0 schema objects
# ---------------------------------------------------------------------------

OPENAPI_TYPE_MAP: Dict[FieldType, TypeWithFormat] = {
    FieldType.STRING: ("string", None),
    FieldType.TEXT: ("string", None),
    FieldType.EMAIL: ("string", "email"),
    FieldType.URL: ("string", "uri"),
    FieldType.NUMBER: ("integer", None),
    FieldType.INTEGER: ("integer", None),
    FieldType.INT: ("integer", None),
    FieldType.FLOAT: ("number", None),
    FieldType.DECIMAL: ("number", None),
    FieldType.DOUBLE: ("number", None),
    FieldType.BOOLEAN: ("boolean", None),
    FieldType.BOOL: ("boolean", None),
    FieldType.DATE: ("string", "date-time"),
    FieldType.DATETIME: ("string", "date-time"),
    FieldType.TIMESTAMP: ("string", "date-time"),
    FieldType.ARRAY: ("array", None),
    FieldType.JSON: ("object", None),
    FieldType.OBJECT: ("object", None),
    FieldType.UNKNOWN: ("string", None),
}

# ---------------------------------------------------------------------------
# ER notation (Mermaid erDiagram)
# ---------------------------------------------------------------------------

ER_TYPE_MAP: Dict[FieldType, str] = {
    FieldType.STRING: "varchar",
    FieldType.TEXT: "text",
    FieldType.EMAIL: "varchar",
    FieldType.URL: "varchar",
    FieldType.NUMBER: "int",
    FieldType.INTEGER: "int",
    FieldType.INT: "int",
    FieldType.FLOAT: "float",
    FieldType.DECIMAL: "decimal",
    FieldType.DOUBLE: "double",
    FieldType.BOOLEAN: "boolean",
    FieldType.BOOL: "boolean",
    FieldType.DATE: "date",
    FieldType.DATETIME: "datetime",
    FieldType.TIMESTAMP: "timestamp",
    FieldType.ARRAY: "json",
    FieldType.JSON: "json",
    FieldType.OBJECT: "json",
    FieldType.UNKNOWN: "varchar",
}

# ---------------------------------------------------------------------------
# UML notation (PlantUML entity blocks)
# ---------------------------------------------------------------------------

UML_TYPE_MAP: Dict[FieldType, str] = {
    FieldType.STRING: "VARCHAR",
    FieldType.TEXT: "TEXT",
    FieldType.EMAIL: "VARCHAR",
    FieldType.URL: "VARCHAR",
    FieldType.NUMBER: "INTEGER",
    FieldType.INTEGER: "INTEGER",
    FieldType.INT: "INTEGER",
    FieldType.FLOAT: "FLOAT",
    FieldType.DECIMAL: "DECIMAL",
    FieldType.DOUBLE: "DOUBLE",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.BOOL: "BOOLEAN",
    FieldType.DATE: "DATE",
    FieldType.DATETIME: "DATETIME",
    FieldType.TIMESTAMP: "TIMESTAMP",
    FieldType.ARRAY: "JSON",
    FieldType.JSON: "JSON",
    FieldType.OBJECT: "JSON",
    FieldType.UNKNOWN: "VARCHAR",
}

# ---------------------------------------------------------------------------
# Relationship tables
# ---------------------------------------------------------------------------

# Shared by the ER and UML notations.
CARDINALITY_SYMBOLS: Dict[RelationshipType, str] = {
    RelationshipType.ONE_TO_ONE: "||--||",
    RelationshipType.ONE_TO_MANY: "||--o{",
    RelationshipType.MANY_TO_ONE: "o{--||",
    RelationshipType.MANY_TO_MANY: "o{--o{",
    RelationshipType.UNKNOWN: "||--o{",
}

RELATIONSHIP_VERBS: Dict[RelationshipType, str] = {
    RelationshipType.ONE_TO_ONE: "has one",
    RelationshipType.ONE_TO_MANY: "has many",
    RelationshipType.MANY_TO_ONE: "belongs to",
    RelationshipType.MANY_TO_MANY: "has many",
    RelationshipType.UNKNOWN: "relates to",
}

CLASS_CARDINALITIES: Dict[RelationshipType, str] = {
    RelationshipType.ONE_TO_ONE: "1 --> 1",
    RelationshipType.ONE_TO_MANY: '1 --> "*"',
    RelationshipType.MANY_TO_ONE: '"*" --> 1',
    RelationshipType.MANY_TO_MANY: '"*" --> "*"',
    RelationshipType.UNKNOWN: '1 --> "*"',
}

# ---------------------------------------------------------------------------
# Schema Format Converter tables (keyed by JSON Schema ``type`` keyword)
# ---------------------------------------------------------------------------

TYPESCRIPT_TYPE_MAP: Dict[str, str] = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "object": "object",
}
TYPESCRIPT_FALLBACK: str = "any"

MONGOOSE_TYPE_MAP: Dict[str, str] = {
    "string": "String",
    "number": "Number",
    "integer": "Number",
    "boolean": "Boolean",
    "array": "[String]",
    "object": "mongoose.Schema.Types.Mixed",
}
MONGOOSE_FALLBACK: str = "String"

SQL_TYPE_MAP: Dict[str, str] = {
    "integer": "INT",
    "number": "DECIMAL(10,2)",
    "boolean": "BOOLEAN",
}
SQL_FALLBACK: str = "TEXT"
SQL_DEFAULT_VARCHAR_LENGTH: int = 255


# ---------------------------------------------------------------------------
# Lookup functions
# ---------------------------------------------------------------------------


def _as_field_type(token: Any) -> FieldType:
    if isinstance(token, FieldType):
        return token
    return FieldType.parse(token)


def _as_relationship_type(token: Any) -> RelationshipType:
    if isinstance(token, RelationshipType):
        return token
    return RelationshipType.parse(token)


def json_schema_type(token: Any) -> TypeWithFormat:
    """``(type, format)`` for a JSON Schema property."""
    return JSON_SCHEMA_TYPE_MAP[_as_field_type(token)]


def openapi_type(token: Any) -> TypeWithFormat:
    """``(type, format)`` for an OpenAPI schema object."""
    return OPENAPI_TYPE_MAP[_as_field_type(token)]


def er_type(token: Any) -> str:
    return ER_TYPE_MAP[_as_field_type(token)]


def uml_type(token: Any) -> str:
    return UML_TYPE_MAP[_as_field_type(token)]


def cardinality_symbol(token: Any) -> str:
    return CARDINALITY_SYMBOLS[_as_relationship_type(token)]


def relationship_verb(token: Any) -> str:
    return RELATIONSHIP_VERBS[_as_relationship_type(token)]


def class_cardinality(token: Any) -> str:
    return CLASS_CARDINALITIES[_as_relationship_type(token)]


def typescript_type(schema: Dict[str, Any]) -> str:
    """TypeScript type for a property schema; arrays recurse on ``items``."""
    kind: Any = schema.get("type")
    if kind == "array":
        items: Any = schema.get("items")
        if not isinstance(items, dict):
            items = {"type": TYPESCRIPT_FALLBACK}
        return f"{typescript_type(items)}[]"
    if not isinstance(kind, str):
        return TYPESCRIPT_FALLBACK
    return TYPESCRIPT_TYPE_MAP.get(kind, TYPESCRIPT_FALLBACK)


def mongoose_type(schema: Dict[str, Any]) -> str:
    kind: Any = schema.get("type")
    if not isinstance(kind, str):
        return MONGOOSE_FALLBACK
    return MONGOOSE_TYPE_MAP.get(kind, MONGOOSE_FALLBACK)


def sql_type(schema: Dict[str, Any]) -> str:
    kind: Any = schema.get("type")
    if kind == "string":
        length: Any = schema.get("maxLength") or SQL_DEFAULT_VARCHAR_LENGTH
        return f"VARCHAR({length})"
    if not isinstance(kind, str):
        return SQL_FALLBACK
    return SQL_TYPE_MAP.get(kind, SQL_FALLBACK)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "JSON_SCHEMA_TYPE_MAP",
    "OPENAPI_TYPE_MAP",
    "ER_TYPE_MAP",
    "UML_TYPE_MAP",
    "CARDINALITY_SYMBOLS",
    "RELATIONSHIP_VERBS",
    "CLASS_CARDINALITIES",
    "TYPESCRIPT_TYPE_MAP",
    "MONGOOSE_TYPE_MAP",
    "SQL_TYPE_MAP",
    "json_schema_type",
    "openapi_type",
    "er_type",
    "uml_type",
    "cardinality_symbol",
    "relationship_verb",
    "class_cardinality",
    "typescript_type",
    "mongoose_type",
    "sql_type",
]

logger.debug("schemagen.type_maps loaded — %d public symbols.", len(__all__))
