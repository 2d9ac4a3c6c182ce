# File: schemagen/converters.py
"""
SchemaGen - Schema Format Converter
====================================
Secondary projections of an already generated JSON Schema document into
TypeScript interfaces, Mongoose schemas or SQL DDL.

The converter is a pure function of the document.  It relies on the
``metadata`` side-channels written by the JSON Schema generator
(``metadata.tableName`` per definition, ``metadata.constraints`` per
property) and never looks at the canonical model.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping

from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.type_maps import mongoose_type, sql_type, typescript_type
from schemagen.utils import capitalize_first

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.converters")


class SchemaFormat(str, Enum):
    """Target notations of the converter."""

    TYPESCRIPT = "typescript"
    MONGOOSE = "mongoose"
    SQL = "sql"

    @classmethod
    def parse(cls, token: Any) -> "SchemaFormat":
        """Case-insensitive lookup; anything else is a conversion failure."""
        if isinstance(token, SchemaFormat):
            return token
        if isinstance(token, str):
            try:
                return cls(token.lower())
            except ValueError:
                pass
        supported: str = ", ".join(f.value for f in cls)
        raise GenerationFailure(
            GeneratorKind.CONVERSION,
            f"unsupported format {token!r} (expected one of: {supported})",
        )


def _definitions(document: Mapping[str, Any]) -> Mapping[str, Any]:
    definitions: Any = document.get("definitions") or {}
    if not isinstance(definitions, Mapping):
        raise TypeError("'definitions' must be a mapping")
    return definitions


def _properties(definition: Mapping[str, Any]) -> Mapping[str, Any]:
    return definition.get("properties") or {}


def _required(definition: Mapping[str, Any]) -> List[str]:
    return list(definition.get("required") or [])


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def to_typescript(document: Mapping[str, Any]) -> str:
    parts: List[str] = ["// Auto-generated TypeScript interfaces\n\n"]

    for name, definition in _definitions(document).items():
        required: List[str] = _required(definition)
        parts.append(f"export interface {capitalize_first(name)} {{\n")
        for prop, prop_schema in _properties(definition).items():
            optional: str = "" if prop in required else "?"
            parts.append(f"  {prop}{optional}: {typescript_type(prop_schema)};\n")
        parts.append("}\n\n")

    return "".join(parts)


def to_mongoose(document: Mapping[str, Any]) -> str:
    parts: List[str] = [
        "// Auto-generated Mongoose schemas\n",
        "const mongoose = require('mongoose');\n\n",
    ]

    for name, definition in _definitions(document).items():
        required: List[str] = _required(definition)
        model_name: str = capitalize_first(name)
        parts.append(f"const {name}Schema = new mongoose.Schema({{\n")
        for prop, prop_schema in _properties(definition).items():
            # Mongoose manages document identity itself.
            if prop == "id":
                continue
            parts.append(f"  {prop}: {{\n")
            parts.append(f"    type: {mongoose_type(prop_schema)},\n")
            if prop in required:
                parts.append("    required: true,\n")
            parts.append("  },\n")
        parts.append("}, { timestamps: true });\n\n")
        parts.append(
            f"module.exports.{model_name} = mongoose.model('{model_name}', {name}Schema);\n\n"
        )

    return "".join(parts)


def to_sql(document: Mapping[str, Any]) -> str:
    parts: List[str] = ["-- Auto-generated SQL DDL\n\n"]

    for name, definition in _definitions(document).items():
        metadata: Mapping[str, Any] = definition.get("metadata") or {}
        table: str = metadata.get("tableName") or f"{name}s"
        required: List[str] = _required(definition)

        columns: List[str] = []
        for prop, prop_schema in _properties(definition).items():
            prop_meta: Mapping[str, Any] = prop_schema.get("metadata") or {}
            constraints: Mapping[str, Any] = prop_meta.get("constraints") or {}
            column: str = f"  {prop} {sql_type(prop_schema)}"
            if prop in required:
                column += " NOT NULL"
            if constraints.get("primary"):
                column += " PRIMARY KEY"
            if constraints.get("autoIncrement"):
                column += " AUTO_INCREMENT"
            columns.append(column)

        parts.append(f"CREATE TABLE {table} (\n")
        parts.append(",\n".join(columns))
        parts.append("\n);\n\n")

    return "".join(parts)


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------


class SchemaFormatConverter:
    """Dispatches a JSON Schema document to one of the renderers above."""

    def __init__(self) -> None:
        self._renderers: Dict[SchemaFormat, Callable[[Mapping[str, Any]], str]] = {
            SchemaFormat.TYPESCRIPT: to_typescript,
            SchemaFormat.MONGOOSE: to_mongoose,
            SchemaFormat.SQL: to_sql,
        }

    def convert(self, document: Mapping[str, Any], fmt: Any) -> str:
        """
        Render *document* in format *fmt*.

        Raises:
            GenerationFailure: kind ``conversion`` for an unsupported format
                or a document that does not have the expected shape.
        """
        target: SchemaFormat = SchemaFormat.parse(fmt)
        try:
            if not isinstance(document, Mapping):
                raise TypeError(f"expected a mapping, got {type(document).__name__}")
            output: str = self._renderers[target](document)
        except Exception as exc:
            logger.error("Conversion to %s failed: %s", target.value, exc, exc_info=True)
            raise GenerationFailure(GeneratorKind.CONVERSION, str(exc)) from exc

        logger.info("Converted schema to %s (%d chars)", target.value, len(output))
        return output


def convert_schema_format(document: Mapping[str, Any], fmt: Any) -> str:
    """Functional shortcut for ``SchemaFormatConverter().convert``."""
    return SchemaFormatConverter().convert(document, fmt)


__all__: List[str] = [
    "SchemaFormat",
    "to_typescript",
    "to_mongoose",
    "to_sql",
    "SchemaFormatConverter",
    "convert_schema_format",
]

logger.debug("schemagen.converters loaded — %d public symbols.", len(__all__))
