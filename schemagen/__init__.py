# File: schemagen/__init__.py
"""
SchemaGen — Multi-Target Schema Generator
==========================================

Projects one entity/relationship model into three mutually consistent
artifacts: a JSON Schema document, an OpenAPI 3.0 specification with full
CRUD paths and client snippets, and ER diagrams (Mermaid, PlantUML and a
plain-text description).  A secondary converter turns a generated JSON
Schema into TypeScript interfaces, Mongoose schemas or SQL DDL.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌────────────┐
    │  CLI / Entry │────▶│ ArtifactGenerator│────▶│ normalizer │
    │   (cli.py)   │     │  (generator.py)  │     └────────────┘
    └──────┬───────┘     └────────┬─────────┘
           │            ┌─────────┼───────────┐
           ▼            ▼         ▼           ▼
    ┌───────────┐ ┌───────────┐ ┌─────────┐ ┌──────────┐
    │ exporters │ │json_schema│ │ openapi │ │ diagrams │
    └───────────┘ └───────────┘ └─────────┘ └──────────┘
                        │  type_maps · models · validators
                        ▼
                  ┌────────────┐
                  │ converters │
                  └────────────┘

Usage::

    # As a library
    from schemagen import ArtifactGenerator, GenerationConfig
    bundle = ArtifactGenerator(GenerationConfig()).generate(raw_model)
    print(bundle.diagrams["mermaid"])

    # From the command line
    python -m schemagen --input model.yaml --output ./out --verbose
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from schemagen.converters import SchemaFormat, SchemaFormatConverter, convert_schema_format
from schemagen.diagrams import DiagramGenerator, generate_alternative_diagrams
from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.exporters import ArtifactExporter, ExportManifest, ExportResult
from schemagen.generator import (
    ArtifactGenerator,
    GenerationBundle,
    GenerationReport,
    generate_from_file,
)
from schemagen.json_schema import JsonSchemaGenerator, generate_json_schema
from schemagen.models import (
    CanonicalModel,
    EntityDefinition,
    FieldConstraints,
    FieldDefinition,
    FieldType,
    GenerationConfig,
    RelationshipDefinition,
    RelationshipType,
    SchemaValidationReport,
    ServerInfo,
)
from schemagen.normalizer import normalize_model
from schemagen.openapi import OpenAPIGenerator, generate_openapi
from schemagen.utils import Timer, to_plural
from schemagen.validators import (
    ValidationResult,
    validate_full,
    validate_json_schema,
    validate_model,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Orchestrator
    "ArtifactGenerator",
    "GenerationBundle",
    "GenerationReport",
    "generate_from_file",
    # Models
    "CanonicalModel",
    "EntityDefinition",
    "FieldConstraints",
    "FieldDefinition",
    "FieldType",
    "GenerationConfig",
    "RelationshipDefinition",
    "RelationshipType",
    "SchemaValidationReport",
    "ServerInfo",
    # Normalizer & generators
    "normalize_model",
    "JsonSchemaGenerator",
    "generate_json_schema",
    "OpenAPIGenerator",
    "generate_openapi",
    "DiagramGenerator",
    "generate_alternative_diagrams",
    # Converter
    "SchemaFormat",
    "SchemaFormatConverter",
    "convert_schema_format",
    # Errors
    "GenerationFailure",
    "GeneratorKind",
    # Validation
    "ValidationResult",
    "validate_full",
    "validate_model",
    "validate_json_schema",
    # Exporters
    "ArtifactExporter",
    "ExportManifest",
    "ExportResult",
    # Utilities
    "Timer",
    "to_plural",
]
