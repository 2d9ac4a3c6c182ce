# File: schemagen/validators.py
"""
SchemaGen - Model Linting & Schema Validation
==============================================
This module provides a **pure-function validation pipeline** that operates
on the canonical model defined in ``schemagen.models``.

Pydantic's built-in validation handles the structural shape of the model.
This module adds **semantic linting**: duplicate names, unknown type
tokens, constraints that do not apply to a field's type, relationships
whose endpoints do not resolve and relationship paths that collide.
Linting never blocks generation; every soft fallback the generators apply
is surfaced here instead.

It also hosts ``validate_json_schema``, the standalone meta-validation of
an arbitrary JSON Schema document, built on the ``jsonschema`` library.

Usage by downstream modules:
    from schemagen.validators import validate_full
    result = validate_full(model, config)
    print(result.format_report())
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from jsonschema import Draft202012Validator
from jsonschema.validators import validator_for

from schemagen.models import (
    NUMERIC_TYPES,
    CanonicalModel,
    FieldType,
    GenerationConfig,
    RelationshipType,
    SchemaValidationReport,
)
from schemagen.utils import iso_timestamp, utc_now

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight finding descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """
    Accumulates ``ValidationError`` instances produced by the pipeline.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "items": [item.to_dict() for item in self._items],
        }

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "❌",
                "warning": "⚠️",
                "info": "ℹ️",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            if item.context:
                for k, v in item.context.items():
                    lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_SEMANTIC_VERSION_RE: re.Pattern[str] = re.compile(
    r"^\d+\.\d+\.\d+([a-zA-Z0-9\.\-]+)?$"
)
_HTTP_URL_RE: re.Pattern[str] = re.compile(r"^https?://\S+$")

# Entities or fields beyond these sizes make the diagrams hard to read.
_LARGE_MODEL_ENTITIES: int = 50
_LARGE_ENTITY_FIELDS: int = 40


# ---------------------------------------------------------------------------
# Individual lint functions (each is O(n) or better)
# ---------------------------------------------------------------------------


def validate_entity_names(model: CanonicalModel) -> ValidationResult:
    """
    Validate entity and table names for:
    - duplicates (the first entity wins every name lookup)
    - duplicate table names (their CRUD paths would collide)
    - identifier format (diagram notations need bare identifiers)
    """
    result: ValidationResult = ValidationResult()
    seen_names: Set[str] = set()
    seen_tables: Set[str] = set()

    for entity in model.entities:
        ctx: Dict[str, Any] = {"entity": entity.name}

        if entity.name in seen_names:
            result.add_error(
                "DUPLICATE_ENTITY_NAME",
                f"Entity name '{entity.name}' is defined more than once.",
                ctx,
            )
        seen_names.add(entity.name)

        if entity.table_name in seen_tables:
            result.add_error(
                "DUPLICATE_TABLE_NAME",
                f"Table name '{entity.table_name}' is used by more than one entity.",
                {**ctx, "table": entity.table_name},
            )
        seen_tables.add(entity.table_name)

        if not _IDENTIFIER_RE.match(entity.name):
            result.add_warning(
                "INVALID_ENTITY_NAME",
                f"Entity name '{entity.name}' is not a valid identifier; "
                f"diagram output may not render.",
                ctx,
            )

        if not _IDENTIFIER_RE.match(entity.table_name):
            result.add_warning(
                "INVALID_TABLE_NAME",
                f"Table name '{entity.table_name}' of entity '{entity.name}' "
                f"is not a valid identifier.",
                {**ctx, "table": entity.table_name},
            )

    logger.debug(
        "validate_entity_names: checked %d entities, %d issue(s).",
        len(model.entities),
        len(result),
    )
    return result


def validate_field_names(model: CanonicalModel) -> ValidationResult:
    """Duplicate and malformed field names, and a non-primary ``id`` field."""
    result: ValidationResult = ValidationResult()

    for entity in model.entities:
        seen: Set[str] = set()
        for field in entity.fields:
            ctx: Dict[str, Any] = {"entity": entity.name, "field": field.name}

            if field.name in seen:
                result.add_error(
                    "DUPLICATE_FIELD_NAME",
                    f"Field '{field.name}' is duplicated in entity '{entity.name}'.",
                    ctx,
                )
            seen.add(field.name)

            if not _IDENTIFIER_RE.match(field.name):
                result.add_warning(
                    "INVALID_FIELD_NAME",
                    f"Field '{field.name}' in entity '{entity.name}' "
                    f"is not a valid identifier.",
                    ctx,
                )

            if field.name == "id" and not field.is_primary:
                result.add_warning(
                    "ID_NOT_PRIMARY",
                    f"Field 'id' in entity '{entity.name}' is not marked primary.",
                    ctx,
                )

    logger.debug("validate_field_names: completed for %d entities.", len(model.entities))
    return result


def validate_field_types(model: CanonicalModel) -> ValidationResult:
    """Unknown type tokens fall back to string in every output."""
    result: ValidationResult = ValidationResult()

    for entity in model.entities:
        for field in entity.fields:
            if field.field_type is FieldType.UNKNOWN:
                result.add_warning(
                    "UNKNOWN_FIELD_TYPE",
                    f"Field '{entity.name}.{field.name}' has unknown type "
                    f"'{field.type}'; it will be rendered as a string.",
                    {"entity": entity.name, "field": field.name, "type": field.type},
                )

    return result


def validate_constraints(model: CanonicalModel) -> ValidationResult:
    """
    Constraints that do not apply to the field's type are ignored by the
    generators; contradictory ranges and invalid patterns are errors.
    """
    result: ValidationResult = ValidationResult()

    for entity in model.entities:
        for field in entity.fields:
            if field.constraints is None:
                continue
            rules = field.constraints
            kind: FieldType = field.field_type
            ctx: Dict[str, Any] = {"entity": entity.name, "field": field.name}

            for key in rules.rejected_keys:
                result.add_warning(
                    "INVALID_CONSTRAINT_VALUE",
                    f"'{key}' on '{entity.name}.{field.name}' has a value of the "
                    f"wrong type and is only echoed in metadata.",
                    {**ctx, "constraint": key},
                )

            has_length: bool = rules.max_length is not None or rules.min_length is not None
            if has_length and kind not in (FieldType.STRING, FieldType.TEXT):
                result.add_warning(
                    "CONSTRAINT_TYPE_MISMATCH",
                    f"Length constraints on '{entity.name}.{field.name}' "
                    f"({field.type}) are ignored.",
                    ctx,
                )

            has_bounds: bool = rules.minimum is not None or rules.maximum is not None
            if has_bounds and kind not in NUMERIC_TYPES:
                result.add_warning(
                    "CONSTRAINT_TYPE_MISMATCH",
                    f"Numeric bounds on '{entity.name}.{field.name}' "
                    f"({field.type}) are ignored.",
                    ctx,
                )

            if rules.items is not None and kind is not FieldType.ARRAY:
                result.add_warning(
                    "CONSTRAINT_TYPE_MISMATCH",
                    f"'items' on '{entity.name}.{field.name}' "
                    f"({field.type}) is ignored.",
                    ctx,
                )

            if (
                rules.min_length is not None
                and rules.max_length is not None
                and rules.min_length > rules.max_length
            ):
                result.add_error(
                    "INVALID_LENGTH_RANGE",
                    f"minLength > maxLength on '{entity.name}.{field.name}'.",
                    {**ctx, "minLength": rules.min_length, "maxLength": rules.max_length},
                )

            if (
                rules.minimum is not None
                and rules.maximum is not None
                and rules.minimum > rules.maximum
            ):
                result.add_error(
                    "INVALID_VALUE_RANGE",
                    f"minimum > maximum on '{entity.name}.{field.name}'.",
                    {**ctx, "minimum": rules.minimum, "maximum": rules.maximum},
                )

            if rules.pattern is not None:
                try:
                    re.compile(rules.pattern)
                except re.error as exc:
                    result.add_error(
                        "INVALID_PATTERN",
                        f"Pattern on '{entity.name}.{field.name}' does not compile: {exc}",
                        {**ctx, "pattern": rules.pattern},
                    )

            if rules.enum is not None and not rules.enum:
                result.add_warning(
                    "EMPTY_ENUM",
                    f"Empty enum on '{entity.name}.{field.name}'.",
                    ctx,
                )

    return result


def validate_relationships(model: CanonicalModel) -> ValidationResult:
    """
    Unresolvable endpoints and unknown types are warnings (the relationship
    is skipped or rendered as one-to-many); a second relationship between
    the same pair of tables only produces one traversal path.
    """
    result: ValidationResult = ValidationResult()
    seen_paths: Dict[str, int] = {}

    for index, rel in enumerate(model.relationships):
        ctx: Dict[str, Any] = {"from": rel.source, "to": rel.target, "index": index}

        if rel.kind is RelationshipType.UNKNOWN:
            result.add_warning(
                "UNKNOWN_RELATIONSHIP_TYPE",
                f"Relationship {rel.source} -> {rel.target} has unknown type "
                f"'{rel.type}'; it will be rendered as oneToMany.",
                {**ctx, "type": rel.type},
            )

        resolved = model.resolve(rel)
        if resolved is None:
            missing: List[str] = [
                name
                for name in (rel.source, rel.target)
                if model.get_entity(name) is None
            ]
            result.add_warning(
                "UNRESOLVED_RELATIONSHIP",
                f"Relationship {rel.source} -> {rel.target} references unknown "
                f"entit{'y' if len(missing) == 1 else 'ies'} "
                f"{', '.join(repr(m) for m in missing)}; it will be skipped.",
                ctx,
            )
            continue

        source, target = resolved
        path: str = f"/{source.table_name}/{{id}}/{target.table_name}"
        if path in seen_paths:
            result.add_info(
                "DUPLICATE_RELATIONSHIP_PATH",
                f"Relationship #{index} maps to existing path {path}; "
                f"relationship #{seen_paths[path]} is kept.",
                {**ctx, "path": path},
            )
        else:
            seen_paths[path] = index

    return result


def validate_model_size(model: CanonicalModel) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    result.add_info(
        "MODEL_STATS",
        f"{len(model.entities)} entities, {model.total_fields} fields, "
        f"{len(model.relationships)} relationships.",
    )

    if not model.entities:
        result.add_warning("EMPTY_MODEL", "The model defines no entities.")
    elif len(model.entities) > _LARGE_MODEL_ENTITIES:
        result.add_warning(
            "LARGE_MODEL",
            f"The model defines {len(model.entities)} entities; "
            f"diagrams may be hard to read.",
        )

    for entity in model.entities:
        if len(entity.fields) > _LARGE_ENTITY_FIELDS:
            result.add_warning(
                "LARGE_ENTITY",
                f"Entity '{entity.name}' has {len(entity.fields)} fields.",
                {"entity": entity.name},
            )

    return result


def validate_generation_config(config: GenerationConfig) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    if not _SEMANTIC_VERSION_RE.match(config.api_version):
        result.add_warning(
            "API_VERSION_NOT_SEMVER",
            f"api_version '{config.api_version}' is not semantic-versioned.",
            {"api_version": config.api_version},
        )

    if not config.servers:
        result.add_warning(
            "NO_SERVERS",
            "No servers configured; the OpenAPI document defaults to '/'.",
        )
    for server in config.servers:
        if not _HTTP_URL_RE.match(server.url) and not server.url.startswith("/"):
            result.add_warning(
                "SERVER_URL_NOT_HTTP",
                f"Server URL '{server.url}' is neither absolute http(s) nor relative.",
                {"url": server.url},
            )

    if not _HTTP_URL_RE.match(config.code_example_base_url):
        result.add_warning(
            "EXAMPLE_BASE_URL_NOT_HTTP",
            f"code_example_base_url '{config.code_example_base_url}' "
            f"is not an http(s) URL; snippets may not run as-is.",
            {"url": config.code_example_base_url},
        )

    return result


# ---------------------------------------------------------------------------
# Composite entry points
# ---------------------------------------------------------------------------


def validate_model(model: CanonicalModel) -> ValidationResult:
    """Run every model-level lint function."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[CanonicalModel], ValidationResult]] = [
        validate_entity_names,
        validate_field_names,
        validate_field_types,
        validate_constraints,
        validate_relationships,
        validate_model_size,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(model))

    logger.info("Model validation complete: %s", result.summary())
    return result


def validate_full(
    model: CanonicalModel,
    config: GenerationConfig,
) -> ValidationResult:
    """
    **Master lint entry point** used by ``generator.py`` and ``cli.py``:
    model-level checks followed by configuration checks.
    """
    result: ValidationResult = ValidationResult()
    result.merge(validate_model(model))
    result.merge(validate_generation_config(config))

    if result.has_errors:
        logger.warning(
            "Lint found %d error(s). %s", result.error_count, result.summary()
        )
    else:
        logger.info("Lint PASSED. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# JSON Schema meta-validation
# ---------------------------------------------------------------------------


def _schema_counts(document: Any) -> Tuple[int, int]:
    if not isinstance(document, Mapping):
        return 0, 0
    definitions: Any = document.get("definitions")
    relationships: Any = document.get("relationships")
    return (
        len(definitions) if isinstance(definitions, Mapping) else 0,
        len(relationships) if isinstance(relationships, list) else 0,
    )


def validate_json_schema(
    document: Any,
    clock: Optional[Callable[[], datetime]] = None,
) -> SchemaValidationReport:
    """
    Meta-validate *document* against the JSON Schema dialect named by its
    ``$schema`` (draft 2020-12 when absent) and collect every violation.

    Never raises: an internal fault is reported as
    ``valid=False`` with a single ``{"message": ...}`` error.
    """
    validated_at: str = iso_timestamp((clock or utc_now)())

    try:
        cls = validator_for(document, default=Draft202012Validator)
        meta_cls = validator_for(cls.META_SCHEMA, default=cls)
        meta_validator = meta_cls(cls.META_SCHEMA)

        errors: List[Dict[str, Any]] = [
            {
                "message": error.message,
                "path": "/" + "/".join(str(p) for p in error.absolute_path),
                "schemaPath": "/".join(str(p) for p in error.absolute_schema_path),
                "keyword": error.validator,
            }
            for error in meta_validator.iter_errors(document)
        ]
        total_definitions, total_relationships = _schema_counts(document)
        report: SchemaValidationReport = SchemaValidationReport(
            valid=not errors,
            errors=errors,
            summary={
                "totalDefinitions": total_definitions,
                "totalRelationships": total_relationships,
                "validatedAt": validated_at,
            },
        )
    except Exception as exc:
        logger.error("Schema validation machinery failed: %s", exc, exc_info=True)
        return SchemaValidationReport(
            valid=False,
            errors=[{"message": str(exc)}],
            summary={"validatedAt": validated_at},
        )

    if report.valid:
        logger.info("Schema validation passed")
    else:
        logger.warning("Schema validation failed with %d error(s)", len(report.errors))
    return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_entity_names",
    "validate_field_names",
    "validate_field_types",
    "validate_constraints",
    "validate_relationships",
    "validate_model_size",
    "validate_generation_config",
    "validate_model",
    "validate_full",
    "validate_json_schema",
]

logger.debug("schemagen.validators loaded — %d public symbols.", len(__all__))
