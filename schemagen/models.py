# File: schemagen/models.py
"""
SchemaGen - Core Data Models
=============================
Pydantic V2 models for the canonical entity-relationship model and the
generation configuration.  These models are the single source of truth
for every generator: Normalizer → {JSON Schema, OpenAPI, Diagrams}.

Wire names (``tableName``, ``autoIncrement``, ``maxLength``, relationship
``from`` / ``to``) are kept as aliases so the JSON shape produced by the
upstream parser validates directly, while Python code uses snake_case.
"""

from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.models")

# ---------------------------------------------------------------------------
# Enums — abstract vocabularies shared by every generator
# ---------------------------------------------------------------------------


class FieldType(str, Enum):
    """Abstract field-type tokens understood by the type mapping tables."""

    # Text
    STRING = "string"
    TEXT = "text"
    EMAIL = "email"
    URL = "url"

    # Numeric
    NUMBER = "number"
    INTEGER = "integer"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    DOUBLE = "double"

    # Boolean
    BOOLEAN = "boolean"
    BOOL = "bool"

    # Date / Time
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"

    # Structured
    ARRAY = "array"
    JSON = "json"
    OBJECT = "object"

    # Fallback for anything not listed above
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, token: Any) -> "FieldType":
        """Case-insensitive lookup; unrecognized tokens map to ``UNKNOWN``."""
        if not isinstance(token, str):
            return cls.UNKNOWN
        try:
            return cls(token.lower())
        except ValueError:
            return cls.UNKNOWN


class RelationshipType(str, Enum):
    """Relationship cardinalities, spelled as the upstream parser emits them."""

    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, token: Any) -> "RelationshipType":
        """Case-sensitive lookup; unrecognized tokens map to ``UNKNOWN``."""
        if not isinstance(token, str) or token == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN


STRING_TYPES: frozenset = frozenset(
    {FieldType.STRING, FieldType.TEXT, FieldType.EMAIL, FieldType.URL}
)
NUMERIC_TYPES: frozenset = frozenset(
    {
        FieldType.NUMBER,
        FieldType.INTEGER,
        FieldType.INT,
        FieldType.FLOAT,
        FieldType.DECIMAL,
        FieldType.DOUBLE,
    }
)


# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="ignore",
)


def _wire_name(model_cls: type, key: str) -> str:
    info = model_cls.model_fields.get(key)
    return info.alias if info is not None and info.alias else key


def _wire_copy(model_cls: type, data: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy of *data* with snake_case field names swapped for aliases."""
    return {_wire_name(model_cls, k): copy.deepcopy(v) for k, v in data.items()}


def _input_keys(model_cls: type, loc_key: str) -> List[str]:
    """Every input key (field name or alias) that may have produced *loc_key*."""
    for name, info in model_cls.model_fields.items():
        if loc_key in (name, info.alias):
            return [name] + ([info.alias] if info.alias else [])
    return [loc_key]


# ---------------------------------------------------------------------------
# Field-level primitives
# ---------------------------------------------------------------------------


class FieldConstraints(BaseModel):
    """
    Optional validation / metadata flags attached to a field.

    The map is open: unrecognized keys are retained, and a recognized key
    whose value cannot be coerced to its typed accessor (``maxLength:
    "100 characters"``, ``items: "string"``) leaves that accessor at
    ``None`` instead of rejecting the model.  ``to_wire()`` always returns
    the map exactly as supplied, so the JSON Schema ``metadata``
    side-channel echoes it verbatim.
    """

    model_config = ConfigDict(
        strict=False,
        populate_by_name=True,
        extra="allow",
    )

    _wire: Optional[Dict[str, Any]] = PrivateAttr(default=None)
    _rejected: List[str] = PrivateAttr(default_factory=list)

    primary: Optional[bool] = Field(default=None, description="Primary key flag.")
    unique: Optional[bool] = Field(default=None, description="Unique flag.")
    auto_increment: Optional[bool] = Field(
        default=None, alias="autoIncrement", description="Auto-increment flag."
    )
    max_length: Optional[int] = Field(
        default=None, alias="maxLength", description="Max length (strings)."
    )
    min_length: Optional[int] = Field(
        default=None, alias="minLength", description="Min length (strings)."
    )
    minimum: Optional[Union[int, float]] = Field(
        default=None, description="Lower bound (numbers)."
    )
    maximum: Optional[Union[int, float]] = Field(
        default=None, description="Upper bound (numbers)."
    )
    default: Any = Field(default=None, description="Default value of any type.")
    enum: Optional[List[Any]] = Field(default=None, description="Allowed values.")
    pattern: Optional[str] = Field(default=None, description="Regex pattern.")
    items: Optional[Dict[str, Any]] = Field(
        default=None, description="Item schema fragment (arrays)."
    )

    @model_validator(mode="wrap")
    @classmethod
    def _lenient_typed_view(cls, data: Any, handler: Any) -> "FieldConstraints":
        if not isinstance(data, dict):
            return handler(data)

        accepted: Dict[str, Any] = dict(data)
        rejected: List[str] = []
        while True:
            try:
                instance: FieldConstraints = handler(accepted)
                break
            except ValidationError as exc:
                bad_keys: List[str] = [
                    key
                    for err in exc.errors()
                    if err["loc"]
                    for key in _input_keys(cls, str(err["loc"][0]))
                    if key in accepted
                ]
                if not bad_keys:
                    raise
                for key in dict.fromkeys(bad_keys):
                    logger.debug(
                        "Constraint '%s' value %r has the wrong type; kept raw only",
                        key,
                        accepted[key],
                    )
                    del accepted[key]
                    rejected.append(_wire_name(cls, key))

        instance._wire = _wire_copy(cls, data)
        instance._rejected = rejected
        return instance

    @property
    def has_default(self) -> bool:
        """True when a default was supplied, even an explicit ``null``."""
        return "default" in self.model_fields_set

    @property
    def rejected_keys(self) -> List[str]:
        """Wire names of supplied constraints the typed view could not use."""
        return list(self._rejected)

    def to_wire(self) -> Dict[str, Any]:
        """The constraint map exactly as supplied, with wire-name keys."""
        if self._wire is not None:
            return copy.deepcopy(self._wire)
        return self.model_dump(by_alias=True, exclude_unset=True)


class FieldDefinition(BaseModel):
    """A named, typed attribute of an entity."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    type: str = Field(..., description="Abstract type token, kept verbatim.")
    required: bool = Field(default=False, description="Required flag.")
    description: Optional[str] = Field(default=None, description="Free text.")
    constraints: Optional[FieldConstraints] = Field(
        default=None, description="Optional constraint map."
    )

    @field_validator("required", mode="before")
    @classmethod
    def _null_required_is_false(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def field_type(self) -> FieldType:
        return FieldType.parse(self.type)

    @property
    def rules(self) -> FieldConstraints:
        """Constraints, or an empty record when none were supplied."""
        return self.constraints if self.constraints is not None else FieldConstraints()

    @property
    def is_primary(self) -> bool:
        return bool(self.rules.primary)

    @property
    def is_unique(self) -> bool:
        return bool(self.rules.unique)

    @property
    def is_auto_increment(self) -> bool:
        return bool(self.rules.auto_increment)

    def raw_constraints(self) -> Dict[str, Any]:
        return self.constraints.to_wire() if self.constraints is not None else {}

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.constraints is not None:
            data["constraints"] = self.raw_constraints()
        return data

    def __repr__(self) -> str:
        pk_flag: str = " PK" if self.is_primary else ""
        req_flag: str = " REQUIRED" if self.required else ""
        return f"<Field {self.name} {self.type}{pk_flag}{req_flag}>"


# ---------------------------------------------------------------------------
# Entity & relationship
# ---------------------------------------------------------------------------


class EntityDefinition(BaseModel):
    """
    A named record type: one database table, one API resource.

    ``fields`` order is significant and is preserved by every generator.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Singular identifier.")
    table_name: str = Field(
        default="", alias="tableName", description="Plural storage identifier."
    )
    description: Optional[str] = Field(default=None, description="Free text.")
    fields: List[FieldDefinition] = Field(..., description="Ordered fields.")

    @computed_field  # type: ignore[misc]
    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def to_wire(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "tableName": self.table_name,
            "description": self.description,
            "fields": [f.to_wire() for f in self.fields],
        }

    def __repr__(self) -> str:
        return f"<Entity {self.name} ({self.table_name}, {len(self.fields)} fields)>"


class RelationshipDefinition(BaseModel):
    """
    A typed, directed association between two entities (by name).

    Extra keys (``foreignKey``, ``onDelete`` ...) are retained and
    ``to_wire()`` returns the relationship exactly as supplied, explicit
    ``null`` values included.
    """

    model_config = ConfigDict(
        strict=False,
        populate_by_name=True,
        extra="allow",
    )

    _wire: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    source: str = Field(..., alias="from", description="Source entity name.")
    target: str = Field(..., alias="to", description="Target entity name.")
    type: Optional[str] = Field(default=None, description="Cardinality token.")
    description: Optional[str] = Field(default=None, description="Edge label.")

    @model_validator(mode="wrap")
    @classmethod
    def _keep_wire_shape(cls, data: Any, handler: Any) -> "RelationshipDefinition":
        instance: RelationshipDefinition = handler(data)
        if isinstance(data, dict):
            instance._wire = _wire_copy(cls, data)
        return instance

    @property
    def kind(self) -> RelationshipType:
        return RelationshipType.parse(self.type)

    @property
    def label(self) -> str:
        """Edge label: the description, or the type token when absent."""
        return self.description or self.type or ""

    def to_wire(self) -> Dict[str, Any]:
        if self._wire is not None:
            return copy.deepcopy(self._wire)
        return self.model_dump(by_alias=True, exclude_unset=True)

    def __repr__(self) -> str:
        return f"<Relationship {self.source} -[{self.type}]-> {self.target}>"


# ---------------------------------------------------------------------------
# Canonical model — top-level container
# ---------------------------------------------------------------------------


class CanonicalModel(BaseModel):
    """
    The normalized entity/relationship model consumed by all generators.

    Built fresh per request by the normalizer and treated as read-only
    afterwards.  ``get_entity`` is an O(1) lookup by entity name; when two
    entities share a name the first one wins.
    """

    model_config = _SHARED_CONFIG

    entities: List[EntityDefinition] = Field(
        default_factory=list, description="All entities."
    )
    relationships: List[RelationshipDefinition] = Field(
        default_factory=list, description="All relationships."
    )

    _entity_map: Dict[str, EntityDefinition] = PrivateAttr(default_factory=dict)

    @field_validator("relationships", mode="before")
    @classmethod
    def _null_relationships_are_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def model_post_init(self, __context: Any) -> None:
        entity_map: Dict[str, EntityDefinition] = {}
        for entity in self.entities:
            entity_map.setdefault(entity.name, entity)
        self._entity_map = entity_map

    def get_entity(self, name: str) -> Optional[EntityDefinition]:
        return self._entity_map.get(name)

    def resolve(
        self, relationship: RelationshipDefinition
    ) -> Optional[tuple]:
        """
        Return ``(source_entity, target_entity)`` or ``None`` when either
        endpoint is not a known entity.
        """
        source: Optional[EntityDefinition] = self.get_entity(relationship.source)
        target: Optional[EntityDefinition] = self.get_entity(relationship.target)
        if source is None or target is None:
            return None
        return source, target

    @computed_field  # type: ignore[misc]
    @property
    def entity_names(self) -> List[str]:
        return [e.name for e in self.entities]

    @computed_field  # type: ignore[misc]
    @property
    def total_fields(self) -> int:
        return sum(len(e.fields) for e in self.entities)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "entities": [e.to_wire() for e in self.entities],
            "relationships": [r.to_wire() for r in self.relationships],
        }

    def __repr__(self) -> str:
        return (
            f"<CanonicalModel {len(self.entities)} entities, "
            f"{self.total_fields} fields, "
            f"{len(self.relationships)} relationships>"
        )


# ---------------------------------------------------------------------------
# Generation Configuration
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    """One entry of the OpenAPI ``servers`` list."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(..., min_length=1, description="Server base URL.")
    description: str = Field(default="", description="Server label.")


def _default_servers() -> List[ServerInfo]:
    return [
        ServerInfo(url="http://localhost:3000/api", description="Development server"),
        ServerInfo(url="https://your-api.com/api", description="Production server"),
    ]


class GenerationConfig(BaseModel):
    """
    Settings shared by every generator.

    A single instance (combined with a ``CanonicalModel``) is all the
    generators need.  Defaults reproduce the fixed boilerplate of the
    generated documents.
    """

    model_config = ConfigDict(
        strict=False,
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    # -- JSON Schema --------------------------------------------------------
    schema_id: str = Field(default="generated-schema", description="$id value.")
    schema_title: str = Field(default="Generated Schema", description="Title.")
    schema_description: str = Field(
        default="Auto-generated schema from natural language description",
        description="Top-level description.",
    )

    # -- OpenAPI ------------------------------------------------------------
    api_title: str = Field(default="Generated API", description="info.title.")
    api_description: str = Field(
        default="Auto-generated REST API from natural language description",
        description="info.description.",
    )
    api_version: str = Field(default="1.0.0", description="info.version.")
    contact_name: str = Field(default="API Generator", description="info.contact.name.")
    contact_url: str = Field(
        default="https://github.com/your-repo", description="info.contact.url."
    )
    servers: List[ServerInfo] = Field(
        default_factory=_default_servers, description="OpenAPI servers."
    )
    default_page_size: int = Field(
        default=10, ge=1, le=1000, description="Default `limit` for list endpoints."
    )
    code_example_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL embedded in generated client snippets.",
    )

    # -- Diagrams -----------------------------------------------------------
    diagram_type: str = Field(
        default="Entity Relationship Diagram", description="Metadata label."
    )
    include_alternative_diagrams: bool = Field(
        default=False, description="Also emit box / class / mind-map diagrams."
    )

    # -- Orchestration ------------------------------------------------------
    parallel: bool = Field(
        default=False, description="Run the three generators on a thread pool."
    )
    max_workers: int = Field(default=3, ge=1, le=32, description="Thread pool size.")


# ---------------------------------------------------------------------------
# Validation report for the standalone JSON Schema check
# ---------------------------------------------------------------------------


class SchemaValidationReport(BaseModel):
    """Result of meta-validating a JSON Schema document.  Never raised."""

    model_config = ConfigDict(extra="forbid")

    valid: bool = Field(..., description="True when the document is a valid schema.")
    errors: List[Dict[str, Any]] = Field(
        default_factory=list, description="One entry per violation."
    )
    summary: Dict[str, Any] = Field(
        default_factory=dict, description="Definition / relationship counts."
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FieldType",
    "RelationshipType",
    "STRING_TYPES",
    "NUMERIC_TYPES",
    "FieldConstraints",
    "FieldDefinition",
    "EntityDefinition",
    "RelationshipDefinition",
    "CanonicalModel",
    "ServerInfo",
    "GenerationConfig",
    "SchemaValidationReport",
]

logger.debug("schemagen.models loaded — %d public symbols.", len(__all__))
