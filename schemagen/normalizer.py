# File: schemagen/normalizer.py
"""
SchemaGen - Entity Model Normalizer
====================================
Turns an entity/relationship structure of unknown provenance (parsed JSON
or YAML, or the output of an upstream language-model parser) into the
canonical model consumed by every generator.

The transformation is pure: the caller's mapping is never mutated.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.models import CanonicalModel
from schemagen.utils import to_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.normalizer")

PRIMARY_KEY_NAME: str = "id"

RawModel = Union[Mapping[str, Any], CanonicalModel]


def synthesized_id_field() -> Dict[str, Any]:
    """A fresh primary-key field definition (new dict on every call)."""
    return {
        "name": PRIMARY_KEY_NAME,
        "type": "number",
        "required": True,
        "description": "Unique identifier",
        "constraints": {"primary": True, "autoIncrement": True},
    }


def _fail(message: str) -> GenerationFailure:
    return GenerationFailure(GeneratorKind.NORMALIZATION, message)


def _has_primary_key(fields: List[Any]) -> bool:
    return any(
        isinstance(f, Mapping) and f.get("name") == PRIMARY_KEY_NAME for f in fields
    )


def _normalize_entity(index: int, entity: Any) -> Dict[str, Any]:
    if not isinstance(entity, Mapping):
        raise _fail(f"entity #{index} is not a mapping")

    name: Any = entity.get("name")
    fields: Any = entity.get("fields")
    if not isinstance(fields, list):
        raise _fail(f"entity #{index} ({name!r}) has no 'fields' list")

    prepared: Dict[str, Any] = dict(entity)

    if _has_primary_key(fields):
        prepared["fields"] = list(fields)
    else:
        prepared["fields"] = [synthesized_id_field()] + list(fields)
        logger.debug("Synthesized primary key for entity '%s'", name)

    if not prepared.get("tableName") and isinstance(name, str) and name:
        prepared["tableName"] = to_plural(name)
        logger.debug("Defaulted tableName of '%s' to '%s'", name, prepared["tableName"])

    if prepared.get("description") is None:
        prepared["description"] = ""

    return prepared


def normalize_model(raw: RawModel) -> CanonicalModel:
    """
    Build a ``CanonicalModel`` from *raw*.

    - every entity gets an ``id`` primary key as its first field when it
      has no field named ``id``; existing field lists are left untouched;
    - an absent or ``null`` ``relationships`` list becomes ``[]``;
    - a missing ``tableName`` defaults to the plural of ``name`` and a
      missing ``description`` to ``""``.

    Raises:
        GenerationFailure: (kind ``normalization``) when *raw* violates the
            entity/field shape, e.g. an entity without a ``fields`` list.
    """
    if isinstance(raw, CanonicalModel):
        raw = raw.to_wire()

    if not isinstance(raw, Mapping):
        raise _fail(f"expected a mapping, got {type(raw).__name__}")

    entities_raw: Any = raw.get("entities")
    if not isinstance(entities_raw, list):
        raise _fail("'entities' must be a list")

    entities: List[Dict[str, Any]] = [
        _normalize_entity(index, entity) for index, entity in enumerate(entities_raw)
    ]

    relationships: Any = raw.get("relationships")
    if relationships is None:
        relationships = []

    try:
        model: CanonicalModel = CanonicalModel.model_validate(
            {"entities": entities, "relationships": relationships}
        )
    except PydanticValidationError as exc:
        raise _fail(
            f"model does not match the canonical shape "
            f"({exc.error_count()} error(s)): {exc.errors()[0]['msg']}"
        ) from exc

    logger.info(
        "Normalized model: %d entities, %d relationships",
        len(model.entities),
        len(model.relationships),
    )
    return model


__all__: List[str] = [
    "PRIMARY_KEY_NAME",
    "synthesized_id_field",
    "normalize_model",
]

logger.debug("schemagen.normalizer loaded — %d public symbols.", len(__all__))
