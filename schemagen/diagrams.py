# File: schemagen/diagrams.py
"""
SchemaGen - Diagram Generator
==============================
Renders the canonical model as text in several diagram notations:

- ``mermaid``   : Mermaid ``erDiagram`` (ER notation)
- ``plantUML``  : PlantUML entity blocks (UML notation)
- ``textual``   : plain-language report
- ``alternatives`` (optional): box graph, class diagram and mind-map

Both ER and UML notations share one cardinality symbol table; the
textual report uses the relationship verb table.  Relationships whose
endpoints do not resolve to known entities are skipped in every output.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.models import (
    CanonicalModel,
    EntityDefinition,
    FieldConstraints,
    FieldDefinition,
    GenerationConfig,
    RelationshipDefinition,
)
from schemagen.normalizer import RawModel, normalize_model
from schemagen.type_maps import (
    cardinality_symbol,
    class_cardinality,
    er_type,
    relationship_verb,
    uml_type,
)
from schemagen.utils import format_scalar, iso_timestamp, utc_now

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.diagrams")

ResolvedRelationship = Tuple[RelationshipDefinition, EntityDefinition, EntityDefinition]

MINDMAP_KEY_FIELDS: int = 3


def resolved_relationships(model: CanonicalModel) -> List[ResolvedRelationship]:
    """Relationships whose endpoints both resolve, in input order."""
    resolved: List[ResolvedRelationship] = []
    for rel in model.relationships:
        pair = model.resolve(rel)
        if pair is None:
            logger.debug("Skipping unresolved relationship %r", rel)
            continue
        resolved.append((rel, pair[0], pair[1]))
    return resolved


# ---------------------------------------------------------------------------
# Constraint annotations
# ---------------------------------------------------------------------------


def er_constraint_tags(field: FieldDefinition) -> str:
    """``PK, UK, NOT NULL, AUTO_INCREMENT`` (subset, fixed order)."""
    tags: List[str] = []
    if field.is_primary:
        tags.append("PK")
    if field.is_unique:
        tags.append("UK")
    if field.required:
        tags.append("NOT NULL")
    if field.is_auto_increment:
        tags.append("AUTO_INCREMENT")
    return ", ".join(tags)


def uml_key_indicator(field: FieldDefinition) -> str:
    if field.is_primary:
        return "* "
    if field.is_unique:
        return "+ "
    if field.required:
        return "- "
    return "  "


def describe_constraints(constraints: Optional[FieldConstraints]) -> str:
    """Human-readable constraint list, e.g. ``" (Primary Key, Max Length: 50)"``."""
    if constraints is None:
        return ""

    parts: List[str] = []
    if constraints.primary:
        parts.append("Primary Key")
    if constraints.unique:
        parts.append("Unique")
    if constraints.auto_increment:
        parts.append("Auto Increment")
    if constraints.max_length is not None:
        parts.append(f"Max Length: {constraints.max_length}")
    if constraints.min_length is not None:
        parts.append(f"Min Length: {constraints.min_length}")
    if constraints.minimum is not None:
        parts.append(f"Min Value: {format_scalar(constraints.minimum)}")
    if constraints.maximum is not None:
        parts.append(f"Max Value: {format_scalar(constraints.maximum)}")
    if constraints.has_default:
        parts.append(f"Default: {format_scalar(constraints.default)}")
    if constraints.enum is not None:
        parts.append("Options: " + ", ".join(format_scalar(v) for v in constraints.enum))

    return f" ({', '.join(parts)})" if parts else ""


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def render_mermaid(model: CanonicalModel) -> str:
    parts: List[str] = ["erDiagram\n"]

    for entity in model.entities:
        parts.append(f"\n    {entity.table_name.upper()} {{\n")
        for field in entity.fields:
            tags: str = er_constraint_tags(field)
            suffix: str = f' "{tags}"' if tags else ""
            parts.append(f"        {er_type(field.field_type)} {field.name}{suffix}\n")
        parts.append("    }\n")

    resolved: List[ResolvedRelationship] = resolved_relationships(model)
    if resolved:
        parts.append("\n    %% Relationships\n")
        for rel, source, target in resolved:
            parts.append(
                f"    {source.table_name.upper()} {cardinality_symbol(rel.kind)} "
                f'{target.table_name.upper()} : "{rel.label}"\n'
            )

    return "".join(parts)


def render_plantuml(model: CanonicalModel) -> str:
    parts: List[str] = ["@startuml\n!define RECTANGLE class\n\n"]

    for entity in model.entities:
        parts.append(f'entity "{entity.table_name}" as {entity.name} {{\n')
        for field in entity.fields:
            parts.append(
                f"  {uml_key_indicator(field)}{field.name} : {uml_type(field.field_type)}\n"
            )
        parts.append("}\n\n")

    for rel, _source, _target in resolved_relationships(model):
        parts.append(
            f"{rel.source} {cardinality_symbol(rel.kind)} {rel.target} : {rel.label}\n"
        )

    parts.append("\n@enduml")
    return "".join(parts)


def render_textual(model: CanonicalModel, generated_at: str) -> str:
    parts: List[str] = [
        "Database Schema Description\n",
        "============================\n\n",
        "Entities:\n",
        "---------\n",
    ]

    for index, entity in enumerate(model.entities, start=1):
        parts.append(f"{index}. {entity.name.upper()} (Table: {entity.table_name})\n")
        parts.append(
            f"   Description: {entity.description or 'No description provided'}\n"
        )
        parts.append("   Fields:\n")
        for field in entity.fields:
            status: str = "Required" if field.required else "Optional"
            parts.append(f"   - {field.name}: {field.type} ({status})\n")
            parts.append(
                f"     {field.description or ''}{describe_constraints(field.constraints)}\n"
            )
        parts.append("\n")

    resolved: List[ResolvedRelationship] = resolved_relationships(model)
    if resolved:
        parts.append("Relationships:\n")
        parts.append("-------------\n")
        for index, (rel, _source, _target) in enumerate(resolved, start=1):
            parts.append(
                f"{index}. {rel.source} {relationship_verb(rel.kind)} {rel.target}\n"
            )
            parts.append(f"   {rel.description or 'No description provided'}\n\n")

    parts.append("Summary:\n")
    parts.append("--------\n")
    parts.append(f"Total Entities: {len(model.entities)}\n")
    parts.append(f"Total Relationships: {len(model.relationships)}\n")
    parts.append(f"Generated: {generated_at}\n")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Alternative diagrams
# ---------------------------------------------------------------------------


def render_simple(model: CanonicalModel) -> str:
    parts: List[str] = ["graph TD\n"]
    for entity in model.entities:
        parts.append(f"    {entity.name}[{entity.name}]\n")
    for rel, _source, _target in resolved_relationships(model):
        parts.append(f"    {rel.source} --> {rel.target}\n")
    return "".join(parts)


def render_class_diagram(model: CanonicalModel) -> str:
    parts: List[str] = ["classDiagram\n"]
    for entity in model.entities:
        parts.append(f"    class {entity.name} {{\n")
        for field in entity.fields:
            if field.is_primary:
                visibility = "+"
            elif field.required:
                visibility = "#"
            else:
                visibility = "-"
            parts.append(f"        {visibility}{field.type} {field.name}\n")
        parts.append("    }\n")
    for rel, _source, _target in resolved_relationships(model):
        parts.append(
            f"    {rel.source} {class_cardinality(rel.kind)} {rel.target} : {rel.label}\n"
        )
    return "".join(parts)


def render_mindmap(model: CanonicalModel) -> str:
    parts: List[str] = ["mindmap\n", "  root((Database))\n"]
    for entity in model.entities:
        parts.append(f"    {entity.name}\n")
        key_fields: List[FieldDefinition] = [
            f for f in entity.fields if f.is_primary or f.required
        ]
        for field in key_fields[:MINDMAP_KEY_FIELDS]:
            parts.append(f"      {field.name}\n")
    return "".join(parts)


def generate_alternative_diagrams(model: RawModel) -> Dict[str, str]:
    """
    ``{simple, detailed, conceptual}``: box graph, class diagram, mind-map.

    Raises:
        GenerationFailure: kind ``diagram`` on any internal fault.
    """
    try:
        canonical: CanonicalModel = (
            model if isinstance(model, CanonicalModel) else normalize_model(model)
        )
        return {
            "simple": render_simple(canonical),
            "detailed": render_class_diagram(canonical),
            "conceptual": render_mindmap(canonical),
        }
    except GenerationFailure:
        raise
    except Exception as exc:
        logger.error("Alternative diagram generation failed: %s", exc, exc_info=True)
        raise GenerationFailure(GeneratorKind.DIAGRAM, str(exc)) from exc


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class DiagramGenerator:
    """
    Builds ``{mermaid, plantUML, textual, metadata}`` (plus ``alternatives``
    when ``config.include_alternative_diagrams`` is set).
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config: GenerationConfig = config or GenerationConfig()
        self._clock: Callable[[], datetime] = clock or utc_now

    def generate(self, model: RawModel) -> Dict[str, Any]:
        try:
            canonical: CanonicalModel = (
                model if isinstance(model, CanonicalModel) else normalize_model(model)
            )
            generated_at: str = iso_timestamp(self._clock())
            result: Dict[str, Any] = {
                "mermaid": render_mermaid(canonical),
                "plantUML": render_plantuml(canonical),
                "textual": render_textual(canonical, generated_at),
                "metadata": {
                    "totalEntities": len(canonical.entities),
                    "totalRelationships": len(canonical.relationships),
                    "generatedAt": generated_at,
                    "diagramType": self.config.diagram_type,
                },
            }
            if self.config.include_alternative_diagrams:
                result["alternatives"] = generate_alternative_diagrams(canonical)
        except GenerationFailure:
            raise
        except Exception as exc:
            logger.error("Diagram generation failed: %s", exc, exc_info=True)
            raise GenerationFailure(GeneratorKind.DIAGRAM, str(exc)) from exc

        logger.info("Diagrams generated for %d entities", len(canonical.entities))
        return result


__all__: List[str] = [
    "resolved_relationships",
    "er_constraint_tags",
    "uml_key_indicator",
    "describe_constraints",
    "render_mermaid",
    "render_plantuml",
    "render_textual",
    "render_simple",
    "render_class_diagram",
    "render_mindmap",
    "generate_alternative_diagrams",
    "DiagramGenerator",
]

logger.debug("schemagen.diagrams loaded — %d public symbols.", len(__all__))
