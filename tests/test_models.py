"""
tests/test_models.py
Unit tests for schemagen.models and schemagen.errors.

Tests cover:
- FieldType / RelationshipType token parsing
- FieldConstraints aliases and default detection
- FieldDefinition / EntityDefinition / RelationshipDefinition helpers
- CanonicalModel lookups and relationship resolution
- GenerationConfig defaults and strictness
- GenerationFailure formatting
"""

from __future__ import annotations

from typing import Any, Dict

import pytest
from pydantic import ValidationError as PydanticValidationError

from schemagen.errors import GenerationFailure, GeneratorKind
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
)


# ===========================================================================
# Enums
# ===========================================================================


class TestFieldType:
    """Tests for FieldType.parse."""

    def test_known_token(self) -> None:
        assert FieldType.parse("decimal") is FieldType.DECIMAL

    def test_case_insensitive(self) -> None:
        assert FieldType.parse("DateTime") is FieldType.DATETIME

    def test_unknown_token(self) -> None:
        assert FieldType.parse("bogus") is FieldType.UNKNOWN

    def test_non_string_token(self) -> None:
        assert FieldType.parse(None) is FieldType.UNKNOWN
        assert FieldType.parse(42) is FieldType.UNKNOWN


class TestRelationshipType:
    """Tests for RelationshipType.parse."""

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("oneToOne", RelationshipType.ONE_TO_ONE),
            ("oneToMany", RelationshipType.ONE_TO_MANY),
            ("manyToOne", RelationshipType.MANY_TO_ONE),
            ("manyToMany", RelationshipType.MANY_TO_MANY),
        ],
    )
    def test_known_tokens(self, token: str, expected: RelationshipType) -> None:
        assert RelationshipType.parse(token) is expected

    def test_case_sensitive(self) -> None:
        assert RelationshipType.parse("onetomany") is RelationshipType.UNKNOWN

    def test_missing_type(self) -> None:
        assert RelationshipType.parse(None) is RelationshipType.UNKNOWN


# ===========================================================================
# Field-level models
# ===========================================================================


class TestFieldConstraints:
    """Tests for FieldConstraints aliases and helpers."""

    def test_aliases_populate_snake_case(self) -> None:
        rules = FieldConstraints.model_validate(
            {"maxLength": 50, "minLength": 2, "autoIncrement": True}
        )
        assert rules.max_length == 50
        assert rules.min_length == 2
        assert rules.auto_increment is True

    def test_to_wire_uses_aliases_and_omits_unset(self) -> None:
        rules = FieldConstraints.model_validate({"maxLength": 50, "unique": True})
        assert rules.to_wire() == {"maxLength": 50, "unique": True}

    def test_explicit_null_default_counts_as_default(self) -> None:
        assert FieldConstraints.model_validate({"default": None}).has_default

    def test_no_default(self) -> None:
        assert not FieldConstraints.model_validate({"unique": True}).has_default

    def test_falsy_default_is_kept(self) -> None:
        rules = FieldConstraints.model_validate({"default": False})
        assert rules.has_default
        assert rules.default is False

    @pytest.mark.parametrize(
        "raw, key, attr",
        [
            ({"maxLength": "100 characters"}, "maxLength", "max_length"),
            ({"maxLength": 10.5}, "maxLength", "max_length"),
            ({"items": "string"}, "items", "items"),
            ({"enum": "a,b"}, "enum", "enum"),
            ({"minimum": "zero"}, "minimum", "minimum"),
        ],
    )
    def test_wrong_typed_value_is_kept_raw(
        self, raw: Dict[str, Any], key: str, attr: str
    ) -> None:
        rules = FieldConstraints.model_validate({**raw, "unique": True})
        assert getattr(rules, attr) is None
        assert rules.unique is True
        assert rules.rejected_keys == [key]
        assert rules.to_wire() == {**raw, "unique": True}

    def test_snake_case_input_is_rejected_by_wire_name(self) -> None:
        rules = FieldConstraints(max_length="long")
        assert rules.max_length is None
        assert rules.rejected_keys == ["maxLength"]
        assert rules.to_wire() == {"maxLength": "long"}

    def test_lax_coercion_still_applies(self) -> None:
        rules = FieldConstraints.model_validate({"maxLength": "100"})
        assert rules.max_length == 100
        assert rules.rejected_keys == []
        assert rules.to_wire() == {"maxLength": "100"}

    def test_to_wire_is_a_copy(self) -> None:
        raw: Dict[str, Any] = {"items": {"type": "string"}, "note": ["x"]}
        rules = FieldConstraints.model_validate(raw)
        rules.to_wire()["note"].append("y")
        raw["items"]["type"] = "integer"
        assert rules.to_wire() == {"items": {"type": "string"}, "note": ["x"]}


class TestFieldDefinition:
    """Tests for FieldDefinition."""

    def test_null_required_becomes_false(self) -> None:
        field = FieldDefinition.model_validate(
            {"name": "x", "type": "string", "required": None}
        )
        assert field.required is False

    def test_type_token_is_kept_verbatim(self) -> None:
        field = FieldDefinition(name="x", type="Bogus")
        assert field.type == "Bogus"
        assert field.field_type is FieldType.UNKNOWN

    def test_flags_without_constraints(self) -> None:
        field = FieldDefinition(name="x", type="string")
        assert not field.is_primary
        assert not field.is_unique
        assert not field.is_auto_increment
        assert field.raw_constraints() == {}

    def test_flags_with_constraints(self) -> None:
        field = FieldDefinition.model_validate(
            {
                "name": "id",
                "type": "number",
                "constraints": {"primary": True, "autoIncrement": True},
            }
        )
        assert field.is_primary
        assert field.is_auto_increment
        assert not field.is_unique

    def test_missing_type_is_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            FieldDefinition.model_validate({"name": "x"})

    def test_to_wire_round_trips(self) -> None:
        data: Dict[str, Any] = {
            "name": "email",
            "type": "email",
            "required": True,
            "description": "Login",
            "constraints": {"unique": True},
        }
        assert FieldDefinition.model_validate(data).to_wire() == data


class TestEntityDefinition:
    """Tests for EntityDefinition."""

    def test_alias_and_field_names(self) -> None:
        entity = EntityDefinition.model_validate(
            {
                "name": "user",
                "tableName": "users",
                "fields": [{"name": "id", "type": "number"}, {"name": "n", "type": "string"}],
            }
        )
        assert entity.table_name == "users"
        assert entity.field_names == ["id", "n"]
        assert entity.get_field("n") is entity.fields[1]
        assert entity.get_field("missing") is None

    def test_fields_are_required(self) -> None:
        with pytest.raises(PydanticValidationError):
            EntityDefinition.model_validate({"name": "user"})


class TestRelationshipDefinition:
    """Tests for RelationshipDefinition."""

    def test_from_to_aliases(self) -> None:
        rel = RelationshipDefinition.model_validate(
            {"from": "user", "to": "order", "type": "oneToMany"}
        )
        assert rel.source == "user"
        assert rel.target == "order"
        assert rel.kind is RelationshipType.ONE_TO_MANY

    def test_label_prefers_description(self) -> None:
        rel = RelationshipDefinition.model_validate(
            {"from": "a", "to": "b", "type": "oneToOne", "description": "owns"}
        )
        assert rel.label == "owns"

    def test_label_falls_back_to_type(self) -> None:
        rel = RelationshipDefinition.model_validate(
            {"from": "a", "to": "b", "type": "oneToOne"}
        )
        assert rel.label == "oneToOne"

    def test_to_wire_omits_missing_keys(self) -> None:
        rel = RelationshipDefinition.model_validate({"from": "a", "to": "b"})
        assert rel.to_wire() == {"from": "a", "to": "b"}

    def test_to_wire_keeps_extras_and_nulls(self) -> None:
        raw = {
            "from": "a",
            "to": "b",
            "type": None,
            "description": None,
            "foreignKey": "a_id",
        }
        rel = RelationshipDefinition.model_validate(raw)
        assert rel.kind is RelationshipType.UNKNOWN
        assert rel.to_wire() == raw

    def test_snake_case_input_uses_wire_names(self) -> None:
        rel = RelationshipDefinition(source="a", target="b", type="oneToOne")
        assert rel.to_wire() == {"from": "a", "to": "b", "type": "oneToOne"}


# ===========================================================================
# Canonical model
# ===========================================================================


class TestCanonicalModel:
    """Tests for CanonicalModel lookups."""

    def test_get_entity_first_wins(self) -> None:
        model = CanonicalModel.model_validate(
            {
                "entities": [
                    {"name": "dup", "tableName": "first", "fields": []},
                    {"name": "dup", "tableName": "second", "fields": []},
                ]
            }
        )
        assert model.get_entity("dup").table_name == "first"

    def test_resolve_known_and_unknown(self, user_order_model: CanonicalModel) -> None:
        rel = user_order_model.relationships[0]
        source, target = user_order_model.resolve(rel)
        assert source.name == "user"
        assert target.name == "order"

        ghost = RelationshipDefinition.model_validate({"from": "user", "to": "ghost"})
        assert user_order_model.resolve(ghost) is None

    def test_null_relationships(self) -> None:
        model = CanonicalModel.model_validate({"entities": [], "relationships": None})
        assert model.relationships == []

    def test_counts(self, shop_model: CanonicalModel) -> None:
        assert shop_model.entity_names == ["user", "product", "order"]
        assert shop_model.total_fields == 15


# ===========================================================================
# Configuration & reports
# ===========================================================================


class TestGenerationConfig:
    """Tests for GenerationConfig defaults and validation."""

    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.schema_id == "generated-schema"
        assert config.api_version == "1.0.0"
        assert config.default_page_size == 10
        assert [s.url for s in config.servers] == [
            "http://localhost:3000/api",
            "https://your-api.com/api",
        ]
        assert config.parallel is False

    def test_unknown_key_is_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            GenerationConfig.model_validate({"no_such_setting": True})

    def test_page_size_bounds(self) -> None:
        with pytest.raises(PydanticValidationError):
            GenerationConfig(default_page_size=0)

    def test_servers_are_fresh_per_instance(self) -> None:
        first = GenerationConfig()
        second = GenerationConfig()
        assert first.servers is not second.servers


class TestSchemaValidationReport:
    def test_to_dict(self) -> None:
        report = SchemaValidationReport(valid=True, summary={"totalDefinitions": 0})
        assert report.to_dict() == {
            "valid": True,
            "errors": [],
            "summary": {"totalDefinitions": 0},
        }


class TestGenerationFailure:
    """Tests for the single failure signal."""

    def test_message_and_kind(self) -> None:
        exc = GenerationFailure(GeneratorKind.API, "boom")
        assert exc.kind is GeneratorKind.API
        assert exc.message == "boom"
        assert str(exc) == "api generation failed: boom"

    def test_kind_accepts_string(self) -> None:
        exc = GenerationFailure("diagram", "boom")  # type: ignore[arg-type]
        assert exc.kind is GeneratorKind.DIAGRAM

    def test_to_dict(self) -> None:
        exc = GenerationFailure(GeneratorKind.SCHEMA, "bad")
        assert exc.to_dict() == {"kind": "schema", "message": "bad"}
