"""
tests/test_normalizer.py
Unit tests for schemagen.normalizer.

Tests cover:
- Primary-key synthesis (prepended, never duplicated)
- tableName / description defaults
- Input immutability and idempotence
- Hard failures for malformed input
"""

from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.models import CanonicalModel
from schemagen.normalizer import normalize_model, synthesized_id_field


class TestPrimaryKeySynthesis:
    """Every entity ends up with an ``id`` field."""

    def test_id_is_prepended(self, book_model_dict: Dict[str, Any]) -> None:
        model = normalize_model(book_model_dict)
        book = model.get_entity("book")
        assert book.field_names == ["id", "title"]
        assert book.fields[0].to_wire() == synthesized_id_field()

    def test_existing_id_is_untouched(self, shop_model: CanonicalModel) -> None:
        order = shop_model.get_entity("order")
        assert order.field_names == ["id", "total", "notes", "details"]
        assert order.fields[0].type == "integer"
        assert order.fields[0].description == "Order number"

    def test_existing_id_not_first_stays_in_place(self) -> None:
        model = normalize_model(
            {
                "entities": [
                    {
                        "name": "tag",
                        "fields": [
                            {"name": "label", "type": "string"},
                            {"name": "id", "type": "number"},
                        ],
                    }
                ]
            }
        )
        assert model.get_entity("tag").field_names == ["label", "id"]

    def test_synthesized_field_is_fresh(self) -> None:
        first = synthesized_id_field()
        first["constraints"]["primary"] = False
        assert synthesized_id_field()["constraints"]["primary"] is True


class TestDefaults:
    """Missing optional keys receive defaults."""

    def test_table_name_is_pluralized(self) -> None:
        model = normalize_model(
            {"entities": [{"name": "category", "fields": []}]}
        )
        assert model.get_entity("category").table_name == "categories"

    def test_description_defaults_to_empty(self, book_model_dict: Dict[str, Any]) -> None:
        model = normalize_model(book_model_dict)
        assert model.get_entity("book").description == ""

    @pytest.mark.parametrize("relationships", [None, "absent"])
    def test_missing_relationships(
        self, book_model_dict: Dict[str, Any], relationships: Any
    ) -> None:
        if relationships == "absent":
            del book_model_dict["relationships"]
        else:
            book_model_dict["relationships"] = relationships
        assert normalize_model(book_model_dict).relationships == []


class TestPurity:
    """The caller's data is never mutated and normalizing twice is harmless."""

    def test_input_not_mutated(self, shop_model_dict: Dict[str, Any]) -> None:
        before = copy.deepcopy(shop_model_dict)
        normalize_model(shop_model_dict)
        assert shop_model_dict == before

    def test_idempotent(self, shop_model: CanonicalModel) -> None:
        again = normalize_model(shop_model)
        assert again.to_wire() == shop_model.to_wire()

    def test_idempotent_from_wire(self, shop_model: CanonicalModel) -> None:
        again = normalize_model(shop_model.to_wire())
        assert again.total_fields == shop_model.total_fields


class TestFailures:
    """Malformed input raises a normalization GenerationFailure."""

    @pytest.mark.parametrize(
        "raw",
        [
            ["not", "a", "mapping"],
            {},
            {"entities": "nope"},
            {"entities": ["not-an-entity"]},
            {"entities": [{"name": "user"}]},
            {"entities": [{"name": "user", "fields": [{"name": "x"}]}]},
        ],
    )
    def test_malformed_input(self, raw: Any) -> None:
        with pytest.raises(GenerationFailure) as excinfo:
            normalize_model(raw)
        assert excinfo.value.kind is GeneratorKind.NORMALIZATION

    def test_pydantic_error_is_chained(self) -> None:
        with pytest.raises(GenerationFailure) as excinfo:
            normalize_model({"entities": [{"name": "user", "fields": [{"name": "x"}]}]})
        assert excinfo.value.__cause__ is not None
