"""
tests/conftest.py
Shared fixtures for the schemagen test suite.

All fixtures are session-scoped or function-scoped as appropriate.
No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
Every generator is driven by a fixed clock so outputs are comparable.
"""

from __future__ import annotations

import copy
import pathlib
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import pytest
import yaml

from schemagen.models import CanonicalModel
from schemagen.normalizer import normalize_model


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
MODEL_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "model_example.yaml"

FIXED_MOMENT: datetime = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
FIXED_TIMESTAMP: str = "2024-01-15T10:30:00.000Z"


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime]:
    """A clock that always returns FIXED_MOMENT."""
    return lambda: FIXED_MOMENT


@pytest.fixture()
def fixed_timestamp() -> str:
    """The ISO rendering of FIXED_MOMENT as it appears in generated artifacts."""
    return FIXED_TIMESTAMP


# ---------------------------------------------------------------------------
# Reference model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_model_dict() -> Dict[str, Any]:
    """Load the reference model_example.yaml once per session and return as dict."""
    assert MODEL_EXAMPLE_PATH.exists(), (
        f"Reference model not found at {MODEL_EXAMPLE_PATH}. "
        "Make sure model_example.yaml is in the project root."
    )
    with open(MODEL_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def model_dict(raw_model_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_model_dict)


@pytest.fixture()
def shop_model_dict(model_dict: Dict[str, Any]) -> Dict[str, Any]:
    """The ``model`` section of the reference file (entities + relationships)."""
    return model_dict["model"]


@pytest.fixture()
def shop_model(shop_model_dict: Dict[str, Any]) -> CanonicalModel:
    """The reference model, normalized."""
    return normalize_model(shop_model_dict)


@pytest.fixture()
def model_yaml_path(model_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the reference document to a temporary YAML file and return its path."""
    path = tmp_path / "model.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(model_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Minimal / edge-case model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def book_model_dict() -> Dict[str, Any]:
    """Smallest useful model: one entity, one field, no relationships."""
    return {
        "entities": [
            {
                "name": "book",
                "tableName": "books",
                "fields": [{"name": "title", "type": "string", "required": True}],
            }
        ],
        "relationships": [],
    }


@pytest.fixture()
def user_order_model_dict() -> Dict[str, Any]:
    """Two entities joined by an undescribed one-to-many relationship."""
    return {
        "entities": [
            {
                "name": "user",
                "tableName": "users",
                "description": "Application users",
                "fields": [
                    {"name": "email", "type": "email", "required": True},
                ],
            },
            {
                "name": "order",
                "tableName": "orders",
                "description": "Purchases",
                "fields": [
                    {
                        "name": "price",
                        "type": "decimal",
                        "required": True,
                        "constraints": {"minimum": 0},
                    },
                ],
            },
        ],
        "relationships": [{"from": "user", "to": "order", "type": "oneToMany"}],
    }


@pytest.fixture()
def user_order_model(user_order_model_dict: Dict[str, Any]) -> CanonicalModel:
    return normalize_model(user_order_model_dict)


@pytest.fixture()
def duplicate_entity_model_dict() -> Dict[str, Any]:
    """Two entities sharing a name (and therefore a table)."""
    entity = {
        "name": "thing",
        "tableName": "things",
        "fields": [{"name": "label", "type": "string", "required": False}],
    }
    return {
        "entities": [copy.deepcopy(entity), copy.deepcopy(entity)],
        "relationships": [],
    }


# ---------------------------------------------------------------------------
# Output directory fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Provide a clean output directory inside tmp_path."""
    out = tmp_path / "generated_output"
    out.mkdir(parents=True, exist_ok=True)
    return out
