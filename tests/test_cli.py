"""
tests/test_cli.py
End-to-end tests for the schemagen command-line interface.

The CLI is driven in-process through ``cli_main(argv)``; every mode ends
with ``SystemExit`` carrying the documented exit code.
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Any, Dict, Iterator, List

import pytest
import yaml

from schemagen.cli import (
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    cli_main,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """cli_main reconfigures the package logger; undo it after each test."""
    yield
    logging.disable(logging.NOTSET)
    package_logger = logging.getLogger("schemagen")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli_main(argv)
    return excinfo.value.code


def _write_yaml(path: pathlib.Path, data: Dict[str, Any]) -> pathlib.Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


@pytest.fixture()
def schema_json_path(
    model_yaml_path: pathlib.Path, tmp_path: pathlib.Path
) -> pathlib.Path:
    """A JSON Schema document produced by the generator itself."""
    out = tmp_path / "first_run"
    assert _run(["-q", "-i", str(model_yaml_path), "-o", str(out)]) == EXIT_SUCCESS
    return out / "schema.json"


class TestGenerateMode:
    def test_writes_output_directory(
        self,
        model_yaml_path: pathlib.Path,
        output_dir: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = _run(["-q", "-i", str(model_yaml_path), "-o", str(output_dir)])
        assert code == EXIT_SUCCESS
        for name in ("schema.json", "openapi.json", "erd.mmd", "erd.puml", "manifest.json"):
            assert (output_dir / name).is_file(), name
        assert "SUCCESS" in capsys.readouterr().out

    def test_prints_bundle_without_output(
        self, model_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(["-q", "-i", str(model_yaml_path)])
        assert code == EXIT_SUCCESS
        bundle = json.loads(capsys.readouterr().out)
        assert set(bundle) == {"jsonSchema", "api", "diagrams", "report"}
        assert bundle["api"]["openApiSpec"]["info"]["title"] == "Shop API"

    def test_config_overrides(
        self, model_yaml_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        code = _run(
            [
                "-q",
                "-i", str(model_yaml_path),
                "-o", str(output_dir),
                "--api-title", "Override API",
                "--page-size", "50",
                "--openapi-format", "yaml",
                "--alternatives",
                "--parallel",
            ]
        )
        assert code == EXIT_SUCCESS
        spec = yaml.safe_load((output_dir / "openapi.yaml").read_text(encoding="utf-8"))
        assert spec["info"]["title"] == "Override API"
        params = spec["paths"]["/users"]["get"]["parameters"]
        assert params[1]["schema"]["default"] == 50
        assert (output_dir / "alternatives" / "simple.mmd").is_file()

    def test_verbose_run(
        self, model_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(["-v", "-i", str(model_yaml_path)]) == EXIT_SUCCESS
        assert "Generation Report" in capsys.readouterr().err


class TestInputErrors:
    def test_missing_input(self, tmp_path: pathlib.Path) -> None:
        assert _run(["-q", "-i", str(tmp_path / "nope.yaml")]) == EXIT_INPUT_ERROR

    def test_directory_input(self, tmp_path: pathlib.Path) -> None:
        assert _run(["-q", "-i", str(tmp_path)]) == EXIT_INPUT_ERROR

    def test_malformed_model(self, tmp_path: pathlib.Path) -> None:
        path = _write_yaml(tmp_path / "bad.yaml", {"entities": [{"name": "x"}]})
        assert _run(["-q", "-i", str(path)]) == EXIT_INPUT_ERROR

    def test_no_model_section(self, tmp_path: pathlib.Path) -> None:
        path = _write_yaml(tmp_path / "empty.yaml", {"config": {"api_title": "x"}})
        assert _run(["-q", "-i", str(path)]) == EXIT_INPUT_ERROR

    def test_invalid_choice_is_usage_error(self, model_yaml_path: pathlib.Path) -> None:
        assert _run(["-i", str(model_yaml_path), "--convert", "xml"]) == 2

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["--version"]) == EXIT_SUCCESS
        assert "SchemaGen v1.0.0" in capsys.readouterr().out


class TestValidateOnly:
    def test_clean_model(
        self, model_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(["-q", "-i", str(model_yaml_path), "--validate-only"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Model Validation Report" in out
        assert "Valid:         Yes" in out

    def test_model_with_errors(
        self, tmp_path: pathlib.Path, duplicate_entity_model_dict: Dict[str, Any]
    ) -> None:
        path = _write_yaml(tmp_path / "dup.yaml", duplicate_entity_model_dict)
        assert _run(["-q", "-i", str(path), "--validate-only"]) == EXIT_VALIDATION_ERROR

    def test_malformed_model(self, tmp_path: pathlib.Path) -> None:
        path = _write_yaml(tmp_path / "bad.yaml", {"entities": "nope"})
        assert _run(["-q", "-i", str(path), "--validate-only"]) == EXIT_INPUT_ERROR


class TestSchemaModes:
    def test_validate_schema(
        self, schema_json_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        capsys.readouterr()
        assert _run(["-q", "-i", str(schema_json_path), "--validate-schema"]) == EXIT_SUCCESS
        report = json.loads(capsys.readouterr().out)
        assert report["valid"] is True
        assert report["summary"]["totalDefinitions"] == 3

    def test_validate_invalid_schema(
        self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "bad_schema.json"
        path.write_text(json.dumps({"type": 12}), encoding="utf-8")
        assert _run(["-q", "-i", str(path), "--validate-schema"]) == EXIT_VALIDATION_ERROR
        assert json.loads(capsys.readouterr().out)["valid"] is False

    @pytest.mark.parametrize(
        "fmt, marker",
        [
            ("sql", "CREATE TABLE users ("),
            ("typescript", "export interface User {"),
            ("mongoose", "const userSchema = new mongoose.Schema({"),
        ],
    )
    def test_convert(
        self,
        schema_json_path: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
        fmt: str,
        marker: str,
    ) -> None:
        capsys.readouterr()
        assert _run(["-q", "-i", str(schema_json_path), "--convert", fmt]) == EXIT_SUCCESS
        assert marker in capsys.readouterr().out

    def test_convert_malformed_document(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "odd.json"
        path.write_text(json.dumps({"definitions": ["x"]}), encoding="utf-8")
        assert _run(["-q", "-i", str(path), "--convert", "sql"]) == EXIT_GENERATION_ERROR
