# File: schemagen/generator.py
"""
SchemaGen - Master Generation Pipeline (Orchestrator)
======================================================

Connects every phase together:

    Model Input → Normalization → Lint → {JSON Schema, OpenAPI, Diagrams}

The ``ArtifactGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Load the model from a JSON/YAML file (or accept an in-memory mapping).
    2. Split it into the raw model and a ``GenerationConfig`` (models.py).
    3. Normalize into a ``CanonicalModel`` (normalizer.py).
    4. Lint the model and configuration (validators.py).
    5. Run the three generators, sequentially or on a thread pool.
    6. Return a ``GenerationBundle`` with the artifacts and a report.

Error handling strategy:
    - Lint findings are collected and surfaced; they never block generation.
    - Generator failures are isolated: a failed generator yields ``None``
      for its artifact and an entry in ``report.failures``; the other two
      artifacts are still produced.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import json
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from schemagen.diagrams import DiagramGenerator
from schemagen.errors import GenerationFailure, GeneratorKind
from schemagen.json_schema import JsonSchemaGenerator
from schemagen.models import CanonicalModel, GenerationConfig
from schemagen.normalizer import RawModel, normalize_model
from schemagen.openapi import OpenAPIGenerator
from schemagen.utils import Timer
from schemagen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.generator")

# Generators run in this order when sequential; results are always
# reported in this order.
ARTIFACT_KINDS: Tuple[GeneratorKind, ...] = (
    GeneratorKind.SCHEMA,
    GeneratorKind.API,
    GeneratorKind.DIAGRAM,
)

_STEP_NAMES: Dict[GeneratorKind, str] = {
    GeneratorKind.SCHEMA: "JSON Schema",
    GeneratorKind.API: "OpenAPI",
    GeneratorKind.DIAGRAM: "Diagrams",
}


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ArtifactGenerator.generate()``.

    Contains timing information, model counts, lint findings and any
    generator failures (keyed by generator kind).
    """

    success: bool = False
    source: str = ""

    # Metrics
    total_entities: int = 0
    total_fields: int = 0
    total_relationships: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    lint_errors: List[str] = field(default_factory=list)
    lint_warnings: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  SchemaGen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        if self.source:
            lines.append(f"  Source:           {self.source}")
        lines.append(f"  Entities:         {self.total_entities}")
        lines.append(f"  Fields:           {self.total_fields}")
        lines.append(f"  Relationships:    {self.total_relationships}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        if self.lint_errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Lint Errors ({len(self.lint_errors)}):")
            for err in self.lint_errors:
                lines.append(f"    ✗ {err}")

        if self.lint_warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Lint Warnings ({len(self.lint_warnings)}):")
            for warn in self.lint_warnings:
                lines.append(f"    ⚠ {warn}")

        if self.failures:
            lines.append(f"{'─'*60}")
            lines.append(f"  Generation Failures ({len(self.failures)}):")
            for kind, message in self.failures.items():
                lines.append(f"    ✗ {kind}: {message}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "source": self.source,
            "totalEntities": self.total_entities,
            "totalFields": self.total_fields,
            "totalRelationships": self.total_relationships,
            "totalElapsedSeconds": round(self.total_elapsed_seconds, 6),
            "steps": [
                {
                    "name": s.step_name,
                    "success": s.success,
                    "elapsedSeconds": round(s.elapsed_seconds, 6),
                    "detail": s.detail,
                }
                for s in self.step_metrics
            ],
            "lintErrors": list(self.lint_errors),
            "lintWarnings": list(self.lint_warnings),
            "failures": dict(self.failures),
        }


@dataclass(frozen=False, slots=True)
class GenerationBundle:
    """The three sibling artifacts of one generation request."""

    report: GenerationReport
    json_schema: Optional[Dict[str, Any]] = None
    api: Optional[Dict[str, Any]] = None
    diagrams: Optional[Dict[str, Any]] = None
    model: Optional[CanonicalModel] = None

    @property
    def success(self) -> bool:
        return self.report.success

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: ``{jsonSchema, api, diagrams, report}``."""
        return {
            "jsonSchema": self.json_schema,
            "api": self.api,
            "diagrams": self.diagrams,
            "report": self.report.to_dict(),
        }


# ---------------------------------------------------------------------------
# Model loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_model_file(path: Path) -> Dict[str, Any]:
    """
    Load a model (or JSON Schema) file, dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Input path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    elif suffix == ".json":
        return _load_json_file(path)
    else:
        logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
        try:
            return _load_json_file(path)
        except ValueError:
            return _load_yaml_file(path)


def parse_raw_input(
    raw: Dict[str, Any],
    config_overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[Dict[str, Any], GenerationConfig]:
    """
    Split a raw input document into the model mapping and its config.

    The model is either the ``model`` section or the document itself
    (``entities`` / ``relationships`` at top level).  Settings come from
    the optional ``config`` section, updated with *config_overrides*.

    Raises:
        ValueError: If no model can be found or the config is invalid.
    """
    model_data: Any = raw.get("model")
    if model_data is None:
        if "entities" not in raw:
            raise ValueError(
                "Cannot find a model in input. "
                "Expected top-level 'entities' or a 'model' section."
            )
        model_data = {k: v for k, v in raw.items() if k != "config"}
    elif not isinstance(model_data, dict):
        raise ValueError("'model' section must be a mapping.")

    config_data: Any = raw.get("config") or {}
    if not isinstance(config_data, dict):
        raise ValueError("'config' section must be a mapping.")
    if config_overrides:
        config_data = {**config_data, **config_overrides}
    if not config_data:
        logger.info("No generation config found in input — using defaults.")

    try:
        config: GenerationConfig = GenerationConfig.model_validate(config_data)
    except Exception as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return model_data, config


# ---------------------------------------------------------------------------
# ArtifactGenerator — Master orchestrator
# ---------------------------------------------------------------------------


class ArtifactGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = ArtifactGenerator(GenerationConfig(parallel=True))
        bundle = generator.generate({"entities": [...]})
        print(bundle.report.summary())

    The generator is reusable — create once, call generate() many times.
    It holds no per-request state, so concurrent calls are safe.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        lint: bool = True,
    ) -> None:
        self.config: GenerationConfig = config or GenerationConfig()
        self._clock: Optional[Callable[[], datetime]] = clock
        self._lint: bool = lint

        logger.debug(
            "ArtifactGenerator initialised: parallel=%s, lint=%s.",
            self.config.parallel,
            lint,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(self, model: RawModel, *, source: str = "") -> GenerationBundle:
        report: GenerationReport = GenerationReport(source=source)
        return self._run_pipeline(model, report)

    def generate_from_file(
        self,
        path: Path,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationBundle:
        """
        Load *path*, apply its ``config`` section (plus overrides) and
        generate.  The file's settings replace this generator's config.

        Raises:
            FileNotFoundError / ValueError: when the file cannot be loaded.
        """
        raw: Dict[str, Any] = load_model_file(path)
        model_data, config = parse_raw_input(raw, config_overrides)
        logger.info("Loaded model file: %s", path)
        runner: ArtifactGenerator = ArtifactGenerator(
            config, clock=self._clock, lint=self._lint
        )
        return runner.generate(model_data, source=str(path))

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self, raw: RawModel, report: GenerationReport
    ) -> GenerationBundle:
        pipeline_start: float = time.perf_counter()
        bundle: GenerationBundle = GenerationBundle(report=report)

        model: Optional[CanonicalModel] = self._step_normalize(raw, report)
        if model is None:
            return self._finalise(bundle, time.perf_counter() - pipeline_start)
        bundle.model = model

        if self._lint:
            self._step_lint(model, report)

        artifacts: Dict[GeneratorKind, Optional[Dict[str, Any]]] = (
            self._step_generate(model, report)
        )
        bundle.json_schema = artifacts.get(GeneratorKind.SCHEMA)
        bundle.api = artifacts.get(GeneratorKind.API)
        bundle.diagrams = artifacts.get(GeneratorKind.DIAGRAM)

        return self._finalise(bundle, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: Normalization
    # -----------------------------------------------------------------

    def _step_normalize(
        self, raw: RawModel, report: GenerationReport
    ) -> Optional[CanonicalModel]:
        with Timer("normalize") as t:
            try:
                model: Optional[CanonicalModel] = normalize_model(raw)
                error: Optional[GenerationFailure] = None
            except GenerationFailure as exc:
                model, error = None, exc

        if error is not None:
            report.failures[error.kind.value] = error.message
            report.step_metrics.append(
                GenerationStepMetric(
                    step_name="Normalize Model",
                    success=False,
                    elapsed_seconds=t.elapsed,
                    detail=error.message,
                )
            )
            logger.error("Normalization failed: %s", error.message)
            return None

        report.total_entities = len(model.entities)
        report.total_fields = model.total_fields
        report.total_relationships = len(model.relationships)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Normalize Model",
                success=True,
                elapsed_seconds=t.elapsed,
                detail=f"{len(model.entities)} entities",
            )
        )
        return model

    # -----------------------------------------------------------------
    # Pipeline step: Lint
    # -----------------------------------------------------------------

    def _step_lint(self, model: CanonicalModel, report: GenerationReport) -> None:
        with Timer("lint") as t:
            result: ValidationResult = validate_full(model, self.config)

        report.lint_errors.extend(str(e) for e in result.errors)
        report.lint_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Lint Model",
                success=result.is_valid,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )

        for err in result.errors:
            logger.warning("  ✗ %s", err)
        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)

    # -----------------------------------------------------------------
    # Pipeline step: Artifact generation
    # -----------------------------------------------------------------

    def _generators(self) -> Dict[GeneratorKind, Callable[[CanonicalModel], Dict[str, Any]]]:
        return {
            GeneratorKind.SCHEMA: JsonSchemaGenerator(self.config, self._clock).generate,
            GeneratorKind.API: OpenAPIGenerator(self.config, self._clock).generate,
            GeneratorKind.DIAGRAM: DiagramGenerator(self.config, self._clock).generate,
        }

    @staticmethod
    def _run_one(
        kind: GeneratorKind,
        fn: Callable[[CanonicalModel], Dict[str, Any]],
        model: CanonicalModel,
    ) -> Tuple[Optional[Dict[str, Any]], GenerationStepMetric, Optional[GenerationFailure]]:
        with Timer(kind.value) as t:
            try:
                artifact: Optional[Dict[str, Any]] = fn(model)
                failure: Optional[GenerationFailure] = None
            except GenerationFailure as exc:
                artifact, failure = None, exc

        metric: GenerationStepMetric = GenerationStepMetric(
            step_name=f"Generate {_STEP_NAMES[kind]}",
            success=failure is None,
            elapsed_seconds=t.elapsed,
            detail=failure.message if failure is not None else "ok",
        )
        return artifact, metric, failure

    def _step_generate(
        self, model: CanonicalModel, report: GenerationReport
    ) -> Dict[GeneratorKind, Optional[Dict[str, Any]]]:
        generators = self._generators()
        outcomes: Dict[
            GeneratorKind,
            Tuple[Optional[Dict[str, Any]], GenerationStepMetric, Optional[GenerationFailure]],
        ] = {}

        if self.config.parallel:
            workers: int = min(self.config.max_workers, len(generators))
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="schemagen"
            ) as pool:
                futures: Dict[GeneratorKind, Future] = {
                    kind: pool.submit(self._run_one, kind, generators[kind], model)
                    for kind in ARTIFACT_KINDS
                }
                for kind in ARTIFACT_KINDS:
                    outcomes[kind] = futures[kind].result()
            logger.info("Ran %d generators on %d worker(s).", len(futures), workers)
        else:
            for kind in ARTIFACT_KINDS:
                outcomes[kind] = self._run_one(kind, generators[kind], model)

        artifacts: Dict[GeneratorKind, Optional[Dict[str, Any]]] = {}
        for kind in ARTIFACT_KINDS:
            artifact, metric, failure = outcomes[kind]
            artifacts[kind] = artifact
            report.step_metrics.append(metric)
            if failure is not None:
                report.failures[failure.kind.value] = failure.message

        return artifacts

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    @staticmethod
    def _finalise(bundle: GenerationBundle, total_elapsed: float) -> GenerationBundle:
        report: GenerationReport = bundle.report
        report.total_elapsed_seconds = total_elapsed
        report.success = not report.failures

        if report.success:
            logger.info("Generation complete in %.3fs.", total_elapsed)
        else:
            logger.error(
                "Generation finished with %d failure(s): %s",
                len(report.failures),
                ", ".join(report.failures),
            )
        return bundle


def generate_from_file(
    path: Path,
    *,
    config_overrides: Optional[Dict[str, Any]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> GenerationBundle:
    """Functional shortcut for ``ArtifactGenerator().generate_from_file``."""
    return ArtifactGenerator(clock=clock).generate_from_file(
        Path(path), config_overrides=config_overrides
    )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ARTIFACT_KINDS",
    "ArtifactGenerator",
    "GenerationBundle",
    "GenerationReport",
    "GenerationStepMetric",
    "generate_from_file",
    "load_model_file",
    "parse_raw_input",
]

logger.debug("schemagen.generator loaded.")
