# File: schemagen/exporters.py
"""
SchemaGen - Artifact Exporter (File-System Manager)
====================================================

Responsible for:
    1. Rendering a ``GenerationBundle`` into output file contents.
    2. Writing them atomically (write-to-temp then rename).
    3. Producing an export manifest with checksums for reproducibility.

Output layout::

    schema.json            JSON Schema document
    openapi.json|yaml      OpenAPI document
    code_examples.json     client snippets per language / entity
    erd.mmd                Mermaid ER diagram
    erd.puml               PlantUML diagram
    description.txt        plain-text model description
    alternatives/*.mmd     box graph, class diagram, mind-map (optional)
    manifest.json          files, sizes, line counts, SHA-256 checksums

Artifacts that failed to generate are simply absent.  If a write fails
mid-batch, previously written files remain intact (each file is atomic).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from schemagen.generator import GenerationBundle
from schemagen.utils import (
    Timer,
    count_lines,
    iso_timestamp,
    sha256_hex,
    utc_now,
    write_file,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.exporters")

OPENAPI_FORMATS: Tuple[str, ...] = ("json", "yaml")
MANIFEST_NAME: str = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Manifest of all exported files, serialisable to JSON."""

    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ArtifactExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def render_artifact_files(
    bundle: GenerationBundle,
    openapi_format: str = "json",
) -> Dict[str, str]:
    """Relative path → content for every artifact present in *bundle*."""
    if openapi_format not in OPENAPI_FORMATS:
        raise ValueError(
            f"openapi_format must be one of {OPENAPI_FORMATS}, got {openapi_format!r}"
        )

    files: Dict[str, str] = {}

    if bundle.json_schema is not None:
        files["schema.json"] = dump_json(bundle.json_schema)

    if bundle.api is not None:
        spec: Dict[str, Any] = bundle.api["openApiSpec"]
        if openapi_format == "yaml":
            files["openapi.yaml"] = dump_yaml(spec)
        else:
            files["openapi.json"] = dump_json(spec)
        files["code_examples.json"] = dump_json(bundle.api["codeExamples"])

    if bundle.diagrams is not None:
        files["erd.mmd"] = bundle.diagrams["mermaid"]
        files["erd.puml"] = bundle.diagrams["plantUML"]
        files["description.txt"] = bundle.diagrams["textual"]
        alternatives: Dict[str, str] = bundle.diagrams.get("alternatives") or {}
        for name, content in alternatives.items():
            files[f"alternatives/{name}.mmd"] = content

    return files


# ---------------------------------------------------------------------------
# ArtifactExporter class
# ---------------------------------------------------------------------------


class ArtifactExporter:
    """
    Writes a bundle's artifacts to an output directory.

    Usage::

        exporter = ArtifactExporter(Path("./out"), openapi_format="yaml")
        result = exporter.export(bundle)
        print(result.manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        openapi_format: str = "json",
        atomic_writes: bool = True,
        generate_manifest: bool = True,
    ) -> None:
        self._output_dir: Path = Path(output_dir).resolve()
        self._openapi_format: str = openapi_format
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._file_records: List[FileRecord] = []

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, bundle: GenerationBundle) -> ExportResult:
        self._errors = []
        self._file_records = []

        with Timer("export") as timer:
            try:
                files: Dict[str, str] = render_artifact_files(
                    bundle, self._openapi_format
                )
                for rel_path, content in files.items():
                    self._write_single_file(rel_path, content)

                if self._generate_manifest:
                    self._write_single_file(MANIFEST_NAME, self._build_manifest().to_json())
            except Exception as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest()
        result: ExportResult = ExportResult(
            success=not self._errors,
            manifest=manifest,
            errors=tuple(self._errors),
            elapsed_seconds=timer.elapsed,
        )

        if result.success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )
        return result

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _write_single_file(self, rel_path: str, content: str) -> None:
        full_path: Path = self._output_dir / rel_path
        try:
            size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        except OSError as exc:
            error_msg: str = f"Failed to write {rel_path}: {exc}"
            self._errors.append(error_msg)
            logger.error(error_msg)
            return

        self._file_records.append(
            FileRecord(
                relative_path=rel_path,
                absolute_path=str(full_path),
                size_bytes=size_bytes,
                line_count=count_lines(content),
                sha256=sha256_hex(content),
            )
        )

    def _build_manifest(self) -> ExportManifest:
        import schemagen

        return ExportManifest(
            generator_version=schemagen.__version__,
            export_timestamp=iso_timestamp(utc_now()),
            output_directory=str(self._output_dir),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OPENAPI_FORMATS",
    "FileRecord",
    "ExportManifest",
    "ExportResult",
    "dump_json",
    "dump_yaml",
    "render_artifact_files",
    "ArtifactExporter",
]

logger.debug("schemagen.exporters loaded.")
