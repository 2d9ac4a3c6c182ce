# File: schemagen/cli.py
"""
SchemaGen - Command-Line Interface
===================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate all artifacts into a directory
    python -m schemagen -i model.yaml -o ./out

    # Print the whole bundle as JSON, running generators in parallel
    python -m schemagen -i model.json --parallel

    # OpenAPI as YAML, plus the alternative diagrams
    python -m schemagen -i model.yaml -o ./out --openapi-format yaml --alternatives

    # Lint the model only
    python -m schemagen -i model.yaml --validate-only

    # Meta-validate / convert an existing JSON Schema document
    python -m schemagen -i schema.json --validate-schema
    python -m schemagen -i schema.json --convert sql

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root schemagen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("schemagen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from schemagen import __version__
    from schemagen.converters import SchemaFormat
    from schemagen.exporters import OPENAPI_FORMATS

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="schemagen",
        description=(
            "SchemaGen — multi-target schema generator.\n\n"
            "Projects an entity/relationship model (JSON/YAML) into a JSON "
            "Schema document, an OpenAPI 3.0 specification with CRUD paths "
            "and client snippets, and ER diagrams (Mermaid, PlantUML, text)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -i model.yaml -o ./out\n"
            "  %(prog)s -i model.yaml --validate-only\n"
            "  %(prog)s -i schema.json --convert typescript\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SchemaGen v{__version__}",
    )

    # --- Input / output ---
    parser.add_argument(
        "-i", "--input",
        type=str,
        required=True,
        metavar="PATH",
        help="Model file (JSON or YAML), or a JSON Schema document for "
        "--validate-schema / --convert.",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Write artifacts to DIR instead of printing the bundle as JSON.",
    )
    parser.add_argument(
        "--openapi-format",
        type=str,
        default="json",
        choices=list(OPENAPI_FORMATS),
        help="File format of the written OpenAPI document (default: json).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    exclusive = mode_group.add_mutually_exclusive_group()
    exclusive.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only lint the model without generating artifacts.",
    )
    exclusive.add_argument(
        "--validate-schema",
        action="store_true",
        default=False,
        help="Meta-validate the input as a JSON Schema document.",
    )
    exclusive.add_argument(
        "--convert",
        type=str,
        default=None,
        choices=[f.value for f in SchemaFormat],
        metavar="FORMAT",
        help="Convert the input JSON Schema document to typescript, mongoose or sql.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--api-title",
        type=str,
        default=None,
        metavar="TITLE",
        help="Override the OpenAPI info.title.",
    )
    config_group.add_argument(
        "--api-version",
        type=str,
        default=None,
        metavar="VER",
        help="Override the OpenAPI info.version (e.g. '2.0.0').",
    )
    config_group.add_argument(
        "--base-url",
        type=str,
        default=None,
        metavar="URL",
        help="Override the base URL used in client code snippets.",
    )
    config_group.add_argument(
        "--page-size",
        type=int,
        default=None,
        metavar="N",
        help="Override the default 'limit' of list endpoints.",
    )
    config_group.add_argument(
        "--alternatives",
        action="store_true",
        default=False,
        help="Also emit the box graph, class diagram and mind-map.",
    )
    config_group.add_argument(
        "--parallel",
        action="store_true",
        default=False,
        help="Run the three generators on a thread pool.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all log output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.api_title is not None:
        overrides["api_title"] = args.api_title

    if args.api_version is not None:
        overrides["api_version"] = args.api_version

    if args.base_url is not None:
        overrides["code_example_base_url"] = args.base_url

    if args.page_size is not None:
        overrides["default_page_size"] = args.page_size

    if args.alternatives:
        overrides["include_alternative_diagrams"] = True

    if args.parallel:
        overrides["parallel"] = True

    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(input_path: Path, args: argparse.Namespace) -> int:
    """Lint the model only; returns the appropriate exit code."""
    from schemagen.errors import GenerationFailure
    from schemagen.generator import load_model_file, parse_raw_input
    from schemagen.normalizer import normalize_model
    from schemagen.utils import Timer
    from schemagen.validators import validate_full

    logger.info("Running validation-only mode for: %s", input_path)

    try:
        raw_data = load_model_file(input_path)
        model_data, config = parse_raw_input(raw_data, _build_config_overrides(args))
        model = normalize_model(model_data)
    except (FileNotFoundError, ValueError, GenerationFailure) as exc:
        logger.error("Failed to load model: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(model, config)

    print(f"\n{'='*50}")
    print("  Model Validation Report")
    print(f"{'='*50}")
    print(f"  File:          {input_path.name}")
    print(f"  Entities:      {len(model.entities)}")
    print(f"  Relationships: {len(model.relationships)}")
    print(f"  Time:          {t.elapsed:.3f}s")
    print(f"  Valid:         {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")

    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# JSON Schema modes
# ---------------------------------------------------------------------------


def _run_validate_schema(input_path: Path) -> int:
    from schemagen.generator import load_model_file
    from schemagen.validators import validate_json_schema

    try:
        document = load_model_file(input_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema document: %s", exc)
        return EXIT_INPUT_ERROR

    report = validate_json_schema(document)
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return EXIT_SUCCESS if report.valid else EXIT_VALIDATION_ERROR


def _run_convert(input_path: Path, fmt: str) -> int:
    from schemagen.converters import convert_schema_format
    from schemagen.errors import GenerationFailure
    from schemagen.generator import load_model_file

    try:
        document = load_model_file(input_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema document: %s", exc)
        return EXIT_INPUT_ERROR

    try:
        output: str = convert_schema_format(document, fmt)
    except GenerationFailure as exc:
        logger.error("%s", exc)
        return EXIT_GENERATION_ERROR

    sys.stdout.write(output)
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    input_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """Run the full generation pipeline; returns the appropriate exit code."""
    from schemagen.errors import GeneratorKind
    from schemagen.exporters import ArtifactExporter, dump_json
    from schemagen.generator import ArtifactGenerator, GenerationBundle

    try:
        bundle: GenerationBundle = ArtifactGenerator().generate_from_file(
            input_path,
            config_overrides=_build_config_overrides(args) or None,
        )
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load model: %s", exc)
        return EXIT_INPUT_ERROR

    if GeneratorKind.NORMALIZATION.value in bundle.report.failures:
        print(bundle.report.summary(), file=sys.stderr)
        return EXIT_INPUT_ERROR

    if output_dir is None:
        sys.stdout.write(dump_json(bundle.to_dict()))
        if args.verbose >= 1:
            print(bundle.report.summary(), file=sys.stderr)
    else:
        export_result = ArtifactExporter(
            output_dir, openapi_format=args.openapi_format
        ).export(bundle)
        print(bundle.report.summary())
        if not export_result.success:
            for err in export_result.errors:
                logger.error("  ✗ %s", err)
            return EXIT_EXPORT_ERROR
        print(
            f"  Wrote {export_result.manifest.total_files} files "
            f"({export_result.manifest.total_bytes:,} bytes) to {output_dir}"
        )

    return EXIT_SUCCESS if bundle.success else EXIT_GENERATION_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    input_path: Path = Path(args.input).resolve()

    if not input_path.exists():
        logger.error("Input file not found: %s", input_path)
        sys.exit(EXIT_INPUT_ERROR)

    if not input_path.is_file():
        logger.error("Input path is not a file: %s", input_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(input_path, args))

    if args.validate_schema:
        sys.exit(_run_validate_schema(input_path))

    if args.convert is not None:
        sys.exit(_run_convert(input_path, args.convert))

    output_dir: Optional[Path] = (
        Path(args.output).resolve() if args.output is not None else None
    )

    logger.info("Input:   %s", input_path)
    logger.info("Output:  %s", output_dir or "<stdout>")

    exit_code: int = _run_generation(input_path, output_dir, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


def main() -> NoReturn:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("schemagen.cli loaded.")
