# File: schemagen/errors.py
"""
SchemaGen - Failure Signals
============================
A single hard-failure exception raised at each generator boundary.

Soft conditions (unknown type tokens, unresolvable relationship endpoints,
missing ``id`` fields, absent relationship lists) are never raised; they
have documented fallbacks inside the generators.  Everything else that
goes wrong while building an artifact is re-signalled as
``GenerationFailure`` carrying the kind of generator that failed.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List


class GeneratorKind(str, Enum):
    """Which stage produced a failure."""

    SCHEMA = "schema"
    API = "api"
    DIAGRAM = "diagram"
    CONVERSION = "conversion"
    NORMALIZATION = "normalization"


class GenerationFailure(Exception):
    """
    Raised when a generator cannot produce a complete artifact.

    The HTTP or CLI layer maps this to its own failure response; the core
    only defines the kind and the message.
    """

    def __init__(self, kind: GeneratorKind, message: str) -> None:
        self.kind: GeneratorKind = GeneratorKind(kind)
        self.message: str = message
        super().__init__(f"{self.kind.value} generation failed: {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}

    def __repr__(self) -> str:
        return f"<GenerationFailure {self.kind.value}: {self.message}>"


__all__: List[str] = [
    "GeneratorKind",
    "GenerationFailure",
]
