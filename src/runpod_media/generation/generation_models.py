"""Typed results returned by the generation facades."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..adapters.adapters_base import CallWarning
from ..jobs.jobs_models import CanonicalResult


@dataclass(slots=True)
class GenerationResult:
    """Media produced by one job together with call diagnostics."""

    outputs: list[CanonicalResult]
    warnings: list[CallWarning]
    provider_metadata: dict[str, Any]
    response_timestamp: datetime
    model_id: str

    @property
    def output(self) -> CanonicalResult:
        return self.outputs[0]


@dataclass(slots=True, frozen=True)
class TranscriptionSegment:
    text: str
    start: float
    end: float


@dataclass(slots=True)
class TranscriptionResult:
    text: str
    warnings: list[CallWarning]
    provider_metadata: dict[str, Any]
    response_timestamp: datetime
    model_id: str
    segments: list[TranscriptionSegment] = field(default_factory=list)
    language: str | None = None
    duration_seconds: float | None = None


__all__ = ["GenerationResult", "TranscriptionResult", "TranscriptionSegment"]
