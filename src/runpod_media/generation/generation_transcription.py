"""Whisper transcription facade."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..adapters.adapters_base import Modality, TranscriptionRequest
from ..jobs.jobs_errors import MalformedOutputError
from .generation_base import MediaModel
from .generation_models import TranscriptionResult, TranscriptionSegment


@dataclass(slots=True)
class TranscriptionModel(MediaModel):
    modality = Modality.TRANSCRIPTION
    label = "Transcription"

    async def transcribe(
        self,
        request: TranscriptionRequest,
        *,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> TranscriptionResult:
        adapted, snapshot = await self._execute(request, headers=headers, abort_signal=abort_signal)
        output = snapshot.output
        if isinstance(output, str):
            output = {"text": output}
        if not isinstance(output, dict):
            raise MalformedOutputError(output)

        text = output.get("text") or output.get("result") or ""
        duration = output.get("duration")
        return TranscriptionResult(
            text=str(text),
            segments=parse_segments(output.get("segments")),
            language=output.get("language") if isinstance(output.get("language"), str) else None,
            duration_seconds=float(duration) if isinstance(duration, (int, float)) else None,
            warnings=adapted.warnings,
            provider_metadata=self.provider_metadata(snapshot),
            response_timestamp=self.clock(),
            model_id=self.model_id,
        )


def parse_segments(raw: Any) -> list[TranscriptionSegment]:
    """Keep segments carrying text and numeric start/end; drop the rest."""

    if not isinstance(raw, list):
        return []
    segments: list[TranscriptionSegment] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        text, start, end = item.get("text"), item.get("start"), item.get("end")
        if isinstance(text, str) and isinstance(start, (int, float)) and isinstance(end, (int, float)):
            segments.append(TranscriptionSegment(text=text.strip(), start=float(start), end=float(end)))
    return segments


__all__ = ["TranscriptionModel", "parse_segments"]
