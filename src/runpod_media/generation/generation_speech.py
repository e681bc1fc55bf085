"""Speech synthesis facade."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass

from ..adapters.adapters_base import Modality, SpeechRequest
from ..jobs.result_extractor import AUDIO_RESULT_KEYS, extract_result
from .generation_base import MediaModel
from .generation_models import GenerationResult

DEFAULT_AUDIO_MEDIA_TYPE = "audio/wav"


@dataclass(slots=True)
class SpeechModel(MediaModel):
    """Synthesize speech. The job client for this model submits to ``/runsync``."""

    modality = Modality.SPEECH
    label = "Speech generation"

    async def generate(
        self,
        request: SpeechRequest,
        *,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> GenerationResult:
        adapted, snapshot = await self._execute(request, headers=headers, abort_signal=abort_signal)
        result = extract_result(snapshot.output, keys=AUDIO_RESULT_KEYS, default_media_type=DEFAULT_AUDIO_MEDIA_TYPE)
        audio = await self._inline(result, abort_signal=abort_signal)
        return GenerationResult(
            outputs=[audio],
            warnings=adapted.warnings,
            provider_metadata=self.provider_metadata(snapshot, url=result.url),
            response_timestamp=self.clock(),
            model_id=self.model_id,
        )


__all__ = ["SpeechModel", "DEFAULT_AUDIO_MEDIA_TYPE"]
