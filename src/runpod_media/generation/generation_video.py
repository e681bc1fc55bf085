"""Video generation facade."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass

from ..adapters.adapters_base import GenerationRequest, Modality
from ..jobs.result_extractor import VIDEO_RESULT_KEYS, extract_result
from .generation_base import MediaModel
from .generation_models import GenerationResult

DEFAULT_VIDEO_MEDIA_TYPE = "video/mp4"


@dataclass(slots=True)
class VideoModel(MediaModel):
    """Generate one video and return its URL; call ``materialize`` for bytes."""

    modality = Modality.VIDEO
    label = "Video generation"

    async def generate(
        self,
        request: GenerationRequest,
        *,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> GenerationResult:
        adapted, snapshot = await self._execute(request, headers=headers, abort_signal=abort_signal)
        result = extract_result(snapshot.output, keys=VIDEO_RESULT_KEYS, default_media_type=DEFAULT_VIDEO_MEDIA_TYPE)
        return GenerationResult(
            outputs=[result],
            warnings=adapted.warnings,
            provider_metadata=self.provider_metadata(snapshot, url=result.url),
            response_timestamp=self.clock(),
            model_id=self.model_id,
        )


__all__ = ["VideoModel", "DEFAULT_VIDEO_MEDIA_TYPE"]
