"""Image generation facade."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass

from ..adapters.adapters_base import CallWarning, ImageRequest, Modality
from ..jobs.result_extractor import IMAGE_RESULT_KEYS, extract_result
from .generation_base import MediaModel
from .generation_models import GenerationResult

DEFAULT_IMAGE_MEDIA_TYPE = "image/png"


@dataclass(slots=True)
class ImageModel(MediaModel):
    """Generate or edit one image; URL results are downloaded to bytes."""

    modality = Modality.IMAGE
    label = "Image generation"

    async def generate(
        self,
        request: ImageRequest,
        *,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> GenerationResult:
        warnings: list[CallWarning] = []
        if request.mask is not None:
            warnings.append(CallWarning.unsupported("mask", "Inpainting masks are not supported; mask ignored."))

        adapted, snapshot = await self._execute(request, headers=headers, abort_signal=abort_signal)
        result = extract_result(snapshot.output, keys=IMAGE_RESULT_KEYS, default_media_type=DEFAULT_IMAGE_MEDIA_TYPE)
        image = await self._inline(result, abort_signal=abort_signal)

        return GenerationResult(
            outputs=[image],
            warnings=warnings + adapted.warnings,
            provider_metadata=self.provider_metadata(snapshot, url=result.url),
            response_timestamp=self.clock(),
            model_id=self.model_id,
        )


__all__ = ["ImageModel", "DEFAULT_IMAGE_MEDIA_TYPE"]
