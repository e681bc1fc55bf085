"""Factory binding model ids to endpoint URLs and generation facades."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..core.config import RunpodSettings
from ..generation.generation_image import ImageModel
from ..generation.generation_speech import SpeechModel
from ..generation.generation_transcription import TranscriptionModel
from ..generation.generation_video import VideoModel
from ..jobs.jobs_client import JobClient
from ..jobs.jobs_models import SubmitMode

logger = logging.getLogger(__name__)

IMAGE_ENDPOINTS: dict[str, str] = {
    "qwen/qwen-image": "https://api.runpod.ai/v2/qwen-image-t2i",
    "qwen/qwen-image-edit": "https://api.runpod.ai/v2/qwen-image-edit",
    "bytedance/seedream-3.0": "https://api.runpod.ai/v2/seedream-3-0-t2i",
    "bytedance/seedream-4.0": "https://api.runpod.ai/v2/seedream-v4-t2i",
    "bytedance/seedream-4.0-edit": "https://api.runpod.ai/v2/seedream-v4-edit",
    "black-forest-labs/flux-1-kontext-dev": "https://api.runpod.ai/v2/black-forest-labs-flux-1-kontext-dev",
    "black-forest-labs/flux-1-schnell": "https://api.runpod.ai/v2/black-forest-labs-flux-1-schnell",
    "black-forest-labs/flux-1-dev": "https://api.runpod.ai/v2/black-forest-labs-flux-1-dev",
    "google/nano-banana-edit": "https://api.runpod.ai/v2/nano-banana-edit",
    "nano-banana-edit": "https://api.runpod.ai/v2/nano-banana-edit",
}

VIDEO_ENDPOINTS: dict[str, str] = {
    "pruna/p-video": "https://api.runpod.ai/v2/p-video",
    "vidu/q3-t2v": "https://api.runpod.ai/v2/vidu-q3-t2v",
    "alibaba/wan-2.6-t2v": "https://api.runpod.ai/v2/wan-2-6-t2v",
    "alibaba/wan-2.6-i2v": "https://api.runpod.ai/v2/wan-2-6-i2v",
    "openai/sora-2-i2v": "https://api.runpod.ai/v2/sora-2-i2v",
}

SPEECH_ENDPOINTS: dict[str, str] = {}

TRANSCRIPTION_ENDPOINTS: dict[str, str] = {
    "pruna/whisper-v3-large": "https://api.runpod.ai/v2/whisper-v3-large",
}

_ENDPOINT_ID_SEPARATORS = re.compile(r"[/.]")


def derive_endpoint(api_root: str, model_id: str) -> str:
    """``owner/model-1.0`` becomes ``{api_root}/owner-model-1-0``."""

    return f"{api_root.rstrip('/')}/{_ENDPOINT_ID_SEPARATORS.sub('-', model_id.strip('/'))}"


@dataclass(slots=True)
class RunpodProvider:
    """Create generation models sharing one configuration and header source."""

    settings: RunpodSettings = field(default_factory=RunpodSettings)
    log: logging.Logger = field(default_factory=lambda: logger)

    def endpoint_for(self, model_id: str, table: Mapping[str, str]) -> str:
        if self.settings.base_url:
            return self.settings.base_url
        endpoint = table.get(model_id)
        if endpoint is None:
            endpoint = derive_endpoint(self.settings.api_root, model_id)
            self.log.debug("runpod.endpoint.derived", extra={"model_id": model_id, "base_url": endpoint})
        return endpoint

    def job_client(self, base_url: str, *, default_mode: SubmitMode = SubmitMode.ASYNC) -> JobClient:
        return JobClient(
            base_url=base_url,
            headers=self.settings.auth_headers,
            timeout_seconds=self.settings.request_timeout_seconds,
            default_mode=default_mode,
        )

    def image_model(self, model_id: str) -> ImageModel:
        return ImageModel(model_id=model_id, job_client=self.job_client(self.endpoint_for(model_id, IMAGE_ENDPOINTS)))

    def video_model(self, model_id: str) -> VideoModel:
        return VideoModel(model_id=model_id, job_client=self.job_client(self.endpoint_for(model_id, VIDEO_ENDPOINTS)))

    def speech_model(self, model_id: str) -> SpeechModel:
        client = self.job_client(self.endpoint_for(model_id, SPEECH_ENDPOINTS), default_mode=SubmitMode.SYNC)
        return SpeechModel(model_id=model_id, job_client=client)

    def transcription_model(self, model_id: str) -> TranscriptionModel:
        return TranscriptionModel(
            model_id=model_id,
            job_client=self.job_client(self.endpoint_for(model_id, TRANSCRIPTION_ENDPOINTS)),
        )


def create_provider(
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    headers: Mapping[str, str] | None = None,
    settings: RunpodSettings | None = None,
) -> RunpodProvider:
    """Instantiate a provider; explicit arguments override environment settings."""

    resolved = settings or RunpodSettings()
    overrides: dict[str, object] = {}
    if api_key is not None:
        overrides["api_key"] = api_key
    if base_url is not None:
        overrides["base_url"] = base_url
    if headers is not None:
        overrides["headers"] = {**resolved.headers, **headers}
    if overrides:
        resolved = resolved.model_copy(update=overrides)
    return RunpodProvider(settings=resolved)


__all__ = [
    "RunpodProvider",
    "create_provider",
    "derive_endpoint",
    "IMAGE_ENDPOINTS",
    "VIDEO_ENDPOINTS",
    "SPEECH_ENDPOINTS",
    "TRANSCRIPTION_ENDPOINTS",
]
