"""Per-family payload adapters."""

from .adapters_audio import SpeechOptions, TranscriptionOptions
from .adapters_base import (
    AdaptedPayload,
    CallWarning,
    GenerationRequest,
    ImageRequest,
    Modality,
    ModelFamily,
    ReferenceMedia,
    RunpodOptions,
    SpeechRequest,
    TranscriptionRequest,
)
from .adapters_image import ImageOptions
from .adapters_video import VideoOptions, with_variant_suffix
from .registry import DEFAULT_POLL_POLICIES, build_payload, resolve_family

__all__ = [
    "AdaptedPayload",
    "CallWarning",
    "GenerationRequest",
    "ImageRequest",
    "SpeechRequest",
    "TranscriptionRequest",
    "ReferenceMedia",
    "Modality",
    "ModelFamily",
    "RunpodOptions",
    "ImageOptions",
    "VideoOptions",
    "SpeechOptions",
    "TranscriptionOptions",
    "DEFAULT_POLL_POLICIES",
    "build_payload",
    "resolve_family",
    "with_variant_suffix",
]
