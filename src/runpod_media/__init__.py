"""Runpod media generation client: image, video, speech and transcription."""

from .adapters import (
    CallWarning,
    GenerationRequest,
    ImageRequest,
    ReferenceMedia,
    SpeechRequest,
    TranscriptionRequest,
)
from .core import RunpodSettings
from .generation import (
    GenerationResult,
    ImageModel,
    SpeechModel,
    TranscriptionModel,
    TranscriptionResult,
    VideoModel,
)
from .jobs import (
    CanonicalResult,
    ConfigError,
    DownloadError,
    InvalidArgumentError,
    JobCancelledError,
    JobFailedError,
    JobTimeoutError,
    MalformedOutputError,
    PollPolicy,
    RunpodAPIError,
    RunpodError,
    StatusCheckError,
    SubmissionError,
)
from .providers import RunpodProvider, create_provider

__version__ = "0.1.0"

__all__ = [
    "RunpodProvider",
    "create_provider",
    "RunpodSettings",
    "ImageModel",
    "VideoModel",
    "SpeechModel",
    "TranscriptionModel",
    "GenerationRequest",
    "ImageRequest",
    "SpeechRequest",
    "TranscriptionRequest",
    "ReferenceMedia",
    "CallWarning",
    "GenerationResult",
    "TranscriptionResult",
    "CanonicalResult",
    "PollPolicy",
    "RunpodError",
    "ConfigError",
    "InvalidArgumentError",
    "RunpodAPIError",
    "SubmissionError",
    "StatusCheckError",
    "DownloadError",
    "JobFailedError",
    "JobTimeoutError",
    "JobCancelledError",
    "MalformedOutputError",
]
