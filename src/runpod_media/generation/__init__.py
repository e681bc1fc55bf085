"""Per-modality generation facades."""

from .generation_base import MediaModel
from .generation_image import ImageModel
from .generation_models import GenerationResult, TranscriptionResult, TranscriptionSegment
from .generation_speech import SpeechModel
from .generation_transcription import TranscriptionModel
from .generation_video import VideoModel

__all__ = [
    "MediaModel",
    "ImageModel",
    "VideoModel",
    "SpeechModel",
    "TranscriptionModel",
    "GenerationResult",
    "TranscriptionResult",
    "TranscriptionSegment",
]
