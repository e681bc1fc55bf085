"""Payload builders for speech synthesis and Whisper transcription endpoints."""

from __future__ import annotations

import base64
import re
from typing import Any

from pydantic import Field

from ..jobs.jobs_errors import InvalidArgumentError
from .adapters_base import (
    AdapterContext,
    ModelFamily,
    RunpodOptions,
    SpeechRequest,
    TranscriptionRequest,
)

SPEECH_OUTPUT_FORMAT = "wav"

_NEWLINES = re.compile(r"[\r\n]+")


class SpeechOptions(RunpodOptions):
    voice_url: str | None = Field(default=None, alias="voiceUrl")


class TranscriptionOptions(RunpodOptions):
    audio: str | None = None
    prompt: str | None = None
    initial_prompt: str | None = None
    language: str | None = None
    word_timestamps: bool | None = None
    model: str | None = None
    transcription: str | None = None
    translate: bool | None = None
    enable_vad: bool | None = None


SpeechContext = AdapterContext[SpeechRequest, SpeechOptions]
TranscriptionContext = AdapterContext[TranscriptionRequest, TranscriptionOptions]


def build_speech(ctx: SpeechContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    if not request.prompt:
        raise InvalidArgumentError(argument="prompt", value=request.prompt, message="Speech synthesis requires text")

    if request.output_format is not None and request.output_format != SPEECH_OUTPUT_FORMAT:
        ctx.warn_unsupported(
            "outputFormat",
            f"Unsupported outputFormat: {request.output_format}. This endpoint returns '{SPEECH_OUTPUT_FORMAT}'.",
        )
    if request.instructions is not None:
        ctx.warn_unsupported("instructions", "Instructions are not supported by this speech endpoint.")
    if request.speed is not None:
        ctx.warn_unsupported("speed", "Speed is not supported by this speech endpoint.")
    if request.language is not None:
        ctx.warn_unsupported("language", "Language selection is not supported by this speech endpoint.")

    defaults: dict[str, Any] = {"prompt": _NEWLINES.sub(" ", request.prompt)}
    # A voice prompt URL replaces the built-in voice name.
    if ctx.options.voice_url:
        defaults["voice_url"] = ctx.options.voice_url
    elif request.voice:
        defaults["voice"] = request.voice
    return ctx.compose(defaults, exclude=("voice_url",)), None


def build_transcription(ctx: TranscriptionContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    options = ctx.options
    payload: dict[str, Any] = {}

    url_reference = next((media for media in request.reference_media if media.is_url), None)
    inline_reference = next((media for media in request.reference_media if not media.is_url), None)
    if url_reference is not None:
        payload["audio"] = url_reference.url
    elif options.audio:
        payload["audio"] = options.audio
    elif request.audio is not None:
        payload["audio_base64"] = _to_base64(request.audio)
    elif inline_reference is not None:
        payload["audio_base64"] = inline_reference.base64_data()
    else:
        raise InvalidArgumentError(
            argument="audio",
            value=None,
            message="Transcription requires audio bytes, an audio URL or a reference medium",
        )

    initial_prompt = options.prompt or options.initial_prompt or request.prompt
    if initial_prompt:
        payload["initial_prompt"] = initial_prompt

    payload.update(options.forwarded(exclude=("audio", "prompt", "initial_prompt")))
    return payload, None


def _to_base64(audio: bytes | str) -> str:
    if isinstance(audio, str):
        return audio
    return base64.b64encode(audio).decode("ascii")


AUDIO_BUILDERS = {
    ModelFamily.SPEECH: build_speech,
    ModelFamily.TRANSCRIPTION: build_transcription,
}


__all__ = [
    "SpeechOptions",
    "TranscriptionOptions",
    "AUDIO_BUILDERS",
    "SPEECH_OUTPUT_FORMAT",
]
