"""Resolve a model id to its family and build the upstream ``input`` payload."""

from __future__ import annotations

import logging
from typing import Any

from ..jobs.jobs_errors import InvalidArgumentError
from ..jobs.jobs_models import PollPolicy
from .adapters_audio import AUDIO_BUILDERS, SpeechOptions, TranscriptionOptions
from .adapters_base import (
    AdaptedPayload,
    AdapterContext,
    CallWarning,
    FamilyBuilder,
    FamilyRule,
    GenerationRequest,
    Modality,
    ModelFamily,
    RunpodOptions,
    parse_options,
)
from .adapters_image import IMAGE_BUILDERS, ImageOptions
from .adapters_video import VIDEO_BUILDERS, VideoOptions

logger = logging.getLogger(__name__)

# First match wins; the last rule of each modality is the catch-all.
IMAGE_RULES: tuple[FamilyRule, ...] = (
    FamilyRule(ModelFamily.IMAGE_FLUX_KONTEXT, any_of=("kontext",)),
    FamilyRule(ModelFamily.IMAGE_FLUX, any_of=("flux", "black-forest-labs")),
    FamilyRule(ModelFamily.IMAGE_SEEDREAM, any_of=("seedream",)),
    FamilyRule(ModelFamily.IMAGE_WAN, any_of=("alibaba/wan", "wan-2.6")),
    FamilyRule(ModelFamily.IMAGE_Z_IMAGE, any_of=("z-image",)),
    FamilyRule(ModelFamily.IMAGE_NANO_BANANA, any_of=("nano-banana",)),
    FamilyRule(ModelFamily.IMAGE_DEFAULT),
)

VIDEO_RULES: tuple[FamilyRule, ...] = (
    FamilyRule(ModelFamily.VIDEO_SORA, any_of=("sora",)),
    FamilyRule(ModelFamily.VIDEO_REFERENCE, any_of=("r2v",)),
    FamilyRule(ModelFamily.VIDEO_WAN_LORA, any_of=("wan-2.2",)),
    FamilyRule(ModelFamily.VIDEO_DEFAULT),
)

RULES: dict[Modality, tuple[FamilyRule, ...]] = {
    Modality.IMAGE: IMAGE_RULES,
    Modality.VIDEO: VIDEO_RULES,
    Modality.SPEECH: (FamilyRule(ModelFamily.SPEECH),),
    Modality.TRANSCRIPTION: (FamilyRule(ModelFamily.TRANSCRIPTION),),
}

OPTIONS_BY_MODALITY: dict[Modality, type[RunpodOptions]] = {
    Modality.IMAGE: ImageOptions,
    Modality.VIDEO: VideoOptions,
    Modality.SPEECH: SpeechOptions,
    Modality.TRANSCRIPTION: TranscriptionOptions,
}

BUILDERS: dict[ModelFamily, FamilyBuilder] = {
    **IMAGE_BUILDERS,
    **VIDEO_BUILDERS,
    **AUDIO_BUILDERS,
}

# Speech checks its own text; transcription has no prompt.
PROMPT_REQUIRED = frozenset({Modality.IMAGE, Modality.VIDEO})

DEFAULT_POLL_POLICIES: dict[Modality, PollPolicy] = {
    Modality.IMAGE: PollPolicy(max_attempts=60, interval_millis=5_000),
    Modality.VIDEO: PollPolicy(max_attempts=120, interval_millis=5_000),
    Modality.SPEECH: PollPolicy(max_attempts=60, interval_millis=5_000),
    Modality.TRANSCRIPTION: PollPolicy(max_attempts=120, interval_millis=2_000),
}


def resolve_family(model_id: str, modality: Modality) -> ModelFamily:
    for rule in RULES[modality]:
        if rule.matches(model_id):
            return rule.family
    raise LookupError(f"No family rule for {modality.value} model {model_id}")


def build_payload(
    model_id: str,
    request: GenerationRequest,
    *,
    modality: Modality,
    default_poll_policy: PollPolicy | None = None,
) -> AdaptedPayload:
    """Adapt ``request`` for the family of ``model_id``.

    Pure and synchronous: invalid arguments, including a missing image or
    video prompt, are raised here before any network call. ``count > 1``
    is accepted and degraded to a single job.
    """

    if modality in PROMPT_REQUIRED and not (request.prompt or "").strip():
        raise InvalidArgumentError(
            argument="prompt",
            value=request.prompt,
            message=f"Runpod {modality.value} generation requires a prompt",
        )

    family = resolve_family(model_id, modality)
    options = parse_options(OPTIONS_BY_MODALITY[modality], request.extra_options)
    warnings: list[CallWarning] = []
    if request.count > 1:
        warnings.append(
            CallWarning.unsupported(
                "n > 1",
                f"Runpod {modality.value} models produce one output per job; generating 1 instead of {request.count}.",
            )
        )

    context: AdapterContext[Any, Any] = AdapterContext(
        model_id=model_id,
        family=family,
        request=request,
        options=options,
        warnings=warnings,
    )
    payload, suffix = BUILDERS[family](context)
    policy = options.poll_policy(default_poll_policy or DEFAULT_POLL_POLICIES[modality])

    logger.debug(
        "runpod.payload.built",
        extra={
            "model_id": model_id,
            "family": family.value,
            "keys": sorted(payload),
            "warnings": len(context.warnings),
        },
    )
    return AdaptedPayload(
        family=family,
        input=payload,
        warnings=context.warnings,
        poll_policy=policy,
        endpoint_suffix=suffix,
    )


__all__ = [
    "IMAGE_RULES",
    "VIDEO_RULES",
    "DEFAULT_POLL_POLICIES",
    "resolve_family",
    "build_payload",
]
