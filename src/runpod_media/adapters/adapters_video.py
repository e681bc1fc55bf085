"""Payload builders for video model families."""

from __future__ import annotations

from typing import Any

from ..jobs.jobs_errors import InvalidArgumentError
from .adapters_base import (
    AdapterContext,
    GenerationRequest,
    ModelFamily,
    RunpodOptions,
    apply_multi_reference,
    apply_single_reference,
    parse_dimensions,
)

LORA_VARIANT_SUFFIX = "-lora"

SORA_RESOLUTIONS: tuple[str, ...] = ("1280*720", "720*1280")
SORA_PRO_RESOLUTIONS: tuple[str, ...] = SORA_RESOLUTIONS + ("1792*1024", "1024*1792")
SORA_DURATIONS: tuple[int, ...] = (4, 8, 12)


class VideoOptions(RunpodOptions):
    negative_prompt: str | None = None
    style: str | None = None
    guidance_scale: int | float | None = None
    num_inference_steps: int | None = None
    loras: list[Any] | None = None


VideoContext = AdapterContext[GenerationRequest, VideoOptions]


def native_resolution(value: str) -> str:
    """Convert ``WxH`` into the ``W*H`` form the video endpoints expect."""

    width, height = parse_dimensions(value, argument="resolution")
    return f"{width}*{height}"


def _resolution(request: GenerationRequest) -> str | None:
    return request.resolution or request.size


def _base_input(ctx: VideoContext) -> dict[str, Any]:
    request = ctx.request
    payload: dict[str, Any] = {"prompt": request.prompt}
    resolution = _resolution(request)
    if resolution:
        payload["size"] = native_resolution(resolution)
        if request.aspect_ratio:
            ctx.warn_unsupported("aspectRatio", "aspectRatio is ignored when resolution is provided.")
    elif request.aspect_ratio:
        payload["aspect_ratio"] = request.aspect_ratio
    if request.duration_seconds is not None:
        payload["duration"] = request.duration_seconds
    if request.fps is not None:
        payload["fps"] = request.fps
    if request.seed is not None:
        payload["seed"] = request.seed
    return payload


def _image_references(request: GenerationRequest):
    return [media for media in request.reference_media if media.kind in (None, "image")]


def build_default(ctx: VideoContext) -> tuple[dict[str, Any], str | None]:
    payload = ctx.compose(_base_input(ctx))
    apply_single_reference(payload, _image_references(ctx.request))
    return payload, None


def build_wan_lora(ctx: VideoContext) -> tuple[dict[str, Any], str | None]:
    """Switch to the ``-lora`` endpoint when adapters are requested on a base model."""

    payload = ctx.compose(_base_input(ctx))
    apply_single_reference(payload, _image_references(ctx.request))
    wants_lora = bool(ctx.options.loras)
    already_lora = "lora" in ctx.model_id.lower()
    return payload, (LORA_VARIANT_SUFFIX if wants_lora and not already_lora else None)


def build_sora(ctx: VideoContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    allowed = SORA_PRO_RESOLUTIONS if "pro" in ctx.model_id.lower() else SORA_RESOLUTIONS
    resolution = _resolution(request)
    if resolution and native_resolution(resolution) not in allowed:
        accepted = [item.replace("*", "x") for item in allowed]
        raise InvalidArgumentError(
            argument="resolution",
            value=resolution,
            accepted=accepted,
            message=f"Resolution {resolution} is not supported by {ctx.model_id}. Supported resolutions: {', '.join(accepted)}",
        )
    if request.duration_seconds is not None and request.duration_seconds not in SORA_DURATIONS:
        raise InvalidArgumentError(
            argument="duration_seconds",
            value=request.duration_seconds,
            accepted=SORA_DURATIONS,
            message=(
                f"Duration {request.duration_seconds}s is not supported by {ctx.model_id}. "
                f"Supported durations: {', '.join(str(item) for item in SORA_DURATIONS)}"
            ),
        )
    if request.fps is not None:
        ctx.warn_unsupported("fps", f"{ctx.model_id} renders at a fixed frame rate; fps ignored.")
    base = _base_input(ctx)
    base.pop("fps", None)
    payload = ctx.compose(base)
    apply_single_reference(payload, _image_references(request))
    return payload, None


def build_reference(ctx: VideoContext) -> tuple[dict[str, Any], str | None]:
    payload = ctx.compose(_base_input(ctx))
    apply_multi_reference(payload, _image_references(ctx.request))
    return payload, None


def with_variant_suffix(base_url: str, suffix: str) -> str:
    """Append ``suffix`` to the endpoint id of ``base_url``, keeping any submit suffix."""

    trimmed = base_url.rstrip("/")
    head, sep, tail = trimmed.rpartition("/")
    if tail in ("run", "runsync"):
        return f"{with_variant_suffix(head, suffix)}/{tail}"
    if tail.endswith(suffix):
        return trimmed
    return f"{head}{sep}{tail}{suffix}"


VIDEO_BUILDERS = {
    ModelFamily.VIDEO_DEFAULT: build_default,
    ModelFamily.VIDEO_WAN_LORA: build_wan_lora,
    ModelFamily.VIDEO_SORA: build_sora,
    ModelFamily.VIDEO_REFERENCE: build_reference,
}


__all__ = [
    "VideoOptions",
    "VIDEO_BUILDERS",
    "LORA_VARIANT_SUFFIX",
    "SORA_RESOLUTIONS",
    "SORA_PRO_RESOLUTIONS",
    "SORA_DURATIONS",
    "native_resolution",
    "with_variant_suffix",
]
