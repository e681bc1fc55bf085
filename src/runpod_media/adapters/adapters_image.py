"""Payload builders for image model families."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import Field

from ..jobs.jobs_errors import InvalidArgumentError
from .adapters_base import (
    AdapterContext,
    ImageRequest,
    ModelFamily,
    RunpodOptions,
    apply_multi_reference,
    apply_single_reference,
    parse_aspect_ratio,
    parse_dimensions,
)

# Sizes validated against the fixed-catalog endpoints, in native "W*H" form.
SUPPORTED_SIZES: tuple[str, ...] = (
    "1328*1328",
    "1472*1140",
    "1140*1472",
    "512*512",
    "768*768",
    "1024*1024",
    "512*768",
    "768*512",
    "1024*768",
    "768*1024",
)
SUPPORTED_ASPECT_RATIOS: dict[str, str] = {
    "1:1": "1328*1328",
    "4:3": "1472*1140",
    "3:4": "1140*1472",
}
DEFAULT_CATALOG_SIZE = "1328*1328"

Z_IMAGE_MIN_DIMENSION = 256
Z_IMAGE_MAX_DIMENSION = 2048
Z_IMAGE_DIMENSION_STEP = 16
CUSTOM_ASPECT_RATIO = "custom"


class ImageOptions(RunpodOptions):
    negative_prompt: str | None = None
    enable_safety_checker: bool | None = None
    num_inference_steps: int | None = None
    guidance: int | float | None = None
    output_format: str | None = None
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)


ImageContext = AdapterContext[ImageRequest, ImageOptions]


@dataclass(slots=True, frozen=True)
class PixelBudget:
    """Inclusive total-pixel bounds for families without a size catalog."""

    min_pixels: int
    max_pixels: int
    default_size: str
    long_edge: int

    def resolve(self, request: ImageRequest, model_id: str) -> str:
        if request.size:
            width, height = parse_dimensions(request.size, argument="size")
            self._check(width, height, argument="size", value=request.size, model_id=model_id)
            return f"{width}*{height}"
        if request.aspect_ratio:
            ratio_w, ratio_h = parse_aspect_ratio(request.aspect_ratio)
            if ratio_w >= ratio_h:
                width, height = self.long_edge, round(self.long_edge * ratio_h / ratio_w)
            else:
                width, height = round(self.long_edge * ratio_w / ratio_h), self.long_edge
            self._check(width, height, argument="aspect_ratio", value=request.aspect_ratio, model_id=model_id)
            return f"{width}*{height}"
        return self.default_size

    def _check(self, width: int, height: int, *, argument: str, value: str, model_id: str) -> None:
        pixels = width * height
        if self.min_pixels <= pixels <= self.max_pixels:
            return
        raise InvalidArgumentError(
            argument=argument,
            value=value,
            accepted=(self.min_pixels, self.max_pixels),
            message=(
                f"{argument} {value} resolves to {width}x{height} ({pixels} pixels), outside the "
                f"range supported by {model_id}: {self.min_pixels}-{self.max_pixels} pixels"
            ),
        )


SEEDREAM_BUDGET = PixelBudget(min_pixels=921_600, max_pixels=16_777_216, default_size="2048*2048", long_edge=2048)
WAN_IMAGE_BUDGET = PixelBudget(min_pixels=589_824, max_pixels=2_073_600, default_size="1024*1024", long_edge=1280)


def catalog_size(request: ImageRequest) -> str:
    """Resolve size for fixed-catalog families, converting ``WxH`` to ``W*H``."""

    if request.size:
        candidate = request.size.strip().lower().replace("x", "*")
        if candidate not in SUPPORTED_SIZES:
            accepted = [size.replace("*", "x") for size in SUPPORTED_SIZES]
            raise InvalidArgumentError(
                argument="size",
                value=request.size,
                accepted=accepted,
                message=f"Size {request.size} is not supported by Runpod. Supported sizes: {', '.join(accepted)}",
            )
        return candidate
    if request.aspect_ratio:
        size = SUPPORTED_ASPECT_RATIOS.get(request.aspect_ratio)
        if size is None:
            raise InvalidArgumentError(
                argument="aspect_ratio",
                value=request.aspect_ratio,
                accepted=list(SUPPORTED_ASPECT_RATIOS),
                message=(
                    f"Aspect ratio {request.aspect_ratio} is not supported by Runpod. "
                    f"Supported aspect ratios: {', '.join(SUPPORTED_ASPECT_RATIOS)}"
                ),
            )
        return size
    return DEFAULT_CATALOG_SIZE


def _warn_size_precedence(ctx: ImageContext) -> None:
    if ctx.request.size and ctx.request.aspect_ratio:
        ctx.warn_unsupported("aspectRatio", "aspectRatio is ignored when size is provided.")


def _seed(request: ImageRequest) -> int:
    return request.seed if request.seed is not None else -1


def build_default(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    """Generic shape used by qwen-image models and unknown ids."""

    request = ctx.request
    _warn_size_precedence(ctx)
    payload = ctx.compose(
        {
            "prompt": request.prompt,
            "negative_prompt": "",
            "size": catalog_size(request),
            "seed": _seed(request),
            "enable_safety_checker": True,
        }
    )
    if len(request.reference_media) > 1:
        apply_multi_reference(payload, request.reference_media)
    else:
        apply_single_reference(payload, request.reference_media)
    return payload, None


def build_flux(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    _warn_size_precedence(ctx)
    width, height = (int(part) for part in catalog_size(request).split("*"))
    schnell = "schnell" in ctx.model_id.lower()
    payload = ctx.compose(
        {
            "prompt": request.prompt,
            "negative_prompt": "",
            "seed": _seed(request),
            "width": width,
            "height": height,
            "image_format": "png",
        },
        {
            "num_inference_steps": 4 if schnell else 28,
            "guidance": 7 if schnell else 2,
        },
    )
    if request.reference_media:
        ctx.warn_unsupported("referenceMedia", f"{ctx.model_id} is text-to-image only; reference media ignored.")
    return payload, None


def build_flux_kontext(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    _warn_size_precedence(ctx)
    payload = ctx.compose(
        {
            "prompt": request.prompt,
            "negative_prompt": "",
            "seed": _seed(request),
            "size": catalog_size(request),
            "output_format": "png",
            "enable_safety_checker": True,
        },
        {"num_inference_steps": 28, "guidance": 2},
    )
    apply_single_reference(payload, request.reference_media)
    return payload, None


def build_seedream(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    _warn_size_precedence(ctx)
    payload = ctx.compose(
        {
            "prompt": request.prompt,
            "size": SEEDREAM_BUDGET.resolve(request, ctx.model_id),
            "seed": _seed(request),
            "enable_safety_checker": True,
        }
    )
    apply_multi_reference(payload, request.reference_media)
    return payload, None


def build_wan(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    _warn_size_precedence(ctx)
    payload = ctx.compose(
        {
            "prompt": request.prompt,
            "negative_prompt": "",
            "size": WAN_IMAGE_BUDGET.resolve(request, ctx.model_id),
            "seed": _seed(request),
            "enable_safety_checker": True,
        }
    )
    apply_single_reference(payload, request.reference_media)
    return payload, None


def build_z_image(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    """Free-form aspect ratios; explicit dimensions only with ``custom``."""

    request = ctx.request
    overrides: dict[str, Any] = {}
    if request.size:
        width, height = parse_dimensions(request.size, argument="size")
        overrides = {"aspect_ratio": CUSTOM_ASPECT_RATIO, "width": width, "height": height}
        if request.aspect_ratio:
            ctx.warn_unsupported("aspectRatio", "aspectRatio is ignored when size is provided.")
    elif request.aspect_ratio:
        overrides = {"aspect_ratio": request.aspect_ratio}

    payload = ctx.compose(
        {
            "prompt": request.prompt,
            "aspect_ratio": "1:1",
            "seed": _seed(request),
            "output_format": "png",
        },
        overrides,
    )
    if payload.get("aspect_ratio") == CUSTOM_ASPECT_RATIO:
        for argument in ("width", "height"):
            _check_custom_dimension(argument, payload.get(argument))
    else:
        payload.pop("width", None)
        payload.pop("height", None)
    return payload, None


def _check_custom_dimension(argument: str, value: Any) -> None:
    accepted = (Z_IMAGE_MIN_DIMENSION, Z_IMAGE_MAX_DIMENSION)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(
            argument=argument,
            value=value,
            accepted=accepted,
            message=f"aspect_ratio 'custom' requires an integer {argument}",
        )
    if not Z_IMAGE_MIN_DIMENSION <= value <= Z_IMAGE_MAX_DIMENSION or value % Z_IMAGE_DIMENSION_STEP:
        raise InvalidArgumentError(
            argument=argument,
            value=value,
            accepted=accepted,
            message=(
                f"{argument} {value} must be between {Z_IMAGE_MIN_DIMENSION} and "
                f"{Z_IMAGE_MAX_DIMENSION} and a multiple of {Z_IMAGE_DIMENSION_STEP}"
            ),
        )


def build_nano_banana(ctx: ImageContext) -> tuple[dict[str, Any], str | None]:
    request = ctx.request
    if request.size:
        ctx.warn_unsupported("size", f"{ctx.model_id} does not accept explicit sizes; use aspectRatio instead.")
    defaults: dict[str, Any] = {"prompt": request.prompt, "output_format": "png"}
    if request.aspect_ratio:
        defaults["aspect_ratio"] = request.aspect_ratio
    if request.seed is not None:
        defaults["seed"] = request.seed
    payload = ctx.compose(defaults)
    apply_multi_reference(payload, request.reference_media)
    return payload, None


IMAGE_BUILDERS = {
    ModelFamily.IMAGE_DEFAULT: build_default,
    ModelFamily.IMAGE_FLUX: build_flux,
    ModelFamily.IMAGE_FLUX_KONTEXT: build_flux_kontext,
    ModelFamily.IMAGE_SEEDREAM: build_seedream,
    ModelFamily.IMAGE_WAN: build_wan,
    ModelFamily.IMAGE_Z_IMAGE: build_z_image,
    ModelFamily.IMAGE_NANO_BANANA: build_nano_banana,
}


__all__ = [
    "ImageOptions",
    "PixelBudget",
    "SEEDREAM_BUDGET",
    "WAN_IMAGE_BUDGET",
    "SUPPORTED_SIZES",
    "SUPPORTED_ASPECT_RATIOS",
    "DEFAULT_CATALOG_SIZE",
    "IMAGE_BUILDERS",
    "catalog_size",
]
