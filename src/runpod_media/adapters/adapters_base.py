"""Shared types for per-family payload adapters.

Adapters are pure: they turn a modality request plus typed options into the
``input`` object a model family expects, without performing any I/O.
Composition order for every family is computed defaults, then deliberate
family overrides, then the caller's extra options; reference media supplied
through the request is applied last and always wins.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, ClassVar, Generic, Iterable, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..jobs.jobs_errors import InvalidArgumentError
from ..jobs.jobs_models import PollPolicy


class Modality(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    SPEECH = "speech"
    TRANSCRIPTION = "transcription"


class ModelFamily(StrEnum):
    """Groups of upstream models sharing one input schema."""

    IMAGE_DEFAULT = "image.default"
    IMAGE_FLUX = "image.flux"
    IMAGE_FLUX_KONTEXT = "image.flux-kontext"
    IMAGE_SEEDREAM = "image.seedream"
    IMAGE_WAN = "image.wan"
    IMAGE_Z_IMAGE = "image.z-image"
    IMAGE_NANO_BANANA = "image.nano-banana"
    VIDEO_DEFAULT = "video.default"
    VIDEO_WAN_LORA = "video.wan-lora"
    VIDEO_SORA = "video.sora"
    VIDEO_REFERENCE = "video.reference"
    SPEECH = "speech.default"
    TRANSCRIPTION = "transcription.whisper"


@dataclass(slots=True, frozen=True)
class ReferenceMedia:
    """Caller-supplied input media, either a remote URL or inline data."""

    url: str | None = None
    data: bytes | str | None = None
    media_type: str | None = None

    def __post_init__(self) -> None:
        if (self.url is None) == (self.data is None):
            raise ValueError("ReferenceMedia requires exactly one of url or data")

    @classmethod
    def from_url(cls, url: str, media_type: str | None = None) -> "ReferenceMedia":
        return cls(url=url, media_type=media_type)

    @classmethod
    def from_bytes(cls, data: bytes | str, media_type: str) -> "ReferenceMedia":
        return cls(data=data, media_type=media_type)

    @property
    def is_url(self) -> bool:
        return self.url is not None

    @property
    def kind(self) -> str | None:
        if not self.media_type:
            return None
        return self.media_type.split("/", 1)[0]

    def base64_data(self) -> str:
        """Return inline data as base64; a str is assumed to be encoded already."""

        if self.data is None:
            raise ValueError("ReferenceMedia has no inline data")
        if isinstance(self.data, str):
            return self.data
        return base64.b64encode(self.data).decode("ascii")

    def to_input_value(self) -> str:
        """URL as-is, inline data as a ``data:`` URL."""

        if self.url is not None:
            return self.url
        media_type = self.media_type or "application/octet-stream"
        return f"data:{media_type};base64,{self.base64_data()}"


@dataclass(slots=True)
class GenerationRequest:
    """Abstract generation call shared by every modality."""

    prompt: str | None = None
    count: int = 1
    size: str | None = None
    aspect_ratio: str | None = None
    resolution: str | None = None
    duration_seconds: float | None = None
    fps: int | None = None
    seed: int | None = None
    reference_media: list[ReferenceMedia] = field(default_factory=list)
    extra_options: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ImageRequest(GenerationRequest):
    # Inpainting masks are not supported by any family; always warned and ignored.
    mask: ReferenceMedia | None = None


@dataclass(slots=True)
class SpeechRequest(GenerationRequest):
    voice: str | None = None
    output_format: str | None = None
    instructions: str | None = None
    speed: float | None = None
    language: str | None = None


@dataclass(slots=True)
class TranscriptionRequest(GenerationRequest):
    audio: bytes | str | None = None
    media_type: str | None = None


@dataclass(slots=True, frozen=True)
class CallWarning:
    """Non-fatal notice attached to a successful result."""

    type: str
    feature: str
    details: str | None = None

    @classmethod
    def unsupported(cls, feature: str, details: str | None = None) -> "CallWarning":
        return cls(type="unsupported", feature=feature, details=details)

    @classmethod
    def other(cls, message: str) -> "CallWarning":
        return cls(type="other", feature="other", details=message)


class RunpodOptions(BaseModel):
    """Typed family options; unknown keys are forwarded to the payload verbatim.

    Validation is strict so a caller value is sent exactly as given: ``"false"``
    is rejected for a boolean instead of being turned into ``False``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, strict=True)

    max_poll_attempts: int | None = Field(default=None, alias="maxPollAttempts", ge=1)
    poll_interval_millis: int | None = Field(default=None, alias="pollIntervalMillis", ge=0)

    LOCAL_FIELDS: ClassVar[tuple[str, ...]] = ("max_poll_attempts", "poll_interval_millis")

    def poll_policy(self, default: PollPolicy) -> PollPolicy:
        return PollPolicy(
            max_attempts=self.max_poll_attempts or default.max_attempts,
            interval_millis=(
                self.poll_interval_millis
                if self.poll_interval_millis is not None
                else default.interval_millis
            ),
        )

    def forwarded(self, *, exclude: Iterable[str] = ()) -> dict[str, Any]:
        """Return every set option except the local polling controls."""

        excluded = set(self.LOCAL_FIELDS) | set(exclude)
        data = self.model_dump(exclude_none=True)
        return {key: value for key, value in data.items() if key not in excluded}


OptionsT = TypeVar("OptionsT", bound=RunpodOptions)
RequestT = TypeVar("RequestT", bound=GenerationRequest)


def parse_options(options_cls: type[OptionsT], raw: dict[str, Any] | None) -> OptionsT:
    try:
        return options_cls.model_validate(raw or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        argument = ".".join(str(part) for part in first.get("loc", ())) or "extra_options"
        raise InvalidArgumentError(
            argument=argument,
            value=first.get("input"),
            message=f"Invalid option {argument}: {first.get('msg')}",
        ) from exc


@dataclass(slots=True)
class AdapterContext(Generic[RequestT, OptionsT]):
    """Everything a family builder needs for one call."""

    model_id: str
    family: ModelFamily
    request: RequestT
    options: OptionsT
    warnings: list[CallWarning] = field(default_factory=list)

    def warn_unsupported(self, feature: str, details: str | None = None) -> None:
        self.warnings.append(CallWarning.unsupported(feature, details))

    def compose(
        self,
        defaults: dict[str, Any],
        overrides: dict[str, Any] | None = None,
        *,
        exclude: Iterable[str] = (),
    ) -> dict[str, Any]:
        return {**defaults, **(overrides or {}), **self.options.forwarded(exclude=exclude)}


@dataclass(slots=True)
class AdaptedPayload:
    """Upstream ``input`` object plus the endpoint variant to submit it to."""

    family: ModelFamily
    input: dict[str, Any]
    warnings: list[CallWarning]
    poll_policy: PollPolicy
    endpoint_suffix: str | None = None


FamilyBuilder = Callable[[AdapterContext[Any, Any]], tuple[dict[str, Any], str | None]]


@dataclass(slots=True, frozen=True)
class FamilyRule:
    """Ordered dispatch rule: the first rule whose patterns match wins."""

    family: ModelFamily
    any_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()

    def matches(self, model_id: str) -> bool:
        lowered = model_id.lower()
        if any(token in lowered for token in self.none_of):
            return False
        return not self.any_of or any(token in lowered for token in self.any_of)


def parse_dimensions(value: str, *, argument: str) -> tuple[int, int]:
    """Parse ``WxH`` or ``W*H`` into integers."""

    normalized = value.strip().lower().replace("*", "x")
    parts = normalized.split("x")
    if len(parts) != 2:
        raise InvalidArgumentError(
            argument=argument,
            value=value,
            message=f"{argument} {value!r} must look like WIDTHxHEIGHT",
        )
    try:
        width, height = (int(part) for part in parts)
    except ValueError as exc:
        raise InvalidArgumentError(
            argument=argument,
            value=value,
            message=f"{argument} {value!r} must look like WIDTHxHEIGHT",
        ) from exc
    if width <= 0 or height <= 0:
        raise InvalidArgumentError(argument=argument, value=value, message=f"{argument} {value!r} must be positive")
    return width, height


def parse_aspect_ratio(value: str, *, argument: str = "aspect_ratio") -> tuple[int, int]:
    parts = value.strip().split(":")
    try:
        width, height = (int(part) for part in parts)
    except ValueError as exc:
        raise InvalidArgumentError(
            argument=argument,
            value=value,
            message=f"{argument} {value!r} must look like W:H",
        ) from exc
    if width <= 0 or height <= 0:
        raise InvalidArgumentError(argument=argument, value=value, message=f"{argument} {value!r} must be positive")
    return width, height


def apply_single_reference(payload: dict[str, Any], media: Sequence[ReferenceMedia], *, key: str = "image") -> None:
    """Map the first reference medium to ``key``, replacing any legacy value."""

    if media:
        payload.pop("images", None)
        payload[key] = media[0].to_input_value()


def apply_multi_reference(payload: dict[str, Any], media: Sequence[ReferenceMedia], *, key: str = "images") -> None:
    """Map every reference medium to ``key``, replacing any legacy value."""

    if media:
        payload.pop("image", None)
        payload[key] = [item.to_input_value() for item in media]


__all__ = [
    "Modality",
    "ModelFamily",
    "ReferenceMedia",
    "GenerationRequest",
    "ImageRequest",
    "SpeechRequest",
    "TranscriptionRequest",
    "CallWarning",
    "RunpodOptions",
    "parse_options",
    "AdapterContext",
    "AdaptedPayload",
    "FamilyBuilder",
    "FamilyRule",
    "parse_dimensions",
    "parse_aspect_ratio",
    "apply_single_reference",
    "apply_multi_reference",
]
