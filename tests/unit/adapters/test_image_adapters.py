from __future__ import annotations

import pytest

from runpod_media.adapters.adapters_base import ImageRequest, Modality, ModelFamily, ReferenceMedia
from runpod_media.adapters.adapters_image import SUPPORTED_SIZES
from runpod_media.adapters.registry import build_payload
from runpod_media.jobs.jobs_errors import InvalidArgumentError


def adapt(model_id: str, **fields):
    return build_payload(model_id, ImageRequest(prompt="a red fox", **fields), modality=Modality.IMAGE)


@pytest.mark.parametrize("native", SUPPORTED_SIZES)
def test_catalog_sizes_convert_to_native_separator(native: str) -> None:
    width, height = native.split("*")

    adapted = adapt("qwen/qwen-image", size=f"{width}x{height}")

    assert adapted.input["size"] == native


def test_default_family_shape() -> None:
    adapted = adapt("qwen/qwen-image")

    assert adapted.family is ModelFamily.IMAGE_DEFAULT
    assert adapted.input == {
        "prompt": "a red fox",
        "negative_prompt": "",
        "size": "1328*1328",
        "seed": -1,
        "enable_safety_checker": True,
    }


def test_catalog_aspect_ratio_maps_to_size() -> None:
    assert adapt("qwen/qwen-image", aspect_ratio="4:3").input["size"] == "1472*1140"


@pytest.mark.parametrize("ratio", ["16:9", "9:16", "2:1"])
def test_catalog_rejects_unknown_aspect_ratio(ratio: str) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        adapt("qwen/qwen-image", aspect_ratio=ratio)

    assert exc_info.value.value == ratio
    assert exc_info.value.accepted == ["1:1", "4:3", "3:4"]


def test_catalog_rejects_unknown_size_and_lists_alternatives() -> None:
    with pytest.raises(InvalidArgumentError, match="Size 640x480 is not supported by Runpod. Supported sizes: 1328x1328"):
        adapt("qwen/qwen-image-edit", size="640x480")


def test_size_wins_over_aspect_ratio_with_warning() -> None:
    adapted = adapt("qwen/qwen-image", size="512x512", aspect_ratio="4:3")

    assert adapted.input["size"] == "512*512"
    assert [warning.feature for warning in adapted.warnings] == ["aspectRatio"]


@pytest.mark.parametrize(
    ("size", "ok"),
    [
        ("960x960", True),
        ("959x960", False),
        ("4096x4096", True),
        ("4097x4096", False),
    ],
)
def test_seedream_pixel_budget_boundaries(size: str, ok: bool) -> None:
    if ok:
        assert adapt("bytedance/seedream-4.0", size=size).input["size"] == size.replace("x", "*")
    else:
        with pytest.raises(InvalidArgumentError):
            adapt("bytedance/seedream-4.0", size=size)


@pytest.mark.parametrize(
    ("size", "ok"),
    [
        ("768x768", True),
        ("767x768", False),
        ("1920x1080", True),
        ("1921x1080", False),
    ],
)
def test_wan_pixel_budget_boundaries(size: str, ok: bool) -> None:
    if ok:
        assert adapt("alibaba/wan-2.6", size=size).input["size"] == size.replace("x", "*")
    else:
        with pytest.raises(InvalidArgumentError):
            adapt("alibaba/wan-2.6", size=size)


def test_pixel_budget_defaults_and_aspect_ratios() -> None:
    assert adapt("bytedance/seedream-4.0").input["size"] == "2048*2048"
    assert adapt("bytedance/seedream-4.0", aspect_ratio="16:9").input["size"] == "2048*1152"
    assert adapt("alibaba/wan-2.6").input["size"] == "1024*1024"
    assert adapt("alibaba/wan-2.6", aspect_ratio="9:16").input["size"] == "720*1280"


def test_single_reference_overrides_legacy_image_option() -> None:
    adapted = adapt(
        "black-forest-labs/flux-1-kontext-dev",
        reference_media=[ReferenceMedia.from_url("https://cdn/ref.png")],
        extra_options={"image": "https://cdn/other.png"},
    )

    assert adapted.input["image"] == "https://cdn/ref.png"


def test_legacy_image_option_used_without_reference_media() -> None:
    adapted = adapt("black-forest-labs/flux-1-kontext-dev", extra_options={"image": "https://cdn/other.png"})

    assert adapted.input["image"] == "https://cdn/other.png"


def test_multi_reference_overrides_legacy_images_option() -> None:
    adapted = adapt(
        "bytedance/seedream-4.0-edit",
        reference_media=[
            ReferenceMedia.from_url("https://cdn/a.png"),
            ReferenceMedia.from_bytes(b"\x00\x01\x02", "image/png"),
        ],
        extra_options={"images": ["https://cdn/legacy.png"], "image": "https://cdn/legacy.png"},
    )

    assert adapted.input["images"] == ["https://cdn/a.png", "data:image/png;base64,AAEC"]
    assert "image" not in adapted.input


def test_default_family_picks_field_by_reference_count() -> None:
    one = adapt("qwen/qwen-image-edit", reference_media=[ReferenceMedia.from_url("https://cdn/a.png")])
    two = adapt(
        "qwen/qwen-image-edit",
        reference_media=[ReferenceMedia.from_url("https://cdn/a.png"), ReferenceMedia.from_url("https://cdn/b.png")],
    )

    assert one.input["image"] == "https://cdn/a.png"
    assert "images" not in one.input
    assert two.input["images"] == ["https://cdn/a.png", "https://cdn/b.png"]
    assert "image" not in two.input


@pytest.mark.parametrize(
    ("model_id", "steps", "guidance"),
    [
        ("black-forest-labs/flux-1-schnell", 4, 7),
        ("black-forest-labs/flux-1-dev", 28, 2),
    ],
)
def test_flux_dimensions_and_defaults(model_id: str, steps: int, guidance: int) -> None:
    adapted = adapt(model_id, size="1024x768")

    assert adapted.family is ModelFamily.IMAGE_FLUX
    assert adapted.input["width"] == 1024
    assert adapted.input["height"] == 768
    assert adapted.input["num_inference_steps"] == steps
    assert adapted.input["guidance"] == guidance
    assert adapted.input["image_format"] == "png"
    assert "size" not in adapted.input


def test_extra_options_override_computed_defaults() -> None:
    adapted = adapt("black-forest-labs/flux-1-dev", extra_options={"num_inference_steps": 12, "negative_prompt": "blurry"})

    assert adapted.input["num_inference_steps"] == 12
    assert adapted.input["negative_prompt"] == "blurry"


def test_poll_options_never_reach_the_payload() -> None:
    adapted = adapt(
        "qwen/qwen-image",
        extra_options={"maxPollAttempts": 3, "pollIntervalMillis": 10, "custom_flag": True},
    )

    assert "maxPollAttempts" not in adapted.input
    assert "pollIntervalMillis" not in adapted.input
    assert "max_poll_attempts" not in adapted.input
    assert "poll_interval_millis" not in adapted.input
    assert adapted.input["custom_flag"] is True
    assert adapted.poll_policy.max_attempts == 3
    assert adapted.poll_policy.interval_millis == 10


def test_invalid_poll_option_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        adapt("qwen/qwen-image", extra_options={"maxPollAttempts": 0})


def test_z_image_size_switches_to_custom_mode() -> None:
    adapted = adapt("tongyi-mai/z-image-turbo", size="1024x768")

    assert adapted.input["aspect_ratio"] == "custom"
    assert adapted.input["width"] == 1024
    assert adapted.input["height"] == 768


def test_z_image_passes_free_form_aspect_ratio() -> None:
    adapted = adapt("tongyi-mai/z-image-turbo", aspect_ratio="21:9", extra_options={"width": 512})

    assert adapted.input["aspect_ratio"] == "21:9"
    assert "width" not in adapted.input


@pytest.mark.parametrize("size", ["1000x768", "240x256", "2064x1024"])
def test_z_image_custom_dimensions_are_bounded(size: str) -> None:
    with pytest.raises(InvalidArgumentError):
        adapt("tongyi-mai/z-image-turbo", size=size)


def test_z_image_custom_requires_both_dimensions() -> None:
    with pytest.raises(InvalidArgumentError, match="height"):
        adapt("tongyi-mai/z-image-turbo", extra_options={"aspect_ratio": "custom", "width": 512})


def test_nano_banana_ignores_size_with_warning() -> None:
    adapted = adapt(
        "google/nano-banana-edit",
        size="1024x1024",
        aspect_ratio="16:9",
        reference_media=[ReferenceMedia.from_url("https://cdn/a.png")],
    )

    assert adapted.family is ModelFamily.IMAGE_NANO_BANANA
    assert "size" not in adapted.input
    assert adapted.input["aspect_ratio"] == "16:9"
    assert adapted.input["images"] == ["https://cdn/a.png"]
    assert [warning.feature for warning in adapted.warnings] == ["size"]


def test_count_above_one_degrades_with_warning() -> None:
    adapted = adapt("qwen/qwen-image", count=3)

    assert adapted.warnings[0].type == "unsupported"
    assert adapted.warnings[0].feature == "n > 1"


@pytest.mark.parametrize(
    "model_id",
    [
        "qwen/qwen-image",
        "black-forest-labs/flux-1-dev",
        "black-forest-labs/flux-1-kontext-dev",
        "bytedance/seedream-4.0",
        "alibaba/wan-2.6",
        "tongyi-mai/z-image-turbo",
        "google/nano-banana-edit",
    ],
)
@pytest.mark.parametrize("prompt", [None, "", "  \n"])
def test_every_image_family_requires_a_prompt(model_id: str, prompt) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        build_payload(model_id, ImageRequest(prompt=prompt), modality=Modality.IMAGE)

    assert exc_info.value.argument == "prompt"
    assert exc_info.value.value == prompt


def test_typed_options_keep_caller_values() -> None:
    adapted = adapt("black-forest-labs/flux-1-dev", extra_options={"guidance": 3, "num_inference_steps": 20})

    assert adapted.input["guidance"] == 3
    assert type(adapted.input["guidance"]) is int
    assert adapt("black-forest-labs/flux-1-dev", extra_options={"guidance": 3.5}).input["guidance"] == 3.5


@pytest.mark.parametrize(
    "extra",
    [
        {"enable_safety_checker": "false"},
        {"num_inference_steps": "20"},
        {"guidance": "3"},
        {"width": 512.0},
    ],
)
def test_typed_options_are_not_coerced(extra: dict) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        adapt("qwen/qwen-image", extra_options=extra)

    assert exc_info.value.argument.startswith(next(iter(extra)))
