from __future__ import annotations

from datetime import datetime, timezone

import pytest

from runpod_media.adapters.adapters_base import ImageRequest, ReferenceMedia
from runpod_media.generation.generation_image import ImageModel
from runpod_media.jobs.jobs_errors import InvalidArgumentError, JobFailedError, MalformedOutputError
from runpod_media.jobs.jobs_models import LocatorType
from tests.conftest import ENDPOINT
from tests.mocks.runpod_http import bytes_response, json_response

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def model(job_client) -> ImageModel:
    return ImageModel(model_id="qwen/qwen-image", job_client=job_client, clock=lambda: FIXED_NOW)


@pytest.mark.asyncio
async def test_generate_downloads_image(model, transport) -> None:
    transport.queue(
        json_response({"id": "job-1", "status": "IN_QUEUE"}),
        json_response({"id": "job-1", "status": "COMPLETED", "output": {"result": "https://cdn/x.png", "cost": 0.02}, "delayTime": 120}),
        bytes_response(b"\x89PNG"),
    )

    result = await model.generate(ImageRequest(prompt="a red fox", aspect_ratio="1:1"))

    assert result.output.locator_type is LocatorType.INLINE_BYTES
    assert result.output.data == b"\x89PNG"
    assert result.output.media_type_hint == "image/png"
    assert result.provider_metadata == {"job_id": "job-1", "url": "https://cdn/x.png", "cost": 0.02, "delay_time": 120}
    assert result.response_timestamp == FIXED_NOW
    assert result.model_id == "qwen/qwen-image"
    assert result.warnings == []
    assert transport.submitted_input["size"] == "1328*1328"
    assert transport.gets[-1].url == "https://cdn/x.png"


@pytest.mark.asyncio
async def test_inline_output_is_not_downloaded(model, transport) -> None:
    transport.queue(json_response({"id": "job-1", "status": "COMPLETED", "output": {"result": "data:image/png;base64,AAEC"}}))

    result = await model.generate(ImageRequest(prompt="a red fox"))

    assert result.output.data == b"\x00\x01\x02"
    assert "url" not in result.provider_metadata
    assert transport.gets == []


@pytest.mark.asyncio
async def test_mask_and_count_warnings(model, transport) -> None:
    transport.queue(
        json_response({"id": "job-1", "status": "COMPLETED", "output": "https://cdn/x.png"}),
        bytes_response(b"img"),
    )

    result = await model.generate(
        ImageRequest(prompt="a red fox", count=3, mask=ReferenceMedia.from_url("https://cdn/mask.png"))
    )

    assert [warning.feature for warning in result.warnings] == ["mask", "n > 1"]
    assert len(transport.posts) == 1
    assert len(result.outputs) == 1


@pytest.mark.asyncio
async def test_invalid_aspect_ratio_makes_no_request(model, transport) -> None:
    with pytest.raises(InvalidArgumentError):
        await model.generate(ImageRequest(prompt="a red fox", aspect_ratio="16:9"))

    assert transport.requests == []



@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", [None, "", "   "])
async def test_missing_prompt_makes_no_request(model, transport, prompt) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        await model.generate(ImageRequest(prompt=prompt))

    assert exc_info.value.argument == "prompt"
    assert transport.requests == []


@pytest.mark.asyncio
async def test_failed_job_message_names_modality(model, transport) -> None:
    transport.queue(
        json_response({"id": "job-1", "status": "IN_QUEUE"}),
        json_response({"id": "job-1", "status": "FAILED", "error": "GPU out of memory"}),
    )

    with pytest.raises(JobFailedError) as exc_info:
        await model.generate(ImageRequest(prompt="a red fox", extra_options={"pollIntervalMillis": 0}))

    assert str(exc_info.value) == "Image generation failed: GPU out of memory"
    assert exc_info.value.job_id == "job-1"


@pytest.mark.asyncio
async def test_completed_without_result_is_malformed(model, transport) -> None:
    transport.queue(json_response({"id": "job-1", "status": "COMPLETED", "output": {"status": "done"}}))

    with pytest.raises(MalformedOutputError):
        await model.generate(ImageRequest(prompt="a red fox"))


@pytest.mark.asyncio
async def test_submits_to_configured_endpoint(model, transport) -> None:
    transport.queue(
        json_response({"id": "job-1", "status": "COMPLETED", "output": "https://cdn/x.png"}),
        bytes_response(b"img"),
    )

    await model.generate(ImageRequest(prompt="a red fox"))

    assert transport.posts[0].url == f"{ENDPOINT}/run"
