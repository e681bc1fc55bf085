"""Shared plumbing for the per-modality generation facades."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from ..adapters.adapters_base import AdaptedPayload, GenerationRequest, Modality
from ..adapters.adapters_video import with_variant_suffix
from ..adapters.registry import build_payload
from ..jobs.jobs_client import JobClient
from ..jobs.jobs_errors import JobFailedError, JobTimeoutError
from ..jobs.jobs_models import CanonicalResult, JobSnapshot

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class MediaModel:
    """Bind a model id to a job client and run one job per call.

    Subclasses set ``modality`` and ``label``; ``label`` prefixes the
    messages of failed and timed out jobs ("Video generation failed: ...").
    """

    modality: ClassVar[Modality]
    label: ClassVar[str]

    model_id: str
    job_client: JobClient
    clock: Callable[[], datetime] = utcnow
    log: logging.Logger = field(default_factory=lambda: logger)

    async def _execute(
        self,
        request: GenerationRequest,
        *,
        headers: Mapping[str, str | None] | None,
        abort_signal: asyncio.Event | None,
    ) -> tuple[AdaptedPayload, JobSnapshot]:
        adapted = build_payload(self.model_id, request, modality=self.modality)
        base_url = None
        if adapted.endpoint_suffix:
            base_url = with_variant_suffix(self.job_client.base_url, adapted.endpoint_suffix)
            self.log.info(
                "runpod.endpoint.variant",
                extra={"model_id": self.model_id, "base_url": base_url},
            )

        try:
            snapshot = await self.job_client.run(
                adapted.input,
                adapted.poll_policy,
                base_url=base_url,
                headers=headers,
                abort_signal=abort_signal,
            )
        except JobFailedError as exc:
            raise JobFailedError(
                exc.remote_error,
                job_id=exc.job_id,
                message=f"{self.label} failed: {exc.remote_error}",
            ) from exc
        except JobTimeoutError as exc:
            raise JobTimeoutError(
                job_id=exc.job_id,
                attempts=exc.attempts,
                interval_millis=exc.interval_millis,
                message=f"{self.label} timed out after {exc.describe_budget()}",
                snapshot=exc.snapshot,
            ) from exc
        return adapted, snapshot

    async def materialize(
        self,
        result: CanonicalResult,
        *,
        abort_signal: asyncio.Event | None = None,
    ) -> bytes:
        """Return the raw bytes behind ``result``."""

        return await self.job_client.materialize(result, abort_signal=abort_signal)

    async def _inline(
        self,
        result: CanonicalResult,
        *,
        abort_signal: asyncio.Event | None,
    ) -> CanonicalResult:
        if result.url is None:
            return result
        data = await self.job_client.materialize(result, abort_signal=abort_signal)
        return CanonicalResult.from_bytes(data, result.media_type_hint)

    @staticmethod
    def provider_metadata(snapshot: JobSnapshot, *, url: str | None = None) -> dict[str, Any]:
        metadata: dict[str, Any] = {}
        if snapshot.id:
            metadata["job_id"] = snapshot.id
        if url:
            metadata["url"] = url
        output = snapshot.output
        if isinstance(output, dict) and isinstance(output.get("cost"), (int, float)):
            metadata["cost"] = output["cost"]
        if snapshot.delay_time is not None:
            metadata["delay_time"] = snapshot.delay_time
        if snapshot.execution_time is not None:
            metadata["execution_time"] = snapshot.execution_time
        return metadata


__all__ = ["MediaModel", "utcnow"]
