"""HTTP client driving one Runpod job from submission to a terminal outcome."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, cast

import httpx

from .jobs_errors import (
    DownloadError,
    JobCancelledError,
    JobFailedError,
    JobTimeoutError,
    RunpodAPIError,
    StatusCheckError,
    SubmissionError,
    extract_error_message,
)
from .jobs_models import CanonicalResult, JobSnapshot, JobStatus, LocatorType, PollPolicy, SubmitMode
from .result_extractor import AUDIO_RESULT_KEYS, IMAGE_RESULT_KEYS, VIDEO_RESULT_KEYS

logger = logging.getLogger(__name__)

HeadersSource = Mapping[str, str] | Callable[[], Mapping[str, str]]

_REMOTE_STATUSES = {
    JobStatus.IN_QUEUE,
    JobStatus.IN_PROGRESS,
    JobStatus.COMPLETED,
    JobStatus.FAILED,
    JobStatus.REMOTE_CANCELLED,
    JobStatus.REMOTE_TIMED_OUT,
}

# Top-level fields a runsync worker may answer with instead of an output object.
_INLINE_RESULT_KEYS = tuple(dict.fromkeys((*IMAGE_RESULT_KEYS, *VIDEO_RESULT_KEYS, *AUDIO_RESULT_KEYS)))


def strip_submit_suffix(base_url: str) -> str:
    """Return ``base_url`` without a trailing slash or ``/run``/``/runsync`` suffix."""

    trimmed = base_url.rstrip("/")
    for mode in (SubmitMode.SYNC, SubmitMode.ASYNC):
        suffix = f"/{mode.value}"
        if trimmed.endswith(suffix):
            return trimmed[: -len(suffix)]
    return trimmed


def resolve_submit_url(base_url: str, default_mode: SubmitMode = SubmitMode.ASYNC) -> str:
    """Keep an explicit ``/run``/``/runsync`` suffix, otherwise append ``default_mode``."""

    trimmed = base_url.rstrip("/")
    if trimmed.endswith(f"/{SubmitMode.ASYNC.value}") or trimmed.endswith(f"/{SubmitMode.SYNC.value}"):
        return trimmed
    return f"{trimmed}/{default_mode.value}"


@dataclass(slots=True)
class JobClient:
    """Submit, poll and materialise jobs against one endpoint base URL.

    The client never retries: a failed submission or status check surfaces
    immediately. Cancellation is cooperative and only stops local waiting;
    the remote job keeps running.
    """

    base_url: str
    headers: HeadersSource = field(default_factory=dict)
    timeout_seconds: float = 30.0
    default_mode: SubmitMode = SubmitMode.ASYNC
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    log: logging.Logger = field(default_factory=lambda: logger)

    def submit_url(self, *, base_url: str | None = None, mode: SubmitMode | None = None) -> str:
        base = base_url or self.base_url
        if mode is not None:
            return f"{strip_submit_suffix(base)}/{mode.value}"
        return resolve_submit_url(base, self.default_mode)

    def status_url(self, job_id: str, *, base_url: str | None = None) -> str:
        return f"{strip_submit_suffix(base_url or self.base_url)}/status/{job_id}"

    async def submit(
        self,
        payload: Mapping[str, Any],
        *,
        base_url: str | None = None,
        mode: SubmitMode | None = None,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> JobSnapshot:
        """Post ``{"input": payload}`` and return the first observed snapshot.

        A synchronous endpoint may already answer with a terminal status; the
        snapshot is returned as-is and the caller skips polling. A runsync
        body with no status and no ``output`` but a known result field is
        taken as a completed job whose output is the body itself.
        """

        if abort_signal is not None and abort_signal.is_set():
            raise JobCancelledError(
                "Job submission was cancelled",
                snapshot=JobSnapshot(id=None, status=JobStatus.CANCELLED_LOCALLY),
            )

        url = self.submit_url(base_url=base_url, mode=mode)
        response = await self._send(
            "POST",
            url,
            headers=self._merge_headers(headers),
            json={"input": dict(payload)},
            error_cls=SubmissionError,
            action="submission",
        )
        body = _parse_json(response, error_cls=SubmissionError, action="submission")

        raw_status = body.get("status")
        inline_output = False
        if raw_status is None:
            # runsync workers that answer inline omit the status field
            if "output" not in body:
                inline_output = url.endswith(f"/{SubmitMode.SYNC.value}") and any(
                    key in body for key in _INLINE_RESULT_KEYS
                )
                if not inline_output:
                    raise SubmissionError("Runpod submission response did not include a status", body=response.text)
            status = JobStatus.COMPLETED
        else:
            status = _parse_status(raw_status, error_cls=SubmissionError)

        snapshot = JobSnapshot.from_response(body, status=status)
        if inline_output:
            snapshot.output = body
        if status.is_pending and not snapshot.id:
            raise SubmissionError("Runpod submission response did not include a job id", body=response.text)

        self.log.info(
            "runpod.job.submitted",
            extra={"job_id": snapshot.id, "status": status.value, "url": url},
        )
        return snapshot

    async def poll(
        self,
        job_id: str,
        policy: PollPolicy,
        *,
        base_url: str | None = None,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> JobSnapshot:
        """Check ``job_id`` until it reaches ``COMPLETED`` or a failed status."""

        url = self.status_url(job_id, base_url=base_url)
        merged_headers = self._merge_headers(headers)

        last: JobSnapshot | None = None
        for attempt in range(1, policy.max_attempts + 1):
            if abort_signal is not None and abort_signal.is_set():
                self.log.info("runpod.job.cancelled", extra={"job_id": job_id, "attempt": attempt})
                raise JobCancelledError(
                    f"Job {job_id} was cancelled",
                    job_id=job_id,
                    snapshot=JobSnapshot(id=job_id, status=JobStatus.CANCELLED_LOCALLY, status_checks=attempt - 1),
                )

            response = await self._send(
                "GET",
                url,
                headers=merged_headers,
                error_cls=StatusCheckError,
                action="status check",
            )
            body = _parse_json(response, error_cls=StatusCheckError, action="status check")
            snapshot = JobSnapshot.from_response(
                body,
                status=_parse_status(body.get("status"), error_cls=StatusCheckError),
            )
            snapshot.id = snapshot.id or job_id
            snapshot.status_checks = attempt
            last = snapshot
            self.log.debug(
                "runpod.job.status",
                extra={"job_id": job_id, "attempt": attempt, "status": snapshot.status.value},
            )

            if snapshot.is_terminal:
                return snapshot

            if attempt < policy.max_attempts:
                await self.sleep(policy.interval_seconds)

        self.log.warning(
            "runpod.job.timeout",
            extra={"job_id": job_id, "attempts": policy.max_attempts, "interval_ms": policy.interval_millis},
        )
        timed_out = last or JobSnapshot(id=job_id, status=JobStatus.IN_QUEUE)
        timed_out.status = JobStatus.TIMED_OUT_LOCALLY
        raise JobTimeoutError(
            job_id=job_id,
            attempts=policy.max_attempts,
            interval_millis=policy.interval_millis,
            snapshot=timed_out,
        )

    async def run(
        self,
        payload: Mapping[str, Any],
        policy: PollPolicy,
        *,
        base_url: str | None = None,
        mode: SubmitMode | None = None,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> JobSnapshot:
        """Submit ``payload`` and wait for a completed snapshot.

        Raises :class:`JobFailedError` when the job ends in a failed status.
        """

        snapshot = await self.submit(
            payload,
            base_url=base_url,
            mode=mode,
            headers=headers,
            abort_signal=abort_signal,
        )
        if snapshot.status.is_pending:
            snapshot = await self.poll(
                cast(str, snapshot.id),
                policy,
                base_url=base_url,
                headers=headers,
                abort_signal=abort_signal,
            )

        if snapshot.status.is_failure:
            remote_error = snapshot.error or "Unknown error"
            self.log.warning(
                "runpod.job.failed",
                extra={"job_id": snapshot.id, "status": snapshot.status.value, "remote_error": remote_error},
            )
            raise JobFailedError(remote_error, job_id=snapshot.id)

        self.log.info(
            "runpod.job.completed",
            extra={"job_id": snapshot.id, "status_checks": snapshot.status_checks},
        )
        return snapshot

    async def materialize(
        self,
        result: CanonicalResult,
        *,
        headers: Mapping[str, str | None] | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> bytes:
        """Return raw bytes for ``result``, fetching URLs with a plain GET."""

        if result.locator_type is LocatorType.INLINE_BYTES:
            return bytes(result.value)  # type: ignore[arg-type]
        if abort_signal is not None and abort_signal.is_set():
            raise JobCancelledError("Result download was cancelled")

        url = str(result.value)
        request_headers = {key: value for key, value in (headers or {}).items() if value is not None}
        response = await self._send("GET", url, headers=request_headers, error_cls=DownloadError, action="download")
        self.log.info("runpod.media.download", extra={"url": url, "bytes": len(response.content)})
        return response.content

    def _merge_headers(self, extra: Mapping[str, str | None] | None) -> dict[str, str]:
        source = self.headers() if callable(self.headers) else self.headers
        merged: dict[str, str | None] = {**dict(source), **dict(extra or {})}
        return {key: value for key, value in merged.items() if value is not None}

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        error_cls: type[RunpodAPIError],
        action: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                if method == "POST":
                    response = await client.post(url, headers=headers, json=json)
                else:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise error_cls(f"Runpod {action} HTTP error: {exc}") from exc

        if not 200 <= response.status_code < 300:
            detail = _error_detail(response)
            self.log.error(
                "runpod.http.error",
                extra={"action": action, "status_code": response.status_code, "detail": detail},
            )
            raise error_cls(
                f"Runpod {action} failed (status={response.status_code}): {detail}",
                status_code=response.status_code,
                body=response.text[:500],
            )
        return response


def _parse_json(
    response: httpx.Response,
    *,
    error_cls: type[RunpodAPIError],
    action: str,
) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise error_cls(f"Runpod {action} response is not valid JSON", body=response.text[:500]) from exc
    if not isinstance(body, dict):
        raise error_cls(f"Runpod {action} response is not a JSON object", body=response.text[:500])
    return body


def _parse_status(raw: Any, *, error_cls: type[RunpodAPIError]) -> JobStatus:
    try:
        status = JobStatus(str(raw).upper())
    except ValueError:
        status = None
    if status not in _REMOTE_STATUSES:
        raise error_cls(f"Unexpected response status: {raw}")
    return status  # type: ignore[return-value]


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    return extract_error_message(data, raw_text=(response.text or "").strip() or None)


__all__ = ["JobClient", "resolve_submit_url", "strip_submit_suffix"]
