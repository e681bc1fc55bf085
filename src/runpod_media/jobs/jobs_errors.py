"""Error taxonomy for Runpod job submission, polling and result handling."""

from __future__ import annotations

import json
from typing import Any, Iterable

from .jobs_models import JobSnapshot

__all__ = [
    "RunpodError",
    "ConfigError",
    "InvalidArgumentError",
    "RunpodAPIError",
    "SubmissionError",
    "StatusCheckError",
    "DownloadError",
    "JobFailedError",
    "JobTimeoutError",
    "JobCancelledError",
    "MalformedOutputError",
    "extract_error_message",
]

UNKNOWN_ERROR = "Unknown Runpod error"


class RunpodError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(RunpodError):
    """Raised when provider configuration is incomplete."""


class InvalidArgumentError(RunpodError):
    """Raised before any network call when a request argument is not accepted."""

    def __init__(
        self,
        *,
        argument: str,
        value: Any,
        accepted: Iterable[Any] | None = None,
        message: str | None = None,
    ) -> None:
        self.argument = argument
        self.value = value
        self.accepted = list(accepted) if accepted is not None else []
        if message is None:
            message = f"Invalid value for {argument}: {value!r}"
            if self.accepted:
                message += ". Supported values: " + ", ".join(str(item) for item in self.accepted)
        super().__init__(message)


class RunpodAPIError(RunpodError):
    """Raised when the remote HTTP surface answers with an error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class SubmissionError(RunpodAPIError):
    """Non-2xx or malformed response to ``/run`` or ``/runsync``."""


class StatusCheckError(RunpodAPIError):
    """A status poll failed; polling is never retried."""


class DownloadError(RunpodAPIError):
    """Binary fetch of a result URL failed."""


class JobFailedError(RunpodError):
    """The remote job reached a failed terminal status."""

    def __init__(self, remote_error: str, *, job_id: str | None = None, message: str | None = None) -> None:
        self.job_id = job_id
        self.remote_error = remote_error
        super().__init__(message or f"Job {job_id or '<unknown>'} failed: {remote_error}")


class JobTimeoutError(RunpodError):
    """Polling budget exhausted without a terminal status."""

    def __init__(
        self,
        *,
        job_id: str | None,
        attempts: int,
        interval_millis: int,
        message: str | None = None,
        snapshot: JobSnapshot | None = None,
    ) -> None:
        self.job_id = job_id
        self.attempts = attempts
        self.interval_millis = interval_millis
        self.snapshot = snapshot
        super().__init__(message or f"Job {job_id} timed out after {self.describe_budget()}")

    @property
    def budget_seconds(self) -> float:
        return self.attempts * self.interval_millis / 1000

    def describe_budget(self) -> str:
        return f"{self.attempts} attempts ({self.budget_seconds:g}s)"


class JobCancelledError(RunpodError):
    """The caller's abort signal was observed before or during polling."""

    def __init__(
        self,
        message: str = "Job was cancelled",
        *,
        job_id: str | None = None,
        snapshot: JobSnapshot | None = None,
    ) -> None:
        self.job_id = job_id
        self.snapshot = snapshot
        super().__init__(message)


class MalformedOutputError(RunpodError):
    """A completed job carries no recognisable result field."""

    def __init__(self, output: Any, *, message: str | None = None) -> None:
        self.output = output
        if message is None:
            message = f"Job output does not contain a recognisable result: {_preview(output)}"
        super().__init__(message)


def extract_error_message(data: Any, *, raw_text: str | None = None) -> str:
    """Return the most descriptive message from a remote error body.

    Remote errors sometimes embed a second JSON document inside the
    ``error`` string, e.g. ``"Error submitting task: 400, {"code":400,"message":"..."}"``;
    the embedded ``message`` is preferred when it parses.
    """

    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
        error = data.get("error")
        if isinstance(error, str) and error:
            return _unwrap_nested_message(error)
        if isinstance(error, dict):
            nested = error.get("message")
            if isinstance(nested, str) and nested:
                return nested
    if raw_text:
        return raw_text
    return UNKNOWN_ERROR


def _unwrap_nested_message(error: str) -> str:
    start = error.rfind("{")
    if start == -1:
        return error
    try:
        nested = json.loads(error[start:])
    except ValueError:
        return error
    if isinstance(nested, dict) and isinstance(nested.get("message"), str):
        return nested["message"]
    return error


def _preview(output: Any, limit: int = 500) -> str:
    try:
        text = json.dumps(output, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(output)
    if len(text) > limit:
        return text[:limit] + "...(truncated)"
    return text
