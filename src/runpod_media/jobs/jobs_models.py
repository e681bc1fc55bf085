"""Data structures shared by the job client and the result extractor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class JobStatus(StrEnum):
    """Remote job statuses plus the client-local terminal states."""

    IN_QUEUE = "IN_QUEUE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    # Reported by the platform for jobs it stopped on its own; treated as failures.
    REMOTE_CANCELLED = "CANCELLED"
    REMOTE_TIMED_OUT = "TIMED_OUT"
    # Synthesised locally and carried by JobTimeoutError / JobCancelledError snapshots.
    TIMED_OUT_LOCALLY = "LOCAL_TIMED_OUT"
    CANCELLED_LOCALLY = "LOCAL_CANCELLED"

    @property
    def is_pending(self) -> bool:
        return self in {JobStatus.IN_QUEUE, JobStatus.IN_PROGRESS}

    @property
    def is_failure(self) -> bool:
        return self in {
            JobStatus.FAILED,
            JobStatus.REMOTE_CANCELLED,
            JobStatus.REMOTE_TIMED_OUT,
        }


class SubmitMode(StrEnum):
    """Submission endpoint variant."""

    ASYNC = "run"
    SYNC = "runsync"


class LocatorType(StrEnum):
    URL = "url"
    INLINE_BYTES = "inline_bytes"


@dataclass(slots=True, frozen=True)
class PollPolicy:
    """How long and how often the client checks job status."""

    max_attempts: int = 60
    interval_millis: int = 5_000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_millis < 0:
            raise ValueError("interval_millis must not be negative")

    @property
    def interval_seconds(self) -> float:
        return self.interval_millis / 1000

    @property
    def budget_seconds(self) -> float:
        return self.max_attempts * self.interval_millis / 1000


@dataclass(slots=True)
class JobSnapshot:
    """Observed state of one remote job."""

    id: str | None
    status: JobStatus
    output: Any = None
    error: str | None = None
    delay_time: float | None = None
    execution_time: float | None = None
    status_checks: int = 0
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return not self.status.is_pending

    @classmethod
    def from_response(cls, body: dict[str, Any], *, status: JobStatus) -> "JobSnapshot":
        error = body.get("error")
        return cls(
            id=_as_str(body.get("id")),
            status=status,
            output=body.get("output"),
            error=error if isinstance(error, str) else (str(error) if error else None),
            delay_time=body.get("delayTime"),
            execution_time=body.get("executionTime"),
            raw=body,
        )


@dataclass(slots=True, frozen=True)
class CanonicalResult:
    """Normalised media reference extracted from a job output."""

    locator_type: LocatorType
    value: str | bytes
    media_type_hint: str | None = None

    @property
    def url(self) -> str | None:
        if self.locator_type is LocatorType.URL:
            return str(self.value)
        return None

    @property
    def data(self) -> bytes | None:
        if self.locator_type is LocatorType.INLINE_BYTES:
            return bytes(self.value)  # type: ignore[arg-type]
        return None

    @classmethod
    def from_url(cls, url: str, media_type_hint: str | None = None) -> "CanonicalResult":
        return cls(LocatorType.URL, url, media_type_hint)

    @classmethod
    def from_bytes(cls, data: bytes, media_type_hint: str | None = None) -> "CanonicalResult":
        return cls(LocatorType.INLINE_BYTES, data, media_type_hint)


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


__all__ = [
    "JobStatus",
    "SubmitMode",
    "LocatorType",
    "PollPolicy",
    "JobSnapshot",
    "CanonicalResult",
]
