"""Runpod job client, job models and result extraction."""

from .jobs_client import JobClient, resolve_submit_url, strip_submit_suffix
from .jobs_errors import (
    ConfigError,
    DownloadError,
    InvalidArgumentError,
    JobCancelledError,
    JobFailedError,
    JobTimeoutError,
    MalformedOutputError,
    RunpodAPIError,
    RunpodError,
    StatusCheckError,
    SubmissionError,
)
from .jobs_models import CanonicalResult, JobSnapshot, JobStatus, LocatorType, PollPolicy, SubmitMode
from .result_extractor import extract_result

__all__ = [
    "JobClient",
    "resolve_submit_url",
    "strip_submit_suffix",
    "CanonicalResult",
    "JobSnapshot",
    "JobStatus",
    "LocatorType",
    "PollPolicy",
    "SubmitMode",
    "extract_result",
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
]
