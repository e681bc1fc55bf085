"""Locate the media reference inside a completed job's output."""

from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Any, Sequence
from urllib.parse import urlparse

from .jobs_errors import MalformedOutputError
from .jobs_models import CanonicalResult

IMAGE_RESULT_KEYS: tuple[str, ...] = ("result", "image_url", "url", "images")
VIDEO_RESULT_KEYS: tuple[str, ...] = ("video_url", "result", "url", "videos")
AUDIO_RESULT_KEYS: tuple[str, ...] = ("audio_url", "result", "url")


def extract_result(
    output: Any,
    *,
    keys: Sequence[str],
    default_media_type: str | None = None,
) -> CanonicalResult:
    """Return the canonical reference for ``output``.

    Named fields are tried in ``keys`` order first; a bare string output is
    taken as the URL itself. Anything else raises :class:`MalformedOutputError`.
    """

    if isinstance(output, dict):
        for key in keys:
            candidate = _first_reference(output.get(key))
            if candidate:
                return _to_canonical(candidate, default_media_type)
    if isinstance(output, str) and output.strip():
        return _to_canonical(output.strip(), default_media_type)
    raise MalformedOutputError(output)


def _first_reference(value: Any) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list) and value:
        return _first_reference(value[0])
    if isinstance(value, dict):
        url = value.get("url")
        if isinstance(url, str) and url.strip():
            return url.strip()
    return None


def _to_canonical(reference: str, default_media_type: str | None) -> CanonicalResult:
    if reference.startswith("data:"):
        return _decode_data_url(reference, default_media_type)
    return CanonicalResult.from_url(reference, guess_media_type(reference) or default_media_type)


def _decode_data_url(reference: str, default_media_type: str | None) -> CanonicalResult:
    header, sep, encoded = reference.partition(",")
    if not sep or ";base64" not in header:
        raise MalformedOutputError(reference, message="Inline result is not a base64 data URL")
    media_type = header[len("data:") :].split(";", 1)[0] or default_media_type
    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedOutputError(reference, message="Inline result payload is invalid") from exc
    return CanonicalResult.from_bytes(payload, media_type)


def guess_media_type(url: str) -> str | None:
    path = urlparse(url).path
    mime, _ = mimetypes.guess_type(path)
    return mime


__all__ = [
    "IMAGE_RESULT_KEYS",
    "VIDEO_RESULT_KEYS",
    "AUDIO_RESULT_KEYS",
    "extract_result",
    "guess_media_type",
]
