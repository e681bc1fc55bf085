"""Configuration helpers."""

from .config import DEFAULT_API_ROOT, RunpodSettings

__all__ = ["RunpodSettings", "DEFAULT_API_ROOT"]
