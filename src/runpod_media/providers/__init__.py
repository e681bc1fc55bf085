"""Model-id routing and provider construction."""

from .providers_factory import RunpodProvider, create_provider, derive_endpoint

__all__ = ["RunpodProvider", "create_provider", "derive_endpoint"]
