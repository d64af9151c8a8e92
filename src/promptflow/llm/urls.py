from __future__ import annotations

from .errors import ConfigError
from .providers import CHAT_COMPLETIONS, get_provider
from .types import ProviderConfig

# A base URL containing any of these is treated as a full endpoint already.
ENDPOINT_MARKERS = ("/chat/completions", "/messages", "/generate")


def get_base_url(config: ProviderConfig) -> str:
    """User override first, then the provider default; empty when neither exists."""

    if config.base_url and config.base_url.strip():
        return config.base_url.strip()
    spec = get_provider(config.provider)
    if spec is not None and spec.default_base_url:
        return spec.default_base_url
    return ""


def resolve_chat_url(config: ProviderConfig) -> str:
    """Return the absolute chat endpoint URL for ``config``.

    - A base URL that already names an endpoint is returned unchanged, so a
      full endpoint pasted into settings keeps working.
    - Otherwise the provider's endpoint suffix is appended with exactly one
      slash between the two.
    """

    base_url = get_base_url(config)
    if not base_url:
        raise ConfigError(
            f"No API base URL configured for provider {config.provider!r}"
        )

    if any(marker in base_url for marker in ENDPOINT_MARKERS):
        return base_url

    spec = get_provider(config.provider)
    endpoint = spec.endpoint if spec is not None else CHAT_COMPLETIONS

    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
