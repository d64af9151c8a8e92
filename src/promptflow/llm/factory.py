from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from ._retry import RetryConfig
from .base import LLMClient
from .client import ChatClient


def build_llm(
    *, debug: Optional[bool] = None, retry: Optional[RetryConfig] = None
) -> ChatClient:
    """Factory for the chat client.

    Provider selection happens per request (ProviderConfig.provider), so one
    client serves every provider in promptflow.llm.providers.PROVIDERS.
    The caller owns the returned client and must close it.
    """

    return ChatClient(retry=retry, debug=debug)


@contextmanager
def use_client(client: Optional[LLMClient] = None) -> Iterator[LLMClient]:
    """Yield ``client`` unchanged, or a fresh client that is closed on exit."""

    if client is not None:
        yield client
        return

    with build_llm() as owned:
        yield owned
