from __future__ import annotations

from typing import Protocol

from .types import ChatRequest, ChatResult


class LLMClient(Protocol):
    """Small interface for "messages -> assistant text" calls.

    Services take any object with this shape, which keeps them testable with
    an in-memory double.
    """

    def chat(self, request: ChatRequest) -> ChatResult:
        raise NotImplementedError
