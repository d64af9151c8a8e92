"""LLM provider abstractions (OpenAI-compatible / Anthropic).

Design goals:
- Keep provider dialects isolated behind small adapters.
- One chat call with bounded retry, backoff and cancellation.
- Coerce model text into validated JSON, with one AI-assisted repair pass.
"""

from ._json import extract_first_json, parse_json_from_model_output, strip_code_fences
from ._retry import RetryConfig, execute_with_retry
from .cancel import CancelToken
from .client import ChatClient
from .errors import (
    ConfigError,
    ErrorCode,
    JSONExtractionError,
    LLMError,
    LLMValidationError,
    StructuredOutputError,
)
from .factory import build_llm, use_client
from .structured import RepairOptions, StructuredOutputOptions, parse_structured_output
from .types import ChatRequest, ChatResult, LLMMessage, ProviderConfig
from .urls import resolve_chat_url

__all__ = [
    "CancelToken",
    "ChatClient",
    "ChatRequest",
    "ChatResult",
    "ConfigError",
    "ErrorCode",
    "JSONExtractionError",
    "LLMError",
    "LLMMessage",
    "LLMValidationError",
    "ProviderConfig",
    "RepairOptions",
    "RetryConfig",
    "StructuredOutputError",
    "StructuredOutputOptions",
    "build_llm",
    "execute_with_retry",
    "extract_first_json",
    "parse_json_from_model_output",
    "parse_structured_output",
    "resolve_chat_url",
    "strip_code_fences",
    "use_client",
]
