"""Coerce free-form model text into validated values.

Flow:
1. strip fences / extract the first JSON value / json.loads
2. run the caller's validator
3. on failure, one repair call asks the model to fix the JSON formatting,
   then steps 1-2 run again on the repaired text
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, TypeVar

from promptflow import config as app_config
from promptflow import logger as logger_mod

from ._json import parse_json_from_model_output
from ._retry import NO_RETRY, RetryConfig, execute_with_retry
from .base import LLMClient
from .cancel import CancelToken
from .errors import ErrorCode, LLMValidationError, StructuredOutputError
from .factory import use_client
from .types import ChatRequest, LLMMessage, ProviderConfig

log = logger_mod.get_logger()

T = TypeVar("T")

Validator = Callable[[Any], T]

JSON_REPAIR_SYSTEM_PROMPT = """You are a strict JSON repairer.

Your task:
- Repair the text the user provides into valid JSON
- Output JSON only (no Markdown, no explanations, no extra text)

Rules:
- Return exactly one JSON value (an object or an array)
- Never include triple backticks
- Do not change the meaning; fix formatting only (quotes, commas, escaping, truncation)"""


@dataclass(frozen=True)
class RepairOptions:
    enabled: bool = True
    temperature: float = app_config.REPAIR_TEMPERATURE
    max_tokens: int = app_config.REPAIR_MAX_TOKENS
    model: Optional[str] = None


@dataclass(frozen=True)
class StructuredOutputOptions:
    config: ProviderConfig
    timeout_s: Optional[float] = app_config.DEFAULT_TIMEOUT_S
    repair: RepairOptions = field(default_factory=RepairOptions)
    cancel: Optional[CancelToken] = None


# Errors that mean "the text was not the JSON we wanted"
_PARSE_FAILURES = (LLMValidationError, ValueError, TypeError, KeyError)


def _is_parse_failure(error: Exception) -> bool:
    return isinstance(error, _PARSE_FAILURES)


def _request_repair(
    text: str, options: StructuredOutputOptions, client: Optional[LLMClient]
) -> str:
    repair = options.repair
    with use_client(client) as llm:
        result = llm.chat(
            ChatRequest(
                config=options.config,
                messages=[
                    LLMMessage("system", JSON_REPAIR_SYSTEM_PROMPT),
                    LLMMessage("user", text),
                ],
                model=repair.model or options.config.model,
                temperature=repair.temperature,
                max_tokens=repair.max_tokens,
                timeout_s=options.timeout_s,
                cancel=options.cancel,
            )
        )
    return result.content


def parse_structured_output(
    text: str,
    validator: Validator[T],
    options: StructuredOutputOptions,
    *,
    client: Optional[LLMClient] = None,
) -> T:
    """Parse and validate ``text``; repair once through the model if needed.

    Raises StructuredOutputError with code PARSE_ERROR (repair disabled) or
    REPAIR_FAILED (repair attempted and still invalid). Transport errors from
    the repair call propagate unchanged.
    """

    failures: List[str] = []

    def _attempt(attempt: int) -> T:
        if attempt == 0:
            source = text
        else:
            log.info(f"Structured output invalid ({failures[-1]}); requesting JSON repair")
            source = _request_repair(text, options, client)

        try:
            return validator(parse_json_from_model_output(source))
        except Exception as e:
            if _is_parse_failure(e):
                failures.append(str(e))
            raise

    retry = (
        RetryConfig(retries=1, min_delay_s=0.0, max_delay_s=0.0, jitter_s=0.0)
        if options.repair.enabled
        else NO_RETRY
    )

    try:
        return execute_with_retry(
            _attempt,
            context="parsing structured model output",
            retry=retry,
            is_retryable=_is_parse_failure,
            cancel=options.cancel,
        )
    except _PARSE_FAILURES as e:
        if not options.repair.enabled:
            raise StructuredOutputError(
                "Failed to parse/validate JSON output",
                code=ErrorCode.PARSE_ERROR,
                details=failures[0] if failures else str(e),
            ) from e

        first = failures[0] if failures else str(e)
        second = failures[-1] if len(failures) > 1 else str(e)
        raise StructuredOutputError(
            "Failed to parse/validate JSON output after repair",
            code=ErrorCode.REPAIR_FAILED,
            details=f"{first}; repair: {second}",
        ) from e
