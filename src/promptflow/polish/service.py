from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union

from promptflow import config as app_config
from promptflow import logger as logger_mod
from promptflow.llm import CancelToken, ChatRequest, LLMError, LLMMessage, ProviderConfig
from promptflow.llm.base import LLMClient
from promptflow.llm.factory import use_client

from .models import HistoryTurn, PolishPreset, PolishResult

log = logger_mod.get_logger()

# Appended to follow-up messages so the model edits its last answer
TASK_REMINDER = (
    "\n\n[This is a modification request for the previous polished result. "
    "Adjust the previous prompt accordingly and output the complete modified prompt.]"
)

MISSING_API_KEY_MESSAGE = "Please configure an API Key in settings first"

POLISH_TIMEOUT_S = 60.0

HistoryLike = Union[HistoryTurn, dict]


def language_directive(language: Optional[str]) -> str:
    """Instruction appended to the system prompt for non-default languages."""

    if not language or language == app_config.DEFAULT_LANGUAGE:
        return ""
    name = app_config.SUPPORTED_LANGUAGES.get(language, language)
    return (
        "\n\n[Output Language]\n"
        f"Always respond in {name}, regardless of the language of these instructions."
    )


def _to_turn(item: HistoryLike) -> HistoryTurn:
    if isinstance(item, HistoryTurn):
        return item
    return HistoryTurn(role=item["role"], content=item["content"])


def build_polish_messages(
    input: str,
    preset: PolishPreset,
    chat_history: Sequence[HistoryLike] = (),
    language: Optional[str] = None,
) -> List[LLMMessage]:
    """[system, *history, user] with the reminder on continuations."""

    history = [_to_turn(h) for h in chat_history]
    user_message = input + TASK_REMINDER if history else input

    return [
        LLMMessage("system", preset.system_prompt + language_directive(language)),
        *(LLMMessage(t.role, t.content) for t in history),
        LLMMessage("user", user_message),
    ]


def polish(
    input: str,
    preset: PolishPreset,
    config: ProviderConfig,
    chat_history: Optional[Sequence[HistoryLike]] = None,
    language: Optional[str] = None,
    *,
    client: Optional[LLMClient] = None,
    cancel: Optional[CancelToken] = None,
) -> PolishResult:
    """Polish ``input`` with ``preset``. Never raises transport errors."""

    if not config.has_api_key:
        return PolishResult(output="", error=MISSING_API_KEY_MESSAGE)

    messages = build_polish_messages(
        input, preset, chat_history or (), language or app_config.DEFAULT_LANGUAGE
    )
    temperature = (
        preset.temperature if preset.temperature is not None else config.temperature
    )

    try:
        with use_client(client) as llm:
            res = llm.chat(
                ChatRequest(
                    config=config,
                    messages=messages,
                    model=config.model,
                    temperature=temperature,
                    max_tokens=config.max_tokens or app_config.DEFAULT_MAX_TOKENS,
                    timeout_s=POLISH_TIMEOUT_S,
                    cancel=cancel,
                )
            )
    except LLMError as e:
        log.error(f"AI polish error: {e!r}")
        return PolishResult(output="", error=str(e) or "AI call failed")

    return PolishResult(output=res.content)


def extend_history(
    chat_history: Iterable[HistoryLike], input: str, output: str
) -> List[HistoryTurn]:
    """History for the next continuation after a successful polish."""

    return [
        *(_to_turn(h) for h in chat_history),
        HistoryTurn("user", input),
        HistoryTurn("assistant", output),
    ]
