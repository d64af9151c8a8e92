"""Intent checker: ask the model whether an input is ambiguous, then fold the
user's answers back into a clarified prompt.

Every public function returns a CheckerResult; none of them raise on model or
transport failures.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from promptflow import config as app_config
from promptflow import logger as logger_mod
from promptflow.llm import (
    CancelToken,
    ChatRequest,
    LLMError,
    LLMMessage,
    ProviderConfig,
    StructuredOutputOptions,
    parse_structured_output,
)
from promptflow.llm.base import LLMClient
from promptflow.llm.factory import use_client

from . import prompts
from .models import (
    CheckerInput,
    CheckerResult,
    ClarificationQuestion,
    UserSelection,
)
from .schema import validate_checker_analyze_output

log = logger_mod.get_logger()

EMPTY_INPUT_MESSAGE = "Input is empty"
MISSING_API_KEY_MESSAGE = "API Key is not configured"
MULTI_ANSWER_SEPARATOR = "、"
DEFAULT_PRESET_DESCRIPTION = "General polishing"

CHECKER_TEMPERATURE = 0.5
CHECKER_MAX_TOKENS = 1000


def _question_label(question: ClarificationQuestion) -> str:
    return question.question.strip().rstrip("?？").strip()


def answer_text(question: ClarificationQuestion, selection: UserSelection) -> str:
    """The user's answer to one question, in words.

    Options that allow custom input are replaced by the typed text when present.
    """

    if question.is_multiple and selection.selected_option_ids is not None:
        labels: List[str] = []
        for option_id in selection.selected_option_ids:
            option = question.option(option_id)
            if option is None:
                continue
            if option.allow_custom_input and selection.custom_input:
                labels.append(selection.custom_input)
            elif option.label:
                labels.append(option.label)
        return MULTI_ANSWER_SEPARATOR.join(labels)

    option = question.option(selection.selected_option_id)
    if option is None:
        return ""
    if option.allow_custom_input and selection.custom_input:
        return selection.custom_input
    return option.label


def selections_to_context(
    selections: Sequence[UserSelection], questions: Sequence[ClarificationQuestion]
) -> str:
    """One ``"<question>: <answer>"`` line per resolvable selection."""

    by_id = {q.id: q for q in questions}
    lines: List[str] = []
    for sel in selections:
        question = by_id.get(sel.question_id)
        if question is None:
            log.warning(f"Selection for unknown question {sel.question_id!r} ignored")
            continue
        answer = answer_text(question, sel)
        if not answer:
            continue
        lines.append(f"{_question_label(question)}: {answer}")
    return "\n".join(lines)


def combine_input_and_context(raw_input: str, context: str) -> str:
    """Literal fallback used when no model call is possible."""

    if not context:
        return raw_input
    return f"{raw_input}\n\n{context}"


def _chat(
    client: Optional[LLMClient],
    config: ProviderConfig,
    system_prompt: str,
    user_message: str,
    cancel: Optional[CancelToken],
) -> str:
    with use_client(client) as llm:
        response = llm.chat(
            ChatRequest(
                config=config,
                messages=[
                    LLMMessage("system", system_prompt),
                    LLMMessage("user", user_message),
                ],
                model=config.model,
                temperature=CHECKER_TEMPERATURE,
                max_tokens=CHECKER_MAX_TOKENS,
                timeout_s=app_config.DEFAULT_TIMEOUT_S,
                cancel=cancel,
            )
        )
    return response.content


def analyze_intent(
    input: CheckerInput,
    config: ProviderConfig,
    *,
    client: Optional[LLMClient] = None,
    cancel: Optional[CancelToken] = None,
) -> CheckerResult:
    """Phase 1: ask the ambiguity analyst for clarification questions."""

    raw_input = input.raw_input
    if not raw_input.strip():
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt="",
            success=False,
            error=EMPTY_INPUT_MESSAGE,
        )

    if not config.has_api_key:
        return CheckerResult(
            needs_clarification=False, clarified_prompt=raw_input, success=True
        )

    try:
        with use_client(client) as llm:
            content = _chat(
                llm,
                config,
                prompts.CHECKER_ANALYZE_PROMPT,
                prompts.analyze_user_message(
                    input.preset.name,
                    input.preset.description or DEFAULT_PRESET_DESCRIPTION,
                    raw_input,
                ),
                cancel,
            )
            analysis = parse_structured_output(
                content,
                validate_checker_analyze_output,
                StructuredOutputOptions(
                    config=config, timeout_s=app_config.DEFAULT_TIMEOUT_S, cancel=cancel
                ),
                client=llm,
            )
    except LLMError as e:
        log.warning(f"Intent analysis failed: {e}")
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt=raw_input,
            success=False,
            error=str(e),
        )

    questions = analysis.questions or []
    if analysis.is_clear or not questions:
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt=raw_input,
            success=True,
            problems=analysis.problems,
            reason=analysis.reason,
        )

    return CheckerResult(
        needs_clarification=True,
        clarified_prompt=raw_input,
        success=True,
        questions=questions,
        problems=analysis.problems,
        reason=analysis.reason,
    )


def complete_prompt(
    input: CheckerInput,
    config: ProviderConfig,
    questions: Sequence[ClarificationQuestion] = (),
    *,
    client: Optional[LLMClient] = None,
    cancel: Optional[CancelToken] = None,
) -> CheckerResult:
    """Phase 2: turn the user's answers into a clarified prompt."""

    raw_input = input.raw_input
    selections = input.user_selections or []
    if not selections:
        return skip_clarification(input)

    context = selections_to_context(selections, questions)
    if not context:
        return skip_clarification(input)

    if not config.has_api_key:
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt=combine_input_and_context(raw_input, context),
            success=True,
        )

    try:
        clarified = _chat(
            client,
            config,
            prompts.CHECKER_COMPLETE_PROMPT,
            prompts.complete_user_message(input.preset.name, raw_input, context),
            cancel,
        )
    except LLMError as e:
        log.warning(f"Prompt completion failed; falling back to concatenation: {e}")
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt=combine_input_and_context(raw_input, context),
            success=False,
            error=str(e),
        )

    return CheckerResult(
        needs_clarification=False, clarified_prompt=clarified, success=True
    )


def skip_clarification(input: CheckerInput) -> CheckerResult:
    """The user declined to answer: continue with the raw input."""

    return CheckerResult(
        needs_clarification=False, clarified_prompt=input.raw_input, success=True
    )


def run_checker(
    input: CheckerInput,
    config: ProviderConfig,
    *,
    client: Optional[LLMClient] = None,
) -> CheckerResult:
    """One-shot clarification without cards: the model fills the gaps itself."""

    raw_input = input.raw_input
    if not raw_input.strip():
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt="",
            success=False,
            error=EMPTY_INPUT_MESSAGE,
        )

    if not config.has_api_key:
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt=raw_input,
            success=False,
            error=MISSING_API_KEY_MESSAGE,
        )

    preset = input.preset
    try:
        clarified = _chat(
            client,
            config,
            prompts.CHECKER_COMPLETE_PROMPT,
            prompts.one_shot_user_message(
                preset.name,
                preset.description or DEFAULT_PRESET_DESCRIPTION,
                preset.system_prompt,
                raw_input,
            ),
            None,
        )
    except LLMError as e:
        return CheckerResult(
            needs_clarification=False,
            clarified_prompt=raw_input,
            success=False,
            error=str(e),
        )

    return CheckerResult(
        needs_clarification=False, clarified_prompt=clarified, success=True
    )
