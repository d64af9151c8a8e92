from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence

from promptflow.llm import CancelToken, ProviderConfig
from promptflow.llm.base import LLMClient
from promptflow.polish.models import PolishPreset

from .checker import analyze_intent, complete_prompt, skip_clarification
from .models import CheckerInput, CheckerResult, ClarificationQuestion, UserSelection


class IntentError(RuntimeError):
    """Raised when the flow is driven out of order or with unknown ids."""


class CheckerState(str, Enum):
    ANALYZING = "analyzing"
    AWAITING_SELECTIONS = "awaiting_selections"
    SYNTHESIZING = "synthesizing"
    DONE = "done"


class ClarificationFlow:
    """Two-phase clarification for one submission.

    analyze() -> (questions shown by the caller) -> select()/submit() or skip().
    The flow never renders anything; it only holds questions and answers.
    """

    def __init__(
        self,
        raw_input: str,
        preset: PolishPreset,
        config: ProviderConfig,
        *,
        client: Optional[LLMClient] = None,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        self.raw_input = raw_input
        self.preset = preset
        self._config = config
        self._client = client
        self._cancel = cancel

        self.state = CheckerState.ANALYZING
        self.analysis: Optional[CheckerResult] = None
        self.result: Optional[CheckerResult] = None
        self._selections: Dict[str, UserSelection] = {}

    @property
    def questions(self) -> List[ClarificationQuestion]:
        if self.analysis is None or not self.analysis.questions:
            return []
        return list(self.analysis.questions)

    @property
    def selections(self) -> List[UserSelection]:
        return list(self._selections.values())

    def _require(self, *states: CheckerState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise IntentError(f"Invalid state {self.state.value!r}; expected {allowed}")

    def _question(self, question_id: str) -> ClarificationQuestion:
        for q in self.questions:
            if q.id == question_id:
                return q
        raise IntentError(f"Unknown question id: {question_id}")

    def _finish(self, result: CheckerResult) -> CheckerResult:
        self.result = result
        self.state = CheckerState.DONE
        return result

    def analyze(self) -> CheckerResult:
        self._require(CheckerState.ANALYZING)

        result = analyze_intent(
            CheckerInput(raw_input=self.raw_input, preset=self.preset),
            self._config,
            client=self._client,
            cancel=self._cancel,
        )
        self.analysis = result

        if result.needs_clarification:
            self.state = CheckerState.AWAITING_SELECTIONS
            return result
        return self._finish(result)

    def select(
        self,
        question_id: str,
        option_ids: Sequence[str],
        custom_input: Optional[str] = None,
    ) -> UserSelection:
        """Record the answer to one question, replacing any earlier answer."""

        self._require(CheckerState.AWAITING_SELECTIONS)
        question = self._question(question_id)

        ids = list(option_ids)
        if not ids:
            raise IntentError(f"No option selected for question {question_id}")
        for option_id in ids:
            if question.option(option_id) is None:
                raise IntentError(f"Unknown option {option_id!r} for question {question_id}")
        if not question.is_multiple and len(ids) > 1:
            raise IntentError(f"Question {question_id} accepts a single option")

        selection = UserSelection(
            question_id=question_id,
            selected_option_id=ids[0],
            selected_option_ids=ids if question.is_multiple else None,
            custom_input=custom_input.strip() if custom_input else None,
        )
        self._selections[question_id] = selection
        return selection

    def submit(
        self, selections: Optional[Sequence[UserSelection]] = None
    ) -> CheckerResult:
        """Synthesize the clarified prompt from the recorded (or given) answers."""

        self._require(CheckerState.AWAITING_SELECTIONS)

        if selections is not None:
            for sel in selections:
                self._question(sel.question_id)
            self._selections = {sel.question_id: sel for sel in selections}

        self.state = CheckerState.SYNTHESIZING
        result = complete_prompt(
            CheckerInput(
                raw_input=self.raw_input,
                preset=self.preset,
                user_selections=self.selections,
            ),
            self._config,
            self.questions,
            client=self._client,
            cancel=self._cancel,
        )
        return self._finish(result)

    def skip(self) -> CheckerResult:
        self._require(CheckerState.ANALYZING, CheckerState.AWAITING_SELECTIONS)
        return self._finish(
            skip_clarification(CheckerInput(raw_input=self.raw_input, preset=self.preset))
        )
