"""Intent clarification entry point.

Public API:
- analyze_intent / complete_prompt / skip_clarification / run_checker
- selections_to_context
- ClarificationFlow, CheckerState
- ClarificationQuestion, ClarificationOption, UserSelection, CheckerInput, CheckerResult
"""

from .checker import (
    analyze_intent,
    answer_text,
    combine_input_and_context,
    complete_prompt,
    run_checker,
    selections_to_context,
    skip_clarification,
)
from .flow import CheckerState, ClarificationFlow, IntentError
from .models import (
    AnalysisOutput,
    CheckerInput,
    CheckerResult,
    ClarificationOption,
    ClarificationQuestion,
    UserSelection,
)
from .schema import validate_checker_analyze_output

__all__ = [
    "AnalysisOutput",
    "CheckerInput",
    "CheckerResult",
    "CheckerState",
    "ClarificationFlow",
    "ClarificationOption",
    "ClarificationQuestion",
    "IntentError",
    "UserSelection",
    "analyze_intent",
    "answer_text",
    "combine_input_and_context",
    "complete_prompt",
    "run_checker",
    "selections_to_context",
    "skip_clarification",
    "validate_checker_analyze_output",
]
