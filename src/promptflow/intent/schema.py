from __future__ import annotations

from typing import Any, Dict, List, Optional

from promptflow.llm._json import validate_json

from .models import AnalysisOutput, ClarificationOption, ClarificationQuestion

_NON_EMPTY = {"type": "string", "pattern": r"\S"}

CHECKER_ANALYZE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["isClear"],
    "properties": {
        "isClear": {"type": "boolean"},
        "problems": {"type": "array"},
        "reason": {},
        "questions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "question", "options"],
                "properties": {
                    "id": _NON_EMPTY,
                    "question": _NON_EMPTY,
                    "type": {},
                    "options": {
                        "type": "array",
                        "minItems": 1,
                        "items": {
                            "type": "object",
                            "required": ["id", "label"],
                            "properties": {
                                "id": _NON_EMPTY,
                                "label": _NON_EMPTY,
                            },
                        },
                    },
                },
            },
        },
    },
}


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _option(data: Dict[str, Any]) -> ClarificationOption:
    allow = data.get("allowCustomInput")
    return ClarificationOption(
        id=data["id"].strip(),
        label=data["label"].strip(),
        icon=_opt_str(data.get("icon")),
        description=_opt_str(data.get("description")),
        allow_custom_input=allow if isinstance(allow, bool) else False,
    )


def _question(data: Dict[str, Any]) -> ClarificationQuestion:
    return ClarificationQuestion(
        id=data["id"].strip(),
        question=data["question"].strip(),
        type="multiple" if data.get("type") == "multiple" else "single",
        options=[_option(o) for o in data["options"]],
    )


def validate_checker_analyze_output(data: Any) -> AnalysisOutput:
    """Validate the analyst's JSON verdict and convert it to typed values.

    Raises LLMValidationError naming the first missing/invalid field.
    """

    validate_json(data, CHECKER_ANALYZE_SCHEMA)

    problems: Optional[List[str]] = None
    if isinstance(data.get("problems"), list):
        problems = [p for p in data["problems"] if isinstance(p, str)]

    questions: Optional[List[ClarificationQuestion]] = None
    if isinstance(data.get("questions"), list):
        questions = [_question(q) for q in data["questions"]]

    return AnalysisOutput(
        is_clear=data["isClear"],
        problems=problems,
        questions=questions,
        reason=_opt_str(data.get("reason")),
    )
