from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional

from promptflow.polish.models import PolishPreset

QuestionType = Literal["single", "multiple"]


@dataclass(frozen=True)
class ClarificationOption:
    id: str
    label: str
    icon: Optional[str] = None
    description: Optional[str] = None
    allow_custom_input: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClarificationOption":
        return cls(
            id=str(data["id"]),
            label=str(data["label"]),
            icon=data.get("icon"),
            description=data.get("description"),
            allow_custom_input=bool(
                data.get("allowCustomInput", data.get("allow_custom_input", False))
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "label": self.label}
        if self.icon is not None:
            out["icon"] = self.icon
        if self.description is not None:
            out["description"] = self.description
        if self.allow_custom_input:
            out["allowCustomInput"] = True
        return out


@dataclass(frozen=True)
class ClarificationQuestion:
    id: str
    question: str
    type: QuestionType = "single"
    options: List[ClarificationOption] = field(default_factory=list)

    @property
    def is_multiple(self) -> bool:
        return self.type == "multiple"

    def option(self, option_id: str) -> Optional[ClarificationOption]:
        for o in self.options:
            if o.id == option_id:
                return o
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClarificationQuestion":
        qtype = data.get("type")
        return cls(
            id=str(data["id"]),
            question=str(data["question"]),
            type="multiple" if qtype == "multiple" else "single",
            options=[ClarificationOption.from_dict(o) for o in data.get("options", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "type": self.type,
            "options": [o.to_dict() for o in self.options],
        }


@dataclass(frozen=True)
class UserSelection:
    """One answer from the clarification cards.

    For multiple-choice questions ``selected_option_ids`` is authoritative;
    ``selected_option_id`` only mirrors its first entry for older callers.
    """

    question_id: str
    selected_option_id: str
    selected_option_ids: Optional[List[str]] = None
    custom_input: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserSelection":
        ids = data.get("selectedOptionIds", data.get("selected_option_ids"))
        return cls(
            question_id=str(data.get("questionId", data.get("question_id"))),
            selected_option_id=str(
                data.get("selectedOptionId", data.get("selected_option_id", ""))
            ),
            selected_option_ids=list(ids) if ids is not None else None,
            custom_input=data.get("customInput", data.get("custom_input")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "questionId": self.question_id,
            "selectedOptionId": self.selected_option_id,
        }
        if self.selected_option_ids is not None:
            out["selectedOptionIds"] = list(self.selected_option_ids)
        if self.custom_input is not None:
            out["customInput"] = self.custom_input
        return out


@dataclass(frozen=True)
class AnalysisOutput:
    """Validated verdict of the ambiguity analyst."""

    is_clear: bool
    problems: Optional[List[str]] = None
    questions: Optional[List[ClarificationQuestion]] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class CheckerInput:
    raw_input: str
    preset: PolishPreset
    user_selections: Optional[List[UserSelection]] = None


@dataclass(frozen=True)
class CheckerResult:
    needs_clarification: bool
    clarified_prompt: str
    success: bool
    questions: Optional[List[ClarificationQuestion]] = None
    problems: Optional[List[str]] = None
    reason: Optional[str] = None
    error: Optional[str] = None
