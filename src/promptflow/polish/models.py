from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional

HistoryRole = Literal["user", "assistant"]


@dataclass
class PolishPreset:
    """A named system prompt + temperature bundle controlling polishing style."""

    id: str
    name: str
    system_prompt: str
    description: Optional[str] = None
    icon: Optional[str] = None
    temperature: Optional[float] = None
    is_built_in: bool = False
    is_default: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PolishPreset":
        temperature = data.get("temperature")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            system_prompt=str(data.get("systemPrompt", data.get("system_prompt", ""))),
            description=data.get("description"),
            icon=data.get("icon"),
            temperature=float(temperature) if temperature is not None else None,
            is_built_in=bool(data.get("isBuiltIn", data.get("is_built_in", False))),
            is_default=bool(data.get("isDefault", data.get("is_default", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "name": self.name,
            "systemPrompt": self.system_prompt,
            "isBuiltIn": self.is_built_in,
            "isDefault": self.is_default,
        }
        for key in ("description", "icon", "temperature"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class PresetDraft:
    """Validated output of the AI preset designer, before it becomes a preset."""

    system_prompt: str
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    temperature: Optional[float] = None


@dataclass(frozen=True)
class HistoryTurn:
    role: HistoryRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class PolishResult:
    output: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def display_text(self, error_prefix: str = "Error") -> str:
        """Text for the output pane: the polished prompt or an inline error line."""
        if self.error is not None:
            return f"{error_prefix}: {self.error}"
        return self.output


ChatHistory = List[HistoryTurn]
