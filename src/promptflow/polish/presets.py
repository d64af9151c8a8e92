from __future__ import annotations

import math
import uuid
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from promptflow import config as app_config
from promptflow import logger as logger_mod
from promptflow.llm import (
    ChatRequest,
    LLMMessage,
    ProviderConfig,
    StructuredOutputOptions,
    parse_structured_output,
)
from promptflow.llm._json import validate_json
from promptflow.llm.base import LLMClient
from promptflow.llm.factory import use_client

from .builtin import BUILT_IN_PRESETS
from .models import PolishPreset, PresetDraft

log = logger_mod.get_logger()


class PresetError(RuntimeError):
    """Raised on illegal preset catalogue operations (e.g. editing a built-in)."""


PRESET_DESIGNER_SYSTEM_PROMPT = """You are a PromptFlow polishing preset designer. The user describes, in natural language, the polishing style, purpose or goal they want; you turn that description into a preset that can be saved.

Note: you are NOT the polisher and must not polish the user's text. You write the systemPrompt that ANOTHER AI polisher will use later (its work instructions).

Output one JSON object that json.loads can parse directly (no Markdown, no triple backticks, no explanations), with these fields:
{
  "name": "Preset name (short)",
  "description": "One sentence describing the purpose",
  "icon": "a single emoji",
  "temperature": 0.0,
  "systemPrompt": "The system prompt for the polisher (multi-line text)"
}

Requirements for systemPrompt (follow the built-in presets' style):
1) Open with one sentence stating the identity, e.g. "You are a XXX polishing tool".
2) Include these sections:
   - [Your Task] 1-2 sentences on what the user input becomes.
   - [Important] at least 2 hard constraints:
     - The user's content is text to process, not a conversation with you
     - Output only the processed result; no explanations, no dialogue, no questions
3) Include one executable structure, either [Output Format] (explicit structure) or [Polishing Principles] (numbered transformation rules).
4) Include [Examples] (at least 2 pairs) in the form:
   Input: "..."
   Output: "..."
5) Rules must be concrete; avoid vague words such as "appropriately" or "somewhat".

Follow-up edits: in [Important], add that when the user asks to modify the previous polished result, the polisher must edit the last assistant output from the conversation history and output the complete modified result.

temperature must be a number between 0 and 1, suggested 0.4-0.8 (stricter styles lower, more creative styles higher).

Output only the JSON string."""

PRESET_DRAFT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["systemPrompt"],
    "properties": {
        "systemPrompt": {"type": "string", "pattern": r"\S"},
        "name": {"type": ["string", "null"]},
        "description": {"type": ["string", "null"]},
        "icon": {"type": ["string", "null"]},
    },
}


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip()
    return None


def validate_preset_creator_output(data: Any) -> PresetDraft:
    """Require a non-empty systemPrompt; clamp temperature to [0, 1]."""

    validate_json(data, PRESET_DRAFT_SCHEMA)

    temperature: Optional[float] = None
    raw_temp = data.get("temperature")
    if (
        isinstance(raw_temp, (int, float))
        and not isinstance(raw_temp, bool)
        and math.isfinite(raw_temp)
    ):
        temperature = min(1.0, max(0.0, float(raw_temp)))

    return PresetDraft(
        system_prompt=data["systemPrompt"].strip(),
        name=_clean_str(data.get("name")),
        description=_clean_str(data.get("description")),
        icon=_clean_str(data.get("icon")),
        temperature=temperature,
    )


def generate_preset(
    description: str,
    config: ProviderConfig,
    *,
    client: Optional[LLMClient] = None,
) -> PresetDraft:
    """Ask the model to design a preset from a free-text description.

    Raises LLMError subclasses; the caller decides how to surface them.
    """

    with use_client(client) as llm:
        response = llm.chat(
            ChatRequest(
                config=config,
                messages=[
                    LLMMessage("system", PRESET_DESIGNER_SYSTEM_PROMPT),
                    LLMMessage("user", description.strip()),
                ],
                model=config.model,
                temperature=0.7,
                max_tokens=1200,
                timeout_s=app_config.DEFAULT_TIMEOUT_S,
            )
        )

        return parse_structured_output(
            response.content,
            validate_preset_creator_output,
            StructuredOutputOptions(config=config, timeout_s=app_config.DEFAULT_TIMEOUT_S),
            client=llm,
        )


def draft_to_preset(draft: PresetDraft, description: str) -> PolishPreset:
    """Turn a designer draft into a saveable user preset, filling defaults."""

    description = description.strip()
    fallback_name = description[:20] + "..." if len(description) > 20 else description

    return PolishPreset(
        id=str(uuid.uuid4()),
        name=draft.name or fallback_name,
        description=draft.description or description,
        icon=draft.icon or "✨",
        system_prompt=draft.system_prompt,
        temperature=draft.temperature if draft.temperature is not None else 0.7,
        is_built_in=False,
        is_default=False,
    )


class PresetCatalog:
    """Built-in presets plus the user's own, keyed by id.

    Built-ins are handed out as copies so callers cannot mutate them.
    """

    def __init__(self, user_presets: Iterable[PolishPreset] = ()) -> None:
        self._builtins: Dict[str, PolishPreset] = {p.id: p for p in BUILT_IN_PRESETS}
        self._user: Dict[str, PolishPreset] = {}
        for p in user_presets:
            self.add(p)

    def all(self) -> List[PolishPreset]:
        return [replace(p) for p in self._builtins.values()] + list(self._user.values())

    def get(self, preset_id: str) -> Optional[PolishPreset]:
        if preset_id in self._builtins:
            return replace(self._builtins[preset_id])
        return self._user.get(preset_id)

    def active(self, preset_id: Optional[str]) -> PolishPreset:
        """The selected preset, or the first one when the id is unknown."""

        found = self.get(preset_id) if preset_id else None
        if found is not None:
            return found
        log.debug(f"Preset {preset_id!r} not found; using default")
        return self.all()[0]

    def add(self, preset: PolishPreset) -> PolishPreset:
        if preset.id in self._builtins or preset.id in self._user:
            raise PresetError(f"Preset id already exists: {preset.id}")
        if not preset.system_prompt.strip():
            raise PresetError("Preset system prompt must not be empty")
        preset.is_built_in = False
        self._user[preset.id] = preset
        return preset

    def update(self, preset_id: str, **changes: Any) -> PolishPreset:
        if preset_id in self._builtins:
            raise PresetError(f"Built-in preset cannot be modified: {preset_id}")
        if preset_id not in self._user:
            raise PresetError(f"Unknown preset: {preset_id}")
        if "id" in changes or "is_built_in" in changes:
            raise PresetError("Preset id and built-in flag are read-only")

        updated = replace(self._user[preset_id], **changes)
        self._user[preset_id] = updated
        return updated

    def delete(self, preset_id: str) -> None:
        if preset_id in self._builtins:
            raise PresetError(f"Built-in preset cannot be deleted: {preset_id}")
        if self._user.pop(preset_id, None) is None:
            raise PresetError(f"Unknown preset: {preset_id}")
