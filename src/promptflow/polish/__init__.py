"""Prompt polishing entry point.

Public API:
- polish / build_polish_messages / extend_history
- PolishPreset, PolishResult, PresetDraft, HistoryTurn
- PresetCatalog, BUILT_IN_PRESETS, generate_preset, draft_to_preset
"""

from .builtin import BUILT_IN_PRESETS
from .models import HistoryTurn, PolishPreset, PolishResult, PresetDraft
from .presets import (
    PresetCatalog,
    PresetError,
    draft_to_preset,
    generate_preset,
    validate_preset_creator_output,
)
from .service import build_polish_messages, extend_history, language_directive, polish

__all__ = [
    "BUILT_IN_PRESETS",
    "HistoryTurn",
    "PolishPreset",
    "PolishResult",
    "PresetCatalog",
    "PresetDraft",
    "PresetError",
    "build_polish_messages",
    "draft_to_preset",
    "extend_history",
    "generate_preset",
    "language_directive",
    "polish",
    "validate_preset_creator_output",
]
