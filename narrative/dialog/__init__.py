"""
Dialog module - branching, condition-gated conversations.

Provides:
- Dialog document parsing and schema validation
- Per-language definition cache with language fallback
- Condition evaluation and graph resolution
- Inline text markup with timed character reveal
- Line events that update tags and inventory
- A presentation controller for interactive and narrated dialogs
"""

from narrative.dialog.cache import DialogCache, LoadResult, find_fallback_language
from narrative.dialog.conditions import ComparisonOperator, ConditionEvaluator, ConditionMode
from narrative.dialog.config import DialogConfig
from narrative.dialog.context import DialogContext, DialogState
from narrative.dialog.controller import INTERACTIVE, NARRATION, DialogController, PresentationPolicy
from narrative.dialog.events import DialogEvent, EventDispatcher, LocalizationEvent
from narrative.dialog.graph import END_OF_DIALOG, DialogGraph, DisplayOption
from narrative.dialog.markup import RevealStep, TextRevealer, render_text
from narrative.dialog.models import Condition, DialogDefinition, DialogNode, DialogOption, LineEvent
from narrative.dialog.parser import DialogParseError, DialogParser
from narrative.dialog.runtime import DialogRuntime
from narrative.dialog.snapshot import DialogSnapshotStore
from narrative.dialog.watcher import DialogWatcher

__all__ = [
    # Data
    "Condition",
    "DialogDefinition",
    "DialogNode",
    "DialogOption",
    "LineEvent",
    # Loading
    "DialogParser",
    "DialogParseError",
    "DialogCache",
    "LoadResult",
    "DialogSnapshotStore",
    "DialogWatcher",
    "find_fallback_language",
    # Logic
    "ConditionEvaluator",
    "ConditionMode",
    "ComparisonOperator",
    "DialogGraph",
    "DisplayOption",
    "END_OF_DIALOG",
    "TextRevealer",
    "RevealStep",
    "render_text",
    "EventDispatcher",
    # Presentation
    "DialogController",
    "DialogContext",
    "DialogState",
    "PresentationPolicy",
    "INTERACTIVE",
    "NARRATION",
    "DialogEvent",
    "LocalizationEvent",
    "DialogConfig",
    "DialogRuntime",
]
