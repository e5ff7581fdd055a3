"""
Composition root for the dialog engine.

Builds one cache, evaluator, graph and dispatcher per game and hands out
controllers that share them.
"""

from __future__ import annotations

from typing import Optional

from engine.core.events import EventBus
from narrative.dialog.cache import DialogCache
from narrative.dialog.conditions import ConditionEvaluator, InventoryStore, ItemCatalog, StateStore
from narrative.dialog.config import DialogConfig
from narrative.dialog.context import InputSource, LanguageSettings, PresentationSurface
from narrative.dialog.controller import INTERACTIVE, DialogController, PresentationPolicy
from narrative.dialog.events import EventDispatcher
from narrative.dialog.graph import DialogGraph
from narrative.dialog.snapshot import DialogSnapshotStore
from narrative.dialog.watcher import DialogWatcher


class DialogRuntime:
    """
    Shared dialog services.

    Usage:
        runtime = DialogRuntime(DialogConfig(dialog_base_path="game/dialogs"), tags=tags)
        runtime.load()
        talk = runtime.create_controller(dialog_box, input_handler)
        narrator = runtime.create_controller(caption_box, policy=NARRATION)
    """

    def __init__(
        self,
        config: Optional[DialogConfig] = None,
        state_store: Optional[StateStore] = None,
        inventory: Optional[InventoryStore] = None,
        catalog: Optional[ItemCatalog] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.config = config or DialogConfig()
        self.event_bus = event_bus or EventBus()
        self.cache = DialogCache(
            self.config.dialog_base_path,
            default_language=self.config.default_language,
            snapshots=DialogSnapshotStore(self.config.snapshot_dir, self.config.snapshot_extension),
        )
        self.evaluator = ConditionEvaluator(state_store, inventory, catalog)
        self.graph = DialogGraph(self.evaluator)
        self.dispatcher = EventDispatcher(self.evaluator, state_store, inventory, catalog, self.event_bus)

    def load(self) -> int:
        """Load every language folder. Returns the number of languages loaded."""
        return self.cache.load_all_languages()

    def create_controller(
        self,
        surface: PresentationSurface,
        input_source: Optional[InputSource] = None,
        policy: PresentationPolicy = INTERACTIVE,
        settings: Optional[LanguageSettings] = None,
    ) -> DialogController:
        return DialogController(
            self.cache,
            self.graph,
            self.dispatcher,
            surface,
            input_source=input_source,
            policy=policy,
            config=self.config,
            event_bus=self.event_bus,
            settings=settings,
        )

    def create_watcher(self) -> DialogWatcher:
        return DialogWatcher(self.cache, self.config.watch_debounce)
