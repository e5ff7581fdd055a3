"""
Dialog events.

DialogEvent is the vocabulary published on the event bus while a dialog
runs. EventDispatcher executes the side effects authored on a line once
that line has been fully revealed.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, Iterable, Optional

from engine.core.events import EventBus
from narrative.dialog.conditions import (
    ConditionEvaluator,
    InventoryStore,
    ItemCatalog,
    StateStore,
    parse_int,
)
from narrative.dialog.models import LineEvent


class DialogEvent(Enum):
    """Events published while dialogs run."""
    DIALOG_STARTED = auto()
    DIALOG_ENDED = auto()
    LINE_STARTED = auto()
    LINE_REVEALED = auto()
    OPTIONS_SHOWN = auto()
    OPTION_SELECTED = auto()
    EVENT_DISPATCHED = auto()
    # Authored effects handled outside the dialog engine
    EFFECT_REQUESTED = auto()


class LocalizationEvent(Enum):
    LANGUAGE_CHANGED = auto()


class EventKind(Enum):
    UPDATE_TAG = "update_tag"
    GIVE_ITEM = "give_item"
    TAKE_ITEM = "take_item"
    PLAY_NARRATION = "play_narration"
    PLAY_AUDIO = "play_audio"
    LOAD_SCENE = "load_scene"


# Kinds the host game carries out when it sees EFFECT_REQUESTED
FORWARDED_KINDS = frozenset({EventKind.PLAY_NARRATION, EventKind.PLAY_AUDIO, EventKind.LOAD_SCENE})


class EventDispatcher:
    """
    Runs line events in authored order.

    A failing event is logged and skipped; it never stops the events
    after it.
    """

    def __init__(
        self,
        evaluator: ConditionEvaluator,
        state_store: Optional[StateStore] = None,
        inventory: Optional[InventoryStore] = None,
        catalog: Optional[ItemCatalog] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.evaluator = evaluator
        self.state_store = state_store
        self.inventory = inventory
        self.catalog = catalog
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    def execute_line_events(self, events: Iterable[LineEvent]) -> int:
        """Execute every event whose gate passes. Returns how many ran."""
        executed = 0
        for event in events:
            if not self.evaluator.evaluate(event.gate):
                self.logger.debug(f"Skipping event '{event.kind}': condition not met")
                continue
            try:
                ran = self._execute(event)
            except Exception as e:
                self.logger.error(f"Error executing event '{event.kind}': {e}")
                continue
            if ran:
                executed += 1
                if self.event_bus:
                    self.event_bus.publish(
                        DialogEvent.EVENT_DISPATCHED,
                        kind=event.kind.lower(),
                        param1=event.param1,
                        param2=event.param2,
                    )
        return executed

    def _execute(self, event: LineEvent) -> bool:
        if not event.kind:
            self.logger.warning("Event has no type, skipping")
            return False

        try:
            kind = EventKind(event.kind.strip().lower())
        except ValueError:
            self.logger.warning(f"Unknown event type: {event.kind}")
            return False

        if kind == EventKind.UPDATE_TAG:
            return self._update_tag(event)
        if kind == EventKind.GIVE_ITEM:
            return self._give_item(event)
        if kind == EventKind.TAKE_ITEM:
            return self._take_item(event)

        if self.event_bus is None:
            self.logger.warning(f"No event bus to forward '{kind.value}' to")
            return False
        self.event_bus.publish(
            DialogEvent.EFFECT_REQUESTED,
            kind=kind.value,
            param1=event.param1,
            param2=event.param2,
        )
        return True

    def _update_tag(self, event: LineEvent) -> bool:
        if self.state_store is None:
            self.logger.warning("No state store available for update_tag")
            return False
        if not event.param1:
            self.logger.warning("update_tag is missing a tag id")
            return False
        value = parse_int(event.param2)
        if value is None:
            self.logger.warning(f"update_tag value is not an integer: '{event.param2}'")
            return False

        self.state_store.set_value(event.param1, value)
        self.logger.debug(f"Tag {event.param1} = {value}")
        return True

    def _resolve_item(self, event: LineEvent) -> Optional[tuple[Any, int]]:
        if self.inventory is None:
            self.logger.warning(f"No inventory available for {event.kind}")
            return None

        item_id = parse_int(event.param1)
        if item_id is None:
            self.logger.warning(f"{event.kind}: item id is not an integer: '{event.param1}'")
            return None
        count = parse_int(event.param2)
        if count is None:
            self.logger.warning(f"{event.kind}: count is not an integer: '{event.param2}'")
            return None
        if count <= 0:
            self.logger.warning(f"{event.kind}: count must be positive, got {count}")
            return None

        item: Any = item_id
        if self.catalog is not None:
            item = self.catalog.get_item_by_id(item_id)
            if item is None:
                self.logger.warning(f"{event.kind}: no item with id {item_id}")
                return None
        return item, count

    def _give_item(self, event: LineEvent) -> bool:
        resolved = self._resolve_item(event)
        if resolved is None:
            return False
        item, count = resolved

        added = self.inventory.add_item(item, count)
        if added < count:
            self.logger.warning(f"Gave {added} of {count} x {item} (inventory full?)")
        return added > 0

    def _take_item(self, event: LineEvent) -> bool:
        resolved = self._resolve_item(event)
        if resolved is None:
            return False
        item, count = resolved

        owned = self.inventory.get_owned_count(item)
        if owned < count:
            self.logger.warning(f"Cannot take {count} x {item}, only {owned} owned")
            return False
        removed = self.inventory.remove_item(item, count)
        return removed > 0
