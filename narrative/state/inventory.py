"""
Items and inventory used by dialog conditions and events.

Dialogs refer to items by numeric id; the ItemCatalog maps those ids to
Item definitions and the Inventory counts what the player holds.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class Item(BaseModel):
    """Static item definition."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    max_stack: int = Field(default=99, ge=1)


ItemRef = Union[Item, int]


class ItemCatalog:
    """Lookup of item definitions by id."""

    def __init__(self, items: Iterable[Item] = ()):
        self._items: dict[int, Item] = {}
        for item in items:
            self.register(item)

    def register(self, item: Item) -> None:
        self._items[item.id] = item

    def get_item_by_id(self, item_id: int) -> Optional[Item]:
        return self._items.get(item_id)

    def __len__(self) -> int:
        return len(self._items)

    def load(self, path: Path | str) -> int:
        """Load a JSON list of item definitions. Returns items loaded."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load item catalog {path}: {e}")
            return 0

        loaded = 0
        for entry in data if isinstance(data, list) else []:
            try:
                self.register(Item.model_validate(entry))
                loaded += 1
            except ValidationError as e:
                logger.error(f"Invalid item in {path}: {e}")
        return loaded


class ItemStack(BaseModel):
    """
    A stack of items in inventory.

    Attributes:
        item_id: Reference to item definition
        quantity: Number of items in stack
        max_stack: Maximum stack size
    """
    item_id: int
    quantity: int = 0
    max_stack: int = 99

    @property
    def is_full(self) -> bool:
        return self.quantity >= self.max_stack

    @property
    def is_empty(self) -> bool:
        return self.quantity <= 0

    def add(self, amount: int) -> int:
        """Add to stack. Returns the amount added."""
        to_add = min(amount, self.max_stack - self.quantity)
        self.quantity += to_add
        return to_add

    def remove(self, amount: int) -> int:
        """Remove from stack. Returns the amount removed."""
        to_remove = min(amount, self.quantity)
        self.quantity -= to_remove
        return to_remove


class Inventory(BaseModel):
    """
    Slot based item container.

    Attributes:
        slots: Item stacks (None = empty slot)
        max_slots: Maximum inventory size
    """

    model_config = ConfigDict(validate_assignment=True)

    slots: list[Optional[ItemStack]] = Field(default_factory=list)
    max_slots: int = 20

    def model_post_init(self, __context) -> None:
        while len(self.slots) < self.max_slots:
            self.slots.append(None)

    @staticmethod
    def _key(item: ItemRef) -> tuple[int, int]:
        if isinstance(item, Item):
            return item.id, item.max_stack
        return int(item), 99

    def get_owned_count(self, item: ItemRef) -> int:
        item_id, _ = self._key(item)
        return sum(s.quantity for s in self.slots if s and s.item_id == item_id)

    def add_item(self, item: ItemRef, count: int = 1) -> int:
        """
        Add items, filling existing stacks first.

        Returns:
            Amount actually added
        """
        item_id, max_stack = self._key(item)
        added = 0

        for slot in self.slots:
            if added >= count:
                break
            if slot and slot.item_id == item_id and not slot.is_full:
                added += slot.add(count - added)

        for i, slot in enumerate(self.slots):
            if added >= count:
                break
            if slot is None:
                stack = ItemStack(item_id=item_id, max_stack=max_stack)
                added += stack.add(count - added)
                self.slots[i] = stack

        return added

    def remove_item(self, item: ItemRef, count: int = 1) -> int:
        """
        Remove items.

        Returns:
            Amount actually removed
        """
        item_id, _ = self._key(item)
        removed = 0

        for i, slot in enumerate(self.slots):
            if removed >= count:
                break
            if slot and slot.item_id == item_id:
                removed += slot.remove(count - removed)
                if slot.is_empty:
                    self.slots[i] = None

        return removed
