"""
Game state stores read and written by dialogs.

Provides:
- TagStore: named integer story tags
- ItemCatalog, Item: item definitions by numeric id
- Inventory: counts of owned items
"""

from narrative.state.tags import TagStore, PlayerTag
from narrative.state.inventory import Inventory, Item, ItemCatalog, ItemStack

__all__ = [
    "TagStore",
    "PlayerTag",
    "Inventory",
    "Item",
    "ItemCatalog",
    "ItemStack",
]
