"""
Condition evaluation for dialog branching.

Conditions gate initial nodes, linear transitions, option visibility,
option targets and line events. Evaluation never raises: anything that
cannot be evaluated resolves to a safe default so graph traversal always
terminates.
"""

from __future__ import annotations

import logging
import operator as op
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol

from narrative.dialog.models import Condition

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    def get_value(self, tag_id: str) -> int: ...

    def set_value(self, tag_id: str, value: int) -> None: ...


class ItemCatalog(Protocol):
    def get_item_by_id(self, item_id: int) -> Any: ...


class InventoryStore(Protocol):
    def get_owned_count(self, item: Any) -> int: ...

    def add_item(self, item: Any, count: int) -> int: ...

    def remove_item(self, item: Any, count: int) -> int: ...


class ConditionKind(Enum):
    TAG_CHECK = "TAG_CHECK"
    ITEM_OWNED = "ITEM_OWNED"


class ComparisonOperator(Enum):
    EQUAL = (op.eq, "==")
    NOT_EQUAL = (op.ne, "!=")
    GREATER_THAN = (op.gt, ">")
    GREATER_EQUAL = (op.ge, ">=")
    LESS_THAN = (op.lt, "<")
    LESS_EQUAL = (op.le, "<=")

    def __init__(self, compare: Callable[[int, int], bool], symbol: str):
        self.compare = compare
        self.symbol = symbol

    @classmethod
    def parse(cls, text: Optional[str]) -> ComparisonOperator:
        """Map a name or symbol to an operator. Unknown text falls back to EQUAL."""
        if not text or not text.strip():
            return cls.EQUAL
        key = text.strip().upper()
        for member in cls:
            if key == member.name or key == member.symbol:
                return member
        logger.warning(f"Unknown comparison operator '{text}', using EQUAL")
        return cls.EQUAL


class ConditionMode(Enum):
    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, mode: ConditionMode | str) -> ConditionMode:
        if isinstance(mode, ConditionMode):
            return mode
        try:
            return cls(str(mode).strip().upper())
        except ValueError:
            logger.warning(f"Unknown condition mode '{mode}', using AND")
            return cls.AND


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parse an authored integer, returning None instead of raising."""
    if text is None:
        return None
    try:
        return int(str(text).strip())
    except ValueError:
        return None


class ConditionEvaluator:
    """
    Evaluates conditions against the game's state store and inventory.

    Collaborators are optional. A condition that needs a missing
    collaborator evaluates to False. Without a catalog, the numeric item
    id itself is passed to the inventory as the item reference.
    """

    def __init__(
        self,
        state_store: Optional[StateStore] = None,
        inventory: Optional[InventoryStore] = None,
        catalog: Optional[ItemCatalog] = None,
    ):
        self.state_store = state_store
        self.inventory = inventory
        self.catalog = catalog

    def evaluate(self, condition: Optional[Condition]) -> bool:
        """
        Evaluate a single condition.

        Absent condition, kind or value means no constraint.
        """
        if condition is None or not condition.kind or not condition.value:
            return True

        kind = condition.kind.strip().upper()
        try:
            if kind == ConditionKind.TAG_CHECK.value:
                return self._check_tag(condition)
            if kind == ConditionKind.ITEM_OWNED.value:
                return self._check_item(condition)
        except Exception as e:
            logger.error(f"Error evaluating condition {kind}({condition.target}): {e}")
            return False

        logger.warning(f"Unknown condition type: {condition.kind}")
        return False

    def evaluate_all(
        self,
        conditions: Iterable[Optional[Condition]],
        mode: ConditionMode | str = ConditionMode.AND,
    ) -> bool:
        """Evaluate a list of conditions. An empty list is True."""
        mode = ConditionMode.parse(mode)
        if mode == ConditionMode.OR:
            found_any = False
            for condition in conditions:
                found_any = True
                if self.evaluate(condition):
                    return True
            return not found_any

        for condition in conditions:
            if not self.evaluate(condition):
                return False
        return True

    def _check_tag(self, condition: Condition) -> bool:
        if self.state_store is None:
            logger.warning("No state store available for TAG_CHECK")
            return False
        if not condition.target:
            return False

        expected = parse_int(condition.value)
        if expected is None:
            logger.warning(f"TAG_CHECK value is not an integer: '{condition.value}'")
            return False

        actual = self.state_store.get_value(condition.target)
        return self._compare(actual, expected, condition.operator)

    def _check_item(self, condition: Condition) -> bool:
        if self.inventory is None:
            logger.warning("No inventory available for ITEM_OWNED")
            return False

        item_id = parse_int(condition.target)
        expected = parse_int(condition.value)
        if item_id is None or expected is None:
            logger.warning(
                f"ITEM_OWNED needs integer item id and count, got "
                f"'{condition.target}' and '{condition.value}'"
            )
            return False

        item: Any = item_id
        if self.catalog is not None:
            item = self.catalog.get_item_by_id(item_id)
            if item is None:
                logger.warning(f"Unknown item id {item_id}")
                return False

        owned = self.inventory.get_owned_count(item)
        return self._compare(owned, expected, condition.operator)

    @staticmethod
    def _compare(actual: int, expected: int, operator_text: Optional[str]) -> bool:
        return ComparisonOperator.parse(operator_text).compare(actual, expected)
