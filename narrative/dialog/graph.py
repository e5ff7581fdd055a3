"""
Dialog graph resolution.

Three independent decision points pick the next node id:

- resolve_initial: where a dialog starts
- resolve_next: where a line without options continues
- resolve_option_target: where a chosen option leads

Any resolved id <= 0 ends the dialog.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from narrative.dialog.conditions import ConditionEvaluator
from narrative.dialog.models import DialogDefinition, DialogNode, DialogOption

logger = logging.getLogger(__name__)

END_OF_DIALOG = -1


def is_terminal(node_id: int) -> bool:
    return node_id <= 0


@dataclass(frozen=True)
class DisplayOption:
    """An option as shown to the player, in display order."""
    label: str
    disabled: bool
    option: DialogOption
    authored_index: int


class DialogGraph:
    """Resolves node ids against a definition using a condition evaluator."""

    def __init__(self, evaluator: ConditionEvaluator):
        self.evaluator = evaluator

    def resolve_initial(self, definition: DialogDefinition) -> int:
        for entry in definition.initial_conditions:
            if self.evaluator.evaluate(entry.condition):
                return entry.dialog_id
        return definition.default_initial_id if definition.default_initial_id > 0 else 1

    def resolve_next(self, definition: DialogDefinition, current_id: int) -> int:
        node = definition.get_node(current_id)
        if node is None:
            logger.warning(f"Dialog node {current_id} not found in '{definition.name}'")
            return END_OF_DIALOG

        for entry in node.next_conditions:
            if self.evaluator.evaluate(entry.condition):
                return entry.next_id
        return node.next_id

    def build_display_options(self, node: Optional[DialogNode]) -> list[DisplayOption]:
        """
        Filter a node's options into display order.

        Options whose condition fails are shown disabled as ``[failText]``
        when a fail text is authored and dropped otherwise. Rendering and
        selection both go through here, so display indexes always agree
        for the same game state.
        """
        if node is None:
            return []

        shown: list[DisplayOption] = []
        for index, option in enumerate(node.options):
            if self.evaluator.evaluate(option.condition):
                shown.append(DisplayOption(option.text, False, option, index))
            elif option.has_fail_text:
                shown.append(DisplayOption(f"[{option.fail_text}]", True, option, index))
        return shown

    def resolve_option_target(
        self,
        definition: DialogDefinition,
        current_id: int,
        display_index: int,
        fallback_id: int,
    ) -> int:
        """
        Resolve the node an option at ``display_index`` leads to.

        The display list is rebuilt from the definition here rather than
        reused from render time. A disabled entry yields END_OF_DIALOG; an
        index that matches nothing yields ``fallback_id``.
        """
        for position, entry in enumerate(self.build_display_options(definition.get_node(current_id))):
            if position != display_index:
                continue
            if entry.disabled:
                return END_OF_DIALOG
            for conditional in entry.option.conditional_next:
                if self.evaluator.evaluate(conditional.condition):
                    return conditional.next_id
            return entry.option.next_id
        return fallback_id
