"""
Input action definitions.

Dialog code never looks at raw keys. It asks about semantic actions
(confirm, cancel, menu direction) and the input handler maps keyboard
and gamepad input onto them, so bindings can change without touching
the dialog controller.
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """Semantic input actions used while a dialog is on screen."""

    MENU_UP = auto()
    MENU_DOWN = auto()
    MENU_LEFT = auto()
    MENU_RIGHT = auto()
    CONFIRM = auto()
    CANCEL = auto()


class NavigationAxis(Enum):
    """Axis queried through ``navigate()``. Positive is up or right."""

    HORIZONTAL = auto()
    VERTICAL = auto()


DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    Action.MENU_UP: [pygame.K_UP, pygame.K_w],
    Action.MENU_DOWN: [pygame.K_DOWN, pygame.K_s],
    Action.MENU_LEFT: [pygame.K_LEFT, pygame.K_a],
    Action.MENU_RIGHT: [pygame.K_RIGHT, pygame.K_d],
    Action.CONFIRM: [pygame.K_RETURN, pygame.K_SPACE, pygame.K_z],
    Action.CANCEL: [pygame.K_ESCAPE, pygame.K_x],
}

# SDL controller layout
DEFAULT_GAMEPAD_BINDINGS: dict[Action, list[int]] = {
    Action.CONFIRM: [0],  # A
    Action.CANCEL: [1],   # B
}

# Left stick, pygame reports +Y as down
DEFAULT_GAMEPAD_AXES: dict[NavigationAxis, tuple[int, float]] = {
    NavigationAxis.HORIZONTAL: (0, 1.0),
    NavigationAxis.VERTICAL: (1, -1.0),
}

DEFAULT_GAMEPAD_HAT_BINDINGS: dict[tuple[int, int], Action] = {
    (0, 1): Action.MENU_UP,
    (0, -1): Action.MENU_DOWN,
    (-1, 0): Action.MENU_LEFT,
    (1, 0): Action.MENU_RIGHT,
}
