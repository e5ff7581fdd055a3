"""
Input handler with action-based abstraction.

Translates pygame keyboard and gamepad events into semantic Actions and
answers the three questions the dialog controller polls once per step:

    if input.confirm_pressed():
        ...
    if input.cancel_pressed():
        ...
    y = input.navigate(NavigationAxis.VERTICAL)   # -1.0 .. 1.0, up is positive
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import pygame

from engine.core.actions import (
    Action,
    NavigationAxis,
    DEFAULT_KEY_BINDINGS,
    DEFAULT_GAMEPAD_BINDINGS,
    DEFAULT_GAMEPAD_AXES,
    DEFAULT_GAMEPAD_HAT_BINDINGS,
)
from engine.core.events import EventBus


class InputEvent(Enum):
    """Input-specific events."""
    ACTION_PRESSED = "input.action_pressed"
    ACTION_RELEASED = "input.action_released"


@dataclass
class InputState:
    """Input state for the current frame."""
    actions_pressed: set[Action] = field(default_factory=set)
    actions_just_pressed: set[Action] = field(default_factory=set)
    actions_just_released: set[Action] = field(default_factory=set)
    keys_pressed: set[int] = field(default_factory=set)
    axis_values: dict[int, float] = field(default_factory=dict)
    hat_action: Action | None = None


class InputHandler:
    """
    Handles keyboard and gamepad input.

    Call process_event() for each pygame event, then update() once at the
    start of each fixed update so "just pressed" queries see one frame.
    """

    def __init__(self, event_bus: EventBus | None = None, dead_zone: float = 0.2):
        self.event_bus = event_bus
        self.dead_zone = dead_zone

        self._state = InputState()
        self._prev_actions: set[Action] = set()

        self._key_bindings = {a: list(keys) for a, keys in DEFAULT_KEY_BINDINGS.items()}
        self._reverse_key_bindings: dict[int, list[Action]] = {}
        self._rebuild_reverse_bindings()

        self._gamepad_bindings = {a: list(b) for a, b in DEFAULT_GAMEPAD_BINDINGS.items()}
        self._gamepad_axes = dict(DEFAULT_GAMEPAD_AXES)
        self._gamepads: dict[int, pygame.joystick.JoystickType] = {}

        pygame.joystick.init()
        self._refresh_gamepads()

    def _rebuild_reverse_bindings(self) -> None:
        self._reverse_key_bindings.clear()
        for action, keys in self._key_bindings.items():
            for key in keys:
                self._reverse_key_bindings.setdefault(key, []).append(action)

    def _refresh_gamepads(self) -> None:
        self._gamepads.clear()
        for i in range(pygame.joystick.get_count()):
            joy = pygame.joystick.Joystick(i)
            joy.init()
            self._gamepads[joy.get_instance_id()] = joy

    # Action queries

    def is_action_pressed(self, action: Action) -> bool:
        return action in self._state.actions_pressed or self._state.hat_action == action

    def is_action_just_pressed(self, action: Action) -> bool:
        return action in self._state.actions_just_pressed

    # Dialog input source

    def confirm_pressed(self) -> bool:
        return self.is_action_just_pressed(Action.CONFIRM)

    def cancel_pressed(self) -> bool:
        return self.is_action_just_pressed(Action.CANCEL)

    def navigate(self, axis: NavigationAxis) -> float:
        """
        Get the held navigation value on an axis.

        Digital input (keys, D-pad) wins over the stick and reports -1 or 1.
        Stick values inside the dead zone read as 0.
        """
        if axis == NavigationAxis.VERTICAL:
            positive, negative = Action.MENU_UP, Action.MENU_DOWN
        else:
            positive, negative = Action.MENU_RIGHT, Action.MENU_LEFT

        digital = 0.0
        if self.is_action_pressed(positive):
            digital += 1.0
        if self.is_action_pressed(negative):
            digital -= 1.0
        if digital:
            return digital

        axis_index, sign = self._gamepad_axes[axis]
        value = self._state.axis_values.get(axis_index, 0.0) * sign
        if abs(value) < self.dead_zone:
            return 0.0
        return max(-1.0, min(1.0, value))

    # Key binding management

    def bind_key(self, action: Action, key: int) -> None:
        keys = self._key_bindings.setdefault(action, [])
        if key not in keys:
            keys.append(key)
        self._rebuild_reverse_bindings()

    def unbind_key(self, action: Action, key: int) -> None:
        keys = self._key_bindings.get(action, [])
        if key in keys:
            keys.remove(key)
        self._rebuild_reverse_bindings()

    def get_bindings(self, action: Action) -> list[int]:
        return self._key_bindings.get(action, []).copy()

    # Frame update

    def process_event(self, event: pygame.event.Event) -> None:
        """Process a pygame event."""
        if event.type == pygame.KEYDOWN:
            self._on_key_down(event.key)

        elif event.type == pygame.KEYUP:
            self._on_key_up(event.key)

        elif event.type in (pygame.JOYDEVICEADDED, pygame.JOYDEVICEREMOVED):
            self._refresh_gamepads()

        elif event.type == pygame.JOYBUTTONDOWN:
            for action, buttons in self._gamepad_bindings.items():
                if event.button in buttons:
                    self._state.actions_pressed.add(action)

        elif event.type == pygame.JOYBUTTONUP:
            for action, buttons in self._gamepad_bindings.items():
                if event.button in buttons:
                    self._state.actions_pressed.discard(action)

        elif event.type == pygame.JOYAXISMOTION:
            self._state.axis_values[event.axis] = event.value

        elif event.type == pygame.JOYHATMOTION:
            self._state.hat_action = DEFAULT_GAMEPAD_HAT_BINDINGS.get(tuple(event.value))

    def update(self) -> None:
        """
        Update input state for new frame.

        Call this at the start of each fixed update.
        """
        current = set(self._state.actions_pressed)
        if self._state.hat_action is not None:
            current.add(self._state.hat_action)

        self._state.actions_just_pressed = current - self._prev_actions
        self._state.actions_just_released = self._prev_actions - current

        if self.event_bus:
            for action in self._state.actions_just_pressed:
                self.event_bus.publish(InputEvent.ACTION_PRESSED, action=action)
            for action in self._state.actions_just_released:
                self.event_bus.publish(InputEvent.ACTION_RELEASED, action=action)

        self._prev_actions = current

    def _on_key_down(self, key: int) -> None:
        self._state.keys_pressed.add(key)
        for action in self._reverse_key_bindings.get(key, []):
            self._state.actions_pressed.add(action)

    def _on_key_up(self, key: int) -> None:
        self._state.keys_pressed.discard(key)
        for action in self._reverse_key_bindings.get(key, []):
            # Keep the action held while another bound key is still down
            still_pressed = any(
                other != key and other in self._state.keys_pressed
                for other in self._key_bindings.get(action, [])
            )
            if not still_pressed:
                self._state.actions_pressed.discard(action)
