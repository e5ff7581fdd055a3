"""
Runtime dialog state and the collaborator interfaces it is shown through.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Protocol, Sequence

from engine.core.actions import NavigationAxis
from narrative.dialog.graph import DisplayOption

# expressionId -> animation trigger on the speaker portrait
EXPRESSIONS: dict[int, str] = {
    1: "Happy",
    2: "Sad",
    3: "Angry",
    4: "Surprised",
    5: "Neutral",
}


class DialogState(Enum):
    """State of a dialog interaction."""
    INACTIVE = auto()
    DISPLAYING = auto()
    WAITING_INPUT = auto()
    CHOICE_OPEN = auto()
    ADVANCING = auto()


class PresentationSurface(Protocol):
    def show_text(self, text: str, cursor: Optional[str]) -> None: ...

    def show_options(self, labels: Sequence[str], selected_index: int) -> None: ...

    def hide_options(self) -> None: ...

    def set_expression(self, expression: str) -> None: ...

    def clear(self) -> None: ...


class InputSource(Protocol):
    def confirm_pressed(self) -> bool: ...

    def cancel_pressed(self) -> bool: ...

    def navigate(self, axis: NavigationAxis) -> float: ...


class LanguageSettings(Protocol):
    language_code: str

    def is_ready(self) -> bool: ...


@dataclass
class DialogContext:
    """
    Runtime state of the dialog a controller is presenting.

    Attributes:
        state: Current dialog state
        source_id: Id of the active dialog document
        language: Language the active definition was fetched in
        node_id: Current node
        displayed_text: Revealed text so far
        text_complete: The current line has been fully revealed
        cursor_visible: Blink phase of the terminal cursor
        options: Options as last shown, in display order
        selected_option: Highlighted display index
    """
    state: DialogState = DialogState.INACTIVE
    source_id: Optional[str] = None
    language: Optional[str] = None
    node_id: int = -1
    displayed_text: str = ""
    text_complete: bool = False
    cursor_visible: bool = False
    options: list[DisplayOption] = field(default_factory=list)
    selected_option: int = 0

    @property
    def is_active(self) -> bool:
        return self.state != DialogState.INACTIVE

    @property
    def option_labels(self) -> list[str]:
        return [o.label for o in self.options]

    def start(self, source_id: str, language: Optional[str]) -> None:
        self.reset()
        self.state = DialogState.ADVANCING
        self.source_id = source_id
        self.language = language

    def begin_line(self, node_id: int) -> None:
        self.state = DialogState.DISPLAYING
        self.node_id = node_id
        self.displayed_text = ""
        self.text_complete = False
        self.cursor_visible = False
        self.options = []
        self.selected_option = 0

    def open_options(self, options: list[DisplayOption]) -> None:
        self.options = options
        self.selected_option = min(self.selected_option, max(0, len(options) - 1))
        self.state = DialogState.CHOICE_OPEN

    def select_next(self) -> None:
        if self.options:
            self.selected_option = (self.selected_option + 1) % len(self.options)

    def select_prev(self) -> None:
        if self.options:
            self.selected_option = (self.selected_option - 1) % len(self.options)

    def reset(self) -> None:
        self.state = DialogState.INACTIVE
        self.source_id = None
        self.language = None
        self.node_id = -1
        self.displayed_text = ""
        self.text_complete = False
        self.cursor_visible = False
        self.options = []
        self.selected_option = 0
