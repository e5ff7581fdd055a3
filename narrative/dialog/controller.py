"""
Dialog presentation controller.

Plays a dialog definition line by line against a presentation surface.
One controller covers both interactive conversations and hands-free
narration; the difference is a PresentationPolicy value.

Usage:
    controller = DialogController(cache, graph, dispatcher, surface, input_handler)
    controller.start("intro")

    # once per fixed update
    input_handler.update()
    controller.update(dt)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from engine.core.actions import NavigationAxis
from engine.core.events import Event, EventBus
from engine.core.scheduler import Scheduler, Task, TaskGenerator, TaskState, WaitUntil
from narrative.dialog.cache import DialogCache
from narrative.dialog.config import DialogConfig
from narrative.dialog.context import (
    EXPRESSIONS,
    DialogContext,
    DialogState,
    InputSource,
    LanguageSettings,
    PresentationSurface,
)
from narrative.dialog.events import DialogEvent, EventDispatcher, LocalizationEvent
from narrative.dialog.graph import DialogGraph, is_terminal
from narrative.dialog.markup import RevealStep, TextRevealer, render_text
from narrative.dialog.models import DialogDefinition, DialogNode

NARRATION_SOURCE_ID = "__narration__"


@dataclass(frozen=True)
class PresentationPolicy:
    """
    How a controller moves through a dialog.

    Attributes:
        name: Label used in logs
        wait_for_confirm: Lines without options wait for confirm input
            instead of advancing after a delay
        manual_option_pick: Options are navigated and confirmed by the
            player; otherwise the first displayed option is taken
        allow_skip: Confirm or cancel during reveal finishes the line at once
    """
    name: str
    wait_for_confirm: bool
    manual_option_pick: bool
    allow_skip: bool


INTERACTIVE = PresentationPolicy("interactive", wait_for_confirm=True, manual_option_pick=True, allow_skip=True)
NARRATION = PresentationPolicy("narration", wait_for_confirm=False, manual_option_pick=False, allow_skip=False)


@dataclass
class InputFrame:
    """Input sampled once per update."""
    confirm: bool = False
    cancel: bool = False
    vertical: float = 0.0
    consumed: bool = False

    @property
    def confirm_available(self) -> bool:
        return self.confirm and not self.consumed


class DialogController:
    """
    Presents dialogs one line at a time.

    At most one line is in flight. Each line is a scheduler task that
    reveals the text, runs the line's events and then either opens the
    options, waits for confirm, or advances on its own. The cursor blink
    is a second task, stopped whenever the line is left or the dialog
    closes.
    """

    def __init__(
        self,
        cache: DialogCache,
        graph: DialogGraph,
        dispatcher: EventDispatcher,
        surface: PresentationSurface,
        input_source: Optional[InputSource] = None,
        policy: PresentationPolicy = INTERACTIVE,
        config: Optional[DialogConfig] = None,
        event_bus: Optional[EventBus] = None,
        settings: Optional[LanguageSettings] = None,
    ):
        self.cache = cache
        self.graph = graph
        self.dispatcher = dispatcher
        self.surface = surface
        self.input_source = input_source
        self.policy = policy
        self.config = config or DialogConfig()
        self.event_bus = event_bus
        self.settings = settings
        self.logger = logging.getLogger(f"{__name__}.{policy.name}")

        self.scheduler = Scheduler()
        self.context = DialogContext()

        blink_speed = self.config.cursor_blink_speed if self.config.cursor_blink_speed > 0 else 1.0
        self._revealer = TextRevealer(
            typing_speed=self.config.typing_speed,
            blink_speed=blink_speed,
            enable_text_control=self.config.enable_text_control,
            on_blink_change=self._on_blink_change,
        )

        self._definition: Optional[DialogDefinition] = None
        self._line_task: Optional[Task] = None
        self._blink_task: Optional[Task] = None
        self._next_id: Optional[int] = None
        self._auto_hide_delay: Optional[float] = None
        self._frame = InputFrame()
        self._nav_cooldown = 0.0
        self._localization_ready = False

        if settings is not None:
            self.scheduler.start(self._await_localization(), name="localization-wait")

    # Properties

    @property
    def definition(self) -> Optional[DialogDefinition]:
        return self._definition

    @property
    def is_active(self) -> bool:
        return self.context.is_active

    @property
    def is_line_in_flight(self) -> bool:
        return self._line_task is not None and self._line_task.is_running

    @property
    def is_blinking(self) -> bool:
        return self._blink_task is not None and self._blink_task.is_running

    @property
    def is_showing(self) -> bool:
        """True while a narration line from show_narration() is on screen."""
        return self.is_active and self.context.source_id == NARRATION_SOURCE_ID

    @property
    def localization_ready(self) -> bool:
        return self._localization_ready

    # Starting dialogs

    def start(self, source_id: str, language: Optional[str] = None) -> bool:
        """
        Start the dialog with the given source id.

        Returns False when the definition cannot be loaded, has no start
        node, or a line is still being presented.
        """
        if self.is_line_in_flight:
            self.logger.warning(f"Cannot start '{source_id}' while a line is being presented")
            return False

        result = self.cache.get_definition(source_id, language)
        if not result.success:
            self.logger.error(f"Cannot start dialog '{source_id}': definition not loaded")
            return False

        return self._begin(source_id, result.language, result.definition)

    def start_definition(self, definition: DialogDefinition, source_id: str = "") -> bool:
        """Play a definition that did not come from the cache."""
        if self.is_line_in_flight:
            self.logger.warning("Cannot start a definition while a line is being presented")
            return False
        return self._begin(source_id or definition.name, None, definition)

    def show_narration(self, text: str, auto_hide_delay: float = -1) -> bool:
        """
        Present a single line of text.

        With ``auto_hide_delay`` >= 0 the line closes that many seconds
        after it is revealed, whatever the policy.
        """
        definition = DialogDefinition.model_validate({
            "dialogName": NARRATION_SOURCE_ID,
            "defaultInitialDialogId": 1,
            "dialogs": [{"id": 1, "nextId": -1, "text": text}],
        })
        if not self.start_definition(definition, NARRATION_SOURCE_ID):
            return False
        self._auto_hide_delay = auto_hide_delay if auto_hide_delay >= 0 else None
        return True

    def hide_narration(self) -> None:
        self.close()

    def _begin(self, source_id: str, language: Optional[str], definition: DialogDefinition) -> bool:
        if self.is_active:
            self.close()

        self._definition = definition
        self._auto_hide_delay = None
        self.context.start(source_id, language)
        self._publish(DialogEvent.DIALOG_STARTED, source_id=source_id, language=language)

        initial = self.graph.resolve_initial(definition)
        self.logger.debug(f"Dialog '{source_id}' starts at node {initial}")
        if is_terminal(initial):
            self.close()
            return False
        return self.show_line(initial)

    # Lines

    def show_line(self, node_id: int) -> bool:
        """
        Present a node. Rejected while another line is in flight.
        """
        if self.is_line_in_flight:
            self.logger.warning(f"Rejected line {node_id}: a line is already being presented")
            return False
        if self._definition is None:
            self.logger.error(f"Cannot show line {node_id}: no dialog loaded")
            return False

        node = self._definition.get_node(node_id)
        if node is None:
            self.logger.error(f"Dialog node {node_id} not found in '{self.context.source_id}'")
            self.close()
            return False

        self._stop_blink()
        self._next_id = None
        self.context.begin_line(node.id)
        self.surface.hide_options()

        # Reset line state now so a skip pressed before the first step still applies
        steps = self._revealer.reveal(node.text)
        self._line_task = self.scheduler.start(self._present_line(node, steps), name=f"line-{node.id}")
        self._line_task.add_done_callback(self._on_line_done)
        self._publish(DialogEvent.LINE_STARTED, source_id=self.context.source_id, node_id=node.id)
        return True

    def skip(self) -> None:
        """Finish revealing the current line without pauses."""
        if self.context.state == DialogState.DISPLAYING:
            self._revealer.skip()

    def _present_line(self, node: DialogNode, steps: Iterator[RevealStep]) -> TaskGenerator:
        expression = EXPRESSIONS.get(node.expression_id)
        if expression:
            self.surface.set_expression(expression)

        if node.text:
            self._start_blink()
            for step in steps:
                self.context.displayed_text = step.text
                self._render_text()
                if step.delay > 0:
                    yield step.delay
        else:
            self._render_text()

        self.context.text_complete = True
        self._publish(DialogEvent.LINE_REVEALED, node_id=node.id, text=self.context.displayed_text)

        # A language switch during the reveal swaps the definition underneath
        current = self._current_node() or node
        self.dispatcher.execute_line_events(current.events)
        if not self.context.is_active:
            # An event handler closed the dialog
            return

        if self._revealer.skipping and self.config.skip_settle_delay > 0:
            yield self.config.skip_settle_delay

        current = self._current_node() or current
        options = self.graph.build_display_options(current)
        if options:
            self._open_options(options)
            if not self.policy.manual_option_pick:
                first = options[0]
                self._publish(DialogEvent.OPTION_SELECTED, node_id=current.id, index=0, label=first.label)
                self._next_id = self.graph.resolve_option_target(
                    self._definition, current.id, 0, first.option.next_id
                )
            return

        if self._auto_hide_delay is not None:
            yield self._auto_hide_delay
        elif self.policy.wait_for_confirm:
            self.context.state = DialogState.WAITING_INPUT
            yield WaitUntil(lambda: self._frame.confirm_available)
            self._frame.consumed = True
        else:
            yield self.config.auto_advance_delay

        self._next_id = self.graph.resolve_next(self._definition, current.id)

    def _on_line_done(self, task: Task) -> None:
        if task is not self._line_task:
            return
        if task.state != TaskState.FINISHED:
            if task.state == TaskState.FAILED:
                self.close()
            return

        next_id, self._next_id = self._next_id, None
        if next_id is None:
            return
        if is_terminal(next_id):
            self.close()
        else:
            self.context.state = DialogState.ADVANCING
            self.show_line(next_id)

    def _current_node(self) -> Optional[DialogNode]:
        if self._definition is None:
            return None
        return self._definition.get_node(self.context.node_id)

    # Options

    def _open_options(self, options) -> None:
        self.context.open_options(options)
        self.surface.show_options(self.context.option_labels, self.context.selected_option)
        self._publish(DialogEvent.OPTIONS_SHOWN, node_id=self.context.node_id, labels=self.context.option_labels)

    def select_option(self, display_index: int) -> bool:
        """
        Choose the option at ``display_index`` of the displayed list.

        Disabled fail-text entries cannot be chosen. The target is resolved
        from the definition as it stands now.
        """
        ctx = self.context
        if ctx.state != DialogState.CHOICE_OPEN or self._definition is None:
            return False
        if not 0 <= display_index < len(ctx.options):
            self.logger.warning(f"Option index {display_index} out of range")
            return False

        shown = ctx.options[display_index]
        if shown.disabled:
            self.logger.info(f"Option '{shown.label}' is not available")
            return False

        target = self.graph.resolve_option_target(
            self._definition, ctx.node_id, display_index, shown.option.next_id
        )
        self._publish(DialogEvent.OPTION_SELECTED, node_id=ctx.node_id, index=display_index, label=shown.label)
        self.surface.hide_options()

        if is_terminal(target):
            self.close()
        else:
            ctx.state = DialogState.ADVANCING
            self.show_line(target)
        return True

    # Frame update

    def update(self, dt: float) -> None:
        """Sample input once, react to it, then advance scheduled steps."""
        self._sample_input()
        if self.context.is_active:
            self._handle_input(dt)
        self.scheduler.update(dt)

    def _sample_input(self) -> None:
        if self.input_source is None:
            self._frame = InputFrame()
            return
        self._frame = InputFrame(
            confirm=bool(self.input_source.confirm_pressed()),
            cancel=bool(self.input_source.cancel_pressed()),
            vertical=float(self.input_source.navigate(NavigationAxis.VERTICAL)),
        )

    def _handle_input(self, dt: float) -> None:
        ctx = self.context
        frame = self._frame

        if ctx.state == DialogState.DISPLAYING:
            if self.policy.allow_skip and (frame.confirm or frame.cancel):
                self._revealer.skip()
                frame.consumed = True
            return

        if ctx.state != DialogState.CHOICE_OPEN or not self.policy.manual_option_pick:
            return

        self._nav_cooldown = max(0.0, self._nav_cooldown - dt)
        if self._nav_cooldown <= 0.0:
            threshold = self.config.navigation_threshold
            moved = False
            if frame.vertical > threshold:
                ctx.select_prev()
                moved = True
            elif frame.vertical < -threshold:
                ctx.select_next()
                moved = True
            if moved:
                self._nav_cooldown = self.config.navigation_cooldown
                self.surface.show_options(ctx.option_labels, ctx.selected_option)

        if frame.confirm_available:
            frame.consumed = True
            self.select_option(ctx.selected_option)

    # Cursor

    def _render_text(self) -> None:
        cursor = None
        if self.config.enable_terminal_cursor and self.context.cursor_visible:
            cursor = self.config.cursor_character
        self.surface.show_text(self.context.displayed_text, cursor)

    def _start_blink(self) -> None:
        self._stop_blink()
        if not self.config.enable_terminal_cursor:
            return
        self._blink_task = self.scheduler.start(
            self._blink_loop(self._revealer.blink_period), name="cursor-blink"
        )

    def _stop_blink(self) -> None:
        if self._blink_task is not None:
            self._blink_task.stop()
            self._blink_task = None
        self.context.cursor_visible = False

    def _blink_loop(self, period: float) -> TaskGenerator:
        while True:
            self.context.cursor_visible = not self.context.cursor_visible
            self._render_text()
            yield period

    def _on_blink_change(self, period: float) -> None:
        if self.is_blinking:
            self._start_blink()

    # Closing

    def close(self) -> None:
        """End the dialog, stopping every task it owns."""
        if not self.context.is_active and not self.is_line_in_flight:
            return

        source_id = self.context.source_id
        if self._line_task is not None:
            self._line_task.stop()
            self._line_task = None
        self._stop_blink()

        self._definition = None
        self._next_id = None
        self._auto_hide_delay = None
        self.context.reset()
        self.surface.hide_options()
        self.surface.clear()
        self._publish(DialogEvent.DIALOG_ENDED, source_id=source_id)

    # Localization

    def _await_localization(self) -> TaskGenerator:
        waited = 0.0
        while not self.settings.is_ready():
            if waited >= self.config.localization_timeout:
                self.logger.warning(
                    f"Localization not ready after {waited:.1f}s, "
                    f"continuing with '{self.cache.current_language}'"
                )
                return
            yield self.config.localization_poll_interval
            waited += self.config.localization_poll_interval

        self._localization_ready = True
        code = self.settings.language_code
        if code and code != self.cache.current_language:
            self.change_language(code)
        if self.event_bus is not None:
            self.event_bus.subscribe(LocalizationEvent.LANGUAGE_CHANGED, self._on_language_event)

    def _on_language_event(self, event: Event) -> None:
        self.change_language(event.get("language"))

    def change_language(self, code: Optional[str]) -> bool:
        """
        Switch the cache language and refresh the dialog on screen.
        """
        if not self.cache.set_language_or_fallback(code):
            self.logger.error(f"No usable language for '{code}'")
            return False
        if self.context.is_active:
            self._refresh()
        return True

    def _refresh(self) -> None:
        ctx = self.context
        if ctx.source_id is None or ctx.source_id == NARRATION_SOURCE_ID:
            return

        result = self.cache.get_definition(ctx.source_id)
        if not result.success:
            self.logger.error(f"Could not reload '{ctx.source_id}' for '{self.cache.current_language}'")
            return
        self._definition = result.definition
        ctx.language = result.language

        if not ctx.text_complete:
            return
        node = self._current_node()
        if node is None:
            return

        ctx.displayed_text = render_text(node.text, self.config.enable_text_control)
        self._render_text()
        if ctx.state != DialogState.CHOICE_OPEN:
            return

        # Options are rebuilt from the new definition, never carried over
        options = self.graph.build_display_options(node)
        if options:
            self._open_options(options)
            return

        self.logger.warning(f"Node {node.id} has no options in '{ctx.language}', advancing")
        self.surface.hide_options()
        next_id = self.graph.resolve_next(self._definition, node.id)
        if is_terminal(next_id):
            self.close()
        else:
            ctx.state = DialogState.ADVANCING
            self.show_line(next_id)

    def _publish(self, event_type: DialogEvent, **data) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, **data)
