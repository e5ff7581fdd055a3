import os
import sys
import json
import pytest
from unittest.mock import MagicMock, patch

# Ensure engine modules can be imported
sys.path.append(os.getcwd())


@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests so no joystick or display is touched.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.joystick'), \
         patch('pygame.key'):

        import pygame
        pygame.joystick.get_count = MagicMock(return_value=0)
        pygame.time.get_ticks = MagicMock(return_value=0)

        yield


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def scheduler():
    from engine.core.scheduler import Scheduler
    return Scheduler()


@pytest.fixture
def tags():
    from narrative.state.tags import TagStore
    return TagStore()


@pytest.fixture
def catalog():
    from narrative.state.inventory import Item, ItemCatalog
    return ItemCatalog([
        Item(id=1, name="Potion", max_stack=10),
        Item(id=2, name="Key", max_stack=1),
    ])


@pytest.fixture
def inventory():
    from narrative.state.inventory import Inventory
    return Inventory(max_slots=4)


@pytest.fixture
def evaluator(tags, inventory, catalog):
    from narrative.dialog.conditions import ConditionEvaluator
    return ConditionEvaluator(tags, inventory, catalog)


@pytest.fixture
def graph(evaluator):
    from narrative.dialog.graph import DialogGraph
    return DialogGraph(evaluator)


@pytest.fixture
def write_dialog(tmp_path):
    """Write a dialog document under tmp_path/Dialogs and return its path."""
    base = tmp_path / "Dialogs"
    base.mkdir()

    def _write(relative, document):
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(document, str):
            path.write_text(document, encoding="utf-8")
        else:
            path.write_text(json.dumps(document), encoding="utf-8")
        return path

    _write.base = base
    return _write


class RecordingSurface:
    """Presentation surface that remembers what it was asked to show."""

    def __init__(self):
        self.text = ""
        self.cursor = None
        self.options = []
        self.selected = 0
        self.options_visible = False
        self.expressions = []
        self.cleared = 0

    def show_text(self, text, cursor):
        self.text = text
        self.cursor = cursor

    def show_options(self, labels, selected_index):
        self.options = list(labels)
        self.selected = selected_index
        self.options_visible = True

    def hide_options(self):
        self.options_visible = False

    def set_expression(self, expression):
        self.expressions.append(expression)

    def clear(self):
        self.text = ""
        self.cursor = None
        self.cleared += 1


class ScriptedInput:
    """Input source whose values are set by the test for the next update."""

    def __init__(self):
        self.confirm = False
        self.cancel = False
        self.vertical = 0.0

    def confirm_pressed(self):
        return self.confirm

    def cancel_pressed(self):
        return self.cancel

    def navigate(self, axis):
        from engine.core.actions import NavigationAxis
        return self.vertical if axis == NavigationAxis.VERTICAL else 0.0

    def press(self, confirm=False, cancel=False, vertical=0.0):
        self.confirm = confirm
        self.cancel = cancel
        self.vertical = vertical

    def release(self):
        self.press()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def input_source():
    return ScriptedInput()
