import pytest
from narrative.dialog.conditions import ConditionEvaluator
from narrative.dialog.events import DialogEvent, EventDispatcher
from narrative.dialog.models import LineEvent


def event(kind, param1="", param2="", **extra):
    return LineEvent.model_validate({"event_type": kind, "param1": param1, "param2": param2, **extra})


@pytest.fixture
def dispatcher(evaluator, tags, inventory, catalog, event_bus):
    return EventDispatcher(evaluator, tags, inventory, catalog, event_bus)


def test_update_tag(dispatcher, tags):
    assert dispatcher.execute_line_events([event("update_tag", "met", "2")]) == 1
    assert tags.get_value("met") == 2


def test_event_kind_is_case_insensitive(dispatcher, tags):
    dispatcher.execute_line_events([event("Update_Tag", "met", "1")])
    assert tags.get_value("met") == 1


def test_give_and_take_item(dispatcher, inventory, catalog):
    potion = catalog.get_item_by_id(1)

    assert dispatcher.execute_line_events([event("give_item", "1", "3")]) == 1
    assert inventory.get_owned_count(potion) == 3

    assert dispatcher.execute_line_events([event("take_item", "1", "2")]) == 1
    assert inventory.get_owned_count(potion) == 1


def test_take_more_than_owned_changes_nothing(dispatcher, inventory, catalog):
    potion = catalog.get_item_by_id(1)
    inventory.add_item(potion, 1)

    assert dispatcher.execute_line_events([event("take_item", "1", "5")]) == 0
    assert inventory.get_owned_count(potion) == 1


@pytest.mark.parametrize("line_event", [
    event("give_item", "1", "0"),
    event("give_item", "1", "-2"),
    event("give_item", "abc", "1"),
    event("give_item", "99", "1"),
    event("update_tag", "", "1"),
    event("update_tag", "met", "yes"),
    event("dance", "1", "1"),
    event(""),
])
def test_invalid_events_are_skipped(dispatcher, inventory, tags, line_event):
    assert dispatcher.execute_line_events([line_event]) == 0
    assert "met" not in tags
    assert all(slot is None for slot in inventory.slots)


def test_failing_event_does_not_stop_later_events(dispatcher, tags):
    events = [event("dance"), event("update_tag", "a", "1"), event("give_item", "1", "x"), event("update_tag", "b", "2")]
    assert dispatcher.execute_line_events(events) == 2
    assert tags.get_value("a") == 1
    assert tags.get_value("b") == 2


def test_events_run_in_authored_order(dispatcher, tags):
    dispatcher.execute_line_events([event("update_tag", "x", "1"), event("update_tag", "x", "5")])
    assert tags.get_value("x") == 5


def test_condition_gates_event(dispatcher, tags):
    gate = {"type": "TAG_CHECK", "param": "ready", "value": "1"}

    dispatcher.execute_line_events([event("update_tag", "x", "1", condition=gate)])
    assert tags.get_value("x") == 0

    dispatcher.execute_line_events([event("update_tag", "x", "1", condition=gate, useCondition=False)])
    assert tags.get_value("x") == 1

    tags.set_value("ready", 1)
    dispatcher.execute_line_events([event("update_tag", "x", "2", condition=gate, useCondition=True)])
    assert tags.get_value("x") == 2


def test_forwarded_effects_are_published(dispatcher, event_bus):
    requested = []
    event_bus.subscribe(DialogEvent.EFFECT_REQUESTED, lambda e: requested.append((e["kind"], e["param1"])), weak=False)

    count = dispatcher.execute_line_events([
        event("play_audio", "door_creak"),
        event("load_scene", "Village"),
        event("play_narration", "intro_voice"),
    ])

    assert count == 3
    assert requested == [("play_audio", "door_creak"), ("load_scene", "Village"), ("play_narration", "intro_voice")]


def test_forwarded_effect_without_bus_is_skipped(evaluator):
    dispatcher = EventDispatcher(evaluator)
    assert dispatcher.execute_line_events([event("play_audio", "x")]) == 0


def test_dispatched_events_are_published(dispatcher, event_bus):
    dispatched = []
    event_bus.subscribe(DialogEvent.EVENT_DISPATCHED, lambda e: dispatched.append(e["kind"]), weak=False)

    dispatcher.execute_line_events([event("update_tag", "a", "1"), event("dance")])
    assert dispatched == ["update_tag"]


def test_give_item_without_catalog_uses_numeric_id(inventory):
    dispatcher = EventDispatcher(ConditionEvaluator(), inventory=inventory)
    dispatcher.execute_line_events([event("give_item", "7", "2")])
    assert inventory.get_owned_count(7) == 2


def test_partial_give_counts_as_executed(dispatcher, inventory, catalog):
    key = catalog.get_item_by_id(2)
    # Four slots, one key per slot
    assert dispatcher.execute_line_events([event("give_item", "2", "6")]) == 1
    assert inventory.get_owned_count(key) == 4
