import json
import pytest
from pydantic import ValidationError
from narrative.dialog.models import DialogDefinition, LineEvent, Condition
from narrative.dialog.parser import DialogParser, DialogParseError


DOCUMENT = {
    "dialogName": "intro",
    "version": 2,
    "initialDialogConditions": [
        {"condition": {"type": "TAG_CHECK", "param": "met", "value": "1"}, "dialogId": 3},
    ],
    "defaultInitialDialogId": 1,
    "dialogs": [
        {
            "id": 1,
            "nextId": 2,
            "expressionId": 1,
            "text": "Hello\\stop{0.5} traveller.",
            "events": [
                {"event_type": "update_tag", "param1": "met", "param2": 1},
            ],
        },
        {
            "id": 2,
            "text": None,
            "options": [
                {"text": "Yes", "nextId": 3},
                {
                    "text": "Open the gate",
                    "nextId": 4,
                    "condition": {"type": "ITEM_OWNED", "param": "2", "value": "1", "operator": ">="},
                    "failText": "Needs a key",
                    "conditionalNextDialogs": [
                        {"condition": None, "nextId": 5},
                    ],
                },
            ],
        },
        {"id": 3, "text": "Bye."},
    ],
}


@pytest.fixture
def parser():
    return DialogParser()


def test_parse_document(parser):
    definition = parser.parse_data(DOCUMENT)

    assert definition.name == "intro"
    assert definition.version == "2"
    assert definition.default_initial_id == 1
    assert definition.initial_conditions[0].dialog_id == 3
    assert [n.id for n in definition.nodes] == [1, 2, 3]

    first = definition.get_node(1)
    assert first.next_id == 2
    assert first.expression_id == 1
    assert first.events[0].kind == "update_tag"
    assert first.events[0].param2 == "1"

    second = definition.get_node(2)
    assert second.text == ""
    assert second.next_id == -1
    assert second.has_options
    assert second.options[1].fail_text == "Needs a key"
    assert second.options[1].conditional_next[0].next_id == 5
    assert second.options[1].condition.operator == ">="

    assert definition.get_node(42) is None


def test_definitions_are_frozen(parser):
    definition = parser.parse_data(DOCUMENT)
    with pytest.raises(ValidationError):
        definition.get_node(1).text = "changed"


def test_to_document_round_trips_through_parser(parser):
    definition = parser.parse_data(DOCUMENT)
    assert parser.parse_data(definition.to_document()) == definition


def test_missing_dialogs_is_schema_error(parser):
    with pytest.raises(DialogParseError) as excinfo:
        parser.parse_data({"dialogName": "broken"})
    assert "dialogs" in excinfo.value.message


def test_node_without_id_is_schema_error(parser):
    with pytest.raises(DialogParseError):
        parser.parse_data({"dialogs": [{"text": "no id"}]})


def test_wrong_type_reports_location(parser):
    with pytest.raises(DialogParseError) as excinfo:
        parser.parse_data({"dialogs": [{"id": "one"}]})
    assert "dialogs/0/id" in excinfo.value.message


def test_duplicate_node_ids_rejected(parser):
    with pytest.raises(DialogParseError):
        parser.parse_data({"dialogs": [{"id": 1}, {"id": 1}]})


def test_empty_and_malformed_strings(parser):
    with pytest.raises(DialogParseError):
        parser.parse_string("   ")
    with pytest.raises(DialogParseError):
        parser.parse_string("{not json")


def test_parse_file_with_bom(parser, tmp_path):
    path = tmp_path / "intro.json"
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps(DOCUMENT).encode("utf-8"))
    assert parser.parse_file(path).name == "intro"


def test_load_file_returns_none_on_error(parser, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[]", encoding="utf-8")
    assert parser.load_file(path) is None
    assert parser.load_file(tmp_path / "missing.json") is None


def test_event_gate():
    condition = Condition(type="TAG_CHECK", param="x", value="1")

    assert LineEvent(event_type="update_tag", condition=condition).gate == condition
    assert LineEvent(event_type="update_tag", useCondition=True, condition=condition).gate == condition
    assert LineEvent(event_type="update_tag", useCondition=False, condition=condition).gate is None
    assert LineEvent(event_type="update_tag").gate is None


def test_unknown_fields_ignored():
    definition = DialogDefinition.model_validate({"dialogs": [{"id": 1, "portrait": "x"}], "author": "me"})
    assert definition.nodes[0].id == 1
