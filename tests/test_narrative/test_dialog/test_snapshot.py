import json
import pytest
from narrative.dialog.models import DialogDefinition
from narrative.dialog.snapshot import DialogSnapshotStore


@pytest.fixture
def store(tmp_path):
    return DialogSnapshotStore(tmp_path / "DialogCache")


@pytest.fixture
def definition():
    return DialogDefinition.model_validate({
        "dialogName": "greeting",
        "dialogs": [{"id": 1, "text": "Hi", "options": [{"text": "Bye", "nextId": -1}]}],
    })


def test_save_and_load(store, definition):
    assert store.save("greeting", definition)
    assert store.exists("greeting")
    assert store.path_for("greeting").suffix == ".ekqolt"
    assert store.load("greeting") == definition


def test_load_missing(store):
    assert store.load("nothing") is None


def test_tampered_snapshot_rejected(store, definition):
    store.save("greeting", definition)
    path = store.path_for("greeting")
    payload = json.loads(path.read_text(encoding="utf-8"))
    payload["definition"]["dialogs"][0]["text"] = "Changed"
    path.write_text(json.dumps(payload), encoding="utf-8")

    assert store.load("greeting") is None


def test_corrupt_snapshot_rejected(store, definition):
    store.save("greeting", definition)
    store.path_for("greeting").write_text("{", encoding="utf-8")
    assert store.load("greeting") is None


def test_delete_and_list(store, definition):
    store.save("a", definition)
    store.save("b", definition)
    assert store.list_source_ids() == ["a", "b"]

    assert store.delete("a")
    assert not store.delete("a")
    assert store.list_source_ids() == ["b"]


def test_extension_without_dot(tmp_path, definition):
    store = DialogSnapshotStore(tmp_path, extension="snap")
    store.save("x", definition)
    assert (tmp_path / "x.snap").is_file()
