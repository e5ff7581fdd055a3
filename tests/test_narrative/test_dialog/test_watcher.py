import pytest
from watchdog.events import FileModifiedEvent, DirModifiedEvent, FileMovedEvent
from narrative.dialog.cache import DialogCache
from narrative.dialog.watcher import DialogFileHandler, DialogWatcher


def doc(text):
    return {"dialogs": [{"id": 1, "text": text}]}


@pytest.mark.parametrize("path,expected", [
    ("Dialogs/en/intro.json", True),
    ("Dialogs/en/INTRO.JSON", True),
    ("Dialogs/en/intro.json~", False),
    ("Dialogs/en/.intro.json", False),
    ("Dialogs/en/~intro.json", False),
    ("Dialogs/en/notes.txt", False),
])
def test_should_process(path, expected):
    handler = DialogFileHandler(lambda p: None)
    assert handler.should_process(path) is expected


def test_handler_debounces_repeated_events(tmp_path):
    seen = []
    handler = DialogFileHandler(seen.append, debounce_seconds=10.0)
    path = str(tmp_path / "intro.json")

    handler.on_any_event(FileModifiedEvent(path))
    handler.on_any_event(FileModifiedEvent(path))

    assert len(seen) == 1


def test_handler_ignores_directories(tmp_path):
    seen = []
    handler = DialogFileHandler(seen.append)
    handler.on_any_event(DirModifiedEvent(str(tmp_path)))
    assert seen == []


def test_handler_uses_move_destination(tmp_path):
    seen = []
    handler = DialogFileHandler(seen.append, debounce_seconds=0.0)
    handler.on_any_event(FileMovedEvent(str(tmp_path / "intro.tmp"), str(tmp_path / "intro.json")))
    assert [p.name for p in seen] == ["intro.json"]


def test_poll_reloads_languages(write_dialog):
    path = write_dialog("en/intro.json", doc("Hello"))
    cache = DialogCache(write_dialog.base)
    cache.load_all_languages()

    reloads = []
    watcher = DialogWatcher(cache)
    watcher.add_callback(reloads.append)
    assert not watcher.poll()

    write_dialog("en/intro.json", doc("Hello again"))
    watcher.notify(path)
    assert watcher.has_pending
    assert watcher.poll()

    assert not watcher.has_pending
    assert reloads == [1]
    assert cache.get_localized("intro").nodes[0].text == "Hello again"


def test_poll_clears_changed_legacy_entry(write_dialog):
    path = write_dialog("greeting.json", doc("Hi"))
    cache = DialogCache(write_dialog.base)
    cache.get_definition("greeting")
    assert cache.is_cached("greeting")

    watcher = DialogWatcher(cache)
    watcher.notify(path)
    watcher.poll()

    assert not cache.is_cached("greeting")


def test_start_requires_directory(tmp_path):
    watcher = DialogWatcher(DialogCache(tmp_path / "missing"))
    assert not watcher.start()
    assert not watcher.is_running


def test_start_and_stop(write_dialog):
    cache = DialogCache(write_dialog.base)
    with DialogWatcher(cache) as watcher:
        assert watcher.is_running
    assert not watcher.is_running
