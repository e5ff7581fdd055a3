import pytest
import verify_dialogs


def test_verification_passes(write_dialog):
    write_dialog("en/intro.json", {"dialogs": [{"id": 1, "nextId": 2}, {"id": 2}]})
    write_dialog("ja/intro.json", {"dialogs": [{"id": 1}]})

    assert verify_dialogs.main([str(write_dialog.base), "--language", "ja"]) == 0


def test_missing_language_fails(write_dialog):
    write_dialog("en/intro.json", {"dialogs": [{"id": 1}]})
    assert verify_dialogs.main([str(write_dialog.base), "--language", "ja"]) == 1


def test_broken_transition_fails(write_dialog):
    write_dialog("en/intro.json", {"dialogs": [
        {"id": 1, "options": [{"text": "Go", "nextId": 7}]},
    ]})
    assert verify_dialogs.main([str(write_dialog.base)]) == 1


def test_empty_directory_fails(tmp_path):
    assert verify_dialogs.main([str(tmp_path)]) == 1
