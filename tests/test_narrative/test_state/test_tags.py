import pytest
from narrative.state.tags import TagStore


def test_unknown_tag_reads_zero(tags):
    assert tags.get_value("missing") == 0
    assert tags.get_tag("missing") is None
    assert "missing" not in tags


def test_set_and_update(tags):
    tags.set_value("met_elder", 1, "Met the elder")
    tags.set_value("met_elder", 2)

    tag = tags.get_tag("met_elder")
    assert tag.value == 2
    assert tag.display_name == "Met the elder"
    assert len(tags) == 1


def test_increment_decrement(tags):
    assert tags.increment("coins", 5) == 5
    assert tags.decrement("coins") == 4
    assert tags.check_value("coins", 4)
    assert not tags.check_value("coins", 5)


def test_clear(tags):
    tags.set_value("a", 1)
    tags.clear()
    assert len(tags) == 0


def test_load_csv(tags, tmp_path):
    path = tmp_path / "tags.csv"
    path.write_text(
        "tagId,displayName,value\n"
        "met_elder,Met the elder,1\n"
        "bad_value,Broken,abc\n"
        "short,row\n"
        "\n"
        "gate_open,Gate,0\n",
        encoding="utf-8",
    )

    assert tags.load_csv(path) == 2
    assert tags.get_value("met_elder") == 1
    assert "gate_open" in tags
    assert "bad_value" not in tags
    assert sorted(t.tag_id for t in tags) == ["gate_open", "met_elder"]


def test_load_csv_missing_file(tags, tmp_path):
    assert tags.load_csv(tmp_path / "none.csv") == 0
