import json

import pytest

from auction.services.export import export_items, write_export


@pytest.fixture
def populated(service):
    service.create_item("owner", 1, "sold", True)
    service.bid_item("x", 1, 25)
    service.stop_item("owner", 1)
    service.create_item("owner", 2, "open", True)
    return service.store


def test_export_items_adds_highest_bid(populated):
    records = export_items(populated)

    assert [record["id"] for record in records] == [1, 2]
    assert records[0]["highest_bid"] == 25
    assert records[0]["new_owner"] == "x"
    assert records[1]["highest_bid"] is None


def test_export_closed_only(populated):
    records = export_items(populated, closed_only=True)

    assert [record["id"] for record in records] == [1]


def test_write_ndjson(populated, tmp_path):
    path = tmp_path / "out" / "items.ndjson"

    written = write_export(export_items(populated), path, "ndjson")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert written == 2
    assert [json.loads(line)["id"] for line in lines] == [1, 2]


def test_write_json(populated, tmp_path):
    path = tmp_path / "items.json"

    write_export(export_items(populated), path)

    assert len(json.loads(path.read_text(encoding="utf-8"))) == 2


def test_unknown_format_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        write_export([], tmp_path / "items.csv", "csv")
