import json

import pytest

from errors import CheckmateError, TransactionFailure
from snapshot import parse_snapshot
from stores.json_store import JsonFileStore

DAY = "2024-03-01"


def write_raw(store, data):
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump(data, f)


def read_raw(store):
    with open(store.path, encoding="utf-8") as f:
        return json.load(f)


def test_schema_creates_empty_document(json_store):
    assert read_raw(json_store) == {}
    assert json_store.name == "json"


def test_browser_era_file_is_normalized_on_read(json_store):
    write_raw(json_store, {
        "alice": {"password": "d", "checkins": {DAY: "fitness", "2024-03-02": ["paper", "quant"]}},
        "bob": {"password": "e", "checkins": {DAY: []}},
    })

    assert json_store.get_user_checkins("alice") == {DAY: ["fitness"], "2024-03-02": ["paper", "quant"]}
    assert json_store.get_checkins_for_date(DAY) == {"alice": ["fitness"]}
    assert json_store.export_snapshot() == {
        "alice": {"password": "d", "checkins": {DAY: ["fitness"], "2024-03-02": ["paper", "quant"]}},
        "bob": {"password": "e", "checkins": {}},
    }


def test_writes_persist_only_list_form(json_store):
    write_raw(json_store, {"alice": {"password": "d", "checkins": {DAY: "fitness"}}})

    json_store.add_checkin("alice", DAY, "paper")

    assert read_raw(json_store)["alice"]["checkins"] == {DAY: ["fitness", "paper"]}


def test_empty_day_is_not_left_behind_on_disk(json_store):
    json_store.create_user("alice", "d")
    json_store.add_checkin("alice", DAY, "quant")
    json_store.remove_checkin("alice", DAY, "quant")
    assert read_raw(json_store)["alice"]["checkins"] == {}


def test_failed_import_keeps_existing_file(json_store, monkeypatch):
    json_store.create_user("alice", "d")
    json_store.add_checkin("alice", DAY, "paper")
    before = read_raw(json_store)

    def disk_full(data):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(json_store, "_save", disk_full)
    with pytest.raises(TransactionFailure):
        json_store.import_snapshot(parse_snapshot({"bob": {"password": "b"}}))

    assert read_raw(json_store) == before


def test_no_temporary_files_left_after_save(json_store, tmp_path):
    json_store.create_user("alice", "d")
    json_store.add_checkin("alice", DAY, "paper")
    leftovers = [p.name for p in (tmp_path / "data").iterdir() if p.name.startswith(".checkmate-")]
    assert leftovers == []


def test_corrupt_file_is_reported(json_store):
    with open(json_store.path, "w", encoding="utf-8") as f:
        f.write("{not json")
    with pytest.raises(CheckmateError) as exc:
        json_store.list_users()
    assert exc.value.message == "Stored data could not be read"


def test_missing_file_reads_as_empty(tmp_path):
    store = JsonFileStore(str(tmp_path / "nowhere.json"))
    assert store.export_snapshot() == {}
    assert store.find_user("alice") is None
