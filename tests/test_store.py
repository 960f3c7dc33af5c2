import json

from schedule_detector.models import ErrorKind, ProcessingError, ScheduleStore
from schedule_detector.store import (
    add_record,
    clear_store,
    empty_store,
    load_store,
    remove_record,
    save_store,
)
from tests.test_query import _grid, _record


def test_missing_file_is_empty_store(tmp_path):
    store = load_store(tmp_path / "none.json")
    assert isinstance(store, ScheduleStore)
    assert store.records == []


def test_round_trip_and_replace_by_person(tmp_path):
    path = tmp_path / "store.json"
    store = add_record(empty_store(), _record("Ana", _grid([True, False])))
    store = add_record(store, _record("Ben", _grid([True, True])))
    store = add_record(store, _record("Ana", _grid([False, False])))

    assert save_store(store, path) == path
    loaded = load_store(path)

    assert [r.person for r in loaded.records] == ["Ben", "Ana"]
    assert loaded.records[1].availability.days["Monday"] == [False, False]
    assert loaded == store


def test_remove_and_clear():
    store = add_record(empty_store(), _record("Ana", _grid([True])))
    store = add_record(store, _record("Ben", _grid([True])))

    assert [r.person for r in remove_record(store, "Ana").records] == ["Ben"]
    assert clear_store(store).records == []
    assert len(store.records) == 2


def test_unknown_version_is_rejected(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"version": 99, "records": []}))

    result = load_store(path)
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INPUT_INVALID
    assert "99" in result.message


def test_corrupt_file_is_reported(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")
    assert isinstance(load_store(path), ProcessingError)
