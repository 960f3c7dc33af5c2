import json

import cv2
import numpy as np
from click.testing import CliRunner

from schedule_detector.cli import main
from schedule_detector.store import add_record, empty_store, load_store, save_store
from tests.synthetic import render_schedule, standard_week
from tests.test_query import _grid, _record


def _write_png(path, rgb: np.ndarray) -> None:
    assert cv2.imwrite(str(path), cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))


def test_times_lists_start_options():
    result = CliRunner().invoke(main, ["times"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "6:00 AM"
    assert lines[-1] == "5:30 PM"


def test_analyze_writes_grid_and_store(tmp_path):
    image = tmp_path / "week.png"
    _write_png(image, render_schedule(standard_week()))
    out = tmp_path / "week.json"
    store = tmp_path / "store.json"

    result = CliRunner().invoke(
        main,
        [
            "analyze", str(image),
            "-o", str(out),
            "--start-time", "9:00 AM",
            "--seed", "7",
            "--store", str(store),
            "--person", "Ana",
        ],
    )
    assert result.exit_code == 0, result.output

    payload = json.loads(out.read_text())
    assert payload["availability"]["anchorStartTime"] == "9:00 AM"
    assert payload["availability"]["days"]["Tuesday"][3] is False
    assert payload["availability"]["workDays"]["Friday"][5] is True
    assert len(payload["nav"]["dividerXs"]) == 6

    query = CliRunner().invoke(
        main, ["query", str(store), "--day", "Tuesday", "--start", "9:00 AM", "--end", "11:00 AM"]
    )
    assert query.exit_code == 0, query.output
    assert "Ana: 9:00 AM - 10:30 AM, 11:00 AM - 11:30 AM" in query.output


def test_analyze_reports_unusable_image(tmp_path):
    image = tmp_path / "blank.png"
    _write_png(image, np.full((200, 300, 3), 255, dtype=np.uint8))

    result = CliRunner().invoke(main, ["analyze", str(image), "-o", str(tmp_path / "x.json")])
    assert result.exit_code == 1
    assert "could not analyze this image" in result.output


def test_analyze_batch_needs_output_dir(tmp_path):
    a = tmp_path / "a.png"
    b = tmp_path / "b.png"
    rgb = render_schedule(standard_week())
    _write_png(a, rgb)
    _write_png(b, rgb)

    bad = CliRunner().invoke(main, ["analyze", str(a), str(b), "-o", str(tmp_path / "o.json")])
    assert bad.exit_code == 1

    out_dir = tmp_path / "out"
    ok = CliRunner().invoke(
        main, ["analyze", str(a), str(b), "--output-dir", str(out_dir), "--seed", "1"]
    )
    assert ok.exit_code == 0, ok.output
    assert sorted(p.name for p in out_dir.iterdir()) == ["a.json", "b.json"]
    assert "2 success, 0 failed" in ok.output


def test_person_requires_store(tmp_path):
    image = tmp_path / "week.png"
    _write_png(image, render_schedule(standard_week()))
    result = CliRunner().invoke(main, ["analyze", str(image), "--person", "Ana"])
    assert result.exit_code == 1


def _saved_store(path, *people):
    store = empty_store()
    for person in people:
        store = add_record(store, _record(person, _grid([True, False, True])))
    assert save_store(store, path) == path
    return path


def test_people_lists_saved_schedules(tmp_path):
    store = _saved_store(tmp_path / "store.json", "Ana", "Ben")

    result = CliRunner().invoke(main, ["people", str(store)])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("1. Ana (3 slots, saved ")
    assert lines[1].startswith("2. Ben (3 slots, saved ")


def test_people_on_missing_store(tmp_path):
    result = CliRunner().invoke(main, ["people", str(tmp_path / "none.json")])
    assert result.exit_code == 0
    assert "No saved schedules." in result.output


def test_remove_deletes_one_person(tmp_path):
    store = _saved_store(tmp_path / "store.json", "Ana", "Ben")

    result = CliRunner().invoke(main, ["remove", str(store), "--person", "Ana"])
    assert result.exit_code == 0, result.output
    assert [r.person for r in load_store(store).records] == ["Ben"]


def test_remove_unknown_person_fails(tmp_path):
    store = _saved_store(tmp_path / "store.json", "Ana")

    result = CliRunner().invoke(main, ["remove", str(store), "--person", "Zoe"])
    assert result.exit_code == 1
    assert [r.person for r in load_store(store).records] == ["Ana"]


def test_clear_empties_store(tmp_path):
    store = _saved_store(tmp_path / "store.json", "Ana", "Ben")

    aborted = CliRunner().invoke(main, ["clear", str(store)], input="n\n")
    assert aborted.exit_code == 1
    assert len(load_store(store).records) == 2

    result = CliRunner().invoke(main, ["clear", str(store), "--yes"])
    assert result.exit_code == 0, result.output
    assert "Cleared 2 schedules" in result.output
    assert load_store(store).records == []


def test_store_commands_reject_corrupt_file(tmp_path):
    store = tmp_path / "store.json"
    store.write_text("{not json")

    for args in (["people", str(store)], ["remove", str(store), "--person", "Ana"], ["clear", str(store), "--yes"]):
        result = CliRunner().invoke(main, args)
        assert result.exit_code == 1
