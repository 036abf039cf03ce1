import csv
import json

from orbit_lock.core.logging_utils import RunLogger, format_csv_value
from orbit_lock.core.orbit import OrbitEvent


def read_rows(path):
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def test_run_ids_are_unique(tmp_path):
    first = RunLogger(tmp_path, run_id="run")
    second = RunLogger(tmp_path, run_id="run")
    assert first.run_id == "run"
    assert second.run_id == "run_01"
    assert (tmp_path / "last_run.txt").read_text(encoding="utf-8") == "run_01"
    first.close()
    second.close()


def test_headers_and_buffered_rows(tmp_path):
    logger = RunLogger(tmp_path, run_id="run", timeseries_flush_threshold=1000)
    logger.log_ts([0.5, 1, 2, 3, 4, 5, 0.1, "free", 100.0, 0.0, 0.0, 1.0])
    assert read_rows(logger.timeseries_path) == []
    logger.close()

    rows = read_rows(logger.timeseries_path)
    assert list(rows[0].keys()) == RunLogger.TIMESERIES_HEADER
    assert rows[0]["t"] == "0.5"
    assert rows[0]["mode"] == "free"


def test_event_details_survive_csv_quoting(tmp_path):
    with RunLogger(tmp_path, run_id="run") as logger:
        logger.log_orbit_event(
            1.25,
            OrbitEvent("break", "Planet", 50.0, 6.0, {"momentum": 1.2, "note": 'say "hi"'}),
        )
        logger.log_orbit_event(2.0, OrbitEvent("fuel_empty", None, 0.0, 3.0))
    assert logger.closed

    rows = read_rows(logger.events_path)
    assert [row["type"] for row in rows] == ["break", "fuel_empty"]
    assert json.loads(rows[0]["details"]) == {"momentum": 1.2, "note": 'say "hi"'}
    assert rows[1]["body"] == ""
    assert rows[1]["details"] == "{}"


def test_bools_and_close_is_idempotent(tmp_path):
    logger = RunLogger(tmp_path, run_id="run")
    logger.log_event([0.0, "lock", True, False, 1, ""])
    logger.close()
    logger.close()
    row = read_rows(logger.events_path)[0]
    assert row["body"] == "1"
    assert row["radius"] == "0"


def test_write_meta(tmp_path):
    logger = RunLogger(tmp_path, run_id="run")
    logger.write_meta({"b": 1, "a": [1, 2]})
    logger.close()
    assert json.loads(logger.meta_path.read_text(encoding="utf-8")) == {"a": [1, 2], "b": 1}


def test_format_csv_value():
    assert format_csv_value(True) == "1"
    assert format_csv_value(3) == "3"
    assert format_csv_value(0.1 + 0.2) == "0.3"
    assert format_csv_value("a,b") == '"a,b"'
    assert format_csv_value('x"y') == '"x""y"'
