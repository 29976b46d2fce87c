# backend/tests/test_report_cli.py

import csv

from honeyward.db import ACTIVITY, MemoryStore
from honeyward.report import main
from honeyward.services.exporter import LOG_FIELDS, export_logs


def _dump(tmp_path, recorder, sink):
    recorder.track_activity("login_failed", "s1")
    recorder.track_activity("login_successful", "s1")
    recorder.record("xss", "high", "<script>alert(1)</script>", "search_query", session_id="s1")
    recorder.flush()
    path = tmp_path / "records.jsonl"
    sink.dump(str(path))
    return path


def test_dump_and_load_round_trip(tmp_path, recorder, sink):
    path  = _dump(tmp_path, recorder, sink)
    store = MemoryStore.load(str(path))
    assert store.count(ACTIVITY) == 2
    assert store.find("incident")[0]["category"] == "xss"


def test_report_prints_summary(tmp_path, recorder, sink, capsys):
    path = _dump(tmp_path, recorder, sink)
    out_csv = tmp_path / "out" / "logs.csv"

    assert main([str(path), "--csv", str(out_csv)]) == 0

    out = capsys.readouterr().out
    assert "Security Analysis Report" in out
    assert "Success rate        : 50.00%" in out

    with open(out_csv, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["action"] for r in rows] == ["login_successful", "login_failed"]


def test_report_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.jsonl")]) == 1
    assert "Could not load" in capsys.readouterr().err


def test_export_writes_header_and_json_data(tmp_path):
    path = tmp_path / "logs.csv"
    rows = export_logs([{"action": "page_visit", "data": {"page": "/a"}}], str(path))
    assert rows == 1
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == LOG_FIELDS
        assert next(reader)["data"] == '{"page": "/a"}'
