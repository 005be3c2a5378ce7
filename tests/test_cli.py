# tests/test_cli.py
"""End-to-end runs of the command line against export archives on disk."""
from __future__ import annotations

import csv
import io
import zipfile

import pytest

from notion_ical import config
from notion_ical.cli import build_parser, main, settings_from_args
from notion_ical.config import Settings


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "NOTION_API_KEY", "NOTION_DATABASE_ID", "NOTION_DATE_PROPERTY", "NOTION_HIDE_PROPERTY",
        "NOTION_TITLE_PROPERTY", "NOTION_EXPORT", "NOTION_EXPORT_TIMEZONE", "NOTION_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda *a, **k: False)


def _export(tmp_path, rows):
    text = io.StringIO()
    csv.writer(text).writerows(rows)
    path = tmp_path / "export.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("Events 0123456789abcdef0123456789abcdef.csv", text.getvalue().encode("utf-8-sig"))
    return path


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

def test_save_writes_calendar(tmp_path, capsys):
    archive = _export(tmp_path, [["Name", "Date"], ["Launch", "January 2, 2023 3:00 PM"]])
    out = tmp_path / "events.ics"

    assert main(["-e", str(archive), "-z", "Europe/Zurich", "save", "-o", str(out)]) == 0

    data = out.read_bytes()
    assert b"X-WR-CALNAME:Events" in data
    assert b"SUMMARY:Launch" in data
    assert b"DTSTART:20230102T140000Z" in data

    err = capsys.readouterr().err
    assert "[notion-ical][summary] source=export name='Events' events=1" in err


def test_save_to_stdout(tmp_path, capsysbinary):
    archive = _export(tmp_path, [["Name", "Date"], ["Launch", "2023-01-02"]])
    assert main(["--export", str(archive), "save", "--output", "-"]) == 0
    assert b"BEGIN:VCALENDAR" in capsysbinary.readouterr().out


def test_failure_returns_one_and_writes_nothing(tmp_path):
    archive = _export(tmp_path, [["Name", "Date"], ["ok", "2023-01-02"], ["bad", "someday"]])
    out = tmp_path / "events.ics"

    assert main(["-e", str(archive), "save", "-o", str(out)]) == 1
    assert not out.exists()


def test_no_source_configured_returns_one(tmp_path):
    assert main(["save", "-o", str(tmp_path / "x.ics")]) == 1


def test_both_sources_configured_returns_one(tmp_path):
    archive = _export(tmp_path, [["Name", "Date"], ["ok", "2023-01-02"]])
    assert main(["-e", str(archive), "-k", "secret", "save", "-o", str(tmp_path / "x.ics")]) == 1


def test_output_is_required():
    with pytest.raises(SystemExit) as exc:
        main(["save"])
    assert exc.value.code == 2


def test_flags_override_environment():
    base = Settings(api_key="env-key", database_id="env-db", timezone="UTC")
    args = build_parser().parse_args(["-d", "flag-db", "--timeout", "9", "save", "-o", "-"])
    s = settings_from_args(args, base)
    assert s.api_key == "env-key"
    assert s.database_id == "flag-db"
    assert s.timeout_seconds == 9
    assert s.timezone == "UTC"


def test_unwritable_output_returns_one(tmp_path):
    archive = _export(tmp_path, [["Name", "Date"], ["ok", "2023-01-02"]])
    assert main(["-e", str(archive), "save", "-o", str(tmp_path / "no" / "such" / "dir.ics")]) == 1
