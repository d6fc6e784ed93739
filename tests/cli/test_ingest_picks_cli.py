import json

import pytest

import survivor_pool.cli.ingest_picks as ingest_cli


@pytest.fixture(autouse=True)
def _quiet_runtime(monkeypatch, tmp_path):
    monkeypatch.setattr(ingest_cli, "load_dotenv", lambda *_a, **_k: False)
    monkeypatch.setattr(ingest_cli, "configure_logging", lambda *_a, **_k: None)
    monkeypatch.setenv("SURVIVOR_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SURVIVOR_DEFAULT_CONTEST", "circa")
    monkeypatch.setenv("ROOTING_OVERRIDE_TTL_HOURS", "72")
    monkeypatch.setenv("LOG_LEVEL", "INFO")


def test_ingest_prints_summary_and_persists(tmp_path, capsys):
    upload = tmp_path / "week4.csv"
    upload.write_text("Entry,Team\nChiPhi 1,Bills\nStranger,KC\n", encoding="utf-8")

    code = ingest_cli.main([str(upload)])

    out = capsys.readouterr().out
    assert code == 0
    assert "circa week 4: 2 picks (entries)" in out
    assert "Matched entries: 1" in out
    stored = json.loads((tmp_path / "data" / "picks.json").read_text(encoding="utf-8"))
    assert stored["circa"]["week_summaries"]["4"]["source_name"] == str(upload)


def test_ingest_accepts_carriage_return_line_endings(tmp_path, capsys):
    upload = tmp_path / "mac.csv"
    upload.write_bytes(b"Entry,Team\rChiPhi 1,Bills\r")

    assert ingest_cli.main([str(upload)]) == 0
    assert "Matched entries: 1" in capsys.readouterr().out


def test_ingest_json_output(tmp_path, capsys):
    upload = tmp_path / "report.txt"
    upload.write_text("SEAHAWKS 412 11.2%\n", encoding="utf-8")

    code = ingest_cli.main([str(upload), "--contest", "scs", "--week", "5", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["mode"] == "summary"
    assert payload["week"] == "5"
    assert payload["summary"]["picks_by_team"] == {"SEA": 412}


def test_ingest_failure_prints_reason_and_exits_1(tmp_path, capsys):
    upload = tmp_path / "empty.csv"
    upload.write_text("   \n", encoding="utf-8")

    code = ingest_cli.main([str(upload)])

    assert code == 1
    assert "Uploaded file is empty." in capsys.readouterr().err


def test_ingest_unknown_contest(tmp_path, capsys):
    upload = tmp_path / "week4.csv"
    upload.write_text("Alice,KC\n", encoding="utf-8")
    assert ingest_cli.main([str(upload), "--contest", "nfl"]) == 1
    assert "Unknown contest: nfl" in capsys.readouterr().err


def test_missing_file_exits_1(tmp_path, capsys):
    assert ingest_cli.main([str(tmp_path / "nope.csv")]) == 1
    assert "Unable to read" in capsys.readouterr().err


def test_pick_subcommand_upserts(capsys):
    code = ingest_cli.main(["pick", "--entry", "ChiPhi 1", "--week", "4", "--team", "buf", "--result", "W"])
    assert code == 0
    assert "4:BUF(W)" in capsys.readouterr().out


def test_pick_subcommand_unknown_entry(capsys):
    code = ingest_cli.main(["pick", "--entry", "Nobody", "--week", "4", "--team", "BUF"])
    assert code == 1
    assert "Entry not found: Nobody" in capsys.readouterr().err
