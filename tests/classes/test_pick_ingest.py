import csv
import datetime
import json
import logging

import pytest

from survivor_pool.classes import pick_ingest
from survivor_pool.classes.contest import EntryConfig, Pick

NOW = datetime.datetime(2025, 9, 28, 15, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def roster():
    return [
        EntryConfig("Alice", [Pick("1", "BUF", "W")]),
        EntryConfig("Bob Smith"),
        EntryConfig("Carol"),
    ]


def _ingest(content, roster, week="4"):
    return pick_ingest.ingest_week_picks("circa", content, week, roster, source_name="upload.csv", now=NOW)


def test_aggregate_report_builds_field_summary(roster):
    content = "TEAM SELECTIONS\nSEAHAWKS 412 11.2%\nBills 1,050 28.1%\nMYSTERY 12 0.3%\nCurrent Live Entries: 3,702\n"
    result = _ingest(content, roster)

    assert result.mode == "summary"
    assert result.summary.picks_by_team == {"BUF": 1050, "SEA": 412}
    assert list(result.summary.picks_by_team) == ["BUF", "SEA"]
    assert result.summary.total_entries == 3702
    assert result.unknown_teams == ["MYSTERY"]
    assert result.matched_entries == []
    assert [entry.to_dict() for entry in result.entries] == [entry.to_dict() for entry in roster]


def test_aggregate_total_defaults_to_sum_of_counts(roster):
    result = _ingest("SEAHAWKS 412 11.2%\nCHIEFS 88", roster)
    assert result.summary.total_entries == 500


def test_parse_aggregate_report_ignores_non_report_text():
    assert pick_ingest.parse_aggregate_report("Entry,Team\nAlice,KC") is None
    summary = pick_ingest.parse_aggregate_report("SEAHAWKS 412 11.2%")
    assert summary.picks_by_team == {"SEA": 412}


def test_delimited_upload_matches_roster_and_counts_field(roster):
    content = "Entry,Team\nalice,KC\n\"Bob  Smith\",Chiefs\nStranger,Bills\nDave,???\n"
    result = _ingest(content, roster)

    assert result.mode == "entries"
    assert result.summary.picks_by_team == {"KC": 2, "BUF": 1}
    assert result.summary.total_entries == 3
    assert result.summary.source_name == "upload.csv"
    assert result.summary.uploaded_at == NOW.isoformat()
    assert [item.to_dict() for item in result.matched_entries] == [
        {"name": "Alice", "team": "KC"},
        {"name": "Bob Smith", "team": "KC"},
    ]
    assert result.missing_entries == ["Carol"]
    assert result.unknown_teams == ["???"]
    assert result.entries[0].pick_for_week("4") == Pick("4", "KC", "P")
    assert result.entries[0].pick_for_week("1") == Pick("1", "BUF", "W")
    assert roster[0].pick_for_week("4") is None


def test_round_trip_single_row_csv():
    roster = [EntryConfig("Alice")]
    result = _ingest("Entry,Team\n\"Alice\",\"KC\"\n", roster)
    assert result.entries[0].picks == [Pick("4", "KC", "P")]
    assert result.summary.picks_by_team == {"KC": 1}


def test_rows_for_other_weeks_are_filtered(roster):
    content = "entry\tteam\tweek\nAlice\tKC\t4\nBob Smith\tSF\t5\nCarol\tDET\tWeek 4\n"
    result = _ingest(content, roster)
    assert result.summary.picks_by_team == {"DET": 1, "KC": 1}
    assert result.missing_entries == ["Bob Smith"]


def test_headerless_three_columns_read_week_from_third(roster):
    rows = pick_ingest.parse_delimited_rows("Alice|KC|4\nBob Smith|SF|5")
    assert rows == [pick_ingest.PickRow("Alice", "KC", "4"), pick_ingest.PickRow("Bob Smith", "SF", "5")]


def test_json_upload_accepts_rows_wrapper(roster):
    payload = {"rows": [{"entryName": "Carol", "pick": "Lions", "week": 4}, {"team": "KC"}]}
    result = _ingest(json.dumps(payload), roster)
    assert result.mode == "entries"
    assert [item.name for item in result.matched_entries] == ["Carol"]
    assert result.summary.picks_by_team == {"DET": 1}


def test_bytes_with_bom_are_decoded(roster):
    result = _ingest("\ufeffEntry,Team\nAlice,KC\n".encode("utf-8"), roster)
    assert result.matched_entries[0].name == "Alice"


def test_bare_carriage_return_line_endings(roster):
    result = _ingest(b"Entry,Team\rAlice,KC\r", roster)
    assert [entry.name for entry in result.matched_entries] == ["Alice"]
    assert result.summary.picks_by_team == {"KC": 1}


def test_unreadable_row_raises_ingest_error():
    line = "Alice," + "x" * (csv.field_size_limit() + 1)
    with pytest.raises(pick_ingest.MalformedRowError) as excinfo:
        pick_ingest.split_delimited_line(line, ",")
    assert isinstance(excinfo.value, pick_ingest.IngestError)


def test_bare_codes_are_accepted_as_fallback(roster):
    result = _ingest("Alice,ZZ", roster)
    assert result.summary.picks_by_team == {"ZZ": 1}


def test_quoted_cells_keep_delimiters_and_escaped_quotes():
    assert pick_ingest.split_delimited_line('"Smith, Bob",KC', ",") == ["Smith, Bob", "KC"]
    assert pick_ingest.split_delimited_line('"The ""Ace""",KC', ",") == ['The "Ace"', "KC"]


def test_detect_delimiter_prefers_most_frequent():
    assert pick_ingest.detect_delimiter(["a\tb\tc", "d\te\tf"]) == "\t"
    assert pick_ingest.detect_delimiter(["a;b", "c;d"]) == ";"
    assert pick_ingest.detect_delimiter(["single"]) == ","


@pytest.mark.parametrize(
    "content, error, message",
    [
        ("   \n  ", pick_ingest.EmptyUploadError, "Uploaded file is empty."),
        ("Entry,Team\n", pick_ingest.NoPicksDetectedError, "No picks detected in uploaded file."),
        ("Alice,KC,5\n", pick_ingest.NoWeekPicksError, "No picks found for week 4."),
        ("Alice,!!\n", pick_ingest.NoValidPicksError, "No valid picks found for week 4."),
    ],
)
def test_upload_errors(roster, content, error, message):
    with pytest.raises(error) as excinfo:
        _ingest(content, roster)
    assert str(excinfo.value) == message
    assert isinstance(excinfo.value, pick_ingest.IngestError)


def test_zero_count_aggregate_is_not_a_summary(roster):
    with pytest.raises(pick_ingest.IngestError):
        _ingest("SEAHAWKS 0 0%", roster)


def test_default_week_is_contest_current_week(roster):
    result = pick_ingest.ingest_week_picks("circa", "Alice,KC", None, roster, now=NOW)
    assert result.week == "4"


def test_unknown_teams_are_logged(roster, caplog):
    with caplog.at_level(logging.WARNING):
        _ingest("Alice,KC\nBob Smith,Nowhere", roster)
    assert "Nowhere" in caplog.text
