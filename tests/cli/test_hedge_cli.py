import json

import pytest

import survivor_pool.cli.hedge as hedge_cli


@pytest.fixture(autouse=True)
def _quiet_runtime(monkeypatch, tmp_path):
    monkeypatch.setattr(hedge_cli, "load_dotenv", lambda *_a, **_k: False)
    monkeypatch.setattr(hedge_cli, "configure_logging", lambda *_a, **_k: None)
    monkeypatch.setenv("SURVIVOR_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SURVIVOR_DEFAULT_CONTEST", "circa")
    monkeypatch.setenv("ROOTING_OVERRIDE_TTL_HOURS", "72")
    monkeypatch.setenv("LOG_LEVEL", "INFO")


def _run_json(capsys, *argv):
    assert hedge_cli.main(["--json", *argv]) == 0
    return json.loads(capsys.readouterr().out)


def test_outcomes(capsys):
    result = _run_json(capsys, "outcomes", "--ml", "+150", "--stake", "100", "--p-win", "0.6", "--equity", "1000")
    assert result["decimal_odds"] == 2.5
    assert result["after_win"] == pytest.approx(900)


def test_equalize_accepts_negative_odds(capsys):
    result = _run_json(capsys, "equalize", "--ml", "-120", "--equity", "1100")
    assert result["stake"] == pytest.approx(600)


def test_floor_infeasible(capsys):
    result = _run_json(capsys, "floor", "--ml", "150", "--equity", "1000", "--target", "700")
    assert result == {"feasible": False, "stake": 0.0, "max_floor": pytest.approx(600)}


def test_target(capsys):
    assert _run_json(capsys, "target", "--fee", "1000", "--week", "15")["target"] == pytest.approx(600)


def test_chicago_text_output(capsys):
    assert hedge_cli.main(["chicago", "--mode", "SOLDIER", "--week", "12", "--ml", "150", "--spread-price", "-110", "--fee", "1000"]) == 0
    out = capsys.readouterr().out
    assert "target: 350.00" in out
    assert "mode: SOLDIER" in out


def test_unknown_mode_rejected():
    with pytest.raises(SystemExit):
        hedge_cli.main(["chicago", "--mode", "WRIGLEY", "--week", "1", "--ml", "150", "--fee", "1000"])
