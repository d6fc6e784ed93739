from pathlib import Path

from survivor_pool import paths

REPO_ROOT = Path(__file__).resolve().parents[1]


def test_find_repo_root_walks_up_to_pyproject(tmp_path):
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")
    nested = tmp_path / "src" / "survivor_pool" / "classes"
    nested.mkdir(parents=True)
    module = nested / "contest.py"
    module.write_text("", encoding="utf-8")

    assert paths.find_repo_root(nested) == tmp_path
    assert paths.find_repo_root(module) == tmp_path


def test_rosters_and_config_resolve_from_repo_root():
    assert paths.repo_file("rosters.yaml") == REPO_ROOT / "rosters.yaml"
    assert paths.repo_file("config.json") == REPO_ROOT / "config.json"


def test_data_dir_defaults_to_repo_data(monkeypatch):
    monkeypatch.delenv(paths.DATA_DIR_ENV, raising=False)
    assert paths.data_file("picks.json") == REPO_ROOT / "data" / "picks.json"


def test_data_dir_env_override_expands_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv(paths.DATA_DIR_ENV, "  ~/pool  ")
    assert paths.data_dir() == tmp_path / "pool"
    assert paths.data_file("dashboard.json") == tmp_path / "pool" / "dashboard.json"
