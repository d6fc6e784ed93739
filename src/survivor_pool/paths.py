"""Path helpers for repo-root-relative config and data files."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR_ENV = "SURVIVOR_DATA_DIR"


def find_repo_root(start: Path | None = None) -> Path:
    current = (start or Path(__file__).resolve()).resolve()
    if current.is_file():
        current = current.parent

    for candidate in [current, *current.parents]:
        if (candidate / "pyproject.toml").is_file():
            return candidate
        if (candidate / ".git").exists():
            return candidate
    raise RuntimeError("Unable to determine repository root from current path")


def repo_root() -> Path:
    return find_repo_root(Path(__file__).resolve())


def repo_file(*parts: str) -> Path:
    return repo_root().joinpath(*parts)


def data_dir() -> Path:
    """Directory holding picks.json and dashboard.json."""
    override = os.getenv(DATA_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return repo_file("data")


def data_file(name: str) -> Path:
    return data_dir() / name
