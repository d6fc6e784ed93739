"""Persistence for the manually uploaded rooting-consensus override."""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any

from survivor_pool.classes.consensus import (
    ConsensusSnapshot,
    RootingOverride,
    format_timestamp,
    parse_timestamp,
    utc_now,
)
from survivor_pool.config import load_settings
from survivor_pool.paths import data_file

DASHBOARD_FILE = "dashboard.json"
OVERRIDE_KEY = "rooting_override"


class OverrideError(ValueError):
    """Raised when an override payload cannot be stored."""


def default_ttl_hours() -> float:
    return load_settings().override_ttl_hours


class OverrideStore:
    """Stores at most one rooting override inside the dashboard JSON file.

    Other top-level keys in the file are preserved on write.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        *,
        ttl_hours: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.path = Path(path) if path else data_file(DASHBOARD_FILE)
        self.ttl_hours = ttl_hours if ttl_hours is not None else default_ttl_hours()

    def _read(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Dashboard file {self.path} must contain a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def get(self) -> RootingOverride | None:
        raw = self._read().get(OVERRIDE_KEY)
        if not raw:
            return None
        return RootingOverride.from_dict(raw)

    def get_active(self, now: datetime.datetime | None = None) -> RootingOverride | None:
        """The stored override, or None once it has expired."""
        override = self.get()
        if override is None:
            return None
        if override.is_expired(now):
            self.logger.info("Rooting override from %s expired at %s", override.uploaded_at, override.expires_at)
            return None
        return override

    def set(
        self,
        data: ConsensusSnapshot,
        expires_at: datetime.datetime | str | None = None,
        source_name: str | None = None,
        source_path: str | None = None,
        *,
        now: datetime.datetime | None = None,
    ) -> RootingOverride:
        if data.manual is None:
            raise OverrideError("Manual source required for rooting override")

        uploaded = now or utc_now()
        if expires_at is None:
            expires = uploaded + datetime.timedelta(hours=self.ttl_hours)
        elif isinstance(expires_at, str):
            parsed = parse_timestamp(expires_at)
            if parsed is None:
                raise OverrideError(f"Invalid override expiry: {expires_at!r}")
            expires = parsed
        else:
            expires = expires_at

        override = RootingOverride(
            data=data.clone(),
            uploaded_at=format_timestamp(uploaded),
            expires_at=format_timestamp(expires),
            source_name=source_name,
            source_path=source_path,
        )
        dashboard = self._read()
        dashboard[OVERRIDE_KEY] = override.to_dict()
        self._write(dashboard)
        self.logger.info("Saved rooting override from %s, expires %s", source_name or "upload", override.expires_at)
        return override

    def clear(self) -> None:
        dashboard = self._read()
        dashboard[OVERRIDE_KEY] = None
        self._write(dashboard)
        self.logger.info("Cleared rooting override")
