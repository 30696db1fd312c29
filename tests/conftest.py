"""Pytest fixtures: an in-memory stand-in for the Postgres pool and a TestClient."""

from __future__ import annotations

import re
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core import db
from core.media import MediaConfig
from uploads import dependencies as upload_dependencies
from uploads.service import UploadSettings

TABLES = {
    "contact": ("id", "name", "email", "phone", "message"),
    "products": ("id", "name", "description", "price", "image1", "image2", "image3"),
    "orders": ("id", "first", "second", "address", "phone", "building", "apartment", "cart"),
}

_SELECT = re.compile(r"^\s*SELECT .*?FROM (\w+)", re.S | re.I)
_INSERT = re.compile(r"^\s*INSERT INTO (\w+) \(([^)]*)\)", re.S | re.I)
_UPDATE = re.compile(r"^\s*UPDATE (\w+)\s+SET (.*?)WHERE id = \$(\d+)", re.S | re.I)
_DELETE = re.compile(r"^\s*DELETE FROM (\w+) WHERE id = \$(\d+)", re.S | re.I)
_ASSIGN = re.compile(r"(\w+) = \$(\d+)")


class FakeStore:
    """
    Understands the handful of statement shapes the repositories issue.

    Ids come from a per-table sequence, like bigserial.
    """

    def __init__(self) -> None:
        self.rows: dict[str, dict[int, dict[str, Any]]] = {t: {} for t in TABLES}
        self.sequences: dict[str, int] = {t: 0 for t in TABLES}
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_with: Exception | None = None

    def _run(self, sql: str, args: tuple[Any, ...]) -> list[dict[str, Any]]:
        self.statements.append((sql, args))
        if self.fail_with is not None:
            raise self.fail_with

        if m := _INSERT.match(sql):
            table = m.group(1)
            columns = [c.strip() for c in m.group(2).split(",")]
            self.sequences[table] += 1
            row = {c: None for c in TABLES[table]}
            row.update(dict(zip(columns, args)))
            row["id"] = self.sequences[table]
            self.rows[table][row["id"]] = row
            return [dict(row)]

        if m := _UPDATE.match(sql):
            table, assignments, id_pos = m.group(1), m.group(2), int(m.group(3))
            row = self.rows[table].get(args[id_pos - 1])
            if row is None:
                return []
            for column, pos in _ASSIGN.findall(assignments):
                row[column] = args[int(pos) - 1]
            return [dict(row)]

        if m := _DELETE.match(sql):
            self.rows[m.group(1)].pop(args[int(m.group(2)) - 1], None)
            return []

        if m := _SELECT.match(sql):
            table = m.group(1)
            return [dict(self.rows[table][k]) for k in sorted(self.rows[table])]

        raise AssertionError(f"Unexpected SQL: {sql}")

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return self._run(sql, args)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        rows = self._run(sql, args)
        return rows[0] if rows else None

    async def execute(self, sql: str, *args: Any) -> str:
        self._run(sql, args)
        return "OK"


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> FakeStore:
    fake = FakeStore()
    monkeypatch.setattr(db, "fetch_all", fake.fetch_all)
    monkeypatch.setattr(db, "fetch_one", fake.fetch_one)
    monkeypatch.setattr(db, "execute", fake.execute)
    return fake


@pytest.fixture
def media_config() -> MediaConfig:
    return MediaConfig(cloud_name="demo", api_key="key-123", api_secret="secret-456")


@pytest.fixture
def upload_settings(tmp_path) -> UploadSettings:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return UploadSettings(scratch_dir=scratch)


@pytest.fixture
def client(store: FakeStore, media_config: MediaConfig, upload_settings: UploadSettings):
    from main import app

    app.dependency_overrides[upload_dependencies.get_media_config] = lambda: media_config
    app.dependency_overrides[upload_dependencies.get_upload_settings] = lambda: upload_settings
    # Not used as a context manager: the lifespan (real pool) never starts.
    yield TestClient(app)
    app.dependency_overrides.clear()
