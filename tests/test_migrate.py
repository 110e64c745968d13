"""
Tests for scripts/migrate_json_to_db.py.
"""

import importlib.util
from datetime import datetime
from pathlib import Path

import pytest

from kickahead.database import SqlRepository
from kickahead.storage import JsonRepository

NOW = datetime(2026, 1, 1, 9, 0, 0)
SCRIPT = Path(__file__).parent.parent / "scripts" / "migrate_json_to_db.py"


@pytest.fixture
def migrate():
    spec = importlib.util.spec_from_file_location("migrate_json_to_db", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.migrate


@pytest.fixture
def json_store(tmp_path):
    path = tmp_path / "store.json"
    source = JsonRepository(path)
    source.create("a", NOW, [1])
    source.create("b", NOW, ["x"])
    return path


class TestMigrate:
    """Moving pending jobs from JSON to SQLite."""

    def test_moves_jobs(self, migrate, json_store, tmp_path):
        db_path = tmp_path / "jobs.db"

        assert migrate(json_store, db_path) == 2

        jobs = SqlRepository(db_path).pending()
        assert sorted((j.job_type, j.args) for j in jobs) == [("a", (1,)), ("b", ("x",))]
        assert len(JsonRepository(json_store)) == 0

    def test_keep_source(self, migrate, json_store, tmp_path):
        migrate(json_store, tmp_path / "jobs.db", keep_source=True)
        assert len(JsonRepository(json_store)) == 2

    def test_dry_run_writes_nothing(self, migrate, json_store, tmp_path):
        db_path = tmp_path / "jobs.db"

        assert migrate(json_store, db_path, dry_run=True) == 0

        assert not db_path.exists()
        assert len(JsonRepository(json_store)) == 2
