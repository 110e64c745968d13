"""
Tests for the in-memory and JSON file repositories.
"""

import pytest
import json
from datetime import datetime, timedelta

from kickahead.errors import RepositoryError
from kickahead.repository import InMemoryRepository, JobDescriptor, Repository
from kickahead.storage import JsonRepository, load_store

NOW = datetime(2026, 1, 1, 9, 0, 0)


@pytest.fixture(params=["memory", "json"])
def any_repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryRepository()
    return JsonRepository(tmp_path / "store.json")


class TestRepositoryContract:
    """Behaviour every repository shares."""

    def test_satisfies_protocol(self, any_repository):
        assert isinstance(any_repository, Repository)

    def test_create_returns_distinct_ids(self, any_repository):
        first = any_repository.create("a", NOW, [])
        second = any_repository.create("a", NOW, [])
        assert first != second

    def test_due_set_is_inclusive(self, any_repository):
        any_repository.create("past", NOW - timedelta(seconds=1), [1])
        any_repository.create("now", NOW, [2])
        any_repository.create("future", NOW + timedelta(seconds=1), [3])

        due = {job.job_type: job for job in any_repository.each_due_job(NOW)}

        assert set(due) == {"past", "now"}
        assert due["past"].args == (1,)
        assert due["now"].scheduled_at == NOW

    def test_delete_during_iteration(self, any_repository):
        for i in range(3):
            any_repository.create("a", NOW, [i])

        for job in any_repository.each_due_job(NOW):
            any_repository.delete(job.id)

        assert list(any_repository.each_due_job(NOW)) == []
        assert len(any_repository) == 0

    def test_delete_none_fails(self, any_repository):
        with pytest.raises(RepositoryError):
            any_repository.delete(None)

    def test_delete_unknown_fails(self, any_repository):
        with pytest.raises(RepositoryError):
            any_repository.delete("404")

    def test_pending_lists_everything(self, any_repository):
        any_repository.create("a", NOW, [])
        any_repository.create("b", NOW + timedelta(days=1), [])

        assert sorted(job.job_type for job in any_repository.pending()) == ["a", "b"]


class TestInMemoryRepository:
    """In-memory specifics."""

    def test_sequential_string_ids(self):
        repository = InMemoryRepository()
        assert repository.create("a", NOW) == "1"
        assert repository.create("a", NOW) == "2"

    def test_get_returns_descriptor(self):
        repository = InMemoryRepository()
        job_id = repository.create("a", NOW, ["x", {"y": 1}])

        assert repository.get(job_id) == JobDescriptor(job_id, "a", NOW, ("x", {"y": 1}))
        assert repository.size == 1


class TestJsonRepository:
    """JSON store specifics."""

    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "store.json"
        job_id = JsonRepository(path).create("a", NOW, ["x"])

        jobs = JsonRepository(path).pending()
        assert [(j.id, j.job_type, j.scheduled_at, j.args) for j in jobs] == [
            (job_id, "a", NOW, ("x",))
        ]

    def test_file_layout(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        JsonRepository(path).create("a", NOW, [1, 2])

        data = json.loads(path.read_text())
        assert data["next_id"] == 2
        assert data["jobs"]["1"] == {
            "job_type": "a",
            "scheduled_at": NOW.isoformat(),
            "args": [1, 2],
        }

    def test_ids_not_reused_after_delete(self, tmp_path):
        repository = JsonRepository(tmp_path / "store.json")
        first = repository.create("a", NOW)
        repository.delete(first)

        assert repository.create("a", NOW) != first

    def test_empty_file_is_empty_store(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("")

        assert load_store(path) == {"next_id": 1, "jobs": {}}
        assert len(JsonRepository(path)) == 0
