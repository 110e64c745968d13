import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence

from .errors import RepositoryError
from .repository import JobDescriptor


def load_store(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"next_id": 1, "jobs": {}}
    with path.open("r", encoding="utf-8") as f:
        content = f.read().strip()
    if not content:
        return {"next_id": 1, "jobs": {}}
    store = json.loads(content)
    store.setdefault("next_id", 1)
    store.setdefault("jobs", {})
    return store


def save_store(path: Path, store: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


def _as_descriptor(job_id: str, record: Dict[str, Any]) -> JobDescriptor:
    return JobDescriptor(
        id=job_id,
        job_type=record["job_type"],
        scheduled_at=datetime.fromisoformat(record["scheduled_at"]),
        args=tuple(record.get("args", [])),
    )


class JsonRepository:
    """Repository persisted in a single JSON file. Job args must be JSON-serializable."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def create(self, job_type: str, scheduled_at: datetime, args: Sequence[Any] = ()) -> str:
        store = load_store(self.path)
        job_id = str(store["next_id"])
        store["jobs"][job_id] = {
            "job_type": job_type,
            "scheduled_at": scheduled_at.isoformat(),
            "args": list(args),
        }
        store["next_id"] += 1
        save_store(self.path, store)
        return job_id

    def each_due_job(self, now: datetime) -> Iterator[JobDescriptor]:
        store = load_store(self.path)
        due = [
            _as_descriptor(job_id, record)
            for job_id, record in store["jobs"].items()
            if datetime.fromisoformat(record["scheduled_at"]) <= now
        ]
        yield from due

    def delete(self, job_id: Any) -> None:
        if job_id is None:
            raise RepositoryError("Cannot delete a job without an id")
        store = load_store(self.path)
        if str(job_id) not in store["jobs"]:
            raise RepositoryError(f"No pending job with id {job_id!r}")
        del store["jobs"][str(job_id)]
        save_store(self.path, store)

    def pending(self) -> List[JobDescriptor]:
        store = load_store(self.path)
        return [_as_descriptor(job_id, record) for job_id, record in store["jobs"].items()]

    def __len__(self) -> int:
        return len(load_store(self.path)["jobs"])
