"""
Repository interface and the in-memory implementation.

Responsibilities:
- Store pending job descriptors until the dispatcher deletes them.
- Hand out every descriptor whose scheduled time is <= a given "now".

Non-Responsibilities:
- No staleness decisions.
- No locking; ticks are serialized by the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Hashable, Iterator, List, Protocol, Sequence, Tuple, runtime_checkable

from .errors import RepositoryError


@dataclass(frozen=True)
class JobDescriptor:
    """A pending unit of deferred work, as stored by a repository."""

    id: Hashable
    job_type: str
    scheduled_at: datetime
    args: Tuple[Any, ...] = field(default_factory=tuple)


@runtime_checkable
class Repository(Protocol):
    """Storage consumed by the Dispatcher."""

    def create(self, job_type: str, scheduled_at: datetime, args: Sequence[Any]) -> Hashable:
        """Persist a descriptor and return its new id."""
        ...

    def each_due_job(self, now: datetime) -> Iterator[JobDescriptor]:
        """
        Yield every descriptor with scheduled_at <= now, in no particular order.

        Implementations must allow delete() to be called while iterating.
        """
        ...

    def delete(self, job_id: Hashable) -> None:
        """Remove a descriptor. Raises RepositoryError for None or unknown ids."""
        ...


def _succ(value: str) -> str:
    return str(int(value) + 1)


class InMemoryRepository:
    """Dict-backed repository, handy for tests and single-process use."""

    def __init__(self):
        self._next_id = "1"
        self._data: Dict[str, JobDescriptor] = {}

    def create(self, job_type: str, scheduled_at: datetime, args: Sequence[Any] = ()) -> str:
        job_id = self._next_id
        self._data[job_id] = JobDescriptor(job_id, job_type, scheduled_at, tuple(args))
        self._next_id = _succ(job_id)
        return job_id

    def each_due_job(self, now: datetime) -> Iterator[JobDescriptor]:
        # Snapshot first so deletes during iteration are safe
        due = [job for job in self._data.values() if job.scheduled_at <= now]
        for job in due:
            yield job

    def delete(self, job_id: Hashable) -> None:
        if job_id is None:
            raise RepositoryError("Cannot delete a job without an id")
        try:
            del self._data[job_id]
        except KeyError:
            raise RepositoryError(f"No pending job with id {job_id!r}") from None

    def get(self, job_id: Hashable) -> JobDescriptor:
        try:
            return self._data[job_id]
        except KeyError:
            raise RepositoryError(f"No pending job with id {job_id!r}") from None

    def pending(self) -> List[JobDescriptor]:
        return list(self._data.values())

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)
