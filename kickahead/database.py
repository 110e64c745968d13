"""
Database schema and SQLAlchemy-backed repository.

Uses SQLite with SQLAlchemy for pending job storage.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Sequence

from sqlalchemy import JSON, Column, DateTime, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .errors import RepositoryError
from .repository import JobDescriptor

Base = declarative_base()


class ScheduledJob(Base):
    """Pending job model."""

    __tablename__ = "scheduled_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_type = Column(String, nullable=False)
    job_args = Column(JSON, nullable=False, default=list)
    scheduled_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def as_descriptor(self) -> JobDescriptor:
        return JobDescriptor(
            id=self.id,
            job_type=self.job_type,
            scheduled_at=self.scheduled_at,
            args=tuple(self.job_args or ()),
        )


def _engine(db_path: Path):
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(_engine(db_path))


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=_engine(db_path))
    return Session()


class SqlRepository:
    """
    Repository storing descriptors in the scheduled_jobs table.

    Timestamps are stored naive; use a clock that returns naive datetimes
    (the default datetime.now does).
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)
        self._session_factory = sessionmaker(bind=_engine(self.db_path))

    def create(self, job_type: str, scheduled_at: datetime, args: Sequence[Any] = ()) -> int:
        with self._session_factory() as session:
            job = ScheduledJob(job_type=job_type, job_args=list(args), scheduled_at=scheduled_at)
            session.add(job)
            session.commit()
            return job.id

    def each_due_job(self, now: datetime) -> Iterator[JobDescriptor]:
        # Fetch the whole due set before yielding; the dispatcher deletes
        # rows as it goes.
        with self._session_factory() as session:
            due = [
                job.as_descriptor()
                for job in session.query(ScheduledJob)
                .filter(ScheduledJob.scheduled_at <= now)
                .order_by(ScheduledJob.id)
            ]
        yield from due

    def delete(self, job_id: Any) -> None:
        if job_id is None:
            raise RepositoryError("Not possible to delete a job without an id")
        with self._session_factory() as session:
            job = session.get(ScheduledJob, job_id)
            if job is None:
                raise RepositoryError(f"No pending job with id {job_id!r}")
            session.delete(job)
            session.commit()

    def get(self, job_id: Any) -> JobDescriptor:
        with self._session_factory() as session:
            job = session.get(ScheduledJob, job_id)
            if job is None:
                raise RepositoryError(f"No pending job with id {job_id!r}")
            return job.as_descriptor()

    def pending(self) -> List[JobDescriptor]:
        with self._session_factory() as session:
            return [
                job.as_descriptor()
                for job in session.query(ScheduledJob).order_by(ScheduledJob.scheduled_at, ScheduledJob.id)
            ]

    def count(self) -> int:
        with self._session_factory() as session:
            return session.query(ScheduledJob).count()

    def __len__(self) -> int:
        return self.count()
