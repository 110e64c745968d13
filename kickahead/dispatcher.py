"""
Tick processing.

The host application calls Dispatcher.tick() periodically (cron, a poller,
a worker loop). Each tick runs every due job whose lateness is within one
tick interval plus the job type's tolerance. Jobs later than that are
handled by their out-of-time strategy:

- raise_exception: raise OutOfInterval and keep the job
- ignore: drop the job without running it
- hook: call out_of_time_hook(scheduled_at, *args), then drop the job

Nothing is caught: the first error aborts the tick and leaves the failing
job, and every job not yet processed, in the repository for the next tick.

Ticks must not overlap. Serializing them is up to the caller.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Hashable, Optional

from .config import Duration, KickAheadConfig, to_timedelta
from .errors import OutOfInterval
from .job import JobRegistry, OutOfTimeStrategy
from .logger import StructuredLogger, get_logger
from .repository import JobDescriptor


@dataclass
class TickReport:
    """What one tick did."""

    started_at: datetime
    due: int = 0
    executed: int = 0
    ignored: int = 0
    hooked: int = 0


class JobHandle:
    """Scheduling entry point for one registered job type."""

    def __init__(self, dispatcher: "Dispatcher", job_type: str):
        self.dispatcher = dispatcher
        self.job_type = job_type

    def run_in(self, delta: Duration, *args: Any) -> Hashable:
        return self.dispatcher.run_in(self.job_type, delta, *args)

    def run_at(self, when: datetime, *args: Any) -> Hashable:
        return self.dispatcher.run_at(self.job_type, when, *args)

    def __repr__(self) -> str:
        return f"JobHandle({self.job_type!r})"


class Dispatcher:
    """
    Runs due jobs from a repository on every tick.

    Args:
        config: Tick interval, repository and clock
        registry: Job type definitions
        logger: Defaults to the global kickahead logger. If none exists yet,
            one is created that logs warnings to the console and writes no file
    """

    def __init__(
        self,
        config: KickAheadConfig,
        registry: JobRegistry,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.registry = registry
        self.logger = logger or get_logger(level="WARNING", enable_file=False)

    # Scheduling

    def job_type(self, name: str) -> JobHandle:
        self.registry.get(name)
        return JobHandle(self, name)

    def run_in(self, job_type: str, delta: Duration, *args: Any) -> Hashable:
        """Schedule a job to run `delta` (timedelta or seconds) from now."""
        return self.run_at(job_type, self.config.now() + to_timedelta(delta), *args)

    def run_at(self, job_type: str, when: datetime, *args: Any) -> Hashable:
        """Schedule a job at an absolute time. Returns the repository id."""
        self.registry.get(job_type)
        job_id = self.config.repository.create(job_type, when, list(args))
        self.logger.debug(
            "Job scheduled",
            job_id=job_id, job_type=job_type, scheduled_at=when.isoformat(),
        )
        return job_id

    # Tick

    def tick(self) -> TickReport:
        """
        Process every due job once.

        Raises:
            ConfigurationError: Before any repository access, if the config
                is incomplete
            OutOfInterval: A stale job uses the raise_exception strategy
            InvalidStrategy: A stale job resolves to an unknown strategy
            UnknownJobType: A stored job names an unregistered type
            Exception: Whatever perform() or out_of_time_hook() raised
        """
        self.config.validate()
        now = self.config.now()
        report = TickReport(started_at=now)
        self.logger.debug("Tick started", now=now.isoformat())

        for job in self.config.repository.each_due_job(now):
            report.due += 1
            if self.is_stale(job, now):
                self._out_of_time(job, now, report)
            else:
                self._run(job)
                report.executed += 1

        self.logger.record_tick(report.due)
        self.logger.info(
            "Tick complete",
            due=report.due, executed=report.executed,
            ignored=report.ignored, hooked=report.hooked,
        )
        return report

    def deadline(self, job_type: str, now: datetime) -> datetime:
        """Jobs of this type scheduled before the returned time are stale."""
        return now - self.config.tick_interval - self.registry.tolerance(job_type)

    def is_stale(self, job: JobDescriptor, now: datetime) -> bool:
        return job.scheduled_at < self.deadline(job.job_type, now)

    def _run(self, job: JobDescriptor) -> None:
        instance = self.registry.create(job.job_type)
        self.logger.record_job_attempt(job.job_type)
        try:
            instance.perform(*job.args)
        except Exception as e:
            self._job_failed(job, e)
            raise
        self.config.repository.delete(job.id)
        self.logger.record_job_success(job.job_type)
        self.logger.debug("Job executed", job_id=job.id, job_type=job.job_type)

    def _out_of_time(self, job: JobDescriptor, now: datetime, report: TickReport) -> None:
        strategy = self.registry.out_of_time_strategy(job.job_type)
        self.logger.warning(
            "Job is out of time",
            job_id=job.id,
            job_type=job.job_type,
            scheduled_at=job.scheduled_at.isoformat(),
            late_by=str(now - job.scheduled_at),
            strategy=strategy.value,
        )

        if strategy is OutOfTimeStrategy.RAISE_EXCEPTION:
            self.logger.record_out_of_time(strategy.value)
            raise OutOfInterval(job.job_type, job.args, job.scheduled_at)

        elif strategy is OutOfTimeStrategy.IGNORE:
            self.config.repository.delete(job.id)
            self.logger.record_out_of_time(strategy.value)
            report.ignored += 1

        elif strategy is OutOfTimeStrategy.HOOK:
            instance = self.registry.create(job.job_type)
            try:
                instance.out_of_time_hook(job.scheduled_at, *job.args)
            except Exception as e:
                self._job_failed(job, e)
                raise
            self.config.repository.delete(job.id)
            self.logger.record_out_of_time(strategy.value)
            report.hooked += 1

    def _job_failed(self, job: JobDescriptor, error: Exception) -> None:
        self.logger.record_job_failure(job.job_type, type(error).__name__)
        self.logger.error(
            "Job failed, leaving it pending",
            job_id=job.id, job_type=job.job_type, error=str(error),
        )
