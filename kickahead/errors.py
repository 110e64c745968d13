"""
Error taxonomy for the dispatcher.

Every error raised by kickahead itself derives from KickAheadError.
Errors raised by job code (perform / out_of_time_hook) are never wrapped.
"""

from datetime import datetime
from typing import Any, Optional, Sequence


class KickAheadError(Exception):
    """Base class for kickahead errors."""
    pass


class ConfigurationError(KickAheadError):
    """Raised when the tick interval, clock or repository is not configured."""
    pass


class OutOfInterval(KickAheadError):
    """
    Raised when a due job missed its tick and its tolerance is also overdue.

    The descriptor stays in the repository so an operator can decide what to do.
    """

    def __init__(
        self,
        job_type: str,
        args: Sequence[Any],
        scheduled_at: Optional[datetime] = None,
    ):
        self.job_type = job_type
        self.job_args = tuple(args)
        self.scheduled_at = scheduled_at
        super().__init__(
            f"The job of class {job_type} with args {list(self.job_args)!r} "
            "was not possible to run because of an out of interval tick "
            "(we didn't receive a tick in time to run it) and it's maximum tolerance "
            "threshold is also overdue."
        )


class InvalidStrategy(KickAheadError):
    """Raised when a job type resolves to an unrecognized out-of-time strategy."""

    def __init__(self, strategy: Any, job_type: Optional[str] = None):
        self.strategy = strategy
        self.job_type = job_type
        where = f" for job type {job_type!r}" if job_type else ""
        super().__init__(f"Invalid out-of-time strategy {strategy!r}{where}")


class UnknownJobType(KickAheadError):
    """Raised when a job type name has no registered definition."""

    def __init__(self, job_type: str):
        self.job_type = job_type
        super().__init__(f"No job registered under the name {job_type!r}")


class RepositoryError(KickAheadError):
    """Raised by repositories on invalid deletes (missing or None ids)."""
    pass
