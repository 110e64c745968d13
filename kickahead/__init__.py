__version__ = "0.1.0"

from .config import KickAheadConfig
from .dispatcher import Dispatcher, JobHandle, TickReport
from .errors import (
    ConfigurationError,
    InvalidStrategy,
    KickAheadError,
    OutOfInterval,
    RepositoryError,
    UnknownJobType,
)
from .job import Job, JobRegistry, OutOfTimeStrategy
from .repository import InMemoryRepository, JobDescriptor, Repository

__all__ = [
    "__version__",
    "ConfigurationError",
    "Dispatcher",
    "InMemoryRepository",
    "InvalidStrategy",
    "Job",
    "JobDescriptor",
    "JobHandle",
    "JobRegistry",
    "KickAheadConfig",
    "KickAheadError",
    "OutOfInterval",
    "OutOfTimeStrategy",
    "Repository",
    "RepositoryError",
    "TickReport",
    "UnknownJobType",
]
