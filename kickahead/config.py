"""
Dispatcher configuration.

A KickAheadConfig is built by the caller and handed to the Dispatcher;
there is no module-level configuration state.
"""

import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .env import load_env
from .errors import ConfigurationError

Duration = Union[timedelta, int, float]
Clock = Callable[[], datetime]


def to_timedelta(value: Duration) -> timedelta:
    """Accept a timedelta or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected timedelta or seconds, got {type(value).__name__}")
    return timedelta(seconds=value)


class KickAheadConfig:
    """
    Tick interval, repository and clock used by a Dispatcher.

    Args:
        tick_interval: Upper bound on the time between two ticks
            (timedelta or seconds)
        repository: Storage for pending job descriptors
        clock: Zero-argument callable returning the current datetime.
            Must agree with whatever the repository compares against.
    """

    def __init__(
        self,
        tick_interval: Optional[Duration] = None,
        repository: Any = None,
        clock: Optional[Clock] = datetime.now,
    ):
        self.tick_interval = tick_interval
        self.repository = repository
        self.clock = clock

    @property
    def tick_interval(self) -> Optional[timedelta]:
        return self._tick_interval

    @tick_interval.setter
    def tick_interval(self, value: Optional[Duration]) -> None:
        self._tick_interval = None if value is None else to_timedelta(value)

    def now(self) -> datetime:
        if self.clock is None:
            raise ConfigurationError(
                "You must configure a way for me to know the current time! "
                "Please set `config.clock`"
            )
        return self.clock()

    def validate(self) -> None:
        """
        Check that everything a tick needs is present.

        Raises:
            ConfigurationError: Naming the first missing setting
        """
        if self.tick_interval is None:
            raise ConfigurationError(
                "No tick_interval configured! Please set `config.tick_interval`"
            )
        if self.clock is None:
            raise ConfigurationError(
                "You must configure a way for me to know the current time! "
                "Please set `config.clock`"
            )
        if self.repository is None:
            raise ConfigurationError("No repository configured! Please set `config.repository`")

    @classmethod
    def from_env(cls, **overrides: Any) -> "KickAheadConfig":
        """
        Build a config from environment variables (and .env, if present).

        Reads:
            KICKAHEAD_TICK_INTERVAL: Tick interval in seconds
            KICKAHEAD_DB: SQLite database path for a SqlRepository
            KICKAHEAD_JSON_STORE: JSON store path for a JsonRepository
                (used when KICKAHEAD_DB is not set)

        Keyword overrides win over the environment.
        """
        load_env()

        interval = os.getenv("KICKAHEAD_TICK_INTERVAL")
        tick_interval: Optional[Duration] = None
        if interval:
            try:
                tick_interval = float(interval)
            except ValueError:
                raise ConfigurationError(
                    f"KICKAHEAD_TICK_INTERVAL must be a number of seconds, got {interval!r}"
                ) from None

        repository = None
        db_path = os.getenv("KICKAHEAD_DB")
        json_path = os.getenv("KICKAHEAD_JSON_STORE")
        if db_path:
            from .database import SqlRepository
            repository = SqlRepository(Path(db_path))
        elif json_path:
            from .storage import JsonRepository
            repository = JsonRepository(Path(json_path))

        params = {"tick_interval": tick_interval, "repository": repository}
        params.update(overrides)
        return cls(**params)
