"""
Job definitions and the job type registry.

A job type is a string name bound to a factory that builds a fresh job
instance for every execution. Per-type configuration (tolerance and
out-of-time strategy) lives in the registry, and a type may name a parent
whose values it inherits until it sets its own.

Example:
    registry = JobRegistry()

    @registry.job("send_invoice", tolerance=300)
    class SendInvoice(Job):
        def perform(self, invoice_id):
            ...

    @registry.job("send_reminder", parent="send_invoice")
    class SendReminder(SendInvoice):
        pass
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from .config import Duration, to_timedelta
from .errors import InvalidStrategy, UnknownJobType

_UNSET = object()


class OutOfTimeStrategy(str, Enum):
    """How a stale job is handled."""

    RAISE_EXCEPTION = "raise_exception"
    IGNORE = "ignore"
    HOOK = "hook"


DEFAULT_TOLERANCE = timedelta(0)
DEFAULT_STRATEGY = OutOfTimeStrategy.RAISE_EXCEPTION


class Job:
    """
    Base class for job definitions.

    Subclasses implement perform(). Job types using the "hook" strategy
    also implement out_of_time_hook().
    """

    def perform(self, *args: Any) -> None:
        raise NotImplementedError

    def out_of_time_hook(self, scheduled_at: datetime, *args: Any) -> None:
        raise NotImplementedError


class JobDefinition:
    """Registry entry for one job type."""

    def __init__(
        self,
        name: str,
        factory: Callable[[], Any],
        parent: Optional[str] = None,
    ):
        self.name = name
        self.factory = factory
        self.parent = parent
        # Only values set explicitly on this type; inherited ones are
        # resolved by the registry at read time.
        self.settings: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"JobDefinition(name={self.name!r}, parent={self.parent!r})"


class JobRegistry:
    """
    Maps job type names to definitions and resolves their configuration.

    Lookups follow parent links: a type without its own value takes the one
    of its nearest ancestor that has it, then the registry default.
    """

    def __init__(
        self,
        default_tolerance: Duration = DEFAULT_TOLERANCE,
        default_strategy: Union[OutOfTimeStrategy, str] = DEFAULT_STRATEGY,
    ):
        self._definitions: Dict[str, JobDefinition] = {}
        self._defaults: Dict[str, Any] = {
            "tolerance": to_timedelta(default_tolerance),
            "out_of_time_strategy": default_strategy,
        }

    # Registration

    def register(
        self,
        name: str,
        factory: Callable[[], Any],
        parent: Optional[str] = None,
        tolerance: Any = _UNSET,
        out_of_time_strategy: Any = _UNSET,
    ) -> JobDefinition:
        """
        Register a job type.

        Args:
            name: Stable name stored with every descriptor of this type
            factory: Zero-argument callable returning a fresh job instance
            parent: Name of an already registered type to inherit settings from
            tolerance: Own tolerance (timedelta or seconds); inherited if omitted
            out_of_time_strategy: Own strategy; inherited if omitted

        Returns:
            The new JobDefinition

        Raises:
            UnknownJobType: If parent is not registered
            ValueError: If the name is already taken
        """
        if name in self._definitions:
            raise ValueError(f"Job type {name!r} is already registered")
        if parent is not None and parent not in self._definitions:
            raise UnknownJobType(parent)

        definition = JobDefinition(name, factory, parent=parent)
        self._definitions[name] = definition

        if tolerance is not _UNSET:
            self.set_tolerance(name, tolerance)
        if out_of_time_strategy is not _UNSET:
            self.set_out_of_time_strategy(name, out_of_time_strategy)
        return definition

    def job(
        self,
        name: str,
        parent: Optional[str] = None,
        **settings: Any,
    ) -> Callable[[type], type]:
        """Class decorator form of register(); the class itself is the factory."""

        def decorator(cls: type) -> type:
            self.register(name, cls, parent=parent, **settings)
            return cls

        return decorator

    def unregister(self, name: str) -> None:
        definition = self.get(name)
        children = [d.name for d in self._definitions.values() if d.parent == definition.name]
        if children:
            raise ValueError(f"Job type {name!r} still has children: {', '.join(children)}")
        del self._definitions[name]

    # Lookup

    def get(self, name: str) -> JobDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise UnknownJobType(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def create(self, name: str) -> Any:
        """Build a fresh job instance for the given type."""
        return self.get(name).factory()

    def ancestors(self, name: str) -> List[str]:
        """Names from the type itself up to its root, nearest first."""
        chain = []
        current: Optional[str] = name
        while current is not None:
            chain.append(current)
            current = self.get(current).parent
        return chain

    # Configuration

    def set_tolerance(self, name: str, value: Duration) -> None:
        tolerance = to_timedelta(value)
        if tolerance < timedelta(0):
            raise ValueError(f"Tolerance must not be negative, got {tolerance}")
        self.get(name).settings["tolerance"] = tolerance

    def set_out_of_time_strategy(self, name: str, value: Union[OutOfTimeStrategy, str]) -> None:
        # Stored as given; unknown values surface as InvalidStrategy when a
        # stale job of this type is handled.
        self.get(name).settings["out_of_time_strategy"] = value

    def clear_setting(self, name: str, key: str) -> None:
        """Drop a type's own value so it inherits again."""
        self.get(name).settings.pop(key, None)

    def tolerance(self, name: str) -> timedelta:
        return self._resolve(name, "tolerance")

    def out_of_time_strategy(self, name: str) -> OutOfTimeStrategy:
        """
        Resolve the strategy for a job type.

        Raises:
            InvalidStrategy: If the resolved value is not a known strategy
        """
        value = self._resolve(name, "out_of_time_strategy")
        try:
            return OutOfTimeStrategy(value)
        except ValueError:
            raise InvalidStrategy(value, job_type=name) from None

    def _resolve(self, name: str, key: str) -> Any:
        for ancestor in self.ancestors(name):
            settings = self._definitions[ancestor].settings
            if key in settings:
                return settings[key]
        return self._defaults[key]
