"""
The results of waiting: the observations, the outcomes, the progress.

The outcomes are terminal: exactly one outcome is produced per waiting,
and it is never changed afterwards (all structures are frozen).
The variants are distinguished by their classes, e.g. with ``match``::

    match outcome:
        case kubewait.Satisfied(result=body):
            ...
        case kubewait.TimedOut() | kubewait.Cancelled():
            ...
        case kubewait.ObservationFailed(cause=exc):
            ...
"""
import dataclasses
import enum
from typing import Any, ClassVar

# Exit codes as commonly used by the shell tools: see timeout(1) for 124, and 128+SIGINT for 130.
EXIT_SATISFIED = 0
EXIT_FAILED = 1
EXIT_TIMED_OUT = 124
EXIT_CANCELLED = 130


class Observation(enum.Enum):
    """
    An explicit result of a predicate, if a truthy/falsy result is ambiguous.

    The predicates can also return any truthy (satisfied) or falsy (not yet)
    values, or raise the errors (classified as transient or fatal).
    """
    SATISFIED = enum.auto()
    NOT_YET = enum.auto()

    def __bool__(self) -> bool:
        return self is Observation.SATISFIED


class ProgressState(enum.Enum):
    NOT_YET = 'not-yet'
    TRANSIENT_ERROR = 'transient-error'


@dataclasses.dataclass(frozen=True)
class ProgressEvent:
    """
    A report of one unsuccessful tick, as sent to the progress sinks.

    Nothing is retained across the ticks: every event is self-contained.
    """
    attempt: int
    elapsed: float
    state: ProgressState
    error: BaseException | None = None
    description: str | None = None


@dataclasses.dataclass(frozen=True)
class Outcome:
    attempts: int
    elapsed: float

    exit_code: ClassVar[int]

    @property
    def satisfied(self) -> bool:
        return False


@dataclasses.dataclass(frozen=True)
class Satisfied(Outcome):
    """ The predicate was satisfied before the deadline. """
    result: Any = None
    exit_code: ClassVar[int] = EXIT_SATISFIED

    @property
    def satisfied(self) -> bool:
        return True


@dataclasses.dataclass(frozen=True)
class TimedOut(Outcome):
    """ The deadline was reached first. It is a normal outcome, not a failure of the predicate. """
    last_error: BaseException | None = None
    exit_code: ClassVar[int] = EXIT_TIMED_OUT


@dataclasses.dataclass(frozen=True)
class Cancelled(Outcome):
    """ The cancellation was requested externally (e.g. by an operator's interrupt). """
    exit_code: ClassVar[int] = EXIT_CANCELLED


@dataclasses.dataclass(frozen=True)
class ObservationFailed(Outcome):
    """ The predicate failed fatally, so further waiting is useless. """
    cause: BaseException | None = None
    exit_code: ClassVar[int] = EXIT_FAILED
