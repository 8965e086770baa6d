"""
All configuration flags, options, settings to fine-tune the waiting.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
The CLI maps its options into these settings; embedding applications
can construct and modify the settings objects directly.
"""
import concurrent.futures
import dataclasses
import enum
import logging
from collections.abc import Collection


class ErrorClass(enum.Enum):
    """ How an observation error affects the waiting. """
    TRANSIENT = enum.auto()  # swallowed as "not yet", retried on the next tick.
    FATAL = enum.auto()  # propagated immediately as a failed observation.


@dataclasses.dataclass
class PollingSettings:

    interval: float = 1.0
    """
    How often (in seconds) the predicate is evaluated.

    The first evaluation happens one interval after the waiting starts,
    not immediately, to avoid hammering a freshly mutated resource.
    """

    timeout: float = 30.0
    """
    For how long (in seconds) to wait in total before giving up.

    The predicate is never invoked at or after the deadline. If the timeout
    is shorter than the interval, the waiting times out without any attempt.
    """


@dataclasses.dataclass
class ErrorsSettings:
    """
    Classification of the observation errors into transient & fatal ones.

    The classification is a policy, not a law: e.g., some clusters return 403
    for a short time after RBAC changes, and it can be treated as transient.
    """

    transient_statuses: Collection[int] = frozenset({408, 429, 500, 502, 503, 504})
    """
    HTTP statuses of K8s API errors that are retried on the next tick.
    All other statuses (400, 401, 403, 404, 422, etc.) are fatal.
    """

    default: ErrorClass = ErrorClass.FATAL
    """
    How the unrecognised errors of the predicates are treated.

    Network-level errors (connectivity, timeouts) are always transient,
    and the explicitly marked errors are always classified as they are marked.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: float | None = 60.0
    """
    A timeout (in seconds) of one HTTP request to K8s API.

    The requests of the predicates are additionally limited by the polling
    interval (see :func:`kubewait._cogs.clients.fetching.fetch_by_name`),
    so that a slow API never makes the ticks overrun; this timeout matters
    mostly for the API discovery before the waiting starts.
    """

    connect_timeout: float | None = None
    """
    A timeout (in seconds) for establishing the connection to a server.
    """

    error_backoffs: float | Collection[float] | None = ()
    """
    Pauses (in seconds) between the retries of one request on network errors
    or 5xx server errors. There are no retries by default.

    The waiting already retries the transient errors on every tick up to
    its deadline, so the retries of the requests only make sense for flaky
    networks with long polling intervals. Even then, all the retries
    of a predicate's request fit into one polling interval: the remaining
    ones are not made (the request fails with a timeout instead).
    """


@dataclasses.dataclass
class ProgressSettings:

    enabled: bool = True
    """
    Should the progress of waiting be reported at all (via the progress sinks).
    """

    level: int = logging.INFO
    """
    A log level of the progress messages for the logging-based progress sink.
    """


@dataclasses.dataclass
class ExecutionSettings:
    """
    Settings for synchronous predicates & sinks execution (in thread pools).
    """

    executor: concurrent.futures.Executor | None = None
    """
    The executor to be used for synchronous predicate & sink invocation.
    ``None`` means the event loop's default executor.
    """


@dataclasses.dataclass
class WaitSettings:
    polling: PollingSettings = dataclasses.field(default_factory=PollingSettings)
    errors: ErrorsSettings = dataclasses.field(default_factory=ErrorsSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    progress: ProgressSettings = dataclasses.field(default_factory=ProgressSettings)
    execution: ExecutionSettings = dataclasses.field(default_factory=ExecutionSettings)

    def copy(self) -> "WaitSettings":
        """
        Make a copy of the settings, which can be modified independently.

        The groups of settings are copied; their values are not (the executor
        and the collections are shared, but they are replaced, not modified).
        """
        groups = {field.name: dataclasses.replace(getattr(self, field.name))
                  for field in dataclasses.fields(self)}
        return WaitSettings(**groups)
