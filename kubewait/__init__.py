"""
The main KubeWait module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kubewait._cogs.aiokits.aioadapters import (
    Flag,
)
from kubewait._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
)
from kubewait._cogs.clients.scanning import (
    ResourceResolutionError,
)
from kubewait._cogs.configs.configuration import (
    ErrorClass,
    WaitSettings,
)
from kubewait._cogs.helpers.typedefs import (
    Logger,
)
from kubewait._cogs.helpers.versions import (
    version as __version__,
)
from kubewait._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from kubewait._cogs.structs.references import (
    Resource,
    Selector,
)
from kubewait._core.actions.classification import (
    Classifier,
    PermanentObservationError,
    TemporaryObservationError,
    classify,
)
from kubewait._core.actions.loggers import (
    configure,
    LogFormat,
    TargetLogger,
    TextFormatter,
    JsonFormatter,
)
from kubewait._core.engines.polling import (
    Poller,
    PollSpec,
    Predicate,
    wait,
    wait_all,
    wait_any,
)
from kubewait._core.engines.progress import (
    ProgressSink,
    LoggingProgressSink,
    EchoProgressSink,
    MultiProgressSink,
    format_event,
)
from kubewait._core.intents.conditions import (
    ConditionError,
    Target,
)
from kubewait._core.intents.outcomes import (
    Observation,
    ProgressState,
    ProgressEvent,
    Outcome,
    Satisfied,
    TimedOut,
    Cancelled,
    ObservationFailed,
)
from kubewait._core.intents.piggybacking import (
    login_with_kubeconfig,
    login_with_service_account,
)
from kubewait._core.intents.registries import (
    ConditionRegistry,
    register_builtins,
    get_default_registry,
    set_default_registry,
)
from kubewait._core.reactor.running import (
    run,
    wait_for_resource,
)

__all__ = [
    'Flag',
    'APIError', 'APIClientError', 'APIServerError',
    'APIUnauthorizedError', 'APIForbiddenError', 'APINotFoundError',
    'ResourceResolutionError',
    'ErrorClass', 'WaitSettings',
    'Logger',
    'LoginError', 'ConnectionInfo',
    'login_with_kubeconfig', 'login_with_service_account',
    'Resource', 'Selector',
    'Classifier', 'classify',
    'PermanentObservationError', 'TemporaryObservationError',
    'configure', 'LogFormat', 'TargetLogger', 'TextFormatter', 'JsonFormatter',
    'Poller', 'PollSpec', 'Predicate', 'wait', 'wait_all', 'wait_any',
    'ProgressSink', 'LoggingProgressSink', 'EchoProgressSink', 'MultiProgressSink',
    'format_event',
    'ConditionError', 'Target',
    'Observation', 'ProgressState', 'ProgressEvent',
    'Outcome', 'Satisfied', 'TimedOut', 'Cancelled', 'ObservationFailed',
    'ConditionRegistry', 'register_builtins', 'get_default_registry', 'set_default_registry',
    'run', 'wait_for_resource',
]
