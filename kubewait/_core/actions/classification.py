"""
Classification of the observation errors into transient & fatal ones.

Transient errors are swallowed by the poller and retried on the next tick
(up to the deadline; there is no separate retry budget). Fatal errors stop
the waiting immediately with a failed observation.

The default policy: explicitly marked errors are classified as marked;
network blips & rate-limiting & server-side failures are transient;
K8s API errors with other statuses (malformed requests, permissions,
absence of the objects) are fatal; all other errors are as configured.
The classification is a policy, not a law: it can be changed via settings
or replaced entirely with a custom classifier function.
"""
import asyncio
from collections.abc import Callable

import aiohttp

from kubewait._cogs.clients import errors
from kubewait._cogs.configs import configuration

ErrorClass = configuration.ErrorClass

Classifier = Callable[[BaseException, configuration.WaitSettings], ErrorClass]


class PermanentObservationError(Exception):
    """ A fatal observation error, the retries are useless. """


class TemporaryObservationError(Exception):
    """ A potentially recoverable observation error, should be retried on the next tick. """


NETWORK_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    asyncio.TimeoutError,
    ConnectionError,
)


def classify(
        exc: BaseException,
        settings: configuration.WaitSettings,
) -> ErrorClass:
    if isinstance(exc, PermanentObservationError):
        return ErrorClass.FATAL
    elif isinstance(exc, TemporaryObservationError):
        return ErrorClass.TRANSIENT
    elif isinstance(exc, errors.APIError):
        transient = exc.status in settings.errors.transient_statuses
        return ErrorClass.TRANSIENT if transient else ErrorClass.FATAL
    elif isinstance(exc, NETWORK_ERRORS):
        return ErrorClass.TRANSIENT
    else:
        return settings.errors.default
