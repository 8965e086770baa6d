"""
The top-level routines of waiting for the remote resources.

The flow of waiting is:

* the credentials are retrieved from the standard sources;
* the API session is opened with these credentials;
* the resource is resolved from the user-typed selector via the API discovery;
* the predicate is built from the condition expression;
* the OS signals (SIGINT, SIGTERM) are attached to the cancellation flag;
* the polling is performed until any of the terminal outcomes.
"""
import asyncio
import functools
import logging
import signal
import threading

from kubewait._cogs.aiokits import aioadapters
from kubewait._cogs.clients import api, auth, scanning
from kubewait._cogs.configs import configuration
from kubewait._cogs.structs import references
from kubewait._core.actions import classification, loggers
from kubewait._core.engines import polling, progress
from kubewait._core.intents import conditions, outcomes, piggybacking, registries
from kubewait._kits import loops

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = 'default'


def run(
        *,
        resource: str,
        name: str,
        expression: str,
        namespace: str | None = None,
        kubeconfig: str | None = None,
        context: str | None = None,
        registry: registries.ConditionRegistry | None = None,
        settings: configuration.WaitSettings | None = None,
        classifier: classification.Classifier | None = None,
        progress_sink: progress.ProgressSink | None = None,
        stop_flag: aioadapters.Flag | None = None,
        use_uvloop: bool = True,
) -> outcomes.Outcome:
    """
    Wait for a resource synchronously, in a new event loop.

    This function should be used to wait in normal sync mode (e.g. from CLI).
    """
    with loops.proper_runner(use_uvloop=use_uvloop) as runner:
        return runner.run(wait_for_resource(
            resource=resource,
            name=name,
            expression=expression,
            namespace=namespace,
            kubeconfig=kubeconfig,
            context=context,
            registry=registry,
            settings=settings,
            classifier=classifier,
            progress_sink=progress_sink,
            stop_flag=stop_flag,
        ))


async def wait_for_resource(
        *,
        resource: str,
        name: str,
        expression: str,
        namespace: str | None = None,
        kubeconfig: str | None = None,
        context: str | None = None,
        registry: registries.ConditionRegistry | None = None,
        settings: configuration.WaitSettings | None = None,
        classifier: classification.Classifier | None = None,
        progress_sink: progress.ProgressSink | None = None,
        stop_flag: aioadapters.Flag | None = None,
) -> outcomes.Outcome:
    """
    Wait for a resource asynchronously, in the current event loop.

    If the stop-flag is not provided, the OS signals are used to cancel the waiting
    (SIGINT or SIGTERM). Otherwise, the caller is responsible for the cancellation.

    The errors of the preparation (logging in, resolving the resource, parsing
    the condition) are raised as usual. The errors of the observation itself
    are returned as the outcome.
    """
    registry = registry if registry is not None else registries.get_default_registry()
    settings = settings if settings is not None else configuration.WaitSettings()

    # Fail early on the malformed inputs, before going to the cluster.
    registry.check(expression)
    try:
        selector = references.Selector.parse(resource)
    except ValueError as e:
        raise scanning.ResourceResolutionError(str(e)) from e

    info = piggybacking.login(kubeconfig=kubeconfig, context=context, logger=logger)
    async with auth.authenticate(info):
        resolved = await scanning.resolve_resource(selector, settings=settings, logger=logger)
        if not resolved.namespaced:
            namespace = None
        elif namespace is None:
            namespace = await api.get_default_namespace() or DEFAULT_NAMESPACE

        target = conditions.Target(
            resource=resolved,
            namespace=references.NamespaceName(namespace) if namespace is not None else None,
            name=name,
        )
        target_logger = loggers.TargetLogger(resource=resolved, namespace=target.namespace, name=name)
        predicate = registry.build(expression, target=target, settings=settings, logger=target_logger)
        spec = polling.PollSpec.from_settings(predicate, settings)

        cancel_flag: aioadapters.Flag
        if stop_flag is not None:
            cancel_flag = stop_flag
        else:
            cancel_flag = asyncio.Event()
            _install_signal_handlers(cancel_flag)

        try:
            return await polling.wait(
                spec,
                cancel_flag,
                progress_sink=progress_sink,
                classifier=classifier,
                settings=settings,
                description=target.description,
                logger=target_logger,
            )
        finally:
            if stop_flag is None:
                _remove_signal_handlers()


def _install_signal_handlers(flag: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    # On Ctrl+C or pod termination, stop the waiting gracefully on the next tick.
    if threading.current_thread() is threading.main_thread():
        # Handle NotImplementedError when ran on Windows since asyncio only supports Unix signals
        try:
            loop.add_signal_handler(signal.SIGINT, functools.partial(_on_signal, flag, signal.SIGINT))
            loop.add_signal_handler(signal.SIGTERM, functools.partial(_on_signal, flag, signal.SIGTERM))
        except NotImplementedError:
            logger.warning("OS signals are ignored: can't add signal handler in Windows.")

    else:
        logger.warning("OS signals are ignored: running not in the main thread.")


def _remove_signal_handlers() -> None:
    loop = asyncio.get_running_loop()
    if threading.current_thread() is threading.main_thread():
        try:
            loop.remove_signal_handler(signal.SIGINT)
            loop.remove_signal_handler(signal.SIGTERM)
        except NotImplementedError:
            pass


def _on_signal(flag: asyncio.Event, signum: signal.Signals) -> None:
    logger.info(f"Signal {signum.name!s} is received. Stopping the waiting on the next tick.")
    flag.set()
