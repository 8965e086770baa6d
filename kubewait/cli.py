import dataclasses
import functools
from collections.abc import Callable, Collection
from typing import Any

import click

from kubewait._cogs.aiokits import aioadapters
from kubewait._cogs.clients import scanning
from kubewait._cogs.configs import configuration
from kubewait._cogs.structs import credentials
from kubewait._core.actions import loggers
from kubewait._core.engines import progress
from kubewait._core.intents import conditions, outcomes, registries
from kubewait._core.reactor import running


@dataclasses.dataclass()
class CLIControls:
    """ Controls for embedding & testing, which are impossible to pass via CLI. """
    stop_flag: aioadapters.Flag | None = None
    registry: registries.ConditionRegistry | None = None
    settings: configuration.WaitSettings | None = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        else:
            name: str = super().convert(value, param, ctx)
            return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: bool | None = False,
                log_refkey: str | None = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


@click.version_option(prog_name='kubewait')
@click.group(name='kubewait', context_settings=dict(
    auto_envvar_prefix='KUBEWAIT',
))
def main() -> None:
    pass


@main.command(name='for')
@logging_options
@click.option('-f', '--for', 'expression', type=str, required=True,
              help="A condition, e.g.: create, delete, condition=Ready, field=status.phase=Running.")
@click.option('-n', '--namespace', type=str, default=None)
@click.option('--kubeconfig', type=str, default=None)
@click.option('--context', 'kube_context', type=str, default=None)
@click.option('-t', '--timeout', type=click.FloatRange(min=0, min_open=True), default=None)
@click.option('-i', '--interval', type=click.FloatRange(min=0, min_open=True), default=None)
@click.option('--transient-status', 'transient_statuses', type=int, multiple=True)
@click.option('--progress/--no-progress', 'show_progress', default=True)
@click.argument('resource')
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def for_(
        __controls: CLIControls,
        resource: str,
        name: str,
        expression: str,
        namespace: str | None,
        kubeconfig: str | None,
        kube_context: str | None,
        timeout: float | None,
        interval: float | None,
        transient_statuses: Collection[int],
        show_progress: bool,
) -> None:
    """ Wait until the resource object satisfies the condition. """
    registry = __controls.registry
    if registry is None:
        registry = registries.register_builtins()

    # The controls can be shared by many invocations: never change their settings.
    settings = configuration.WaitSettings()
    if __controls.settings is not None:
        settings = __controls.settings.copy()
    if timeout is not None:
        settings.polling.timeout = timeout
    if interval is not None:
        settings.polling.interval = interval
    if transient_statuses:
        settings.errors.transient_statuses = {*settings.errors.transient_statuses, *transient_statuses}
    settings.progress.enabled = show_progress

    try:
        outcome = running.run(
            resource=resource,
            name=name,
            expression=expression,
            namespace=namespace,
            kubeconfig=kubeconfig,
            context=kube_context,
            registry=registry,
            settings=settings,
            progress_sink=progress.EchoProgressSink(),
            stop_flag=__controls.stop_flag,
        )
    except conditions.ConditionError as e:
        raise click.BadParameter(str(e), param_hint="'--for'") from e
    except (credentials.LoginError, scanning.ResourceResolutionError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(describe(outcome, resource=resource, name=name), err=not outcome.satisfied)
    click.get_current_context().exit(outcome.exit_code)


@main.command(name='conditions')
def conditions_() -> None:
    """ List the conditions available in the expressions. """
    registry = registries.register_builtins()
    for name in registry.names():
        click.echo(name)


def describe(outcome: outcomes.Outcome, *, resource: str, name: str) -> str:
    """ Render the outcome for humans, the same way as ``kubectl wait`` does. """
    match outcome:
        case outcomes.Satisfied():
            return f"{resource}/{name} condition met"
        case outcomes.TimedOut(last_error=None):
            return f"{resource}/{name}: timed out waiting for the condition"
        case outcomes.TimedOut(last_error=error):
            return f"{resource}/{name}: timed out waiting for the condition (last error: {error})"
        case outcomes.Cancelled():
            return f"{resource}/{name}: cancelled"
        case outcomes.ObservationFailed(cause=cause):
            return f"{resource}/{name}: failed to observe: {cause}"
        case _:
            raise TypeError(f"Unknown outcome: {outcome!r}")
