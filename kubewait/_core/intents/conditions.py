"""
Conditions: the predicate factories over the remote resources.

A condition is identified by its name, and can have an argument, as typed
in the CLI expressions (similar to ``kubectl wait --for=...``):

* ``create`` -- the object exists (its absence is "not yet").
* ``delete`` -- the object does not exist (its presence is "not yet").
* ``condition=Ready`` or ``condition=Ready=False`` -- the object's condition
  in ``status.conditions`` has the specified status (``True`` by default).
* ``field=status.loadBalancer.ingress`` -- the field is set and is not empty.
* ``field=status.phase=Running`` -- the field has the specified value.

For all conditions except ``create`` & ``delete``, the absence of the object
is an observation error as any other API error: the object is expected to exist.
Whether it is fatal or transient is decided by the errors classification
(it is fatal by default, but 404 can be added to the transient statuses).

The predicates return the object's body when satisfied, so that it could
be used by the callers (e.g. for printing the assigned IPs).
"""
import dataclasses
from collections.abc import Callable

from kubewait._cogs.clients import errors, fetching
from kubewait._cogs.configs import configuration
from kubewait._cogs.helpers import typedefs
from kubewait._cogs.structs import bodies, references
from kubewait._core.actions import invocation
from kubewait._core.intents import outcomes


class ConditionError(Exception):
    """ Raised when a condition expression is unknown or malformed. """


@dataclasses.dataclass(frozen=True)
class Target:
    """ A specific object to be observed (not necessarily existing). """
    resource: references.Resource
    namespace: references.Namespace
    name: str

    @property
    def description(self) -> str:
        return f"{self.resource.title} {self.name}"


# A condition factory: an argument of the expression & the target => a predicate.
ConditionFactory = Callable[..., invocation.Invokable]

# A condition's argument checker: fails with `ConditionError` if the argument is malformed.
ArgumentChecker = Callable[[str | None], object]


def parse_expression(expression: str) -> tuple[str, str | None]:
    """
    Split a condition expression into its name and an optional argument.

    E.g.: ``"delete"`` => ``("delete", None)``,
    ``"condition=Ready=True"`` => ``("condition", "Ready=True")``.
    """
    name, sep, argument = expression.strip().partition('=')
    name = name.strip().lower()
    if not name:
        raise ConditionError(f"Condition name is missing in {expression!r}.")
    if sep and not argument.strip():
        raise ConditionError(f"Condition argument is empty in {expression!r}.")
    return name, argument.strip() if sep else None


def check_no_argument(argument: str | None) -> None:
    if argument is not None:
        raise ConditionError(f"The condition accepts no arguments, got {argument!r}.")


def parse_condition_argument(argument: str | None) -> tuple[str, str]:
    """ ``Ready`` => ``("Ready", "True")``, ``Ready=False`` => ``("Ready", "False")``. """
    if argument is None:
        raise ConditionError("The condition type is required, e.g. condition=Ready.")
    cond_type, sep, cond_status = argument.partition('=')
    cond_type = cond_type.strip()
    cond_status = cond_status.strip() if sep else 'True'
    if not cond_type or not cond_status:
        raise ConditionError(f"Malformed condition: {argument!r}")
    return cond_type, cond_status


def parse_field_argument(argument: str | None) -> tuple[bodies.FieldPath, str | None]:
    """ ``status.phase`` => ``(("status", "phase"), None)``; ``...=Running`` => ``(..., "Running")``. """
    if argument is None:
        raise ConditionError("The field path is required, e.g. field=status.phase=Running.")
    path, sep, expected = argument.partition('=')
    field = bodies.parse_field(path.strip())
    if not field:
        raise ConditionError(f"Malformed field condition: {argument!r}")
    return field, expected.strip() if sep else None


def created(
        argument: str | None,
        *,
        target: Target,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> invocation.Invokable:
    check_no_argument(argument)

    async def is_created() -> bodies.RawBody | outcomes.Observation:
        try:
            return await _fetch(target=target, settings=settings, logger=logger)
        except errors.APINotFoundError:
            return outcomes.Observation.NOT_YET

    return is_created


def deleted(
        argument: str | None,
        *,
        target: Target,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> invocation.Invokable:
    check_no_argument(argument)

    async def is_deleted() -> outcomes.Observation:
        try:
            await _fetch(target=target, settings=settings, logger=logger)
        except errors.APINotFoundError:
            return outcomes.Observation.SATISFIED
        else:
            return outcomes.Observation.NOT_YET

    return is_deleted


def conditioned(
        argument: str | None,
        *,
        target: Target,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> invocation.Invokable:
    cond_type, cond_status = parse_condition_argument(argument)

    async def is_conditioned() -> bodies.RawBody | outcomes.Observation:
        body = await _fetch(target=target, settings=settings, logger=logger)
        conditions = bodies.resolve(body, 'status.conditions', [])
        for condition in conditions if isinstance(conditions, list) else []:
            if str(condition.get('type', '')).lower() == cond_type.lower():
                if str(condition.get('status', '')).lower() == cond_status.lower():
                    return body
        return outcomes.Observation.NOT_YET

    return is_conditioned


def fielded(
        argument: str | None,
        *,
        target: Target,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> invocation.Invokable:
    field, expected = parse_field_argument(argument)

    async def is_fielded() -> bodies.RawBody | outcomes.Observation:
        body = await _fetch(target=target, settings=settings, logger=logger)
        value = bodies.resolve(body, field, None)
        if expected is None and value not in (None, '', [], {}):
            return body
        if expected is not None and _render(value) == expected:
            return body
        return outcomes.Observation.NOT_YET

    return is_fielded


def _render(value: object) -> str | None:
    """ Render a JSON value the same way as it is typed in the expressions. """
    match value:
        case None:
            return None
        case bool():
            return 'true' if value else 'false'
        case _:
            return str(value)


async def _fetch(
        *,
        target: Target,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    # One observation must fit into one tick: a hanging API is a transient timeout, not an overrun.
    return await fetching.fetch_by_name(
        resource=target.resource,
        namespace=target.namespace,
        name=target.name,
        settings=settings,
        timeout=settings.polling.interval,
        logger=logger,
    )
