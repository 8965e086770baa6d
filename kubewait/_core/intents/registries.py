"""
A registry of the named conditions available in the expressions.

There are no implicit registrations at import time: the conditions, even the
built-in ones, are registered explicitly by the callers (e.g. by the CLI,
see :func:`register_builtins`). The default registry is process-wide,
but its lifecycle is explicit too: it can be replaced or reset at any time
(e.g. in the tests, or by embedding applications with their own conditions).
"""
from collections.abc import Collection

from kubewait._cogs.configs import configuration
from kubewait._cogs.helpers import typedefs
from kubewait._core.actions import invocation
from kubewait._core.intents import conditions


class ConditionRegistry:
    """
    A registry stores the condition factories by their names.

    A condition can be registered with a checker of its arguments, so that
    the malformed expressions could be rejected before going to the cluster
    (see :meth:`check`). Without a checker, any argument passes the check,
    and the factory is the only one to validate it (when building the predicate).
    """

    def __init__(self) -> None:
        super().__init__()
        self._factories: dict[str, conditions.ConditionFactory] = {}
        self._checkers: dict[str, conditions.ArgumentChecker] = {}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._factories

    def register(
            self,
            name: str,
            factory: conditions.ConditionFactory,
            *,
            checker: conditions.ArgumentChecker | None = None,
            replace: bool = False,
    ) -> conditions.ConditionFactory:
        key = name.strip().lower()
        if not key or '=' in key:
            raise ValueError(f"Condition names must be non-empty and have no '=': {name!r}")
        if key in self._factories and not replace:
            raise ValueError(f"Condition {name!r} is already registered.")
        self._factories[key] = factory
        self._checkers.pop(key, None)
        if checker is not None:
            self._checkers[key] = checker
        return factory

    def unregister(self, name: str) -> None:
        key = name.strip().lower()
        self._factories.pop(key, None)
        self._checkers.pop(key, None)

    def get(self, name: str) -> conditions.ConditionFactory:
        try:
            return self._factories[name.strip().lower()]
        except KeyError:
            known = ', '.join(self.names()) or 'none'
            raise conditions.ConditionError(f"Unknown condition {name!r}; known: {known}.") from None

    def names(self) -> Collection[str]:
        return sorted(self._factories)

    def check(self, expression: str) -> None:
        """
        Fail with `ConditionError` if the expression is unknown or malformed.
        """
        name, argument = conditions.parse_expression(expression)
        self.get(name)
        checker = self._checkers.get(name)
        if checker is not None:
            checker(argument)

    def build(
            self,
            expression: str,
            *,
            target: conditions.Target,
            settings: configuration.WaitSettings,
            logger: typedefs.Logger,
    ) -> invocation.Invokable:
        """
        Make a predicate for the target from an expression, e.g. ``condition=Ready``.
        """
        name, argument = conditions.parse_expression(expression)
        factory = self.get(name)
        return factory(argument, target=target, settings=settings, logger=logger)


def register_builtins(registry: ConditionRegistry | None = None) -> ConditionRegistry:
    """
    Register the built-in conditions into the registry (the default one if not specified).
    """
    registry = registry if registry is not None else get_default_registry()
    registry.register('create', conditions.created,
                      checker=conditions.check_no_argument, replace=True)
    registry.register('delete', conditions.deleted,
                      checker=conditions.check_no_argument, replace=True)
    registry.register('condition', conditions.conditioned,
                      checker=conditions.parse_condition_argument, replace=True)
    registry.register('field', conditions.fielded,
                      checker=conditions.parse_field_argument, replace=True)
    return registry


_default_registry: ConditionRegistry | None = None


def get_default_registry() -> ConditionRegistry:
    """
    Get the default registry to be used by the CLI and the running routines
    unless the explicit registry is provided to them.

    The default registry is empty until the conditions are registered into it.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = ConditionRegistry()
    return _default_registry


def set_default_registry(registry: ConditionRegistry | None) -> None:
    """
    Set the default registry, or reset it to a new empty one on the next use (``None``).
    """
    global _default_registry
    _default_registry = registry
