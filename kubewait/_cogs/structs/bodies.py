"""
Raw bodies of the resources and field-in-a-body resolution.

The bodies are kept as they come from the API: plain JSON-parsed dicts.
No schemas are known or enforced, so all access goes via field paths.
"""
import collections.abc
import enum
from typing import Any, TypeVar

RawBody = dict[str, Any]

FieldPath = tuple[str, ...]
FieldSpec = None | str | FieldPath | list[str]

_T = TypeVar('_T')


class _UNSET(enum.Enum):
    token = enum.auto()


def parse_field(
        field: FieldSpec,
) -> FieldPath:
    """
    Convert any field into a tuple of nested sub-fields.

    Supported notations:

    * ``None`` (for root of a dict).
    * ``"field.subfield"``
    * ``("field", "subfield")``
    * ``["field", "subfield"]``
    """
    if field is None:
        return tuple()
    elif isinstance(field, str):
        return tuple(part for part in field.lstrip('.').split('.') if part)
    elif isinstance(field, (list, tuple)):
        return tuple(field)
    else:
        raise ValueError(f"Field must be either a str, or a list/tuple. Got {field!r}")


def resolve(
        d: Any,
        field: FieldSpec,
        default: _T | _UNSET = _UNSET.token,
) -> Any | _T:
    """
    Retrieve a nested sub-field from a body.

    Mappings are walked by keys, lists are walked by numeric indices,
    e.g. ``status.loadBalancer.ingress.0.ip``.

    If ``default`` is provided, then all non-existent and non-walkable values
    are assumed to be absent, and ``default`` is returned.

    Otherwise (with no default), attempts to get the inexistent keys will
    raise either a ``TypeError`` or ``KeyError``/``IndexError``:

    * ``KeyError``/``IndexError`` for actual absence of the keys/items.
    * ``TypeError`` for attempting to get a key for a non-walkable value:
      e.g. ``None['key']``, ``"string"['key']``, ``123['key']``, etc.
    """
    path = parse_field(field)
    try:
        result = d
        for key in path:
            if isinstance(result, collections.abc.Mapping):
                result = result[key]
            elif isinstance(result, list) and key.lstrip('-').isdigit():
                result = result[int(key)]
            elif not isinstance(default, _UNSET):
                return default
            else:
                raise TypeError(f"The structure is not walkable with field {key!r}: {result!r}")
        return result
    except (KeyError, IndexError):
        if not isinstance(default, _UNSET):
            return default
        raise
