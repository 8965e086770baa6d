"""
Logging of the waiting: the messages about the targets and their attempts.

The messages about one waiting go via its :class:`TargetLogger`, which adds
a reference to the target (API version, kind, namespace, name) to every record.
The poller adds the attempt's number and the elapsed time to the records
of the attempts (as ``attempt`` & ``elapsed``).

The formatters render these fields either as a ``[namespace/name]`` prefix
in the text logs, or as separate fields in the JSON logs (for log parsers):
the target under the ``object`` key (configurable), the attempt & elapsed
time under their own keys, plus a ``severity`` as most log parsers expect it.
"""
import copy
import enum
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter as BaseJsonFormatter

from kubewait._cogs.helpers import typedefs
from kubewait._cogs.structs import references

logger = logging.getLogger('kubewait.targets')

# The records' attribute with the target's reference, as added by the target loggers.
TARGET_ATTR = 'target_ref'

# A key for the target's reference in JSON logs, as seen by the log parsers.
DEFAULT_JSON_REFKEY = 'object'


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(levelname)-7s %(name)s: %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


class TargetLogger(typedefs.LoggerAdapter):
    """
    A logger of one waiting, which marks all its records with the target.

    The target is not necessarily existing (e.g. when waiting for its creation),
    so the reference is made of what is requested, not of the object's body.
    """

    def __init__(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            name: str,
    ) -> None:
        super().__init__(logger, {TARGET_ATTR: dict(
            apiVersion=resource.api_version,
            kind=resource.kind,
            namespace=namespace if resource.namespaced else None,
            name=name,
        )})

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        # The per-message extras (e.g. the attempts) go together with the target, not instead of it.
        kwargs['extra'] = {**(self.extra or {}), **kwargs.get('extra', {})}
        return msg, kwargs


class OwnStreamHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """ A handler to recognise and replace our own handlers on re-configuration. """


class TextFormatter(logging.Formatter):

    def __init__(self, fmt: str | None = None, *, prefixed: bool = True, **kwargs: Any) -> None:
        super().__init__(fmt, **kwargs)
        self.prefixed = prefixed

    def format(self, record: logging.LogRecord) -> str:
        return super().format(_prefixed(record) if self.prefixed else record)


class JsonFormatter(BaseJsonFormatter):

    def __init__(
            self,
            *args: Any,
            refkey: str | None = None,
            prefixed: bool = False,
            **kwargs: Any,
    ) -> None:
        kwargs.setdefault('reserved_attrs', [*RESERVED_ATTRS, TARGET_ATTR])
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self.refkey = refkey or DEFAULT_JSON_REFKEY
        self.prefixed = prefixed

    def format(self, record: logging.LogRecord) -> str:
        return super().format(_prefixed(record) if self.prefixed else record)

    def add_fields(
            self,
            log_record: dict[str, Any],
            record: logging.LogRecord,
            message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        ref = getattr(record, TARGET_ATTR, None)
        if ref is not None:
            log_record[self.refkey] = ref
        log_record.setdefault('severity', _severity(record.levelno))


def _prefixed(record: logging.LogRecord) -> logging.LogRecord:
    ref: Mapping[str, Any] | None = getattr(record, TARGET_ATTR, None)
    if ref is None:
        return record
    namespace, name = ref.get('namespace'), ref.get('name')
    prefix = f"[{namespace}/{name}]" if namespace else f"[{name}]"
    record = copy.copy(record)  # the other handlers must see the original message.
    record.msg = f"{prefix} {record.msg}"
    return record


def _severity(levelno: int) -> str:
    for threshold, severity in [
        (logging.DEBUG, 'debug'),
        (logging.INFO, 'info'),
        (logging.WARNING, 'warn'),
        (logging.ERROR, 'error'),
    ]:
        if levelno <= threshold:
            return severity
    return 'fatal'


def make_formatter(
        log_format: LogFormat | str = LogFormat.FULL,
        log_prefix: bool | None = None,
        log_refkey: str | None = None,
) -> logging.Formatter:
    """
    Make a formatter for a format; the text logs are prefixed by default, JSON logs are not.
    """
    if log_format is LogFormat.JSON:
        return JsonFormatter(refkey=log_refkey, prefixed=bool(log_prefix))
    elif isinstance(log_format, LogFormat):
        return TextFormatter(log_format.value, prefixed=log_prefix is not False)
    elif isinstance(log_format, str):
        return TextFormatter(log_format, prefixed=log_prefix is not False)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")


def configure(
        debug: bool | None = None,
        verbose: bool | None = None,
        quiet: bool | None = None,
        log_format: LogFormat | str = LogFormat.FULL,
        log_prefix: bool | None = None,
        log_refkey: str | None = None,
) -> None:
    """
    Configure the root logger for the CLI; repeated calls replace the previous configuration.
    """
    handler = OwnStreamHandler()
    handler.setFormatter(make_formatter(log_format, log_prefix=log_prefix, log_refkey=log_refkey))
    root = logging.getLogger()
    root.handlers[:] = [h for h in root.handlers if not isinstance(h, OwnStreamHandler)] + [handler]
    root.setLevel(logging.DEBUG if debug or verbose else logging.WARNING if quiet else logging.INFO)

    # The libraries' own logs (e.g. the connection errors of each attempt) are only for debugging.
    for name in ['asyncio', 'aiohttp']:
        library_logger = logging.getLogger(name)
        library_logger.propagate = bool(debug)
        library_logger.handlers[:] = [] if debug else [logging.NullHandler()]
