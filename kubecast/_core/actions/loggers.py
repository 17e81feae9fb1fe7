"""
Per-object logging and the logging configuration for the CLI.

Everything logged via the object logger carries a reference to the object
(apiVersion, kind, name, namespace): the text formatters can prefix
the messages with ``[namespace/name]``, the JSON formatter puts the reference
into a separate field, so that the log parsers could filter by objects.
"""
import copy
import enum
import logging
from typing import Any, Mapping, MutableMapping, Optional, Tuple, Type, Union

import pythonjsonlogger.core
import pythonjsonlogger.json

from kubecast._cogs.helpers import typedefs
from kubecast._cogs.structs import bodies

DEFAULT_JSON_REFKEY = 'object'
""" A key for object references in JSON logs, as seen by the log parsers. """

REFERENCE_ATTR = 'k8s_ref'
""" A log record's attribute with the object reference, if the record is about an object. """

LOWLEVEL_LOGGERS = ['asyncio', 'urllib3', 'kubernetes']


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


def _severity(levelno: int) -> str:
    for limit, severity in [(logging.DEBUG, 'debug'), (logging.INFO, 'info'),
                            (logging.WARNING, 'warn'), (logging.ERROR, 'error')]:
        if levelno <= limit:
            return severity
    return 'fatal'


def _prefix(ref: Mapping[str, Any]) -> str:
    namespace = ref.get('namespace')
    name = ref.get('name') or ''
    return f"[{namespace}/{name}]" if namespace else f"[{name}]"


class ObjectFormatter(logging.Formatter):
    pass


class ObjectTextFormatter(ObjectFormatter, logging.Formatter):
    pass


class ObjectJsonFormatter(ObjectFormatter, pythonjsonlogger.json.JsonFormatter):
    """
    A JSON formatter with the object reference in its own field, and with the severity.
    """

    def __init__(
            self,
            *args: Any,
            refkey: Optional[str] = None,
            **kwargs: Any,
    ) -> None:
        # The reference goes under its own key, so it must not leak as a regular extra.
        reserved_attrs = set(kwargs.pop('reserved_attrs', pythonjsonlogger.core.RESERVED_ATTRS))
        kwargs.update(reserved_attrs=reserved_attrs | {REFERENCE_ATTR})
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: MutableMapping[str, Any],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        ref = getattr(record, REFERENCE_ATTR, None)
        if ref is not None:
            log_record[self._refkey] = ref
        log_record.setdefault('severity', _severity(record.levelno))


class ObjectPrefixingMixin(ObjectFormatter):
    def format(self, record: logging.LogRecord) -> str:
        ref = getattr(record, REFERENCE_ATTR, None)
        if ref is not None:
            record = copy.copy(record)  # other handlers must see the original message
            record.msg = f"{_prefix(ref)} {record.msg}"
        return super().format(record)


class ObjectPrefixingTextFormatter(ObjectPrefixingMixin, ObjectTextFormatter):
    pass


class ObjectPrefixingJsonFormatter(ObjectPrefixingMixin, ObjectJsonFormatter):
    pass


class ObjectLogger(typedefs.LoggerAdapter):
    """
    A logger adapter which marks all its messages with the object's reference.

    The manifest can be either a raw dict or a typed object. The reference
    is taken once on creation: later changes of the object do not affect it.
    The messages' own extras are merged with the reference, not replaced by it.
    """

    def __init__(self, *, body: bodies.Manifest) -> None:
        ref = dict(
            apiVersion=bodies.get_api_version(body),
            kind=bodies.get_kind(body),
            name=bodies.get_name(body),
            namespace=bodies.get_namespace(body),
        )
        super().__init__(logger, {REFERENCE_ATTR: ref})

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


logger = logging.getLogger('kubecast.objects')


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> None:
    """
    Configure the root logger for the CLI: one stream handler with our formatter.

    The chatty low-level libraries are muted unless in the debug mode.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(make_formatter(log_format=log_format, log_prefix=log_prefix, log_refkey=log_refkey))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug or verbose else logging.WARNING if quiet else logging.INFO)

    for name in LOWLEVEL_LOGGERS:
        lowlevel = logging.getLogger(name)
        lowlevel.propagate = bool(debug)
        if not debug:
            lowlevel.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> ObjectFormatter:
    """
    Make a formatter for the format; the JSON logs are not prefixed by default.
    """
    json = log_format is LogFormat.JSON
    prefix = log_prefix if log_prefix is not None else not json
    if json:
        json_cls = ObjectPrefixingJsonFormatter if prefix else ObjectJsonFormatter
        return json_cls(refkey=log_refkey)

    fmt = log_format.value if isinstance(log_format, LogFormat) else log_format
    if not isinstance(fmt, str):
        raise ValueError(f"Unsupported log format: {log_format!r}")
    text_cls: Type[ObjectFormatter] = ObjectPrefixingTextFormatter if prefix else ObjectTextFormatter
    return text_cls(fmt)
