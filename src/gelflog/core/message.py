"""GELF message model and translation from log events."""

from __future__ import annotations

import re
import socket
import time
import traceback
from dataclasses import dataclass, field
from functools import lru_cache
from types import TracebackType
from typing import Any, Callable, Dict, Iterable, Mapping, Tuple, Type, Union

from .levels import SeverityMapper

__all__ = [
    "GELF_VERSION",
    "DEFAULT_FACILITY",
    "FAILURE_TEXT",
    "SHORT_MESSAGE_LENGTH",
    "ExceptionInfo",
    "LogEvent",
    "GelfMessage",
    "GelfTranslator",
    "RESERVED_FIELDS",
    "default_hostname",
    "field_key",
    "shorten",
]

GELF_VERSION = "1.1"
DEFAULT_FACILITY = "GELF"
FAILURE_TEXT = "Error sending message in gelflog"
SHORT_MESSAGE_LENGTH = 250

FieldValue = Union[str, int, float]
HostnameProvider = Callable[[], str]
ExcInfo = Tuple[Type[BaseException], BaseException, TracebackType | None]

_FIELD_NAME_RE = re.compile(r"[^\w.\-]")
RESERVED_FIELDS = {"id"}


@lru_cache(maxsize=1)
def default_hostname() -> str:
    """Return this machine's hostname, resolved once per process."""

    return socket.gethostname()


def shorten(text: str) -> str:
    """Derive ``short_message`` from the full message text.

    Texts longer than 250 characters keep their first 249 characters, which
    is what collectors already receive from existing deployments.
    """

    if len(text) > SHORT_MESSAGE_LENGTH:
        return text[: SHORT_MESSAGE_LENGTH - 1]
    return text


@dataclass(frozen=True, slots=True)
class ExceptionInfo:
    type_name: str
    message: str
    rendered: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ExceptionInfo":
        rendered = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(type_name=type(exc).__name__, message=str(exc), rendered=rendered.rstrip("\n"))

    @classmethod
    def from_exc_info(
        cls, exc_info: ExcInfo, formatter: Callable[[ExcInfo], str] | None = None
    ) -> "ExceptionInfo":
        exc_type, exc, tb = exc_info
        if formatter is not None:
            rendered = formatter(exc_info)
        else:
            rendered = "".join(traceback.format_exception(exc_type, exc, tb)).rstrip("\n")
        return cls(type_name=exc_type.__name__, message=str(exc), rendered=rendered)


@dataclass(slots=True)
class LogEvent:
    """The parts of a log record that end up in a GELF message."""

    message: str
    level: int
    logger_name: str | None = None
    exception: ExceptionInfo | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    created: float | None = None


@dataclass(slots=True)
class GelfMessage:
    """One GELF record.

    Additional fields are stored without the GELF ``_`` prefix; the
    serializer adds it, so they can never shadow the fixed fields.
    """

    host: str
    short_message: str
    full_message: str
    level: int
    facility: str = DEFAULT_FACILITY
    timestamp: float = field(default_factory=time.time)
    version: str = GELF_VERSION
    additional_fields: Dict[str, FieldValue] = field(default_factory=dict)

    def add(self, name: str, value: Any) -> None:
        """Attach an additional field, replacing any previous value."""

        key = field_key(name)
        if not key:
            raise ValueError(f"Invalid GELF field name: {name!r}")
        if key in RESERVED_FIELDS:
            raise ValueError("GELF: 'id' can't be used as additional field name")
        if value is None:
            return
        self.additional_fields[key] = _scalar(value)

    def fields(self) -> Dict[str, Any]:
        """Return the GELF object with additional fields flattened in."""

        payload: Dict[str, Any] = {
            "version": self.version,
            "host": self.host,
            "short_message": self.short_message,
            "full_message": self.full_message,
            "timestamp": self.timestamp,
            "level": self.level,
            "facility": self.facility,
        }
        for key, value in self.additional_fields.items():
            payload[f"_{key}"] = value
        return payload


def field_key(name: str) -> str:
    """Return ``name`` reduced to the characters GELF allows in field names."""

    return _FIELD_NAME_RE.sub("_", name.lstrip("_"))


def _scalar(value: Any) -> FieldValue:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (str, int, float)):
        return value
    return str(value)


class GelfTranslator:
    """Build :class:`GelfMessage` objects for log events and failures."""

    def __init__(
        self,
        *,
        facility: str | None = None,
        hostname_provider: HostnameProvider | None = None,
        severity: SeverityMapper | None = None,
        copy_properties: Iterable[str] = ("Notes",),
        include_extra_fields: bool = False,
    ) -> None:
        self.facility = facility or DEFAULT_FACILITY
        self.hostname_provider = hostname_provider or default_hostname
        self.severity = severity or SeverityMapper()
        self.copy_properties = list(copy_properties)
        self.include_extra_fields = include_extra_fields

    def translate(self, event: LogEvent) -> GelfMessage:
        message = GelfMessage(
            host=self.hostname_provider(),
            short_message=shorten(event.message),
            full_message=event.message,
            level=self.severity.map(event.level),
            facility=self.facility,
        )
        if event.created is not None:
            message.timestamp = event.created

        if event.logger_name and event.logger_name.strip():
            message.add("Logger", event.logger_name)

        properties = event.properties or {}
        for name in self.copy_properties:
            if name in properties:
                message.add(name, properties[name])
        if self.include_extra_fields:
            for name, value in properties.items():
                key = field_key(name)
                if name in self.copy_properties or not key or key in RESERVED_FIELDS:
                    continue
                message.add(name, value)

        if event.exception is not None:
            _add_exception(message, event.exception)
        return message

    def translate_failure(self, error: BaseException) -> GelfMessage:
        """Describe a failed publish. Never raises."""

        try:
            host = self.hostname_provider()
        except Exception:
            host = "localhost"
        message = GelfMessage(
            host=host,
            short_message=FAILURE_TEXT,
            full_message=FAILURE_TEXT,
            level=self.severity.most_severe,
            facility=self.facility,
        )
        try:
            info = ExceptionInfo.from_exception(error)
        except Exception:
            placeholder = f"<{type(error).__name__} instance>"
            info = ExceptionInfo(type_name=type(error).__name__, message=placeholder, rendered=placeholder)
        _add_exception(message, info)
        return message


def _add_exception(message: GelfMessage, info: ExceptionInfo) -> None:
    message.add("ExceptionType", info.type_name)
    message.add("ExceptionMessage", info.message)
    message.add("Exception", info.rendered)
