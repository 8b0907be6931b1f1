"""GELF UDP handler implementation."""

from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from ..core.levels import SeverityMapper, build_severity_table
from ..core.message import ExceptionInfo, GelfTranslator, LogEvent
from ..core.publisher import GelfPublisher, PublishReport, PublishStats
from ..transport.udp import UDPTransport
from ..wire.chunking import DEFAULT_CHUNK_SIZE
from ..wire.compression import Compressor

__all__ = ["GELFUDPConfig", "GELFUDPHandler", "build_gelf_udp_handler", "event_from_record"]

_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "asctime",
    "message",
}


@dataclass(slots=True)
class GELFUDPConfig:
    host: str = "127.0.0.1"
    port: int = 12201
    facility: str | None = None
    compression: str = "gzip"
    compress_min_bytes: int = 0
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_datagram_bytes: int = DEFAULT_CHUNK_SIZE
    socket_timeout: float | None = None
    reuse_socket: bool = False
    source: str | None = None
    copy_properties: List[str] = field(default_factory=lambda: ["Notes"])
    include_extra_fields: bool = False
    severity: Dict[str | int, int] | None = None


def event_from_record(record: logging.LogRecord, formatter: logging.Formatter | None = None) -> LogEvent:
    """Extract a :class:`LogEvent` from a stdlib ``LogRecord``."""

    fmt = formatter or logging.Formatter()
    exception = None
    if record.exc_info and record.exc_info[0] is not None:
        exception = ExceptionInfo.from_exc_info(record.exc_info, fmt.formatException)  # type: ignore[arg-type]
    if formatter is not None:
        message = _format_without_traceback(formatter, record)
    else:
        message = record.getMessage()
    properties: Mapping[str, Any] = {
        key: value for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS
    }
    return LogEvent(
        message=message,
        level=record.levelno,
        logger_name=record.name,
        exception=exception,
        properties=properties,
        created=record.created,
    )


def _format_without_traceback(formatter: logging.Formatter, record: logging.LogRecord) -> str:
    # The traceback travels in its own field; keep it out of the message text.
    saved = record.exc_info, record.exc_text, record.stack_info
    record.exc_info, record.exc_text, record.stack_info = None, None, None
    try:
        return formatter.format(record)
    finally:
        record.exc_info, record.exc_text, record.stack_info = saved


class GELFUDPHandler(logging.Handler):
    """Send log records to a GELF collector over UDP."""

    def __init__(self, publisher: GelfPublisher, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.publisher = publisher

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            event = event_from_record(record, self.formatter)
        except Exception as exc:
            report = self.publisher.publish_failure(exc)
        else:
            report = self.publisher.publish(event)
        if report.dropped:
            self._report_dropped(record, report)

    def _report_dropped(self, record: logging.LogRecord, report: PublishReport) -> None:
        if not (logging.raiseExceptions and sys.stderr):
            return
        try:
            sys.stderr.write(
                f"--- GELF message dropped ({self.publisher.transport!r}) ---\n"
                f"Logger {record.name!r}, message {record.msg!r}\n"
            )
            for label, error in (("Publish", report.primary_error), ("Fallback", report.fallback_error)):
                if error is not None:
                    sys.stderr.write(f"{label} error:\n")
                    traceback.print_exception(type(error), error, error.__traceback__, file=sys.stderr)
        except OSError:
            pass

    def close(self) -> None:
        try:
            self.publisher.close()
        finally:
            super().close()


def build_gelf_udp_handler(
    config: GELFUDPConfig | None = None, *, stats: PublishStats | None = None
) -> GELFUDPHandler:
    cfg = config or GELFUDPConfig()
    severity = SeverityMapper(build_severity_table(cfg.severity))
    source = cfg.source
    translator = GelfTranslator(
        facility=cfg.facility,
        hostname_provider=(lambda: source) if source else None,
        severity=severity,
        copy_properties=cfg.copy_properties,
        include_extra_fields=cfg.include_extra_fields,
    )
    transport = UDPTransport(
        cfg.host,
        cfg.port,
        timeout=cfg.socket_timeout,
        reuse_socket=cfg.reuse_socket,
    )
    publisher = GelfPublisher(
        translator,
        transport,
        compressor=Compressor(cfg.compression, cfg.compress_min_bytes),
        chunk_size=cfg.chunk_size,
        datagram_limit=cfg.max_datagram_bytes,
        stats=stats,
    )
    return GELFUDPHandler(publisher)
