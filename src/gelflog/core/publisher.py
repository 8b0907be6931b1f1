"""Publish pipeline: translate, serialize, compress, chunk and send."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Protocol

from ..wire.chunking import DEFAULT_CHUNK_SIZE, maybe_chunk
from ..wire.compression import Compressor
from ..wire.serializer import serialize
from .message import GelfMessage, GelfTranslator, LogEvent

__all__ = [
    "GLOBAL_STATS",
    "DatagramTransport",
    "GelfPublisher",
    "PublishReport",
    "PublishState",
    "PublishStats",
]


class DatagramTransport(Protocol):
    def send(self, datagrams: Iterable[bytes]) -> int:
        ...

    def close(self) -> None:
        ...


class PublishState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    SERIALIZING = "serializing"
    COMPRESSING = "compressing"
    CHUNKING = "chunking"
    SENDING = "sending"
    FAILED = "failed"
    BUILDING_FALLBACK = "building_fallback"
    SENDING_FALLBACK = "sending_fallback"
    DONE = "done"


@dataclass(slots=True)
class PublishReport:
    """Outcome of a single :meth:`GelfPublisher.publish` call."""

    states: List[PublishState] = field(default_factory=lambda: [PublishState.IDLE])
    primary_error: BaseException | None = None
    fallback_error: BaseException | None = None
    datagrams_sent: int = 0

    @property
    def state(self) -> PublishState:
        return self.states[-1]

    @property
    def delivered(self) -> bool:
        return self.primary_error is None and self.state is PublishState.DONE

    @property
    def used_fallback(self) -> bool:
        return self.primary_error is not None

    @property
    def dropped(self) -> bool:
        return self.fallback_error is not None

    def advance(self, state: PublishState) -> None:
        self.states.append(state)


class PublishStats:
    """Thread-safe counters describing publish outcomes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.published = 0
        self.fallbacks = 0
        self.dropped = 0

    def record(self, report: PublishReport) -> None:
        with self._lock:
            if report.delivered:
                self.published += 1
            elif report.dropped:
                self.dropped += 1
            else:
                self.fallbacks += 1

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {
                "published": self.published,
                "fallbacks": self.fallbacks,
                "dropped": self.dropped,
            }

    def reset(self) -> None:
        with self._lock:
            self.published = 0
            self.fallbacks = 0
            self.dropped = 0


GLOBAL_STATS = PublishStats()


class GelfPublisher:
    """Send log events to one GELF endpoint.

    :meth:`publish` never raises. When the primary attempt fails at any
    stage, a fatal-level message describing the failure is sent through the
    same pipeline once. If that fails too the report is marked dropped and
    the stats counter is bumped.
    """

    def __init__(
        self,
        translator: GelfTranslator,
        transport: DatagramTransport,
        *,
        compressor: Compressor | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        datagram_limit: int = DEFAULT_CHUNK_SIZE,
        stats: PublishStats | None = None,
    ) -> None:
        self.translator = translator
        self.transport = transport
        self.compressor = compressor or Compressor()
        self.chunk_size = chunk_size
        self.datagram_limit = datagram_limit
        self.stats = stats if stats is not None else GLOBAL_STATS

    def encode(self, message: GelfMessage, report: PublishReport | None = None) -> List[bytes]:
        """Turn ``message`` into the datagrams that carry it."""

        report = report or PublishReport()
        report.advance(PublishState.SERIALIZING)
        data = serialize(message)
        report.advance(PublishState.COMPRESSING)
        data = self.compressor.compress(data)
        report.advance(PublishState.CHUNKING)
        return maybe_chunk(data, self.chunk_size, self.datagram_limit)

    def publish(self, event: LogEvent) -> PublishReport:
        report = PublishReport()
        try:
            report.advance(PublishState.BUILDING)
            message = self.translator.translate(event)
            datagrams = self.encode(message, report)
            report.advance(PublishState.SENDING)
            report.datagrams_sent = self.transport.send(datagrams)
        except Exception as exc:
            self._fall_back(exc, report)
        return self._finish(report)

    def publish_failure(self, error: BaseException) -> PublishReport:
        """Send only the fallback message for an error raised before publishing."""

        report = PublishReport()
        self._fall_back(error, report)
        return self._finish(report)

    def _finish(self, report: PublishReport) -> PublishReport:
        report.advance(PublishState.DONE)
        self.stats.record(report)
        return report

    def _fall_back(self, error: BaseException, report: PublishReport) -> None:
        report.primary_error = error
        report.advance(PublishState.FAILED)
        try:
            report.advance(PublishState.BUILDING_FALLBACK)
            fallback = self.translator.translate_failure(error)
            datagrams = self.encode(fallback)
            report.advance(PublishState.SENDING_FALLBACK)
            report.datagrams_sent = self.transport.send(datagrams)
        except Exception as exc:
            report.fallback_error = exc

    def close(self) -> None:
        self.transport.close()
