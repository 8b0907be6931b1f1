"""Log level helpers and the logging level to GELF severity mapping."""

from __future__ import annotations

import bisect
import logging
from typing import Any, Dict, Mapping, Tuple

TRACE_LEVEL_NAME = "TRACE"
TRACE_LEVEL_NUM = 5

# Syslog severities used by GELF.
EMERGENCY = 0
ALERT = 1
CRITICAL = 2
ERROR = 3
WARNING = 4
NOTICE = 5
INFO = 6
DEBUG = 7

SEVERITY_LABELS = [
    "EMERGENCY",
    "ALERT",
    "CRITICAL",
    "ERROR",
    "WARNING",
    "NOTICE",
    "INFO",
    "DEBUG",
]

# logging.FATAL is an alias of logging.CRITICAL.
DEFAULT_SEVERITY_TABLE: Dict[int, int] = {
    logging.CRITICAL: EMERGENCY,
    logging.ERROR: ERROR,
    logging.WARNING: WARNING,
    logging.INFO: INFO,
    logging.DEBUG: DEBUG,
    TRACE_LEVEL_NUM: DEBUG,
}


def register_trace_level(enable: bool = True) -> None:
    """Register the TRACE level on the stdlib logging module.

    When ``enable`` is ``False`` the function becomes a no-op. The level is
    installed only once even if called repeatedly.
    """

    if not enable:
        return

    if logging.getLevelName(TRACE_LEVEL_NUM) != TRACE_LEVEL_NAME:
        logging.addLevelName(TRACE_LEVEL_NUM, TRACE_LEVEL_NAME)
    if not hasattr(logging, TRACE_LEVEL_NAME):
        setattr(logging, TRACE_LEVEL_NAME, TRACE_LEVEL_NUM)

    if not hasattr(logging.Logger, "trace"):
        def trace(self: logging.Logger, message: str, *args: object, **kwargs: Any) -> None:  # type: ignore[override]
            if self.isEnabledFor(TRACE_LEVEL_NUM):
                self._log(TRACE_LEVEL_NUM, message, args, **kwargs)

        logging.Logger.trace = trace  # type: ignore[assignment]


def get_level_by_name(name: str) -> int:
    """Resolve a logging level from a friendly name."""

    if name.upper() == TRACE_LEVEL_NAME:
        return TRACE_LEVEL_NUM
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name.upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def ensure_level(value: int | str) -> int:
    """Normalize user supplied level values."""

    if isinstance(value, int):
        return value
    return get_level_by_name(value)


def build_severity_table(overrides: Mapping[str | int, int] | None = None) -> Dict[int, int]:
    """Return the default severity table with ``overrides`` applied.

    Keys of ``overrides`` may be level names (``"WARNING"``) or numbers.
    Unknown names raise ``ValueError`` instead of falling back to INFO.
    """

    table = dict(DEFAULT_SEVERITY_TABLE)
    for level, severity in (overrides or {}).items():
        table[_strict_level(level)] = int(severity)
    return table


def _strict_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    name = str(value).strip()
    if name.isdigit():
        return int(name)
    if name.upper() == TRACE_LEVEL_NAME:
        return TRACE_LEVEL_NUM
    resolved = logging.getLevelName(name.upper())
    if isinstance(resolved, int):
        return resolved
    raise ValueError(f"Unknown logging level {value!r} in severity table")


def check_severity_table(table: Mapping[int, int]) -> None:
    """Raise ``ValueError`` unless ``table`` is in range and monotonic."""

    if not table:
        raise ValueError("Severity table must not be empty")
    previous: Tuple[int, int] | None = None
    for level in sorted(table):
        severity = table[level]
        if not EMERGENCY <= severity <= DEBUG:
            raise ValueError(f"Severity for level {level} must be within 0..7, got {severity}")
        if previous is not None and severity > previous[1]:
            raise ValueError(
                f"Severity table is not monotonic: level {level} maps to {severity} "
                f"but less severe level {previous[0]} maps to {previous[1]}"
            )
        previous = (level, severity)


class SeverityMapper:
    """Map stdlib logging levels onto syslog severities (0 most severe).

    Every integer level is accepted: it takes the severity of the highest
    table threshold at or below it. Levels under the lowest threshold,
    ``NOTSET`` included, map to ``DEBUG``.
    """

    def __init__(self, table: Mapping[int, int] | None = None) -> None:
        resolved = dict(table) if table is not None else dict(DEFAULT_SEVERITY_TABLE)
        check_severity_table(resolved)
        self._thresholds = sorted(resolved)
        self._severities = [resolved[level] for level in self._thresholds]

    def map(self, levelno: int) -> int:
        index = bisect.bisect_right(self._thresholds, levelno) - 1
        if index < 0:
            return DEBUG
        return self._severities[index]

    @property
    def most_severe(self) -> int:
        return self._severities[-1]

    def table(self) -> Dict[int, int]:
        return dict(zip(self._thresholds, self._severities))
