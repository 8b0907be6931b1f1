from __future__ import annotations

import logging

import pytest

from gelflog.core.levels import (
    DEFAULT_SEVERITY_TABLE,
    TRACE_LEVEL_NUM,
    SeverityMapper,
    build_severity_table,
    check_severity_table,
    ensure_level,
    register_trace_level,
)


@pytest.mark.parametrize(
    ("levelno", "severity"),
    [
        (logging.CRITICAL, 0),
        (logging.ERROR, 3),
        (logging.WARNING, 4),
        (logging.INFO, 6),
        (logging.DEBUG, 7),
        (TRACE_LEVEL_NUM, 7),
    ],
)
def test_default_table(levelno: int, severity: int) -> None:
    assert SeverityMapper().map(levelno) == severity


def test_mapping_is_total_and_monotonic() -> None:
    mapper = SeverityMapper()
    previous = 7
    for levelno in range(-5, 101):
        severity = mapper.map(levelno)
        assert 0 <= severity <= 7
        assert severity <= previous
        previous = severity


def test_custom_levels_fall_between_thresholds() -> None:
    mapper = SeverityMapper()
    assert mapper.map(logging.NOTSET) == 7
    assert mapper.map(35) == 4
    assert mapper.map(1000) == 0
    assert mapper.most_severe == 0


def test_overrides_by_name_and_number() -> None:
    table = build_severity_table({"CRITICAL": 2, "25": 5})
    assert table[logging.CRITICAL] == 2
    assert table[25] == 5
    mapper = SeverityMapper(table)
    assert mapper.map(27) == 5
    assert mapper.most_severe == 2


def test_rejects_non_monotonic_table() -> None:
    with pytest.raises(ValueError, match="monotonic"):
        check_severity_table({logging.INFO: 3, logging.ERROR: 6})
    with pytest.raises(ValueError, match="0..7"):
        SeverityMapper({logging.ERROR: 9})


def test_register_trace_level() -> None:
    register_trace_level()
    assert logging.getLevelName(TRACE_LEVEL_NUM) == "TRACE"
    assert hasattr(logging.Logger, "trace")
    assert ensure_level("trace") == TRACE_LEVEL_NUM
    assert ensure_level("40") == logging.ERROR
    assert DEFAULT_SEVERITY_TABLE[TRACE_LEVEL_NUM] == 7


@pytest.mark.parametrize("name", ["NOTICE", "VERBOSE", "warn ing"])
def test_unknown_level_name_in_severity_table(name: str) -> None:
    with pytest.raises(ValueError, match="Unknown logging level"):
        build_severity_table({name: 5})


def test_trace_and_numeric_names_in_severity_table() -> None:
    table = build_severity_table({"trace": 7, "15": 6, logging.ERROR: 2})
    assert table[5] == 7
    assert table[15] == 6
    assert table[logging.ERROR] == 2
