"""Configuration schema definition for gelflog."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from ..handlers.gelf_udp import GELFUDPConfig

DEFAULT_CONFIG: Dict[str, Any] = {
    "targets": {
        "enabled": ["gelf"],
        "gelf": {
            "host": "127.0.0.1",
            "port": 12201,
            "level": "NOTSET",
            "compression": "gzip",
            "compress_min_bytes": 0,
            "chunk_size": 8192,
            "max_datagram_bytes": 8192,
            "reuse_socket": False,
            "copy_properties": ["Notes"],
            "include_extra_fields": False,
        },
    },
    "logging": {
        "root": {
            "level": "INFO",
            "targets": [],
        },
        "loggers": {},
        "disable_existing_loggers": False,
        "capture_warnings": True,
    },
    "levels": {
        "root": "INFO",
        "enable_trace": False,
        "overrides": {},
        "severity": {},
    },
}


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration mapping."""

    return deepcopy(DEFAULT_CONFIG)


@dataclass(slots=True)
class TargetSpec:
    name: str
    level: str | int
    options: GELFUDPConfig


@dataclass(slots=True)
class LoggerSpec:
    name: str
    level: str | int
    targets: List[str] = field(default_factory=list)
    propagate: bool = False


@dataclass(slots=True)
class LevelsConfig:
    root_level: str | int
    enable_trace: bool
    overrides: Dict[str, str | int] = field(default_factory=dict)
    severity: Dict[str | int, int] = field(default_factory=dict)


@dataclass(slots=True)
class GelflogConfig:
    targets: Dict[str, TargetSpec]
    targets_enabled: List[str]
    loggers: Dict[str, LoggerSpec]
    root_logger: LoggerSpec
    levels: LevelsConfig
    capture_warnings: bool
    disable_existing_loggers: bool
    raw: Dict[str, Any] = field(repr=False)

    def target(self, name: str) -> TargetSpec:
        return self.targets[name]

    def logger(self, name: str) -> LoggerSpec:
        return self.loggers[name]


def _string_list(value: Any) -> List[str]:
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping)):
        return [str(item) for item in value]
    return []


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _to_target_options(payload: Mapping[str, Any], severity: Mapping[str | int, int]) -> GELFUDPConfig:
    defaults = GELFUDPConfig()
    facility = payload.get("facility")
    source = payload.get("source")
    copy_properties = payload.get("copy_properties")
    target_severity = dict(severity)
    own_severity = payload.get("severity")
    if isinstance(own_severity, Mapping):
        target_severity.update({level: int(value) for level, value in own_severity.items()})
    return GELFUDPConfig(
        host=str(payload.get("host", defaults.host)),
        port=int(payload.get("port", defaults.port)),
        facility=str(facility) if facility else None,
        compression=str(payload.get("compression", defaults.compression)).lower(),
        compress_min_bytes=int(payload.get("compress_min_bytes", defaults.compress_min_bytes)),
        chunk_size=int(payload.get("chunk_size", defaults.chunk_size)),
        max_datagram_bytes=int(payload.get("max_datagram_bytes", defaults.max_datagram_bytes)),
        socket_timeout=_optional_float(payload.get("socket_timeout")),
        reuse_socket=bool(payload.get("reuse_socket", defaults.reuse_socket)),
        source=str(source) if source else None,
        copy_properties=(
            _string_list(copy_properties) if copy_properties is not None else defaults.copy_properties
        ),
        include_extra_fields=bool(payload.get("include_extra_fields", False)),
        severity=target_severity or None,
    )


def _to_targets(
    data: Mapping[str, Any], severity: Mapping[str | int, int]
) -> tuple[Dict[str, TargetSpec], List[str]]:
    targets: Dict[str, TargetSpec] = {}
    enabled = _string_list(data.get("enabled"))

    for name, payload in data.items():
        if name == "enabled" or not isinstance(payload, Mapping):
            continue
        targets[name] = TargetSpec(
            name=name,
            level=payload.get("level", "NOTSET"),
            options=_to_target_options(payload, severity),
        )

    if not enabled:
        enabled = list(targets.keys())
    return targets, enabled


def _to_loggers(data: Mapping[str, Any]) -> tuple[LoggerSpec, Dict[str, LoggerSpec], bool, bool]:
    root_data = data.get("root", {})
    if not isinstance(root_data, Mapping):
        root_data = {}
    loggers_data = data.get("loggers", {})
    if not isinstance(loggers_data, Mapping):
        loggers_data = {}

    disable_existing = bool(data.get("disable_existing_loggers", False))
    capture_warnings = bool(data.get("capture_warnings", True))

    root_spec = LoggerSpec(
        name="root",
        level=root_data.get("level", "INFO"),
        targets=_string_list(root_data.get("targets")),
        propagate=False,
    )

    specs: Dict[str, LoggerSpec] = {}
    for name, payload in loggers_data.items():
        if isinstance(payload, Mapping):
            specs[name] = LoggerSpec(
                name=name,
                level=payload.get("level", "INFO"),
                targets=_string_list(payload.get("targets")),
                propagate=bool(payload.get("propagate", False)),
            )

    return root_spec, specs, disable_existing, capture_warnings


def _to_levels(data: Mapping[str, Any]) -> LevelsConfig:
    root_level = data.get("root", "INFO")
    enable_trace = bool(data.get("enable_trace", False))
    overrides_raw = data.get("overrides", {})
    overrides: Dict[str, str | int] = {}
    if isinstance(overrides_raw, Mapping):
        for name, value in overrides_raw.items():
            overrides[name] = value
    severity_raw = data.get("severity", {})
    severity: Dict[str | int, int] = {}
    if isinstance(severity_raw, Mapping):
        for level, value in severity_raw.items():
            severity[level] = int(value)
    return LevelsConfig(
        root_level=root_level,
        enable_trace=enable_trace,
        overrides=overrides,
        severity=severity,
    )


def build_config(data: Mapping[str, Any]) -> GelflogConfig:
    levels = _to_levels(data.get("levels", {}))
    targets, enabled = _to_targets(data.get("targets", {}), levels.severity)
    root_logger, loggers, disable_existing, capture_warnings = _to_loggers(data.get("logging", {}))

    if not root_logger.targets:
        root_logger.targets = enabled.copy()

    raw_copy: Dict[str, Any] = deepcopy({k: v for k, v in data.items()})

    return GelflogConfig(
        targets=targets,
        targets_enabled=enabled,
        loggers=loggers,
        root_logger=root_logger,
        levels=levels,
        capture_warnings=capture_warnings,
        disable_existing_loggers=disable_existing,
        raw=raw_copy,
    )
