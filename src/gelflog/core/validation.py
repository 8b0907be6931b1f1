"""Configuration validation helpers."""

from __future__ import annotations

from ..config.schema import GelflogConfig, LoggerSpec, TargetSpec
from ..wire.chunking import HEADER_SIZE
from ..wire.compression import Compression
from .levels import build_severity_table, check_severity_table
from .message import RESERVED_FIELDS, field_key

# Largest UDP payload over IPv4.
MAX_UDP_PAYLOAD = 65507


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""


def _validate_target(target: TargetSpec) -> None:
    options = target.options
    if not options.host:
        raise ConfigurationError(f"Target '{target.name}' requires a host")
    if not 1 <= options.port <= 65535:
        raise ConfigurationError(f"Target '{target.name}' has invalid port {options.port}")
    if not 1 <= options.chunk_size <= MAX_UDP_PAYLOAD - HEADER_SIZE:
        raise ConfigurationError(
            f"Target '{target.name}' chunk_size must be within 1..{MAX_UDP_PAYLOAD - HEADER_SIZE}"
        )
    if not 1 <= options.max_datagram_bytes <= MAX_UDP_PAYLOAD:
        raise ConfigurationError(
            f"Target '{target.name}' max_datagram_bytes must be within 1..{MAX_UDP_PAYLOAD}"
        )
    if options.compress_min_bytes < 0:
        raise ConfigurationError(f"Target '{target.name}' compress_min_bytes must not be negative")
    if options.socket_timeout is not None and options.socket_timeout <= 0:
        raise ConfigurationError(f"Target '{target.name}' socket_timeout must be positive")
    try:
        Compression(options.compression)
    except ValueError:
        choices = ", ".join(method.value for method in Compression)
        raise ConfigurationError(
            f"Target '{target.name}' uses unknown compression '{options.compression}' (expected one of {choices})"
        ) from None
    for name in options.copy_properties:
        key = field_key(name)
        if not key or key in RESERVED_FIELDS:
            raise ConfigurationError(
                f"Target '{target.name}' cannot copy property '{name}' into a GELF field"
            )
    try:
        check_severity_table(build_severity_table(options.severity))
    except ValueError as exc:
        raise ConfigurationError(f"Target '{target.name}' has an invalid severity table: {exc}") from exc


def _validate_logger_targets(logger: LoggerSpec, config: GelflogConfig, enabled: set[str]) -> None:
    label = "Root logger" if logger.name == "root" else f"Logger '{logger.name}'"
    for target_name in logger.targets:
        if target_name not in config.targets:
            raise ConfigurationError(f"{label} references unknown target '{target_name}'")
        if target_name not in enabled:
            raise ConfigurationError(f"{label} references target '{target_name}' which is not enabled")


def validate_configuration(config: GelflogConfig) -> None:
    """Ensure configuration references and values are consistent."""

    missing = [name for name in config.targets_enabled if name not in config.targets]
    if missing:
        raise ConfigurationError(f"Targets referenced in 'enabled' but undefined: {', '.join(missing)}")

    if not config.targets_enabled:
        raise ConfigurationError("At least one target must be enabled")

    try:
        check_severity_table(build_severity_table(config.levels.severity))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid severity table: {exc}") from exc

    enabled_set = set(config.targets_enabled)
    for name in config.targets_enabled:
        _validate_target(config.targets[name])

    _validate_logger_targets(config.root_logger, config, enabled_set)
    for logger in config.loggers.values():
        _validate_logger_targets(logger, config, enabled_set)
