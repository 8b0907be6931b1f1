"""Logging manager responsible for runtime configuration and lifecycle."""

from __future__ import annotations

import logging
from typing import Dict, Set

from ..config.schema import GelflogConfig, LoggerSpec
from ..handlers.gelf_udp import GELFUDPHandler, build_gelf_udp_handler
from .levels import ensure_level, register_trace_level
from .publisher import PublishStats
from .validation import validate_configuration


class LogManager:
    """Central coordinator for gelflog configuration."""

    def __init__(self, stats: PublishStats | None = None) -> None:
        self._config: GelflogConfig | None = None
        self._handlers: Dict[str, GELFUDPHandler] = {}
        self._configured_loggers: Set[str] = set()
        self._stats = stats

    # ------------------------------------------------------------------
    def configure(self, config: GelflogConfig) -> None:
        """Apply the supplied configuration."""

        validate_configuration(config)
        self._teardown()

        self._config = config
        register_trace_level(config.levels.enable_trace)
        logging.captureWarnings(config.capture_warnings)

        for name in config.targets_enabled:
            spec = config.targets[name]
            handler = build_gelf_udp_handler(spec.options, stats=self._stats)
            handler.set_name(name)
            handler.setLevel(ensure_level(spec.level))
            self._handlers[name] = handler

        self._configure_logger(logging.getLogger(), config.root_logger, root=True)
        for name, spec in config.loggers.items():
            self._configure_logger(logging.getLogger(name), spec)
        self._apply_level_overrides()
        if config.disable_existing_loggers:
            self._disable_unconfigured_loggers()

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Detach and close every handler installed by :meth:`configure`."""

        self._teardown()
        self._config = None

    # ------------------------------------------------------------------
    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def handler(self, name: str) -> GELFUDPHandler:
        return self._handlers[name]

    @property
    def configured(self) -> bool:
        return self._config is not None

    # ------------------------------------------------------------------
    def _teardown(self) -> None:
        installed = set(self._handlers.values())
        if installed:
            for logger_name in self._configured_loggers:
                logger = logging.getLogger() if logger_name == "root" else logging.getLogger(logger_name)
                for handler in list(logger.handlers):
                    if handler in installed:
                        logger.removeHandler(handler)

        for handler in self._handlers.values():
            handler.close()

        self._handlers.clear()
        self._configured_loggers.clear()

    def _configure_logger(self, logger: logging.Logger, spec: LoggerSpec, *, root: bool = False) -> None:
        assert self._config is not None
        logger.handlers = []
        level_value = spec.level
        if root:
            level_value = self._config.levels.root_level or spec.level
        elif spec.name in self._config.levels.overrides:
            level_value = self._config.levels.overrides[spec.name]
        logger.setLevel(ensure_level(level_value))
        for target_name in spec.targets:
            handler = self._handlers.get(target_name)
            if handler is not None:
                logger.addHandler(handler)
        logger.propagate = spec.propagate
        self._configured_loggers.add(spec.name)

    def _apply_level_overrides(self) -> None:
        assert self._config is not None
        for name, level in self._config.levels.overrides.items():
            if name in self._config.loggers:
                continue
            logging.getLogger(name).setLevel(ensure_level(level))

    def _disable_unconfigured_loggers(self) -> None:
        configured = set(self._configured_loggers)
        manager = logging.getLogger().manager
        for name in list(manager.loggerDict.keys()):
            if not name or name in configured:
                continue
            logging.getLogger(name).disabled = True


GLOBAL_MANAGER = LogManager()
