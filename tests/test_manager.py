from __future__ import annotations

import json
import logging
import socket
from pathlib import Path
from typing import Any, Dict

import pytest

import gelflog
from gelflog.config import loader
from gelflog.core.manager import GLOBAL_MANAGER
from gelflog.core.validation import ConfigurationError
from gelflog.wire.compression import decompress


@pytest.fixture(autouse=True)
def isolated_sources(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(tmp_path / "user"))
    monkeypatch.chdir(tmp_path)


def _targets(collector: socket.socket, **options: Any) -> Dict[str, Any]:
    host, port = collector.getsockname()
    return {"gelf": {"host": host, "port": port, "source": "mgr-host", **options}}


def test_configure_routes_root_records(collector: socket.socket) -> None:
    gelflog.configure({"targets": _targets(collector, facility="billing")})
    logger = gelflog.get_logger("billing.invoices")
    logger.debug("not sent")
    logger.error("invoice %s rejected", 42, extra={"Notes": "maintenance"})

    payload = json.loads(decompress(collector.recv(65535)))
    assert payload["short_message"] == "invoice 42 rejected"
    assert payload["facility"] == "billing"
    assert payload["host"] == "mgr-host"
    assert payload["level"] == 3
    assert payload["_Notes"] == "maintenance"
    assert gelflog.publish_stats()["published"] == 1


def test_named_logger_targets_and_overrides(collector: socket.socket) -> None:
    gelflog.configure(
        {
            "targets": _targets(collector, level="WARNING", compression="none"),
            "logging": {
                "root": {"level": "ERROR", "targets": []},
                "loggers": {"audit": {"level": "DEBUG", "targets": ["gelf"]}},
            },
            "levels": {"root": "ERROR", "overrides": {"noisy": "CRITICAL"}, "severity": {"WARNING": 5}},
        }
    )
    audit = gelflog.get_logger("audit")
    assert audit.level == logging.DEBUG
    assert logging.getLogger("noisy").level == logging.CRITICAL
    assert GLOBAL_MANAGER.handler("gelf").level == logging.WARNING

    audit.info("below handler level")
    audit.warning("access granted")
    payload = json.loads(collector.recv(65535))
    assert payload["short_message"] == "access granted"
    assert payload["level"] == 5


def test_shutdown_detaches_handlers(collector: socket.socket) -> None:
    gelflog.configure({"targets": _targets(collector)})
    handler = GLOBAL_MANAGER.handler("gelf")
    assert handler in logging.getLogger().handlers

    gelflog.shutdown()
    assert handler not in logging.getLogger().handlers
    assert not GLOBAL_MANAGER.configured


def test_reconfigure_replaces_handlers(collector: socket.socket) -> None:
    gelflog.configure({"targets": _targets(collector)})
    first = GLOBAL_MANAGER.handler("gelf")
    gelflog.configure({"targets": _targets(collector)})
    root_handlers = logging.getLogger().handlers
    assert first not in root_handlers
    assert GLOBAL_MANAGER.handler("gelf") in root_handlers


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"targets": {"enabled": ["missing"]}}, "undefined"),
        ({"targets": {"gelf": {"port": 70000}}}, "invalid port"),
        ({"targets": {"gelf": {"chunk_size": 0}}}, "chunk_size"),
        ({"targets": {"gelf": {"compression": "brotli"}}}, "unknown compression"),
        ({"logging": {"root": {"targets": ["other"]}}}, "unknown target"),
        ({"levels": {"severity": {"DEBUG": 0}}}, "monotonic"),
        ({"levels": {"severity": {"NOTICE": 5}}}, "Unknown logging level"),
        ({"levels": {"severity": {"VERBOSE": 7}}}, "Unknown logging level"),
        ({"targets": {"gelf": {"severity": {"DEBUG": 0}}}}, "invalid severity table"),
        ({"targets": {"gelf": {"severity": {"NOTICE": 5}}}}, "Unknown logging level"),
        ({"targets": {"gelf": {"copy_properties": ["id"]}}}, "cannot copy property"),
        ({"targets": {"gelf": {"copy_properties": ["_id"]}}}, "cannot copy property"),
        ({"targets": {"gelf": {"copy_properties": ["__"]}}}, "cannot copy property"),
    ],
)
def test_invalid_configuration(overrides: Dict[str, Any], message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        gelflog.configure(overrides)


def test_disabled_target_reference_rejected() -> None:
    overrides = {
        "targets": {"enabled": ["gelf"], "backup": {"host": "127.0.0.1"}},
        "logging": {"loggers": {"audit": {"targets": ["backup"]}}},
    }
    with pytest.raises(ConfigurationError, match="not enabled"):
        gelflog.configure(overrides)


def test_target_severity_overrides_levels_table(collector: socket.socket) -> None:
    gelflog.configure(
        {
            "targets": _targets(collector, compression="none", severity={"ERROR": 2}),
            "levels": {"severity": {"WARNING": 5}},
        }
    )
    logger = gelflog.get_logger("payments")
    logger.warning("slow response")
    logger.error("charge failed")

    levels = [json.loads(collector.recv(65535))["level"] for _ in range(2)]
    assert levels == [5, 2]
