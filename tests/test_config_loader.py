from __future__ import annotations

from pathlib import Path

import pytest

from gelflog.config import loader


def test_configuration_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user_dir = tmp_path / "user"
    user_dir.mkdir()
    (user_dir / "gelflog.toml").write_text("""[targets.gelf]\nhost = \"user.example\"\n""")
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(user_dir))

    project_dir = tmp_path / "project"
    project_dir.mkdir()
    (project_dir / "gelflog.toml").write_text("""[targets.gelf]\nhost = \"local.example\"\n""")
    monkeypatch.chdir(project_dir)

    (project_dir / "pyproject.toml").write_text(
        """[tool.gelflog.targets.gelf]\nhost = \"pyproject.example\"\n"""
    )

    monkeypatch.setenv("GELFLOG__TARGETS__GELF__HOST", "env.example")

    config = loader.load_configuration({"targets": {"gelf": {"host": "override.example"}}})
    assert config.target("gelf").options.host == "override.example"

    config = loader.load_configuration({})
    assert config.target("gelf").options.host == "env.example"

    monkeypatch.delenv("GELFLOG__TARGETS__GELF__HOST")
    config = loader.load_configuration({})
    assert config.target("gelf").options.host == "pyproject.example"

    (project_dir / "pyproject.toml").unlink()
    config = loader.load_configuration({})
    assert config.target("gelf").options.host == "local.example"

    (project_dir / "gelflog.toml").unlink()
    config = loader.load_configuration({})
    assert config.target("gelf").options.host == "user.example"


def test_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(tmp_path / "missing"))
    monkeypatch.chdir(tmp_path)

    config = loader.load_configuration({})
    options = config.target("gelf").options

    assert config.targets_enabled == ["gelf"]
    assert config.root_logger.targets == ["gelf"]
    assert options.host == "127.0.0.1"
    assert options.port == 12201
    assert options.facility is None
    assert options.compression == "gzip"
    assert options.chunk_size == 8192
    assert options.copy_properties == ["Notes"]


def test_env_values_are_coerced(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(tmp_path / "missing"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GELFLOG__TARGETS__GELF__PORT", " 12202 ")
    monkeypatch.setenv("GELFLOG__TARGETS__GELF__REUSE_SOCKET", "true")
    monkeypatch.setenv("GELFLOG__TARGETS__GELF__COPY_PROPERTIES", '["Notes", "Ticket"]')
    monkeypatch.setenv("GELFLOG__LOGGING__ROOT__LEVEL", "  DEBUG  ")

    config = loader.load_configuration({})
    options = config.target("gelf").options

    assert options.port == 12202
    assert options.reuse_socket is True
    assert options.copy_properties == ["Notes", "Ticket"]
    assert config.root_logger.level == "DEBUG"


def test_severity_table_reaches_targets(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(tmp_path / "missing"))
    monkeypatch.chdir(tmp_path)
    (tmp_path / "gelflog.toml").write_text(
        """[levels.severity]\nCRITICAL = 2\n\n[targets.gelf]\nfacility = \"billing\"\n"""
    )

    config = loader.load_configuration({})
    options = config.target("gelf").options

    assert config.levels.severity == {"CRITICAL": 2}
    assert options.severity == {"CRITICAL": 2}
    assert options.facility == "billing"


def test_target_severity_overrides_global_table(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(tmp_path / "missing"))
    monkeypatch.chdir(tmp_path)
    (tmp_path / "gelflog.toml").write_text(
        "[levels.severity]\nCRITICAL = 2\nWARNING = 5\n\n"
        "[targets.gelf.severity]\nWARNING = 4\nERROR = 2\n"
    )

    config = loader.load_configuration({})

    assert config.levels.severity == {"CRITICAL": 2, "WARNING": 5}
    assert config.target("gelf").options.severity == {"CRITICAL": 2, "WARNING": 4, "ERROR": 2}
