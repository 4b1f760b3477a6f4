from __future__ import annotations

import pytest
import yaml

from console.config import BACKEND_TOKEN, BACKEND_URL, DEFAULTS, ConfigManager


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(BACKEND_URL, raising=False)
    monkeypatch.delenv(BACKEND_TOKEN, raising=False)


def test_defaults_without_config_file(tmp_path) -> None:
    config = ConfigManager(str(tmp_path)).load()
    assert config == DEFAULTS
    assert config is not DEFAULTS


def test_yaml_is_merged_over_defaults(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text(
        "backend:\n  url: http://mc.local:2500\nalerts:\n  duration: 5\n",
        encoding="utf-8",
    )

    config = ConfigManager(str(tmp_path)).load()

    assert config["backend"]["url"] == "http://mc.local:2500"
    assert config["backend"]["ping_path"] == DEFAULTS["backend"]["ping_path"]
    assert config["alerts"]["duration"] == 5
    assert config["alerts"]["fast_duration"] == 10


def test_broken_yaml_falls_back_to_defaults(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text("backend: [unclosed\n", encoding="utf-8")

    config = ConfigManager(str(tmp_path)).load()

    assert config["backend"] == DEFAULTS["backend"]
    assert "_config_error" in config


def test_environment_overrides_backend_url(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(BACKEND_URL, "http://override:1")
    assert ConfigManager(str(tmp_path)).load()["backend"]["url"] == "http://override:1"


def test_update_writes_known_sections_only(tmp_path) -> None:
    manager = ConfigManager(str(tmp_path))

    config = manager.update({"web": {"port": 9000}})

    assert config["web"] == {"port": 9000, "host": "0.0.0.0"}
    saved = yaml.safe_load((tmp_path / "config.yaml").read_text(encoding="utf-8"))
    assert saved["web"]["port"] == 9000
    assert set(saved) == set(DEFAULTS)


def test_update_rejects_unknown_sections(tmp_path) -> None:
    with pytest.raises(ValueError):
        ConfigManager(str(tmp_path)).update({"agent": {"model": "x"}})


def test_secrets_roundtrip(tmp_path) -> None:
    manager = ConfigManager(str(tmp_path))
    (tmp_path / ".env").write_text("OTHER=1\n", encoding="utf-8")

    manager.set_secret(BACKEND_TOKEN, "short")
    manager.set_secret(BACKEND_TOKEN, "eyJhbGciOiJIUzI1NiJ9.payload")

    assert manager.get_secret(BACKEND_TOKEN) == "eyJhbGciOiJIUzI1NiJ9.payload"
    assert manager.get_secrets() == {"keys": {BACKEND_TOKEN: "eyJhbG****load"}}
    assert (tmp_path / ".env").read_text(encoding="utf-8").count(BACKEND_TOKEN) == 1

    manager.delete_secret(BACKEND_TOKEN)
    assert manager.get_secret(BACKEND_TOKEN) is None
    assert (tmp_path / ".env").read_text(encoding="utf-8") == "OTHER=1\n"


def test_secret_falls_back_to_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(BACKEND_TOKEN, "from-env")
    assert ConfigManager(str(tmp_path)).get_secret(BACKEND_TOKEN) == "from-env"


def test_secret_errors(tmp_path) -> None:
    manager = ConfigManager(str(tmp_path))

    with pytest.raises(ValueError):
        manager.set_secret(BACKEND_TOKEN, "")
    with pytest.raises(ValueError):
        manager.set_secret("PATH", "/tmp")
    with pytest.raises(KeyError):
        manager.delete_secret(BACKEND_TOKEN)

    (tmp_path / ".env").write_text("OTHER=value\n", encoding="utf-8")
    with pytest.raises(KeyError):
        manager.delete_secret(BACKEND_TOKEN)
