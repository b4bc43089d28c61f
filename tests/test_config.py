"""
Tests for layered configuration loading.
"""

import pytest

from realty_api.config import DEV_JWT_SECRET, ConfigManager


def test_defaults_without_files(tmp_path):
    settings = ConfigManager(str(tmp_path), environ={}).settings()
    assert settings.port == 3000
    assert settings.host == "0.0.0.0"
    assert settings.store_uri == "mongodb://localhost:27017/ssp-realty"
    assert settings.admin.email == "admin@ssprealty.com"
    assert settings.admin.password_hash is None
    assert not settings.admin.login_enabled
    assert settings.jwt_secret == DEV_JWT_SECRET
    assert settings.cors_origins == ("*",)


def test_yaml_overrides_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "web:\n  port: 8081\nstore:\n  uri: memory://\n", encoding="utf-8",
    )
    settings = ConfigManager(str(tmp_path), environ={}).settings()
    assert settings.port == 8081
    assert settings.store_uri == "memory://"
    assert settings.host == "0.0.0.0"


def test_environment_beats_dotenv_and_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("web:\n  port: 8081\n", encoding="utf-8")
    (tmp_path / ".env").write_text(
        "PORT=8082\nJWT_SECRET=from-dotenv\nADMIN_EMAIL=owner@ssprealty.com\n",
        encoding="utf-8",
    )
    settings = ConfigManager(str(tmp_path), environ={"PORT": "9000"}).settings()
    assert settings.port == 9000
    assert settings.jwt_secret == "from-dotenv"
    assert settings.admin.email == "owner@ssprealty.com"


def test_password_hash_enables_login(tmp_path):
    settings = ConfigManager(
        str(tmp_path), environ={"ADMIN_PASSWORD_HASH": "$2b$12$abc"},
    ).settings()
    assert settings.admin.password_hash == "$2b$12$abc"
    assert settings.admin.login_enabled


def test_empty_password_hash_means_login_disabled(tmp_path):
    settings = ConfigManager(str(tmp_path), environ={"ADMIN_PASSWORD_HASH": ""}).settings()
    assert settings.admin.password_hash is None


def test_cors_origins_split_from_environment(tmp_path):
    settings = ConfigManager(
        str(tmp_path), environ={"CORS_ORIGINS": "https://a.com, https://b.com"},
    ).settings()
    assert settings.cors_origins == ("https://a.com", "https://b.com")


def test_invalid_port_raises(tmp_path):
    with pytest.raises(ValueError):
        ConfigManager(str(tmp_path), environ={"PORT": "eighty"}).settings()


def test_corrupt_yaml_falls_back_to_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text("web: [unclosed\n", encoding="utf-8")
    manager = ConfigManager(str(tmp_path), environ={})
    config = manager.load()
    assert "_config_error" in config
    assert manager.settings().port == 3000


def test_settings_are_immutable(tmp_path):
    settings = ConfigManager(str(tmp_path), environ={}).settings()
    with pytest.raises(AttributeError):
        settings.port = 1
