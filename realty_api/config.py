"""
SSP Realty - Configuration Manager
====================================
Loads the backend configuration from four layers, each overriding the one
before it:

1. DEFAULTS     - Local development values (unsafe in production)
2. config.yaml  - Optional non-sensitive settings (port, store URI, logging)
3. .env         - Secrets kept next to the project (admin hash, JWT secret)
4. Environment  - Process environment variables (highest priority)

The merged result is frozen into a Settings value at startup. The admin
identity and the signing secret never change for the lifetime of the
process; the auth services receive them at construction.

Usage:
    config = ConfigManager(project_dir="/path/to/ssp-realty")
    settings = config.settings()       # Immutable Settings
    settings.admin.email               # Configured admin email
"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values


logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "ssp-realty-dev-secret-change-in-production"

# Default configuration values used when config.yaml and the environment
# leave a setting unspecified. Only suitable for local development.
DEFAULTS = {
    "web": {
        "host": "0.0.0.0",
        "port": 3000,
        "cors_origins": ["*"],
    },
    "store": {
        "uri": "mongodb://localhost:27017/ssp-realty",
    },
    "admin": {
        "email": "admin@ssprealty.com",
        "password_hash": None,
    },
    "auth": {
        "jwt_secret": DEV_JWT_SECRET,
    },
    "logging": {
        "level": "INFO",
        "format": "text",
    },
}

# Environment variable -> (section, key) in the configuration tree.
ENV_KEYS = {
    "HOST": ("web", "host"),
    "PORT": ("web", "port"),
    "CORS_ORIGINS": ("web", "cors_origins"),
    "MONGODB_URI": ("store", "uri"),
    "ADMIN_EMAIL": ("admin", "email"),
    "ADMIN_PASSWORD_HASH": ("admin", "password_hash"),
    "JWT_SECRET": ("auth", "jwt_secret"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
}


@dataclass(frozen=True)
class AdminIdentity:
    """The single administrator. A missing hash means login is disabled."""
    email: str
    password_hash: str | None = None

    @property
    def login_enabled(self) -> bool:
        return bool(self.password_hash)


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings built once at startup."""
    host: str
    port: int
    store_uri: str
    admin: AdminIdentity
    jwt_secret: str
    log_level: str = "INFO"
    log_format: str = "text"
    cors_origins: tuple[str, ...] = ("*",)


class ConfigManager:
    """
    Layered configuration loader for the SSP Realty backend.

    Attributes:
        project_dir: Root directory of the project.
        config_path: Full path to config.yaml.
        env_path:    Full path to the .env file.
    """

    def __init__(self, project_dir: str, environ: Mapping[str, str] | None = None):
        """
        Initialize the config manager.

        Args:
            project_dir: Absolute path to the project root directory.
            environ:     Environment mapping to read overrides from.
                         Defaults to os.environ.
        """
        self.project_dir = project_dir
        self.config_path = os.path.join(project_dir, "config.yaml")
        self.env_path = os.path.join(project_dir, ".env")
        self.environ = os.environ if environ is None else environ

    def load(self) -> dict:
        """
        Load and merge configuration from every layer.

        Returns:
            A dictionary containing the full configuration tree. If
            config.yaml could not be parsed, the error text is recorded
            under the '_config_error' key and the file is ignored.
        """
        config = _deep_copy(DEFAULTS)

        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    user_config = yaml.safe_load(f) or {}
                _deep_merge(config, user_config)
            except (yaml.YAMLError, OSError) as e:
                config["_config_error"] = str(e)

        env_file = dotenv_values(self.env_path) if os.path.exists(self.env_path) else {}
        for source in (env_file, self.environ):
            for env_name, (section, key) in ENV_KEYS.items():
                value = source.get(env_name)
                if value is not None:
                    config[section][key] = value

        return config

    def settings(self) -> Settings:
        """
        Freeze the merged configuration into a Settings value.

        Returns:
            Immutable Settings.

        Raises:
            ValueError: If the port is not an integer.
        """
        config = self.load()
        if "_config_error" in config:
            logger.error("Ignoring unreadable config.yaml: %s", config["_config_error"])

        web = config["web"]
        try:
            port = int(web["port"])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid port: {web['port']!r}")

        origins = web.get("cors_origins") or ["*"]
        if isinstance(origins, str):
            origins = [o.strip() for o in origins.split(",") if o.strip()]

        admin = config["admin"]
        jwt_secret = config["auth"]["jwt_secret"] or DEV_JWT_SECRET
        if jwt_secret == DEV_JWT_SECRET:
            logger.warning("Using the development JWT secret; set JWT_SECRET in production")

        return Settings(
            host=str(web["host"]),
            port=port,
            store_uri=str(config["store"]["uri"]),
            admin=AdminIdentity(
                email=str(admin["email"]),
                password_hash=admin.get("password_hash") or None,
            ),
            jwt_secret=jwt_secret,
            log_level=str(config["logging"]["level"]),
            log_format=str(config["logging"]["format"]),
            cors_origins=tuple(origins),
        )


# -- Helper Functions ---------------------------------------------------------

def _deep_copy(d: dict) -> dict:
    """Create a deep copy of a nested dictionary."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy(value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def _deep_merge(base: dict, override: dict[str, Any]) -> None:
    """
    Recursively merge 'override' into 'base' (in-place).

    For nested dicts, values are merged recursively.
    For all other types, override replaces base.
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
