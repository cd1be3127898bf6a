"""
Configuration management.

Two kinds of configuration exist:

* The persisted system configuration (``config.json``), written by
  ``perilla init``.  It holds the database location, cache connection
  parameters, the HTTP bind address and the session secret.  It is
  represented by the ``SystemConfig`` dataclass and its nested
  sections.
* Process settings that are not part of the installation (log level,
  log file, token lifetime...).  Like the persisted file these are
  plain dataclasses; the ``Settings`` defaults are read from
  environment variables.

Nothing here is a module level singleton: ``create_app`` receives both
objects explicitly (see ``perilla_api.app.core.context``).
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CONFIG_PATH = "config.json"


def get_config_path() -> str:
    """Path of the persisted config, overridable with ``PERILLA_CONFIG``."""
    return os.getenv("PERILLA_CONFIG", DEFAULT_CONFIG_PATH)


@dataclass
class DatabaseConfig:
    # Path of the SQLite file.  Relative paths are resolved against the
    # directory holding config.json (see ``SystemConfig.database_path``).
    url: str = "perilla.db"
    # Extra keyword arguments for ``sqlite3.connect`` (e.g. ``timeout``).
    options: Dict[str, Any] = field(default_factory=lambda: {"timeout": 5.0})


@dataclass
class RedisConfig:
    host: str = "127.0.0.1"
    port: int = 6379
    db: int = 0
    prefix: str = "perilla"


@dataclass
class HttpConfig:
    hostname: str = "localhost"
    port: int = 8680
    https: bool = False


@dataclass
class SystemConfig:
    """Installation configuration stored in ``config.json``."""

    db: DatabaseConfig = field(default_factory=DatabaseConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    session_secret: str = "change_me"
    # Directory the config was loaded from; not persisted.
    base_dir: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[str] = None) -> "SystemConfig":
        """Build a config from its JSON form.  Missing keys keep their defaults."""
        db = data.get("db") or {}
        redis = data.get("redis") or {}
        http = data.get("http") or {}
        defaults = cls()
        return cls(
            db=DatabaseConfig(
                url=db.get("url", defaults.db.url),
                options=dict(db.get("options", defaults.db.options)),
            ),
            redis=RedisConfig(
                host=redis.get("host", defaults.redis.host),
                port=int(redis.get("port", defaults.redis.port)),
                db=int(redis.get("db", defaults.redis.db)),
                prefix=redis.get("prefix", defaults.redis.prefix),
            ),
            http=HttpConfig(
                hostname=http.get("hostname", defaults.http.hostname),
                port=int(http.get("port", defaults.http.port)),
                https=bool(http.get("https", defaults.http.https)),
            ),
            session_secret=data.get("sessionSecret", defaults.session_secret),
            base_dir=base_dir,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "db": {"url": self.db.url, "options": dict(self.db.options)},
            "redis": {
                "host": self.redis.host,
                "port": self.redis.port,
                "db": self.redis.db,
                "prefix": self.redis.prefix,
            },
            "http": {
                "port": self.http.port,
                "hostname": self.http.hostname,
                "https": self.http.https,
            },
            "sessionSecret": self.session_secret,
        }

    def database_path(self) -> str:
        """Resolve ``db.url`` to an absolute path."""
        if self.db.url == ":memory:" or os.path.isabs(self.db.url):
            return self.db.url
        base = Path(self.base_dir) if self.base_dir else Path.cwd()
        return str((base / self.db.url).resolve())


def load_config(path: Optional[str] = None) -> SystemConfig:
    """Read ``config.json``.

    Raises ``FileNotFoundError`` when the file does not exist and
    ``ValueError`` when it is not valid JSON.
    """
    config_path = Path(path or get_config_path()).resolve()
    with open(config_path, "r", encoding="utf-8") as fp:
        try:
            data = json.load(fp)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config file {config_path}: {e}") from e
    return SystemConfig.from_dict(data, base_dir=str(config_path.parent))


def save_config(config: SystemConfig, path: Optional[str] = None) -> None:
    config_path = Path(path or get_config_path())
    config_path.write_text(json.dumps(config.to_dict(), indent="\t"), encoding="utf-8")


@dataclass
class Settings:
    """Process settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Perilla")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Empty string disables the file handler.
    log_file: str = os.getenv("LOG_FILE", "app.log")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    # Directory holding the built frontend; served at ``/`` if present.
    frontend_path: str = os.getenv("FRONTEND_PATH", "frontend")
