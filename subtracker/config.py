"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("configs") / "config.yaml"

# YAML section/key -> settings field
_YAML_KEYS = {
    ("app", "env"): "APP_ENV",
    ("app", "http_host"): "HTTP_HOST",
    ("app", "http_port"): "HTTP_PORT",
    ("app", "api_prefix"): "API_PREFIX",
    ("app", "log_level"): "LOG_LEVEL",
    ("app", "enforce_end_after_start"): "ENFORCE_END_AFTER_START",
    ("database", "url"): "DATABASE_URL",
    ("database", "pool_size"): "DB_POOL_SIZE",
    ("database", "max_overflow"): "DB_MAX_OVERFLOW",
    ("database", "pool_recycle"): "DB_POOL_RECYCLE",
    ("database", "run_migrations"): "RUN_MIGRATIONS",
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Application
    APP_ENV: Literal["dev", "prod"] = "dev"
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str | None = None

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 16
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_RECYCLE: int = 1800  # seconds
    RUN_MIGRATIONS: bool = True

    # Reject end_date < start_date (по умолчанию разрешено, такие подписки дают 0)
    ENFORCE_END_AFTER_START: bool = False

    model_config = SettingsConfigDict(
        env_file=(".env", "configs/.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_prod(self) -> bool:
        return self.APP_ENV == "prod"

    def get_sqlalchemy_url(self) -> str:
        """
        Convert DATABASE_URL to SQLAlchemy format (postgresql+psycopg://)
        """
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+psycopg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+psycopg://", 1)
        return url


def load_yaml_config(path: Path) -> dict:
    """
    Read configs/config.yaml and flatten it into settings field names

    Формат файла:
        app:
          env: prod
          http_port: 8080
        database:
          url: postgresql://user:pass@db:5432/subscriptions
    """
    if not path.exists():
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    values = {}
    for (section, key), field_name in _YAML_KEYS.items():
        section_data = data.get(section) or {}
        if key in section_data and section_data[key] is not None:
            values[field_name] = section_data[key]
    return values


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance

    Если есть configs/config.yaml, его значения приоритетнее переменных окружения.
    """
    return Settings(**load_yaml_config(DEFAULT_CONFIG_PATH))
