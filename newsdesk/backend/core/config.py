"""
Configuration Management.

Two sources, nothing hardcoded:

config/.env (secrets, via pydantic-settings)
    DB_PASSWORD, JWT_SECRET, CRYPTO_SERVICE_API_KEY, EMAIL_SERVICE_API_KEY,
    TELEGRAM_SERVICE_API_KEY, SERVICE_TOKEN_SECRET, PAYLOAD_SECRET

config/settings/*.yaml (everything else, validated by config_schema)
    application, database, logging, features, security, services
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from newsdesk.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    FeaturesSchema,
    LoggingSchema,
    SecuritySchema,
    ServicesSchema,
)

PROJECT_MARKER = ".project_root"


def find_project_root() -> Path:
    """Walk up from the working directory to the directory holding .project_root."""
    for directory in (Path.cwd(), *Path.cwd().parents):
        if (directory / PROJECT_MARKER).exists():
            return directory
    raise RuntimeError(f"Project root not found. Ensure {PROJECT_MARKER} file exists.")


def load_yaml_config(filename: str) -> dict[str, Any]:
    path = find_project_root() / "config" / "settings" / filename
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets only. Read from config/.env, overridable by the environment."""

    db_password: str
    jwt_secret: str
    crypto_service_api_key: str
    email_service_api_key: str
    telegram_service_api_key: str
    service_token_secret: str
    payload_secret: str

    model_config = SettingsConfigDict(env_file_encoding="utf-8", case_sensitive=False, extra="ignore")


class AppConfig:
    """
    Typed view over config/settings/*.yaml.

    Each file is validated once, at construction; a bad file fails startup
    with the file name and the pydantic errors.
    """

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    features: FeaturesSchema
    security: SecuritySchema
    services: ServicesSchema

    SECTIONS: dict[str, type[BaseModel]] = {
        "application": ApplicationSchema,
        "database": DatabaseSchema,
        "logging": LoggingSchema,
        "features": FeaturesSchema,
        "security": SecuritySchema,
        "services": ServicesSchema,
    }

    def __init__(self) -> None:
        for section, schema in self.SECTIONS.items():
            setattr(self, section, self._load(schema, f"{section}.yaml"))

    @staticmethod
    def _load(schema: type[BaseModel], filename: str) -> BaseModel:
        try:
            return schema(**load_yaml_config(filename))
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_url(async_driver: bool = True) -> str:
    """
    Build the SQLAlchemy URL from database.yaml and DB_PASSWORD.

    With async_driver=False the "+asyncpg" suffix is dropped, for tools
    that need a synchronous driver.
    """
    db = get_app_config().database
    driver = db.driver if async_driver else db.driver.partition("+")[0]
    return f"{driver}://{db.user}:{get_settings().db_password}@{db.host}:{db.port}/{db.name}"
