import logging
from typing import Any
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from resetdb.core.exceptions import ConfigurationError

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

class Settings(BaseSettings):
    """
    Reset configuration settings.

    Loads values from environment variables or .env file.
    """
    PROJECT_NAME: str = "resetdb"

    # DATABASE
    DATABASE_URL: str = Field(description="SQLAlchemy connection URL of the database to wipe")
    DB_DIALECT: str | None = Field(default=None, description="Overrides the dialect inferred from DATABASE_URL")
    DB_SCHEMA_OWNER: str | None = Field(default=None, description="Owner of the tables to drop (Oracle)")

    # LOGGING
    LOG_LEVEL: str = "INFO"

    @field_validator("DATABASE_URL")
    @classmethod
    def check_database_url(cls, v: str) -> str:
        try:
            make_url(v)
        except ArgumentError as e:
            raise ValueError(f"Invalid database URL: {e}") from e
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            if v not in LOG_LEVELS:
                raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return v

    @property
    def dialect_name(self) -> str:
        """
        Explicit DB_DIALECT, or the backend name of DATABASE_URL (e.g. "mssql").
        """
        return self.DB_DIALECT or make_url(self.DATABASE_URL).get_backend_name()

    @property
    def schema_owner(self) -> str | None:
        return self.DB_SCHEMA_OWNER or make_url(self.DATABASE_URL).username

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

def get_settings(**overrides: Any) -> Settings:
    """
    Build the settings, letting non-empty keyword overrides win over the environment.

    Raises ConfigurationError when the result is invalid or incomplete.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
