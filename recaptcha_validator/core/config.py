"""Configuration management for the reCAPTCHA validation service.

Configuration is loaded from environment variables, optionally seeded
from a local ``.env`` file. Process environment always wins over the file.
"""

from __future__ import annotations

import os
from enum import StrEnum
from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recaptcha_validator.core.errors import ConfigurationError

ENV_FILE = ".env"


class AppEnvironment(StrEnum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AppConfig(BaseSettings):
    name: str = Field(default="recaptcha-validator")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="0.1.0")
    log_level: LogLevel = Field(default=LogLevel.INFO)

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=ENV_FILE, extra="ignore")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v.strip().lower())

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.strip().upper())


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    # Plain PORT is what container platforms inject.
    port: int = Field(default=1323, validation_alias=AliasChoices("port", "server_port"))
    workers: int = Field(default=1)

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=ENV_FILE,
        extra="ignore",
        populate_by_name=True,
    )


class RecaptchaConfig(BaseSettings):
    secret_key: SecretStr = Field(default=SecretStr(""))
    timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="RECAPTCHA_", env_file=ENV_FILE, extra="ignore")

    @property
    def has_secret_key(self) -> bool:
        return bool(self.secret_key.get_secret_value().strip())


class SecurityConfig(BaseSettings):
    cors_allowed_origins: str = Field(default="*")
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "OPTIONS"])
    cors_allow_headers: list[str] = Field(default=["Content-Type"])
    max_request_size_bytes: int = Field(default=65_536)

    model_config = SettingsConfigDict(env_prefix="SECURITY_", env_file=ENV_FILE, extra="ignore")

    @field_validator("cors_allowed_origins", mode="after")
    @classmethod
    def validate_cors_allowed_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class ObservabilityConfig(BaseSettings):
    service_name: str = Field(default="recaptcha-validator")
    otlp_endpoint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("exporter_otlp_endpoint", "otlp_endpoint"),
    )
    otlp_insecure: bool = Field(
        default=True,
        validation_alias=AliasChoices("exporter_otlp_insecure", "otlp_insecure"),
    )
    log_record_format: str = Field(default="json")

    model_config = SettingsConfigDict(
        env_prefix="OTEL_",
        env_file=ENV_FILE,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def apply_exporter_env_fallbacks(self) -> ObservabilityConfig:
        """Support standard OpenTelemetry env names used in container orchestration."""
        if not self.otlp_endpoint:
            endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv("OTEL_OTLP_ENDPOINT")
            if endpoint:
                self.otlp_endpoint = endpoint
        return self


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    recaptcha: RecaptchaConfig = Field(default_factory=RecaptchaConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    metrics_token: str | None = Field(default=None)

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    @model_validator(mode="after")
    def validate_security_settings(self) -> Settings:
        if (
            self.app.env == AppEnvironment.PROD
            and self.observability.otlp_endpoint
            and self.observability.otlp_insecure
        ):
            raise ValueError("OTLP insecure mode is not allowed in production")
        return self


def ensure_required_settings(settings: Settings) -> None:
    """Fail fast when a setting the service cannot run without is missing."""
    if not settings.recaptcha.has_secret_key:
        raise ConfigurationError(
            "RECAPTCHA_SECRET_KEY is not configured",
            details={"setting": "RECAPTCHA_SECRET_KEY"},
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
