from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, PostgresDsn, RedisDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod", "test"] = Field(default="local")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)
    API_PREFIX: str = Field(default="/api/v1")


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="contentgen")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=data.get("POSTGRES_PASSWORD", "postgres"),
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "contentgen"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class RedisSettings(CustomSettings):
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB: int = Field(default=0)
    REDIS_PASSWORD: SecretStr = Field(default="")
    REDIS_URL: RedisDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_redis_url(cls, data: dict):
        if isinstance(data, dict) and not data.get("REDIS_URL"):
            password = data.get("REDIS_PASSWORD", "")
            _built_uri = RedisDsn.build(
                scheme="redis",
                host=data.get("REDIS_HOST", "localhost"),
                port=int(data.get("REDIS_PORT", 6379)),
                path=f"/{data.get('REDIS_DB', 0)}",
                password=password if password else None,
            ).unicode_string()
            data["REDIS_URL"] = _built_uri
        return data


class AuthSettings(CustomSettings):
    """Bearer token configuration.

    Env vars:
    - JWT_SECRET_KEY
    - JWT_ALGORITHM
    - ACCESS_TOKEN_EXPIRE_MINUTES
    - BCRYPT_ROUNDS
    """

    JWT_SECRET_KEY: SecretStr = Field(default="change-me")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)
    BCRYPT_ROUNDS: int = Field(default=12)


class WebhookSettings(CustomSettings):
    """External content generation webhook.

    Env vars:
    - WEBHOOK_URL
    - WEBHOOK_TIMEOUT_SECONDS
    """

    WEBHOOK_URL: str = Field(default="")
    WEBHOOK_TIMEOUT_SECONDS: float = Field(default=60.0)


class RateLimitSettings(CustomSettings):
    RATE_LIMIT_MAX_ATTEMPTS: int = Field(default=50)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=60 * 60 * 24)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    REDIS: RedisSettings = Field(default_factory=RedisSettings)
    AUTH: AuthSettings = Field(default_factory=AuthSettings)
    WEBHOOK: WebhookSettings = Field(default_factory=WebhookSettings)
    RATE_LIMIT: RateLimitSettings = Field(default_factory=RateLimitSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
