from __future__ import annotations

from typing import List

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_TITLE: str = "Digitalis"
    APP_ENV: str = "development"
    DEBUG: bool = False
    PORT: int = 8000
    SECURITY_STRICT_MODE: bool = False

    DATABASE_URL: str | None = None
    POSTGRES_HOST: str = "127.0.0.1"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "digitalis"
    POSTGRES_PASSWORD: str = "change_me"
    POSTGRES_DB: str = "digitalis"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 3600
    CREATE_SCHEMA_ON_STARTUP: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    JWT_SECRET: str | None = None
    JWT_ALGORITHM: str = "HS256"
    JWT_LEEWAY_SECONDS: int = 0
    JWT_AUDIENCE: str | None = None
    JWT_ISSUER: str | None = None
    AUTH_COOKIE_NAME: str = "digitalis_auth"
    ADMIN_ROLE: str = "admin"
    SCOPE_DOCUMENTS_WRITE: str = "documents:write"
    SCOPE_DOCUMENTS_SHARE: str = "documents:share"

    MAILER_URL: str | None = None
    MAILER_API_KEY: str | None = None
    MAILER_SENDER: str = "no-reply@digitalis.local"
    MAILER_TIMEOUT_SECONDS: float = 5.0

    CORS_ALLOW_ORIGINS: str = "*"
    CORS_ALLOW_METHODS: str = "GET,POST,DELETE,OPTIONS"
    CORS_ALLOW_HEADERS: str = "*"
    ALLOWED_HOSTS: str = "*"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        explicit = (self.DATABASE_URL or "").strip()
        if explicit:
            return explicit
        return URL.create(
            "postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=int(self.POSTGRES_PORT),
            database=self.POSTGRES_DB,
        ).render_as_string(hide_password=False)

    @staticmethod
    def _parse_csv(value: str) -> List[str]:
        return [item.strip() for item in value.split(",") if item.strip()]

    @property
    def cors_allow_origins_list(self) -> List[str]:
        return self._parse_csv(self.CORS_ALLOW_ORIGINS) or ["*"]

    @property
    def cors_allow_methods_list(self) -> List[str]:
        return self._parse_csv(self.CORS_ALLOW_METHODS) or ["GET", "POST", "DELETE", "OPTIONS"]

    @property
    def cors_allow_headers_list(self) -> List[str]:
        return self._parse_csv(self.CORS_ALLOW_HEADERS) or ["*"]

    @property
    def allowed_hosts_list(self) -> List[str]:
        return self._parse_csv(self.ALLOWED_HOSTS) or ["*"]

    @property
    def app_env(self) -> str:
        value = (self.APP_ENV or "").strip().lower()
        return value or "development"

    @property
    def strict_security_mode(self) -> bool:
        if bool(self.SECURITY_STRICT_MODE):
            return True
        return self.app_env in {"prod", "production"}

    @property
    def mailer_enabled(self) -> bool:
        return bool((self.MAILER_URL or "").strip())
