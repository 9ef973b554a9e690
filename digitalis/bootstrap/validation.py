from __future__ import annotations

from digitalis.config import Config

JWT_SECRET_MIN_BYTES = 32


def validate_startup_config(config: Config) -> None:
    jwt_secret = (config.JWT_SECRET or "").strip()
    if jwt_secret and len(jwt_secret.encode("utf-8")) < JWT_SECRET_MIN_BYTES:
        raise RuntimeError(f"JWT_SECRET must be at least {JWT_SECRET_MIN_BYTES} bytes.")
    if (config.JWT_ALGORITHM or "").strip().upper() != "HS256":
        raise RuntimeError("JWT_ALGORITHM must be HS256.")
    if config.JWT_LEEWAY_SECONDS < 0:
        raise RuntimeError("JWT_LEEWAY_SECONDS must be greater than or equal to 0.")
    if not (config.AUTH_COOKIE_NAME or "").strip():
        raise RuntimeError("AUTH_COOKIE_NAME must not be empty.")
    if not (config.ADMIN_ROLE or "").strip():
        raise RuntimeError("ADMIN_ROLE must not be empty.")
    if config.DB_POOL_SIZE <= 0:
        raise RuntimeError("DB_POOL_SIZE must be greater than 0.")
    if config.DB_MAX_OVERFLOW < 0:
        raise RuntimeError("DB_MAX_OVERFLOW must be greater than or equal to 0.")
    if config.DB_POOL_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("DB_POOL_TIMEOUT_SECONDS must be greater than 0.")
    if config.DB_POOL_RECYCLE_SECONDS <= 0:
        raise RuntimeError("DB_POOL_RECYCLE_SECONDS must be greater than 0.")
    if config.MAILER_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("MAILER_TIMEOUT_SECONDS must be greater than 0.")
    if config.strict_security_mode:
        if not jwt_secret:
            raise RuntimeError("Strict security mode requires JWT_SECRET to be set.")
        if "*" in config.allowed_hosts_list:
            raise RuntimeError("Strict security mode requires explicit ALLOWED_HOSTS (wildcard is not allowed).")
        if "*" in config.cors_allow_origins_list:
            raise RuntimeError("Strict security mode requires explicit CORS_ALLOW_ORIGINS (wildcard is not allowed).")
