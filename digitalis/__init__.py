import logging
from contextlib import AbstractContextManager
from contextlib import asynccontextmanager
from contextlib import suppress
from typing import Any, cast

from fastapi import FastAPI
from sqlalchemy import text

from digitalis.bootstrap import (
    build_mediator,
    register_core_middleware,
    register_domain_routes,
    register_exception_handlers,
    register_system_routes,
    validate_startup_config,
)
from digitalis.config import Config
from digitalis.database import create_schema, init_db
from digitalis.logging_config import configure_logging
from digitalis.mailer import MailerPort, build_mailer
from digitalis.observability import register_observability
from digitalis.version import APP_VERSION

OPENAPI_TAGS: list[dict[str, str]] = [
    {"name": "system", "description": "System and health endpoints"},
    {"name": "documents", "description": "Document commands and queries"},
]

logger = logging.getLogger("digitalis.api")


def create_app(app_config: Config | None = None, *, mailer: MailerPort | None = None) -> FastAPI:
    if app_config is None:
        app_config = Config()

    configure_logging(level=app_config.LOG_LEVEL, json_logs=app_config.LOG_JSON)
    validate_startup_config(app_config)

    @asynccontextmanager
    async def _lifespan(_api: FastAPI):
        try:
            yield
        finally:
            db_engine = getattr(_api.state, "db_engine", None)
            if db_engine is None or not hasattr(db_engine, "dispose"):
                return
            with suppress(Exception):
                db_engine.dispose()

    api = FastAPI(
        title=app_config.APP_TITLE,
        version=APP_VERSION,
        description="Command and query API dispatched through a mediator pipeline",
        openapi_tags=OPENAPI_TAGS,
        lifespan=_lifespan,
    )
    api.state.config = app_config

    db_engine = init_db(
        app_config.database_url,
        pool_size=app_config.DB_POOL_SIZE,
        max_overflow=app_config.DB_MAX_OVERFLOW,
        pool_timeout_seconds=app_config.DB_POOL_TIMEOUT_SECONDS,
        pool_recycle_seconds=app_config.DB_POOL_RECYCLE_SECONDS,
    )
    if app_config.CREATE_SCHEMA_ON_STARTUP:
        create_schema(db_engine)

    def session_provider() -> AbstractContextManager[Any]:
        return cast(AbstractContextManager[Any], api.state.db_engine.begin())

    api.state.db_engine = db_engine
    api.state.session_provider = session_provider
    api.state.mediator = build_mediator(
        app_config,
        session_provider=session_provider,
        mailer=mailer or build_mailer(app_config),
        logger=logging.getLogger("digitalis.mediator"),
    )

    def db_health_check() -> tuple[bool, str | None]:
        try:
            with api.state.session_provider() as conn:
                conn.execute(text("SELECT 1"))
            return True, None
        except Exception as exc:
            logger.exception("health_db_check_failed", extra={"error_type": type(exc).__name__})
            return False, "database connection failed"

    register_exception_handlers(api, logger=logger)
    register_core_middleware(api, app_config)
    register_observability(api)
    register_domain_routes(api)
    register_system_routes(api, db_health_check=db_health_check)

    return api
