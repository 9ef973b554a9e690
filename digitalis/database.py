from typing import Any

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, create_engine, func
from sqlalchemy.engine import Engine

metadata = MetaData()

DOCUMENTS = Table(
    "documents",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner", String(255), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("body", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


def init_db(
    database_url: str,
    *,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout_seconds: int = 30,
    pool_recycle_seconds: int = 3600,
) -> Engine:
    options: dict[str, Any] = {"pool_pre_ping": True, "future": True}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=max(1, int(pool_size)),
            max_overflow=max(0, int(max_overflow)),
            pool_timeout=max(1, int(pool_timeout_seconds)),
            pool_recycle=max(1, int(pool_recycle_seconds)),
        )
    return create_engine(database_url, **options)


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)
