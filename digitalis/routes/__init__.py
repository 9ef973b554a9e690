from typing import Any

from fastapi import FastAPI

from digitalis.routes.documents import router as documents_router


def register_routes(app: FastAPI, *, dependencies: list[Any] | None = None) -> None:
    app.include_router(documents_router, dependencies=dependencies or [])
