from __future__ import annotations

from fastapi import FastAPI

from digitalis.routes import register_routes


def register_domain_routes(api: FastAPI) -> None:
    register_routes(api)
