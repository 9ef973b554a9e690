from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse

from digitalis.bootstrap.contracts import DBHealthCheck
from digitalis.schemas import ErrorResponse, HealthResponse, ReadinessCheck, ReadinessResponse


def register_system_routes(api: FastAPI, *, db_health_check: DBHealthCheck) -> None:
    @api.get("/", tags=["system"])
    async def hello_world() -> PlainTextResponse:
        return PlainTextResponse("API Server Available")

    @api.get("/healthcheck", tags=["system"], response_model=HealthResponse, responses={500: {"model": ErrorResponse}})
    async def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok")

    @api.get(
        "/health/ready",
        tags=["system"],
        response_model=ReadinessResponse,
        responses={500: {"model": ErrorResponse}, 503: {"model": ReadinessResponse}},
    )
    async def health_ready() -> ReadinessResponse | JSONResponse:
        db_ok, db_detail = db_health_check()
        payload = ReadinessResponse(
            status="ok" if db_ok else "degraded",
            checks={"database": ReadinessCheck(ok=db_ok, detail=db_detail)},
        )
        if db_ok:
            return payload
        return JSONResponse(status_code=503, content=payload.model_dump())
