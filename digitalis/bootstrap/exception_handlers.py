from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from digitalis.errors import Violation, error_response, normalize_http_exception
from digitalis.problem_details import BoundaryTranslator, DispositionTable, register_problem_details


def _request_violations(exc: RequestValidationError) -> list[Violation]:
    violations = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header", "cookie")]
        violations.append(
            Violation(
                field=".".join(loc) or "request",
                message=str(err.get("msg", "invalid request")),
                rule=err.get("type"),
            )
        )
    return violations


def register_exception_handlers(
    api: FastAPI,
    *,
    logger: logging.Logger,
    table: DispositionTable | None = None,
) -> BoundaryTranslator:
    @api.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return normalize_http_exception(request, exc)

    @api.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        violations = _request_violations(exc)
        return error_response(
            request,
            status_code=400,
            code="VALIDATION_ERROR",
            message="; ".join(violation.message for violation in violations) or "invalid request",
            violations=violations,
        )

    return register_problem_details(api, logger=logger, table=table)
