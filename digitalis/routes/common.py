from __future__ import annotations

from typing import Any, cast

from fastapi import Request

from digitalis.errors import AuthenticationRequired, http_error
from digitalis.mediator import Identity, Mediator, RequestContext
from digitalis.schemas import ErrorResponse
from digitalis.security import resolve_identity

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    501: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def get_mediator(request: Request) -> Mediator:
    mediator = getattr(request.app.state, "mediator", None)
    if mediator is None:
        raise RuntimeError("app.state.mediator is not configured")
    return cast(Mediator, mediator)


def get_request_context(request: Request) -> RequestContext:
    config = request.app.state.config
    identity: Identity | None = None
    auth_error: str | None = None
    try:
        identity = resolve_identity(request, config)
    except AuthenticationRequired as exc:
        # Public requests still run; guarded ones report this reason.
        auth_error = exc.reason or "invalid_token"
    return RequestContext(
        request_id=getattr(request.state, "request_id", None) or "-",
        identity=identity,
        auth_error=auth_error,
        client_ip=request.client.host if request.client else None,
        host=request.url.hostname,
        path=request.url.path,
        query=request.url.query,
    )


def ensure_resource_found(resource: Any) -> Any:
    if not resource:
        raise http_error(404, "NOT_FOUND", "Not Found")
    return resource
