from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

DEFAULT_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    501: "NOT_IMPLEMENTED",
    503: "SERVICE_UNAVAILABLE",
}

DEFAULT_ERROR_MESSAGES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
}


@dataclass(frozen=True)
class Violation:
    field: str
    message: str
    rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class DigitalisError(Exception):
    code: str = "INTERNAL_ERROR"
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def details(self) -> dict[str, Any] | None:
        return None


class AuthenticationRequired(DigitalisError):
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"

    def __init__(self, message: str | None = None, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason

    def details(self) -> dict[str, Any] | None:
        if self.reason is None:
            return None
        return {"reason": self.reason}


class AccessDenied(DigitalisError):
    code = "FORBIDDEN"
    default_message = "Forbidden"

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason

    def details(self) -> dict[str, Any] | None:
        return {"reason": self.reason}


class InputInvalid(DigitalisError):
    code = "VALIDATION_ERROR"
    default_message = "Input validation failed"

    def __init__(self, violations: Sequence[Violation], message: str | None = None) -> None:
        if not violations:
            raise ValueError("InputInvalid requires at least one violation")
        self.violations: tuple[Violation, ...] = tuple(violations)
        super().__init__(message or "; ".join(violation.message for violation in self.violations))


class UnsupportedOperation(DigitalisError):
    code = "UNSUPPORTED_OPERATION"
    default_message = "Operation is not supported"


class HandlerNotFound(UnsupportedOperation):
    def __init__(self, request_type: type) -> None:
        super().__init__(f"No handler registered for {request_type.__qualname__}")
        self.request_type = request_type


class DependencyUnavailable(DigitalisError):
    code = "SERVICE_UNAVAILABLE"
    default_message = "Service Unavailable"

    def __init__(self, dependency: str, message: str | None = None) -> None:
        super().__init__(message)
        self.dependency = dependency

    def details(self) -> dict[str, Any] | None:
        return {"dependency": self.dependency}


class FeatureNotImplemented(DigitalisError, NotImplementedError):
    code = "NOT_IMPLEMENTED"
    default_message = "Not Implemented"


def build_error_payload(
    *,
    code: str,
    message: str,
    request_id: Optional[str] = None,
    details: Optional[Any] = None,
    violations: Optional[Sequence[Violation]] = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "code": code,
        "message": message,
        "error": message,
    }
    if request_id:
        payload["request_id"] = request_id
    if details is not None:
        payload["details"] = jsonable_encoder(details)
    if violations is not None:
        payload["violations"] = [violation.to_dict() for violation in violations]
    return payload


def http_error(status_code: int, code: str, message: str, *, details: Optional[Any] = None) -> HTTPException:
    detail: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


def error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
    violations: Optional[Sequence[Violation]] = None,
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-Id": request_id} if request_id else None
    return JSONResponse(
        build_error_payload(
            code=code,
            message=message,
            request_id=request_id,
            details=details,
            violations=violations,
        ),
        status_code=status_code,
        headers=headers,
    )


def normalize_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        code = str(detail.get("code") or DEFAULT_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"))
        message = str(detail.get("message") or detail.get("error") or "Request failed")
        details = detail.get("details")
    else:
        code = DEFAULT_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        message = str(detail) if detail is not None else "Request failed"
        details = None

    return error_response(request, status_code=exc.status_code, code=code, message=message, details=details)
