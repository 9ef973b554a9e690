from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import FastAPI, Request
from starlette.responses import Response

from digitalis.errors import (
    DEFAULT_ERROR_CODES,
    DEFAULT_ERROR_MESSAGES,
    AccessDenied,
    AuthenticationRequired,
    DependencyUnavailable,
    DigitalisError,
    InputInvalid,
    UnsupportedOperation,
    error_response,
)


@dataclass(frozen=True)
class Disposition:
    status_code: int | None = None
    rethrow: bool = False

    @classmethod
    def status(cls, status_code: int) -> "Disposition":
        if not 400 <= int(status_code) <= 599:
            raise ValueError(f"status code must be an error status, got {status_code}")
        return cls(status_code=int(status_code))

    @classmethod
    def propagate(cls) -> "Disposition":
        return cls(rethrow=True)


class DispositionTable:
    """Ordered exception type to disposition mapping, built at startup.

    Entries are matched in declaration order against the failure's type and
    its ancestors, so a general entry shadows every entry declared after it.
    The last entry must be the ``Exception`` catch-all.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[type[BaseException], Disposition]] = []

    def map_to_status(self, exc_type: type[BaseException], status_code: int) -> "DispositionTable":
        return self._add(exc_type, Disposition.status(status_code))

    def rethrow(self, exc_type: type[BaseException]) -> "DispositionTable":
        return self._add(exc_type, Disposition.propagate())

    def _add(self, exc_type: type[BaseException], disposition: Disposition) -> "DispositionTable":
        if not (isinstance(exc_type, type) and issubclass(exc_type, BaseException)):
            raise TypeError(f"{exc_type!r} is not an exception type")
        self._entries.append((exc_type, disposition))
        return self

    @property
    def entries(self) -> tuple[tuple[type[BaseException], Disposition], ...]:
        return tuple(self._entries)

    def validate(self) -> None:
        if not self._entries or self._entries[-1][0] is not Exception:
            raise RuntimeError("disposition table must end with a catch-all Exception entry")
        for index, (exc_type, _) in enumerate(self._entries):
            for earlier_type, _ in self._entries[:index]:
                if issubclass(exc_type, earlier_type):
                    raise RuntimeError(
                        f"disposition entry {exc_type.__name__} is shadowed by earlier entry {earlier_type.__name__}"
                    )

    def build(self) -> "ExceptionClassifier":
        self.validate()
        return ExceptionClassifier(self.entries)


class ExceptionClassifier:
    def __init__(self, entries: tuple[tuple[type[BaseException], Disposition], ...]) -> None:
        self._entries = entries

    @property
    def entries(self) -> tuple[tuple[type[BaseException], Disposition], ...]:
        return self._entries

    def classify(self, failure: BaseException) -> Disposition:
        for exc_type, disposition in self._entries:
            if isinstance(failure, exc_type):
                return disposition
        raise LookupError(f"no disposition for {type(failure).__name__}")


def default_disposition_table() -> DispositionTable:
    return (
        DispositionTable()
        .map_to_status(NotImplementedError, 501)
        .map_to_status(AuthenticationRequired, 401)
        .map_to_status(AccessDenied, 403)
        .map_to_status(InputInvalid, 400)
        .rethrow(UnsupportedOperation)
        .map_to_status(DependencyUnavailable, 503)
        .map_to_status(httpx.HTTPError, 503)
        # Matches every failure, so it has to stay last.
        .map_to_status(Exception, 500)
    )


class BoundaryTranslator:
    def __init__(self, classifier: ExceptionClassifier, *, logger: logging.Logger) -> None:
        self._classifier = classifier
        self._logger = logger

    @property
    def classifier(self) -> ExceptionClassifier:
        return self._classifier

    def translate(self, request: Request, exc: Exception) -> Response:
        disposition = self._classifier.classify(exc)
        if disposition.rethrow or disposition.status_code is None:
            raise exc
        status_code = disposition.status_code

        if status_code >= 500:
            self._logger.exception(
                "unhandled_exception" if status_code == 500 else "request_dependency_failed",
                extra={
                    "request_id": getattr(request.state, "request_id", None),
                    "status_code": status_code,
                    "error_type": type(exc).__name__,
                },
                exc_info=exc,
            )

        code = DEFAULT_ERROR_CODES.get(status_code, "HTTP_ERROR")
        message = DEFAULT_ERROR_MESSAGES.get(status_code, "Request failed")
        details: Any = None
        if isinstance(exc, DigitalisError) and status_code != 500:
            code = exc.code
            details = exc.details()
            if status_code < 500 or status_code == 501:
                message = exc.message

        return error_response(
            request,
            status_code=status_code,
            code=code,
            message=message,
            details=details,
            violations=exc.violations if isinstance(exc, InputInvalid) and status_code != 500 else None,
        )


def register_problem_details(
    api: FastAPI,
    *,
    logger: logging.Logger,
    table: DispositionTable | None = None,
) -> BoundaryTranslator:
    translator = BoundaryTranslator((table or default_disposition_table()).build(), logger=logger)
    api.state.boundary_translator = translator

    @api.middleware("http")
    async def problem_details(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return translator.translate(request, exc)

    return translator
