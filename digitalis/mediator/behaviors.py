from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any, Protocol

from digitalis.errors import AccessDenied, AuthenticationRequired, InputInvalid, Violation
from digitalis.mediator.authorization import AuthorizerRegistry
from digitalis.mediator.requests import HandlerCall, RequestContext
from digitalis.mediator.validation import ValidatorRegistry
from digitalis.observability import observe_mediator_request

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"
OUTCOME_CANCELLED = "cancelled"


class PipelineBehavior(Protocol):
    async def handle(self, request: Any, context: RequestContext, call_next: HandlerCall) -> Any:
        ...


class LoggingBehavior:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("digitalis.mediator")

    def _completed(self, shape: str, context: RequestContext, started: float, outcome: str, **extra: Any) -> dict[str, Any]:
        elapsed = time.perf_counter() - started
        observe_mediator_request(shape=shape, outcome=outcome, elapsed_seconds=elapsed)
        return {
            **context.log_fields(),
            "request_shape": shape,
            "outcome": outcome,
            "duration_ms": round(elapsed * 1000, 2),
            **extra,
        }

    async def handle(self, request: Any, context: RequestContext, call_next: HandlerCall) -> Any:
        shape = request.shape()
        self._logger.info("mediator_request_started", extra={**context.log_fields(), "request_shape": shape})
        started = time.perf_counter()
        try:
            result = await call_next(request, context)
        except asyncio.CancelledError:
            self._logger.info(
                "mediator_request_cancelled",
                extra=self._completed(shape, context, started, OUTCOME_CANCELLED),
            )
            raise
        except Exception as exc:
            self._logger.warning(
                "mediator_request_failed",
                extra=self._completed(shape, context, started, OUTCOME_FAILURE, error_type=type(exc).__name__),
            )
            raise
        self._logger.info(
            "mediator_request_completed",
            extra=self._completed(shape, context, started, OUTCOME_SUCCESS),
        )
        return result


class AuthorizationBehavior:
    def __init__(self, registry: AuthorizerRegistry) -> None:
        self._registry = registry

    async def handle(self, request: Any, context: RequestContext, call_next: HandlerCall) -> Any:
        for authorizer in self._registry.resolve(type(request)):
            if authorizer.requires_identity and context.identity is None:
                raise AuthenticationRequired(reason=context.auth_error or "identity_required")
            result = await authorizer.decide(request, context.identity)
            if not result.allowed:
                raise AccessDenied(result.reason or f"denied by {authorizer.name}")
        return await call_next(request, context)


class ValidationBehavior:
    def __init__(self, registry: ValidatorRegistry) -> None:
        self._registry = registry

    async def handle(self, request: Any, context: RequestContext, call_next: HandlerCall) -> Any:
        violations: list[Violation] = []
        for validator in self._registry.resolve(type(request)):
            violations.extend(validator.validate(request))
        if violations:
            raise InputInvalid(violations)
        return await call_next(request, context)


def build_default_behaviors(
    *,
    authorizers: AuthorizerRegistry,
    validators: ValidatorRegistry,
    logger: logging.Logger | None = None,
) -> list[PipelineBehavior]:
    return [
        LoggingBehavior(logger),
        AuthorizationBehavior(authorizers),
        ValidationBehavior(validators),
    ]


def _bind(behavior: PipelineBehavior, call_next: HandlerCall) -> HandlerCall:
    async def invoke(request: Any, context: RequestContext) -> Any:
        return await behavior.handle(request, context, call_next)

    return invoke


def compose_chain(behaviors: Sequence[PipelineBehavior], terminal: HandlerCall) -> HandlerCall:
    """Wrap ``terminal`` so that ``behaviors[0]`` runs outermost."""
    call = terminal
    for behavior in reversed(behaviors):
        call = _bind(behavior, call)
    return call
