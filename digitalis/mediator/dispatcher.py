from __future__ import annotations

import asyncio
from collections.abc import Sequence
from contextlib import nullcontext
from typing import Any, TypeVar, cast

from starlette.concurrency import run_in_threadpool

from digitalis.errors import HandlerNotFound
from digitalis.mediator.behaviors import PipelineBehavior, compose_chain
from digitalis.mediator.requests import HandlerCall, Request, RequestContext, RequestHandler
from digitalis.repositories.session_provider import SessionProvider, open_session_scope

ResultT = TypeVar("ResultT")


class Mediator:
    """Routes a request through its behavior chain to the registered handler.

    Chains are composed once per request type at registration. Each ``send``
    runs inside one scoped session that is released on every exit path.
    """

    def __init__(
        self,
        *,
        behaviors: Sequence[PipelineBehavior],
        session_provider: SessionProvider | None = None,
    ) -> None:
        self._behaviors = tuple(behaviors)
        self._session_provider = session_provider
        self._handlers: dict[type, RequestHandler[Any, Any]] = {}
        self._chains: dict[type, HandlerCall] = {}

    def register(self, request_type: type, handler: RequestHandler[Any, Any]) -> None:
        if request_type in self._handlers:
            raise RuntimeError(f"handler already registered for {request_type.__qualname__}")
        self._handlers[request_type] = handler
        self._chains[request_type] = compose_chain(self._behaviors, handler.handle)

    def registered_shapes(self) -> list[type]:
        return list(self._handlers)

    async def send(self, request: Request[ResultT], context: RequestContext) -> ResultT:
        chain = self._chains.get(type(request))
        if chain is None:
            raise HandlerNotFound(type(request))

        scope = nullcontext(None) if self._session_provider is None else open_session_scope(self._session_provider)
        # Pool checkout, commit and close block, so the scope is driven from the threadpool.
        session = await run_in_threadpool(scope.__enter__)
        try:
            result = await chain(request, context.with_session(session))
        except BaseException as exc:
            await asyncio.shield(run_in_threadpool(scope.__exit__, type(exc), exc, exc.__traceback__))
            raise
        await run_in_threadpool(scope.__exit__, None, None, None)
        return cast(ResultT, result)
