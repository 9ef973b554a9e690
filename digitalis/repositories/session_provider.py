from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any, TypeAlias

SessionScope: TypeAlias = AbstractContextManager[Any]
SessionProvider: TypeAlias = Callable[[], SessionScope]


def open_session_scope(provider: SessionProvider) -> SessionScope:
    return provider()


def require_session(session: Any) -> Any:
    if session is None:
        raise RuntimeError("request has no scoped session; configure the mediator with a session provider")
    return session
