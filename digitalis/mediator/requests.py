from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, Protocol, TypeAlias, TypeVar

ResultT = TypeVar("ResultT")
ResultT_co = TypeVar("ResultT_co", covariant=True)
RequestT_contra = TypeVar("RequestT_contra", bound="Request[Any]", contravariant=True)


@dataclass(frozen=True)
class Request(Generic[ResultT]):
    """Base for commands and queries; the concrete class is the request shape."""

    @classmethod
    def shape(cls) -> str:
        return cls.__qualname__


@dataclass(frozen=True)
class Identity:
    subject: str
    roles: frozenset[str] = frozenset()
    scopes: frozenset[str] = frozenset()

    def has_role(self, role: str) -> bool:
        return bool(role) and role in self.roles

    def has_scope(self, scope: str) -> bool:
        return bool(scope) and scope in self.scopes


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    identity: Identity | None = None
    auth_error: str | None = None
    session: Any = None
    client_ip: str | None = None
    host: str | None = None
    path: str | None = None
    query: str | None = None

    def with_session(self, session: Any) -> "RequestContext":
        return replace(self, session=session)

    def log_fields(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "client_ip": self.client_ip,
            "host": self.host,
            "path": self.path,
            "query": self.query or None,
        }


class RequestHandler(Protocol[RequestT_contra, ResultT_co]):
    async def handle(self, request: RequestT_contra, context: RequestContext) -> ResultT_co:
        ...


HandlerCall: TypeAlias = Callable[[Any, RequestContext], Awaitable[Any]]
