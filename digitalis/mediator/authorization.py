from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from digitalis.mediator.registry import ShapeRegistry
from digitalis.mediator.requests import Identity, Request

RequestT = TypeVar("RequestT", bound=Request[Any])


@dataclass(frozen=True)
class AuthorizationResult:
    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "AuthorizationResult":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "AuthorizationResult":
        return cls(allowed=False, reason=reason)


class Authorizer(ABC, Generic[RequestT]):
    """Capability check bound to one request type.

    Authorizers that require an identity are never consulted for anonymous
    callers; the authorization stage reports those as unauthenticated instead.
    """

    request_type: ClassVar[type]
    requires_identity: ClassVar[bool] = True

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def decide(self, request: RequestT, identity: Identity | None) -> AuthorizationResult:
        ...


class AuthorizerRegistry(ShapeRegistry[Authorizer[Any]]):
    kind = "authorizer"

    def register(self, request_type: type, item: Authorizer[Any]) -> None:
        if not isinstance(item, Authorizer):
            raise TypeError(f"{type(item).__name__} is not an Authorizer")
        super().register(request_type, item)
