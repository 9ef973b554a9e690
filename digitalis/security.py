from __future__ import annotations

from typing import Any, ClassVar

import jwt
from fastapi import Request
from jwt.exceptions import InvalidTokenError
from jwt.types import Options

from digitalis.errors import AuthenticationRequired
from digitalis.mediator.authorization import AuthorizationResult, Authorizer
from digitalis.mediator.requests import Identity


def extract_values_set(claims: dict[str, Any], *keys: str) -> set[str]:
    values: set[str] = set()
    for key in keys:
        raw = claims.get(key)
        if isinstance(raw, str):
            if key == "scope":
                values.update(token for token in raw.split() if token)
            elif raw.strip():
                values.add(raw.strip())
        elif isinstance(raw, list):
            for item in raw:
                if isinstance(item, str) and item.strip():
                    values.add(item.strip())
    return values


def decode_identity_token(token: str, config: Any) -> Identity:
    secret = (config.JWT_SECRET or "").strip()
    if not secret:
        raise AuthenticationRequired(reason="authentication_not_configured")

    audience = (config.JWT_AUDIENCE or "").strip() or None
    issuer = (config.JWT_ISSUER or "").strip() or None
    options: Options = {
        "require": ["sub", "exp"],
        "verify_signature": True,
        "verify_exp": True,
        "verify_nbf": True,
        "verify_aud": audience is not None,
        "verify_iss": issuer is not None,
    }

    try:
        claims = jwt.decode(
            token,
            key=secret,
            algorithms=["HS256"],
            options=options,
            audience=audience,
            issuer=issuer,
            leeway=max(0, int(config.JWT_LEEWAY_SECONDS)),
        )
    except (InvalidTokenError, TypeError, ValueError):
        raise AuthenticationRequired(reason="invalid_token")

    subject = claims.get("sub") if isinstance(claims, dict) else None
    if not isinstance(subject, str) or not subject.strip():
        raise AuthenticationRequired(reason="invalid_token")

    return Identity(
        subject=subject.strip(),
        roles=frozenset(extract_values_set(claims, "role", "roles")),
        scopes=frozenset(extract_values_set(claims, "scope", "scopes")),
    )


def read_token(request: Request, config: Any) -> str | None:
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, value = authorization.partition(" ")
        token = value.strip()
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationRequired(reason="invalid_authorization_header")
        return token
    cookie = (request.cookies.get(config.AUTH_COOKIE_NAME) or "").strip()
    return cookie or None


def resolve_identity(request: Request, config: Any) -> Identity | None:
    token = read_token(request, config)
    if token is None:
        return None
    return decode_identity_token(token, config)


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise AuthenticationRequired(reason="identity_required")
    return identity


class ScopeAuthorizer(Authorizer[Any]):
    """Allows callers holding ``required_scope`` or the admin role."""

    required_scope: ClassVar[str]

    def __init__(self, *, scope: str | None = None, admin_role: str = "admin") -> None:
        self._scope = scope or self.required_scope
        self._admin_role = admin_role

    async def decide(self, request: Any, identity: Identity | None) -> AuthorizationResult:
        caller = require_identity(identity)
        if caller.has_role(self._admin_role) or caller.has_scope(self._scope):
            return AuthorizationResult.allow()
        return AuthorizationResult.deny(f"missing scope {self._scope}")


class RoleAuthorizer(Authorizer[Any]):
    required_role: ClassVar[str] = "admin"

    def __init__(self, *, role: str | None = None) -> None:
        self._role = role or self.required_role

    async def decide(self, request: Any, identity: Identity | None) -> AuthorizationResult:
        if require_identity(identity).has_role(self._role):
            return AuthorizationResult.allow()
        return AuthorizationResult.deny(f"missing role {self._role}")
