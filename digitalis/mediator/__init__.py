from digitalis.mediator.authorization import AuthorizationResult, Authorizer, AuthorizerRegistry
from digitalis.mediator.behaviors import (
    AuthorizationBehavior,
    LoggingBehavior,
    PipelineBehavior,
    ValidationBehavior,
    build_default_behaviors,
    compose_chain,
)
from digitalis.mediator.dispatcher import Mediator
from digitalis.mediator.requests import Identity, Request, RequestContext, RequestHandler
from digitalis.mediator.validation import Validator, ValidatorRegistry

__all__ = [
    "AuthorizationBehavior",
    "AuthorizationResult",
    "Authorizer",
    "AuthorizerRegistry",
    "Identity",
    "LoggingBehavior",
    "Mediator",
    "PipelineBehavior",
    "Request",
    "RequestContext",
    "RequestHandler",
    "ValidationBehavior",
    "Validator",
    "ValidatorRegistry",
    "build_default_behaviors",
    "compose_chain",
]
