from __future__ import annotations

import logging

from digitalis.config import Config
from digitalis.documents import build_document_authorizers, build_document_validators, register_document_handlers
from digitalis.mailer import MailerPort
from digitalis.mediator import AuthorizerRegistry, Mediator, ValidatorRegistry, build_default_behaviors
from digitalis.repositories.session_provider import SessionProvider


def build_mediator(
    config: Config,
    *,
    session_provider: SessionProvider | None,
    mailer: MailerPort,
    logger: logging.Logger | None = None,
) -> Mediator:
    authorizers = AuthorizerRegistry()
    authorizers.register_all(build_document_authorizers(config))
    authorizers.freeze()

    validators = ValidatorRegistry()
    validators.register_all(build_document_validators())
    validators.freeze()

    mediator = Mediator(
        behaviors=build_default_behaviors(authorizers=authorizers, validators=validators, logger=logger),
        session_provider=session_provider,
    )
    register_document_handlers(mediator, mailer=mailer, config=config)
    return mediator
