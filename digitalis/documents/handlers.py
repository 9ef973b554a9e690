from __future__ import annotations

from typing import Any

from starlette.concurrency import run_in_threadpool

from digitalis.documents.requests import CreateDocument, DeleteDocument, DocumentRecordDTO, GetDocument, ShareDocument
from digitalis.errors import AccessDenied, http_error
from digitalis.mailer import MailerPort, MailMessage
from digitalis.mediator.dispatcher import Mediator
from digitalis.mediator.requests import RequestContext
from digitalis.repositories import documents_repository
from digitalis.repositories.session_provider import require_session
from digitalis.security import require_identity


def _document_not_found(document_id: int) -> Exception:
    return http_error(404, "NOT_FOUND", "Not Found", details={"document_id": document_id})


class CreateDocumentHandler:
    async def handle(self, request: CreateDocument, context: RequestContext) -> DocumentRecordDTO:
        session = require_session(context.session)
        owner = require_identity(context.identity)
        return await run_in_threadpool(
            documents_repository.insert_document,
            session,
            owner=owner.subject,
            title=request.title.strip(),
            body=request.body,
        )


class GetDocumentHandler:
    async def handle(self, request: GetDocument, context: RequestContext) -> DocumentRecordDTO | None:
        session = require_session(context.session)
        return await run_in_threadpool(documents_repository.get_document, session, request.document_id)


class ShareDocumentHandler:
    def __init__(self, *, mailer: MailerPort, admin_role: str) -> None:
        self._mailer = mailer
        self._admin_role = admin_role

    async def handle(self, request: ShareDocument, context: RequestContext) -> None:
        session = require_session(context.session)
        identity = require_identity(context.identity)

        document = await run_in_threadpool(documents_repository.get_document, session, request.document_id)
        if document is None:
            raise _document_not_found(request.document_id)
        if document.get("owner") != identity.subject and not identity.has_role(self._admin_role):
            raise AccessDenied("only the document owner can share it")

        text = f"{identity.subject} shared \"{document.get('title')}\" with you."
        if request.message.strip():
            text = f"{text}\n\n{request.message.strip()}"
        await self._mailer.send(
            MailMessage(recipient=request.recipient, subject=f"Shared document: {document.get('title')}", body=text)
        )


class DeleteDocumentHandler:
    async def handle(self, request: DeleteDocument, context: RequestContext) -> bool:
        session = require_session(context.session)
        deleted = await run_in_threadpool(documents_repository.delete_document, session, request.document_id)
        if not deleted:
            raise _document_not_found(request.document_id)
        return True


def register_document_handlers(mediator: Mediator, *, mailer: MailerPort, config: Any) -> None:
    mediator.register(CreateDocument, CreateDocumentHandler())
    mediator.register(GetDocument, GetDocumentHandler())
    mediator.register(ShareDocument, ShareDocumentHandler(mailer=mailer, admin_role=config.ADMIN_ROLE))
    mediator.register(DeleteDocument, DeleteDocumentHandler())
