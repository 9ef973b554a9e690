from __future__ import annotations

from typing import Any

from digitalis.documents.requests import CreateDocument, DeleteDocument, ShareDocument
from digitalis.mediator.authorization import Authorizer
from digitalis.security import RoleAuthorizer, ScopeAuthorizer


class CreateDocumentAuthorizer(ScopeAuthorizer):
    request_type = CreateDocument
    required_scope = "documents:write"


class ShareDocumentAuthorizer(ScopeAuthorizer):
    request_type = ShareDocument
    required_scope = "documents:share"


class DeleteDocumentAuthorizer(RoleAuthorizer):
    request_type = DeleteDocument


def build_document_authorizers(config: Any) -> list[Authorizer[Any]]:
    return [
        CreateDocumentAuthorizer(scope=config.SCOPE_DOCUMENTS_WRITE, admin_role=config.ADMIN_ROLE),
        ShareDocumentAuthorizer(scope=config.SCOPE_DOCUMENTS_SHARE, admin_role=config.ADMIN_ROLE),
        DeleteDocumentAuthorizer(role=config.ADMIN_ROLE),
    ]
