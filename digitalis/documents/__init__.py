from digitalis.documents.authorizers import build_document_authorizers
from digitalis.documents.handlers import register_document_handlers
from digitalis.documents.requests import CreateDocument, DeleteDocument, DocumentRecordDTO, GetDocument, ShareDocument
from digitalis.documents.validators import build_document_validators

__all__ = [
    "CreateDocument",
    "DeleteDocument",
    "DocumentRecordDTO",
    "GetDocument",
    "ShareDocument",
    "build_document_authorizers",
    "build_document_validators",
    "register_document_handlers",
]
