from fastapi import APIRouter, Body, Depends

from digitalis.documents import CreateDocument, DeleteDocument, GetDocument, ShareDocument
from digitalis.mediator import Mediator, RequestContext
from digitalis.routes.common import ERROR_RESPONSES, ensure_resource_found, get_mediator, get_request_context
from digitalis.schemas import (
    DeleteResponse,
    DocumentCreatePayload,
    DocumentResponse,
    DocumentSharePayload,
    ShareResponse,
)

router = APIRouter(tags=["documents"])


@router.post(
    "/api/documents",
    summary="Create a document",
    response_model=DocumentResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
async def create_document(
    payload: DocumentCreatePayload = Body(...),
    mediator: Mediator = Depends(get_mediator),
    context: RequestContext = Depends(get_request_context),
) -> DocumentResponse:
    record = await mediator.send(CreateDocument(title=payload.title, body=payload.body), context)
    return DocumentResponse.model_validate(record)


@router.get(
    "/api/documents/{document_id}",
    summary="Get a document",
    response_model=DocumentResponse,
    responses=ERROR_RESPONSES,
)
async def get_document(
    document_id: int,
    mediator: Mediator = Depends(get_mediator),
    context: RequestContext = Depends(get_request_context),
) -> DocumentResponse:
    record = await mediator.send(GetDocument(document_id=document_id), context)
    return DocumentResponse.model_validate(ensure_resource_found(record))


@router.post(
    "/api/documents/{document_id}/share",
    summary="Share a document by mail",
    response_model=ShareResponse,
    responses=ERROR_RESPONSES,
)
async def share_document(
    document_id: int,
    payload: DocumentSharePayload = Body(...),
    mediator: Mediator = Depends(get_mediator),
    context: RequestContext = Depends(get_request_context),
) -> ShareResponse:
    await mediator.send(
        ShareDocument(document_id=document_id, recipient=payload.recipient, message=payload.message),
        context,
    )
    return ShareResponse(status="shared", id=document_id, recipient=payload.recipient)


@router.delete(
    "/api/documents/{document_id}",
    summary="Delete a document",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
)
async def delete_document(
    document_id: int,
    mediator: Mediator = Depends(get_mediator),
    context: RequestContext = Depends(get_request_context),
) -> DeleteResponse:
    await mediator.send(DeleteDocument(document_id=document_id), context)
    return DeleteResponse(status="deleted", id=document_id)
