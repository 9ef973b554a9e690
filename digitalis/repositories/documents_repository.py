from __future__ import annotations

from typing import Any, cast

from sqlalchemy import delete, insert, select

from digitalis.database import DOCUMENTS
from digitalis.documents.requests import DocumentRecordDTO


def insert_document(session: Any, *, owner: str, title: str, body: str) -> DocumentRecordDTO:
    statement = insert(DOCUMENTS).values(owner=owner, title=title, body=body).returning(*DOCUMENTS.c)
    row = session.execute(statement).mappings().first()
    if row is None:
        raise RuntimeError("document insert returned no row")
    return cast(DocumentRecordDTO, dict(row))


def get_document(session: Any, document_id: int) -> DocumentRecordDTO | None:
    statement = select(DOCUMENTS).where(DOCUMENTS.c.id == document_id)
    row = session.execute(statement).mappings().first()
    if row is None:
        return None
    return cast(DocumentRecordDTO, dict(row))


def delete_document(session: Any, document_id: int) -> bool:
    result = session.execute(delete(DOCUMENTS).where(DOCUMENTS.c.id == document_id))
    return int(result.rowcount or 0) > 0
