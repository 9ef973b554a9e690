from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TypedDict

from digitalis.mediator.requests import Request


class DocumentRecordDTO(TypedDict, total=False):
    id: int
    owner: str
    title: str
    body: str
    created_at: datetime


@dataclass(frozen=True)
class CreateDocument(Request[DocumentRecordDTO]):
    title: str
    body: str


@dataclass(frozen=True)
class GetDocument(Request[Optional[DocumentRecordDTO]]):
    document_id: int


@dataclass(frozen=True)
class ShareDocument(Request[None]):
    document_id: int
    recipient: str
    message: str = ""


@dataclass(frozen=True)
class DeleteDocument(Request[bool]):
    document_id: int
