from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class StrictRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ViolationResponse(BaseModel):
    field: str = Field(examples=["title"])
    message: str = Field(examples=["title must not be empty"])
    rule: Optional[str] = Field(default=None, examples=["required"])


class ErrorResponse(BaseModel):
    code: str = Field(examples=["NOT_FOUND"])
    message: str = Field(examples=["Not Found"])
    error: str = Field(examples=["Not Found"])
    request_id: Optional[str] = Field(default=None, examples=["c752262e-cf42-4075-917b-95ffcb5ceeeb"])
    details: Any = None
    violations: Optional[list[ViolationResponse]] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "VALIDATION_ERROR",
                "message": "title must not be empty; body must not be empty",
                "error": "title must not be empty; body must not be empty",
                "request_id": "c752262e-cf42-4075-917b-95ffcb5ceeeb",
                "violations": [
                    {"field": "title", "message": "title must not be empty", "rule": "required"},
                    {"field": "body", "message": "body must not be empty", "rule": "required"},
                ],
            }
        }
    )


class HealthResponse(BaseModel):
    status: str = Field(examples=["ok"])


class ReadinessCheck(BaseModel):
    ok: bool
    detail: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str = Field(examples=["ok", "degraded"])
    checks: dict[str, ReadinessCheck]


class DocumentCreatePayload(StrictRequestModel):
    title: str
    body: str

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"title": "Quarterly report", "body": "Revenue grew 4%."}},
    )


class DocumentSharePayload(StrictRequestModel):
    recipient: str
    message: str = ""


class DocumentResponse(BaseModel):
    id: int
    owner: str
    title: str
    body: str
    created_at: Optional[datetime] = None


class ShareResponse(BaseModel):
    status: str = Field(examples=["shared"])
    id: int
    recipient: str


class DeleteResponse(BaseModel):
    status: str
    id: int
