from __future__ import annotations

import re
from typing import Any

from digitalis.documents.requests import CreateDocument, ShareDocument
from digitalis.errors import Violation
from digitalis.mediator.validation import Validator

TITLE_MAX_LENGTH = 200
BODY_MAX_LENGTH = 100_000
SHARE_MESSAGE_MAX_LENGTH = 2_000
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _required_text(field: str, value: Any, *, max_length: int) -> list[Violation]:
    if not isinstance(value, str) or not value.strip():
        return [Violation(field=field, message=f"{field} must not be empty", rule="required")]
    if len(value) > max_length:
        return [Violation(field=field, message=f"{field} must be at most {max_length} characters", rule="max_length")]
    return []


class CreateDocumentTitleValidator(Validator[CreateDocument]):
    request_type = CreateDocument

    def validate(self, request: CreateDocument) -> list[Violation]:
        return _required_text("title", request.title, max_length=TITLE_MAX_LENGTH)


class CreateDocumentBodyValidator(Validator[CreateDocument]):
    request_type = CreateDocument

    def validate(self, request: CreateDocument) -> list[Violation]:
        return _required_text("body", request.body, max_length=BODY_MAX_LENGTH)


class ShareDocumentValidator(Validator[ShareDocument]):
    request_type = ShareDocument

    def validate(self, request: ShareDocument) -> list[Violation]:
        violations: list[Violation] = []
        if request.document_id <= 0:
            violations.append(Violation(field="document_id", message="document_id must be positive", rule="positive"))
        if not EMAIL_PATTERN.match(request.recipient or ""):
            violations.append(Violation(field="recipient", message="recipient must be an email address", rule="email"))
        if len(request.message or "") > SHARE_MESSAGE_MAX_LENGTH:
            violations.append(
                Violation(
                    field="message",
                    message=f"message must be at most {SHARE_MESSAGE_MAX_LENGTH} characters",
                    rule="max_length",
                )
            )
        return violations


def build_document_validators() -> list[Validator[Any]]:
    return [
        CreateDocumentTitleValidator(),
        CreateDocumentBodyValidator(),
        ShareDocumentValidator(),
    ]
