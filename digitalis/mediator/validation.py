from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from digitalis.errors import Violation
from digitalis.mediator.registry import ShapeRegistry
from digitalis.mediator.requests import Request

RequestT = TypeVar("RequestT", bound=Request[Any])


class Validator(ABC, Generic[RequestT]):
    request_type: ClassVar[type]

    @abstractmethod
    def validate(self, request: RequestT) -> list[Violation]:
        ...


class ValidatorRegistry(ShapeRegistry[Validator[Any]]):
    kind = "validator"

    def register(self, request_type: type, item: Validator[Any]) -> None:
        if not isinstance(item, Validator):
            raise TypeError(f"{type(item).__name__} is not a Validator")
        super().register(request_type, item)
