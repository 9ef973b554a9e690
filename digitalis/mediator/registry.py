from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

ItemT = TypeVar("ItemT")


class ShapeRegistry(Generic[ItemT]):
    """Maps a request type to the ordered items bound to it.

    Lookups are by exact type. The registry is filled at startup and frozen
    before the first request is dispatched.
    """

    kind = "item"

    def __init__(self) -> None:
        self._items: dict[type, list[ItemT]] = {}
        self._frozen = False

    def register(self, request_type: type, item: ItemT) -> None:
        if self._frozen:
            raise RuntimeError(f"{type(self).__name__} is frozen; register {self.kind}s at startup")
        if not isinstance(request_type, type):
            raise TypeError(f"request_type must be a class, got {request_type!r}")
        self._items.setdefault(request_type, []).append(item)

    def register_all(self, items: Iterable[ItemT]) -> None:
        for item in items:
            self.register(_declared_request_type(item, self.kind), item)

    def resolve(self, request_type: type) -> tuple[ItemT, ...]:
        return tuple(self._items.get(request_type, ()))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def shapes(self) -> list[type]:
        return list(self._items)

    def __len__(self) -> int:
        return sum(len(items) for items in self._items.values())


def _declared_request_type(item: Any, kind: str) -> type:
    request_type = getattr(item, "request_type", None)
    if not isinstance(request_type, type):
        raise TypeError(f"{type(item).__name__} must declare request_type to be registered as {kind}")
    return request_type
