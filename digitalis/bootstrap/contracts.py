from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

DBHealthCheck: TypeAlias = Callable[[], tuple[bool, str | None]]
