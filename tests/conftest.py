from typing import Any, Callable, Dict, List, Optional
import asyncio
import base64
import hashlib
import hmac
import json
import time
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from digitalis.config import Config

TEST_JWT_SECRET = "digitalis-test-secret-0123456789abcdef"


def build_test_config(**overrides: Any) -> Config:
    defaults: dict[str, Any] = {
        "APP_ENV": "test",
        "LOG_LEVEL": "WARNING",
        "LOG_JSON": False,
        "POSTGRES_HOST": "127.0.0.1",
        "POSTGRES_PORT": 5432,
        "POSTGRES_USER": "digitalis",
        "POSTGRES_PASSWORD": "change_me",
        "POSTGRES_DB": "digitalis",
        "JWT_SECRET": TEST_JWT_SECRET,
        "MAILER_URL": None,
        "SECURITY_STRICT_MODE": False,
    }
    defaults.update(overrides)
    return Config.model_validate(defaults)


def build_test_jwt(secret: str, claims: Dict[str, Any]) -> str:
    header = {"alg": "HS256", "typ": "JWT"}

    def _encode(value: Dict[str, Any]) -> str:
        raw = json.dumps(value, separators=(",", ":"), sort_keys=True).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    header_b64 = _encode(header)
    payload_b64 = _encode(claims)
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    signature = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    signature_b64 = base64.urlsafe_b64encode(signature).decode("ascii").rstrip("=")
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def auth_headers(subject: str = "alice", *, scope: str = "", roles: Optional[List[str]] = None) -> Dict[str, str]:
    claims: Dict[str, Any] = {"sub": subject, "exp": int(time.time()) + 300, "scope": scope}
    if roles:
        claims["roles"] = roles
    return {"Authorization": f"Bearer {build_test_jwt(TEST_JWT_SECRET, claims)}"}


def run(awaitable: Any) -> Any:
    return asyncio.run(awaitable)


def statement_params(statement: Any) -> Dict[str, Any]:
    return dict(statement.compile().params)


class StubResult:
    def __init__(
        self,
        *,
        rowcount: int = 0,
        rows: Optional[List[Dict[str, Any]]] = None,
        scalar_value: Optional[Any] = None,
    ) -> None:
        self.rowcount = rowcount
        self._rows = rows or []
        self._scalar_value = scalar_value

    def mappings(self) -> "StubResult":
        return self

    def all(self) -> List[Dict[str, Any]]:
        return self._rows

    def first(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None

    def scalar(self) -> Optional[Any]:
        return self._scalar_value


class StubConnection:
    def __init__(self, handler: Callable[[Any, Optional[Dict[str, Any]]], StubResult]) -> None:
        self._handler = handler
        self.calls: List[Dict[str, Any]] = []

    def execute(self, statement: Any, params: Optional[Dict[str, Any]] = None) -> StubResult:
        self.calls.append({"statement": str(statement), "statement_obj": statement, "params": params})
        return self._handler(statement, params)


class StubBeginContext:
    def __init__(self, engine: "StubEngine") -> None:
        self._engine = engine

    def __enter__(self) -> StubConnection:
        self._engine.opened += 1
        return self._engine.connection

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self._engine.closed += 1
        self._engine.exit_exceptions.append(exc_type)
        return False


class StubEngine:
    def __init__(self, handler: Optional[Callable[[Any, Optional[Dict[str, Any]]], StubResult]] = None) -> None:
        if handler is None:
            def _default_handler(_statement, _params):
                return StubResult()

            handler = _default_handler
        self.connection = StubConnection(handler)
        self.opened = 0
        self.closed = 0
        self.exit_exceptions: List[Any] = []

    def begin(self) -> StubBeginContext:
        return StubBeginContext(self)


class InMemoryDocuments:
    """Answers the documents repository statements from a dict."""

    def __init__(self) -> None:
        self.rows: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1

    def add(self, *, owner: str, title: str, body: str) -> Dict[str, Any]:
        row = {
            "id": self._next_id,
            "owner": owner,
            "title": title,
            "body": body,
            "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        }
        self.rows[self._next_id] = row
        self._next_id += 1
        return row

    @staticmethod
    def _document_id(statement: Any) -> Optional[int]:
        for key, value in statement_params(statement).items():
            if key.startswith("id"):
                return int(value)
        return None

    def __call__(self, statement: Any, _params: Optional[Dict[str, Any]]) -> StubResult:
        if getattr(statement, "is_insert", False):
            values = statement_params(statement)
            row = self.add(owner=values["owner"], title=values["title"], body=values["body"])
            return StubResult(rowcount=1, rows=[row])
        if getattr(statement, "is_delete", False):
            removed = self.rows.pop(self._document_id(statement), None)
            return StubResult(rowcount=1 if removed else 0)
        if getattr(statement, "is_select", False):
            row = self.rows.get(self._document_id(statement))
            return StubResult(rows=[row] if row else [])
        return StubResult()


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: List[Any] = []

    async def send(self, message: Any) -> None:
        self.sent.append(message)


@pytest.fixture(scope="session")
def app_instance():
    import_engine = StubEngine()
    with patch("digitalis.database.create_engine", return_value=import_engine):
        from digitalis import create_app

        api = create_app(build_test_config())
    api._bootstrap_engine_for_test = import_engine
    return api


@pytest.fixture
def client(app_instance):
    with TestClient(app_instance) as tc:
        yield tc


@pytest.fixture
def make_engine():
    def _factory(handler: Optional[Callable[[Any, Optional[Dict[str, Any]]], StubResult]] = None) -> StubEngine:
        return StubEngine(handler=handler)

    return _factory


@pytest.fixture
def documents():
    return InMemoryDocuments()


@pytest.fixture
def use_stub_engine(app_instance, make_engine):
    original_engine = app_instance.state.db_engine

    def _use(handler: Optional[Callable[[Any, Optional[Dict[str, Any]]], StubResult]] = None) -> StubEngine:
        engine = make_engine(handler)
        app_instance.state.db_engine = engine
        return engine

    yield _use
    app_instance.state.db_engine = original_engine
