import pytest

from conftest import InMemoryDocuments, statement_params
from digitalis.repositories import documents_repository
from digitalis.repositories import session_provider as session_provider_module


def test_open_session_scope_uses_explicit_provider(make_engine):
    engine = make_engine()

    with session_provider_module.open_session_scope(engine.begin) as session:
        session.execute("SELECT 1")

    assert len(engine.connection.calls) == 1
    assert engine.opened == engine.closed == 1


def test_require_session_rejects_missing_session():
    with pytest.raises(RuntimeError, match="no scoped session"):
        session_provider_module.require_session(None)


def test_insert_document_returns_inserted_row(make_engine):
    documents = InMemoryDocuments()
    engine = make_engine(documents)

    with engine.begin() as session:
        row = documents_repository.insert_document(session, owner="alice", title="Report", body="text")

    assert row["id"] == 1
    assert row["owner"] == "alice"
    statement = engine.connection.calls[0]["statement_obj"]
    assert statement_params(statement) == {"owner": "alice", "title": "Report", "body": "text"}
    assert "RETURNING" in engine.connection.calls[0]["statement"]


def test_get_and_delete_document_by_id(make_engine):
    documents = InMemoryDocuments()
    documents.add(owner="alice", title="Report", body="text")
    engine = make_engine(documents)

    with engine.begin() as session:
        assert documents_repository.get_document(session, 1)["title"] == "Report"
        assert documents_repository.get_document(session, 2) is None
        assert documents_repository.delete_document(session, 1) is True
        assert documents_repository.delete_document(session, 1) is False
