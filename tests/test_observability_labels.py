import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from digitalis.logging_config import JsonFormatter
from digitalis.observability import (
    build_request_log_payload,
    metric_method_label,
    metric_status_label,
    register_observability,
)


def test_metric_status_label_falls_back_for_invalid_status():
    assert metric_status_label(200) == "200"
    assert metric_status_label(599) == "599"
    assert metric_status_label(0) == "000"
    assert metric_status_label(700) == "000"


def test_metric_method_label_collapses_unknown_methods():
    assert metric_method_label("post") == "POST"
    assert metric_method_label("PROPFIND") == "OTHER"
    assert metric_method_label(None) == "OTHER"


def test_build_request_log_payload_has_consistent_shape():
    payload = build_request_log_payload(
        request_id="req-1",
        method="POST",
        path="/api/documents",
        status_code=201,
        elapsed_seconds=0.1234,
        client_ip="127.0.0.1",
    )

    assert payload == {
        "request_id": "req-1",
        "method": "POST",
        "path": "/api/documents",
        "status_code": 201,
        "duration_ms": 123.4,
        "client_ip": "127.0.0.1",
    }


def test_json_formatter_emits_known_extra_fields():
    record = logging.LogRecord("digitalis.mediator", logging.INFO, __file__, 1, "mediator_request_completed", None, None)
    record.request_shape = "CreateDocument"
    record.outcome = "success"
    record.duration_ms = 1.5
    record.unrelated = "ignored"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "mediator_request_completed"
    assert payload["logger"] == "digitalis.mediator"
    assert payload["level"] == "INFO"
    assert payload["request_shape"] == "CreateDocument"
    assert payload["outcome"] == "success"
    assert payload["duration_ms"] == 1.5
    assert "unrelated" not in payload
    assert "exception" not in payload


def test_metrics_use_route_template_label():
    api = FastAPI()
    register_observability(api)

    @api.get("/api/documents/{document_id}")
    async def get_document(document_id: int):
        return {"id": document_id}

    with TestClient(api) as tc:
        assert tc.get("/api/documents/41").status_code == 200
        assert tc.get("/api/documents/42").status_code == 200
        metrics_text = tc.get("/metrics").text

    assert 'path="/api/documents/{document_id}"' in metrics_text
    assert 'path="/api/documents/41"' not in metrics_text


def test_mediator_metrics_are_exported(client, use_stub_engine, documents):
    use_stub_engine(documents)
    client.get("/api/documents/1")

    metrics_text = client.get("/metrics").text
    assert 'digitalis_mediator_requests_total{request_shape="GetDocument",outcome="success"}' in metrics_text
