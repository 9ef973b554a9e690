def test_root_endpoint(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "API Server Available"


def test_healthcheck_endpoint(client):
    resp = client.get("/healthcheck")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-Id")


def test_health_ready_endpoint(client, use_stub_engine):
    engine = use_stub_engine()

    resp = client.get("/health/ready")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["checks"]["database"]["ok"] is True
    assert engine.opened == engine.closed == 1


def test_health_ready_returns_503_when_database_fails(client, use_stub_engine):
    def failing_db_handler(_statement, _params):
        raise RuntimeError("db unavailable")

    use_stub_engine(failing_db_handler)

    resp = client.get("/health/ready")
    assert resp.status_code == 503
    payload = resp.json()
    assert payload["status"] == "degraded"
    assert payload["checks"]["database"] == {"ok": False, "detail": "database connection failed"}


def test_request_id_header_is_echoed(client):
    resp = client.get("/healthcheck", headers={"X-Request-Id": "req-abc"})
    assert resp.headers["X-Request-Id"] == "req-abc"
