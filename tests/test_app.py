from __future__ import annotations

from typing import Callable

import pytest
from fastapi.testclient import TestClient

from ai_log_inspector.inspector import LogInspector
from ai_log_inspector.web.app import create_app
from conftest import ConstantEmbedder, CountingGenerator, FailingEmbedder


@pytest.fixture
def client(make_inspector: Callable[..., LogInspector]) -> TestClient:
    return TestClient(create_app(inspector=make_inspector(ConstantEmbedder(), CountingGenerator())))


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "documents": 0}


def test_index_then_search(client: TestClient) -> None:
    indexed = client.post(
        "/api/index",
        json={
            "records": [
                {"message": "Payment gateway timeout", "level": "ERROR", "context": {"source": "payment-service"}},
                {"message": "Stripe 504 error", "level": "ERROR"},
            ]
        },
    )
    assert indexed.status_code == 200
    assert indexed.json()["succeeded"] == 2

    response = client.post("/api/search", json={"query": "payment failures"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["search_method"] == "semantic"
    assert body["log_count"] == 2
    assert body["reason"] == "The payment gateway timed out."


def test_search_with_empty_query(client: TestClient) -> None:
    response = client.post("/api/search", json={"query": ""})

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["search_method"] == "none"


def test_request_context(client: TestClient) -> None:
    client.post(
        "/api/index",
        json={"records": [{"message": "Request started", "context": {"request_id": "req-7"}}]},
    )

    response = client.post("/api/request-context", json={"identifier": "req-7"})

    assert response.status_code == 200
    assert response.json()["total_logs"] == 1


def test_index_requires_records(client: TestClient) -> None:
    assert client.post("/api/index", json={"records": []}).status_code == 422


def test_index_without_embeddings(make_inspector: Callable[..., LogInspector]) -> None:
    client = TestClient(create_app(inspector=make_inspector(FailingEmbedder())))

    response = client.post("/api/index", json={"records": [{"message": "hello"}]})

    assert response.status_code == 503
    assert "does not support embeddings" in response.json()["detail"]
