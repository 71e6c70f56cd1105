"""Prometheus metrics middleware and engine error counters.

Prometheus counters cannot be reset between tests, so every assertion
is on the delta around the action.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import ADMIN, auth


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before == 1


def test_endpoint_label_is_route_template(client: TestClient) -> None:
    labels = {
        "method": "GET",
        "endpoint": "/v1/users/{principal}",
        "status_code": "404",
    }
    before = _get_sample("http_requests_total", labels)
    client.get("/v1/users/ghost-1")
    client.get("/v1/users/ghost-2")
    assert _get_sample("http_requests_total", labels) - before == 2


def test_unmatched_path_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "<unmatched>", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/definitely/not/a/route")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "verification_transitions_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


@pytest.mark.usefixtures("app_registry")
def test_registry_errors_counted_by_kind(client: TestClient) -> None:
    labels = {"kind": "NotFound"}
    before = _get_sample("registry_errors_total", labels)
    client.get("/v1/education/records/404", headers=auth(ADMIN))
    assert _get_sample("registry_errors_total", labels) - before == 1
