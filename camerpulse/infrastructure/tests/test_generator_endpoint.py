import pytest
from fastapi.testclient import TestClient

from camerpulse.generation.errors import UpstreamFailure
from camerpulse.generation.store.in_memory_poll_store import InMemoryPollStore
from camerpulse.generation.tests.support import FakeCompletionClient, build_pipeline, config_rows, make_signal
from camerpulse.infrastructure.inbound.http_server import GENERATOR_PATH, build_app


class _CrashingPipeline:
    def run(self, trigger="http"):
        raise RuntimeError("database connection reset")


def test_options_preflight_returns_cors_headers_without_running():
    client_stub = FakeCompletionClient()
    app = build_app(build_pipeline([make_signal()], client=client_stub))

    response = TestClient(app).options(GENERATOR_PATH)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "content-type" in response.headers["access-control-allow-headers"]
    assert client_stub.requests == []


def test_post_generates_poll():
    store = InMemoryPollStore()
    app = build_app(build_pipeline([make_signal(topic="Bridge collapse in Kumba")], poll_store=store))

    response = TestClient(app).post(GENERATOR_PATH)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    body = response.json()
    assert body["success"] is True
    assert body["metadata"]["trigger_topic"] == "Bridge collapse in Kumba"
    assert body["metadata"]["style"] == "chart"
    assert len(store.polls) == 1


def test_get_is_accepted_like_post():
    app = build_app(build_pipeline([make_signal()]))
    assert TestClient(app).get(GENERATOR_PATH).json()["success"] is True


@pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
def test_other_methods_also_trigger_a_run(method):
    store = InMemoryPollStore()
    app = build_app(build_pipeline([make_signal()], poll_store=store))

    response = TestClient(app).request(method, GENERATOR_PATH)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(store.polls) == 1


def test_disabled_is_a_200_with_message():
    app = build_app(build_pipeline([make_signal()], rows=config_rows(system_enabled={"enabled": False})))

    response = TestClient(app).post(GENERATOR_PATH)

    assert response.status_code == 200
    assert response.json() == {"message": "Autonomous poll generation is disabled"}


def test_no_signal_is_a_200_with_message():
    response = TestClient(build_app(build_pipeline([]))).post(GENERATOR_PATH)
    assert response.status_code == 200
    assert response.json() == {"message": "No trending topics found above threshold"}


def test_upstream_failure_is_a_500_with_error_and_details():
    client = FakeCompletionClient(error=UpstreamFailure(503, "Service Unavailable"))
    store = InMemoryPollStore()
    app = build_app(build_pipeline([make_signal()], client=client, poll_store=store))

    response = TestClient(app).post(GENERATOR_PATH)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Completion API request failed"
    assert "503" in body["details"]
    assert store.polls == {}


def test_malformed_completion_is_a_500():
    app = build_app(build_pipeline([make_signal()], client=FakeCompletionClient(content="{}")))

    response = TestClient(app).post(GENERATOR_PATH)

    assert response.status_code == 500
    assert response.json()["error"] == "Malformed completion response"


def test_unexpected_crash_is_a_500_with_generic_error():
    response = TestClient(build_app(_CrashingPipeline())).post(GENERATOR_PATH)
    assert response.status_code == 500
    assert response.json() == {
        "error": "Autonomous poll generation failed",
        "details": "database connection reset",
    }


def test_health_and_admin_routes_absent_without_verifier():
    client = TestClient(build_app(build_pipeline()))
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/admin/v1/config").status_code == 404
