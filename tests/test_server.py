"""Tests for the Flask HTTP shell."""

from unittest.mock import MagicMock

import pytest

from conftest import FakeGateway, routed
from spacechat.graph.graph import build_orchestrator
from spacechat.server import ROOT_TEXT, create_app, validate_request


@pytest.fixture
def client(kv):
    app = create_app(build_orchestrator(kv, FakeGateway(routed("ADD_SPACE", reply="공간 이름을 알려주세요."))))
    app.config["TESTING"] = True
    return app.test_client()


class TestValidateRequest:
    @pytest.mark.parametrize("body,error", [
        (None, "Request body is required"),
        ([], "Request body is required"),
        ({"session_id": "s1"}, "Message is required and must be a string"),
        ({"message": 3, "session_id": "s1"}, "Message is required and must be a string"),
        ({"message": "   ", "session_id": "s1"}, "Message cannot be empty"),
        ({"message": "hi"}, "Session ID is required and must be a string"),
        ({"message": "hi", "session_id": 42}, "Session ID is required and must be a string"),
    ])
    def test_errors(self, body, error):
        assert validate_request(body) == error

    def test_valid(self):
        assert validate_request({"message": "hi", "session_id": "s1"}) is None


class TestRoutes:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.get_data(as_text=True) == ROOT_TEXT

    def test_unknown_path(self, client):
        resp = client.get("/api/chat")
        assert resp.status_code == 404
        assert resp.get_data(as_text=True) == ROOT_TEXT

    def test_wrong_method(self, client):
        assert client.get("/llm/analyze-intent").status_code == 405

    def test_validation_failure_payload(self, client):
        resp = client.post("/llm/analyze-intent", json={"message": "", "session_id": "s1"})

        assert resp.status_code == 400
        assert resp.get_json() == {
            "status": "FAILURE",
            "error": [{"message": "Message is required and must be a string"}],
        }

    def test_malformed_json(self, client):
        resp = client.post("/llm/analyze-intent", data="{not json", content_type="application/json")

        assert resp.status_code == 400
        assert resp.get_json()["error"][0]["message"] == "Request body is required"

    def test_success(self, client):
        resp = client.post("/llm/analyze-intent", json={"message": "우리 카페 등록하고 싶어", "session_id": "s1"})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "SUCCESS"
        assert body["intent_type"] == "ADD_SPACE"
        assert body["session_id"] == "s1"
        assert body["registration"]["step"] == 1

    def test_orchestrator_crash_is_a_failure_payload(self):
        orchestrator = MagicMock()
        orchestrator.handle_message.side_effect = RuntimeError("boom")
        client = create_app(orchestrator).test_client()

        resp = client.post("/llm/analyze-intent", json={"message": "hi", "session_id": "s1"})

        assert resp.status_code == 400
        assert resp.get_json()["error"] == [{"message": "Failed to process intent analysis request"}]
