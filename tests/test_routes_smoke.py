"""Smoke tests for API routes."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from opic_evaluator.api.routes import router
from opic_evaluator.assessment.rule_based import OpicEvaluator
from opic_evaluator.storage import target_level as tl_storage


@pytest.fixture(autouse=True)
def patch_store_path(tmp_path, monkeypatch):
    monkeypatch.setattr(tl_storage, "get_store_path", lambda: tmp_path / "preferences.json")


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router)
    with patch("opic_evaluator.api.routes.get_evaluator", return_value=OpicEvaluator()):
        with TestClient(app) as c:
            yield c


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestEvaluate:
    def test_evaluate_transcript(self, client):
        response = client.post(
            "/api/evaluate",
            json={"transcript": "I go school yesterday. I like hamburger."},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["level"] == "IL"
        assert data["word_count"] == 7
        assert data["sentence_count"] == 2
        assert data["target_level"] is None
        assert isinstance(data["notes"], list)
        assert set(data["scores"]) == {
            "sentence_completion_rate",
            "sentence_complexity",
            "fluency_score",
            "lexical_variety",
            "grammar_accuracy",
        }

    def test_empty_transcript(self, client):
        response = client.post("/api/evaluate", json={"transcript": ""})
        assert response.status_code == 200
        assert response.json()["level"] == "NL"
        assert response.json()["total_score"] == 0.0

    def test_explicit_target_level(self, client):
        response = client.post(
            "/api/evaluate",
            json={"transcript": "um like uh yeah", "target_level": "ih"},
        )
        assert response.status_code == 200
        assert response.json()["target_level"] == "IH"

    def test_unknown_target_level(self, client):
        response = client.post(
            "/api/evaluate",
            json={"transcript": "hello", "target_level": "C1"},
        )
        assert response.status_code == 400

    def test_missing_transcript(self, client):
        response = client.post("/api/evaluate", json={})
        assert response.status_code == 422

    def test_stored_target_level_is_echoed(self, client):
        client.put("/api/target-level", json={"level": "IM2"})
        response = client.post("/api/evaluate", json={"transcript": "hello there"})
        assert response.json()["target_level"] == "IM2"


class TestLevels:
    def test_lists_all_levels(self, client):
        response = client.get("/api/levels")
        assert response.status_code == 200
        ids = [option["id"] for option in response.json()]
        assert ids == ["NL", "NM", "NH", "IL", "IM1", "IM2", "IM3", "IH", "AL"]


class TestTargetLevel:
    def test_unset(self, client):
        response = client.get("/api/target-level")
        assert response.status_code == 200
        assert response.json() == {"level": None}

    def test_put_and_get(self, client):
        response = client.put("/api/target-level", json={"level": "im3"})
        assert response.status_code == 200
        assert response.json() == {"level": "IM3"}
        assert client.get("/api/target-level").json() == {"level": "IM3"}

    def test_non_string_stored_value(self, client, tmp_path):
        (tmp_path / "preferences.json").write_text('{"opic.targetLevel": 5}')
        assert client.get("/api/target-level").json() == {"level": None}
        response = client.post("/api/evaluate", json={"transcript": "hello there"})
        assert response.status_code == 200
        assert response.json()["target_level"] is None

    def test_put_invalid(self, client):
        response = client.put("/api/target-level", json={"level": "B2"})
        assert response.status_code == 400

    def test_delete(self, client):
        client.put("/api/target-level", json={"level": "AL"})
        response = client.delete("/api/target-level")
        assert response.status_code == 200
        assert client.get("/api/target-level").json() == {"level": None}


class TestApplication:
    def test_app_serves_router(self):
        from opic_evaluator.main import app

        with TestClient(app) as c:
            response = c.get("/api/health")
        assert response.status_code == 200

    def test_configure_logging_production_renders_json(self):
        import structlog

        from opic_evaluator.main import configure_logging

        try:
            configure_logging("production")
            processors = structlog.get_config()["processors"]
            assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        finally:
            structlog.reset_defaults()
