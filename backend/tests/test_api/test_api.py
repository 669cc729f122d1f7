"""Tests for API endpoints (no LLM calls: the upstream generator is left unconfigured)."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import OUT_OF_RANGE_DOC, SIMPLE_DOC
from unisvg import __version__
from unisvg.dependencies import get_orchestrator
from unisvg.generation.orchestrator import GenerationOrchestrator
from unisvg.main import app


async def _no_sleep(seconds: float) -> None:
    return None


_orchestrator = GenerationOrchestrator(upstream=None, sleep=_no_sleep)
app.dependency_overrides[get_orchestrator] = lambda: _orchestrator

client = TestClient(app)


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == __version__
    assert data["schema_version"] == "unified-layered-1.0"
    assert data["tiers"] == ["unified-layered", "layered-only", "rule-based", "basic-shapes"]


def test_validate_valid_document():
    response = client.post("/api/validate", json={"document": SIMPLE_DOC})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["errors"] == []
    assert data["statistics"]["layerCount"] == 2
    assert data["statistics"]["regionsUsed"] == ["top_right"]
    assert "fixedDocument" not in data


def test_validate_with_auto_fix():
    response = client.post("/api/validate", json={"document": OUT_OF_RANGE_DOC})
    data = response.json()
    assert data["autoFixApplied"] is True
    coords = [c for cmd in data["fixedDocument"]["layers"][0]["paths"][0]["commands"] for c in cmd["coords"]]
    assert min(coords) == 0 and max(coords) == 512
    assert "Coordinate warnings:" in data["feedback"]


def test_validate_without_auto_fix():
    response = client.post("/api/validate", json={"document": OUT_OF_RANGE_DOC, "autoFix": False})
    data = response.json()
    assert data["autoFixApplied"] is False
    assert "fixedDocument" not in data


def test_validate_schema_error():
    response = client.post("/api/validate", json={"document": {"layers": "nope"}})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["errors"][0]["category"] == "structure"
    assert data["feedback"][0] == "Critical issues found:"


def test_generate_without_upstream_uses_rule_based():
    response = client.post("/api/generate", json={"prompt": "a green leaf", "aspectRatio": "4:3", "seed": 9})
    assert response.status_code == 200
    data = response.json()
    assert data["method"] == "rule-based"
    assert data["meta"]["viewBox"] == "0 0 512 384"
    assert data["meta"]["seed"] == 9
    assert data["meta"]["palette"] == ["#22C55E"]
    assert data["svg"].startswith("<svg")
    assert data["document"]["version"] == "unified-layered-1.0"
    assert data["layers"][0]["bounds"]["width"] > 0


def test_generate_requires_prompt():
    response = client.post("/api/generate", json={"seed": 1})
    assert response.status_code == 422


def test_error_stats():
    client.post("/api/generate", json={"prompt": "circle"})
    response = client.get("/api/errors")
    assert response.status_code == 200
    data = response.json()
    assert data["total_errors"] >= 2
    assert data["errors_by_type"]["api_error"] >= 2
