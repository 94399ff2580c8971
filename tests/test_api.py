"""Tests for the HTTP surface, wired with the mock camera and mock solver."""

import asyncio
import importlib
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from exammega.orchestrator.contracts import ScanPhase
from exammega.orchestrator.scheduler import ScanScheduler
from fakes import FakeCamera, HeldSolver, StaticSolver, answer


@pytest.fixture
def api(monkeypatch, tmp_path):
    frames = tmp_path / "frames"
    frames.mkdir()
    (frames / "question.jpg").write_bytes(b"\xff\xd8question")
    monkeypatch.setenv("CAMERA_ADAPTER", "mock")
    monkeypatch.setenv("SOLVER_ADAPTER", "mock")
    monkeypatch.setenv("SETTINGS_PATH", str(tmp_path / "settings.json"))
    monkeypatch.setenv("SCAN_INTERVAL_S", "10")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    from exammega.services import api as module
    module = importlib.reload(module)
    module.camera.frames_dir = frames
    return module


@pytest.fixture
def client(api):
    return TestClient(api.app)


def test_status_requires_setup(client):
    data = client.get("/status").json()

    assert data["phase"] == "idle"
    assert data["setup_required"] is True
    assert data["is_scanning"] is False
    assert data["time_left"] == 10
    assert data["interval"] == 10
    assert data["result"] is None


def test_scan_without_key(client):
    data = client.post("/scan").json()

    assert data["ok"] is False
    assert data["error"] == "SETUP_REQUIRED"


def test_set_key_then_scan(client, api, tmp_path):
    resp = client.put("/settings/api_key", json={"api_key": "secret-key"})

    assert resp.json() == {"ok": True, "configured": True, "error": None}
    assert "secret-key" not in resp.text
    assert json.loads((tmp_path / "settings.json").read_text())["gemini_api_key"] == "secret-key"

    data = client.post("/scan").json()
    assert data["ok"] is True
    assert data["result"]["found"] is True
    assert data["result"]["answer"] in {"A", "B", "C", "D", "E"}
    assert data["time_left"] == 10

    status = client.get("/status").json()
    assert status["phase"] == "armed"
    assert status["scans"] == 1
    assert status["result"] == data["result"]


def test_empty_key_rejected(client):
    data = client.put("/settings/api_key", json={"api_key": "   "}).json()

    assert data["ok"] is False
    assert data["configured"] is False
    assert data["error"] == "SETUP_REQUIRED"


def test_delete_key(client):
    client.put("/settings/api_key", json={"api_key": "k1"})

    data = client.delete("/settings/api_key").json()

    assert data["configured"] is False
    assert client.get("/status").json()["setup_required"] is True


def test_scan_dropped_while_busy(client, api):
    client.put("/settings/api_key", json={"api_key": "k1"})
    api.scheduler._transition(ScanPhase.SCANNING)

    data = client.post("/scan").json()

    assert data["ok"] is False
    assert data["error"] == "BUSY"


def test_env_key_seeds_store(monkeypatch, tmp_path):
    monkeypatch.setenv("CAMERA_ADAPTER", "mock")
    monkeypatch.setenv("SOLVER_ADAPTER", "mock")
    monkeypatch.setenv("SETTINGS_PATH", str(tmp_path / "settings.json"))
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")

    from exammega.services import api as module
    module = importlib.reload(module)

    assert module.settings.get("gemini_api_key") == "from-env"
    assert module.scheduler.has_credential is True


def test_health(client):
    data = client.get("/health").json()

    assert data["api"] is True
    assert data["camera_adapter"] == "MockCamera"
    assert data["solver_adapter"] == "mock"
    assert data["credential"] is False


@pytest.mark.asyncio
async def test_key_rotated_during_scan(api):
    held = HeldSolver(answer("A", "from k1"))
    fresh = StaticSolver(answer("B", "from k2"))
    api.scheduler = ScanScheduler(camera=FakeCamera(), settings=api.settings,
                                  solver_factory={"k1": held, "k2": fresh}.__getitem__,
                                  status_store=api.status, interval=10)
    transport = httpx.ASGITransport(app=api.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        await client.put("/settings/api_key", json={"api_key": "k1"})

        pending = asyncio.create_task(client.post("/scan"))
        await held.started.wait()
        rotated = await client.put("/settings/api_key", json={"api_key": "k2"})
        held.release.set()
        scanned = (await pending).json()
        status = (await client.get("/status")).json()

    assert rotated.json()["ok"] is True
    assert scanned["ok"] is True
    assert scanned["result"] is None
    assert status["result"] is None
    assert status["last_error"] is None
    assert status["phase"] == "armed"
    assert held.calls == 1
    assert fresh.calls == 0
