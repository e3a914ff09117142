# tests/unit/test_ui_api.py
import pytest
from fastapi.testclient import TestClient

from apps.ui_api.main import app, bind
from recording.node import BagRecorderNode
from sdk.config import AppConfig, RecorderParams


@pytest.fixture
def node(tmp_path, executor, sink_factory):
    params = RecorderParams(dataFolder=str(tmp_path), loggedTopics=["/a", "/b"])
    n = BagRecorderNode(AppConfig(params=params), executor=executor, sink_factory=sink_factory)
    n.start(autostart=False)
    bind(n)
    yield n
    n.shutdown()
    app.state.node = None


@pytest.fixture
def client(node):
    return TestClient(app)


def test_status_idle(client):
    body = client.get("/status").json()
    assert body["state"] == "idle"
    assert body["topics"] == "/a /b"


def test_bag_control_goes_through_listener(client, node, sink_factory):
    resp = client.post("/bag_control", json={"enable_recording": True})
    assert resp.status_code == 202
    assert resp.json() == {"delivered": 1}
    assert node.controller.is_recording
    assert len(sink_factory.created) == 1

    client.post("/bag_control", json={"enable_recording": False})
    assert not node.controller.is_recording


def test_bag_control_validates_body(client):
    assert client.post("/bag_control", json={}).status_code == 422


def test_reset_starts_from_idle(client, sink_factory):
    body = client.post("/reset").json()
    assert body["state"] == "recording"
    assert len(sink_factory.created) == 1


def test_reset_failure_reports_500(client, node, sink_factory):
    sink_factory.fail_on_create = PermissionError("nope")
    resp = client.post("/reset")
    assert resp.status_code == 500
    assert "nope" in resp.json()["error"]
    assert not node.controller.is_recording


def test_bags_listing(client, tmp_path):
    (tmp_path / "Bag_2024_10_02_03_04_05").mkdir()
    body = client.get("/bags").json()
    assert [b["name"] for b in body["bags"]] == ["Bag_2024_10_02_03_04_05"]


def test_unbound_returns_503():
    app.state.node = None
    assert TestClient(app).get("/status").status_code == 503
