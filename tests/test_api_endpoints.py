import pytest
from fastapi.testclient import TestClient

from livegraph.db.graph_store import GraphStore
import livegraph.main
from livegraph.main import app
from livegraph.models.graph import Edge, GraphDelta, GraphSnapshot, Vertex
from livegraph.models.view import ViewTransform
from livegraph.services.layout_engine import LayoutEngine
from livegraph.services.sync_service import SyncService


@pytest.fixture
def graph_app(monkeypatch):
    store = GraphStore()
    store.apply_delta(GraphDelta(
        added_vertices=[Vertex(id="a", is_bootnode=True), Vertex(id=2)],
        added_edges=[Edge(source="a", target=2)],
    ))
    layout = LayoutEngine(width=100, height=100, tick_interval=0)
    layout.update_topology(store.vertices, store.edges)

    monkeypatch.setattr(app.state, "store", store)
    monkeypatch.setattr(app.state, "layout", layout)
    monkeypatch.setattr(app.state, "view_transform", ViewTransform())
    monkeypatch.setattr(app.state, "sync_service", None)
    return store, layout


def test_graph_frame_joins_store_and_positions(graph_app):
    store, layout = graph_app
    client = TestClient(app)

    response = client.get("/graph")

    assert response.status_code == 200
    frame = response.json()
    assert frame["version"] == store.version
    assert [v["id"] for v in frame["vertices"]] == ["a", 2]
    assert frame["vertices"][0]["is_bootnode"] is True
    ax, ay = layout.position("a")
    edge = frame["edges"][0]
    assert (edge["source"], edge["target"]) == ("a", 2)
    assert (edge["x1"], edge["y1"]) == pytest.approx((ax, ay))


def test_view_transform_round_trip(graph_app):
    client = TestClient(app)

    put = client.put("/view/transform", json={"x": 12.5, "y": -4, "k": 2})
    got = client.get("/view/transform")

    assert put.status_code == 200
    assert got.json() == {"x": 12.5, "y": -4.0, "k": 2.0}
    assert client.get("/graph").json()["transform"]["k"] == 2.0


def test_view_transform_rejects_non_positive_zoom(graph_app):
    client = TestClient(app)

    response = client.put("/view/transform", json={"x": 0, "y": 0, "k": 0})

    assert response.status_code == 422


def test_pin_resolves_integer_ids_and_reports_unknown(graph_app):
    _, layout = graph_app
    client = TestClient(app)

    pinned = client.put("/layout/pins/2", json={"x": 5, "y": 6})
    missing = client.put("/layout/pins/ghost", json={"x": 5, "y": 6})
    unpinned = client.delete("/layout/pins/2")

    assert pinned.status_code == 200
    assert missing.status_code == 404
    assert "ghost" in missing.json()["message"]
    assert unpinned.status_code == 204
    assert layout.alpha == pytest.approx(layout.reheat_alpha)


def test_health_before_startup(graph_app):
    client = TestClient(app)

    assert client.get("/healthz").json() == {"status": "starting", "sync": None}


def test_health_reports_sync_status(graph_app, monkeypatch):
    store, _ = graph_app
    monkeypatch.setattr(app.state, "sync_service", SyncService(transport=None, store=store, mode="snapshot"))
    client = TestClient(app)

    body = client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["sync"]["state"] == "idle"
    assert body["sync"]["vertex_count"] == 2
    assert body["sync"]["edge_count"] == 1


def test_tick_stream_pushes_a_frame_per_step(graph_app):
    store, layout = graph_app
    client = TestClient(app)

    with client.websocket_connect("/ws/ticks") as websocket:
        initial = websocket.receive_json()
        layout.step()
        pushed = websocket.receive_json()

    assert initial["tick"] == 0
    assert pushed["tick"] == 1
    assert pushed["version"] == store.version
    assert [v["id"] for v in pushed["vertices"]] == ["a", 2]
    ax, ay = layout.position("a")
    assert (pushed["vertices"][0]["x"], pushed["vertices"][0]["y"]) == pytest.approx((ax, ay))
    assert layout.step() is None


class StubTransportClient:
    def __init__(self):
        self.closed = False

    async def fetch_snapshot(self):
        return GraphSnapshot()

    async def fetch_delta(self):
        return GraphDelta()

    async def close(self):
        self.closed = True


def test_lifespan_starts_sync_loop_and_shuts_down_cleanly(monkeypatch):
    transport = StubTransportClient()
    monkeypatch.setattr(livegraph.main, "TransportClient", lambda: transport)
    monkeypatch.setattr(app.state, "store", GraphStore())
    monkeypatch.setattr(app.state, "layout", LayoutEngine(width=100, height=100, tick_interval=0.01))
    monkeypatch.setattr(app.state, "view_transform", ViewTransform())
    monkeypatch.setattr(app.state, "sync_service", None)

    with TestClient(app) as client:
        body = client.get("/healthz").json()
        assert not transport.closed

    assert body["status"] == "ok"
    assert body["sync"]["state"] == "idle"
    assert body["sync"]["mode"] == "snapshot"
    assert transport.closed
