from livegraph.models.graph import Edge, GraphSnapshot, Vertex
from livegraph.services.diff_engine import compute_delta


def _ids(vertices):
    return [v.id for v in vertices]


def _keys(edges):
    return [e.key for e in edges]


def test_computes_adds_and_removes_by_identity():
    previous_vertices = [Vertex(id="v1"), Vertex(id="v2")]
    previous_edges = [Edge(source="v1", target="v2")]
    snapshot = GraphSnapshot(
        vertices=[Vertex(id="v2"), Vertex(id="v3")],
        edges=[Edge(source="v2", target="v3")],
    )

    delta = compute_delta(previous_vertices, previous_edges, snapshot)

    assert _ids(delta.added_vertices) == ["v3"]
    assert _ids(delta.removed_vertices) == ["v1"]
    assert _keys(delta.added_edges) == [("v2", "v3")]
    assert _keys(delta.removed_edges) == [("v1", "v2")]


def test_same_snapshot_twice_yields_empty_delta():
    snapshot = GraphSnapshot(
        vertices=[Vertex(id=1), Vertex(id=2)],
        edges=[Edge(source=1, target=2)],
    )

    delta = compute_delta(snapshot.vertices, snapshot.edges, snapshot)

    assert delta.is_empty


def test_attribute_change_on_existing_id_is_not_reported():
    previous = [Vertex(id="v1", is_bootnode=False)]
    snapshot = GraphSnapshot(vertices=[Vertex(id="v1", is_bootnode=True)], edges=[])

    delta = compute_delta(previous, [], snapshot)

    assert delta.is_empty


def test_edge_direction_is_part_of_identity():
    vertices = [Vertex(id="a"), Vertex(id="b")]
    snapshot = GraphSnapshot(vertices=vertices, edges=[Edge(source="b", target="a")])

    delta = compute_delta(vertices, [Edge(source="a", target="b")], snapshot)

    assert _keys(delta.added_edges) == [("b", "a")]
    assert _keys(delta.removed_edges) == [("a", "b")]


def test_duplicate_identities_in_snapshot_collapse_to_first():
    snapshot = GraphSnapshot(
        vertices=[Vertex(id="a", is_bootnode=True), Vertex(id="a"), Vertex(id="b")],
        edges=[Edge(source="a", target="b"), Edge(source="a", target="b")],
    )

    delta = compute_delta([], [], snapshot)

    assert _ids(delta.added_vertices) == ["a", "b"]
    assert delta.added_vertices[0].is_bootnode is True
    assert _keys(delta.added_edges) == [("a", "b")]


def test_edges_with_endpoints_missing_from_snapshot_are_dropped():
    snapshot = GraphSnapshot(
        vertices=[Vertex(id="a")],
        edges=[Edge(source="a", target="ghost")],
    )

    delta = compute_delta([], [], snapshot)

    assert _ids(delta.added_vertices) == ["a"]
    assert delta.added_edges == []


def test_empty_snapshot_removes_everything():
    vertices = [Vertex(id="a"), Vertex(id="b")]
    edges = [Edge(source="a", target="b")]

    delta = compute_delta(vertices, edges, GraphSnapshot())

    assert _ids(delta.removed_vertices) == ["a", "b"]
    assert _keys(delta.removed_edges) == [("a", "b")]
    assert not delta.added_vertices and not delta.added_edges
