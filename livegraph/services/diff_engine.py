# livegraph/services/diff_engine.py
import logging
from collections.abc import Iterable
from livegraph.models.graph import Edge, EdgeKey, GraphDelta, GraphSnapshot, Vertex, VertexId

logger = logging.getLogger(__name__)

def _unique_vertices(vertices: Iterable[Vertex]) -> dict[VertexId, Vertex]:
    unique: dict[VertexId, Vertex] = {}
    for vertex in vertices:
        if vertex.id in unique:
            logger.debug("Snapshot repeats vertex %r; keeping the first occurrence.", vertex.id)
            continue
        unique[vertex.id] = vertex
    return unique

def _unique_edges(edges: Iterable[Edge]) -> dict[EdgeKey, Edge]:
    unique: dict[EdgeKey, Edge] = {}
    for edge in edges:
        unique.setdefault(edge.key, edge)
    return unique

def compute_delta(
    previous_vertices: Iterable[Vertex],
    previous_edges: Iterable[Edge],
    snapshot: GraphSnapshot,
) -> GraphDelta:
    """
    Computes the add/remove sets that turn the previous state into the snapshot's state.

    Vertices compare by id and edges by (source, target) only, so a vertex re-sent
    with different attributes produces no change.
    """
    old_vertices = _unique_vertices(previous_vertices)
    old_edges = _unique_edges(previous_edges)
    new_vertices = _unique_vertices(snapshot.vertices)
    new_edges = _unique_edges(snapshot.edges)

    # An edge whose endpoint is missing from its own snapshot can never be applied.
    dangling = [key for key in new_edges if key[0] not in new_vertices or key[1] not in new_vertices]
    for key in dangling:
        logger.warning("Dropping edge %r -> %r: endpoint missing from snapshot.", *key)
        del new_edges[key]

    return GraphDelta(
        added_vertices=[v for vid, v in new_vertices.items() if vid not in old_vertices],
        removed_vertices=[v for vid, v in old_vertices.items() if vid not in new_vertices],
        added_edges=[e for key, e in new_edges.items() if key not in old_edges],
        removed_edges=[e for key, e in old_edges.items() if key not in new_edges],
    )
