# livegraph/db/graph_store.py
import logging
from livegraph.core.exceptions import InvariantViolation, NotFoundError
from livegraph.models.graph import Edge, EdgeKey, GraphDelta, GraphSnapshot, Vertex, VertexId
from livegraph.services.diff_engine import compute_delta

logger = logging.getLogger(__name__)

class GraphStore:
    """
    Sole owner of the local graph. Everything else reads through the accessors below.

    Removal of an unknown vertex or edge is ignored unless the store is strict, in
    which case it raises NotFoundError for both kinds alike.
    """
    def __init__(self, strict: bool = False):
        self.strict = strict
        self._vertices: dict[VertexId, Vertex] = {}
        self._edges: dict[EdgeKey, Edge] = {}
        self._version = 0

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return tuple(self._vertices.values())

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges.values())

    @property
    def vertex_ids(self) -> frozenset[VertexId]:
        return frozenset(self._vertices)

    @property
    def edge_keys(self) -> frozenset[EdgeKey]:
        return frozenset(self._edges)

    @property
    def version(self) -> int:
        return self._version

    def get_vertex(self, vertex_id: VertexId) -> Vertex | None:
        vertex = self._vertices.get(vertex_id)
        return vertex.model_copy(deep=True) if vertex else None

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            vertices=[v.model_copy(deep=True) for v in self._vertices.values()],
            edges=list(self._edges.values()),
        )

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self._vertices

    def apply_snapshot(self, snapshot: GraphSnapshot) -> GraphDelta:
        delta = compute_delta(self._vertices.values(), self._edges.values(), snapshot)
        self.apply_delta(delta)
        return delta

    def apply_delta(self, delta: GraphDelta) -> bool:
        """
        Applies a delta as one step: edges out, vertices out, vertices in, edges in.
        Works on copies so that a failure leaves the current state untouched.
        Returns True when the state changed.
        """
        vertices = dict(self._vertices)
        edges = dict(self._edges)
        changed = False

        for edge in delta.removed_edges:
            if edges.pop(edge.key, None) is None:
                self._missing(f"edge {edge.source!r} -> {edge.target!r}")
            else:
                changed = True

        for vertex in delta.removed_vertices:
            if vertices.pop(vertex.id, None) is None:
                self._missing(f"vertex {vertex.id!r}")
            else:
                changed = True

        if delta.removed_vertices:
            for source, target in edges:
                if source not in vertices or target not in vertices:
                    raise InvariantViolation(
                        f"Removing vertices would leave edge {source!r} -> {target!r} dangling."
                    )

        for vertex in delta.added_vertices:
            if vertex.id in vertices:
                raise InvariantViolation(f"Vertex {vertex.id!r} is already present.")
            vertices[vertex.id] = vertex.model_copy(deep=True)
            changed = True

        for edge in delta.added_edges:
            if edge.key in edges:
                raise InvariantViolation(f"Edge {edge.source!r} -> {edge.target!r} is already present.")
            if edge.source not in vertices or edge.target not in vertices:
                raise InvariantViolation(
                    f"Edge {edge.source!r} -> {edge.target!r} references a missing vertex."
                )
            edges[edge.key] = edge
            changed = True

        if changed:
            self._vertices = vertices
            self._edges = edges
            self._version += 1
        return changed

    def _missing(self, what: str) -> None:
        if self.strict:
            raise NotFoundError(f"Cannot remove unknown {what}.")
        logger.debug("Ignoring removal of unknown %s.", what)
