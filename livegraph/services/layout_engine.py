# livegraph/services/layout_engine.py
import asyncio
import logging
import math
import random
from collections.abc import Callable, Iterable
from pydantic import BaseModel
from livegraph.core.config import settings
from livegraph.core.exceptions import NotFoundError
from livegraph.models.graph import Edge, Vertex, VertexId

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
DISTANCE_MIN_SQUARED = 1.0

class Body(BaseModel):
    """Simulation state of one vertex. fx/fy pin the vertex when set."""
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

class LayoutFrame(BaseModel):
    tick: int
    alpha: float
    positions: dict[VertexId, tuple[float, float]]

TickCallback = Callable[[LayoutFrame], None]

class LayoutEngine:
    """
    Force-directed layout over the current vertices and edges.

    Links pull their endpoints toward a fixed distance, every pair of vertices repels,
    and a weak x/y force holds the graph around the centre. Each topology change
    reheats alpha so the graph visibly re-settles. Positions of retained vertices
    survive topology changes.
    """
    def __init__(
        self,
        width: float | None = None,
        height: float | None = None,
        link_distance: float | None = None,
        charge_strength: float | None = None,
        gravity_strength: float | None = None,
        reheat_alpha: float | None = None,
        tick_interval: float | None = None,
        alpha_min: float = 0.001,
        velocity_decay: float = 0.4,
        seed: int = 0,
        sleep: Callable[[float], object] = asyncio.sleep,
    ):
        self.center_x = (width if width is not None else settings.LAYOUT_WIDTH) / 2
        self.center_y = (height if height is not None else settings.LAYOUT_HEIGHT) / 2
        self.link_distance = link_distance if link_distance is not None else settings.LINK_DISTANCE
        self.charge_strength = charge_strength if charge_strength is not None else settings.CHARGE_STRENGTH
        self.gravity_strength = gravity_strength if gravity_strength is not None else settings.GRAVITY_STRENGTH
        self.reheat_alpha = reheat_alpha if reheat_alpha is not None else settings.REHEAT_ALPHA
        self.tick_interval = tick_interval if tick_interval is not None else settings.tick_interval_seconds

        self.alpha = 1.0
        self.alpha_min = alpha_min
        self.alpha_target = 0.0
        self.alpha_decay = 1 - alpha_min ** (1 / 300)
        self.velocity_decay = 1 - velocity_decay
        self.tick_count = 0

        self._random = random.Random(seed)
        self._sleep = sleep
        self._bodies: dict[VertexId, Body] = {}
        self._links: list[tuple[Body, Body, float, float]] = []
        self._subscribers: list[TickCallback] = []
        self._reheated: asyncio.Event | None = None

    @property
    def is_settled(self) -> bool:
        return self.alpha < self.alpha_min

    def __len__(self) -> int:
        return len(self._bodies)

    def positions(self) -> dict[VertexId, tuple[float, float]]:
        return {vid: (body.x, body.y) for vid, body in self._bodies.items()}

    def position(self, vertex_id: VertexId) -> tuple[float, float] | None:
        body = self._bodies.get(vertex_id)
        return (body.x, body.y) if body else None

    def subscribe(self, callback: TickCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update_topology(self, vertices: Iterable[Vertex], edges: Iterable[Edge]) -> None:
        """Re-seeds the simulation with new collections and reheats it."""
        bodies: dict[VertexId, Body] = {}
        for index, vertex in enumerate(vertices):
            body = self._bodies.get(vertex.id)
            if body is None:
                radius = INITIAL_RADIUS * math.sqrt(0.5 + index)
                angle = index * INITIAL_ANGLE
                body = Body(
                    x=self.center_x + radius * math.cos(angle),
                    y=self.center_y + radius * math.sin(angle),
                )
            bodies[vertex.id] = body
        self._bodies = bodies

        resolved: list[tuple[VertexId, VertexId]] = []
        degree: dict[VertexId, int] = {}
        for edge in edges:
            if edge.source not in bodies or edge.target not in bodies:
                logger.warning("Layout skipping edge %r -> %r with unknown endpoint.", edge.source, edge.target)
                continue
            resolved.append((edge.source, edge.target))
            degree[edge.source] = degree.get(edge.source, 0) + 1
            degree[edge.target] = degree.get(edge.target, 0) + 1

        self._links = []
        for source, target in resolved:
            bias = degree[source] / (degree[source] + degree[target])
            strength = 1 / min(degree[source], degree[target])
            self._links.append((bodies[source], bodies[target], bias, strength))

        self.restart()

    def restart(self, alpha: float | None = None) -> None:
        self.alpha = self.reheat_alpha if alpha is None else alpha
        if self._reheated is not None:
            self._reheated.set()

    def pin(self, vertex_id: VertexId, x: float, y: float) -> None:
        body = self._require(vertex_id)
        body.fx, body.fy = x, y

    def unpin(self, vertex_id: VertexId) -> None:
        body = self._require(vertex_id)
        body.fx = body.fy = None

    def step(self) -> LayoutFrame | None:
        """Advances the simulation by one tick and notifies subscribers."""
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
        self.tick_count += 1

        self._apply_link_force()
        self._apply_charge_force()
        self._apply_gravity_force()

        for body in self._bodies.values():
            if body.fx is None:
                body.vx *= self.velocity_decay
                body.x += body.vx
            else:
                body.x, body.vx = body.fx, 0.0
            if body.fy is None:
                body.vy *= self.velocity_decay
                body.y += body.vy
            else:
                body.y, body.vy = body.fy, 0.0

        if not self._subscribers:
            return None
        frame = LayoutFrame(tick=self.tick_count, alpha=self.alpha, positions=self.positions())
        for callback in list(self._subscribers):
            try:
                callback(frame)
            except Exception:
                logger.exception("Tick subscriber %r failed.", callback)
        return frame

    async def run(self) -> None:
        """Ticks while the simulation is hot and sleeps until the next reheat otherwise."""
        self._reheated = asyncio.Event()
        while True:
            if self.is_settled:
                self._reheated.clear()
                logger.debug("Layout settled after %d ticks.", self.tick_count)
                await self._reheated.wait()
            self.step()
            await self._sleep(self.tick_interval)

    def _require(self, vertex_id: VertexId) -> Body:
        body = self._bodies.get(vertex_id)
        if body is None:
            raise NotFoundError(f"Vertex {vertex_id!r} is not part of the layout.")
        return body

    def _jiggle(self) -> float:
        return (self._random.random() - 0.5) * 1e-6

    def _apply_link_force(self) -> None:
        for source, target, bias, strength in self._links:
            x = (target.x + target.vx - source.x - source.vx) or self._jiggle()
            y = (target.y + target.vy - source.y - source.vy) or self._jiggle()
            length = math.sqrt(x * x + y * y)
            length = (length - self.link_distance) / length * self.alpha * strength
            x *= length
            y *= length
            target.vx -= x * bias
            target.vy -= y * bias
            source.vx += x * (1 - bias)
            source.vy += y * (1 - bias)

    def _apply_charge_force(self) -> None:
        bodies = list(self._bodies.values())
        for body in bodies:
            for other in bodies:
                if other is body:
                    continue
                x = other.x - body.x
                y = other.y - body.y
                distance = x * x + y * y
                if x == 0:
                    x = self._jiggle()
                    distance += x * x
                if y == 0:
                    y = self._jiggle()
                    distance += y * y
                if distance < DISTANCE_MIN_SQUARED:
                    distance = math.sqrt(DISTANCE_MIN_SQUARED * distance)
                body.vx += x * self.charge_strength * self.alpha / distance
                body.vy += y * self.charge_strength * self.alpha / distance

    def _apply_gravity_force(self) -> None:
        pull = self.gravity_strength * self.alpha
        for body in self._bodies.values():
            body.vx += (self.center_x - body.x) * pull
            body.vy += (self.center_y - body.y) * pull
