# livegraph/services/sync_service.py
import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Literal
from pydantic import BaseModel
from livegraph.core.config import settings
from livegraph.core.exceptions import DecodeError, InvariantViolation, NotFoundError, TransportError
from livegraph.db.graph_store import GraphStore
from livegraph.models.graph import GraphDelta
from livegraph.services.diff_engine import compute_delta
from livegraph.services.layout_engine import LayoutEngine
from livegraph.services.transport_client import TransportClient

logger = logging.getLogger(__name__)

class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    RENDERING = "rendering"

class SyncStatus(BaseModel):
    state: SyncState
    mode: str
    cycles: int
    failures: int
    consecutive_failures: int
    last_error: str | None = None
    last_success_at: datetime | None = None
    version: int
    vertex_count: int
    edge_count: int

class SyncService:
    """
    Polls the graph provider, reconciles the reply into the store and reheats the layout.
    A failed poll is logged and retried after the normal interval; it never ends the loop.
    """
    def __init__(
        self,
        transport: TransportClient,
        store: GraphStore,
        layout: LayoutEngine | None = None,
        poll_interval: float | None = None,
        mode: Literal["snapshot", "delta"] | None = None,
        sleep: Callable[[float], object] = asyncio.sleep,
    ):
        self.transport = transport
        self.store = store
        self.layout = layout
        self.poll_interval = poll_interval if poll_interval is not None else settings.poll_interval_seconds
        self.mode = mode or settings.SYNC_MODE
        self._sleep = sleep

        self.state = SyncState.IDLE
        self.cycles = 0
        self.failures = 0
        self.consecutive_failures = 0
        self.last_error: str | None = None
        self.last_success_at: datetime | None = None

    def status(self) -> SyncStatus:
        return SyncStatus(
            state=self.state,
            mode=self.mode,
            cycles=self.cycles,
            failures=self.failures,
            consecutive_failures=self.consecutive_failures,
            last_error=self.last_error,
            last_success_at=self.last_success_at,
            version=self.store.version,
            vertex_count=len(self.store.vertices),
            edge_count=len(self.store.edges),
        )

    async def run(
        self,
        cycles: int | None = None,
        on_cycle: Callable[[GraphDelta | None], None] | None = None,
    ) -> None:
        """
        Polls forever, or `cycles` times. `on_cycle` receives each cycle's delta (None on failure).
        """
        completed = 0
        while cycles is None or completed < cycles:
            await self._sleep(self.poll_interval)
            try:
                delta = await self.run_once()
            except Exception as exc:
                self._record_failure(exc)
                logger.exception("Poll %d crashed; next poll in %.2fs.", self.cycles, self.poll_interval)
                delta = None
            completed += 1
            if on_cycle is not None:
                on_cycle(delta)

    async def run_once(self) -> GraphDelta | None:
        """One Fetching -> Reconciling -> Rendering pass. Returns None when the cycle failed."""
        self.cycles += 1
        try:
            self.state = SyncState.FETCHING
            try:
                if self.mode == "delta":
                    delta = await self.transport.fetch_delta()
                else:
                    snapshot = await self.transport.fetch_snapshot()
            except (TransportError, DecodeError) as exc:
                self._record_failure(exc)
                logger.warning(
                    "Poll %d failed (%s); retrying in %.2fs: %s",
                    self.cycles, type(exc).__name__, self.poll_interval, exc.message,
                )
                return None

            self.state = SyncState.RECONCILING
            try:
                if self.mode != "delta":
                    delta = compute_delta(self.store.vertices, self.store.edges, snapshot)
                changed = self.store.apply_delta(delta)
            except (InvariantViolation, NotFoundError) as exc:
                self._record_failure(exc)
                logger.error("Reconciliation aborted in poll %d, keeping previous graph: %s", self.cycles, exc.message)
                return None

            self.state = SyncState.RENDERING
            if changed:
                logger.info("Poll %d applied %s (version %d).", self.cycles, delta.summary(), self.store.version)
                if self.layout is not None:
                    self.layout.update_topology(self.store.vertices, self.store.edges)

            self.consecutive_failures = 0
            self.last_error = None
            self.last_success_at = datetime.now(timezone.utc)
            return delta
        finally:
            self.state = SyncState.IDLE

    def _record_failure(self, exc: Exception) -> None:
        self.failures += 1
        self.consecutive_failures += 1
        self.last_error = f"{type(exc).__name__}: {exc}"
