# livegraph/core/config.py
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENDPOINT_URL: str = "http://localhost:3030"
    RPC_METHOD: str = "graph"
    RPC_REQUEST_ID_START: int = 1
    POLL_INTERVAL_MS: int = Field(default=2000, gt=0)
    # "snapshot" diffs full graphs client-side, "delta" consumes server-computed deltas.
    SYNC_MODE: Literal["snapshot", "delta"] = "snapshot"
    STRICT_RECONCILIATION: bool = False
    FETCH_TIMEOUT_SECONDS: float | None = None

    LAYOUT_WIDTH: float = 960.0
    LAYOUT_HEIGHT: float = 600.0
    LINK_DISTANCE: float = 50.0
    CHARGE_STRENGTH: float = -100.0
    GRAVITY_STRENGTH: float = 0.05
    REHEAT_ALPHA: float = Field(default=0.7, gt=0, le=1)
    TICK_INTERVAL_MS: int = Field(default=16, gt=0)

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def poll_interval_seconds(self) -> float:
        return self.POLL_INTERVAL_MS / 1000

    @property
    def tick_interval_seconds(self) -> float:
        return self.TICK_INTERVAL_MS / 1000

settings = Settings()
