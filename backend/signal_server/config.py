"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from signal_core.models import EngineConfig, EnsembleWeights, SignalThresholds, SignalType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Feed
    feed_mode: Literal["deriv", "simulated"] = "simulated"
    deriv_ws_url: str = "wss://ws.derivws.com/websockets/v3"
    deriv_app_id: str = "1089"
    deriv_api_token: str = ""
    reconnect_delay: float = 3.0  # <= 0 selects exponential backoff
    simulated_interval: float = 1.0
    simulated_start_price: float = 10000.0

    # Tracked symbols (first two form the matches pair unless matches_pair is set)
    symbols: list[str] = ["R_100", "R_50"]
    matches_pair: tuple[str, str] | None = None

    # Engine
    buffer_capacity: int = 500
    weight_momentum: float = 0.45
    weight_trend: float = 0.35
    weight_volatility: float = 0.20
    threshold_over_under: float = 0.70
    threshold_even_odd: float = 0.52
    threshold_matches: float = 0.55
    cooldown_ms: int = 5000
    cooldown_scope: Literal["shared", "per_type"] = "shared"
    expiry_seconds: int = 60
    parity_bonus: float = 0.04
    enabled_signals: list[SignalType] = [
        SignalType.OVER_UNDER,
        SignalType.EVEN_ODD,
        SignalType.MATCHES,
    ]

    # Persistence (optional)
    persist_signals: bool = False
    persist_ticks: bool = False
    database_url: str = ""
    redis_url: str = ""
    redis_recent_signals: int = 200
    max_pending_writes: int = 10_000

    # Broadcast
    subscriber_queue_size: int = 1000

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    def to_engine_config(self) -> EngineConfig:
        """Build the engine configuration from these settings."""
        return EngineConfig(
            symbols=self.symbols,
            buffer_capacity=self.buffer_capacity,
            weights=EnsembleWeights(
                momentum=self.weight_momentum,
                trend=self.weight_trend,
                volatility=self.weight_volatility,
            ),
            thresholds=SignalThresholds(
                over_under=self.threshold_over_under,
                even_odd=self.threshold_even_odd,
                matches=self.threshold_matches,
            ),
            cooldown_ms=self.cooldown_ms,
            cooldown_scope=self.cooldown_scope,
            expiry_seconds=self.expiry_seconds,
            parity_bonus=self.parity_bonus,
            matches_pair=self.matches_pair,
            enabled_signals=self.enabled_signals,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
