"""
Centralized configuration using pydantic-settings.
Loads from .env file and provides typed access to all constants.
"""

from datetime import date
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class ServerSettings(BaseSettings):
    """HTTP server parameters."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = {"env_prefix": "SERVER_", "env_file": ".env", "extra": "ignore"}


class EmbeddingSettings(BaseSettings):
    """Defaults for spectral embedding synthesis."""

    cycle_days: int = Field(default=28, description="Planning cycle length in days")
    h3_levels: List[int] = Field(
        default_factory=lambda: [5, 7, 9],
        description="Spatial resolution levels superimposed per channel",
    )
    res_service_stop_time: int = Field(default=64)
    res_service_window_start: int = Field(default=64)
    res_service_window_duration: int = Field(default=64)
    res_pinned_accounts: int = Field(default=32)
    res_agents_available: int = Field(default=32)
    res_agent_start_locations: int = Field(default=32)
    overshoot: float = Field(default=0.25, ge=0.0)
    base_frequency: float = Field(default=4.0)
    cycle_start: Optional[date] = Field(
        default=date(2024, 1, 1),
        description="Calendar date of cycle day 0 for RRULE expansion (a Monday)",
    )

    model_config = {"env_prefix": "EMBED_", "env_file": ".env", "extra": "ignore"}


class StorageSettings(BaseSettings):
    """SQLite persistence and similarity index."""

    db_path: Optional[str] = Field(default="./data.db", description="Empty disables persistence")
    sqlite_vec_path: Optional[str] = Field(
        default=None, description="Path to the sqlite-vec loadable extension"
    )

    model_config = {"env_prefix": "STORAGE_", "env_file": ".env", "extra": "ignore"}


class SimulationSettings(BaseSettings):
    """Routing simulation parameters."""

    average_speed_kmh: float = Field(default=50.0, gt=0.0)
    h3_resolution: int = Field(default=9, description="Default H3 resolution for heatmaps")

    model_config = {"env_prefix": "SIM_", "env_file": ".env", "extra": "ignore"}


class OptimizerSettings(BaseSettings):
    """External VROOM route optimizer."""

    bin: Optional[str] = Field(default=None, description="VROOM executable; unset disables the optimizer")
    timeout_s: float = Field(default=30.0, gt=0.0)

    model_config = {"env_prefix": "VROOM_", "env_file": ".env", "extra": "ignore"}


class MapSettings(BaseSettings):
    """Map view passed through to the UI."""

    mapbox_token: str = Field(default="")
    latitude: float = Field(default=51.5074)
    longitude: float = Field(default=-0.1278)
    zoom: float = Field(default=9.0)

    model_config = {"env_prefix": "MAP_", "env_file": ".env", "extra": "ignore"}


class UISettings(BaseSettings):
    """UI feature toggles."""

    enable_embedding_tab: bool = Field(default=True)
    enable_spectral_tab: bool = Field(default=True)
    enable_heatmap_tab: bool = Field(default=True)

    model_config = {"env_prefix": "UI_", "env_file": ".env", "extra": "ignore"}


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="[%(levelname)s] %(name)s: %(message)s")

    model_config = {"env_prefix": "LOG_", "env_file": ".env", "extra": "ignore"}


class Settings(BaseSettings):
    """Root settings aggregator."""

    server: ServerSettings = Field(default_factory=ServerSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    optimizer: OptimizerSettings = Field(default_factory=OptimizerSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    ui: UISettings = Field(default_factory=UISettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings (tests, reconfiguration)."""
    global _settings
    _settings = None
