"""Tidewatch configuration via environment / .env file."""

from __future__ import annotations

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TIDEWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Data sources (local path or http(s) URL) ---
    GRAPH_SOURCE: str = "MC1_cleaned.json"
    PROJECTION_SOURCE: str = "MC1_out_vessel_pca.json"
    HTTP_TIMEOUT: float = 30.0

    # --- Entities of interest ---
    SEED_ENTITIES: list[str] = [
        "Mar de la Vida OJSC",
        "979893388",
        "Oceanfront Oasis Inc Carriers",
        "8327",
    ]

    # --- Neighborhood sampling ---
    EXPANSION_THRESHOLD: int = 50

    # --- Force layout ---
    LINK_DISTANCE: float = 100.0
    CHARGE_STRENGTH: float = -100.0
    COLLIDE_RADIUS: float = 10.0
    THETA: float = 0.9
    VELOCITY_DECAY: float = 0.4
    ALPHA_MIN: float = 0.001
    DRAG_ALPHA_TARGET: float = 0.3
    RESIZE_ALPHA: float = 0.3
    TICKS_PER_SECOND: int = 60

    # --- Canvas ---
    CANVAS_WIDTH: float = 960.0
    CANVAS_HEIGHT: float = 600.0
    PROJECTION_WIDTH: float = 300.0
    PROJECTION_HEIGHT: float = 300.0

    # --- Risk heuristics ---
    SUSPICION_CONNECTIONS: int = 10
    SUSPICION_VESSEL_LINKS: int = 3

    @field_validator(
        "CANVAS_WIDTH", "CANVAS_HEIGHT", "PROJECTION_WIDTH", "PROJECTION_HEIGHT",
    )
    @classmethod
    def _positive_size(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("canvas dimensions must be positive")
        return v

    @field_validator("CHARGE_STRENGTH")
    @classmethod
    def _repulsive_charge(cls, v: float) -> float:
        if v >= 0:
            raise ValueError("CHARGE_STRENGTH must be negative (repulsive)")
        return v

    @model_validator(mode="after")
    def _alpha_bounds(self) -> "Settings":
        if not 0 < self.ALPHA_MIN < 1:
            raise ValueError("ALPHA_MIN must lie in (0, 1)")
        return self


settings = Settings()
