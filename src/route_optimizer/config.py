"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_OPT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Optimizer API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied when the app starts.")
    data_root: Path = Field(default=Path("data"), description="Root directory for data files and run outputs.")
    network_file: Path = Field(
        default=Path("data/network.json"),
        description="Transit network snapshot (stops, routes, buses) used when the database is unavailable.",
    )

    # Trip planning
    walking_speed_mps: float = Field(default=1.4, gt=0.0)
    boarding_wait_minutes: int = Field(default=5, ge=0)
    transfer_wait_minutes: int = Field(default=5, ge=0)
    bus_fare: float = Field(default=2.50, ge=0.0)
    max_nearby_stops: int = Field(default=10, ge=1)
    max_trip_options: int = Field(default=3, ge=1)
    default_max_walking_distance_meters: int = Field(default=800, ge=0)
    long_walk_threshold_minutes: int = Field(default=10, ge=0)

    # Route metrics
    average_bus_speed_kmh: float = Field(default=25.0, gt=0.0)
    cost_per_km: float = Field(default=2.5, ge=0.0)
    cost_per_minute: float = Field(default=0.5, ge=0.0)
    coverage_radius_meters: float = Field(default=500.0, gt=0.0)
    reference_distance_km: float = Field(default=50.0, gt=0.0)
    reference_travel_time_minutes: float = Field(default=120.0, gt=0.0)

    # Stop-sequence solver
    solver_first_solution_strategy: str = Field(default="PATH_CHEAPEST_ARC")
    solver_local_search_metaheuristic: str = Field(default="GUIDED_LOCAL_SEARCH")
    solver_time_limit_seconds: int = Field(default=30, ge=0)

    manager_roles: tuple[str, ...] = Field(default=("city_manager", "senior_manager", "admin"))
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "network_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "manager_roles", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
