from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Sculpting session settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCULPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Session Configuration
    seed: Optional[str] = Field(default=None, description="Seed for the Alea PRNG")
    grid_resolution: int = Field(default=513, gt=0, description="Height field resolution (square)")
    frame_rate: float = Field(default=60.0, gt=0, description="Ticks per second of the background driver")
    time_scale: float = Field(default=1.0, gt=0, description="Multiplier applied to every tick's delta time")
    stats_interval: float = Field(default=5.0, ge=0, description="Seconds between field statistics log lines, 0 disables")

    # Feature toggles
    enable_mountains: bool = Field(default=True, description="Run the budgeted mountain lifecycle")
    enable_stroke_mountains: bool = Field(default=False, description="Run the stroke-built mountain generator")
    enable_walker: bool = Field(default=True, description="Run the unclamped autonomous walker")
    enable_clamped_walker: bool = Field(default=False, description="Run the clamped autonomous walker")
    enable_roads: bool = Field(default=True, description="Run the road carver")


# Instantiate singleton settings object
settings = Settings()
