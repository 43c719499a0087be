from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Load .env for local/dev environments only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from CITYGEN_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="CITYGEN_", extra="ignore")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Generation Configuration
    default_district_rows: int = Field(default=10, ge=1, description="Default master grid rows")
    default_district_cols: int = Field(default=10, ge=1, description="Default master grid columns")
    default_neighborhood_rows: int = Field(default=10, ge=3, description="Default neighborhood rows")
    default_neighborhood_cols: int = Field(default=10, ge=3, description="Default neighborhood columns")
    max_grid_rows: int = Field(default=200, ge=1, description="Max allowed master grid rows")
    max_grid_cols: int = Field(default=200, ge=1, description="Max allowed master grid columns")
    default_seed: Optional[str] = Field(default=None, description="Seed used when a request gives none")
    max_prime_attempts: int = Field(default=1000, ge=1, description="Random seed draws before falling back")


# Instantiate singleton settings object
settings = Settings()
