import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"


def load_env_file(path: Path) -> None:
    """Copy values from a .env file into the environment where missing."""
    if not path.exists():
        return
    for key, value in dotenv_values(path).items():
        if key not in os.environ and value is not None:
            os.environ[key] = value


# Load .env for local/dev environments only for values missing from the environment
load_env_file(env_file)


class Settings(BaseSettings):
    """Engine settings pulled from PLANETGEN_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="PLANETGEN_", extra="ignore")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Sampling Configuration
    max_sample_points: int = Field(
        default=4_000_000, gt=0, description="Maximum points in one generation call"
    )
    check_finite: bool = Field(
        default=True, description="Fail when the field contains NaN or infinite values"
    )
    snap_to_grid: bool = Field(
        default=False, description="Truncate points to integer pixel indices before sampling"
    )
    border_value: float = Field(
        default=0.0, description="Elevation for snapped points outside the window"
    )

    # Performance Configuration
    parallel_chunk_size: int = Field(
        default=65_536, gt=0, description="Points per chunk for parallel sampling"
    )


# Instantiate singleton settings object
settings = Settings()
