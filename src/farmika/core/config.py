from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env file is in the project root (parent of src/)
# Only use if it exists (CI uses environment variables directly)
# Path: core/config.py -> farmika -> src -> project root -> .env
_ENV_FILE = Path(__file__).parent.parent.parent.parent / ".env"
_ENV_FILE = _ENV_FILE if _ENV_FILE.exists() else None

EnvironmentClass = Literal["constrained", "unconstrained"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Hosted backend (PostgREST-style REST API)
    supabase_url: str = "http://localhost:54321"
    supabase_api_key: str = ""
    # User session token; falls back to the API key when not signed in
    supabase_access_token: str | None = None

    # Request timeout in seconds for storage calls
    request_timeout: float = 30.0

    # "constrained" = mobile/low-power clients, "unconstrained" = desktop/server
    environment_class: EnvironmentClass = "unconstrained"

    # Pedigree generations inspected per candidate pair, by environment class
    constrained_max_depth: int = 2
    unconstrained_max_depth: int = 4

    # Detected-depth write-back batch size
    depth_write_batch_size: int = 50

    # Number of recommendations returned (None or 0 = all)
    max_recommendations: int | None = 10

    log_level: str = "INFO"


settings = Settings()


def default_max_depth(environment_class: EnvironmentClass | None = None) -> int:
    """Default pedigree depth for an environment class (settings value if None)."""
    env = environment_class or settings.environment_class
    if env == "constrained":
        return settings.constrained_max_depth
    return settings.unconstrained_max_depth
