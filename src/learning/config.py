from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class SyncSettings(BaseSettings):
    """Client-side settings for talking to the progress API (env: PROGRESS_API_*)."""
    model_config = SettingsConfigDict(env_prefix="PROGRESS_API_", extra="ignore")

    base_url: str = "http://localhost:8000"
    timeout: float = 10.0
    max_retries: int = 2
    backoff_seconds: float = 0.5


def get_sync_settings() -> SyncSettings:
    return SyncSettings()
