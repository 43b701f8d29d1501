from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ELECTOR_", env_file=".env", extra="ignore")

    # MongoDB
    mongo_url: str = Field(default="mongodb://localhost:27017", validation_alias="MONGO_URL")
    mongo_database: str = Field(default="elector", validation_alias="MONGO_DATABASE")
    mongo_server_selection_timeout_ms: int = Field(
        default=5000, validation_alias="MONGO_SERVER_SELECTION_TIMEOUT_MS"
    )

    # Election
    election_key: str = "default"
    election_ttl_ms: int = 5000
    # Random per process when unset
    candidate_id: str | None = None

    # Observability
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
