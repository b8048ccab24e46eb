from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/talentflow.db"
    store_key_prefix: str = "talentflow_"

    # Simulated network behaviour
    default_error_rate: float = 0.1
    update_error_rate: float = 0.05  # Simple writes
    reorder_error_rate: float = 0.2  # Exercises the rollback path
    min_latency_ms: float = 200
    max_latency_ms: float = 1200
    latency_time_scale: float = 0.001  # Seconds per latency unit

    # Seed data
    seed_job_count: int = 25
    seed_candidate_count: int = 1000
    random_seed: Optional[int] = None

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "TALENTFLOW_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
