"""Shared configuration for all services."""
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis Configuration
    redis_url: str = "redis://localhost:6379"
    redis_queue_name: str = "generation_tasks"
    redis_update_channel: str = "generation_updates"

    # MongoDB Configuration
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "solidwriter"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # Worker Pool Configuration
    worker_concurrency: int = 3
    worker_poll_interval: float = 1.0
    max_attempts: int = 2
    retry_base_delay: float = 2.0
    retry_max_delay: float = 60.0

    # Language Model Configuration
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_api_key: Optional[str] = None
    llm_model: str = "moonshotai/kimi-k2-thinking"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4000
    llm_timeout: float = 120.0

    # Embedding Configuration
    embedding_model_name: str = "all-MiniLM-L6-v2"
    embedding_device: Optional[str] = None

    # Scoring Configuration
    reading_speed_wpm: int = 200

    # Streaming Configuration
    stream_queue_size: int = 64
    stream_subscriber_timeout: float = 30.0
    ws_heartbeat_interval: int = 30

    # History listing
    history_default_limit: int = 20
    history_max_limit: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
