"""
Core configuration settings
Values can be overridden with RAGREEL_* environment variables or a .env file
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RAGREEL_", env_file=".env", extra="ignore")

    # Basic settings
    app_name: str = "Ragreel"
    debug: bool = False
    log_level: str = "INFO"

    # Chunking
    chunk_size: int = 1500
    batch_size: int = 100
    max_workers: int = 4

    # Embedding provider: local, ollama, hash
    embedding_provider: str = "local"
    embedding_model: str = "all-MiniLM-L6-v2"
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "nomic-embed-text"
    ollama_timeout: float = 30.0
    ollama_max_retries: int = 3
    hash_dimension: int = 384

    # Video artifact
    video_codec: str = "mp4v"
    video_fps: Optional[int] = None  # None = codec default
    video_crf: Optional[int] = None  # higher = smaller file, higher risk of unreadable frames
    frame_size: int = 1024
    preflight: bool = True

    # QR frames
    qr_version: Optional[int] = None  # None = smallest version that fits
    qr_error_correction: str = "M"
    qr_border: int = 3
    compress_threshold: int = 100

    # Storage
    temp_dir: Optional[str] = None


def get_settings() -> Settings:
    return Settings()
