"""
Biographer Configuration

Pydantic settings for the API and the generation pipelines.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # CORS
    cors_origins: List[str] = Field(default=["*"])

    # Supabase
    supabase_url: str = Field(default="")
    supabase_service_key: str = Field(default="")
    storage_bucket: str = Field(default="cartoons")

    # OpenAI-compatible provider
    openai_api_key: str = Field(default="")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    text_model: str = Field(default="gpt-4o-mini")
    image_model: str = Field(default="gpt-image-1")
    image_size: str = Field(default="1024x1024")
    image_quality: str = Field(default="medium")
    transcription_model: str = Field(default="whisper-1")
    http_timeout_seconds: Optional[float] = Field(default=180.0)

    # Generation
    default_panel_count: int = Field(default=3)
    max_panel_count: int = Field(default=8)
    polish_scenes: bool = Field(default=True)
    upload_panel_images: bool = Field(default=False)

    # Rate limiting
    generate_rate_limit: str = Field(default="5/minute")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
