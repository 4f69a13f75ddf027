"""Application configuration and environment settings"""
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Credentials (obtained elsewhere, the analysis never authenticates)
    SPOTIFY_TOKEN: str = Field("", description="Spotify API access token")
    SPOTIFY_API_URL: str = Field("https://api.spotify.com/v1", description="Spotify Web API base URL")

    # Analysis tuning
    MAX_BATCH_SIZE: int = Field(20, ge=1, le=50, description="Artist ids per metadata request")
    TOP_N: int = Field(5, ge=1, le=5, description="Length of the ranked genre and artist lists")
    TOP_TRACKS_PAGE_SIZE: int = Field(20, ge=1, le=50, description="Page size for top tracks")
    SAVED_TRACKS_PAGE_SIZE: int = Field(5, ge=1, le=50, description="Page size for saved tracks")
    TOP_TRACKS_TIME_RANGE: Literal['short_term', 'medium_term', 'long_term'] = Field(
        'medium_term', description="Spotify time range for top tracks")
    BATCH_WORKERS: int = Field(1, ge=1, description="Parallel artist batch requests (1 = sequential)")
    ARCHETYPES_FILE: Optional[str] = Field(None, description="JSON file overriding the built-in archetype table")

    # Transport
    REQUEST_TIMEOUT: float = Field(15, gt=0, description="Per-request timeout in seconds")
    REQUEST_RETRIES: int = Field(3, ge=1, description="Attempts per request on rate limit or server error")
    FETCH_TIME_LIMIT_SECONDS: Optional[float] = Field(None, gt=0, description="Deadline for one analysis run")

    # Output
    OUTPUT_DIR: str = Field("/output", description="Directory for output files")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()
