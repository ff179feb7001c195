"""Environment-driven configuration with Pydantic v2."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    debug: bool = Field(default=False)

    # Cache Configuration
    redis_url: Optional[str] = Field(default=None)
    upstash_redis_url: Optional[str] = Field(default=None)
    redis_socket_timeout: float = Field(default=5.0, gt=0, le=60)
    redis_socket_connect_timeout: float = Field(default=5.0, gt=0, le=60)
    redis_max_retries: int = Field(default=3, ge=0, le=10)
    redis_retry_backoff_base: float = Field(default=0.05, gt=0, le=1.0)
    redis_retry_backoff_cap: float = Field(default=2.0, gt=0, le=30.0)
    redis_reconnect_interval: float = Field(default=5.0, ge=0)
    redis_scan_count: int = Field(default=500, ge=10, le=10000)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    @field_validator("redis_url", "upstash_redis_url")
    @classmethod
    def blank_redis_url_is_none(cls, v):
        """Treat an empty connection string as 'no backend configured'."""
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def fall_back_to_upstash_url(self):
        """REDIS_URL wins; a missing or blank one falls through to UPSTASH_REDIS_URL."""
        if self.redis_url is None:
            self.redis_url = self.upstash_redis_url
        return self

    @field_validator("log_file")
    @classmethod
    def ensure_log_directory(cls, v):
        """Ensure the log file directory exists."""
        if v:
            Path(v).parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def cache_backend_configured(self) -> bool:
        """Whether an external cache backend was configured."""
        return self.redis_url is not None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
    }
