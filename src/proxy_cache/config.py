import os
from dataclasses import dataclass, field
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in os.getenv(name, default).split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379"))
    redis_password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))

    # Cache
    cache_backend: str = field(default_factory=lambda: os.getenv("CACHE_BACKEND", "redis"))
    cache_default_ttl: int = field(default_factory=lambda: int(os.getenv("CACHE_DEFAULT_TTL", "3600")))
    cache_key_prefix: str = field(default_factory=lambda: os.getenv("CACHE_KEY_PREFIX", "proxy_cache:"))
    cache_header_prefix: str = field(
        default_factory=lambda: os.getenv("CACHE_HEADER_PREFIX", "x-cache-").lower()
    )
    cache_coalesce_requests: bool = field(
        default_factory=lambda: _env_bool("CACHE_COALESCE_REQUESTS", "false")
    )

    # Upstream
    upstream_timeout: float = field(default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT", "30.0")))
    upstream_follow_redirects: bool = field(
        default_factory=lambda: _env_bool("UPSTREAM_FOLLOW_REDIRECTS", "true")
    )

    # API
    api_host: str = field(default_factory=lambda: os.getenv("API_HOST", "0.0.0.0"))
    api_port: int = field(default_factory=lambda: int(os.getenv("API_PORT", "8000")))
    api_reload: bool = field(default_factory=lambda: _env_bool("API_RELOAD", "false"))
    cors_allow_origins: tuple[str, ...] = field(default_factory=lambda: _env_list("CORS_ALLOW_ORIGINS", "*"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_default_ttl <= 0:
            raise ValueError("CACHE_DEFAULT_TTL must be a positive number of seconds")

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")

        if self.cache_backend not in ("redis", "memory"):
            raise ValueError(f"CACHE_BACKEND must be 'redis' or 'memory', got {self.cache_backend!r}")

        if not self.cache_header_prefix:
            raise ValueError("CACHE_HEADER_PREFIX must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_redis_client(settings: Settings | None = None) -> redis.Redis:
    """Create an asyncio Redis client instance."""
    settings = settings or get_settings()
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
