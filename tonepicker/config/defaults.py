"""Default configuration parameters for the tone transformation service."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheParams:
    """Response cache parameters."""
    max_entries: int = 200                  # LRU capacity
    ttl_seconds: float = 600.0              # 10 minutes per entry


@dataclass(frozen=True)
class RateLimitParams:
    """Per-client sliding window admission parameters."""
    window_seconds: float = 10.0
    max_requests: int = 5


@dataclass(frozen=True)
class BackendParams:
    """Language-model backend parameters."""
    api_url: str = "https://api.mistral.ai/v1/chat/completions"
    model: str = "mistral-small-latest"
    api_key_env: str = "MISTRAL_API_KEY"
    timeout_seconds: float = 30.0

    # Generation configuration
    temperature: float = 0.4
    max_tokens: int = 1200
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


@dataclass(frozen=True)
class StorageParams:
    """Snapshot persistence parameters."""
    snapshot_path: str = "tone-picker-text-tool.json"


@dataclass(frozen=True)
class ServerParams:
    """HTTP surface parameters."""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_json: bool = False


@dataclass(frozen=True)
class Settings:
    """Complete service configuration."""
    cache: CacheParams
    ratelimit: RateLimitParams
    backend: BackendParams
    storage: StorageParams
    server: ServerParams


def get_default_config() -> Settings:
    """Get the default configuration instance."""
    return Settings(
        cache=CacheParams(),
        ratelimit=RateLimitParams(),
        backend=BackendParams(),
        storage=StorageParams(),
        server=ServerParams(),
    )
