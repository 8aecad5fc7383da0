from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables (STUDIO_*)."""

    # Local inference runtime
    runtime_host: str = "http://localhost:11434"
    health_timeout_seconds: float = 1.5

    # Model hub
    hub_base_url: str = "https://ollama.com"
    hub_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120 Safari/537.36"
    )
    catalog_timeout_seconds: float = 15.0
    catalog_cache_ttl_seconds: float = 300.0
    catalog_default_limit: int = 500

    # Runtime release feed (update check)
    release_api_url: str = "https://api.github.com/repos/ollama/ollama/releases/latest"

    # Local app state (first-run flag, cache)
    state_dir: Path = Path.home() / ".perspective-studio"

    # Logging
    log_level: str = "info"

    # CORS (renderer origin)
    cors_origins: str = "http://localhost:5173,app://."

    # Server supervision
    startup_poll_interval_seconds: float = 1.0
    startup_deadline_seconds: float = 45.0
    startup_status_every: int = 3

    # Installation
    install_settle_seconds: float = 2.0
    installer_settle_seconds: float = 3.0
    command_timeout_seconds: float = 300.0

    # Uninstall directory removal retries
    removal_attempts: int = 4
    removal_backoff_seconds: float = 0.5
    removal_backoff_step_seconds: float = 0.3

    # HTTP client timeouts (seconds)
    http_connect_timeout: float = 5.0
    http_read_timeout: float = 120.0

    model_config = {
        "env_prefix": "STUDIO_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
